"""Service layer exports."""

from notifier_service.services.event_catalog import EventCatalogService
from notifier_service.services.notifier import WebhookNotifier
from notifier_service.services.webhooks import WebhookDispatchService

__all__ = [
    "EventCatalogService",
    "WebhookDispatchService",
    "WebhookNotifier",
]
