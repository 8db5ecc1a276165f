"""Repository layer exports."""

from notifier_service.repositories.webhooks import SubscriptionRepository, WebhookEventRepository

__all__ = [
    "SubscriptionRepository",
    "WebhookEventRepository",
]
