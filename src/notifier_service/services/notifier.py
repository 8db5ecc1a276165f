"""Fire-and-forget entry point for business flows that raise webhook events."""
from __future__ import annotations

import asyncio
from typing import Any
from uuid import UUID

from backend_common.tasks import BackgroundTaskRunner

from notifier_service.domain.enums import WebhookEventType
from notifier_service.domain.webhooks import DispatchSummary
from notifier_service.services.webhooks import WebhookDispatchService


class WebhookNotifier:
    """Runs :meth:`WebhookDispatchService.dispatch` as a detached task.

    The caller has already committed its own work; it gets the task back but is
    not expected to await it. Dispatch errors are logged by the runner.
    """

    def __init__(self, dispatcher: WebhookDispatchService, runner: BackgroundTaskRunner):
        self._dispatcher = dispatcher
        self._runner = runner

    def notify(self, event_type: str, tenant_id: UUID, data: Any) -> asyncio.Task[DispatchSummary]:
        return self._runner.spawn(
            self._dispatcher.dispatch(event_type, tenant_id, data),
            name=f"webhook-dispatch:{event_type}",
        )

    def user_created(self, tenant_id: UUID, data: Any) -> asyncio.Task[DispatchSummary]:
        return self.notify(WebhookEventType.USER_CREATED.value, tenant_id, data)

    def user_updated(self, tenant_id: UUID, data: Any) -> asyncio.Task[DispatchSummary]:
        return self.notify(WebhookEventType.USER_UPDATED.value, tenant_id, data)

    def partner_created(self, tenant_id: UUID, data: Any) -> asyncio.Task[DispatchSummary]:
        return self.notify(WebhookEventType.PARTNER_CREATED.value, tenant_id, data)

    def partner_updated(self, tenant_id: UUID, data: Any) -> asyncio.Task[DispatchSummary]:
        return self.notify(WebhookEventType.PARTNER_UPDATED.value, tenant_id, data)

    def integration_key_created(self, tenant_id: UUID, data: Any) -> asyncio.Task[DispatchSummary]:
        return self.notify(WebhookEventType.INTEGRATION_KEY_CREATED.value, tenant_id, data)
