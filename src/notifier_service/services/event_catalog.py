"""Per-tenant webhook event catalog, degrading gracefully when unreadable."""
from __future__ import annotations

from typing import List, Protocol
from uuid import UUID

import structlog

from notifier_service.core.exceptions import RepositoryError
from notifier_service.domain.enums import DEFAULT_EVENT_TYPES
from notifier_service.domain.webhooks import WebhookEventDefinition

logger = structlog.get_logger(__name__)


class EventCatalogReader(Protocol):
    async def list_active_names(self, tenant_id: UUID) -> List[str]: ...

    async def list_all(self, tenant_id: UUID) -> List[WebhookEventDefinition]: ...


class EventCatalogService:
    def __init__(self, repository: EventCatalogReader):
        self._events = repository

    async def list_active_names(self, tenant_id: UUID) -> List[str]:
        """Active event names; the built-in defaults if the catalog cannot be read."""
        try:
            return await self._events.list_active_names(tenant_id)
        except RepositoryError as exc:
            logger.warning(
                "event catalog unavailable, falling back to default event types",
                tenant_id=str(tenant_id),
                error=str(exc),
            )
            return list(DEFAULT_EVENT_TYPES)

    async def list_all(self, tenant_id: UUID) -> List[WebhookEventDefinition]:
        try:
            return await self._events.list_all(tenant_id)
        except RepositoryError as exc:
            logger.warning("event catalog unavailable", tenant_id=str(tenant_id), error=str(exc))
            return []
