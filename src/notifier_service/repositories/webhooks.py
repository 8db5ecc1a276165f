"""Read-only webhook repositories (subscriptions + per-tenant event catalog)."""
from __future__ import annotations

from typing import List
from uuid import UUID

from asyncpg import Pool, Record  # type: ignore[import-untyped]

from notifier_service.domain.webhooks import WebhookEventDefinition, WebhookSubscription
from notifier_service.repositories.base import BaseRepository


class SubscriptionRepository(BaseRepository):
    def __init__(self, pool: Pool):
        super().__init__(pool)

    @staticmethod
    def _to_model(record: Record) -> WebhookSubscription:
        return WebhookSubscription.model_validate(dict(record))

    async def list_active_matching(self, event_type: str, tenant_id: UUID) -> List[WebhookSubscription]:
        """Active subscriptions of *tenant_id* for exactly *event_type*; empty when none."""
        records = await self._fetch(
            """
            SELECT id, tenant_id, partner_id, event_type, url, is_active, created_at, updated_at
            FROM integration_webhook
            WHERE event_type = $1
              AND tenant_id = $2
              AND is_active = true
            ORDER BY created_at ASC
            """,
            event_type,
            tenant_id,
        )
        return [self._to_model(r) for r in records]


class WebhookEventRepository(BaseRepository):
    def __init__(self, pool: Pool):
        super().__init__(pool)

    async def list_active_names(self, tenant_id: UUID) -> List[str]:
        records = await self._fetch(
            """
            SELECT name
            FROM webhook_event
            WHERE tenant_id = $1
              AND is_active = true
            ORDER BY name ASC
            """,
            tenant_id,
        )
        return [r["name"] for r in records]

    async def list_all(self, tenant_id: UUID) -> List[WebhookEventDefinition]:
        records = await self._fetch(
            """
            SELECT id, tenant_id, name, description, is_active, created_at, updated_at
            FROM webhook_event
            WHERE tenant_id = $1
            ORDER BY created_at DESC
            """,
            tenant_id,
        )
        return [WebhookEventDefinition.model_validate(dict(r)) for r in records]
