"""Shared helpers for the test-suite."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from notifier_service.domain.webhooks import WebhookEventDefinition, WebhookSubscription

LARGE_ERROR_BODY_CHARS = 200_000


def make_subscription(
    url: str,
    *,
    tenant_id: uuid.UUID | None = None,
    event_type: str = "partner.created",
    is_active: bool = True,
) -> WebhookSubscription:
    now = datetime.now(timezone.utc)
    return WebhookSubscription(
        id=uuid.uuid4(),
        tenant_id=tenant_id or uuid.uuid4(),
        partner_id=uuid.uuid4(),
        event_type=event_type,
        url=url,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )


def make_event_definition(
    name: str,
    *,
    tenant_id: uuid.UUID | None = None,
    is_active: bool = True,
) -> WebhookEventDefinition:
    now = datetime.now(timezone.utc)
    return WebhookEventDefinition(
        id=uuid.uuid4(),
        tenant_id=tenant_id or uuid.uuid4(),
        name=name,
        description=f"Raised on {name}",
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )


def make_headers(
    tenant_id: uuid.UUID,
    *,
    user_id: uuid.UUID | None = None,
    role: str | None = None,
    permissions: tuple[str, ...] = (),
) -> dict[str, str]:
    headers = {
        "X-User-Id": str(user_id or uuid.uuid4()),
        "X-Tenant-Id": str(tenant_id),
    }
    if role:
        headers["X-User-Role"] = role
    if permissions:
        headers["X-User-Permissions"] = ",".join(permissions)
    return headers
