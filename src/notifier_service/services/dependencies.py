"""Shared dependency providers for aiohttp handlers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import structlog
from aiohttp import web

from notifier_service.services import EventCatalogService, WebhookDispatchService, WebhookNotifier

DISPATCH_SERVICE_KEY = "webhook_dispatch_service"
EVENT_CATALOG_SERVICE_KEY = "event_catalog_service"
NOTIFIER_KEY = "webhook_notifier"

USER_ID_HEADER = "X-User-Id"
TENANT_ID_HEADER = "X-Tenant-Id"
USER_ROLE_HEADER = "X-User-Role"
USER_PERMISSIONS_HEADER = "X-User-Permissions"

SYSADMIN_ROLE = "SYSADMIN"


@dataclass
class RequestContext:
    user_id: UUID
    tenant_id: UUID
    role: str | None = None
    permissions: frozenset[str] = field(default_factory=frozenset)


def _parse_uuid_header(request: web.Request, header: str) -> UUID:
    value = request.headers.get(header)
    if value is None:
        raise web.HTTPUnauthorized(reason=f"Header {header} is required")
    try:
        return UUID(value)
    except ValueError as exc:
        raise web.HTTPBadRequest(text=f"Invalid {header}") from exc


def require_context(request: web.Request) -> RequestContext:
    """Auth hook: the API gateway authenticates and forwards the identity headers."""
    user_id = _parse_uuid_header(request, USER_ID_HEADER)
    tenant_id = _parse_uuid_header(request, TENANT_ID_HEADER)
    raw_permissions = request.headers.get(USER_PERMISSIONS_HEADER, "")
    permissions = frozenset(p.strip() for p in raw_permissions.split(",") if p.strip())

    structlog.contextvars.bind_contextvars(tenant_id=str(tenant_id), user_id=str(user_id))
    return RequestContext(
        user_id=user_id,
        tenant_id=tenant_id,
        role=request.headers.get(USER_ROLE_HEADER) or None,
        permissions=permissions,
    )


def ensure_permission(ctx: RequestContext, permission: str) -> None:
    if ctx.role == SYSADMIN_ROLE:
        return
    if permission not in ctx.permissions:
        raise web.HTTPForbidden(reason="Insufficient permissions")


def _get_service(request: web.Request, key: str) -> Any:
    service = request.app.get(key)
    if service is None:
        raise web.HTTPServiceUnavailable(reason="Service is starting up")
    return service


def get_dispatch_service(request: web.Request) -> WebhookDispatchService:
    return _get_service(request, DISPATCH_SERVICE_KEY)


def get_event_catalog_service(request: web.Request) -> EventCatalogService:
    return _get_service(request, EVENT_CATALOG_SERVICE_KEY)


def get_notifier(request: web.Request) -> WebhookNotifier:
    return _get_service(request, NOTIFIER_KEY)
