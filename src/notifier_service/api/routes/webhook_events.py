"""Webhook event catalog endpoints."""
from __future__ import annotations

from aiohttp import web

from notifier_service.services.dependencies import (
    ensure_permission,
    get_event_catalog_service,
    require_context,
)

routes = web.RouteTableDef()


@routes.get("/api/v1/webhook-events")
async def list_webhook_events(request: web.Request):
    ctx = require_context(request)
    ensure_permission(ctx, "webhook.event.view")
    events = await get_event_catalog_service(request).list_all(ctx.tenant_id)
    return web.json_response(
        {
            "webhook_events": [event.model_dump(mode="json") for event in events],
            "total": len(events),
        }
    )


@routes.get("/api/v1/webhook-events/available")
async def list_available_event_types(request: web.Request):
    ctx = require_context(request)
    ensure_permission(ctx, "master.webhook.view")
    names = await get_event_catalog_service(request).list_active_names(ctx.tenant_id)
    return web.json_response({"event_types": names})
