"""Event intake used by the console's CRUD flows."""
from __future__ import annotations

from typing import Any

from aiohttp import web
from pydantic import BaseModel

from notifier_service.api.utils import EventTypeStr, parse_body
from notifier_service.services.dependencies import ensure_permission, get_notifier, require_context

routes = web.RouteTableDef()

PUBLISH_PERMISSION = "webhook.event.publish"


class EventCreateDTO(BaseModel):
    event_type: EventTypeStr
    data: Any = None


@routes.post("/api/v1/events")
async def publish_event(request: web.Request):
    ctx = require_context(request)
    ensure_permission(ctx, PUBLISH_PERMISSION)
    dto = await parse_body(request, EventCreateDTO)
    get_notifier(request).notify(dto.event_type, ctx.tenant_id, dto.data)
    return web.json_response(
        {"status": "accepted", "event_type": dto.event_type, "tenant_id": str(ctx.tenant_id)},
        status=202,
    )
