"""Outbound webhook endpoints."""
from __future__ import annotations

from typing import Any

import structlog
from aiohttp import web
from pydantic import BaseModel, Field

from notifier_service.api.utils import EventTypeStr, parse_body
from notifier_service.core.exceptions import RepositoryError
from notifier_service.services.dependencies import (
    ensure_permission,
    get_dispatch_service,
    require_context,
)
from notifier_service.services.webhooks import utc_timestamp

logger = structlog.get_logger(__name__)

routes = web.RouteTableDef()


class TestEventDTO(BaseModel):
    event_type: EventTypeStr
    test_data: dict[str, Any] = Field(default_factory=dict)


@routes.post("/api/v1/webhooks/test-event")
async def send_test_event(request: web.Request):
    """Dispatch a marked test event right away and report per-subscriber results."""
    ctx = require_context(request)
    ensure_permission(ctx, "master.webhook.view")
    dto = await parse_body(request, TestEventDTO)

    data = {
        "test": True,
        "triggeredBy": "manual-test",
        "timestamp": utc_timestamp(),
        **dto.test_data,
    }
    service = get_dispatch_service(request)
    try:
        summary = await service.dispatch(dto.event_type, ctx.tenant_id, data)
    except RepositoryError:
        logger.warning("test event dispatch failed", event_type=dto.event_type)
        return web.json_response(
            {"success": False, "error": "Failed to load webhook subscriptions"},
            status=500,
        )
    return web.json_response(summary.model_dump(mode="json"))
