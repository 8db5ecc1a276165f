"""API router composition for aiohttp."""
from __future__ import annotations

from aiohttp import web

from notifier_service.api.routes import events, webhook_events, webhooks

ROUTE_MODULES = [
    events,
    webhooks,
    webhook_events,
]


def setup_routes(app: web.Application) -> None:
    """Attach domain routes to the aiohttp application."""
    for module in ROUTE_MODULES:
        app.add_routes(module.routes)
