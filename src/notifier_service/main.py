"""aiohttp application entrypoint."""
from __future__ import annotations

from pathlib import Path

from aiohttp import web

from backend_common.aiohttp_app import add_cors_to_routes, add_healthcheck, create_base_app
from backend_common.db.migrations import create_migration_runner
from backend_common.db.pool import create_pool_hooks, get_pool
from backend_common.logging_config import configure_logging
from backend_common.tasks import BackgroundTaskRunner

from notifier_service.api.router import setup_routes
from notifier_service.otel import setup_otel, shutdown_otel
from notifier_service.repositories import SubscriptionRepository, WebhookEventRepository
from notifier_service.services import EventCatalogService, WebhookDispatchService, WebhookNotifier
from notifier_service.services.dependencies import (
    DISPATCH_SERVICE_KEY,
    EVENT_CATALOG_SERVICE_KEY,
    NOTIFIER_KEY,
)
from notifier_service.settings import settings
from notifier_service.webhooks_dispatcher import (
    WebhookDeliveryExecutor,
    get_webhook_session,
    start_webhook_session,
    stop_webhook_session,
)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
MIGRATION_PATHS = [
    PROJECT_ROOT / "migrations",  # local checkout
    Path("/app/migrations"),  # container
]

_TASK_RUNNER_KEY = "background_task_runner"


async def init_services(app: web.Application) -> None:
    """Build the dispatch services once the pool and HTTP session exist."""
    pool = await get_pool()
    executor = WebhookDeliveryExecutor(
        get_webhook_session(app),
        timeout_seconds=settings.webhook_request_timeout_seconds,
        user_agent=settings.webhook_user_agent,
        excerpt_chars=settings.webhook_response_excerpt_chars,
    )
    dispatcher = WebhookDispatchService(
        SubscriptionRepository(pool),
        executor,
        max_concurrency=settings.webhook_dispatch_max_concurrency,
    )
    app[DISPATCH_SERVICE_KEY] = dispatcher
    app[EVENT_CATALOG_SERVICE_KEY] = EventCatalogService(WebhookEventRepository(pool))
    app[NOTIFIER_KEY] = WebhookNotifier(dispatcher, app[_TASK_RUNNER_KEY])


def create_app() -> web.Application:
    app, cors = create_base_app(settings)
    setup_otel(app)

    runner = BackgroundTaskRunner(drain_timeout_seconds=settings.background_drain_timeout_seconds)
    app[_TASK_RUNNER_KEY] = runner

    add_healthcheck(app, settings)
    setup_routes(app)

    init_pool, close_pool = create_pool_hooks(settings)
    app.on_startup.append(init_pool)
    if settings.apply_migrations:
        app.on_startup.append(create_migration_runner(settings, MIGRATION_PATHS))
    app.on_startup.append(start_webhook_session)
    app.on_startup.append(init_services)

    # Pending dispatches still need the HTTP session, so drain them first
    app.on_cleanup.append(runner.stop)
    app.on_cleanup.append(stop_webhook_session)
    app.on_cleanup.append(close_pool)
    app.on_cleanup.append(shutdown_otel)

    add_cors_to_routes(app, cors)
    return app


def main() -> None:
    configure_logging(settings.log_level)
    web.run_app(create_app(), host=settings.host, port=settings.port, access_log=None)


if __name__ == "__main__":
    main()
