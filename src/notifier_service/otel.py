"""Tracing for webhook dispatch.

With ``otel_exporter_endpoint`` set, spans go to an OTLP/HTTP collector:

  - one server span per incoming request (aiohttp instrumentation);
  - ``webhook.dispatch`` per dispatch call, tagged with event type, tenant
    and the success/failed counts;
  - ``webhook.deliver`` per subscriber, tagged with subscription id, URL and
    delivery status.

Without an endpoint the global tracer stays a no-op and the dispatch code
runs unchanged.
"""
from __future__ import annotations

import structlog
from aiohttp import web

from opentelemetry import trace
from opentelemetry.sdk.resources import DEPLOYMENT_ENVIRONMENT, SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.aiohttp_server import AioHttpServerInstrumentor

from notifier_service.settings import settings

logger = structlog.get_logger(__name__)

_provider: TracerProvider | None = None


def setup_otel(app: web.Application) -> None:
    """Install the OTLP exporter and request instrumentation when an endpoint is set."""
    global _provider

    endpoint = settings.otel_exporter_endpoint
    if not endpoint:
        logger.info("otel_exporter_endpoint not set, OpenTelemetry tracing disabled")
        return

    resource = Resource.create({SERVICE_NAME: settings.app_name, DEPLOYMENT_ENVIRONMENT: settings.env})
    _provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=f"{str(endpoint).rstrip('/')}/v1/traces")
    _provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(_provider)

    AioHttpServerInstrumentor().instrument(server=app)

    logger.info("OpenTelemetry tracing enabled", endpoint=str(endpoint), service=settings.app_name)


async def shutdown_otel(_app: web.Application) -> None:
    """Flush buffered dispatch and delivery spans before the process exits."""
    global _provider
    if _provider is not None:
        _provider.shutdown()
        logger.info("OpenTelemetry tracer provider shut down")
        _provider = None


def get_tracer(name: str = __name__) -> trace.Tracer:
    """Tracer for the dispatch and delivery spans; a no-op until ``setup_otel`` installs a provider."""
    return trace.get_tracer(name)
