"""Webhook dispatch service (subscriber lookup, envelope, concurrent fan-out)."""
from __future__ import annotations

import asyncio
import contextlib
from datetime import datetime, timezone
from typing import Any, List, Protocol
from uuid import UUID

import structlog

from notifier_service.core.exceptions import InvalidEventTypeError
from notifier_service.domain.enums import DeliveryStatus, WebhookEventType
from notifier_service.domain.webhooks import (
    DeliveryResult,
    DispatchEnvelope,
    DispatchSummary,
    WebhookSubscription,
)
from notifier_service.otel import get_tracer

logger = structlog.get_logger(__name__)
tracer = get_tracer(__name__)


class SubscriptionReader(Protocol):
    async def list_active_matching(
        self, event_type: str, tenant_id: UUID
    ) -> List[WebhookSubscription]: ...


class DeliveryExecutor(Protocol):
    async def deliver(
        self, subscription: WebhookSubscription, envelope: DispatchEnvelope
    ) -> DeliveryResult: ...


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_envelope(
    event_type: str,
    tenant_id: UUID,
    data: Any,
    *,
    now: datetime | None = None,
) -> DispatchEnvelope:
    return DispatchEnvelope(
        event_type=event_type,
        timestamp=utc_timestamp(now),
        tenant_id=str(tenant_id),
        data=data,
    )


class WebhookDispatchService:
    """Notifies every active subscriber of a tenant about one domain event.

    Deliveries run concurrently and are awaited all together; a subscriber that
    fails or hangs only shows up as a ``failed`` result in the summary. Errors
    while looking up subscribers or building the envelope are logged and
    re-raised, so "nobody subscribed" and "could not tell who subscribed" stay
    distinguishable.
    """

    def __init__(
        self,
        subscriptions: SubscriptionReader,
        executor: DeliveryExecutor,
        *,
        max_concurrency: int = 0,
    ):
        self._subscriptions = subscriptions
        self._executor = executor
        self._max_concurrency = max_concurrency

    async def dispatch(self, event_type: str, tenant_id: UUID, data: Any) -> DispatchSummary:
        if not event_type or not event_type.strip():
            raise InvalidEventTypeError("event_type must be a non-empty string")

        log = logger.bind(event_type=event_type, tenant_id=str(tenant_id))
        with tracer.start_as_current_span("webhook.dispatch") as span:
            span.set_attribute("webhook.event_type", event_type)
            span.set_attribute("webhook.tenant_id", str(tenant_id))
            try:
                subscriptions = await self._subscriptions.list_active_matching(event_type, tenant_id)
                if not subscriptions:
                    log.info("no active webhooks for event")
                    return DispatchSummary(event_type=event_type, tenant_id=tenant_id)

                envelope = build_envelope(event_type, tenant_id, data)
                # Snapshot the body before any delivery starts; an unserializable
                # payload is reported per delivery by the executor instead
                with contextlib.suppress(ValueError, TypeError):
                    envelope.to_json_bytes()
                log.info(
                    "webhook dispatch started",
                    subscribers=len(subscriptions),
                    subscription_ids=[str(s.id) for s in subscriptions],
                )
                results = await self._fan_out(subscriptions, envelope)
            except Exception:
                log.exception("webhook dispatch failed")
                raise

            summary = DispatchSummary(event_type=event_type, tenant_id=tenant_id, results=results)
            span.set_attribute("webhook.success", summary.success)
            span.set_attribute("webhook.failed", summary.failed)

        log.info(
            "webhook dispatch completed",
            total=summary.total,
            success=summary.success,
            failed=summary.failed,
        )
        return summary

    async def _fan_out(
        self, subscriptions: List[WebhookSubscription], envelope: DispatchEnvelope
    ) -> List[DeliveryResult]:
        semaphore = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency > 0 else None
        settled = await asyncio.gather(
            *(self._deliver_one(sub, envelope, semaphore) for sub in subscriptions),
            return_exceptions=True,
        )
        results: List[DeliveryResult] = []
        for subscription, outcome in zip(subscriptions, settled):
            if isinstance(outcome, DeliveryResult):
                results.append(outcome)
            elif isinstance(outcome, Exception):
                # The executor should never raise; keep the sibling results regardless
                results.append(
                    DeliveryResult(
                        subscription_id=subscription.id,
                        url=subscription.url,
                        status=DeliveryStatus.FAILED,
                        error=f"{type(outcome).__name__}: {outcome}",
                        duration_ms=0,
                        timestamp=datetime.now(timezone.utc),
                    )
                )
            else:
                raise outcome
        return results

    async def _deliver_one(
        self,
        subscription: WebhookSubscription,
        envelope: DispatchEnvelope,
        semaphore: asyncio.Semaphore | None,
    ) -> DeliveryResult:
        async with semaphore if semaphore is not None else contextlib.nullcontext():
            with tracer.start_as_current_span("webhook.deliver") as span:
                span.set_attribute("webhook.subscription_id", str(subscription.id))
                span.set_attribute("webhook.url", subscription.url)
                result = await self._executor.deliver(subscription, envelope)
                span.set_attribute("webhook.status", result.status.value)
                return result

    async def user_created(self, tenant_id: UUID, data: Any) -> DispatchSummary:
        return await self.dispatch(WebhookEventType.USER_CREATED.value, tenant_id, data)

    async def user_updated(self, tenant_id: UUID, data: Any) -> DispatchSummary:
        return await self.dispatch(WebhookEventType.USER_UPDATED.value, tenant_id, data)

    async def partner_created(self, tenant_id: UUID, data: Any) -> DispatchSummary:
        return await self.dispatch(WebhookEventType.PARTNER_CREATED.value, tenant_id, data)

    async def partner_updated(self, tenant_id: UUID, data: Any) -> DispatchSummary:
        return await self.dispatch(WebhookEventType.PARTNER_UPDATED.value, tenant_id, data)

    async def integration_key_created(self, tenant_id: UUID, data: Any) -> DispatchSummary:
        return await self.dispatch(WebhookEventType.INTEGRATION_KEY_CREATED.value, tenant_id, data)
