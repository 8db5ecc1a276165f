"""Outbound webhook delivery: one HTTP POST per subscriber, never raising."""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union, assert_never

import structlog
from aiohttp import ClientError, ClientSession, ClientTimeout, InvalidURL, web

from notifier_service.domain.enums import DeliveryStatus
from notifier_service.domain.webhooks import DeliveryResult, DispatchEnvelope, WebhookSubscription

logger = structlog.get_logger(__name__)

_WEBHOOK_SESSION_KEY = "webhook_http_session"


@dataclass(frozen=True)
class Responded:
    """The subscriber answered (any status)."""

    status: int
    reason: str | None = None
    body_excerpt: str = ""


@dataclass(frozen=True)
class TimedOut:
    detail: str


@dataclass(frozen=True)
class NetworkError:
    detail: str


@dataclass(frozen=True)
class LocalError:
    """Failure before anything was sent (bad URL, unserializable body)."""

    detail: str


PostOutcome = Union[Responded, TimedOut, NetworkError, LocalError]


async def post_json(
    session: ClientSession,
    url: str,
    body: bytes,
    *,
    headers: dict[str, str],
    timeout_s: float,
    excerpt_chars: int = 500,
) -> PostOutcome:
    """POST *body* to *url* and classify what happened."""
    try:
        async with session.post(
            url,
            data=body,
            headers=headers,
            timeout=ClientTimeout(total=timeout_s),
        ) as resp:
            if 200 <= resp.status < 300:
                return Responded(resp.status, resp.reason)
            # Up to 4 bytes per character in UTF-8; the rest of the body is never buffered
            raw = await resp.content.read(excerpt_chars * 4)
            text = raw.decode(resp.charset or "utf-8", errors="replace")
            return Responded(resp.status, resp.reason, text[:excerpt_chars])
    except asyncio.TimeoutError:
        return TimedOut(f"No response within {timeout_s:g}s")
    # InvalidURL is a ClientError too; it must be matched first
    except InvalidURL as exc:
        return LocalError(f"Invalid URL: {exc}")
    except ClientError as exc:
        return NetworkError(str(exc) or type(exc).__name__)
    except (ValueError, TypeError) as exc:
        return LocalError(str(exc) or type(exc).__name__)


class WebhookDeliveryExecutor:
    """Delivers one envelope to one subscription.

    Timeout and headers are passed on every request; the shared session carries
    no per-tenant defaults.
    """

    def __init__(
        self,
        session: ClientSession,
        *,
        timeout_seconds: float = 5.0,
        user_agent: str = "Integration-Webhook-Dispatcher/1.0",
        excerpt_chars: int = 500,
    ):
        self._session = session
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent
        self._excerpt_chars = excerpt_chars

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "User-Agent": self._user_agent,
        }

    async def deliver(self, subscription: WebhookSubscription, envelope: DispatchEnvelope) -> DeliveryResult:
        started = time.monotonic()
        try:
            outcome = await self._send(subscription.url, envelope)
        except Exception as exc:
            # Unexpected client-side failure; still reported, never raised
            logger.exception("webhook delivery crashed", subscription_id=str(subscription.id))
            outcome = LocalError(f"{type(exc).__name__}: {exc}")
        duration_ms = int((time.monotonic() - started) * 1000)

        result = self._to_result(subscription, outcome, duration_ms)
        if result.ok:
            logger.info(
                "webhook delivered",
                subscription_id=str(subscription.id),
                url=subscription.url,
                response_status=result.response_status,
                duration_ms=duration_ms,
            )
        else:
            logger.warning(
                "webhook delivery failed",
                subscription_id=str(subscription.id),
                url=subscription.url,
                response_status=result.response_status,
                error=result.error,
                duration_ms=duration_ms,
            )
        return result

    async def _send(self, url: str, envelope: DispatchEnvelope) -> PostOutcome:
        try:
            body = envelope.to_json_bytes()
        except (ValueError, TypeError) as exc:
            return LocalError(f"Payload is not JSON serializable: {exc}")
        return await post_json(
            self._session,
            url,
            body,
            headers=self._headers(),
            timeout_s=self._timeout_seconds,
            excerpt_chars=self._excerpt_chars,
        )

    @staticmethod
    def _to_result(subscription: WebhookSubscription, outcome: PostOutcome, duration_ms: int) -> DeliveryResult:
        base = {
            "subscription_id": subscription.id,
            "url": subscription.url,
            "duration_ms": duration_ms,
            "timestamp": datetime.now(timezone.utc),
        }
        if isinstance(outcome, Responded):
            if 200 <= outcome.status < 300:
                return DeliveryResult(status=DeliveryStatus.SUCCESS, response_status=outcome.status, **base)
            error = f"HTTP {outcome.status}"
            if outcome.reason:
                error = f"{error} {outcome.reason}"
            if outcome.body_excerpt:
                error = f"{error}: {outcome.body_excerpt}"
            return DeliveryResult(
                status=DeliveryStatus.FAILED, response_status=outcome.status, error=error, **base
            )
        if isinstance(outcome, TimedOut):
            return DeliveryResult(status=DeliveryStatus.FAILED, error=f"Timeout: {outcome.detail}", **base)
        if isinstance(outcome, NetworkError):
            return DeliveryResult(status=DeliveryStatus.FAILED, error=f"Network error: {outcome.detail}", **base)
        if isinstance(outcome, LocalError):
            return DeliveryResult(status=DeliveryStatus.FAILED, error=f"Request error: {outcome.detail}", **base)
        assert_never(outcome)


async def start_webhook_session(app: web.Application) -> None:
    app[_WEBHOOK_SESSION_KEY] = ClientSession()


async def stop_webhook_session(app: web.Application) -> None:
    session = app.get(_WEBHOOK_SESSION_KEY)
    if session is not None:
        await session.close()


def get_webhook_session(app: web.Application) -> ClientSession:
    return app[_WEBHOOK_SESSION_KEY]
