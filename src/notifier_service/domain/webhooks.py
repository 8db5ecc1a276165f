"""Webhook domain primitives."""
from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, computed_field
from pydantic.alias_generators import to_camel

from notifier_service.domain.enums import DeliveryStatus


class WebhookSubscription(BaseModel):
    id: UUID
    tenant_id: UUID
    partner_id: UUID
    event_type: str
    url: str
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class WebhookEventDefinition(BaseModel):
    id: UUID
    tenant_id: UUID
    name: str
    description: str | None = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class DispatchEnvelope(BaseModel):
    """Body POSTed to every subscriber of one dispatch call.

    Serialized with camelCase keys: ``eventType``, ``timestamp``, ``tenantId``,
    ``data``. ``data`` is opaque and passed through as given.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    event_type: str
    timestamp: str
    tenant_id: str
    data: Any = None

    _body: bytes | None = PrivateAttr(default=None)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_json_bytes(self) -> bytes:
        """Serialized body, computed on first use and reused afterwards.

        ``data`` may be a mutable object owned by the caller; every subscriber
        of the envelope still receives the bytes taken at the first call.
        """
        if self._body is None:
            wire = json.dumps(self.to_wire(), separators=(",", ":"), ensure_ascii=False)
            self._body = wire.encode("utf-8")
        return self._body


class DeliveryResult(BaseModel):
    subscription_id: UUID
    url: str
    status: DeliveryStatus
    response_status: int | None = None
    error: str | None = None
    duration_ms: int
    timestamp: datetime

    @property
    def ok(self) -> bool:
        return self.status is DeliveryStatus.SUCCESS


class DispatchSummary(BaseModel):
    event_type: str
    tenant_id: UUID
    results: list[DeliveryResult] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failed(self) -> int:
        return len(self.results) - self.success

    @property
    def total(self) -> int:
        return len(self.results)
