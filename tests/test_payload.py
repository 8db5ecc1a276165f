from __future__ import annotations

import json
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from notifier_service.services.webhooks import build_envelope, utc_timestamp


def test_envelope_carries_dispatch_arguments():
    tenant_id = uuid.uuid4()
    data = {"id": "p1", "tags": ["a", "b"], "nested": {"n": 1}}

    envelope = build_envelope("partner.created", tenant_id, data)

    assert envelope.event_type == "partner.created"
    assert envelope.tenant_id == str(tenant_id)
    assert envelope.data == data


def test_envelope_wire_shape_uses_camel_case_keys():
    tenant_id = uuid.uuid4()
    envelope = build_envelope("user.updated", tenant_id, {"id": "u1"})

    body = json.loads(envelope.to_json_bytes())

    assert set(body) == {"eventType", "timestamp", "tenantId", "data"}
    assert body["eventType"] == "user.updated"
    assert body["tenantId"] == str(tenant_id)
    assert body["data"] == {"id": "u1"}


def test_envelope_timestamp_is_utc_iso8601():
    before = datetime.now(timezone.utc) - timedelta(seconds=1)
    envelope = build_envelope("user.created", uuid.uuid4(), None)
    after = datetime.now(timezone.utc) + timedelta(seconds=1)

    assert envelope.timestamp.endswith("Z")
    parsed = datetime.fromisoformat(envelope.timestamp.replace("Z", "+00:00"))
    assert before <= parsed <= after


def test_utc_timestamp_normalizes_offsets():
    moment = datetime(2024, 5, 1, 14, 30, 0, 123456, tzinfo=timezone(timedelta(hours=2)))
    assert utc_timestamp(moment) == "2024-05-01T12:30:00.123Z"


def test_envelope_is_immutable():
    envelope = build_envelope("user.created", uuid.uuid4(), {"id": 1})
    with pytest.raises(ValidationError):
        envelope.event_type = "user.deleted"  # type: ignore[misc]


def test_envelope_accepts_any_data_shape():
    for data in (None, 42, "text", [1, 2, 3], {"deep": {"deeper": [{"x": True}]}}):
        envelope = build_envelope("integration.key.created", uuid.uuid4(), data)
        assert json.loads(envelope.to_json_bytes())["data"] == data


def test_serialized_body_is_taken_once():
    data = {"id": "u1", "status": "active"}
    envelope = build_envelope("user.updated", uuid.uuid4(), data)

    first = envelope.to_json_bytes()
    data["status"] = "disabled"

    assert envelope.to_json_bytes() == first
    assert json.loads(first)["data"]["status"] == "active"
