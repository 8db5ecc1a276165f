"""Repository SQL and row mapping, with a fake asyncpg pool."""
from __future__ import annotations

import contextlib
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import asyncpg
import pytest

from notifier_service.core.exceptions import RepositoryError
from notifier_service.repositories import SubscriptionRepository, WebhookEventRepository


class FakePool:
    def __init__(self, rows=None, error: Exception | None = None):
        self.conn = AsyncMock()
        if error is not None:
            self.conn.fetch = AsyncMock(side_effect=error)
        else:
            self.conn.fetch = AsyncMock(return_value=rows or [])

    @contextlib.asynccontextmanager
    async def acquire(self):
        yield self.conn


def _normalized_sql(pool: FakePool) -> str:
    query = pool.conn.fetch.call_args[0][0]
    return " ".join(query.split())


@pytest.mark.asyncio
async def test_subscription_query_filters_event_tenant_and_active():
    tenant_id = uuid.uuid4()
    now = datetime.now(timezone.utc)
    row = {
        "id": uuid.uuid4(),
        "tenant_id": tenant_id,
        "partner_id": uuid.uuid4(),
        "event_type": "partner.created",
        "url": "https://hooks.example.com/a",
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    pool = FakePool(rows=[row])

    subs = await SubscriptionRepository(pool).list_active_matching("partner.created", tenant_id)

    assert [s.id for s in subs] == [row["id"]]
    assert subs[0].url == "https://hooks.example.com/a"
    sql = _normalized_sql(pool)
    assert "FROM integration_webhook" in sql
    assert "event_type = $1" in sql
    assert "tenant_id = $2" in sql
    assert "is_active = true" in sql
    assert pool.conn.fetch.call_args[0][1:] == ("partner.created", tenant_id)


@pytest.mark.asyncio
async def test_subscription_query_returns_empty_list():
    pool = FakePool(rows=[])

    assert await SubscriptionRepository(pool).list_active_matching("user.created", uuid.uuid4()) == []


@pytest.mark.asyncio
async def test_database_errors_become_repository_errors():
    pool = FakePool(error=asyncpg.PostgresError("relation does not exist"))

    with pytest.raises(RepositoryError):
        await SubscriptionRepository(pool).list_active_matching("user.created", uuid.uuid4())


@pytest.mark.asyncio
async def test_connection_errors_become_repository_errors():
    pool = FakePool(error=ConnectionRefusedError("refused"))

    with pytest.raises(RepositoryError):
        await WebhookEventRepository(pool).list_active_names(uuid.uuid4())


@pytest.mark.asyncio
async def test_active_names_query():
    tenant_id = uuid.uuid4()
    pool = FakePool(rows=[{"name": "partner.created"}, {"name": "user.created"}])

    names = await WebhookEventRepository(pool).list_active_names(tenant_id)

    assert names == ["partner.created", "user.created"]
    sql = _normalized_sql(pool)
    assert "FROM webhook_event" in sql
    assert "is_active = true" in sql
    assert pool.conn.fetch.call_args[0][1:] == (tenant_id,)


@pytest.mark.asyncio
async def test_list_all_does_not_filter_on_active():
    tenant_id = uuid.uuid4()
    now = datetime.now(timezone.utc)
    rows = [
        {
            "id": uuid.uuid4(),
            "tenant_id": tenant_id,
            "name": name,
            "description": None,
            "is_active": active,
            "created_at": now,
            "updated_at": now,
        }
        for name, active in (("user.created", True), ("user.deleted", False))
    ]
    pool = FakePool(rows=rows)

    events = await WebhookEventRepository(pool).list_all(tenant_id)

    assert [(e.name, e.is_active) for e in events] == [("user.created", True), ("user.deleted", False)]
    assert "is_active" not in _normalized_sql(pool).split("WHERE", 1)[1]
