"""Shared asyncpg helpers for repositories."""
from __future__ import annotations

import asyncio
from typing import Any, Iterable

import asyncpg  # type: ignore[import-untyped]

from notifier_service.core.exceptions import RepositoryError

# Driver/transport failures surfaced to callers as RepositoryError
_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class BaseRepository:
    """Thin wrapper over asyncpg pool operations."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def _fetch(self, query: str, *args: Any) -> Iterable[asyncpg.Record]:
        try:
            async with self._pool.acquire() as conn:
                return await conn.fetch(query, *args)
        except _DB_ERRORS as exc:
            raise RepositoryError(str(exc) or type(exc).__name__) from exc
