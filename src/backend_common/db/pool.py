"""Asyncpg connection pool helpers."""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol

import asyncpg  # type: ignore[import-untyped]
import structlog

logger = structlog.get_logger(__name__)

pool: asyncpg.Pool | None = None


class SettingsProtocol(Protocol):
    """Protocol for settings objects with database configuration."""

    database_url: Any
    db_pool_size: int


async def init_pool(database_url: str, pool_size: int) -> asyncpg.Pool:
    """Initialize the process-wide asyncpg pool (idempotent)."""
    global pool
    if pool is None:
        pool = await asyncpg.create_pool(dsn=database_url, max_size=pool_size)
        logger.info("database pool created", max_size=pool_size)
    return pool


async def close_pool() -> None:
    """Close the pool on shutdown."""
    global pool
    if pool is not None:
        await pool.close()
        pool = None
        logger.info("database pool closed")


async def get_pool() -> asyncpg.Pool:
    """Return the initialized pool."""
    if pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")
    return pool


def create_pool_hooks(
    settings: SettingsProtocol,
) -> tuple[Callable[[Any], Awaitable[None]], Callable[[Any], Awaitable[None]]]:
    """Build ``app.on_startup`` / ``app.on_cleanup`` hooks bound to *settings*."""

    async def init_pool_hook(_app: Any = None) -> None:
        await init_pool(str(settings.database_url), settings.db_pool_size)

    async def close_pool_hook(_app: Any = None) -> None:
        await close_pool()

    return init_pool_hook, close_pool_hook
