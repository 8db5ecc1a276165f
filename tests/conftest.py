from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field

import pytest
from aiohttp import ClientSession, web

from tests.utils import LARGE_ERROR_BODY_CHARS


@dataclass
class ReceivedRequest:
    path: str
    headers: dict[str, str]
    body: dict


@dataclass
class SubscriberServer:
    """In-process webhook receiver with a few canned behaviours per path."""

    base_url: str
    received: list[ReceivedRequest] = field(default_factory=list)

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def received_on(self, path: str) -> list[ReceivedRequest]:
        return [r for r in self.received if r.path == path]


@pytest.fixture
async def subscriber(aiohttp_server):
    """Receiver routes: /ok (200), /created (201), /error (500), /slow (1s), /delay (0.3s),
    /large-error (502 with a large body)."""
    server_state: dict[str, SubscriberServer] = {}

    async def record(request: web.Request) -> None:
        raw = await request.read()
        server_state["server"].received.append(
            ReceivedRequest(
                path=request.path,
                headers=dict(request.headers),
                body=json.loads(raw.decode("utf-8")),
            )
        )

    async def ok(request: web.Request) -> web.Response:
        await record(request)
        return web.Response(status=200, text="ok")

    async def created(request: web.Request) -> web.Response:
        await record(request)
        return web.Response(status=201)

    async def error(request: web.Request) -> web.Response:
        await record(request)
        return web.Response(status=500, text="boom")

    async def slow(request: web.Request) -> web.Response:
        await record(request)
        await asyncio.sleep(1.0)
        return web.Response(status=200)

    async def delay(request: web.Request) -> web.Response:
        await record(request)
        await asyncio.sleep(0.3)
        return web.Response(status=200)

    async def large_error(request: web.Request) -> web.Response:
        await record(request)
        return web.Response(status=502, text="x" * LARGE_ERROR_BODY_CHARS)

    app = web.Application()
    app.router.add_post("/ok", ok)
    app.router.add_post("/created", created)
    app.router.add_post("/error", error)
    app.router.add_post("/slow", slow)
    app.router.add_post("/delay", delay)
    app.router.add_post("/large-error", large_error)

    server = await aiohttp_server(app)
    state = SubscriberServer(base_url=f"http://{server.host}:{server.port}")
    server_state["server"] = state
    return state


@pytest.fixture
async def http_session():
    session = ClientSession()
    yield session
    await session.close()
