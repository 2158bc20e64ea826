"""Shared fixtures: an in-process stand-in for the matching service."""

from __future__ import annotations

import asyncio
import itertools
from typing import Any, Optional

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from book_viewer.datafeed.multiplexer import Multiplexer

SCENARIO_PAYLOAD = {
    "last": "100.50",
    "best_bid": "100.00",
    "best_ask": "101.00",
    "bids": [{"price": "100.00", "quantity": "5"}],
    "asks": [{"price": "101.00", "quantity": "3"}],
}


class FakeService:
    """
    Minimal matching service: serves snapshots and acknowledges orders.

    Snapshot responses are taken from `queue_snapshot()` in order, falling
    back to `snapshot` once the queue is empty.
    """

    def __init__(self) -> None:
        self.snapshot: Any = SCENARIO_PAYLOAD
        self.snapshot_delay: float = 0.0
        self.snapshot_requests: int = 0
        self._queued: list[tuple[Any, float]] = []

        self.orders: list[dict] = []
        self.order_raw: Optional[bytes] = None
        self._ids = itertools.count(1)

        self.base_url: str = ""

        self.app = web.Application()
        for prefix in ("", "/api"):
            self.app.router.add_get(prefix or "/", self.handle_snapshot)
            self.app.router.add_post(f"{prefix}/orders", self.handle_order)
        self.app.router.add_get("/drop", self.handle_drop)

    def queue_snapshot(self, body: Any, delay: float = 0.0) -> None:
        """Serve `body` (dict or raw bytes) to the next unanswered snapshot request."""
        self._queued.append((body, delay))

    async def handle_snapshot(self, request: web.Request) -> web.StreamResponse:
        self.snapshot_requests += 1
        if self._queued:
            body, delay = self._queued.pop(0)
        else:
            body, delay = self.snapshot, self.snapshot_delay

        if delay:
            await asyncio.sleep(delay)
        if isinstance(body, bytes):
            return web.Response(body=body, content_type="application/json")
        return web.json_response(body)

    async def handle_order(self, request: web.Request) -> web.StreamResponse:
        if self.order_raw is not None:
            return web.Response(body=self.order_raw, content_type="application/json")

        order = await request.json()
        self.orders.append(order)

        if order.get("side") not in ("Buy", "Sell") or order.get("price", 0) <= 0:
            return web.json_response({"error": "invalid order"}, status=422)

        return web.json_response({
            "id": next(self._ids),
            "created_at": 1700000000000,
            "price": str(order["price"]),
            "quantity": str(order["quantity"]),
            "side": order["side"],
            "status": "Open",
            "filled": "0",
        })

    async def handle_drop(self, request: web.Request) -> web.StreamResponse:
        # Kill the connection without answering
        request.transport.close()
        await asyncio.sleep(0.1)
        return web.Response()


@pytest_asyncio.fixture
async def service():
    fake = FakeService()
    server = TestServer(fake.app)
    await server.start_server()
    fake.base_url = str(server.make_url("/"))
    try:
        yield fake
    finally:
        await server.close()


@pytest_asyncio.fixture
async def mux(service):
    async with Multiplexer(service.base_url, timeout_s=5.0) as m:
        yield m


@pytest.fixture
def scenario_payload() -> dict:
    return dict(SCENARIO_PAYLOAD)
