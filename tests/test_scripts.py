import argparse
import logging
from decimal import Decimal

import pytest

from book_viewer import create_orders, read_orderbook
from book_viewer.config import Settings, add_service_arguments, apply_arguments
from book_viewer.datafeed.multiplexer import Multiplexer
from book_viewer.errors import ParseError
from book_viewer.loadgen.orders import OrderGenerator


@pytest.mark.asyncio
async def test_read_loop_returns_last_snapshot(mux, service):
    snapshot = await read_orderbook.read_loop(mux, "/", limit=3)

    assert service.snapshot_requests == 3
    assert snapshot.best_ask == Decimal("101.00")


@pytest.mark.asyncio
async def test_read_loop_fails_on_bad_payload(mux, service):
    service.queue_snapshot(b"{}")
    with pytest.raises(ParseError):
        await read_orderbook.read_loop(mux, "/", limit=3)


@pytest.mark.asyncio
async def test_read_main_closes_connection(service, monkeypatch):
    opened = []
    original = Multiplexer.close

    async def tracking_close(self):
        opened.append(self)
        await original(self)

    monkeypatch.setattr(Multiplexer, "close", tracking_close)
    await read_orderbook.main(Settings(base_url=service.base_url), count=2)

    assert len(opened) == 1
    assert not opened[0].is_open


@pytest.mark.asyncio
async def test_create_orders_main(service, caplog):
    settings = Settings(base_url=service.base_url)

    with caplog.at_level(logging.INFO, logger="book_viewer"):
        await create_orders.main(
            settings, OrderGenerator(seed=9), show_book=True, verbose=True, count=4
        )

    assert len(service.orders) == 4
    assert service.snapshot_requests == 1
    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("Book: last=100.50") for m in messages)
    assert sum(m.startswith("Order: ") for m in messages) == 4


def test_rate_logger_counts():
    rate = create_orders.RateLogger()
    for _ in range(3):
        rate({"id": 1})
    assert rate.count == 3


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("BOOK_VIEWER_BASE_URL", "http://matcher:8080")
    monkeypatch.setenv("BOOK_VIEWER_POLL_INTERVAL_MS", "500")

    settings = Settings()
    assert settings.base_url == "http://matcher:8080"
    assert settings.poll_interval_ms == 500
    assert settings.depth == 5


def test_command_line_overrides_settings():
    settings = Settings(base_url="http://matcher:8080")
    parser = argparse.ArgumentParser()
    add_service_arguments(parser, settings)

    args = parser.parse_args(["--snapshot-path", "/api", "--orders-path", "/api/orders"])
    updated = apply_arguments(settings, args)

    assert updated.base_url == "http://matcher:8080"
    assert updated.snapshot_path == "/api"
    assert updated.orders_path == "/api/orders"
    assert settings.snapshot_path == "/"
