#!/usr/bin/env python3
"""
Unthrottled snapshot reader.

Requests the order book back to back over one shared connection, decoding
every response. Unlike the UI poller, failures are fatal (exit status 1).

Usage:
    python -m book_viewer.read_orderbook --url http://localhost:3000
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from typing import Optional

from .config import Settings, add_service_arguments, apply_arguments, configure_logging
from .datafeed.decoder import decode_snapshot
from .datafeed.multiplexer import Multiplexer
from .types import Snapshot

logger = logging.getLogger(__name__)


async def read_loop(
    mux: Multiplexer, path: str = "/", limit: Optional[int] = None
) -> Optional[Snapshot]:
    """
    Fetch snapshots sequentially, logging polls/sec once per second.

    Returns the last snapshot read when `limit` is reached.
    """
    count = 0
    count_last = 0
    rate_calc_time = time.perf_counter()
    snapshot: Optional[Snapshot] = None

    while limit is None or count < limit:
        snapshot = decode_snapshot(await mux.get(path))
        count += 1

        now = time.perf_counter()
        rate_elapsed = now - rate_calc_time
        if rate_elapsed >= 1.0:
            logger.info(
                "%.0f polls/sec  last=%s bid=%s ask=%s",
                (count - count_last) / rate_elapsed,
                snapshot.last, snapshot.best_bid, snapshot.best_ask,
            )
            count_last = count
            rate_calc_time = now

    return snapshot


async def main(settings: Settings, count: Optional[int] = None) -> None:
    async with Multiplexer(settings.base_url, timeout_s=settings.timeout_s) as mux:
        await read_loop(mux, settings.snapshot_path, limit=count)


def cli() -> None:
    """CLI entry point."""
    settings = Settings()

    parser = argparse.ArgumentParser(
        description="Poll the order book as fast as the service answers",
    )
    add_service_arguments(parser, settings)
    parser.add_argument(
        "--count",
        type=int,
        default=None,
        help="Stop after this many snapshots (default: run forever)"
    )

    args = parser.parse_args()
    settings = apply_arguments(settings, args)
    configure_logging(settings.log_level)

    try:
        asyncio.run(main(settings, args.count))
    except KeyboardInterrupt:
        print("\nShutdown requested.")
        sys.exit(0)
    except Exception:
        logger.exception("Snapshot reader stopped")
        sys.exit(1)


if __name__ == "__main__":
    cli()
