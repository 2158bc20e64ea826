#!/usr/bin/env python3
"""
Synthetic order flow against the matching service.

Submits random orders back to back over one shared connection until
interrupted. Any transport or parse failure is fatal (exit status 1).

Usage:
    python -m book_viewer.create_orders
    python -m book_viewer.create_orders --show-book --verbose
    python -m book_viewer.create_orders --price-min 40 --price-max 400 --price-scale 4
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from typing import Any, Optional

from .config import Settings, add_service_arguments, apply_arguments, configure_logging
from .datafeed.decoder import decode_snapshot
from .datafeed.multiplexer import Multiplexer
from .loadgen.orders import (
    DEFAULT_PRICE_RANGE,
    DEFAULT_PRICE_SCALE,
    DEFAULT_QUANTITY_RANGE,
    OrderGenerator,
)

logger = logging.getLogger(__name__)


class RateLogger:
    """Logs confirmations/sec roughly once per second."""

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose
        self.count = 0
        self._count_last = 0
        self._rate_calc_time = time.perf_counter()

    def __call__(self, body: Any) -> None:
        self.count += 1
        if self.verbose:
            logger.info("Order: %s", body)

        now = time.perf_counter()
        rate_elapsed = now - self._rate_calc_time
        if rate_elapsed >= 1.0:
            rate = (self.count - self._count_last) / rate_elapsed
            logger.info("%d orders submitted (%.0f orders/sec)", self.count, rate)
            self._count_last = self.count
            self._rate_calc_time = now


async def main(
    settings: Settings,
    generator: OrderGenerator,
    show_book: bool = False,
    verbose: bool = False,
    count: Optional[int] = None,
) -> None:
    async with Multiplexer(settings.base_url, timeout_s=settings.timeout_s) as mux:
        if show_book:
            book = decode_snapshot(await mux.get(settings.snapshot_path))
            logger.info(
                "Book: last=%s bid=%s ask=%s (%d bids, %d asks)",
                book.last, book.best_bid, book.best_ask, len(book.bids), len(book.asks),
            )

        await generator.run(
            mux,
            settings.orders_path,
            limit=count,
            on_confirmation=RateLogger(verbose),
        )


def cli() -> None:
    """CLI entry point."""
    settings = Settings()

    parser = argparse.ArgumentParser(
        description="Submit random orders to the matching service until interrupted",
    )
    add_service_arguments(parser, settings)

    parser.add_argument(
        "--price-min",
        type=int,
        default=DEFAULT_PRICE_RANGE[0],
        help=f"Lowest price in scaled units, inclusive (default: {DEFAULT_PRICE_RANGE[0]})"
    )
    parser.add_argument(
        "--price-max",
        type=int,
        default=DEFAULT_PRICE_RANGE[1],
        help=f"Highest price in scaled units, inclusive (default: {DEFAULT_PRICE_RANGE[1]})"
    )
    parser.add_argument(
        "--price-scale",
        type=int,
        default=DEFAULT_PRICE_SCALE,
        help=f"Divisor from scaled units to price (default: {DEFAULT_PRICE_SCALE})"
    )
    parser.add_argument(
        "--qty-min",
        type=int,
        default=DEFAULT_QUANTITY_RANGE[0],
        help=f"Lowest quantity, inclusive (default: {DEFAULT_QUANTITY_RANGE[0]})"
    )
    parser.add_argument(
        "--qty-max",
        type=int,
        default=DEFAULT_QUANTITY_RANGE[1],
        help=f"Highest quantity, inclusive (default: {DEFAULT_QUANTITY_RANGE[1]})"
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--count",
        type=int,
        default=None,
        help="Stop after this many orders (default: run forever)"
    )
    parser.add_argument(
        "--show-book",
        action="store_true",
        help="Fetch and log one snapshot before sending orders"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every order confirmation"
    )

    args = parser.parse_args()
    settings = apply_arguments(settings, args)
    configure_logging(settings.log_level)

    try:
        generator = OrderGenerator(
            price_range=(args.price_min, args.price_max),
            price_scale=args.price_scale,
            quantity_range=(args.qty_min, args.qty_max),
            seed=args.seed,
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        asyncio.run(main(settings, generator, args.show_book, args.verbose, args.count))
    except KeyboardInterrupt:
        print("\nShutdown requested.")
        sys.exit(0)
    except Exception:
        logger.exception("Order flow stopped")
        sys.exit(1)


if __name__ == "__main__":
    cli()
