#!/usr/bin/env python3
"""
Book Viewer - Live order book for an order-matching service.

Usage:
    python -m book_viewer.main --url http://localhost:3000

    Or behind the UI dev proxy:
    python -m book_viewer.main --snapshot-path /api --orders-path /api/orders

Controls:
    q - Quit
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import Settings, add_service_arguments, apply_arguments, configure_logging

logger = logging.getLogger(__name__)


async def main(settings: Settings) -> None:
    """Main entry point - one shared connection for polling and order entry."""

    # Import here to avoid slow startup for --help
    from .datafeed.multiplexer import Multiplexer
    from .ui.book_view import run_ui

    logger.info("Starting Book Viewer against %s", settings.base_url)
    logger.info("  Poll interval: %dms", settings.poll_interval_ms)
    logger.info("  Depth: %d", settings.depth)

    async with Multiplexer(settings.base_url, timeout_s=settings.timeout_s) as mux:
        await run_ui(mux, settings)


def cli() -> None:
    """CLI entry point."""
    settings = Settings()

    parser = argparse.ArgumentParser(
        description="Book Viewer - Live order book for an order-matching service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m book_viewer.main
    python -m book_viewer.main --url http://localhost:3000 --interval 500
    python -m book_viewer.main --depth 10 --currency USD --locale en_US
        """
    )
    add_service_arguments(parser, settings)

    parser.add_argument(
        "--interval",
        type=int,
        default=settings.poll_interval_ms,
        help=f"Snapshot poll interval in ms (default: {settings.poll_interval_ms})"
    )

    parser.add_argument(
        "--depth",
        type=int,
        default=settings.depth,
        help=f"Price levels shown per side (default: {settings.depth})"
    )

    parser.add_argument(
        "--currency",
        default=settings.currency,
        help=f"Currency code for prices (default: {settings.currency})"
    )

    parser.add_argument(
        "--locale",
        default=settings.locale,
        help=f"Locale for number formatting (default: {settings.locale})"
    )

    args = parser.parse_args()
    settings = apply_arguments(settings, args).model_copy(update={
        "poll_interval_ms": args.interval,
        "depth": args.depth,
        "currency": args.currency,
        "locale": args.locale,
    })
    # Stderr belongs to the TUI; send records to the textual console instead
    from textual.logging import TextualHandler
    configure_logging(settings.log_level, handlers=[TextualHandler()])

    # Run
    try:
        asyncio.run(main(settings))
    except KeyboardInterrupt:
        print("\nShutdown requested.")
        sys.exit(0)
    except Exception:
        logger.exception("Book Viewer failed")
        sys.exit(1)


if __name__ == "__main__":
    cli()
