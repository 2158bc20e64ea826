"""
Runtime configuration.

Values come from BOOK_VIEWER_* environment variables or a local .env file;
command-line flags override them.
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BOOK_VIEWER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Matching service (the UI dev proxy serves the same routes under /api)
    base_url: str = "http://localhost:3000"
    snapshot_path: str = "/"
    orders_path: str = "/orders"
    timeout_s: float = 5.0

    # Ladder
    poll_interval_ms: int = 250
    depth: int = 5
    currency: str = "EUR"
    locale: str = "nl_NL"

    log_level: str = "INFO"


def add_service_arguments(parser: argparse.ArgumentParser, settings: Settings) -> None:
    """Flags shared by every entry point; defaults come from settings."""
    parser.add_argument(
        "--url",
        default=settings.base_url,
        help=f"Matching service base URL (default: {settings.base_url})"
    )
    parser.add_argument(
        "--snapshot-path",
        default=settings.snapshot_path,
        help=f"Order book snapshot route (default: {settings.snapshot_path})"
    )
    parser.add_argument(
        "--orders-path",
        default=settings.orders_path,
        help=f"Order submission route (default: {settings.orders_path})"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.timeout_s,
        help=f"Per-request timeout in seconds (default: {settings.timeout_s})"
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})"
    )


def apply_arguments(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return a copy of settings with the shared flags applied."""
    return settings.model_copy(update={
        "base_url": args.url,
        "snapshot_path": args.snapshot_path,
        "orders_path": args.orders_path,
        "timeout_s": args.timeout,
        "log_level": args.log_level,
    })


def configure_logging(level: str, handlers: Optional[list[logging.Handler]] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
    )
