"""
Shared HTTP connection to the matching service.

Handles:
1. Explicit open/close of one long-lived aiohttp session (scoped via `async with`)
2. Any number of concurrent, independent request/response exchanges over it
3. JSON encoding of request bodies and strict JSON parsing of responses
4. Sticky failure state after a transport error, cleared only by reconnect()

Notes:
- Uses orjson for encoding and parsing
- The connector has no connection limit, so callers never queue behind a slow exchange
- No retry or backoff at this layer
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Any, Callable, Optional

import aiohttp
import orjson

from ..errors import ParseError, ServiceConnectionError

logger = logging.getLogger(__name__)


def _encode_default(obj: Any) -> Any:
    # Prices go out as JSON numbers
    if isinstance(obj, Decimal):
        return float(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def json_dumps(payload: Any) -> bytes:
    return orjson.dumps(payload, default=_encode_default)


def json_loads(data: bytes | str) -> Any:
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise ParseError(f"Malformed JSON payload: {exc}") from exc


def _log_connection_error(exc: BaseException) -> None:
    logger.error("Connection error: %s: %s", type(exc).__name__, exc)


class Multiplexer:
    """
    One persistent connection handle, many concurrent exchanges.

    Usage:
        async with Multiplexer("http://localhost:3000") as mux:
            book, order = await asyncio.gather(
                mux.get("/"),
                mux.post("/orders", {"side": "Buy", "price": 20.5, "quantity": 300}),
            )
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 5.0,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.on_error = on_error or _log_connection_error

        self._session: aiohttp.ClientSession | None = None
        self._broken: BaseException | None = None
        self._in_flight: int = 0

    async def __aenter__(self) -> "Multiplexer":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._session is not None and self._broken is None

    @property
    def in_flight(self) -> int:
        """Number of exchanges currently awaiting a response."""
        return self._in_flight

    async def open(self) -> None:
        """Open the shared session. No-op if already open."""
        if self._session is not None:
            return
        connector = aiohttp.TCPConnector(limit=0)
        self._session = aiohttp.ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=self.timeout_s),
        )
        self._broken = None
        logger.debug("Opened connection to %s", self.base_url)

    async def close(self) -> None:
        """Close the shared session. Safe to call more than once."""
        session, self._session = self._session, None
        if session is not None:
            await session.close()
            logger.debug("Closed connection to %s", self.base_url)

    async def reconnect(self) -> None:
        """Drop the current session (broken or not) and open a fresh one."""
        await self.close()
        await self.open()

    def _mark_broken(self, exc: BaseException) -> None:
        if self._broken is None:
            self._broken = exc
            self.on_error(exc)

    async def request(self, method: str, path: str, body: Any = None) -> Any:
        """
        Perform one exchange and return the parsed JSON body.

        The HTTP status is not inspected: error bodies are parsed and
        returned like any other.

        Raises:
            ServiceConnectionError: not open, previously broken, or transport failure
            ParseError: body is not valid JSON
        """
        session = self._session
        if session is None:
            raise ServiceConnectionError("Connection is not open")
        if self._broken is not None:
            raise ServiceConnectionError(
                f"Connection is broken ({self._broken!r}); reconnect required"
            )

        data = None
        headers = {"Accept": "application/json"}
        if body is not None:
            data = json_dumps(body)
            headers["Content-Type"] = "application/json"

        self._in_flight += 1
        try:
            async with session.request(
                method, self.base_url + path, data=data, headers=headers
            ) as resp:
                raw = await resp.read()
        except aiohttp.ClientError as exc:
            self._mark_broken(exc)
            raise ServiceConnectionError(f"{method} {path} failed: {exc}") from exc
        except asyncio.TimeoutError as exc:
            raise ServiceConnectionError(f"{method} {path} timed out") from exc
        finally:
            self._in_flight -= 1

        return json_loads(raw)

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, body: Any) -> Any:
        return await self.request("POST", path, body)
