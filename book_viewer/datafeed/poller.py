"""
Snapshot poller: keeps the freshest order book the service has given us.

Each tick:
    Idle -> Requesting -> (Applying | Discarding) -> Idle

Ticks are NOT serialized. Under a slow network several snapshot requests can
be in flight at once and, with the default policy, whichever resolves last
wins even if it was issued first. Swap in LatestIssuedWins to ignore stale
responses by sequence number instead.

Failed ticks (transport error, malformed or invalid payload) are dropped:
the previous snapshot stays current and nothing is raised to the view.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional, Protocol

from ..errors import BookViewerError
from ..types import EMPTY_SNAPSHOT, Snapshot
from .decoder import decode_snapshot
from .interval import Interval
from .multiplexer import Multiplexer

logger = logging.getLogger(__name__)


class TickOutcome(str, Enum):
    APPLIED = "applied"
    DISCARDED = "discarded"  # Superseded per the acceptance policy
    DROPPED = "dropped"      # Request or decode failed


class AcceptancePolicy(Protocol):
    def accept(self, seq: int, applied_seq: int) -> bool:
        """Whether a response for tick `seq` may replace the one from `applied_seq`."""
        ...


class LastResolvedWins:
    """Every successful response overwrites the current snapshot."""

    def accept(self, seq: int, applied_seq: int) -> bool:
        return True


class LatestIssuedWins:
    """Only responses to requests issued after the applied one are accepted."""

    def accept(self, seq: int, applied_seq: int) -> bool:
        return seq > applied_seq


class SnapshotPoller:
    """
    Polls `path` every `interval_ms` through a shared Multiplexer.

    Usage:
        poller = SnapshotPoller(mux, "/api", on_snapshot=render)
        async with poller:
            ...  # render() is called with every accepted Snapshot
    """

    def __init__(
        self,
        mux: Multiplexer,
        path: str = "/",
        interval_ms: int = 250,
        policy: Optional[AcceptancePolicy] = None,
        on_snapshot: Optional[Callable[[Snapshot], None]] = None,
    ) -> None:
        self.mux = mux
        self.path = path
        self.policy: AcceptancePolicy = policy or LastResolvedWins()
        # Read at apply time, so reassigning takes effect without a restart
        self.on_snapshot = on_snapshot

        self._snapshot: Snapshot = EMPTY_SNAPSHOT
        self._issued_seq: int = 0
        self._applied_seq: int = 0
        self._in_flight: int = 0
        self._interval = Interval(interval_ms / 1000, self.tick)

    async def __aenter__(self) -> "SnapshotPoller":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def running(self) -> bool:
        return self._interval.running

    def start(self) -> None:
        self._interval.start()

    async def stop(self) -> None:
        await self._interval.stop()

    async def tick(self) -> TickOutcome:
        """Request, decode and (maybe) publish one snapshot. Never raises BookViewerError."""
        self._issued_seq += 1
        seq = self._issued_seq

        self._in_flight += 1
        try:
            snapshot = decode_snapshot(await self.mux.get(self.path))
        except BookViewerError as exc:
            logger.debug("Dropped tick #%d: %s", seq, exc)
            return TickOutcome.DROPPED
        finally:
            self._in_flight -= 1

        if not self.policy.accept(seq, self._applied_seq):
            logger.debug("Discarded tick #%d (applied #%d)", seq, self._applied_seq)
            return TickOutcome.DISCARDED

        self._snapshot = snapshot
        self._applied_seq = seq

        callback = self.on_snapshot
        if callback is not None:
            callback(snapshot)
        return TickOutcome.APPLIED
