"""
Order book view model.

Pure derivation from Snapshot to OrderBookView: no I/O, no state. Rebuilt on
every accepted snapshot, so it must stay cheap.

Display layout (top to bottom):
    asks  - the `depth` lowest asks, highest first, best ask last
    spread / mid row
    bids  - the `depth` highest bids, best bid first
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..types import OrderBookView, Snapshot

# Levels shown on each side of the spread
DEFAULT_DEPTH = 5


def spread(best_bid: Optional[Decimal], best_ask: Optional[Decimal]) -> Optional[Decimal]:
    """best_ask - best_bid, or None if either side is empty."""
    if best_bid is None or best_ask is None:
        return None
    return best_ask - best_bid


def mid_price(best_bid: Optional[Decimal], best_ask: Optional[Decimal]) -> Optional[Decimal]:
    """(best_ask + best_bid) / 2, or None if either side is empty."""
    if best_bid is None or best_ask is None:
        return None
    return (best_ask + best_bid) / 2


def build_view(snapshot: Snapshot, depth: int = DEFAULT_DEPTH) -> OrderBookView:
    """
    Build the ladder view for one snapshot.

    Levels beyond `depth` on either side are dropped, not aggregated.
    """
    return OrderBookView(
        last=snapshot.last,
        bids=snapshot.bids[:depth],
        asks=tuple(reversed(snapshot.asks[:depth])),
        spread=spread(snapshot.best_bid, snapshot.best_ask),
        mid=mid_price(snapshot.best_bid, snapshot.best_ask),
    )
