"""
Data types for Book Viewer.

Notes:
- NamedTuple for immutable, memory-efficient structures
- Prices and quantities are Decimal; the service sends them as decimal strings
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import NamedTuple, Optional


class Side(str, Enum):
    BUY = "Buy"
    SELL = "Sell"


class OrderStatus(str, Enum):
    OPEN = "Open"
    FILLED = "Filled"
    PARTIALLY_FILLED = "PartiallyFilled"


class PriceLevel(NamedTuple):
    """Aggregate resting quantity at one price."""
    price: Decimal
    quantity: Decimal


class Snapshot(NamedTuple):
    """
    Complete order book as served by the matching service.

    Replaces the previous snapshot wholesale; there is no incremental merge.
    """
    last: Optional[Decimal]
    best_bid: Optional[Decimal]
    best_ask: Optional[Decimal]
    bids: tuple[PriceLevel, ...]  # Descending by price (best bid first)
    asks: tuple[PriceLevel, ...]  # Ascending by price (best ask first)


EMPTY_SNAPSHOT = Snapshot(last=None, best_bid=None, best_ask=None, bids=(), asks=())


class OrderRequest(NamedTuple):
    """Order as submitted by the client. The service owns validation."""
    side: Side
    price: Decimal
    quantity: Decimal

    def to_payload(self) -> dict:
        """JSON body for POST /orders (price and quantity as numbers)."""
        return {
            "side": self.side.value,
            "price": self.price,
            "quantity": self.quantity,
        }


class OrderConfirmation(NamedTuple):
    """Order as acknowledged by the service."""
    id: int
    created_at: int
    side: Side
    price: Decimal
    quantity: Decimal
    filled: Decimal
    status: OrderStatus


class OrderBookView(NamedTuple):
    """
    Everything the ladder needs to render one frame.

    Derived from a Snapshot; spread and mid are None whenever either best
    price is missing.
    """
    last: Optional[Decimal]
    bids: tuple[PriceLevel, ...]  # Best bid first
    asks: tuple[PriceLevel, ...]  # Highest shown ask first, best ask last
    spread: Optional[Decimal]
    mid: Optional[Decimal]
