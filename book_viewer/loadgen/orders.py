"""
Synthetic order flow.

Builds uniformly random orders and submits them one at a time: each POST is
awaited before the next order is built, so throughput is bounded by request
latency and nothing queues up client-side.

Performance notes:
- Random draws come from a numpy Generator (seedable for reproducible runs)
- Orders are fire-and-forget; confirmations are not tracked
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Callable, Iterator, Optional

import numpy as np

from ..datafeed.multiplexer import Multiplexer
from ..types import OrderRequest, Side

logger = logging.getLogger(__name__)

# Defaults: 18.00 - 24.00 in cents, 200 - 600 lots
DEFAULT_PRICE_RANGE = (1800, 2400)
DEFAULT_PRICE_SCALE = 100
DEFAULT_QUANTITY_RANGE = (200, 600)

_SIDES = (Side.BUY, Side.SELL)


class OrderGenerator:
    """
    Random order source.

    Ranges are inclusive integers; the drawn price is divided by
    `price_scale` (e.g. cents to currency units).

    Usage:
        gen = OrderGenerator(price_range=(40, 400), price_scale=4)
        async with Multiplexer(url) as mux:
            await gen.run(mux)  # Runs until interrupted
    """

    def __init__(
        self,
        price_range: tuple[int, int] = DEFAULT_PRICE_RANGE,
        price_scale: int = DEFAULT_PRICE_SCALE,
        quantity_range: tuple[int, int] = DEFAULT_QUANTITY_RANGE,
        seed: Optional[int] = None,
    ) -> None:
        if price_range[0] > price_range[1]:
            raise ValueError(f"Empty price range: {price_range}")
        if quantity_range[0] > quantity_range[1]:
            raise ValueError(f"Empty quantity range: {quantity_range}")
        if price_scale <= 0:
            raise ValueError(f"price_scale must be positive, got {price_scale}")

        self.price_range = price_range
        self.price_scale = Decimal(price_scale)
        self.quantity_range = quantity_range
        self._rng = np.random.default_rng(seed)

        self.submitted: int = 0

    def next_order(self) -> OrderRequest:
        side = _SIDES[int(self._rng.integers(0, 2))]
        price_units = int(self._rng.integers(*self.price_range, endpoint=True))
        quantity = int(self._rng.integers(*self.quantity_range, endpoint=True))
        return OrderRequest(
            side=side,
            price=Decimal(price_units) / self.price_scale,
            quantity=Decimal(quantity),
        )

    def __iter__(self) -> Iterator[OrderRequest]:
        while True:
            yield self.next_order()

    async def submit(
        self, mux: Multiplexer, order: OrderRequest, path: str = "/orders"
    ) -> Any:
        """POST one order and return the response body as-is."""
        body = await mux.post(path, order.to_payload())
        self.submitted += 1
        return body

    async def run(
        self,
        mux: Multiplexer,
        path: str = "/orders",
        limit: Optional[int] = None,
        on_confirmation: Optional[Callable[[Any], None]] = None,
    ) -> None:
        """
        Submit orders back to back.

        Runs forever unless `limit` is given. Transport and parse errors
        propagate and end the loop.
        """
        count = 0
        for order in self:
            if limit is not None and count >= limit:
                break
            body = await self.submit(mux, order, path)
            count += 1
            if on_confirmation is not None:
                on_confirmation(body)

        logger.info("Submitted %d orders", count)
