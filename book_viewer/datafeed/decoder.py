"""
Strict decoding of service payloads into domain types.

Numeric fields arrive as decimal strings. Anything missing, mis-typed or
violating the book invariants is rejected with SchemaError instead of being
coerced.

Expected snapshot format:
    {last, best_bid, best_ask: str | null,
     bids: [{price: str, quantity: str}, ...],   # descending
     asks: [{price: str, quantity: str}, ...]}   # ascending
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, List, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from ..errors import SchemaError
from ..types import (
    OrderConfirmation,
    OrderStatus,
    PriceLevel,
    Side,
    Snapshot,
)


def _require_str(value: Any) -> Any:
    if not isinstance(value, str):
        raise ValueError("decimal fields must be sent as strings")
    return value


DecimalStr = Annotated[Decimal, BeforeValidator(_require_str)]


class LevelPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: DecimalStr = Field(gt=0)
    quantity: DecimalStr = Field(ge=0)


class SnapshotPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Optional without default: the key must be present, the value may be null
    last: Optional[DecimalStr]
    best_bid: Optional[DecimalStr]
    best_ask: Optional[DecimalStr]
    bids: List[LevelPayload]
    asks: List[LevelPayload]

    @field_validator("bids", "asks")
    @classmethod
    def check_unique_prices(cls, levels: List[LevelPayload]) -> List[LevelPayload]:
        prices = [level.price for level in levels]
        if len(set(prices)) != len(prices):
            raise ValueError("duplicate price levels")
        return levels


class ConfirmationPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    created_at: int
    side: Side
    price: DecimalStr
    quantity: DecimalStr
    filled: DecimalStr
    status: OrderStatus


def _levels(levels: List[LevelPayload]) -> tuple[PriceLevel, ...]:
    return tuple(PriceLevel(level.price, level.quantity) for level in levels)


def decode_snapshot(data: Any) -> Snapshot:
    """Convert a parsed snapshot body into a Snapshot. Raises SchemaError."""
    try:
        payload = SnapshotPayload.model_validate(data)
    except ValidationError as exc:
        raise SchemaError(f"Invalid snapshot payload: {exc}") from exc

    return Snapshot(
        last=payload.last,
        best_bid=payload.best_bid,
        best_ask=payload.best_ask,
        bids=_levels(payload.bids),
        asks=_levels(payload.asks),
    )


def decode_confirmation(data: Any) -> OrderConfirmation:
    """Convert a parsed order response into an OrderConfirmation. Raises SchemaError."""
    try:
        payload = ConfirmationPayload.model_validate(data)
    except ValidationError as exc:
        raise SchemaError(f"Invalid order confirmation: {exc}") from exc

    return OrderConfirmation(
        id=payload.id,
        created_at=payload.created_at,
        side=payload.side,
        price=payload.price,
        quantity=payload.quantity,
        filled=payload.filled,
        status=payload.status,
    )
