"""
Positions and the arithmetic to merge fills into them.
"""

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Optional

import pandas as pd

from optiback.common.asset import Asset
from optiback.common.size import Size
from optiback.common.timeframe import MIN_TIME


@dataclass(frozen=True)
class Position:
    """
    Position of a single asset. Positions are immutable, applying a fill creates a new Position.

    The size is exact (see Size); a negative size is a short position. `avg_price` is the average
    price paid and is only meaningful while the size is not zero.

    Attributes:
        asset: The asset of the position.
        size: Size of the position, not including the contract multiplier of the asset.
        avg_price: Average price paid, in the currency of the asset.
        mkt_price: Last known market price, defaults to `avg_price`.
        last_update: When the market price was last updated.
    """
    asset: Asset
    size: Size
    avg_price: float = 0.0
    mkt_price: Optional[float] = None
    last_update: pd.Timestamp = MIN_TIME

    def __post_init__(self):
        if not isinstance(self.size, Size):
            object.__setattr__(self, "size", Size(self.size))
        object.__setattr__(self, "avg_price", float(self.avg_price))
        if self.mkt_price is None:
            object.__setattr__(self, "mkt_price", self.avg_price)
        else:
            object.__setattr__(self, "mkt_price", float(self.mkt_price))

    @staticmethod
    def empty(asset: Asset) -> "Position":
        """Closed position for `asset`"""
        return Position(asset, Size.ZERO, 0.0, 0.0)

    def __add__(self, other: "Position") -> "Position":
        """
        Merge a fill (or another position) into this position.

        - If the sign of the size changes (opening from flat, closing, or reversing through zero) the
          result takes the average price of `other`; the old cost basis is gone.
        - If the position grows in the same direction, the average price is the size weighted mean.
        - If the position is reduced, the average price stays the same.

        The market price and last update always come from `other`. A merge that ends at size zero
        keeps the average price of `other` rather than 0.0, so use `Position.empty` when a flat position
        with a zero average price is needed. The SimBroker removes closed positions from the account.
        """
        if not isinstance(other, Position):
            return NotImplemented

        new_size = self.size + other.size

        if self.size.sign != new_size.sign:
            return replace(other, size=new_size)

        if abs(new_size) > abs(self.size):
            new_avg_price = (self.size * self.avg_price + other.size * other.avg_price) / float(new_size)
            return replace(other, size=new_size, avg_price=new_avg_price)

        return replace(other, size=new_size, avg_price=self.avg_price)

    def realized_pnl(self, update: "Position") -> float:
        """
        PNL that would be realized by applying `update` to this position. Neither position is changed,
        so this must be called before merging the update.
        """
        new_size = self.size + update.size
        if self.size.sign != new_size.sign:
            return self.asset.value(self.size, update.avg_price - self.avg_price)
        if abs(new_size) > abs(self.size):
            return 0.0
        return self.asset.value(update.size, self.avg_price - update.avg_price)

    @property
    def currency(self) -> str:
        return self.asset.currency

    @property
    def closed(self) -> bool:
        return self.size.is_zero

    @property
    def open(self) -> bool:
        return not self.size.is_zero

    @property
    def long(self) -> bool:
        return self.size.is_positive

    @property
    def short(self) -> bool:
        return self.size.is_negative

    @property
    def unrealized_pnl(self) -> float:
        """PNL based on the average price and the last known market price"""
        return self.asset.value(self.size, self.mkt_price - self.avg_price)

    @property
    def market_value(self) -> float:
        """Value at the last known market price, negative for short positions"""
        return self.asset.value(self.size, self.mkt_price)

    @property
    def exposure(self) -> float:
        """Gross exposure, positive for both long and short positions"""
        return abs(self.market_value)

    @property
    def total_cost(self) -> float:
        return self.asset.value(self.size, self.avg_price)


def market_value(positions: Iterable[Position]) -> Dict[str, float]:
    """Total market value of `positions` per currency"""
    result: Dict[str, float] = {}
    for position in positions:
        result[position.currency] = result.get(position.currency, 0.0) + position.market_value
    return result


def exposure(positions: Iterable[Position]) -> Dict[str, float]:
    """Total exposure of `positions` per currency"""
    result: Dict[str, float] = {}
    for position in positions:
        result[position.currency] = result.get(position.currency, 0.0) + position.exposure
    return result
