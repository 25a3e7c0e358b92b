from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from optiback.common.asset import Asset


@dataclass(frozen=True)
class PriceBar:
    """OHLCV prices of one asset for one period"""
    asset: Asset
    open: float
    high: float
    low: float
    close: float
    volume: float = float("nan")

    def get_price(self, price_type: str = "DEFAULT") -> float:
        """
        Price of the given type. "DEFAULT" and "CLOSE" return the close, "OPEN", "HIGH" and "LOW" the
        corresponding value and "TYPICAL" the mean of high, low and close.
        """
        price_type = price_type.upper()
        if price_type in ("DEFAULT", "CLOSE"):
            return self.close
        if price_type == "OPEN":
            return self.open
        if price_type == "HIGH":
            return self.high
        if price_type == "LOW":
            return self.low
        if price_type == "TYPICAL":
            return (self.high + self.low + self.close) / 3.0
        raise ValueError(f"Unsupported price type: {price_type}")


@dataclass(frozen=True)
class Event:
    """All price actions that happened at a single moment in time"""
    time: pd.Timestamp
    actions: List[PriceBar] = field(default_factory=list)

    @property
    def prices(self) -> Dict[Asset, PriceBar]:
        """The price actions by asset. If an asset occurs more than once, the last action wins."""
        return {action.asset: action for action in self.actions}

    def get_price(self, asset: Asset, price_type: str = "DEFAULT") -> float:
        return self.prices[asset].get_price(price_type)

    @staticmethod
    def empty(time: pd.Timestamp) -> "Event":
        return Event(time, [])
