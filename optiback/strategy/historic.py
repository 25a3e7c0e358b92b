from collections import deque
from typing import Deque, Dict, List, Optional

import numpy as np

from optiback.common.asset import Asset
from optiback.feeds.event import Event
from optiback.strategy.base import Signal, Strategy


class HistoricPriceStrategy(Strategy):
    """
    Base class for strategies that look at the last `period` prices of an asset. Subclasses override
    either `generate_signal` for full control over the signal, or `generate_rating` if a rating is
    enough.

    Args:
        period: Number of prices to keep per asset.
        price_type: Which price of a price bar to use, default is the close.
    """

    def __init__(self, period: int, price_type: str = "DEFAULT"):
        if period < 1:
            raise ValueError(f"period should be at least 1, found {period}")
        self.period = period
        self.price_type = price_type
        self._history: Dict[Asset, Deque[float]] = {}

    def generate(self, event: Event) -> List[Signal]:
        result = []
        for asset, action in event.prices.items():
            history = self._history.setdefault(asset, deque(maxlen=self.period))
            history.append(action.get_price(self.price_type))
            if len(history) == self.period:
                signal = self.generate_signal(asset, np.asarray(history, dtype=float))
                if signal is not None:
                    result.append(signal)
        return result

    def generate_signal(self, asset: Asset, data: np.ndarray) -> Optional[Signal]:
        rating = self.generate_rating(data)
        return Signal(asset, rating) if rating is not None else None

    def generate_rating(self, data: np.ndarray) -> Optional[float]:
        raise NotImplementedError("Override generate_signal or generate_rating")

    def reset(self) -> None:
        self._history.clear()
