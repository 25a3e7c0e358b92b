from typing import Dict, List

from optiback.common.asset import Asset
from optiback.feeds.event import Event
from optiback.strategy.base import Signal, Strategy


class _EMACrossover:
    """Fast and slow exponential moving averages of a single price series"""

    def __init__(self, fast: int, slow: int, smoothing: float):
        self.fast_alpha = smoothing / (fast + 1)
        self.slow_alpha = smoothing / (slow + 1)
        self.fast = 0.0
        self.slow = 0.0
        self.steps = 0

    def add(self, price: float) -> None:
        if self.steps == 0:
            self.fast = price
            self.slow = price
        else:
            self.fast = self.fast_alpha * price + (1 - self.fast_alpha) * self.fast
            self.slow = self.slow_alpha * price + (1 - self.slow_alpha) * self.slow
        self.steps += 1

    @property
    def rising(self) -> bool:
        return self.fast > self.slow


class EMAStrategy(Strategy):
    """
    Crossover of a fast and a slow exponential moving average. Generates a buy signal when the fast EMA
    crosses above the slow one and a sell signal when it crosses below. No signals are generated during
    the first `slow` prices of an asset.

    Args:
        fast: Period of the fast EMA.
        slow: Period of the slow EMA.
        smoothing: EMA smoothing factor.
        price_type: Which price of a price bar to use.
    """

    def __init__(self, fast: int = 12, slow: int = 26, smoothing: float = 2.0, price_type: str = "DEFAULT"):
        if not 0 < fast < slow:
            raise ValueError(f"Expected 0 < fast < slow, found fast={fast} slow={slow}")
        self.fast = fast
        self.slow = slow
        self.smoothing = smoothing
        self.price_type = price_type
        self._calculators: Dict[Asset, _EMACrossover] = {}
        self._previous: Dict[Asset, bool] = {}

    def generate(self, event: Event) -> List[Signal]:
        result = []
        for asset, action in event.prices.items():
            calculator = self._calculators.get(asset)
            if calculator is None:
                calculator = _EMACrossover(self.fast, self.slow, self.smoothing)
                self._calculators[asset] = calculator
            calculator.add(action.get_price(self.price_type))

            if calculator.steps < self.slow:
                continue

            rising = calculator.rising
            previous = self._previous.get(asset)
            self._previous[asset] = rising
            if previous is not None and previous != rising:
                result.append(Signal(asset, 1.0 if rising else -1.0, tag=f"ema-{self.fast}-{self.slow}"))
        return result

    def reset(self) -> None:
        self._calculators.clear()
        self._previous.clear()
