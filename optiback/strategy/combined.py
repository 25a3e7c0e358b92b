from typing import Dict, List

from optiback.common.timeframe import Timeframe
from optiback.feeds.event import Event
from optiback.strategy.base import Signal, Strategy


class CombinedStrategy(Strategy):
    """
    Runs several strategies one after the other and returns all of their signals. Conflicting signals,
    like a buy and a sell for the same asset, are not filtered.
    """

    def __init__(self, *strategies: Strategy):
        self.strategies = list(strategies)

    def generate(self, event: Event) -> List[Signal]:
        signals = []
        for strategy in self.strategies:
            signals.extend(strategy.generate(event))
        return signals

    def start(self, run: str, timeframe: Timeframe) -> None:
        for strategy in self.strategies:
            strategy.start(run, timeframe)

    def end(self, run: str) -> None:
        for strategy in self.strategies:
            strategy.end(run)

    def reset(self) -> None:
        for strategy in self.strategies:
            strategy.reset()

    def get_metrics(self) -> Dict[str, float]:
        result = {}
        for strategy in self.strategies:
            result.update(strategy.get_metrics())
        return result
