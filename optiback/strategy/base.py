import abc
from dataclasses import dataclass
from typing import Dict, List

from optiback.common.asset import Asset
from optiback.common.timeframe import Timeframe
from optiback.feeds.event import Event


@dataclass(frozen=True)
class Signal:
    """
    Advice to buy (positive rating) or sell (negative rating) an asset. The policy decides whether the
    advice is turned into orders.
    """
    asset: Asset
    rating: float
    tag: str = ""

    @property
    def is_buy(self) -> bool:
        return self.rating > 0

    @property
    def is_sell(self) -> bool:
        return self.rating < 0


class Strategy(abc.ABC):
    """
    Base class for all strategies. A strategy receives every event of a run and returns the signals
    it generates from it.
    """

    def start(self, run: str, timeframe: Timeframe) -> None:
        """
        Called once at the start of a run.
        """
        pass

    def end(self, run: str) -> None:
        """
        Called once at the end of a run.
        """
        pass

    def reset(self) -> None:
        """
        Clear any state so the strategy can be used for a new run.
        """
        pass

    def get_metrics(self) -> Dict[str, float]:
        """
        Metrics recorded by the strategy during the last step, logged together with the run metrics.
        """
        return {}

    @abc.abstractmethod
    def generate(self, event: Event) -> List[Signal]:
        """
        Called on every event of a run.

        Args:
            event (Event): The price actions at the current time.

        Returns:
            List[Signal]: The generated signals, can be empty.
        """
        pass
