import abc
from typing import Dict, List

from optiback.backtester.account import Account
from optiback.backtester.orders import MarketOrder
from optiback.feeds.event import Event
from optiback.strategy.base import Signal


class Policy(abc.ABC):
    """
    Turns the signals of a strategy into orders, taking the current account into account.

    A policy can record metrics with `record`. They are only kept when `enable_metrics` is set, are
    prefixed with `prefix` and are logged together with the other metrics of the step.
    """

    prefix = "policy."

    def __init__(self, enable_metrics: bool = False):
        self.enable_metrics = enable_metrics
        self._metrics: Dict[str, float] = {}

    @abc.abstractmethod
    def act(self, signals: List[Signal], account: Account, event: Event) -> List[MarketOrder]:
        pass

    def record(self, key: str, value: float) -> None:
        if not self.enable_metrics:
            return
        self._metrics[f"{self.prefix}{key}"] = float(value)

    def get_metrics(self) -> Dict[str, float]:
        """Metrics recorded since the last call, cleared once returned"""
        result = self._metrics
        self._metrics = {}
        return result

    def reset(self) -> None:
        self._metrics = {}
