import abc
from typing import List, Optional

from optiback.backtester.account import Account
from optiback.backtester.orders import MarketOrder
from optiback.feeds.event import Event


class Broker(abc.ABC):
    """
    Interface for brokers, both simulated and real.
    """

    @abc.abstractmethod
    def sync(self, event: Optional[Event] = None) -> Account:
        """
        Synchronize with the broker and return the latest account state. The simulated broker uses the
        `event` to execute pending orders and to update market prices.
        """
        pass

    @abc.abstractmethod
    def place(self, orders: List[MarketOrder]) -> None:
        """Place new orders"""
        pass

    def reset(self) -> None:
        """Reset to the initial state. The default is to do nothing."""
        pass
