import abc
from typing import Dict

from optiback.backtester.account import Account
from optiback.feeds.event import Event


class Metric(abc.ABC):
    """
    Calculates named values at every step of a run, for example the equity of the account.
    """

    @abc.abstractmethod
    def calculate(self, account: Account, event: Event) -> Dict[str, float]:
        pass

    def reset(self) -> None:
        pass
