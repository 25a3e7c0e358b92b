from typing import Dict

from optiback.backtester.account import Account
from optiback.backtester.position import exposure
from optiback.feeds.event import Event
from optiback.metrics.base import Metric


class AccountMetric(Metric):
    """
    Key values of the account:

    - account.equity
    - account.cash
    - account.positions (number of open positions)
    - account.exposure (gross exposure in the account currency)
    - account.realized_pnl
    - account.trades
    """

    def calculate(self, account: Account, event: Event) -> Dict[str, float]:
        return {
            "account.equity": account.equity,
            "account.cash": account.cash,
            "account.positions": float(len(account.positions)),
            "account.exposure": exposure(account.positions.values()).get(account.currency, 0.0),
            "account.realized_pnl": account.realized_pnl,
            "account.trades": float(len(account.trades)),
        }
