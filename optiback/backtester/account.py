from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from optiback.backtester.position import Position, market_value
from optiback.common.asset import Asset
from optiback.common.size import Size


@dataclass(frozen=True)
class Trade:
    """Record of an executed order"""
    time: pd.Timestamp
    asset: Asset
    size: Size
    price: float
    fee: float = 0.0
    pnl: float = 0.0
    tag: str = ""


@dataclass
class Account:
    """
    Snapshot of a broker account. A new instance is created on every sync with the broker.

    Attributes:
        time: Time of the last sync.
        currency: Base currency of the account.
        cash: Cash balance.
        positions: Open positions by asset.
        trades: All executed trades.
        realized_pnl: Total PNL realized by the trades, before fees.
    """
    time: pd.Timestamp
    currency: str
    cash: float
    positions: Dict[Asset, Position] = field(default_factory=dict)
    trades: List[Trade] = field(default_factory=list)
    realized_pnl: float = 0.0

    @property
    def equity(self) -> float:
        """Cash plus the market value of all open positions"""
        return self.cash + market_value(self.positions.values()).get(self.currency, 0.0)

    @property
    def fees(self) -> float:
        return sum(trade.fee for trade in self.trades)

    def get_position(self, asset: Asset) -> Position:
        return self.positions.get(asset, Position.empty(asset))
