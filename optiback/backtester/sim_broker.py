"""
Simulated broker used for back testing.
"""

from dataclasses import replace
from typing import Dict, List, Optional

import pandas as pd

from optiback.backtester.account import Account, Trade
from optiback.backtester.broker import Broker
from optiback.backtester.orders import MarketOrder
from optiback.backtester.position import Position
from optiback.common.asset import Asset
from optiback.common.timeframe import MIN_TIME
from optiback.configs.backtester.sim_broker import SimBrokerConfig
from optiback.feeds.event import Event
from utils.logger import get_logger

logger = get_logger(__name__)


class SimBroker(Broker):
    """
    Broker that simulates order execution against the prices in the events of a feed. This is the only
    broker that can be used for back testing and optimization, since its results are deterministic.

    Orders placed during a step are executed at the close price of the next event that contains a
    price for the asset, adjusted for slippage. Orders for assets without a price stay pending.
    """

    def __init__(self, config: Optional[SimBrokerConfig] = None):
        self.config = config or SimBrokerConfig()
        self.reset()

    def reset(self) -> None:
        self._cash = self.config.initial_deposit
        self._positions: Dict[Asset, Position] = {}
        self._trades: List[Trade] = []
        self._pending: List[MarketOrder] = []
        self._realized_pnl = 0.0
        self._time = MIN_TIME

    def place(self, orders: List[MarketOrder]) -> None:
        for order in orders:
            if not isinstance(order, MarketOrder):
                logger.error(f"Unsupported order type: {type(order).__name__}")
                raise TypeError(f"Unsupported order type: {type(order).__name__}")
            self._pending.append(order)

    def sync(self, event: Optional[Event] = None) -> Account:
        if event is not None:
            self._time = event.time
            prices = event.prices
            still_pending = []
            for order in self._pending:
                bar = prices.get(order.asset)
                if bar is None:
                    still_pending.append(order)
                else:
                    self._execute(order, bar.close, event.time)
            self._pending = still_pending
            self._update_market_prices(event)

        return Account(
            time=self._time,
            currency=self.config.currency,
            cash=self._cash,
            positions=dict(self._positions),
            trades=list(self._trades),
            realized_pnl=self._realized_pnl
        )

    def _execute(self, order: MarketOrder, price: float, time: pd.Timestamp) -> None:
        if order.size.is_zero:
            return

        current = self._positions.get(order.asset, Position.empty(order.asset))
        if not self.config.allow_short_selling and (current.size + order.size).is_negative:
            logger.warning(f"Rejected order {order}: short selling is not allowed")
            return

        execution_price = self.config.execution_price(price, order.buy)
        fill = Position(order.asset, order.size, execution_price, price, time)

        pnl = current.realized_pnl(fill)
        updated = current + fill
        trade_value = order.asset.value(order.size, execution_price)
        fee = self.config.calculate_fee(trade_value)

        self._cash -= trade_value + fee
        self._realized_pnl += pnl
        if updated.closed:
            self._positions.pop(order.asset, None)
        else:
            self._positions[order.asset] = updated

        self._trades.append(Trade(time, order.asset, order.size, execution_price, fee, pnl, order.tag))
        logger.debug(f"Executed {order.size} {order.asset} at {execution_price:.4f}, pnl={pnl:.2f}")

    def _update_market_prices(self, event: Event) -> None:
        prices = event.prices
        for asset, position in self._positions.items():
            bar = prices.get(asset)
            if bar is not None:
                self._positions[asset] = replace(position, mkt_price=bar.close, last_update=event.time)
