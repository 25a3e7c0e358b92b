from decimal import ROUND_DOWN, Decimal
from typing import List, Optional

from optiback.backtester.account import Account
from optiback.backtester.orders import MarketOrder
from optiback.common.asset import Asset
from optiback.common.size import Size
from optiback.configs.policies.flex_policy import FlexPolicyConfig
from optiback.feeds.event import Event
from optiback.policies.base import Policy
from optiback.strategy.base import Signal
from utils.logger import get_logger

logger = get_logger(__name__)


class FlexPolicy(Policy):
    """
    Policy that allocates a fixed fraction of the account equity to every new position.

    - A buy signal opens a long position, or reverses a short one. It is ignored if already long.
    - A sell signal closes a long position. With shorting enabled it opens (or reverses into) a short
      position instead. It is ignored if already short.
    - No orders are created while the account equity is zero or negative.

    With `enable_metrics` set in the config, the number of signals and orders of every step are
    recorded as `policy.signals` and `policy.orders`.
    """

    def __init__(self, config: Optional[FlexPolicyConfig] = None):
        self.config = config or FlexPolicyConfig()
        super().__init__(enable_metrics=self.config.enable_metrics)

    def calculate_size(self, asset: Asset, amount: float, price: float) -> Size:
        """Largest size that costs at most `amount` at `price`, rounded down to the allowed fractions"""
        unit_value = asset.value(1, price)
        if unit_value <= 0:
            return Size.ZERO
        units = Decimal(repr(amount / unit_value))
        step = Decimal(1).scaleb(-self.config.fractions)
        return Size(units.quantize(step, rounding=ROUND_DOWN))

    def act(self, signals: List[Signal], account: Account, event: Event) -> List[MarketOrder]:
        self.record("signals", len(signals))
        if account.equity <= 0:
            logger.warning(f"No orders created at {event.time}, account equity is {account.equity}")
            self.record("orders", 0)
            return []

        orders = []
        prices = event.prices
        amount = account.equity * self.config.order_percentage

        for signal in signals:
            bar = prices.get(signal.asset)
            if bar is None or bar.close <= self.config.min_price or bar.close <= 0:
                continue

            current = account.get_position(signal.asset).size
            target = self.calculate_size(signal.asset, amount, bar.close)

            if signal.is_buy:
                if current.is_positive:
                    continue
                size = target - current
            elif signal.is_sell:
                if current.is_negative:
                    continue
                if self.config.shorting:
                    size = -target - current
                else:
                    size = -current
            else:
                continue

            if not size.is_zero:
                orders.append(MarketOrder(signal.asset, size, tag=signal.tag))

        self.record("orders", len(orders))
        if orders:
            logger.debug(f"{len(orders)} order(s) created at {event.time}")
        return orders
