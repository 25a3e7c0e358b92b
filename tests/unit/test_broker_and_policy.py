"""
Tests for the SimBroker and the FlexPolicy

Checked invariants:
1. Orders execute at the close price of the next event that has a price for the asset
2. Cash, positions and realized PNL stay consistent through open, reduce and close
3. The policy sizes orders as a fraction of equity, rounded down
"""

import pandas as pd
import pytest

from optiback.backtester.account import Account
from optiback.backtester.orders import MarketOrder
from optiback.backtester.position import Position
from optiback.backtester.sim_broker import SimBroker
from optiback.common.asset import Asset
from optiback.common.size import Size
from optiback.configs.backtester.sim_broker import SimBrokerConfig
from optiback.configs.policies.flex_policy import FlexPolicyConfig
from optiback.feeds.event import Event, PriceBar
from optiback.policies.flex_policy import FlexPolicy
from optiback.strategy.base import Signal

ASSET = Asset("TEST")
OTHER = Asset("OTHER")


def _event(day: int, price: float, asset: Asset = ASSET) -> Event:
    time = pd.Timestamp("2020-01-01", tz="UTC") + pd.Timedelta(days=day)
    return Event(time, [PriceBar(asset, price, price, price, price, 1000.0)])


# =============================================================================
# TESTS: SimBroker
# =============================================================================


class TestSimBroker:
    """Order execution and account bookkeeping."""

    @pytest.fixture
    def broker(self) -> SimBroker:
        return SimBroker(SimBrokerConfig(initial_deposit=10_000.0))

    def test_initial_account(self, broker):
        account = broker.sync()
        assert account.cash == 10_000.0
        assert account.equity == 10_000.0
        assert account.positions == {}
        assert account.currency == "USD"

    def test_round_trip(self, broker):
        broker.sync(_event(0, 100.0))
        broker.place([MarketOrder(ASSET, 10)])

        account = broker.sync(_event(1, 110.0))
        position = account.get_position(ASSET)
        assert position.size == Size(10)
        assert position.avg_price == 110.0
        assert account.cash == pytest.approx(8_900.0)
        assert account.equity == pytest.approx(10_000.0)

        account = broker.sync(_event(2, 115.0))
        assert account.equity == pytest.approx(10_050.0)

        broker.place([MarketOrder(ASSET, -10)])
        account = broker.sync(_event(3, 120.0))
        assert account.positions == {}
        assert account.cash == pytest.approx(10_100.0)
        assert account.realized_pnl == pytest.approx(100.0)
        assert [t.size for t in account.trades] == [Size(10), Size(-10)]
        assert account.trades[-1].pnl == pytest.approx(100.0)

    def test_partial_close_keeps_avg_price(self, broker):
        broker.place([MarketOrder(ASSET, 10)])
        broker.sync(_event(0, 100.0))
        broker.place([MarketOrder(ASSET, -4)])
        account = broker.sync(_event(1, 105.0))
        position = account.get_position(ASSET)
        assert position.size == Size(6)
        assert position.avg_price == 100.0
        assert account.realized_pnl == pytest.approx(20.0)

    def test_fees_and_slippage(self):
        broker = SimBroker(SimBrokerConfig(initial_deposit=10_000.0, fee_rate=0.01, slippage=0.01))
        broker.place([MarketOrder(ASSET, 10)])
        account = broker.sync(_event(0, 100.0))
        trade = account.trades[0]
        assert trade.price == pytest.approx(101.0)
        assert trade.fee == pytest.approx(10.1)
        assert account.cash == pytest.approx(10_000.0 - 1010.0 - 10.1)
        assert account.fees == pytest.approx(10.1)

    def test_order_without_price_stays_pending(self, broker):
        broker.place([MarketOrder(ASSET, 5)])
        account = broker.sync(_event(0, 50.0, OTHER))
        assert account.trades == []

        account = broker.sync(_event(1, 100.0))
        assert account.get_position(ASSET).size == Size(5)

    def test_short_selling_not_allowed(self):
        broker = SimBroker(SimBrokerConfig(allow_short_selling=False))
        broker.place([MarketOrder(ASSET, -5)])
        account = broker.sync(_event(0, 100.0))
        assert account.trades == []
        assert account.positions == {}

    def test_short_selling(self, broker):
        broker.place([MarketOrder(ASSET, -5)])
        broker.sync(_event(0, 100.0))
        broker.place([MarketOrder(ASSET, 5)])
        account = broker.sync(_event(1, 90.0))
        assert account.realized_pnl == pytest.approx(50.0)
        assert account.cash == pytest.approx(10_050.0)

    def test_unsupported_order(self, broker):
        with pytest.raises(TypeError):
            broker.place(["buy 10"])

    def test_reset(self, broker):
        broker.place([MarketOrder(ASSET, 10)])
        broker.sync(_event(0, 100.0))
        broker.reset()
        account = broker.sync()
        assert account.cash == 10_000.0
        assert account.trades == []


# =============================================================================
# TESTS: FlexPolicy
# =============================================================================


class TestFlexPolicy:
    """Turning signals into orders."""

    @pytest.fixture
    def account(self) -> Account:
        return Account(time=pd.Timestamp("2020-01-01", tz="UTC"), currency="USD", cash=1_000_000.0)

    def test_buy(self, account):
        orders = FlexPolicy().act([Signal(ASSET, 1.0)], account, _event(0, 100.0))
        assert len(orders) == 1
        assert orders[0].size == Size(100)
        assert orders[0].buy

    def test_sell_without_position(self, account):
        assert FlexPolicy().act([Signal(ASSET, -1.0)], account, _event(0, 100.0)) == []

    def test_sell_closes_long(self, account):
        account.positions[ASSET] = Position(ASSET, Size(30), 100.0)
        orders = FlexPolicy().act([Signal(ASSET, -1.0)], account, _event(0, 100.0))
        assert [o.size for o in orders] == [Size(-30)]

    def test_buy_when_long_is_ignored(self, account):
        account.positions[ASSET] = Position(ASSET, Size(30), 100.0)
        assert FlexPolicy().act([Signal(ASSET, 1.0)], account, _event(0, 100.0)) == []

    def test_shorting(self, account):
        policy = FlexPolicy(FlexPolicyConfig(shorting=True))
        orders = policy.act([Signal(ASSET, -1.0)], account, _event(0, 100.0))
        assert [o.size for o in orders] == [Size(-100)]

    def test_fractions(self, account):
        assert FlexPolicy().calculate_size(ASSET, 10_000.0, 300.0) == Size(33)
        policy = FlexPolicy(FlexPolicyConfig(fractions=2))
        assert policy.calculate_size(ASSET, 10_000.0, 300.0) == Size("33.33")

    def test_no_price(self, account):
        assert FlexPolicy().act([Signal(ASSET, 1.0)], account, _event(0, 100.0, OTHER)) == []

    def test_min_price(self, account):
        policy = FlexPolicy(FlexPolicyConfig(min_price=5.0))
        assert policy.act([Signal(ASSET, 1.0)], account, _event(0, 1.0)) == []

    def test_no_orders_without_equity(self):
        broke = Account(time=pd.Timestamp("2020-01-01", tz="UTC"), currency="USD", cash=-500.0)
        assert FlexPolicy().act([Signal(ASSET, 1.0)], broke, _event(0, 100.0)) == []
        policy = FlexPolicy(FlexPolicyConfig(shorting=True))
        assert policy.act([Signal(ASSET, -1.0)], broke, _event(0, 100.0)) == []

    def test_records_metrics(self, account):
        policy = FlexPolicy(FlexPolicyConfig(enable_metrics=True))
        policy.act([Signal(ASSET, 1.0), Signal(OTHER, 1.0)], account, _event(0, 100.0))
        assert policy.get_metrics() == {"policy.signals": 2.0, "policy.orders": 1.0}
        assert policy.get_metrics() == {}

    def test_metrics_disabled_by_default(self, account):
        policy = FlexPolicy()
        policy.act([Signal(ASSET, 1.0)], account, _event(0, 100.0))
        assert policy.get_metrics() == {}

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            FlexPolicyConfig(order_percentage=0.0)
        with pytest.raises(ValueError):
            FlexPolicyConfig(unknown=1)
