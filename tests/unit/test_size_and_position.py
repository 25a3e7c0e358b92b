"""
Tests for Size and the Position/PNL arithmetic

Checked invariants:
1. Size arithmetic is exact (0.1 + 0.2 == 0.3)
2. Growing a position gives the size weighted average price
3. Reducing a position keeps the average price and realizes PNL
4. Closing or reversing through zero resets the cost basis to the fill price
5. realized_pnl + merge keep cash + cost basis consistent
"""

from decimal import Decimal

import pandas as pd
import pytest

from optiback.backtester.position import Position, exposure, market_value
from optiback.common.asset import Asset
from optiback.common.size import Size


# =============================================================================
# TESTS: Size
# =============================================================================


class TestSize:
    """Exact signed quantities."""

    def test_exact_addition(self):
        assert Size(0.1) + Size(0.2) == Size("0.3")
        assert Size("0.1") + 2 == Size("2.1")

    def test_construction(self):
        assert Size(10).value == Decimal(10)
        assert Size(Decimal("1.5")) == Size("1.5")
        assert Size(Size(3)) == Size(3)
        with pytest.raises(TypeError):
            Size(True)

    def test_sign_and_abs(self):
        assert Size(-3).sign == -1
        assert Size(0).sign == 0
        assert Size("0.5").sign == 1
        assert abs(Size(-3)) == Size(3)
        assert -Size(3) == Size(-3)

    def test_multiplication_with_float_returns_float(self):
        result = Size("2.5") * 100.0
        assert isinstance(result, float)
        assert result == 250.0
        assert Size(3) * 2 == Size(6)

    def test_ordering(self):
        assert Size(1) < Size(2)
        assert Size(2) > 1
        assert Size("-0.5") < 0
        assert max(Size(1), Size(5), Size(3)) == Size(5)

    def test_fractional(self):
        assert Size("1.5").is_fractional
        assert not Size("2.000").is_fractional

    def test_str_and_hash(self):
        assert str(Size("1.50")) == "1.5"
        assert str(Size("-0")) == "0"
        assert hash(Size("1.50")) == hash(Size("1.5"))

    def test_float_addition_not_supported(self):
        with pytest.raises(TypeError):
            Size(1) + 0.5


# =============================================================================
# TESTS: Position
# =============================================================================


class TestPosition:
    """Average price and realized PNL when merging fills into a position."""

    @pytest.fixture
    def asset(self) -> Asset:
        return Asset("TEST")

    @pytest.fixture
    def long_position(self, asset) -> Position:
        """10 units bought at 100"""
        return Position(asset, Size(10), 100.0)

    def test_market_price_defaults_to_avg_price(self, long_position):
        assert long_position.mkt_price == 100.0
        assert long_position.unrealized_pnl == 0.0

    def test_open_from_empty(self, asset):
        empty = Position.empty(asset)
        fill = Position(asset, Size(3), 50.0)
        assert empty.closed
        assert empty.realized_pnl(fill) == 0.0

        merged = empty + fill
        assert merged.size == Size(3)
        assert merged.avg_price == 50.0
        assert merged.long

    def test_increase_long(self, asset, long_position):
        fill = Position(asset, Size(10), 110.0)
        assert long_position.realized_pnl(fill) == 0.0

        merged = long_position + fill
        assert merged.size == Size(20)
        assert merged.avg_price == pytest.approx(105.0)

    def test_increase_short(self, asset):
        short = Position(asset, Size(-10), 100.0)
        merged = short + Position(asset, Size(-10), 80.0)
        assert merged.size == Size(-20)
        assert merged.avg_price == pytest.approx(90.0)
        assert merged.short

    def test_reduce_keeps_avg_price(self, asset, long_position):
        fill = Position(asset, Size(-4), 120.0)
        assert long_position.realized_pnl(fill) == pytest.approx(80.0)

        merged = long_position + fill
        assert merged.size == Size(6)
        assert merged.avg_price == 100.0
        assert merged.mkt_price == 120.0

    def test_close(self, asset, long_position):
        fill = Position(asset, Size(-10), 90.0)
        assert long_position.realized_pnl(fill) == pytest.approx(-100.0)
        merged = long_position + fill
        assert merged.closed
        assert merged.size == Size.ZERO
        # the closing fill's price is kept, an empty position has none
        assert merged.avg_price == 90.0
        assert Position.empty(asset).avg_price == 0.0

    def test_reverse_through_zero(self, asset, long_position):
        fill = Position(asset, Size(-15), 90.0)
        assert long_position.realized_pnl(fill) == pytest.approx(-100.0)

        merged = long_position + fill
        assert merged.size == Size(-5)
        assert merged.avg_price == 90.0

    def test_short_cover_pnl(self, asset):
        short = Position(asset, Size(-10), 100.0)
        fill = Position(asset, Size(10), 80.0)
        assert short.realized_pnl(fill) == pytest.approx(200.0)

    def test_update_fields_come_from_fill(self, asset, long_position):
        time = pd.Timestamp("2020-01-02", tz="UTC")
        fill = Position(asset, Size(1), 101.0, 102.0, time)
        merged = long_position + fill
        assert merged.mkt_price == 102.0
        assert merged.last_update == time

    def test_fractional_sizes_stay_exact(self, asset):
        position = Position.empty(asset)
        for _ in range(10):
            position = position + Position(asset, Size("0.1"), 10.0)
        assert position.size == Size(1)

    def test_cost_basis_consistency(self, asset):
        """Realized PNL plus the remaining cost basis equals the total cash flow of the fills"""
        fills = [
            Position(asset, Size(10), 100.0),
            Position(asset, Size(5), 110.0),
            Position(asset, Size(-8), 120.0),
            Position(asset, Size(-12), 95.0),
            Position(asset, Size(5), 90.0),
        ]
        position = Position.empty(asset)
        realized = 0.0
        cash = 0.0
        for fill in fills:
            realized += position.realized_pnl(fill)
            position = position + fill
            cash -= fill.total_cost

        assert position.closed
        assert realized == pytest.approx(cash)

    def test_values(self, asset):
        position = Position(asset, Size(10), 100.0, 110.0)
        assert position.unrealized_pnl == pytest.approx(100.0)
        assert position.market_value == pytest.approx(1100.0)
        assert position.total_cost == pytest.approx(1000.0)

        short = Position(asset, Size(-10), 100.0, 110.0)
        assert short.market_value == pytest.approx(-1100.0)
        assert short.exposure == pytest.approx(1100.0)
        assert short.unrealized_pnl == pytest.approx(-100.0)

    def test_multiplier(self):
        future = Asset("ES", type="FUTURE", multiplier=50.0)
        position = Position(future, Size(2), 4000.0, 4010.0)
        assert position.unrealized_pnl == pytest.approx(1000.0)

    def test_totals_per_currency(self, asset):
        euro = Asset("SAP", currency="EUR")
        positions = [
            Position(asset, Size(10), 100.0),
            Position(asset, Size(-5), 10.0),
            Position(euro, Size(2), 50.0),
        ]
        assert market_value(positions) == {"USD": pytest.approx(950.0), "EUR": pytest.approx(100.0)}
        assert exposure(positions) == {"USD": pytest.approx(1050.0), "EUR": pytest.approx(100.0)}
