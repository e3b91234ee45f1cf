"""
Unit tests for the risk engine.

Covers position sizing, the 50/30/20 take-profit split, profit potential
and the rounding applied at the module boundary.
"""

import math

import pytest

from trade_discipline.risk_management.risk_engine import (
    TP_ALLOCATION_WEIGHTS,
    PositionSize,
    ProfitPotential,
    TPAllocations,
    calculate_position_size,
    calculate_profit_potential,
    calculate_tp_allocations,
    round_half_up,
)


class TestRoundHalfUp:
    """Test cases for boundary rounding."""

    def test_ties_round_away_from_zero(self):
        """Exact binary ties round up, unlike round()'s banker's rounding."""
        assert round_half_up(0.125, 2) == 0.13
        assert round_half_up(2.5, 0) == 3.0
        assert round_half_up(-0.125, 2) == -0.13

    def test_uses_exact_binary_value(self):
        """1.005 is stored just below the tie and rounds down."""
        assert round_half_up(1.005, 2) == 1.0

    def test_non_finite_passthrough(self):
        """NaN and infinity are returned unchanged."""
        assert math.isnan(round_half_up(float("nan"), 2))
        assert round_half_up(float("inf"), 2) == float("inf")


class TestCalculatePositionSize:
    """Test cases for calculate_position_size."""

    def test_long_position_sizing(self):
        """Risk 2% of 10k over a 2000 stop distance."""
        result = calculate_position_size(50000, 48000, 2, 10000)

        assert isinstance(result, PositionSize)
        assert result.risk_amount == 200.0
        assert result.position_size == 0.1
        assert result.is_sizeable

    def test_short_position_uses_absolute_distance(self):
        """A stop above entry sizes the same as the mirrored long."""
        result = calculate_position_size(100.0, 105.0, 1.0, 5000.0)

        assert result.risk_amount == 50.0
        assert result.position_size == 10.0

    def test_entry_equals_stop_is_unsizeable(self):
        """Degenerate stop distance yields zero size instead of an error."""
        result = calculate_position_size(100, 100, 2, 10000)

        assert result.position_size == 0
        assert result.risk_amount == 200.0
        assert not result.is_sizeable

    @pytest.mark.parametrize(
        "account_size,risk_percent",
        [(10000, 2), (12345.67, 0.5), (250000, 20), (999.99, 0.1)],
    )
    def test_risk_amount_is_account_times_percent(self, account_size, risk_percent):
        """Risk amount equals account * percent / 100 to the cent."""
        result = calculate_position_size(10.0, 9.0, risk_percent, account_size)

        assert result.risk_amount == pytest.approx(
            account_size * risk_percent / 100, abs=0.005
        )

    def test_size_rounded_to_four_decimals(self):
        """Position size is rounded once to 4 places."""
        result = calculate_position_size(100.0, 97.0, 1.0, 1000.0)

        # 10 / 3 = 3.3333...
        assert result.position_size == 3.3333

    def test_as_dict(self):
        result = calculate_position_size(50000, 48000, 2, 10000)
        assert result.as_dict() == {"position_size": 0.1, "risk_amount": 200.0}


class TestCalculateTPAllocations:
    """Test cases for calculate_tp_allocations."""

    def test_fixed_weights(self):
        """Weights are 50/30/20."""
        assert TP_ALLOCATION_WEIGHTS == (0.5, 0.3, 0.2)

        allocations = calculate_tp_allocations(10.0)

        assert isinstance(allocations, TPAllocations)
        assert allocations.tp1_allocation == 5.0
        assert allocations.tp2_allocation == pytest.approx(3.0)
        assert allocations.tp3_allocation == pytest.approx(2.0)

    @pytest.mark.parametrize("size", [0.0, 0.1, 1.0, 3.3333, 17.25, 1234.5678])
    def test_allocations_sum_to_position(self, size):
        """The three tiers always add back up to the position."""
        allocations = calculate_tp_allocations(size)

        assert allocations.total == pytest.approx(size, abs=1e-12)

    def test_zero_position(self):
        allocations = calculate_tp_allocations(0.0)
        assert allocations.as_tuple() == (0.0, 0.0, 0.0)


class TestCalculateProfitPotential:
    """Test cases for calculate_profit_potential."""

    def test_long_profit_tiers(self):
        """Reference plan: 1 unit long from 50k with targets 52k/55k/60k."""
        result = calculate_profit_potential(50000, 52000, 55000, 60000, 1)

        assert isinstance(result, ProfitPotential)
        assert result.tp1_profit == 1000.0
        assert result.tp2_profit == 1500.0
        assert result.tp3_profit == 2000.0
        assert result.total_profit == 4500.0

    def test_short_profit_tiers(self):
        """Targets below entry produce positive profits too."""
        result = calculate_profit_potential(100.0, 95.0, 90.0, 80.0, 10.0)

        assert result.tp1_profit == 25.0
        assert result.tp2_profit == 30.0
        assert result.tp3_profit == 40.0
        assert result.total_profit == 95.0

    def test_total_is_sum_of_rounded_tiers(self):
        """Total adds the cent-rounded tiers rather than re-rounding the exact sum.

        Each tier is 0.005 * ~1.0 and rounds up on its own, so the total is
        three rounded cents even though the exact sum rounds to 0.02.
        """
        # allocations 0.5, 0.3, 0.2 of size 1; distances chosen so each
        # exact tier profit sits just above half a cent
        result = calculate_profit_potential(100.0, 100.0101, 100.0168, 100.0251, 1.0)

        tiers = [result.tp1_profit, result.tp2_profit, result.tp3_profit]
        assert tiers == [0.01, 0.01, 0.01]
        assert result.total_profit == 0.03

    def test_zero_position_has_no_profit(self):
        result = calculate_profit_potential(50000, 52000, 55000, 60000, 0)

        assert result.as_dict() == {
            "tp1_profit": 0.0,
            "tp2_profit": 0.0,
            "tp3_profit": 0.0,
            "total_profit": 0.0,
        }
