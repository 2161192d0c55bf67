"""
Pace Calculator Tests

Tests for spending pace metrics and amount coercion.
"""

import math
from decimal import Decimal
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "python"))

from budget import PaceMetrics, compute_pace, to_decimal


class TestToDecimal:
    """Tests for amount coercion."""

    def test_numbers_and_strings(self):
        assert to_decimal(1500) == Decimal("1500")
        assert to_decimal("249.50") == Decimal("249.50")
        assert to_decimal(Decimal("10")) == Decimal("10")

    def test_malformed_values_become_zero(self):
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("abc") == Decimal("0")
        assert to_decimal("") == Decimal("0")
        assert to_decimal(True) == Decimal("0")

    def test_non_finite_values_become_zero(self):
        assert to_decimal(float("nan")) == Decimal("0")
        assert to_decimal("Infinity") == Decimal("0")


class TestComputePace:
    """Tests for compute_pace."""

    def test_mid_month_overspend(self):
        """3000 budget, 1800 spent on day 15 of 30."""
        metrics = compute_pace(3000, 1800, 15, 30)

        assert isinstance(metrics, PaceMetrics)
        assert metrics.ideal_spent_by_now == Decimal("1500")
        assert metrics.pace_percentage == pytest.approx(120.0)
        assert metrics.daily_rate == Decimal("120")
        assert metrics.projected_spending == Decimal("3600")
        assert metrics.remaining == Decimal("1200")
        assert metrics.remaining_days == 15
        assert metrics.daily_budget == Decimal("80")
        assert metrics.overspend_amount == Decimal("600")
        assert metrics.days_until_limit == 10

    def test_exact_budget_at_month_end(self):
        metrics = compute_pace(3000, 3000, 30, 30)

        assert metrics.pace_percentage == pytest.approx(100.0)
        assert metrics.remaining_days == 0
        assert metrics.daily_budget == Decimal("0")
        assert metrics.days_until_limit == 0

    def test_day_zero_is_treated_as_day_one(self):
        metrics = compute_pace(3000, 100, 0, 30)

        assert metrics.days_passed == 1
        assert metrics.pace_percentage == pytest.approx(100.0)

    def test_zero_budget_with_spending_is_unbounded(self):
        metrics = compute_pace(0, 250, 10, 30)

        assert math.isinf(metrics.pace_percentage)
        assert metrics.is_unbounded is True
        assert metrics.to_dict()["pace_percentage"] is None
        assert metrics.to_dict()["pace_unbounded"] is True

    def test_zero_budget_without_spending(self):
        metrics = compute_pace(0, 0, 10, 30)

        assert metrics.pace_percentage == 0.0
        assert metrics.is_unbounded is False
        assert metrics.days_until_limit is None

    def test_pace_grows_with_spending(self):
        paces = [compute_pace(3000, spent, 12, 30).pace_percentage for spent in (0, 500, 1200, 2400)]
        assert paces == sorted(paces)

    def test_pace_falls_as_month_progresses(self):
        paces = [compute_pace(3000, 1000, day, 30).pace_percentage for day in (5, 10, 20, 30)]
        assert paces == sorted(paces, reverse=True)

    def test_already_over_budget(self):
        metrics = compute_pace(1000, 1200, 20, 30)

        assert metrics.remaining == Decimal("-200")
        assert metrics.days_until_limit == 0

    def test_malformed_amounts(self):
        metrics = compute_pace("not a number", None, 10, 30)

        assert metrics.budget_amount == Decimal("0")
        assert metrics.spent == Decimal("0")
        assert metrics.pace_percentage == 0.0

    @pytest.mark.parametrize("days_in_month", [0, -1])
    def test_invalid_days_in_month(self, days_in_month):
        with pytest.raises(ValueError):
            compute_pace(3000, 100, 1, days_in_month)

    def test_to_dict(self):
        result = compute_pace(3000, 1800, 15, 30).to_dict()

        assert result["pace_percentage"] == 120.0
        assert result["pace_unbounded"] is False
        assert result["projected_spending"] == 3600.0
        assert result["days_in_month"] == 30
