"""
Budget Pace Calculator Module

Calculates spending pace against a time-prorated budget for the current month.
"""

import logging
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

logger = logging.getLogger(__name__)


def to_decimal(value: Any) -> Decimal:
    """Coerce a stored amount to Decimal.

    Malformed or non-finite values become zero so pacing always produces output.

    Args:
        value: Raw amount (number, string, Decimal or None)

    Returns:
        Decimal amount
    """
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal("0")

    if value is None or isinstance(value, bool):
        return Decimal("0")

    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        logger.warning(f"Could not parse amount {value!r}, using 0")
        return Decimal("0")

    return result if result.is_finite() else Decimal("0")


@dataclass
class PaceMetrics:
    """Spending pace figures for one budget."""

    budget_amount: Decimal
    spent: Decimal
    days_passed: int
    days_in_month: int
    ideal_spent_by_now: Decimal
    pace_percentage: float  # math.inf when nothing was budgeted but money was spent
    daily_rate: Decimal
    projected_spending: Decimal
    remaining: Decimal
    remaining_days: int
    daily_budget: Decimal

    @property
    def is_unbounded(self) -> bool:
        """True when the budget is zero but money was spent."""
        return math.isinf(self.pace_percentage)

    @property
    def overspend_amount(self) -> Decimal:
        """Projected overspend at month end (zero when under budget)."""
        return max(Decimal("0"), self.projected_spending - self.budget_amount)

    @property
    def days_until_limit(self) -> int | None:
        """Days until the budget runs out at the current daily rate.

        None means the limit is never reached (nothing is being spent).
        """
        if self.daily_rate <= 0:
            return None
        return max(0, math.ceil(self.remaining / self.daily_rate))

    def to_dict(self) -> dict:
        return {
            "budget_amount": float(self.budget_amount),
            "spent": float(self.spent),
            "days_passed": self.days_passed,
            "days_in_month": self.days_in_month,
            "ideal_spent_by_now": float(self.ideal_spent_by_now),
            "pace_percentage": None if self.is_unbounded else round(self.pace_percentage, 2),
            "pace_unbounded": self.is_unbounded,
            "daily_rate": float(self.daily_rate),
            "projected_spending": float(self.projected_spending),
            "remaining": float(self.remaining),
            "remaining_days": self.remaining_days,
            "daily_budget": float(self.daily_budget),
        }


def compute_pace(
    budget_amount: Any,
    spent: Any,
    current_day: int,
    days_in_month: int
) -> PaceMetrics:
    """Calculate pacing metrics for a budget.

    Args:
        budget_amount: Budget for the month
        spent: Amount spent so far this month
        current_day: Day of month (values below 1 are treated as 1)
        days_in_month: Total days in the month

    Returns:
        PaceMetrics

    Raises:
        ValueError: If days_in_month is not positive
    """
    if days_in_month <= 0:
        raise ValueError(f"days_in_month must be positive, got {days_in_month}")

    budget = to_decimal(budget_amount)
    spent_amount = to_decimal(spent)
    days_passed = max(1, int(current_day))

    ideal = budget / days_in_month * days_passed

    if ideal > 0:
        pace = float(spent_amount / ideal * 100)
    elif spent_amount > 0:
        pace = math.inf
    else:
        pace = 0.0

    daily_rate = spent_amount / days_passed
    projected = daily_rate * days_in_month
    remaining = budget - spent_amount

    remaining_days = days_in_month - days_passed
    daily_budget = remaining / remaining_days if remaining_days > 0 else Decimal("0")

    return PaceMetrics(
        budget_amount=budget,
        spent=spent_amount,
        days_passed=days_passed,
        days_in_month=days_in_month,
        ideal_spent_by_now=ideal,
        pace_percentage=pace,
        daily_rate=daily_rate,
        projected_spending=projected,
        remaining=remaining,
        remaining_days=remaining_days,
        daily_budget=daily_budget,
    )
