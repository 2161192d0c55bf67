"""
Budget Alert Checker Module

Decides when a category's spending is high enough to notify the user,
at most once per category per month.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from .advisory_classifier import load_pacing_config
from .pace_calculator import to_decimal

logger = logging.getLogger(__name__)


@dataclass
class BudgetAlert:
    """Alert raised when spending nears or passes a budget."""

    user_id: str
    category: str
    spent: Decimal
    budget_amount: Decimal
    month: int
    year: int
    triggered_at: datetime = field(default_factory=datetime.now)

    @property
    def percent_spent(self) -> int:
        """Rounded share of the budget spent."""
        if self.budget_amount <= 0:
            return 0
        return int((self.spent / self.budget_amount * 100).to_integral_value())

    @property
    def is_exceeded(self) -> bool:
        return self.spent > self.budget_amount

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "category": self.category,
            "spent": float(self.spent),
            "budget_amount": float(self.budget_amount),
            "percent_spent": self.percent_spent,
            "month": self.month,
            "year": self.year,
            "triggered_at": self.triggered_at.isoformat(),
        }


class BudgetAlertChecker:
    """Checks category spending against the alert ratio."""

    def __init__(self, config_dir: Path | str | None = None, alert_ratio: float | None = None):
        """Initialize the checker.

        Args:
            config_dir: Path to configuration directory
            alert_ratio: Share of the budget that triggers an alert (overrides config)
        """
        config = load_pacing_config(config_dir)
        ratio = alert_ratio if alert_ratio is not None else config.get("alerts", {}).get("ratio", 0.9)
        self.alert_ratio = Decimal(str(ratio))
        self._alert_history: dict[tuple[str, str, int, int], datetime] = {}

    def check(
        self,
        user_id: str,
        category: str,
        spent: Any,
        budget_amount: Any,
        period: date | None = None
    ) -> BudgetAlert | None:
        """Check one category's spending for the month containing ``period``.

        Args:
            user_id: User identifier
            category: Budget category
            spent: Total spent in the month
            budget_amount: Budget for the month
            period: Any date in the month (defaults to today)

        Returns:
            BudgetAlert if the threshold is reached and no alert was sent this month
        """
        period = period or date.today()
        spent_amount = to_decimal(spent)
        budget = to_decimal(budget_amount)

        if budget <= 0 or spent_amount < budget * self.alert_ratio:
            return None

        alert_key = (str(user_id), category, period.year, period.month)
        if alert_key in self._alert_history:
            logger.debug(f"Alert for {alert_key} already sent this month")
            return None

        alert = BudgetAlert(
            user_id=str(user_id),
            category=category,
            spent=spent_amount,
            budget_amount=budget,
            month=period.month,
            year=period.year,
        )
        self._alert_history[alert_key] = alert.triggered_at

        logger.info(
            f"Budget alert for user {user_id}: {category} at {alert.percent_spent}% "
            f"of budget ({period.year}-{period.month:02d})"
        )
        return alert

    def mark_sent(self, user_id: str, category: str, year: int, month: int) -> None:
        """Record an alert sent elsewhere (e.g. loaded from storage)."""
        self._alert_history[(str(user_id), category, year, month)] = datetime.now()

    def clear_cooldown(self, user_id: str | None = None, category: str | None = None) -> None:
        """Clear alert cooldown history.

        Args:
            user_id: Optional user to clear (None for all)
            category: Optional category to clear
        """
        if user_id is None and category is None:
            self._alert_history.clear()
            return

        for key in list(self._alert_history):
            key_user, key_category, _, _ = key
            if user_id is not None and key_user != str(user_id):
                continue
            if category is not None and key_category != category:
                continue
            del self._alert_history[key]

    def get_pending_alerts_count(self) -> int:
        """Get count of alerts in cooldown."""
        return len(self._alert_history)
