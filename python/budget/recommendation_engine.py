"""
Budget Recommendation Engine Module

Builds the per-category pacing advice, the overall advisory and filler tips
for a user's budgets.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from .advisory_classifier import AdvisoryClassifier, Severity, load_pacing_config
from .history_store import RecommendationHistoryRepository
from .pace_calculator import compute_pace, to_decimal

logger = logging.getLogger(__name__)

OVERALL_CATEGORY = "overall"
GENERAL_CATEGORY = "general"


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _to_date(value: Any) -> date | None:
    """Parse a transaction date from the store."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        # fromisoformat only accepts a trailing "Z" from Python 3.11
        if value.endswith(("Z", "z")):
            value = value[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(value).date()
        except ValueError:
            logger.warning(f"Unparseable transaction date: {value}")
    return None


@dataclass
class BudgetRecord:
    """Category budget for a month."""

    category: str
    amount: Decimal
    month: int
    year: int

    @classmethod
    def from_dict(cls, data: dict) -> "BudgetRecord":
        return cls(
            category=str(data.get("category", "")),
            amount=to_decimal(data.get("amount")),
            month=_to_int(data.get("month")),
            year=_to_int(data.get("year")),
        )


@dataclass
class TransactionRecord:
    """Income, expense or saving entry."""

    type: str
    category: str
    amount: Decimal
    date: date | None

    @classmethod
    def from_dict(cls, data: dict) -> "TransactionRecord":
        return cls(
            type=str(data.get("type", "")),
            category=str(data.get("category", "")),
            amount=to_decimal(data.get("amount")),
            date=_to_date(data.get("date")),
        )

    def is_expense_in(self, month: int, year: int) -> bool:
        return (
            self.type == "expense"
            and self.date is not None
            and self.date.month == month
            and self.date.year == year
        )


@dataclass
class Recommendation:
    """Advice shown to the user."""

    category: str
    message: str
    severity: Severity
    pace_percentage: float | None = None

    @property
    def pace_unbounded(self) -> bool:
        return self.pace_percentage is not None and self.pace_percentage == float("inf")

    def to_dict(self) -> dict:
        pace = self.pace_percentage
        if pace is not None and not self.pace_unbounded:
            pace = round(pace, 2)
        elif self.pace_unbounded:
            pace = None

        return {
            "category": self.category,
            "message": self.message,
            "severity": self.severity.value,
            "pace_percentage": pace,
            "pace_unbounded": self.pace_unbounded,
        }


class RecommendationEngine:
    """Generates budget recommendations from budgets and transactions."""

    def __init__(
        self,
        config_dir: Path | str | None = None,
        classifier: AdvisoryClassifier | None = None,
        history: RecommendationHistoryRepository | None = None
    ):
        """Initialize the engine.

        Args:
            config_dir: Path to configuration directory
            classifier: Advisory classifier (built from config if omitted)
            history: Optional store for generated batches
        """
        self.config = load_pacing_config(config_dir)
        self.classifier = classifier or AdvisoryClassifier(config=self.config)
        self.formatter = self.classifier.formatter
        self.history = history

        overall = self.config.get("overall", {})
        self.overall_warning = float(overall.get("warning", 110))
        self.overall_positive = float(overall.get("positive", 90))
        self.min_recommendations = int(self.config.get("min_recommendations", 3))
        self.generic_tips = list(self.config.get("generic_tips", []))

    def generate(
        self,
        budgets: list[dict],
        transactions: list[dict],
        today: date | None = None,
        user_id: str | None = None
    ) -> list[Recommendation]:
        """Generate recommendations for a user's budgets.

        Args:
            budgets: Budget records (category, amount, month, year)
            transactions: Transaction records (type, category, amount, date)
            today: Reference date (defaults to today)
            user_id: When given, the batch is saved to history

        Returns:
            Ordered list of Recommendation
        """
        today = today or date.today()
        if isinstance(today, datetime):
            today = today.date()

        current_month = today.month
        current_year = today.year
        current_day = today.day
        days_in_month = calendar.monthrange(current_year, current_month)[1]

        budget_records = [
            b if isinstance(b, BudgetRecord) else BudgetRecord.from_dict(b) for b in budgets
        ]
        txn_records = [
            t if isinstance(t, TransactionRecord) else TransactionRecord.from_dict(t)
            for t in transactions
        ]

        logger.info(f"Generating recommendations for {len(budget_records)} budgets")

        recommendations: list[Recommendation] = []
        current_budgets: list[BudgetRecord] = []

        for budget in budget_records:
            is_current = budget.month == current_month and budget.year == current_year

            if not is_current:
                recommendations.append(self._off_period_recommendation(budget, txn_records, today))
                continue

            current_budgets.append(budget)
            spent = self._spent_for(budget, txn_records)

            if spent == 0:
                recommendations.append(Recommendation(
                    category=budget.category,
                    message=(
                        f"No spending recorded for {budget.category} yet. Your full budget of "
                        f"{self.formatter.format(budget.amount)} is available."
                    ),
                    severity=Severity.INFO,
                    pace_percentage=0.0,
                ))
                continue

            metrics = compute_pace(budget.amount, spent, current_day, days_in_month)
            advisory = self.classifier.classify(budget.category, metrics)

            recommendations.append(Recommendation(
                category=budget.category,
                message=advisory.message,
                severity=advisory.severity,
                pace_percentage=metrics.pace_percentage,
            ))

        if len(current_budgets) > 1:
            recommendations.append(self._overall_recommendation(
                current_budgets, txn_records, current_day, days_in_month, current_month, current_year
            ))

        if len(recommendations) < self.min_recommendations:
            for tip in self.generic_tips:
                recommendations.append(Recommendation(
                    category=GENERAL_CATEGORY,
                    message=tip,
                    severity=Severity.GENERAL,
                ))

        if user_id is not None and self.history is not None:
            self._save_history(user_id, recommendations)

        return recommendations

    def _spent_for(self, budget: BudgetRecord, transactions: list[TransactionRecord]) -> Decimal:
        return sum(
            (t.amount for t in transactions
             if t.category == budget.category and t.is_expense_in(budget.month, budget.year)),
            Decimal("0")
        )

    def _off_period_recommendation(
        self,
        budget: BudgetRecord,
        transactions: list[TransactionRecord],
        today: date
    ) -> Recommendation:
        """Informational entry for a budget outside the current month."""
        fmt = self.formatter.format
        period = self._period_label(budget.month, budget.year)

        if (budget.year, budget.month) < (today.year, today.month):
            spent = self._spent_for(budget, transactions)
            message = (
                f"Past month ({period}): you spent {fmt(spent)} of your "
                f"{fmt(budget.amount)} {budget.category} budget."
            )
        else:
            message = (
                f"A {budget.category} budget of {fmt(budget.amount)} is set for {period}."
            )

        return Recommendation(category=budget.category, message=message, severity=Severity.INFO)

    def _overall_recommendation(
        self,
        budgets: list[BudgetRecord],
        transactions: list[TransactionRecord],
        current_day: int,
        days_in_month: int,
        month: int,
        year: int
    ) -> Recommendation:
        """Portfolio-level advisory across all current budgets."""
        total_budget = sum((b.amount for b in budgets), Decimal("0"))
        total_spent = sum(
            (t.amount for t in transactions if t.is_expense_in(month, year)),
            Decimal("0")
        )

        overall_pace = compute_pace(
            total_budget, total_spent, current_day, days_in_month
        ).pace_percentage

        if overall_pace > self.overall_warning:
            message = (
                "Looking at the big picture, you might want to slow down your "
                "spending a bit this month."
            )
            severity = Severity.WARNING
        elif overall_pace < self.overall_positive:
            message = (
                "Overall, you're doing great with your finances this month! "
                "Nice work saving money."
            )
            severity = Severity.POSITIVE
        else:
            message = (
                "Your overall spending is perfectly on track this month. "
                "You're balancing things well!"
            )
            severity = Severity.POSITIVE

        return Recommendation(
            category=OVERALL_CATEGORY,
            message=message,
            severity=severity,
            pace_percentage=overall_pace,
        )

    def _save_history(self, user_id: str, recommendations: list[Recommendation]) -> None:
        try:
            self.history.save_history(user_id, [r.to_dict() for r in recommendations])
        except Exception as e:
            logger.error(f"Failed to save recommendation history for user {user_id}: {e}")

    @staticmethod
    def _period_label(month: int, year: int) -> str:
        if 1 <= month <= 12:
            return f"{calendar.month_name[month]} {year}"
        return f"{month}/{year}"
