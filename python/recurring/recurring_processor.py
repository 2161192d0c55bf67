"""
Recurring Transaction Processor Module

Creates transaction instances from recurring templates, catching up on every
occurrence that fell due since the last run.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

INTERVALS = ("daily", "weekly", "monthly")

# Upper bound on instances created per template in one run
MAX_OCCURRENCES_PER_RUN = 1000


def calculate_next_date(current: datetime, interval: str) -> datetime:
    """Get the next occurrence date for a recurrence interval.

    Args:
        current: Current occurrence
        interval: 'daily', 'weekly' or 'monthly'

    Returns:
        Next occurrence

    Raises:
        ValueError: If the interval is unknown
    """
    if interval == "daily":
        return current + timedelta(days=1)
    if interval == "weekly":
        return current + timedelta(days=7)
    if interval == "monthly":
        return current + relativedelta(months=1)
    raise ValueError(f"Unknown recurring interval: {interval!r}")


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


@dataclass
class RecurringRunResult:
    """Outcome of one processing run."""

    created: list[dict] = field(default_factory=list)
    next_dates: dict[Any, datetime] = field(default_factory=dict)
    skipped: list[Any] = field(default_factory=list)

    @property
    def created_count(self) -> int:
        return len(self.created)

    def to_dict(self) -> dict:
        return {
            "created_count": self.created_count,
            "templates_advanced": len(self.next_dates),
            "skipped": self.skipped,
        }


class RecurringProcessor:
    """Expands due recurring templates into concrete transactions."""

    def __init__(self, max_occurrences: int = MAX_OCCURRENCES_PER_RUN):
        self.max_occurrences = max_occurrences

    def process(self, templates: list[dict], now: datetime | None = None) -> RecurringRunResult:
        """Process due recurring templates.

        Args:
            templates: Recurring transaction records with 'id', 'user_id', 'amount',
                'type', 'category', 'description', 'recurring_interval' and
                'next_recurring_date'
            now: Reference time (defaults to now)

        Returns:
            RecurringRunResult with new transactions and advanced next dates
        """
        now = now or datetime.now()
        result = RecurringRunResult()

        logger.info(f"Running recurring transactions check for {len(templates)} templates")

        for template in templates:
            template_id = template.get("id")
            interval = template.get("recurring_interval")
            next_date = _to_datetime(template.get("next_recurring_date"))

            if interval not in INTERVALS or next_date is None:
                logger.warning(
                    f"Skipping recurring template {template_id}: "
                    f"interval={interval!r}, next date={template.get('next_recurring_date')!r}"
                )
                result.skipped.append(template_id)
                continue

            if next_date > now:
                continue

            occurrences = 0
            while next_date <= now and occurrences < self.max_occurrences:
                result.created.append({
                    "user_id": template.get("user_id"),
                    "amount": template.get("amount"),
                    "type": template.get("type"),
                    "category": template.get("category"),
                    "description": template.get("description") or "",
                    "date": next_date,
                    "is_recurring": False,
                    "recurring_interval": None,
                    "next_recurring_date": None,
                    "template_id": template_id,
                })
                logger.debug(f"Created occurrence {next_date.isoformat()} from template {template_id}")

                next_date = calculate_next_date(next_date, interval)
                occurrences += 1

            if occurrences >= self.max_occurrences and next_date <= now:
                logger.warning(
                    f"Template {template_id} hit the limit of {self.max_occurrences} occurrences; "
                    f"remaining ones will be created on the next run"
                )

            result.next_dates[template_id] = next_date
            logger.info(f"Updated next recurring date for {template_id} to {next_date.isoformat()}")

        return result
