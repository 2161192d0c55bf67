"""
Recurring Transactions Module

Expands recurring transaction templates into dated transactions.
"""

from .recurring_processor import (
    INTERVALS,
    RecurringProcessor,
    RecurringRunResult,
    calculate_next_date,
)

__all__ = [
    "INTERVALS",
    "RecurringProcessor",
    "RecurringRunResult",
    "calculate_next_date",
]
