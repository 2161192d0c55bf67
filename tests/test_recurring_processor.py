"""
Recurring Processor Tests

Tests for next-date calculation and catch-up of missed occurrences.
"""

from datetime import datetime
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "python"))

from recurring import RecurringProcessor, calculate_next_date


def make_template(**overrides) -> dict:
    template = {
        "id": 1,
        "user_id": "u1",
        "amount": 1200,
        "type": "expense",
        "category": "Utilities",
        "description": "Internet",
        "recurring_interval": "monthly",
        "next_recurring_date": datetime(2025, 6, 1, 9, 0),
    }
    template.update(overrides)
    return template


class TestCalculateNextDate:
    """Tests for calculate_next_date."""

    def test_daily(self):
        assert calculate_next_date(datetime(2025, 6, 30), "daily") == datetime(2025, 7, 1)

    def test_weekly(self):
        assert calculate_next_date(datetime(2025, 6, 28), "weekly") == datetime(2025, 7, 5)

    def test_monthly_clamps_to_month_end(self):
        assert calculate_next_date(datetime(2025, 1, 31), "monthly") == datetime(2025, 2, 28)
        assert calculate_next_date(datetime(2024, 1, 31), "monthly") == datetime(2024, 2, 29)

    def test_unknown_interval(self):
        with pytest.raises(ValueError):
            calculate_next_date(datetime(2025, 6, 1), "yearly")


class TestRecurringProcessor:
    """Tests for RecurringProcessor.process."""

    def test_single_due_occurrence(self):
        result = RecurringProcessor().process([make_template()], now=datetime(2025, 6, 15))

        assert result.created_count == 1
        created = result.created[0]
        assert created["date"] == datetime(2025, 6, 1, 9, 0)
        assert created["is_recurring"] is False
        assert created["recurring_interval"] is None
        assert created["template_id"] == 1
        assert result.next_dates[1] == datetime(2025, 7, 1, 9, 0)

    def test_catches_up_missed_occurrences(self):
        template = make_template(recurring_interval="weekly", next_recurring_date=datetime(2025, 6, 1))

        result = RecurringProcessor().process([template], now=datetime(2025, 6, 22))

        assert [c["date"].day for c in result.created] == [1, 8, 15, 22]
        assert result.next_dates[1] == datetime(2025, 6, 29)

    def test_not_yet_due(self):
        template = make_template(next_recurring_date=datetime(2025, 7, 1))

        result = RecurringProcessor().process([template], now=datetime(2025, 6, 15))

        assert result.created_count == 0
        assert result.next_dates == {}

    def test_skips_invalid_templates(self):
        templates = [
            make_template(id=1, recurring_interval="yearly"),
            make_template(id=2, next_recurring_date=None),
            make_template(id=3, next_recurring_date="2025-06-10T08:00:00"),
        ]

        result = RecurringProcessor().process(templates, now=datetime(2025, 6, 15))

        assert result.skipped == [1, 2]
        assert result.created_count == 1
        assert result.created[0]["template_id"] == 3

    def test_occurrence_limit(self):
        template = make_template(recurring_interval="daily", next_recurring_date=datetime(2025, 1, 1))

        result = RecurringProcessor(max_occurrences=5).process([template], now=datetime(2025, 6, 1))

        assert result.created_count == 5
        assert result.next_dates[1] == datetime(2025, 1, 6)

    def test_to_dict(self):
        result = RecurringProcessor().process([make_template()], now=datetime(2025, 6, 15))

        assert result.to_dict() == {"created_count": 1, "templates_advanced": 1, "skipped": []}
