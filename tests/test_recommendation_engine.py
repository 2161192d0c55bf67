"""
Recommendation Engine Tests

Tests for per-category advice, the overall advisory, filler tips
and history storage.
"""

from datetime import date, datetime, timedelta
from pathlib import Path
from unittest.mock import Mock

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "python"))

from budget import (
    InMemoryRecommendationHistory,
    Recommendation,
    RecommendationEngine,
    Severity,
    TransactionRecord,
)
from budget.recommendation_engine import GENERAL_CATEGORY, OVERALL_CATEGORY


@pytest.fixture
def engine(config_dir: Path) -> RecommendationEngine:
    return RecommendationEngine(config_dir=config_dir)


class TestTransactionRecord:
    """Tests for transaction parsing."""

    def test_from_dict_parses_iso_dates(self):
        record = TransactionRecord.from_dict(
            {"type": "expense", "category": "Food", "amount": "12.5", "date": "2025-06-03T10:00:00"}
        )

        assert record.date == date(2025, 6, 3)
        assert record.is_expense_in(6, 2025)
        assert not record.is_expense_in(5, 2025)

    @pytest.mark.parametrize("value", ["2025-06-03T10:00:00Z", "2025-06-03T23:30:00.000z"])
    def test_utc_suffix(self, value):
        record = TransactionRecord.from_dict({"type": "expense", "category": "Food", "amount": 40, "date": value})

        assert record.date == date(2025, 6, 3)

    def test_utc_suffix_counts_toward_pace(self, engine, today):
        budgets = [{"category": "Food", "amount": 3000, "month": 6, "year": 2025}]
        txns = [{"type": "expense", "category": "Food", "amount": 1500, "date": "2025-06-10T08:00:00.000Z"}]

        recs = engine.generate(budgets, txns, today=today)

        assert recs[0].pace_percentage == pytest.approx(100.0)

    def test_unparseable_date(self):
        record = TransactionRecord.from_dict({"type": "expense", "amount": 5, "date": "yesterday"})

        assert record.date is None
        assert not record.is_expense_in(6, 2025)


class TestGenerate:
    """Tests for RecommendationEngine.generate."""

    def test_no_spending_yet(self, engine, today):
        budgets = [{"category": "Food", "amount": 3000, "month": 6, "year": 2025}]

        recs = engine.generate(budgets, [], today=today)

        assert recs[0].category == "Food"
        assert recs[0].severity == Severity.INFO
        assert recs[0].pace_percentage == 0.0
        assert "No spending recorded for Food yet" in recs[0].message
        assert "₹3,000" in recs[0].message
        # Topped up with the generic tips
        assert len(recs) == 3
        assert [r.severity for r in recs[1:]] == [Severity.GENERAL, Severity.GENERAL]

    def test_single_budget_under_pace(self, engine, today):
        budgets = [{"category": "Food", "amount": 3000, "month": 6, "year": 2025}]
        transactions = [{"type": "expense", "category": "Food", "amount": 750, "date": datetime(2025, 6, 4)}]

        recs = engine.generate(budgets, transactions, today=today)

        assert recs[0].severity == Severity.POSITIVE
        assert recs[0].pace_percentage == pytest.approx(50.0)
        assert len(recs) == 3
        assert all(r.category == GENERAL_CATEGORY for r in recs[1:])

    def test_two_budgets_overspending(self, engine, today, sample_budgets, sample_transactions):
        recs = engine.generate(sample_budgets, sample_transactions, today=today)

        assert [r.category for r in recs] == ["Food", "Transportation", OVERALL_CATEGORY]
        assert recs[0].severity == Severity.WARNING
        assert recs[1].severity == Severity.WARNING
        assert recs[2].severity == Severity.WARNING
        assert recs[2].pace_percentage == pytest.approx(120.0)
        assert "slow down" in recs[2].message

    def test_overall_counts_unbudgeted_expenses(self, engine, today, sample_budgets):
        transactions = [
            {"type": "expense", "category": "Food", "amount": 500, "date": datetime(2025, 6, 2)},
            {"type": "expense", "category": "Shopping", "amount": 2000, "date": datetime(2025, 6, 5)},
        ]

        recs = engine.generate(sample_budgets, transactions, today=today)
        overall = [r for r in recs if r.category == OVERALL_CATEGORY][0]

        # 2500 spent against an ideal 2250
        assert overall.pace_percentage == pytest.approx(2500 / 2250 * 100)
        assert overall.severity == Severity.WARNING

    def test_overall_on_track(self, engine, today, sample_budgets):
        transactions = [
            {"type": "expense", "category": "Food", "amount": 1500, "date": datetime(2025, 6, 2)},
            {"type": "expense", "category": "Transportation", "amount": 750, "date": datetime(2025, 6, 5)},
        ]

        recs = engine.generate(sample_budgets, transactions, today=today)
        overall = recs[-1]

        assert overall.category == OVERALL_CATEGORY
        assert overall.severity == Severity.POSITIVE
        assert "balancing things well" in overall.message

    def test_overall_under_budget(self, engine, today, sample_budgets):
        transactions = [
            {"type": "expense", "category": "Food", "amount": 300, "date": datetime(2025, 6, 2)},
        ]

        recs = engine.generate(sample_budgets, transactions, today=today)
        overall = [r for r in recs if r.category == OVERALL_CATEGORY][0]

        assert overall.severity == Severity.POSITIVE
        assert "doing great" in overall.message

    def test_income_and_other_months_ignored(self, engine, today):
        budgets = [{"category": "Food", "amount": 3000, "month": 6, "year": 2025}]
        transactions = [
            {"type": "income", "category": "Food", "amount": 9000, "date": datetime(2025, 6, 2)},
            {"type": "expense", "category": "Food", "amount": 9000, "date": datetime(2025, 5, 30)},
        ]

        recs = engine.generate(budgets, transactions, today=today)

        assert "No spending recorded" in recs[0].message

    def test_zero_budget_with_spending(self, engine, today):
        budgets = [{"category": "Gifts", "amount": 0, "month": 6, "year": 2025}]
        transactions = [{"type": "expense", "category": "Gifts", "amount": 100, "date": datetime(2025, 6, 1)}]

        rec = engine.generate(budgets, transactions, today=today)[0]

        assert rec.severity == Severity.WARNING
        assert rec.pace_unbounded is True
        assert rec.to_dict()["pace_percentage"] is None
        assert rec.to_dict()["pace_unbounded"] is True

    def test_past_and_future_budgets(self, engine, today, sample_transactions):
        budgets = [
            {"category": "Food", "amount": 2000, "month": 5, "year": 2025},
            {"category": "Travel", "amount": 10000, "month": 8, "year": 2025},
        ]

        recs = engine.generate(budgets, sample_transactions, today=today)

        assert recs[0].message == "Past month (May 2025): you spent ₹400 of your ₹2,000 Food budget."
        assert recs[1].message == "A Travel budget of ₹10,000 is set for August 2025."
        assert recs[0].severity == Severity.INFO
        assert recs[1].severity == Severity.INFO

    def test_empty_input_gives_tips(self, engine, today):
        recs = engine.generate([], [], today=today)

        assert len(recs) == 2
        assert all(r.severity == Severity.GENERAL for r in recs)

    def test_generation_is_repeatable(self, engine, today, sample_budgets, sample_transactions):
        first = [r.to_dict() for r in engine.generate(sample_budgets, sample_transactions, today=today)]
        second = [r.to_dict() for r in engine.generate(sample_budgets, sample_transactions, today=today)]

        assert first == second

    def test_custom_tips_and_minimum(self, tmp_path, today):
        (tmp_path / "pacing.yaml").write_text(
            "min_recommendations: 1\ngeneric_tips:\n  - Track every coffee.\n"
        )
        engine = RecommendationEngine(config_dir=tmp_path)

        assert [r.message for r in engine.generate([], [], today=today)] == ["Track every coffee."]

        budgets = [{"category": "Food", "amount": 3000, "month": 6, "year": 2025}]
        assert len(engine.generate(budgets, [], today=today)) == 1


class TestHistory:
    """Tests for history storage during generation."""

    def test_batch_saved_for_user(self, config_dir, today, sample_budgets, sample_transactions):
        history = InMemoryRecommendationHistory()
        engine = RecommendationEngine(config_dir=config_dir, history=history)

        recs = engine.generate(sample_budgets, sample_transactions, today=today, user_id="u1")

        batches = history.get_history("u1")
        assert len(batches) == 1
        assert batches[0].recommendations == [r.to_dict() for r in recs]

    def test_no_save_without_user(self, config_dir, today):
        history = Mock()
        engine = RecommendationEngine(config_dir=config_dir, history=history)

        engine.generate([], [], today=today)

        history.save_history.assert_not_called()

    def test_history_failure_does_not_fail_generation(self, config_dir, today, sample_budgets):
        history = Mock()
        history.save_history.side_effect = RuntimeError("database unavailable")
        engine = RecommendationEngine(config_dir=config_dir, history=history)

        recs = engine.generate(sample_budgets, [], today=today, user_id="u1")

        assert len(recs) == 3
        history.save_history.assert_called_once()

    def test_history_newest_first_and_pruned(self):
        history = InMemoryRecommendationHistory(retention_days=30)
        stale = history.save_history("u1", [{"message": "stale"}])
        stale.generated_at = datetime.now() - timedelta(days=45)
        earlier = history.save_history("u1", [{"message": "earlier"}])
        earlier.generated_at = datetime.now() - timedelta(days=1)
        history.save_history("u1", [{"message": "latest"}])

        batches = history.get_history("u1")

        assert [b.recommendations[0]["message"] for b in batches] == ["latest", "earlier"]
        assert len(history.get_history("u1", limit=1)) == 1
        assert history.get_history("someone-else") == []


class TestRecommendation:
    """Tests for Recommendation serialization."""

    def test_to_dict_rounds_pace(self):
        rec = Recommendation(category="Food", message="m", severity=Severity.INFO, pace_percentage=83.33333)

        assert rec.to_dict() == {
            "category": "Food",
            "message": "m",
            "severity": "info",
            "pace_percentage": 83.33,
            "pace_unbounded": False,
        }

    def test_tip_has_no_pace(self):
        rec = Recommendation(category=GENERAL_CATEGORY, message="tip", severity=Severity.GENERAL)

        assert rec.to_dict()["pace_percentage"] is None
        assert rec.pace_unbounded is False
