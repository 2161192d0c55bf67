"""
Budget Pacing Module

Handles spending-pace calculation, advisory classification, recommendation
generation and budget alerts.
"""

from .pace_calculator import PaceMetrics, compute_pace, to_decimal
from .advisory_classifier import (
    Advisory,
    AdvisoryClassifier,
    CurrencyFormatter,
    Severity,
    load_pacing_config,
)
from .recommendation_engine import (
    BudgetRecord,
    Recommendation,
    RecommendationEngine,
    TransactionRecord,
)
from .history_store import (
    HistoryBatch,
    InMemoryRecommendationHistory,
    RecommendationHistoryRepository,
)
from .alert_checker import BudgetAlert, BudgetAlertChecker

__all__ = [
    # Pacing
    "PaceMetrics",
    "compute_pace",
    "to_decimal",
    # Classification
    "Advisory",
    "AdvisoryClassifier",
    "CurrencyFormatter",
    "Severity",
    "load_pacing_config",
    # Recommendations
    "BudgetRecord",
    "Recommendation",
    "RecommendationEngine",
    "TransactionRecord",
    # History
    "HistoryBatch",
    "InMemoryRecommendationHistory",
    "RecommendationHistoryRepository",
    # Alerts
    "BudgetAlert",
    "BudgetAlertChecker",
]
