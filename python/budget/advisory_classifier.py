"""
Budget Advisory Classifier Module

Maps spending pace to an advisory severity and a readable message.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .pace_calculator import PaceMetrics, to_decimal

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    """Advisory level, drives message tone and UI styling."""

    WARNING = "warning"
    CAUTION = "caution"
    POSITIVE = "positive"
    INFO = "info"
    GENERAL = "general"


@dataclass
class Advisory:
    """Classified message for one budget."""

    message: str
    severity: Severity

    def to_dict(self) -> dict:
        return {"message": self.message, "severity": self.severity.value}


DEFAULT_PACING_CONFIG = {
    "thresholds": {
        "warning": 100,   # pace above this is overspending
        "caution": 90,    # pace at or above this is close to the limit
        "positive": 70,   # pace at or below this is well under budget
    },
    "overall": {
        "warning": 110,
        "positive": 90,
    },
    "currency": {
        "format": "₹{:,.0f}",
    },
    "min_recommendations": 3,
    "generic_tips": [
        "Having clear savings goals can help keep you motivated with your budget.",
        "Many people find the 50/30/20 approach helpful: 50% for needs, 30% for wants, and 20% for savings.",
    ],
    "history": {
        "retention_days": 30,
    },
    "alerts": {
        "ratio": 0.9,
    },
}


def load_pacing_config(config_dir: Path | str | None = None) -> dict:
    """Load pacing configuration, falling back to built-in defaults.

    Args:
        config_dir: Path to configuration directory

    Returns:
        Configuration dictionary
    """
    config_dir = Path(config_dir) if config_dir else Path(__file__).parent.parent.parent / "config"
    config_file = config_dir / "pacing.yaml"

    config = {key: (dict(value) if isinstance(value, dict) else value)
              for key, value in DEFAULT_PACING_CONFIG.items()}

    if not config_file.exists():
        return config

    with open(config_file) as f:
        loaded = yaml.safe_load(f) or {}

    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key].update(value)
        else:
            config[key] = value

    return config


class CurrencyFormatter:
    """Renders amounts for advisory messages."""

    def __init__(self, currency_format: str = "₹{:,.0f}"):
        """Initialize the formatter.

        Args:
            currency_format: str.format template applied to the absolute amount
        """
        self.currency_format = currency_format

    def format(self, amount: Any) -> str:
        value = to_decimal(amount)
        text = self.currency_format.format(abs(value))
        return f"-{text}" if value < 0 else text

    __call__ = format


class AdvisoryClassifier:
    """Classifies budget pace into warning / caution / positive / info."""

    def __init__(
        self,
        config_dir: Path | str | None = None,
        config: dict | None = None,
        formatter: CurrencyFormatter | None = None
    ):
        """Initialize the classifier.

        Args:
            config_dir: Path to configuration directory
            config: Preloaded configuration (skips file loading)
            formatter: Currency formatter for messages
        """
        self.config = config if config is not None else load_pacing_config(config_dir)

        thresholds = self.config.get("thresholds", {})
        self.warning_threshold = float(thresholds.get("warning", 100))
        self.caution_threshold = float(thresholds.get("caution", 90))
        self.positive_threshold = float(thresholds.get("positive", 70))

        self.formatter = formatter or CurrencyFormatter(
            self.config.get("currency", {}).get("format", "₹{:,.0f}")
        )

    def get_severity(self, pace_percentage: float) -> Severity:
        """Map a pace percentage to a severity (first match wins)."""
        if pace_percentage > self.warning_threshold:
            return Severity.WARNING
        if pace_percentage >= self.caution_threshold:
            return Severity.CAUTION
        if pace_percentage <= self.positive_threshold:
            return Severity.POSITIVE
        return Severity.INFO

    def classify(self, category: str, metrics: PaceMetrics) -> Advisory:
        """Classify a budget's pace and build the advisory message.

        Args:
            category: Budget category
            metrics: Pace metrics for the budget

        Returns:
            Advisory
        """
        severity = self.get_severity(metrics.pace_percentage)
        fmt = self.formatter.format
        spent = fmt(metrics.spent)
        days_left = metrics.remaining_days

        if severity == Severity.WARNING:
            if metrics.remaining <= 0:
                message = (
                    f"You've already spent {spent} of your {category} budget of "
                    f"{fmt(metrics.budget_amount)} and there are {days_left} days left. "
                    f"You've exceeded your limit, so cut back entirely."
                )
            else:
                message = (
                    f"You've spent {spent} of your {category} budget and it's only day "
                    f"{metrics.days_passed} of {metrics.days_in_month}. At this pace you're "
                    f"projected to exceed your budget by "
                    f"{fmt(metrics.projected_spending - metrics.budget_amount)}."
                )

        elif severity == Severity.CAUTION:
            days = metrics.days_until_limit
            if days is None:
                outlook = "you won't reach your limit"
            elif days == 0:
                outlook = "you've reached your limit"
            else:
                outlook = f"you'll reach your limit in {days} days"
            message = (
                f"You've spent {spent} of your {category} budget and it's only day "
                f"{metrics.days_passed} of {metrics.days_in_month}. At this pace, {outlook}."
            )

        elif severity == Severity.POSITIVE:
            message = (
                f"Only {spent} of your {category} budget used and {days_left} days left. "
                f"Strong financial control."
            )

        else:
            message = (
                f"You've used {spent} of your {category} budget with {days_left} days "
                f"remaining. You're on track."
            )

        logger.debug(
            f"{category}: pace {metrics.pace_percentage:.1f}% -> {severity.value}"
        )

        return Advisory(message=message, severity=severity)
