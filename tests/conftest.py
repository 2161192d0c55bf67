"""
Pytest configuration and fixtures for finance tracker tests.
"""

import os
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Generator

import pytest
import yaml

# Use an in-memory database for every test run; must be set before api is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"
os.environ.pop("SMTP_HOST", None)

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "python"))


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def config_dir() -> Path:
    """Return the config directory path."""
    return PROJECT_ROOT / "config"


@pytest.fixture
def pacing_config(config_dir: Path) -> dict:
    """Load the pacing configuration."""
    with open(config_dir / "pacing.yaml") as f:
        return yaml.safe_load(f)


@pytest.fixture
def today() -> date:
    """Mid-month reference date (day 15 of a 30-day month)."""
    return date(2025, 6, 15)


@pytest.fixture
def sample_budgets() -> list[dict]:
    """Return current-month budgets for the reference date."""
    return [
        {"category": "Food", "amount": 3000, "month": 6, "year": 2025},
        {"category": "Transportation", "amount": 1500, "month": 6, "year": 2025},
    ]


@pytest.fixture
def sample_transactions() -> list[dict]:
    """Return a mix of transactions around the reference date."""
    return [
        {"type": "expense", "category": "Food", "amount": 1800, "date": datetime(2025, 6, 3)},
        {"type": "expense", "category": "Transportation", "amount": 900, "date": datetime(2025, 6, 10)},
        {"type": "income", "category": "Salary", "amount": 50000, "date": datetime(2025, 6, 1)},
        {"type": "expense", "category": "Food", "amount": 400, "date": datetime(2025, 5, 28)},
    ]


@pytest.fixture
def client() -> Generator:
    """API test client backed by a clean in-memory database."""
    from fastapi.testclient import TestClient

    from api import app
    from api import services
    from api.database import engine
    from api.tables import metadata

    with TestClient(app) as test_client:
        yield test_client

    with engine.begin() as conn:
        for table in reversed(metadata.sorted_tables):
            conn.execute(table.delete())

    services.alert_checker.clear_cooldown()
