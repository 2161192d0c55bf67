"""
Database Tables Module

SQLAlchemy Core table definitions for the finance tracker.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

transactions = Table(
    "transactions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("amount", Numeric(14, 2), nullable=False),
    Column("type", String(16), nullable=False),  # 'income', 'expense', 'saving'
    Column("category", String(100), nullable=False),
    Column("description", Text, nullable=True),
    Column("date", DateTime, nullable=False, default=datetime.now),
    Column("is_recurring", Boolean, nullable=False, default=False),
    Column("recurring_interval", String(16), nullable=True),  # 'daily', 'weekly', 'monthly'
    Column("next_recurring_date", DateTime, nullable=True),
    Column("created_at", DateTime, nullable=False, default=datetime.now),
    Column("updated_at", DateTime, nullable=False, default=datetime.now, onupdate=datetime.now),
)

budgets = Table(
    "budgets",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("category", String(100), nullable=False),
    Column("amount", Numeric(14, 2), nullable=False),
    Column("month", Integer, nullable=False),
    Column("year", Integer, nullable=False),
    Column("last_alert_sent", DateTime, nullable=True),
    UniqueConstraint("user_id", "category", "month", "year", name="uq_budget_user_category_period"),
)

monthly_budgets = Table(
    "monthly_budgets",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("amount", Numeric(14, 2), nullable=False),
    Column("month", Integer, nullable=False),
    Column("year", Integer, nullable=False),
    UniqueConstraint("user_id", "month", "year", name="uq_monthly_budget_user_period"),
)

budget_alerts = Table(
    "budget_alerts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("category", String(100), nullable=False),
    Column("month", Integer, nullable=False),
    Column("year", Integer, nullable=False),
    Column("spent", Numeric(14, 2), nullable=False),
    Column("budget_amount", Numeric(14, 2), nullable=False),
    Column("percent_spent", Integer, nullable=False),
    Column("email_sent", Boolean, nullable=False, default=False),
    Column("sent_at", DateTime, nullable=False, default=datetime.now),
)

recommendation_history = Table(
    "recommendation_history",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("generated_at", DateTime, nullable=False),
    Column("recommendations", Text, nullable=False),  # JSON list
)
