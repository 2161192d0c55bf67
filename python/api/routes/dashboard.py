"""
Dashboard API Routes

Provides endpoints for the main dashboard view.
"""

from datetime import date, datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import select

from ..auth import User, get_current_user
from ..database import execute_query
from .. import services
from ..tables import budget_alerts

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class KPIData(BaseModel):
    """KPI card data."""

    label: str
    value: float
    formatted_value: str
    change_percent: float | None = None
    change_direction: str | None = None  # 'up', 'down', 'neutral'


class BudgetUsage(BaseModel):
    """Spending against budget for one category."""

    category: str
    budget: float
    spent: float
    percentage: float


class AlertItem(BaseModel):
    """Budget alert notification item."""

    id: int
    category: str
    message: str
    severity: str  # 'warning', 'critical'
    created_at: datetime


class RecentTransaction(BaseModel):
    """Row in the recent transactions list."""

    id: int
    date: datetime
    type: str
    category: str
    amount: float
    description: str | None


class DashboardSummary(BaseModel):
    """Complete dashboard summary response."""

    period: str
    kpis: list[KPIData]
    budget_usage: list[BudgetUsage]
    recent_alerts: list[AlertItem]
    recent_transactions: list[RecentTransaction]


def _kpi(label: str, value: float, previous: float, formatter) -> KPIData:
    change = ((value - previous) / abs(previous) * 100) if previous else 0
    return KPIData(
        label=label,
        value=value,
        formatted_value=formatter(value),
        change_percent=round(change, 1),
        change_direction="up" if change > 0 else "down" if change < 0 else "neutral",
    )


@router.get("/summary", response_model=DashboardSummary)
async def get_dashboard_summary(
    user: User = Depends(get_current_user),
) -> DashboardSummary:
    """Get dashboard summary with KPIs, budget usage, alerts and recent activity.

    Args:
        user: Authenticated user

    Returns:
        DashboardSummary
    """
    today = date.today()
    period_label = today.strftime("%B %Y")
    prev_month_end = today.replace(day=1).toordinal() - 1
    prev = date.fromordinal(prev_month_end)

    def total(year: int, month: int, txn_type: str) -> float:
        return float(services.sum_transactions(user.user_id, year, month, txn_type))

    income = total(today.year, today.month, "income")
    expense = total(today.year, today.month, "expense")
    saving = total(today.year, today.month, "saving")
    prev_income = total(prev.year, prev.month, "income")
    prev_expense = total(prev.year, prev.month, "expense")
    prev_saving = total(prev.year, prev.month, "saving")

    fmt = services.recommendation_engine.formatter.format

    kpis = [
        _kpi("Income", income, prev_income, fmt),
        _kpi("Expenses", expense, prev_expense, fmt),
        _kpi("Net", income - expense, prev_income - prev_expense, fmt),
        _kpi("Savings", saving, prev_saving, fmt),
    ]

    # Budget usage per category, including unbudgeted spending
    start, end = services.month_bounds(today.year, today.month)
    month_expenses = services.load_transactions(user.user_id, start=start, end=end, txn_type="expense")

    spent_by_category: dict[str, float] = {}
    for row in month_expenses:
        spent_by_category[row["category"]] = spent_by_category.get(row["category"], 0.0) + float(row["amount"])

    budget_by_category = {
        row["category"]: float(row["amount"])
        for row in services.load_budgets(user.user_id, month=today.month, year=today.year)
    }

    budget_usage = []
    for category in sorted(set(budget_by_category) | set(spent_by_category)):
        budget_amount = budget_by_category.get(category, 0.0)
        spent = spent_by_category.get(category, 0.0)
        if budget_amount > 0 or spent > 0:
            budget_usage.append(BudgetUsage(
                category=category,
                budget=budget_amount,
                spent=spent,
                percentage=round(spent / budget_amount * 100, 1) if budget_amount > 0 else 0,
            ))

    alert_rows = execute_query(
        select(budget_alerts)
        .where(budget_alerts.c.user_id == user.user_id)
        .order_by(budget_alerts.c.sent_at.desc())
        .limit(5)
    )
    recent_alerts = [
        AlertItem(
            id=row["id"],
            category=row["category"],
            message=f"Budget {row['category']} reached {row['percent_spent']}%",
            severity="critical" if row["percent_spent"] >= 100 else "warning",
            created_at=row["sent_at"],
        )
        for row in alert_rows
    ]

    recent_transactions = [
        RecentTransaction(
            id=row["id"],
            date=row["date"],
            type=row["type"],
            category=row["category"],
            amount=float(row["amount"]),
            description=row["description"],
        )
        for row in services.load_transactions(user.user_id)[:5]
    ]

    return DashboardSummary(
        period=period_label,
        kpis=kpis,
        budget_usage=budget_usage,
        recent_alerts=recent_alerts,
        recent_transactions=recent_transactions,
    )
