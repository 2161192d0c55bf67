"""
Transactions API Routes

Provides endpoints for recording, viewing and exporting transactions.
"""

import csv
import io
import logging
from datetime import date, datetime, timedelta
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel
from sqlalchemy import delete, update

from recurring import calculate_next_date

from ..auth import User, get_current_user
from ..database import execute_insert, execute_query
from .. import services
from ..schemas import Amount
from ..tables import transactions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])

TransactionType = Literal["income", "expense", "saving"]
RecurringInterval = Literal["daily", "weekly", "monthly"]
Period = Literal["thisMonth", "lastMonth", "last7days"]


class Transaction(BaseModel):
    """Transaction model."""

    id: int
    amount: float
    type: str
    category: str
    description: str | None
    date: datetime
    is_recurring: bool
    recurring_interval: str | None
    next_recurring_date: datetime | None


class PeriodAnalytics(BaseModel):
    """Daily income/expense series for the chart."""

    period: str
    start_date: date
    end_date: date
    labels: list[str]
    income: list[float]
    expense: list[float]
    total_income: float
    total_expense: float
    net_amount: float


class TransactionListResponse(BaseModel):
    """Transaction list with period analytics."""

    items: list[Transaction]
    total: int
    analytics: PeriodAnalytics


class TransactionCreate(BaseModel):
    """Request to record a transaction."""

    amount: Amount
    type: TransactionType
    category: str | None = None
    description: str | None = None
    date: datetime | None = None
    is_recurring: bool = False
    recurring_interval: RecurringInterval | None = None


class TransactionUpdate(BaseModel):
    """Request to edit a transaction."""

    amount: Amount | None = None
    type: TransactionType | None = None
    category: str | None = None
    description: str | None = None
    date: datetime | None = None


class TransactionCreated(BaseModel):
    """Created transaction plus any budget warning it caused."""

    transaction: Transaction
    warning: str | None = None


def _to_model(row: dict) -> Transaction:
    return Transaction(
        id=row["id"],
        amount=float(row["amount"]),
        type=row["type"],
        category=row["category"],
        description=row["description"],
        date=row["date"],
        is_recurring=bool(row["is_recurring"]),
        recurring_interval=row["recurring_interval"],
        next_recurring_date=row["next_recurring_date"],
    )


def period_range(period: str, today: date) -> tuple[date, date]:
    """Inclusive first and last day of an analytics period."""
    if period == "lastMonth":
        end = today.replace(day=1) - timedelta(days=1)
        return end.replace(day=1), end
    if period == "last7days":
        return today - timedelta(days=6), today

    start = today.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, next_month - timedelta(days=1)


def build_analytics(rows: list[dict], period: str, start: date, end: date) -> PeriodAnalytics:
    """Aggregate transactions into per-day income and expense totals."""
    days = [start + timedelta(days=i) for i in range((end - start).days + 1)]
    income = {d: 0.0 for d in days}
    expense = {d: 0.0 for d in days}

    for row in rows:
        row_date = row["date"].date() if isinstance(row["date"], datetime) else row["date"]
        if row_date not in income:
            continue
        if row["type"] == "income":
            income[row_date] += float(row["amount"])
        elif row["type"] == "expense":
            expense[row_date] += float(row["amount"])

    total_income = sum(income.values())
    total_expense = sum(expense.values())

    return PeriodAnalytics(
        period=period,
        start_date=start,
        end_date=end,
        labels=[f"{d:%b} {d.day}" for d in days],
        income=[income[d] for d in days],
        expense=[expense[d] for d in days],
        total_income=total_income,
        total_expense=total_expense,
        net_amount=total_income - total_expense,
    )


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    txn_type: str | None = Query(None, alias="type"),
    search: str | None = Query(None),
    period: Period = Query("thisMonth"),
    user: User = Depends(get_current_user),
) -> TransactionListResponse:
    """List transactions with filters, plus chart data for a period.

    Args:
        txn_type: Filter by type ('all' or omitted for every type)
        search: Match against category and description
        period: Analytics period (thisMonth, lastMonth, last7days)
        user: Authenticated user

    Returns:
        Transactions (newest first) and period analytics
    """
    start, end = period_range(period, date.today())
    period_rows = services.load_transactions(
        user.user_id,
        start=datetime.combine(start, datetime.min.time()),
        end=datetime.combine(end + timedelta(days=1), datetime.min.time()),
    )

    rows = services.load_transactions(
        user.user_id,
        txn_type=txn_type if txn_type and txn_type != "all" else None,
        search=search,
    )

    return TransactionListResponse(
        items=[_to_model(r) for r in rows],
        total=len(rows),
        analytics=build_analytics(period_rows, period, start, end),
    )


@router.post("", response_model=TransactionCreated, status_code=201)
async def create_transaction(
    request: TransactionCreate,
    user: User = Depends(get_current_user),
) -> TransactionCreated:
    """Record a transaction.

    Missing categories are filled in from the description. Expenses are checked
    against this month's budget for that category.
    """
    if request.amount <= 0:
        raise HTTPException(status_code=400, detail="Please provide a positive amount")

    if request.is_recurring and not request.recurring_interval:
        raise HTTPException(status_code=400, detail="Recurring transactions need an interval")

    category = request.category or services.categorizer.categorize(request.description)
    txn_date = request.date or datetime.now()

    data = {
        "user_id": user.user_id,
        "amount": request.amount,
        "type": request.type,
        "category": category,
        "description": request.description,
        "date": txn_date,
        "is_recurring": request.is_recurring,
        "recurring_interval": request.recurring_interval if request.is_recurring else None,
        "next_recurring_date": (
            calculate_next_date(txn_date, request.recurring_interval) if request.is_recurring else None
        ),
    }
    inserted = execute_insert(transactions, data)
    logger.info(f"Transaction {inserted['id']} added for user {user.user_id}: {request.type} {category}")

    services.refresh_recommendations_quietly(user.user_id)

    warning = None
    if request.type == "expense":
        alert = services.check_budget_alert(user, category, date.today())
        if alert:
            warning = f"Warning: You've spent {alert.percent_spent}% of your {category} budget"

    return TransactionCreated(
        transaction=_to_model(services.get_transaction(user.user_id, inserted["id"])),
        warning=warning,
    )


@router.get("/export")
async def export_transactions(
    user: User = Depends(get_current_user),
) -> Response:
    """Export all transactions as CSV, newest first."""
    rows = services.load_transactions(user.user_id)

    if not rows:
        raise HTTPException(status_code=404, detail="No transactions to export")

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["Date", "Type", "Category", "Amount", "Description"])

    for row in rows:
        row_date = row["date"]
        writer.writerow([
            row_date.strftime("%Y-%m-%d") if isinstance(row_date, datetime) else row_date,
            row["type"],
            row["category"],
            f"{float(row['amount']):.2f}",
            row["description"] or "",
        ])

    return Response(
        content=buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="transactions.csv"'},
    )


@router.get("/categories", response_model=list[str])
async def list_categories(
    user: User = Depends(get_current_user),
) -> list[str]:
    """Categories known to the auto-categorizer."""
    return services.categorizer.categories


@router.get("/{transaction_id}", response_model=Transaction)
async def get_transaction(
    transaction_id: int,
    user: User = Depends(get_current_user),
) -> Transaction:
    """Get a single transaction by ID."""
    row = services.get_transaction(user.user_id, transaction_id)
    if not row:
        raise HTTPException(status_code=404, detail="Transaction not found")

    return _to_model(row)


@router.put("/{transaction_id}", response_model=Transaction)
async def update_transaction(
    transaction_id: int,
    request: TransactionUpdate,
    user: User = Depends(get_current_user),
) -> Transaction:
    """Update a transaction."""
    row = services.get_transaction(user.user_id, transaction_id)
    if not row:
        raise HTTPException(status_code=404, detail="Transaction not found")

    changes = request.model_dump(exclude_none=True)
    if "amount" in changes and changes["amount"] <= 0:
        raise HTTPException(status_code=400, detail="Please provide a positive amount")

    if changes:
        changes["updated_at"] = datetime.now()
        execute_query(update(transactions).where(transactions.c.id == transaction_id).values(**changes))
        services.refresh_recommendations_quietly(user.user_id)

    return _to_model(services.get_transaction(user.user_id, transaction_id))


@router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: int,
    user: User = Depends(get_current_user),
) -> dict:
    """Delete a transaction."""
    row = services.get_transaction(user.user_id, transaction_id)
    if not row:
        raise HTTPException(status_code=404, detail="Transaction not found")

    execute_query(delete(transactions).where(transactions.c.id == transaction_id))
    services.refresh_recommendations_quietly(user.user_id)

    return {"message": "Transaction removed", "transaction_id": transaction_id}
