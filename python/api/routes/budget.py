"""
Budget API Routes

Provides endpoints for category budgets, the monthly total and the budget
page's recommendations.
"""

import calendar
import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy import delete, update

from ..auth import User, get_current_user
from ..database import execute_insert, execute_query
from .. import services
from ..schemas import Amount
from ..tables import budgets, monthly_budgets
from .recommendations import RecommendationItem

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/budgets", tags=["budgets"])


class BudgetItem(BaseModel):
    """Single category budget with its spending."""

    id: int
    category: str
    amount: float
    month: int
    year: int
    spent: float
    remaining: float
    utilization_percent: float


class BudgetOverview(BaseModel):
    """Budgets page data for one month."""

    month: int
    year: int
    period: str
    monthly_budget: float
    total_budgeted: float
    total_spent: float
    budgets: list[BudgetItem]
    recommendations: list[RecommendationItem]


class BudgetCreate(BaseModel):
    """Request to add or replace a category budget."""

    category: str = Field(min_length=1)
    amount: Amount
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1970)


class BudgetAmountUpdate(BaseModel):
    """Request to change a budget amount."""

    amount: Amount


class MonthlyBudgetUpdate(BaseModel):
    """Request to set the total budget for a month."""

    amount: Amount
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1970)


def _budget_item(row: dict, spent: float) -> BudgetItem:
    amount = float(row["amount"])
    return BudgetItem(
        id=row["id"],
        category=row["category"],
        amount=amount,
        month=row["month"],
        year=row["year"],
        spent=spent,
        remaining=amount - spent,
        utilization_percent=round(spent / amount * 100, 2) if amount > 0 else 0,
    )


def _check_monthly_limit(user_id: str, category: str, amount: float, month: int, year: int) -> None:
    """Reject category budgets that would exceed the monthly total.

    Raises:
        HTTPException: If no monthly total is set or the limit would be exceeded
    """
    monthly = services.get_monthly_budget(user_id, month, year)
    if not monthly or float(monthly["amount"]) == 0:
        raise HTTPException(
            status_code=400,
            detail="Please set a total monthly budget before adding category budgets.",
        )

    others_total = sum(
        float(b["amount"])
        for b in services.load_budgets(user_id, month=month, year=year)
        if b["category"] != category
    )
    monthly_amount = float(monthly["amount"])

    if others_total + amount > monthly_amount:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Budget exceeds monthly limit. You only have "
                f"{monthly_amount - others_total:.2f} remaining."
            ),
        )


def _after_budget_change(user: User, category: str, month: int, year: int) -> None:
    services.check_budget_alert(user, category, date(year, month, 1))
    services.refresh_recommendations_quietly(user.user_id)


@router.get("", response_model=BudgetOverview)
async def get_budgets(
    month: int | None = Query(None, ge=1, le=12),
    year: int | None = Query(None, ge=1970),
    user: User = Depends(get_current_user),
) -> BudgetOverview:
    """Get budgets, spending and recommendations for a month.

    Args:
        month: Month (defaults to current)
        year: Year (defaults to current)
        user: Authenticated user

    Returns:
        BudgetOverview
    """
    today = date.today()
    if month is None or year is None:
        month, year = today.month, today.year

    month_budgets = services.load_budgets(user.user_id, month=month, year=year)

    items = []
    for row in month_budgets:
        spent = services.sum_transactions(user.user_id, year, month, "expense", row["category"])
        items.append(_budget_item(row, float(spent)))

    monthly = services.get_monthly_budget(user.user_id, month, year)
    total_spent = services.sum_transactions(user.user_id, year, month, "expense")

    # Only the current month's advice is kept in history
    is_current = (month, year) == (today.month, today.year)

    recommendations = []
    if month_budgets:
        all_transactions = services.load_transactions(user.user_id)
        recommendations = [
            RecommendationItem(**r.to_dict())
            for r in services.recommendation_engine.generate(
                month_budgets,
                all_transactions,
                today=today,
                user_id=user.user_id if is_current else None,
            )
        ]

    return BudgetOverview(
        month=month,
        year=year,
        period=f"{calendar.month_name[month]} {year}",
        monthly_budget=float(monthly["amount"]) if monthly else 0.0,
        total_budgeted=sum(i.amount for i in items),
        total_spent=float(total_spent),
        budgets=items,
        recommendations=recommendations,
    )


@router.put("/monthly")
async def set_monthly_budget(
    request: MonthlyBudgetUpdate,
    user: User = Depends(get_current_user),
) -> dict:
    """Set or update the total budget for a month.

    The total cannot exceed the income recorded for that month.
    """
    if request.amount < 0:
        raise HTTPException(status_code=400, detail="Please provide a valid, non-negative amount.")

    total_income = float(services.sum_transactions(user.user_id, request.year, request.month, "income"))
    if request.amount > total_income:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Budget ({request.amount:,.2f}) cannot be set above your monthly "
                f"income of {total_income:,.2f}."
            ),
        )

    existing = services.get_monthly_budget(user.user_id, request.month, request.year)
    if existing:
        execute_query(
            update(monthly_budgets)
            .where(monthly_budgets.c.id == existing["id"])
            .values(amount=request.amount)
        )
    else:
        execute_insert(monthly_budgets, {
            "user_id": user.user_id,
            "amount": request.amount,
            "month": request.month,
            "year": request.year,
        })

    return {
        "message": "Total monthly budget has been updated.",
        "amount": request.amount,
        "month": request.month,
        "year": request.year,
    }


@router.post("", status_code=201)
async def create_budget(
    request: BudgetCreate,
    user: User = Depends(get_current_user),
) -> dict:
    """Add a category budget, or replace the amount if one exists for the month."""
    if request.amount <= 0:
        raise HTTPException(
            status_code=400,
            detail="Please provide a valid category and a positive amount.",
        )

    _check_monthly_limit(user.user_id, request.category, request.amount, request.month, request.year)

    existing = [
        b for b in services.load_budgets(user.user_id, month=request.month, year=request.year)
        if b["category"] == request.category
    ]

    if existing:
        budget_id = existing[0]["id"]
        execute_query(update(budgets).where(budgets.c.id == budget_id).values(amount=request.amount))
        message = "Budget updated"
    else:
        inserted = execute_insert(budgets, {
            "user_id": user.user_id,
            "category": request.category,
            "amount": request.amount,
            "month": request.month,
            "year": request.year,
        })
        budget_id = inserted["id"]
        message = "Budget added"

    logger.info(f"{message} for user {user.user_id}: {request.category} {request.year}-{request.month:02d}")
    _after_budget_change(user, request.category, request.month, request.year)

    return {"message": message, "budget_id": budget_id, "category": request.category}


@router.put("/{budget_id}")
async def update_budget(
    budget_id: int,
    request: BudgetAmountUpdate,
    user: User = Depends(get_current_user),
) -> dict:
    """Update a budget amount."""
    budget = services.get_budget(user.user_id, budget_id)
    if not budget:
        raise HTTPException(status_code=404, detail="Budget not found")

    if request.amount <= 0:
        raise HTTPException(status_code=400, detail="Please provide a valid positive amount.")

    _check_monthly_limit(user.user_id, budget["category"], request.amount, budget["month"], budget["year"])

    execute_query(update(budgets).where(budgets.c.id == budget_id).values(amount=request.amount))
    _after_budget_change(user, budget["category"], budget["month"], budget["year"])

    return {"message": "Budget limit updated successfully.", "budget_id": budget_id, "amount": request.amount}


@router.delete("/{budget_id}")
async def delete_budget(
    budget_id: int,
    user: User = Depends(get_current_user),
) -> dict:
    """Delete a category budget."""
    budget = services.get_budget(user.user_id, budget_id)
    if not budget:
        raise HTTPException(status_code=404, detail="Budget not found")

    execute_query(delete(budgets).where(budgets.c.id == budget_id))
    services.refresh_recommendations_quietly(user.user_id)

    return {"message": "Budget deleted", "budget_id": budget_id}


@router.delete("")
async def delete_month_budgets(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1970),
    user: User = Depends(get_current_user),
) -> dict:
    """Delete all category budgets for a month."""
    execute_query(
        delete(budgets)
        .where(budgets.c.user_id == user.user_id)
        .where(budgets.c.month == month)
        .where(budgets.c.year == year)
    )
    services.refresh_recommendations_quietly(user.user_id)

    return {"message": "All budgets for the selected month have been removed.", "month": month, "year": year}
