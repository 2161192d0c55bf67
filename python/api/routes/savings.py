"""
Savings API Routes

Provides the endpoint for moving money from the available balance into savings.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..auth import User, get_current_user
from .. import services
from ..schemas import Amount

router = APIRouter(prefix="/savings", tags=["savings"])


class SavingsContribution(BaseModel):
    """Request to contribute to savings."""

    amount: Amount
    description: str | None = None


class SavingsContributionResult(BaseModel):
    """Outcome of a savings contribution."""

    message: str
    expense_id: int
    saving_id: int
    amount: float
    available_balance: float


@router.post("/contribute", response_model=SavingsContributionResult, status_code=201)
async def contribute(
    request: SavingsContribution,
    user: User = Depends(get_current_user),
) -> SavingsContributionResult:
    """Contribute to savings from the available balance.

    Records a Savings expense and a matching saving transaction.

    Args:
        request: Contribution amount and optional description
        user: Authenticated user

    Returns:
        SavingsContributionResult
    """
    if request.amount <= 0:
        raise HTTPException(status_code=400, detail="Please enter a valid amount.")

    try:
        expense_id, saving_id = services.contribute_to_savings(
            user.user_id, request.amount, request.description
        )
    except services.InsufficientFundsError as e:
        raise HTTPException(status_code=400, detail=str(e))

    services.refresh_recommendations_quietly(user.user_id)

    return SavingsContributionResult(
        message="Successfully contributed to your savings!",
        expense_id=expense_id,
        saving_id=saving_id,
        amount=request.amount,
        available_balance=float(services.available_balance(user.user_id)),
    )
