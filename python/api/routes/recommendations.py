"""
Recommendations API Routes

Provides endpoints for budget pacing recommendations and their history.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ..auth import User, get_current_user
from .. import services

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


class RecommendationItem(BaseModel):
    """Single recommendation card."""

    category: str
    message: str
    severity: str  # 'warning', 'caution', 'positive', 'info', 'general'
    pace_percentage: float | None = None
    pace_unbounded: bool = False


class HistoryEntry(BaseModel):
    """Stored recommendation batch."""

    generated_at: datetime
    recommendations: list[RecommendationItem]


@router.get("", response_model=list[RecommendationItem])
async def get_recommendations(
    user: User = Depends(get_current_user),
) -> list[RecommendationItem]:
    """Recompute recommendations for the current month."""
    return [
        RecommendationItem(**r.to_dict())
        for r in services.refresh_recommendations(user.user_id)
    ]


@router.get("/history", response_model=list[HistoryEntry])
async def get_recommendation_history(
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
) -> list[HistoryEntry]:
    """List previously generated recommendation batches, newest first."""
    return [
        HistoryEntry(
            generated_at=batch.generated_at,
            recommendations=[RecommendationItem(**r) for r in batch.recommendations],
        )
        for batch in services.history_repository.get_history(user.user_id, limit=limit)
    ]
