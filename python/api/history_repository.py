"""
Recommendation History Repository

Stores recommendation batches in the recommendation_history table.
"""

import json
import logging
from datetime import datetime

from sqlalchemy import delete, select

from budget.history_store import HistoryBatch, RecommendationHistoryRepository

from .database import execute_insert, execute_query
from .tables import recommendation_history

logger = logging.getLogger(__name__)


class SqlRecommendationHistoryRepository(RecommendationHistoryRepository):
    """Database-backed recommendation history."""

    def get_history(self, user_id: str, limit: int | None = None) -> list[HistoryBatch]:
        statement = (
            select(recommendation_history)
            .where(recommendation_history.c.user_id == str(user_id))
            .order_by(recommendation_history.c.generated_at.desc(), recommendation_history.c.id.desc())
        )
        if limit:
            statement = statement.limit(limit)

        return [
            HistoryBatch(
                user_id=row["user_id"],
                generated_at=row["generated_at"],
                recommendations=json.loads(row["recommendations"]),
            )
            for row in execute_query(statement)
        ]

    def save_history(self, user_id: str, batch: list[dict]) -> HistoryBatch:
        stored = HistoryBatch(user_id=str(user_id), recommendations=list(batch), generated_at=datetime.now())

        execute_query(
            delete(recommendation_history)
            .where(recommendation_history.c.user_id == stored.user_id)
            .where(recommendation_history.c.generated_at < self.retention_cutoff(stored.generated_at))
        )
        execute_insert(recommendation_history, {
            "user_id": stored.user_id,
            "generated_at": stored.generated_at,
            "recommendations": json.dumps(stored.recommendations),
        })

        logger.debug(f"Saved {len(batch)} recommendations to history for user {user_id}")
        return stored
