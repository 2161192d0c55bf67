"""
Recommendation History Module

Keeps past recommendation batches per user for display continuity.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)


@dataclass
class HistoryBatch:
    """One stored run of the recommendation engine."""

    user_id: str
    recommendations: list[dict] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "generated_at": self.generated_at.isoformat(),
            "recommendations": self.recommendations,
        }


class RecommendationHistoryRepository(ABC):
    """Storage interface for recommendation history."""

    def __init__(self, retention_days: int = 30):
        self.retention_days = retention_days

    @abstractmethod
    def get_history(self, user_id: str, limit: int | None = None) -> list[HistoryBatch]:
        """Get stored batches for a user, newest first.

        Args:
            user_id: User identifier
            limit: Maximum batches to return

        Returns:
            List of HistoryBatch
        """

    @abstractmethod
    def save_history(self, user_id: str, batch: list[dict]) -> HistoryBatch:
        """Store a batch of recommendations for a user.

        Args:
            user_id: User identifier
            batch: Serialized recommendations

        Returns:
            The stored HistoryBatch
        """

    def retention_cutoff(self, now: datetime | None = None) -> datetime:
        """Batches generated before this moment are pruned."""
        return (now or datetime.now()) - timedelta(days=self.retention_days)


class InMemoryRecommendationHistory(RecommendationHistoryRepository):
    """Process-local history store."""

    def __init__(self, retention_days: int = 30):
        super().__init__(retention_days)
        self._batches: dict[str, list[HistoryBatch]] = {}

    def get_history(self, user_id: str, limit: int | None = None) -> list[HistoryBatch]:
        batches = sorted(
            self._batches.get(str(user_id), []),
            key=lambda b: b.generated_at,
            reverse=True
        )
        return batches[:limit] if limit else batches

    def save_history(self, user_id: str, batch: list[dict]) -> HistoryBatch:
        stored = HistoryBatch(user_id=str(user_id), recommendations=list(batch))
        cutoff = self.retention_cutoff(stored.generated_at)

        kept = [b for b in self._batches.get(stored.user_id, []) if b.generated_at >= cutoff]
        kept.append(stored)
        self._batches[stored.user_id] = kept

        logger.debug(f"Stored {len(batch)} recommendations for user {user_id}")
        return stored
