"""
Performance Tracker for MockPrep

Keeps each user's ordered history of session scores and derives trends
from it. The in-memory history is authoritative; persistence failures are
logged and do not lose the record.
"""

import asyncio
import logging
from statistics import fmean

from src.core.exceptions import PersistenceError
from src.core.storage import HistoryRepository
from src.models.interview import InterviewSession, utc_now
from src.models.performance import (
    Improvement,
    PerformanceRecord,
    PerformanceTracking,
    PerformanceTrend,
)

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"
TREND_WINDOW = 5
TREND_THRESHOLD = 5
TRACKING_HISTORY_LENGTH = 10


class PerformanceTracker:
    """Per-user score history with trend and improvement calculations."""

    def __init__(self, repository: HistoryRepository | None = None):
        self.repository = repository
        self._histories: dict[str, list[PerformanceRecord]] = {}
        self._lock = asyncio.Lock()

    async def _load(self, user_id: str) -> list[PerformanceRecord]:
        """History for a user, loading it from the repository on first use."""
        if user_id in self._histories:
            return self._histories[user_id]

        records: list[PerformanceRecord] = []
        if self.repository is not None:
            try:
                records = await self.repository.get_performance_history(user_id)
            except PersistenceError as e:
                logger.warning(f"Could not load performance history for {user_id}: {e}")
        self._histories[user_id] = records
        return records

    async def get_history(self, user_id: str) -> list[PerformanceRecord]:
        async with self._lock:
            return list(await self._load(user_id))

    async def record(
        self,
        session: InterviewSession,
        overall_score: float,
    ) -> PerformanceRecord:
        """
        Append a session's score to its user's history.

        Recording the same session twice returns the existing record.

        Args:
            session: Terminal session
            overall_score: Its overall score

        Returns:
            The stored PerformanceRecord
        """
        user_id = session.config.user_id or ANONYMOUS_USER

        async with self._lock:
            history = await self._load(user_id)
            for existing in history:
                if existing.session_id == session.id:
                    return existing

            record = PerformanceRecord(
                user_id=user_id,
                session_id=session.id,
                score=overall_score,
                date=session.end_time or utc_now(),
                role=session.config.role,
                difficulty=sorted(session.config.difficulty, key=lambda d: d.value),
                question_types=sorted(session.config.question_types, key=lambda t: t.value),
                status=session.status.value,
            )
            history.append(record)
            snapshot = list(history)

        if self.repository is not None:
            try:
                await self.repository.save_performance_history(user_id, snapshot)
            except PersistenceError as e:
                logger.warning(f"Performance history for {user_id} not persisted: {e}")

        logger.info(f"Recorded score {overall_score} for user {user_id} (session {session.id})")
        return record

    async def track(
        self,
        session: InterviewSession,
        overall_score: float,
    ) -> PerformanceTracking:
        """Record the session and snapshot the user's recent performance."""
        current = await self.record(session, overall_score)
        history = await self.get_history(current.user_id)
        return PerformanceTracking(
            current=current,
            history=history[-TRACKING_HISTORY_LENGTH:],
            trends=self.trend(history),
            improvement=self.improvement(history),
        )

    # =========================================================================
    # DERIVED METRICS
    # =========================================================================

    @staticmethod
    def trend(history: list[PerformanceRecord]) -> PerformanceTrend | None:
        """
        Compare the latest scores against the ones before them.

        The recent window is the last 5 records (fewer for short histories,
        always leaving at least one earlier record), compared against up to
        5 records preceding it.
        """
        if len(history) < 2:
            return None

        recent_count = min(TREND_WINDOW, len(history) - 1)
        recent = history[-recent_count:]
        previous = history[-recent_count - TREND_WINDOW:-recent_count]

        recent_average = fmean(r.score for r in recent)
        previous_average = fmean(r.score for r in previous)
        delta = recent_average - previous_average

        if delta > TREND_THRESHOLD:
            direction = "improving"
        elif delta < -TREND_THRESHOLD:
            direction = "declining"
        else:
            direction = "stable"

        return PerformanceTrend(
            direction=direction,
            magnitude=round(abs(delta), 2),
            recent_average=round(recent_average, 2),
            previous_average=round(previous_average, 2),
        )

    @staticmethod
    def improvement(history: list[PerformanceRecord]) -> Improvement | None:
        """First-vs-latest score change."""
        if len(history) < 2:
            return None

        first = history[0].score
        points = history[-1].score - first
        if points > 0:
            direction = "improved"
        elif points < 0:
            direction = "declined"
        else:
            direction = "stable"

        return Improvement(
            points=round(points, 2),
            percentage=round(points / first * 100, 2) if first else None,
            direction=direction,
        )
