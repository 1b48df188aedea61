"""
Performance tracking models for MockPrep

Per-user score history and the trends derived from it.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from src.models.question import QuestionDifficulty, QuestionType


class PerformanceRecord(BaseModel):
    """One scored session for one user. Append-only."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    session_id: str
    score: float = Field(..., ge=0, le=100)
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    role: str | None = None
    difficulty: list[QuestionDifficulty] = Field(default_factory=list)
    question_types: list[QuestionType] = Field(default_factory=list)
    status: str = "completed"


class PerformanceTrend(BaseModel):
    """Recent-vs-previous comparison of session scores."""

    direction: Literal["improving", "declining", "stable"]
    magnitude: float
    recent_average: float
    previous_average: float


class Improvement(BaseModel):
    """First-vs-latest comparison of session scores."""

    points: float
    percentage: float | None = None  # None when the first score was 0
    direction: Literal["improved", "declined", "stable"]


class PerformanceTracking(BaseModel):
    """Snapshot attached to a session evaluation."""

    current: PerformanceRecord
    history: list[PerformanceRecord] = Field(default_factory=list)
    trends: PerformanceTrend | None = None
    improvement: Improvement | None = None
