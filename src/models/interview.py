"""
Interview session and state models for MockPrep
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from src.models.evaluation import SessionEvaluation
from src.models.question import Question, QuestionDifficulty, QuestionType


SKIPPED_RESPONSE_TEXT = "[SKIPPED]"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStatus(str, Enum):
    """Session state machine states."""

    CREATED = "created"      # Questions allocated, not started
    ACTIVE = "active"        # Accepting responses
    PAUSED = "paused"        # Temporarily paused
    COMPLETED = "completed"  # Finished (naturally or forced)
    ABANDONED = "abandoned"  # User gave up

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.ABANDONED)


class SessionConfig(BaseModel):
    """User's session configuration. Copied into the session, never mutated."""

    model_config = ConfigDict(frozen=True)

    duration_minutes: float = Field(
        default=60,
        allow_inf_nan=False,
        description="Total session length; drives the question count"
    )
    difficulty: set[QuestionDifficulty] = Field(
        default_factory=lambda: {QuestionDifficulty.MEDIUM, QuestionDifficulty.HARD},
        description="Allowed difficulty levels"
    )
    question_types: set[QuestionType] = Field(
        default_factory=lambda: {
            QuestionType.TECHNICAL,
            QuestionType.BEHAVIORAL,
            QuestionType.SITUATIONAL,
        },
        description="Allowed question types for the general pool"
    )
    allow_skip: bool = True
    time_per_question_minutes: float = Field(default=5, gt=0)

    # Optional targeting
    role: str | None = None
    company: str | None = None
    user_id: str | None = None


class ResponseSubmission(BaseModel):
    """Caller input for answering the current question."""

    text: str = ""
    time_spent_seconds: float = Field(default=0, ge=0)
    skipped: bool = False


class QuestionResponse(BaseModel):
    """A recorded answer (or skip) for one question. Immutable."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    text: str
    time_spent_seconds: float = 0
    skipped: bool = False
    submitted_at: datetime = Field(default_factory=utc_now)

    # Snapshot of the question at submission time
    question_index: int
    question_type: QuestionType
    question_difficulty: QuestionDifficulty


class InterviewSession(BaseModel):
    """Complete interview session state."""

    # Identification
    id: str = Field(default_factory=lambda: f"interview_{uuid4().hex[:12]}")

    # Setup
    config: SessionConfig
    questions: list[Question] = Field(default_factory=list)

    # Progress
    responses: list[QuestionResponse] = Field(default_factory=list)
    current_question_index: int = 0
    status: SessionStatus = SessionStatus.CREATED

    # Timing
    created_at: datetime = Field(default_factory=utc_now)
    start_time: datetime | None = None
    end_time: datetime | None = None
    pause_started_at: datetime | None = None
    paused_duration_ms: float = 0

    # Attached once the session is terminal
    evaluation: SessionEvaluation | None = None

    def get_current_question(self) -> Question | None:
        """Get the question awaiting a response."""
        if self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    def get_question(self, question_id: str) -> Question | None:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    @property
    def remaining_questions(self) -> int:
        return len(self.questions) - self.current_question_index

    def elapsed_seconds(self, now: datetime | None = None) -> float:
        """Wall-clock time spent in the session, excluding pauses."""
        if not self.start_time:
            return 0.0
        end = self.end_time or now or utc_now()
        paused_ms = self.paused_duration_ms
        if self.pause_started_at and not self.end_time:
            paused_ms += (end - self.pause_started_at).total_seconds() * 1000
        return max(0.0, (end - self.start_time).total_seconds() - paused_ms / 1000)


class HistoryFilter(BaseModel):
    """Predicates for querying finished sessions. Empty means no constraint."""

    status: SessionStatus | None = None
    role: str | None = None
    user_id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class SessionStatistics(BaseModel):
    """Progress and timing summary of a session."""

    total_time_seconds: int = 0
    total_time_formatted: str = "00:00"
    completed_questions: int = 0   # answered or skipped
    answered_questions: int = 0
    skipped_questions: int = 0
    total_questions: int = 0
    average_time_per_question: int = 0
    completion_rate: int = 0
    status: SessionStatus
    question_types: dict[str, int] = Field(default_factory=dict)
    difficulty_breakdown: dict[str, int] = Field(default_factory=dict)
