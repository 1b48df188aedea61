"""
Evaluation models for MockPrep

Defines the rubric and scoring structures for evaluating candidate responses
and whole sessions.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from src.models.performance import PerformanceTracking
from src.models.question import QuestionDifficulty, QuestionType


class ScoreKind(str, Enum):
    """How a criterion score was produced."""

    FLAG_SUM = "flag_sum"                  # 25 points per structural check
    KEYWORD_OVERLAP = "keyword_overlap"    # share of expected keywords found
    PATTERN_FAMILIES = "pattern_families"  # share of phrase families matched
    STAR = "star"                          # Situation/Task/Action/Result total
    RATIO = "ratio"                        # plain 0-100 ratio


class CriterionScore(BaseModel):
    """A single rubric criterion, normalized to 0-100."""

    model_config = ConfigDict(frozen=True)

    kind: ScoreKind
    value: float = Field(..., ge=0, le=100)
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def zero(cls, kind: ScoreKind = ScoreKind.RATIO, **details: Any) -> "CriterionScore":
        return cls(kind=kind, value=0.0, details=details)


class AIFeedback(BaseModel):
    """Qualitative feedback from the oracle (or its static stand-in)."""

    source: Literal["oracle", "fallback"] = "oracle"
    score: float = Field(default=5, ge=0, le=10)
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    completeness: str = ""
    clarity: str = ""
    examples: str = ""


class CoachingAdvice(BaseModel):
    """Real-time coaching for a response in progress."""

    source: Literal["oracle", "fallback"] = "oracle"
    encouragement: str = "Keep going! You're doing great."
    suggestions: list[str] = Field(default_factory=list)
    time_management: str = ""
    next_steps: str = ""


class ResponseEvaluation(BaseModel):
    """Complete evaluation of a single response."""

    model_config = ConfigDict(frozen=True)

    # Reference
    question_id: str
    question_type: QuestionType
    question_difficulty: QuestionDifficulty
    time_spent_seconds: float = 0

    # Scores
    scores: dict[str, CriterionScore] = Field(default_factory=dict)
    composite_score: float = Field(..., ge=0, le=100)

    # Feedback
    ai_feedback: AIFeedback | None = None
    suggestions: list[str] = Field(default_factory=list)

    @property
    def numeric_scores(self) -> dict[str, float]:
        return {name: score.value for name, score in self.scores.items()}


# === SESSION-LEVEL FEEDBACK ===

class OverallFeedback(BaseModel):
    """Qualitative band for the overall score."""

    level: str
    message: str


class Strength(BaseModel):
    criterion: str
    skill: str
    score: float
    description: str


class Weakness(BaseModel):
    criterion: str
    skill: str
    score: float
    description: str
    priority: Literal["high", "medium", "low"]


class Recommendation(BaseModel):
    """Concrete remediation for one weakness."""

    criterion: str
    area: str
    priority: Literal["high", "medium", "low"]
    actions: list[str] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)
    timeline: str


class PlanItem(BaseModel):
    criterion: str
    skill: str
    priority: Literal["high", "medium", "low"]
    actions: list[str] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)


class ImprovementPlan(BaseModel):
    immediate: list[PlanItem] = Field(default_factory=list)   # up to 2 weeks
    short_term: list[PlanItem] = Field(default_factory=list)  # up to 2 months
    long_term: list[PlanItem] = Field(default_factory=list)   # beyond


class SkillStats(BaseModel):
    average: float
    min: float
    max: float
    consistency: float = Field(..., ge=0, le=100)


class SessionFeedback(BaseModel):
    overall: OverallFeedback
    strengths: list[Strength] = Field(default_factory=list)
    weaknesses: list[Weakness] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    skill_breakdown: dict[str, SkillStats] = Field(default_factory=dict)
    improvement_plan: ImprovementPlan = Field(default_factory=ImprovementPlan)


class EvaluationMetadata(BaseModel):
    total_questions: int = 0
    answered_questions: int = 0
    skipped_questions: int = 0
    session_duration_seconds: float = 0


class SessionEvaluation(BaseModel):
    """Complete evaluation of a finished (or abandoned) session."""

    session_id: str
    overall_score: float = Field(..., ge=0, le=100)
    evaluations: list[ResponseEvaluation] = Field(default_factory=list)
    feedback: SessionFeedback
    performance_tracking: PerformanceTracking | None = None
    evaluated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: EvaluationMetadata = Field(default_factory=EvaluationMetadata)


class ScoringPolicy(BaseModel):
    """
    Tunable thresholds for session scoring.

    The time-management cutoffs are policy, not rubric: they do not scale
    with question difficulty or the duration budget.
    """

    low_variance_threshold: float = 100.0
    consistency_bonus: float = 5.0
    slow_response_seconds: float = 300.0
    slow_response_penalty: float = 5.0
    rushed_response_seconds: float = 60.0
    rushed_response_penalty: float = 10.0
    strength_threshold: float = 80.0
    weakness_threshold: float = 60.0
    suggestion_threshold: float = 70.0
    max_suggestions: int = 5
