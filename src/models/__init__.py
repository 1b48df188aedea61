"""
Data models and schemas for MockPrep

Contains Pydantic models for:
- Questions and the catalog filters
- Practice sessions and responses
- Evaluation results and feedback
- Performance history
"""

from src.models.interview import (
    HistoryFilter,
    InterviewSession,
    QuestionResponse,
    ResponseSubmission,
    SessionConfig,
    SessionStatistics,
    SessionStatus,
)
from src.models.question import (
    CandidateProfile,
    Question,
    QuestionDifficulty,
    QuestionFilter,
    QuestionType,
)
from src.models.evaluation import (
    AIFeedback,
    CriterionScore,
    ResponseEvaluation,
    ScoreKind,
    ScoringPolicy,
    SessionEvaluation,
)
from src.models.performance import (
    PerformanceRecord,
    PerformanceTracking,
    PerformanceTrend,
)

__all__ = [
    # Session
    "HistoryFilter",
    "InterviewSession",
    "QuestionResponse",
    "ResponseSubmission",
    "SessionConfig",
    "SessionStatistics",
    "SessionStatus",
    # Question
    "CandidateProfile",
    "Question",
    "QuestionDifficulty",
    "QuestionFilter",
    "QuestionType",
    # Evaluation
    "AIFeedback",
    "CriterionScore",
    "ResponseEvaluation",
    "ScoreKind",
    "ScoringPolicy",
    "SessionEvaluation",
    # Performance
    "PerformanceRecord",
    "PerformanceTracking",
    "PerformanceTrend",
]
