"""
Report API endpoints

Handles:
- Session evaluation retrieval
- Condensed evaluation summaries
- Per-user performance history
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.api.dependencies import get_session_manager
from src.core.session_manager import SessionManager
from src.models.evaluation import SessionEvaluation
from src.models.interview import InterviewSession, SessionStatistics
from src.models.performance import Improvement, PerformanceRecord, PerformanceTrend

router = APIRouter()


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class ReportSummaryResponse(BaseModel):
    """Condensed evaluation response."""
    session_id: str
    overall_score: float
    level: str
    message: str
    top_strength: str | None = None
    top_improvement_area: str | None = None
    suggestions: list[str] = []
    statistics: SessionStatistics


class PerformanceResponse(BaseModel):
    """A user's score history with derived trends."""
    user_id: str
    sessions: int
    history: list[PerformanceRecord]
    trends: PerformanceTrend | None = None
    improvement: Improvement | None = None


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/performance/{user_id}", response_model=PerformanceResponse)
async def get_performance(
    user_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> PerformanceResponse:
    """Get a user's performance history and trend."""
    history = await manager.tracker.get_history(user_id)
    return PerformanceResponse(
        user_id=user_id,
        sessions=len(history),
        history=history,
        trends=manager.tracker.trend(history),
        improvement=manager.tracker.improvement(history),
    )


async def _load_evaluation(
    manager: SessionManager,
    session_id: str,
) -> tuple[InterviewSession, SessionEvaluation]:
    session = await manager.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")

    evaluation = session.evaluation or await manager.get_evaluation(session_id)
    if evaluation is None:
        raise HTTPException(
            status_code=409,
            detail=f"Session is {session.status.value}; evaluation is available once it ends",
        )
    return session, evaluation


@router.get("/{session_id}")
async def get_report(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionEvaluation:
    """Get the full evaluation of a finished session."""
    _, evaluation = await _load_evaluation(manager, session_id)
    return evaluation


@router.get("/{session_id}/summary", response_model=ReportSummaryResponse)
async def get_report_summary(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> ReportSummaryResponse:
    """Get a condensed view of a session evaluation."""
    session, evaluation = await _load_evaluation(manager, session_id)
    feedback = evaluation.feedback

    top_strength = max(feedback.strengths, key=lambda s: s.score, default=None)
    top_weakness = feedback.weaknesses[0] if feedback.weaknesses else None

    suggestions: list[str] = []
    for item in evaluation.evaluations:
        for suggestion in item.suggestions:
            if suggestion not in suggestions:
                suggestions.append(suggestion)

    return ReportSummaryResponse(
        session_id=session_id,
        overall_score=evaluation.overall_score,
        level=feedback.overall.level,
        message=feedback.overall.message,
        top_strength=top_strength.skill if top_strength else None,
        top_improvement_area=top_weakness.skill if top_weakness else None,
        suggestions=suggestions[:5],
        statistics=manager.calculate_session_stats(session),
    )
