"""
Interview API endpoints

Handles the practice session lifecycle:
- Creating and starting sessions
- Pausing, resuming, completing and abandoning
- Submitting and skipping responses
- History, export and AI assistance
"""

from datetime import datetime
from typing import Any, Awaitable, Callable, Literal

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field

from src.api.dependencies import get_ai_reasoning, get_session_manager, to_http_exception
from src.core.ai_reasoning import AIReasoningLayer
from src.core.exceptions import NotFoundError, PracticeEngineError
from src.core.session_manager import SessionManager
from src.models.evaluation import CoachingAdvice
from src.models.interview import (
    HistoryFilter,
    InterviewSession,
    ResponseSubmission,
    SessionStatus,
)
from src.models.question import FollowUpSuggestions

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class SessionSummary(BaseModel):
    """Compact view of a session's progress."""
    session_id: str
    status: SessionStatus
    current_question: dict[str, Any] | None = None
    question_number: int
    total_questions: int
    remaining_questions: int
    elapsed_seconds: float
    overall_score: float | None = None


class SkipRequest(BaseModel):
    """Request model for skipping the current question."""
    time_spent_seconds: float = Field(default=0, ge=0)


class FollowUpRequest(BaseModel):
    """Request model for follow-up suggestions. Defaults to the last answer."""
    question_id: str | None = None
    response_text: str | None = None


class CoachingRequest(BaseModel):
    """Request model for real-time coaching."""
    response_text: str = ""


def summarize(session: InterviewSession) -> SessionSummary:
    question = session.get_current_question()
    current = None
    if question is not None and not session.status.is_terminal:
        current = {
            "id": question.id,
            "text": question.text,
            "type": question.type.value,
            "difficulty": question.difficulty.value,
        }
    return SessionSummary(
        session_id=session.id,
        status=session.status,
        current_question=current,
        question_number=min(session.current_question_index + 1, len(session.questions)),
        total_questions=len(session.questions),
        remaining_questions=session.remaining_questions,
        elapsed_seconds=round(session.elapsed_seconds(), 2),
        overall_score=session.evaluation.overall_score if session.evaluation else None,
    )


# ============================================================================
# LIFECYCLE ENDPOINTS
# ============================================================================

@router.post("/sessions", response_model=SessionSummary, status_code=201)
async def create_session(
    config: dict[str, Any] = Body(default_factory=dict),
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSummary:
    """
    Create a new practice session.

    Questions are allocated immediately; call /start to begin.
    """
    try:
        session = await manager.create_session(config)
    except PracticeEngineError as e:
        raise to_http_exception(e)
    return summarize(session)


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> InterviewSession:
    """Get the full state of a session."""
    session = await manager.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


async def _apply(action: Callable[[str], Awaitable[InterviewSession]], session_id: str) -> SessionSummary:
    try:
        session = await action(session_id)
    except PracticeEngineError as e:
        raise to_http_exception(e)
    return summarize(session)


@router.post("/sessions/{session_id}/start", response_model=SessionSummary)
async def start_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSummary:
    """Start the session; the first question becomes current."""
    return await _apply(manager.start_session, session_id)


@router.post("/sessions/{session_id}/pause", response_model=SessionSummary)
async def pause_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSummary:
    return await _apply(manager.pause_session, session_id)


@router.post("/sessions/{session_id}/resume", response_model=SessionSummary)
async def resume_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSummary:
    return await _apply(manager.resume_session, session_id)


@router.post("/sessions/{session_id}/complete", response_model=SessionSummary)
async def complete_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSummary:
    """End the session early and evaluate the responses so far."""
    return await _apply(manager.complete_session, session_id)


@router.post("/sessions/{session_id}/abandon", response_model=SessionSummary)
async def abandon_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSummary:
    """Give up on the session. It is still scored."""
    return await _apply(manager.abandon_session, session_id)


# ============================================================================
# RESPONSES
# ============================================================================

@router.post("/sessions/{session_id}/respond", response_model=SessionSummary)
async def submit_response(
    session_id: str,
    request: ResponseSubmission,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSummary:
    """
    Submit a response to the current question.

    Answering the last question completes and evaluates the session.
    """
    try:
        session = await manager.submit_response(session_id, request)
    except PracticeEngineError as e:
        raise to_http_exception(e)
    return summarize(session)


@router.post("/sessions/{session_id}/skip", response_model=SessionSummary)
async def skip_question(
    session_id: str,
    request: SkipRequest | None = None,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSummary:
    """Skip the current question."""
    time_spent = request.time_spent_seconds if request else 0
    try:
        session = await manager.skip_question(session_id, time_spent)
    except PracticeEngineError as e:
        raise to_http_exception(e)
    return summarize(session)


# ============================================================================
# QUERIES
# ============================================================================

@router.get("/sessions/{session_id}/export")
async def export_session(
    session_id: str,
    format: Literal["json", "dict"] = Query(default="json"),
    manager: SessionManager = Depends(get_session_manager),
):
    """Export a session with statistics and evaluation."""
    try:
        exported = await manager.export_session(session_id, format)
    except PracticeEngineError as e:
        raise to_http_exception(e)

    if isinstance(exported, str):
        return Response(content=exported, media_type="application/json")
    return exported


@router.get("/history", response_model=list[SessionSummary])
async def get_history(
    status: SessionStatus | None = None,
    role: str | None = None,
    user_id: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    manager: SessionManager = Depends(get_session_manager),
) -> list[SessionSummary]:
    """Finished sessions, newest first."""
    sessions = await manager.get_history(HistoryFilter(
        status=status,
        role=role,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
    ))
    return [summarize(s) for s in sessions]


@router.get("/active", response_model=list[SessionSummary])
async def get_active_sessions(
    manager: SessionManager = Depends(get_session_manager),
) -> list[SessionSummary]:
    return [summarize(s) for s in await manager.get_active_sessions()]


# ============================================================================
# AI ASSISTANCE
# ============================================================================

@router.post("/sessions/{session_id}/follow-ups")
async def generate_follow_ups(
    session_id: str,
    request: FollowUpRequest | None = None,
    manager: SessionManager = Depends(get_session_manager),
    ai_reasoning: AIReasoningLayer = Depends(get_ai_reasoning),
) -> FollowUpSuggestions:
    """
    Suggest follow-up questions for an answered question.

    Uses the most recent non-skipped response unless a question is named.
    """
    request = request or FollowUpRequest()
    session = await manager.get_session(session_id)
    if session is None:
        raise to_http_exception(NotFoundError("Session", session_id))

    answered = [r for r in session.responses if not r.skipped]
    if request.question_id:
        answered = [r for r in answered if r.question_id == request.question_id]
    if not answered and request.response_text is None:
        raise HTTPException(status_code=409, detail="No answered question to follow up on")

    if answered:
        response = answered[-1]
        question = session.questions[response.question_index]
        text = request.response_text if request.response_text is not None else response.text
    else:
        question = session.get_question(request.question_id) if request.question_id else None
        question = question or session.get_current_question()
        if question is None:
            raise HTTPException(status_code=409, detail="No question to follow up on")
        text = request.response_text

    result = await ai_reasoning.generate_follow_up_questions(question, text, session.config.role)
    return result.value


@router.post("/sessions/{session_id}/coaching")
async def get_coaching(
    session_id: str,
    request: CoachingRequest,
    manager: SessionManager = Depends(get_session_manager),
    ai_reasoning: AIReasoningLayer = Depends(get_ai_reasoning),
) -> CoachingAdvice:
    """Real-time coaching on the answer being drafted."""
    session = await manager.get_session(session_id)
    if session is None:
        raise to_http_exception(NotFoundError("Session", session_id))

    result = await ai_reasoning.provide_coaching(session, request.response_text)
    return result.value
