"""
API Dependencies

Provides dependency injection for API endpoints.
Manages singleton instances of core components.
"""

from fastapi import HTTPException

from src.config.settings import get_settings
from src.core.ai_reasoning import AIReasoningLayer
from src.core.evaluation_engine import ResponseEvaluator
from src.core.exceptions import (
    ConfigurationError,
    InvalidStateError,
    NotFoundError,
    OutOfRangeError,
    PersistenceError,
    PracticeEngineError,
)
from src.core.performance_tracker import PerformanceTracker
from src.core.question_bank import QuestionBank
from src.core.session_aggregator import SessionAggregator
from src.core.session_manager import SessionManager
from src.core.storage import (
    HistoryRepository,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)


# ============================================================================
# SINGLETON INSTANCES
# ============================================================================

_session_manager: SessionManager | None = None
_ai_reasoning: AIReasoningLayer | None = None


def get_ai_reasoning() -> AIReasoningLayer:
    """Get the AI reasoning layer singleton."""
    global _ai_reasoning

    if _ai_reasoning is None:
        _ai_reasoning = AIReasoningLayer()

    return _ai_reasoning


def _build_store() -> KeyValueStore:
    settings = get_settings()
    if settings.storage_backend == "file":
        return JsonFileKeyValueStore(settings.storage_dir)
    return InMemoryKeyValueStore()


def get_session_manager() -> SessionManager:
    """
    Get the session manager singleton.

    Lazily wires all core components. History and custom questions share
    one key-value store. Oracle feedback is attached to evaluations only
    when an oracle is configured.
    """
    global _session_manager

    if _session_manager is None:
        settings = get_settings()
        policy = settings.scoring_policy()
        store = _build_store()
        history = HistoryRepository(
            store,
            session_limit=settings.session_history_limit,
            evaluation_limit=settings.evaluation_history_limit,
        )
        ai_reasoning = get_ai_reasoning()

        _session_manager = SessionManager(
            question_bank=QuestionBank(store=store),
            evaluator=ResponseEvaluator(
                ai_reasoning=ai_reasoning if ai_reasoning.enabled else None,
                policy=policy,
            ),
            aggregator=SessionAggregator(policy),
            tracker=PerformanceTracker(history),
            history=history,
        )

    return _session_manager


def get_question_bank() -> QuestionBank:
    return get_session_manager().question_bank


# ============================================================================
# ERROR MAPPING
# ============================================================================

ERROR_STATUS_CODES: dict[type[PracticeEngineError], int] = {
    ConfigurationError: 400,
    NotFoundError: 404,
    InvalidStateError: 409,
    OutOfRangeError: 409,
    PersistenceError: 503,
}


def to_http_exception(error: PracticeEngineError) -> HTTPException:
    """Map an engine error to the HTTP error surfaced to clients."""
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


async def cleanup():
    """Cleanup resources on shutdown."""
    global _session_manager, _ai_reasoning

    if _ai_reasoning:
        await _ai_reasoning.close()
        _ai_reasoning = None

    _session_manager = None
