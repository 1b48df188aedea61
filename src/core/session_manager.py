"""
Session Manager for MockPrep

State machine for the practice session lifecycle:
CREATED → ACTIVE ⇄ PAUSED → COMPLETED | ABANDONED

Owns live sessions, serializes mutations per session, runs the evaluation
pipeline when a session ends and hands finished sessions over to history.
"""

import asyncio
import json
import logging
import math
from collections import Counter
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Mapping

from pydantic import ValidationError

from src.config.settings import get_settings
from src.core.evaluation_engine import ResponseEvaluator
from src.core.exceptions import (
    ConfigurationError,
    InvalidStateError,
    NotFoundError,
    OutOfRangeError,
    PersistenceError,
)
from src.core.performance_tracker import PerformanceTracker
from src.core.question_bank import QuestionBank
from src.core.session_aggregator import SessionAggregator
from src.core.storage import (
    HistoryRepository,
    InMemoryKeyValueStore,
    InMemorySessionStore,
    SessionStore,
)
from src.models.evaluation import SessionEvaluation
from src.models.interview import (
    SKIPPED_RESPONSE_TEXT,
    HistoryFilter,
    InterviewSession,
    QuestionResponse,
    ResponseSubmission,
    SessionConfig,
    SessionStatistics,
    SessionStatus,
)

logger = logging.getLogger(__name__)


def format_duration(seconds: float) -> str:
    """Seconds as MM:SS."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


def _as_utc(value: datetime | None) -> datetime | None:
    # Naive filter dates are taken as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SessionManager:
    """
    Lifecycle owner for practice sessions.

    Responsibilities:
    - Create sessions from a configuration and a question allocation
    - Enforce valid state transitions
    - Record responses atomically, one mutation per session at a time
    - Evaluate, track and persist sessions once they end
    """

    # Valid state transitions
    VALID_TRANSITIONS: dict[SessionStatus, list[SessionStatus]] = {
        SessionStatus.CREATED: [SessionStatus.ACTIVE, SessionStatus.COMPLETED, SessionStatus.ABANDONED],
        SessionStatus.ACTIVE: [SessionStatus.PAUSED, SessionStatus.COMPLETED, SessionStatus.ABANDONED],
        SessionStatus.PAUSED: [SessionStatus.ACTIVE, SessionStatus.COMPLETED, SessionStatus.ABANDONED],
        SessionStatus.COMPLETED: [],  # Terminal state
        SessionStatus.ABANDONED: [],  # Terminal state
    }

    def __init__(
        self,
        question_bank: QuestionBank | None = None,
        evaluator: ResponseEvaluator | None = None,
        aggregator: SessionAggregator | None = None,
        tracker: PerformanceTracker | None = None,
        session_store: SessionStore | None = None,
        history: HistoryRepository | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the manager with its collaborators.

        Args:
            question_bank: Question allocation
            evaluator: Per-response scoring
            aggregator: Session-level scoring and feedback
            tracker: Cross-session performance history
            session_store: Live session storage
            history: Persistent history of finished sessions
            clock: Source of "now", injectable for tests
        """
        settings = get_settings()
        policy = settings.scoring_policy()
        self.question_bank = question_bank if question_bank is not None else QuestionBank()
        self.evaluator = evaluator if evaluator is not None else ResponseEvaluator(policy=policy)
        self.aggregator = aggregator if aggregator is not None else SessionAggregator(policy)
        self.sessions = session_store if session_store is not None else InMemorySessionStore()
        if history is None:
            history = HistoryRepository(
                InMemoryKeyValueStore(),
                session_limit=settings.session_history_limit,
                evaluation_limit=settings.evaluation_history_limit,
            )
        self.history = history
        self.tracker = tracker if tracker is not None else PerformanceTracker(self.history)
        self.retention_days = settings.history_retention_days
        self.clock = clock if clock is not None else (lambda: datetime.now(timezone.utc))

        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def _session_lock(self, session_id: str) -> AsyncIterator[None]:
        """Serialize mutations of one live session."""
        if session_id not in self._locks:
            # Raises for unknown and ended sessions, so no lock is created for them
            await self._load_live(session_id)
        async with self._lock_for(session_id):
            yield

    async def _load_live(self, session_id: str) -> InterviewSession:
        """Fetch a session that may still change state."""
        session = await self.sessions.get(session_id)
        if session is not None:
            return session
        if await self._get_persisted(session_id) is not None:
            raise InvalidStateError(f"Session {session_id} has already ended")
        raise NotFoundError("Session", session_id)

    async def _get_persisted(self, session_id: str) -> InterviewSession | None:
        try:
            return await self.history.get_session(session_id)
        except PersistenceError as e:
            logger.warning(f"History lookup for {session_id} failed: {e}")
            return None

    def _transition(self, session: InterviewSession, new_status: SessionStatus) -> None:
        """Validate and apply a state change."""
        old_status = session.status
        valid_next = self.VALID_TRANSITIONS.get(old_status, [])
        if new_status not in valid_next:
            raise InvalidStateError(
                f"Invalid transition from {old_status.value} to {new_status.value}. "
                f"Valid transitions: {[s.value for s in valid_next]}"
            )
        session.status = new_status
        logger.info(f"Session {session.id}: {old_status.value} → {new_status.value}")

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def create_session(
        self,
        config: SessionConfig | Mapping[str, Any] | None = None,
    ) -> InterviewSession:
        """
        Create a new session with an allocated question set.

        Args:
            config: Session configuration, as a model or a plain mapping

        Returns:
            The new session, in CREATED state

        Raises:
            ConfigurationError: Invalid config or no matching questions
        """
        if not isinstance(config, SessionConfig):
            try:
                config = SessionConfig.model_validate(dict(config or {}))
            except ValidationError as e:
                raise ConfigurationError(f"Invalid session configuration: {e}") from e

        if not math.isfinite(config.duration_minutes) or config.duration_minutes <= 0:
            raise ConfigurationError("duration_minutes must be a finite number greater than 0")

        questions = self.question_bank.allocate(config)
        if not questions:
            raise ConfigurationError(
                "No questions match the session configuration; "
                "widen the difficulty or question type filters"
            )

        session = InterviewSession(
            config=config,
            questions=questions,
            created_at=self.clock(),
        )
        await self.sessions.put(session)

        logger.info(
            f"Created session {session.id}: {len(questions)} questions, "
            f"{config.duration_minutes} min, role={config.role}, company={config.company}"
        )
        return session

    async def start_session(self, session_id: str) -> InterviewSession:
        async with self._session_lock(session_id):
            session = await self._load_live(session_id)
            if session.status != SessionStatus.CREATED:
                raise InvalidStateError(
                    f"Session {session_id} cannot start from {session.status.value}"
                )
            self._transition(session, SessionStatus.ACTIVE)
            session.start_time = self.clock()
            await self.sessions.put(session)
            return session

    async def pause_session(self, session_id: str) -> InterviewSession:
        async with self._session_lock(session_id):
            session = await self._load_live(session_id)
            if session.status != SessionStatus.ACTIVE:
                raise InvalidStateError(
                    f"Session {session_id} cannot pause from {session.status.value}"
                )
            self._transition(session, SessionStatus.PAUSED)
            session.pause_started_at = self.clock()
            await self.sessions.put(session)
            return session

    async def resume_session(self, session_id: str) -> InterviewSession:
        async with self._session_lock(session_id):
            session = await self._load_live(session_id)
            if session.status != SessionStatus.PAUSED:
                raise InvalidStateError(
                    f"Session {session_id} cannot resume from {session.status.value}"
                )
            self._transition(session, SessionStatus.ACTIVE)
            self._close_pause(session, self.clock())
            await self.sessions.put(session)
            return session

    @staticmethod
    def _close_pause(session: InterviewSession, now: datetime) -> None:
        if session.pause_started_at is not None:
            paused = (now - session.pause_started_at).total_seconds() * 1000
            session.paused_duration_ms += max(0.0, paused)
            session.pause_started_at = None

    async def submit_response(
        self,
        session_id: str,
        submission: ResponseSubmission | Mapping[str, Any],
    ) -> InterviewSession:
        """
        Record a response to the current question.

        Answering the last question completes the session and runs the
        evaluation pipeline before returning.

        Args:
            session_id: Session ID
            submission: Answer text, time spent and skip flag

        Returns:
            Updated session

        Raises:
            InvalidStateError: Session is not active
            OutOfRangeError: No question is awaiting a response
        """
        if not isinstance(submission, ResponseSubmission):
            try:
                submission = ResponseSubmission.model_validate(dict(submission))
            except ValidationError as e:
                raise ConfigurationError(f"Invalid response: {e}") from e

        async with self._session_lock(session_id):
            session = await self._load_live(session_id)
            if session.status != SessionStatus.ACTIVE:
                raise InvalidStateError(
                    f"Session {session_id} is {session.status.value}, not active"
                )
            if submission.skipped and not session.config.allow_skip:
                raise InvalidStateError(f"Session {session_id} does not allow skipping")

            question = session.get_current_question()
            if question is None:
                raise OutOfRangeError(f"Session {session_id} has no current question")

            response = QuestionResponse(
                question_id=question.id,
                text=SKIPPED_RESPONSE_TEXT if submission.skipped else submission.text,
                time_spent_seconds=submission.time_spent_seconds,
                skipped=submission.skipped,
                submitted_at=self.clock(),
                question_index=session.current_question_index,
                question_type=question.type,
                question_difficulty=question.difficulty,
            )
            session.responses.append(response)
            session.current_question_index += 1

            logger.debug(
                f"Session {session_id}: recorded {'skip' if submission.skipped else 'response'} "
                f"for {question.id} ({session.current_question_index}/{len(session.questions)})"
            )

            if session.current_question_index >= len(session.questions):
                await self._finish(session, SessionStatus.COMPLETED)
            else:
                await self.sessions.put(session)
            return session

    async def skip_question(
        self,
        session_id: str,
        time_spent_seconds: float = 0,
    ) -> InterviewSession:
        return await self.submit_response(
            session_id,
            ResponseSubmission(
                text=SKIPPED_RESPONSE_TEXT,
                time_spent_seconds=time_spent_seconds,
                skipped=True,
            ),
        )

    async def complete_session(self, session_id: str) -> InterviewSession:
        """End a session early; remaining questions stay unanswered."""
        async with self._session_lock(session_id):
            session = await self._load_live(session_id)
            await self._finish(session, SessionStatus.COMPLETED)
            return session

    async def abandon_session(self, session_id: str) -> InterviewSession:
        """Give up on a session. It is still scored from the responses so far."""
        async with self._session_lock(session_id):
            session = await self._load_live(session_id)
            await self._finish(session, SessionStatus.ABANDONED)
            return session

    # =========================================================================
    # EVALUATION PIPELINE
    # =========================================================================

    async def _finish(self, session: InterviewSession, status: SessionStatus) -> None:
        """Terminate, evaluate and persist a session. Caller holds its lock."""
        self._transition(session, status)
        now = self.clock()
        if session.start_time is not None:
            self._close_pause(session, now)
        session.pause_started_at = None
        session.end_time = now

        session.evaluation = await self._evaluate(session)
        await self.sessions.put(session)
        await self._persist(session)

    async def _evaluate(self, session: InterviewSession) -> SessionEvaluation:
        answered = [r for r in session.responses if not r.skipped]
        evaluations = await asyncio.gather(*(
            self.evaluator.evaluate(session.questions[r.question_index], r)
            for r in answered
        ))
        overall_score = self.aggregator.calculate_overall_score(list(evaluations))
        tracking = await self.tracker.track(session, overall_score)
        return self.aggregator.aggregate(
            session,
            list(evaluations),
            performance_tracking=tracking,
        )

    async def _persist(self, session: InterviewSession) -> bool:
        """Hand a terminal session over to history. Stays live if that fails."""
        try:
            await self.history.save_session(session)
            if session.evaluation is not None:
                await self.history.save_evaluation(session.evaluation)
        except PersistenceError as e:
            logger.warning(f"Session {session.id} kept in memory, history write failed: {e}")
            return False

        await self.sessions.delete(session.id)
        self._locks.pop(session.id, None)
        return True

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def get_session(self, session_id: str) -> InterviewSession | None:
        """Live session, or a finished one from history with its evaluation."""
        session = await self.sessions.get(session_id)
        if session is not None:
            return session

        session = await self._get_persisted(session_id)
        if session is not None and session.evaluation is None:
            session.evaluation = await self.get_evaluation(session_id)
        return session

    async def get_evaluation(self, session_id: str) -> SessionEvaluation | None:
        session = await self.sessions.get(session_id)
        if session is not None:
            return session.evaluation
        try:
            return await self.history.get_evaluation(session_id)
        except PersistenceError as e:
            logger.warning(f"Evaluation lookup for {session_id} failed: {e}")
            return None

    async def get_active_sessions(self) -> list[InterviewSession]:
        return [s for s in await self.sessions.list() if not s.status.is_terminal]

    async def get_history(self, filters: HistoryFilter | None = None) -> list[InterviewSession]:
        """
        Finished sessions matching the filters, newest first.

        Includes terminal sessions whose history write has not succeeded yet.
        """
        filters = filters or HistoryFilter()
        start_date = _as_utc(filters.start_date)
        end_date = _as_utc(filters.end_date)
        try:
            sessions = await self.history.list_sessions()
        except PersistenceError as e:
            logger.warning(f"History read failed: {e}")
            sessions = []

        persisted_ids = {s.id for s in sessions}
        sessions.extend(
            s for s in await self.sessions.list()
            if s.status.is_terminal and s.id not in persisted_ids
        )

        def matches(session: InterviewSession) -> bool:
            if filters.status and session.status != filters.status:
                return False
            if filters.role and session.config.role != filters.role:
                return False
            if filters.user_id and session.config.user_id != filters.user_id:
                return False
            if start_date and session.created_at < start_date:
                return False
            if end_date and session.created_at > end_date:
                return False
            return True

        results = [s for s in sessions if matches(s)]
        results.sort(key=lambda s: s.created_at, reverse=True)
        return results

    def calculate_session_stats(self, session: InterviewSession) -> SessionStatistics:
        total_time = session.elapsed_seconds(self.clock()) if session.end_time else 0.0
        completed = len(session.responses)
        skipped = sum(1 for r in session.responses if r.skipped)
        answered = completed - skipped

        answered_time = sum(r.time_spent_seconds for r in session.responses if not r.skipped)
        average_time = answered_time / answered if answered else 0
        completion_rate = completed / len(session.questions) * 100 if session.questions else 0

        return SessionStatistics(
            total_time_seconds=round(total_time),
            total_time_formatted=format_duration(total_time),
            completed_questions=completed,
            answered_questions=answered,
            skipped_questions=skipped,
            total_questions=len(session.questions),
            average_time_per_question=round(average_time),
            completion_rate=round(completion_rate),
            status=session.status,
            question_types=dict(Counter(q.type.value for q in session.questions)),
            difficulty_breakdown=dict(Counter(q.difficulty.value for q in session.questions)),
        )

    async def export_session(self, session_id: str, format: str = "json") -> str | dict:
        """
        Export a session with its statistics and evaluation.

        Args:
            session_id: Session ID
            format: "json" for an indented JSON string, "dict" for a mapping

        Returns:
            Export payload in the requested format
        """
        if format not in ("json", "dict"):
            raise ConfigurationError(f"Unsupported export format: {format}")

        session = await self.get_session(session_id)
        if session is None:
            raise NotFoundError("Session", session_id)

        export = {
            "session": session.model_dump(mode="json", exclude={"evaluation"}),
            "statistics": self.calculate_session_stats(session).model_dump(mode="json"),
            "evaluation": (
                session.evaluation.model_dump(mode="json") if session.evaluation else None
            ),
            "exported_at": self.clock().isoformat(),
        }

        if format == "json":
            return json.dumps(export, indent=2)
        return export

    async def cleanup_history(self, max_age_days: int | None = None) -> int:
        """Purge history entries older than the retention window."""
        days = max_age_days if max_age_days is not None else self.retention_days
        try:
            return await self.history.cleanup(days, now=self.clock())
        except PersistenceError as e:
            logger.warning(f"History cleanup failed: {e}")
            return 0
