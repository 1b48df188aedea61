"""
Storage layer for MockPrep

- SessionStore: live (non-persisted) sessions, keyed by id
- KeyValueStore: durable JSON blobs keyed by string
- HistoryRepository: capped, idempotent history on top of a KeyValueStore
"""

import asyncio
import json
import logging
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Protocol

from src.core.exceptions import PersistenceError
from src.models.evaluation import SessionEvaluation
from src.models.interview import InterviewSession
from src.models.performance import PerformanceRecord

logger = logging.getLogger(__name__)


# =============================================================================
# LIVE SESSIONS
# =============================================================================

class SessionStore(Protocol):
    """Holds sessions that have not been handed over to history yet."""

    async def get(self, session_id: str) -> InterviewSession | None:
        ...

    async def put(self, session: InterviewSession) -> None:
        ...

    async def delete(self, session_id: str) -> None:
        ...

    async def list(self) -> list[InterviewSession]:
        ...


class InMemorySessionStore:
    """Dict-backed session store."""

    def __init__(self):
        self._sessions: dict[str, InterviewSession] = {}

    async def get(self, session_id: str) -> InterviewSession | None:
        return self._sessions.get(session_id)

    async def put(self, session: InterviewSession) -> None:
        self._sessions[session.id] = session

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def list(self) -> list[InterviewSession]:
        return list(self._sessions.values())


# =============================================================================
# KEY-VALUE PERSISTENCE
# =============================================================================

class KeyValueStore(Protocol):
    """Durable JSON store. No transactional guarantees."""

    async def get(self, key: str) -> Any | None:
        ...

    async def set(self, key: str, value: Any) -> None:
        ...


class InMemoryKeyValueStore:
    """Keeps JSON-encoded copies so callers never share mutable state with the store."""

    def __init__(self):
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)


class JsonFileKeyValueStore:
    """One JSON file per key under a directory."""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        safe = re.sub(r"[^\w.-]", "_", key)
        return self.directory / f"{safe}.json"

    def _read(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _write(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(value, indent=2), encoding="utf-8")
        tmp.replace(path)

    async def get(self, key: str) -> Any | None:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._write, key, value)


# =============================================================================
# HISTORY
# =============================================================================

class HistoryRepository:
    """
    Session, evaluation and performance history.

    Every write is an upsert by id, so replaying one is a no-op. Reads and
    writes are retried once before PersistenceError is raised.
    """

    SESSIONS_KEY = "interview_session_history"
    EVALUATIONS_KEY = "interview_evaluation_history"
    PERFORMANCE_KEY_PREFIX = "performance_history:"

    def __init__(
        self,
        store: KeyValueStore,
        session_limit: int = 50,
        evaluation_limit: int = 100,
    ):
        self.store = store
        self.session_limit = session_limit
        self.evaluation_limit = evaluation_limit
        self._lock = asyncio.Lock()

    # =========================================================================
    # RETRYING PRIMITIVES
    # =========================================================================

    async def _get(self, key: str) -> Any | None:
        try:
            return await self.store.get(key)
        except Exception as first:
            logger.warning(f"Read of {key} failed, retrying: {first}")
        try:
            return await self.store.get(key)
        except Exception as e:
            raise PersistenceError(f"Read of {key} failed: {e}") from e

    async def _set(self, key: str, value: Any) -> None:
        try:
            await self.store.set(key, value)
            return
        except Exception as first:
            logger.warning(f"Write of {key} failed, retrying: {first}")
        try:
            await self.store.set(key, value)
        except Exception as e:
            raise PersistenceError(f"Write of {key} failed: {e}") from e

    async def _get_list(self, key: str) -> list[dict]:
        value = await self._get(key)
        return value if isinstance(value, list) else []

    # =========================================================================
    # SESSIONS
    # =========================================================================

    async def save_session(self, session: InterviewSession) -> None:
        """Upsert a finished session; keep the most recent by creation time."""
        entry = session.model_dump(mode="json", exclude={"evaluation"})
        async with self._lock:
            entries = [e for e in await self._get_list(self.SESSIONS_KEY) if e.get("id") != session.id]
            entries.append(entry)
            entries.sort(key=lambda e: datetime.fromisoformat(e["created_at"]), reverse=True)
            await self._set(self.SESSIONS_KEY, entries[:self.session_limit])
        logger.debug(f"Persisted session {session.id}")

    async def list_sessions(self) -> list[InterviewSession]:
        return [
            InterviewSession.model_validate(entry)
            for entry in await self._get_list(self.SESSIONS_KEY)
        ]

    async def get_session(self, session_id: str) -> InterviewSession | None:
        for entry in await self._get_list(self.SESSIONS_KEY):
            if entry.get("id") == session_id:
                return InterviewSession.model_validate(entry)
        return None

    # =========================================================================
    # EVALUATIONS
    # =========================================================================

    async def save_evaluation(self, evaluation: SessionEvaluation) -> None:
        """Upsert an evaluation by session id; keep the latest ones."""
        entry = evaluation.model_dump(mode="json")
        async with self._lock:
            entries = [
                e for e in await self._get_list(self.EVALUATIONS_KEY)
                if e.get("session_id") != evaluation.session_id
            ]
            entries.append(entry)
            await self._set(self.EVALUATIONS_KEY, entries[-self.evaluation_limit:])

    async def get_evaluation(self, session_id: str) -> SessionEvaluation | None:
        for entry in await self._get_list(self.EVALUATIONS_KEY):
            if entry.get("session_id") == session_id:
                return SessionEvaluation.model_validate(entry)
        return None

    # =========================================================================
    # PERFORMANCE
    # =========================================================================

    async def get_performance_history(self, user_id: str) -> list[PerformanceRecord]:
        entries = await self._get_list(f"{self.PERFORMANCE_KEY_PREFIX}{user_id}")
        return [PerformanceRecord.model_validate(e) for e in entries]

    async def save_performance_history(
        self,
        user_id: str,
        records: list[PerformanceRecord],
    ) -> None:
        async with self._lock:
            await self._set(
                f"{self.PERFORMANCE_KEY_PREFIX}{user_id}",
                [r.model_dump(mode="json") for r in records],
            )

    # =========================================================================
    # RETENTION
    # =========================================================================

    async def cleanup(self, max_age_days: int = 30, now: datetime | None = None) -> int:
        """
        Drop sessions and evaluations older than max_age_days.

        Returns:
            Number of sessions removed
        """
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=max_age_days)

        def is_recent(timestamp: str | None) -> bool:
            if not timestamp:
                return False
            return datetime.fromisoformat(timestamp) >= cutoff

        async with self._lock:
            sessions = await self._get_list(self.SESSIONS_KEY)
            kept_sessions = [e for e in sessions if is_recent(e.get("created_at"))]
            await self._set(self.SESSIONS_KEY, kept_sessions)

            evaluations = await self._get_list(self.EVALUATIONS_KEY)
            kept_evaluations = [e for e in evaluations if is_recent(e.get("evaluated_at"))]
            await self._set(self.EVALUATIONS_KEY, kept_evaluations)

        removed = len(sessions) - len(kept_sessions)
        if removed:
            logger.info(f"Removed {removed} sessions older than {max_age_days} days")
        return removed
