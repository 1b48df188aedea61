# tests/conftest.py
import asyncio
import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from src.config.settings import get_settings
from src.core.evaluation_engine import ResponseEvaluator
from src.core.performance_tracker import PerformanceTracker
from src.core.question_bank import QuestionBank
from src.core.session_aggregator import SessionAggregator
from src.core.session_manager import SessionManager
from src.core.storage import HistoryRepository, InMemoryKeyValueStore
from src.models.evaluation import ScoringPolicy

GOOD_ANSWER = (
    "In my previous role I faced a tight deadline on a customer-facing project. "
    "I had to migrate our billing service to a new database because the old "
    "architecture could not scale. I analyzed the access patterns, implemented "
    "a phased migration and communicated progress to the team every week. "
    "As a result we shipped two weeks early and reduced latency by 40%."
)


@pytest.fixture(autouse=True)
def test_env_vars(monkeypatch):
    """Keep the oracle, tracing and file storage off regardless of the local .env."""
    for name in (
        "DATABRICKS_HOST",
        "DATABRICKS_TOKEN",
        "LANGFUSE_PUBLIC_KEY",
        "LANGFUSE_SECRET_KEY",
    ):
        monkeypatch.setenv(name, "")
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ============================================================================
# FAKES
# ============================================================================

class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class StaticOracle:
    """Returns the same text for every prompt and remembers the prompts."""

    def __init__(self, response: str):
        self.response = response
        self.prompts: list[str] = []

    async def analyze(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.response


class FailingOracle:
    async def analyze(self, prompt: str) -> str:
        raise RuntimeError("connection reset")


class SlowOracle:
    async def analyze(self, prompt: str) -> str:
        await asyncio.sleep(5)
        return "{}"


class FailingStore:
    """Key-value store whose every operation fails."""

    def __init__(self):
        self.calls = 0

    async def get(self, key):
        self.calls += 1
        raise OSError("disk unavailable")

    async def set(self, key, value):
        self.calls += 1
        raise OSError("disk unavailable")


# ============================================================================
# COMPONENTS
# ============================================================================

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def bank():
    return QuestionBank(rng=random.Random(42))


@pytest.fixture
def history():
    return HistoryRepository(InMemoryKeyValueStore())


@pytest.fixture
def policy():
    return ScoringPolicy()


@pytest.fixture
def manager(bank, history, clock, policy):
    return SessionManager(
        question_bank=bank,
        evaluator=ResponseEvaluator(policy=policy),
        aggregator=SessionAggregator(policy),
        tracker=PerformanceTracker(history),
        history=history,
        clock=clock,
    )


@pytest.fixture
def client(manager):
    """Test client wired to the fixture manager."""
    from main import app
    from src.api.dependencies import (
        get_ai_reasoning,
        get_question_bank,
        get_session_manager,
    )
    from src.core.ai_reasoning import AIReasoningLayer

    app.dependency_overrides[get_session_manager] = lambda: manager
    app.dependency_overrides[get_question_bank] = lambda: manager.question_bank
    app.dependency_overrides[get_ai_reasoning] = lambda: AIReasoningLayer(oracle=None)
    yield TestClient(app)
    app.dependency_overrides.clear()
