"""
Question Bank for MockPrep

Owns the question catalog and answers two kinds of queries:
- allocation of a shuffled question set for a new session
- predicate search for browsing and custom question management
"""

import asyncio
import json
import logging
import math
import random
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping
from uuid import uuid4

from pydantic import ValidationError

from src.config.settings import get_settings
from src.core.exceptions import ConfigurationError, NotFoundError, PersistenceError
from src.core.storage import KeyValueStore
from src.models.catalog import QUESTION_CATALOG, ROLE_TAGS
from src.models.interview import SessionConfig
from src.models.question import (
    Question,
    QuestionDifficulty,
    QuestionFilter,
    QuestionType,
)

logger = logging.getLogger(__name__)

# Fields a caller may set on a custom question
CUSTOM_FIELDS = {
    "text", "type", "difficulty", "category",
    "role", "company", "tags", "evaluation_criteria",
}


def _custom_id() -> str:
    return f"custom_{uuid4().hex[:8]}"


class QuestionBank:
    """
    Catalog of interview questions tagged by role, company, type and difficulty.

    Allocation runs three passes over the catalog:
    1. Role questions (by explicit role or role tag mapping)
    2. Company questions
    3. General pool filtered by the configured question types

    Custom questions can be added, edited, deleted, imported and exported.
    They are persisted through a key-value store when one is given.
    """

    CUSTOM_QUESTIONS_KEY = "interview_custom_questions"

    def __init__(
        self,
        questions: Iterable[Question] | None = None,
        rng: random.Random | None = None,
        questions_per_minute: float | None = None,
        role_question_share: float | None = None,
        company_question_limit: int | None = None,
        store: KeyValueStore | None = None,
    ):
        """
        Initialize the question bank.

        Args:
            questions: Catalog to serve (defaults to the built-in catalog)
            rng: Random source for shuffling, injectable for deterministic tests
            questions_per_minute: Allocation rate (defaults from settings)
            role_question_share: Share of slots reserved for role questions
            company_question_limit: Max company questions per session
            store: Persistence for custom questions (in-memory only when omitted)
        """
        settings = get_settings()
        catalog = QUESTION_CATALOG if questions is None else questions
        self._questions: dict[str, Question] = {q.id: q for q in catalog}
        self.rng = rng if rng is not None else random.Random()
        self.store = store
        self._lock = asyncio.Lock()
        self.questions_per_minute = (
            questions_per_minute
            if questions_per_minute is not None
            else settings.questions_per_minute
        )
        self.role_question_share = (
            role_question_share
            if role_question_share is not None
            else settings.role_question_share
        )
        self.company_question_limit = (
            company_question_limit
            if company_question_limit is not None
            else settings.company_question_limit
        )

    def __len__(self) -> int:
        return len(self._questions)

    @property
    def questions(self) -> list[Question]:
        return list(self._questions.values())

    # =========================================================================
    # ALLOCATION
    # =========================================================================

    def question_count(self, duration_minutes: float) -> int:
        """Number of questions a session of this length should get."""
        if not math.isfinite(duration_minutes):
            return 0
        return max(0, math.floor(duration_minutes * self.questions_per_minute))

    def allocate(self, config: SessionConfig) -> list[Question]:
        """
        Select and order questions for a new session.

        Never raises: a thin catalog yields fewer questions than requested,
        possibly none.

        Args:
            config: Session configuration

        Returns:
            Shuffled list of distinct questions, at most the target count
        """
        total = self.question_count(config.duration_minutes)
        if total <= 0:
            return []

        selected: list[Question] = []
        taken: set[str] = set()

        def take(candidates: list[Question], limit: int) -> None:
            for question in candidates:
                if limit <= 0 or len(selected) >= total:
                    break
                if question.id in taken:
                    continue
                selected.append(question)
                taken.add(question.id)
                limit -= 1

        # Pass 1: role questions
        if config.role:
            role_pool = [
                q for q in self._questions.values()
                if self._matches_role(q, config.role)
                and self._matches_difficulty(q, config.difficulty)
            ]
            self.rng.shuffle(role_pool)
            take(role_pool, math.floor(total * self.role_question_share))

        # Pass 2: company questions
        if config.company:
            company = config.company.lower()
            company_pool = [
                q for q in self._questions.values()
                if q.company and q.company.lower() == company
                and self._matches_difficulty(q, config.difficulty)
            ]
            take(company_pool, self.company_question_limit)

        # Pass 3: general pool
        remaining = total - len(selected)
        if remaining > 0:
            general_pool = [
                q for q in self._questions.values()
                if q.id not in taken
                and q.type in config.question_types
                and self._matches_difficulty(q, config.difficulty)
            ]
            self.rng.shuffle(general_pool)
            take(general_pool, remaining)

        questions = selected[:total]
        self.rng.shuffle(questions)

        if len(questions) < total:
            logger.warning(
                f"Catalog too thin for request: allocated {len(questions)} of {total} questions"
            )
        logger.debug(f"Allocated {len(questions)} questions: {[q.id for q in questions]}")
        return questions

    def _matches_role(self, question: Question, role: str) -> bool:
        if question.role == role:
            return True
        tags = ROLE_TAGS.get(role, [])
        return any(tag in question.tags for tag in tags)

    @staticmethod
    def _matches_difficulty(
        question: Question,
        difficulties: set[QuestionDifficulty]
    ) -> bool:
        return not difficulties or question.difficulty in difficulties

    # =========================================================================
    # SEARCH & LOOKUP
    # =========================================================================

    def search(self, criteria: QuestionFilter) -> list[Question]:
        """Filter the catalog. Unset predicates do not constrain."""
        results = []
        needle = criteria.search.lower() if criteria.search else None
        wanted_tags = {t.lower() for t in criteria.tags}

        for question in self._questions.values():
            if criteria.types and question.type not in criteria.types:
                continue
            if criteria.difficulties and question.difficulty not in criteria.difficulties:
                continue
            if criteria.role and not self._matches_role(question, criteria.role):
                continue
            if criteria.company and (
                not question.company
                or question.company.lower() != criteria.company.lower()
            ):
                continue
            if wanted_tags and not wanted_tags & {t.lower() for t in question.tags}:
                continue
            if needle and not (
                needle in question.text.lower()
                or any(needle in t.lower() for t in question.tags)
            ):
                continue
            results.append(question)

        if criteria.limit is not None:
            results = results[:criteria.limit]
        return results

    def get_question(self, question_id: str) -> Question | None:
        return self._questions.get(question_id)

    def role_tags(self, role: str) -> list[str]:
        return list(ROLE_TAGS.get(role, []))

    # =========================================================================
    # CUSTOM QUESTIONS
    # =========================================================================

    @property
    def custom_questions(self) -> list[Question]:
        return [q for q in self._questions.values() if q.is_custom]

    async def load_custom_questions(self) -> int:
        """
        Load persisted custom questions into the catalog.

        Entries that no longer validate are skipped with a warning.

        Returns:
            Number of questions loaded

        Raises:
            PersistenceError: The store could not be read
        """
        if self.store is None:
            return 0

        try:
            entries = await self.store.get(self.CUSTOM_QUESTIONS_KEY)
        except Exception as e:
            raise PersistenceError(f"Read of {self.CUSTOM_QUESTIONS_KEY} failed: {e}") from e

        loaded = 0
        for entry in entries if isinstance(entries, list) else []:
            try:
                question = Question.model_validate({**entry, "is_custom": True})
            except (ValidationError, TypeError) as e:
                logger.warning(f"Skipping stored custom question: {e}")
                continue
            self._questions[question.id] = question
            loaded += 1

        logger.info(f"Loaded {loaded} custom questions")
        return loaded

    async def _save_custom(self, questions: list[Question]) -> None:
        if self.store is None:
            return
        try:
            await self.store.set(
                self.CUSTOM_QUESTIONS_KEY,
                [q.model_dump(mode="json") for q in questions],
            )
        except Exception as e:
            raise PersistenceError(f"Write of {self.CUSTOM_QUESTIONS_KEY} failed: {e}") from e

    @staticmethod
    def _build_custom(question_id: str, fields: Mapping[str, Any]) -> Question:
        data = {key: value for key, value in fields.items() if key in CUSTOM_FIELDS}
        if isinstance(data.get("company"), str):
            data["company"] = data["company"].lower() or None
        try:
            return Question.model_validate({**data, "id": question_id, "is_custom": True})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid question: {e}") from e

    def _custom_or_raise(self, question_id: str) -> Question:
        question = self._questions.get(question_id)
        if question is None or not question.is_custom:
            raise NotFoundError("Custom question", question_id)
        return question

    async def add_question(
        self,
        text: str,
        type: QuestionType,
        difficulty: QuestionDifficulty,
        category: str = "custom",
        role: str | None = None,
        company: str | None = None,
        tags: list[str] | None = None,
        evaluation_criteria: list[str] | None = None,
    ) -> Question:
        """Add a custom question to the catalog and persist it."""
        question = self._build_custom(_custom_id(), {
            "text": text,
            "type": type,
            "difficulty": difficulty,
            "category": category,
            "role": role,
            "company": company,
            "tags": tags or [],
            "evaluation_criteria": evaluation_criteria or [],
        })
        async with self._lock:
            await self._save_custom([*self.custom_questions, question])
            self._questions[question.id] = question
        logger.info(f"Added custom question {question.id} ({question.type.value}/{question.difficulty.value})")
        return question

    async def update_question(self, question_id: str, **updates: Any) -> Question:
        """
        Change fields of a custom question. Built-in questions cannot be edited.

        Raises:
            NotFoundError: No custom question has this id
            ConfigurationError: The updated question does not validate
        """
        async with self._lock:
            current = self._custom_or_raise(question_id)
            question = self._build_custom(question_id, {**current.model_dump(), **updates})
            await self._save_custom([
                question if q.id == question_id else q for q in self.custom_questions
            ])
            self._questions[question_id] = question
        logger.info(f"Updated custom question {question_id}: {sorted(updates)}")
        return question

    async def delete_question(self, question_id: str) -> Question:
        """Remove a custom question. Built-in questions cannot be deleted."""
        async with self._lock:
            question = self._custom_or_raise(question_id)
            await self._save_custom([q for q in self.custom_questions if q.id != question_id])
            del self._questions[question_id]
        logger.info(f"Deleted custom question {question_id}")
        return question

    def export_questions(self, criteria: QuestionFilter | None = None) -> str:
        """Matching questions plus export metadata, as indented JSON."""
        criteria = criteria or QuestionFilter()
        questions = self.search(criteria)
        return json.dumps({
            "questions": [q.model_dump(mode="json") for q in questions],
            "metadata": {
                "exported_at": datetime.now(timezone.utc).isoformat(),
                "total_questions": len(questions),
                "filters": {
                    key: value
                    for key, value in criteria.model_dump(mode="json").items()
                    if value not in (None, [])
                },
            },
        }, indent=2)

    async def import_questions(self, payload: str | Mapping[str, Any] | list) -> dict[str, int]:
        """
        Add questions from an export payload (or a bare list of questions).

        Every imported question becomes a custom question with a fresh id.
        Entries without text and type, or that fail validation, are skipped.

        Returns:
            {"imported": added count, "total": entries seen}

        Raises:
            ConfigurationError: Payload is not JSON or holds no question list
        """
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Import payload is not valid JSON: {e}") from e

        entries = payload.get("questions") if isinstance(payload, Mapping) else payload
        if not isinstance(entries, list):
            raise ConfigurationError("Import payload must contain a list of questions")

        imported: list[Question] = []
        for entry in entries:
            if not isinstance(entry, Mapping) or not entry.get("text") or not entry.get("type"):
                continue
            try:
                imported.append(self._build_custom(
                    _custom_id(),
                    {"difficulty": QuestionDifficulty.MEDIUM, **entry},
                ))
            except ConfigurationError as e:
                logger.warning(f"Skipping imported question: {e}")

        if imported:
            async with self._lock:
                await self._save_custom([*self.custom_questions, *imported])
                self._questions.update((q.id, q) for q in imported)

        logger.info(f"Imported {len(imported)} of {len(entries)} questions")
        return {"imported": len(imported), "total": len(entries)}

    # =========================================================================
    # METADATA
    # =========================================================================

    def stats(self) -> dict:
        """Counts by type, difficulty and category."""
        questions = self._questions.values()
        return {
            "total": len(self._questions),
            "by_type": dict(Counter(q.type.value for q in questions)),
            "by_difficulty": dict(Counter(q.difficulty.value for q in questions)),
            "by_category": dict(Counter(q.category for q in questions)),
            "custom": sum(1 for q in questions if q.is_custom),
        }

    def filter_options(self) -> dict:
        """Values a client can filter or configure sessions with."""
        return {
            "types": [t.value for t in QuestionType],
            "difficulties": [d.value for d in QuestionDifficulty],
            "companies": sorted({q.company for q in self._questions.values() if q.company}),
            "roles": sorted(ROLE_TAGS),
            "categories": sorted({q.category for q in self._questions.values()}),
        }
