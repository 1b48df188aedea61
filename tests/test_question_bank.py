# tests/test_question_bank.py
import json
import random

import pytest

from conftest import FailingStore
from src.core.exceptions import ConfigurationError, NotFoundError, PersistenceError
from src.core.question_bank import QuestionBank
from src.core.storage import InMemoryKeyValueStore
from src.models.catalog import QUESTION_CATALOG, ROLE_TAGS
from src.models.interview import SessionConfig
from src.models.question import (
    Question,
    QuestionDifficulty,
    QuestionFilter,
    QuestionType,
)


def config(**kwargs):
    return SessionConfig(**kwargs)


@pytest.mark.parametrize("minutes,count", [
    (60, 30), (20, 10), (5, 2), (1, 0), (0, 0),
    (float("inf"), 0), (float("nan"), 0),
])
def test_question_count(bank, minutes, count):
    assert bank.question_count(minutes) == count


def test_allocation_fills_target_with_distinct_questions(bank):
    questions = bank.allocate(config(duration_minutes=60))
    assert len(questions) == 30
    assert len({q.id for q in questions}) == 30


def test_allocation_respects_types_and_difficulty(bank):
    questions = bank.allocate(config(
        duration_minutes=60,
        question_types={QuestionType.BEHAVIORAL, QuestionType.TECHNICAL},
        difficulty={QuestionDifficulty.MEDIUM, QuestionDifficulty.HARD},
    ))
    assert len(questions) == 30
    for question in questions:
        assert question.type in {QuestionType.BEHAVIORAL, QuestionType.TECHNICAL}
        assert question.difficulty in {QuestionDifficulty.MEDIUM, QuestionDifficulty.HARD}


def test_role_pass_takes_matching_questions(bank):
    questions = bank.allocate(config(
        duration_minutes=20,
        role="frontend-developer",
        question_types={QuestionType.BEHAVIORAL},
    ))
    role_tags = set(ROLE_TAGS["frontend-developer"])
    role_matches = [q for q in questions if role_tags & set(q.tags)]

    assert len(questions) == 10
    # Only four frontend questions are medium or hard; all of them are taken
    assert sorted(q.id for q in role_matches) == ["fe_001", "fe_002", "fe_003", "fe_004"]


def test_explicit_role_field_matches(bank):
    questions = bank.allocate(config(
        duration_minutes=20,
        role="product-manager",
        question_types={QuestionType.SITUATIONAL},
    ))
    assert "pm_001" in {q.id for q in questions}


def test_company_questions_are_case_insensitive_and_capped(bank):
    questions = bank.allocate(config(duration_minutes=20, company="Amazon"))
    company_questions = [q for q in questions if q.company == "amazon"]
    assert len(company_questions) == 3
    assert len(questions) == 10


def test_company_questions_follow_difficulty(bank):
    questions = bank.allocate(config(
        duration_minutes=20,
        company="microsoft",
        difficulty={QuestionDifficulty.EASY},
    ))
    assert [q.id for q in questions if q.company] == ["microsoft_002"]
    assert all(q.difficulty == QuestionDifficulty.EASY for q in questions)


def test_thin_catalog_returns_what_it_has():
    catalog = [q for q in QUESTION_CATALOG if q.id in {"beh_001", "beh_002"}]
    bank = QuestionBank(questions=catalog, rng=random.Random(1))
    questions = bank.allocate(config(duration_minutes=60))
    assert sorted(q.id for q in questions) == ["beh_001", "beh_002"]


def test_no_match_returns_empty(bank):
    assert bank.allocate(config(
        question_types={QuestionType.GENERAL},
        difficulty={QuestionDifficulty.HARD},
    )) == []


def test_seeded_allocation_is_reproducible():
    first = QuestionBank(rng=random.Random(7)).allocate(config(duration_minutes=30))
    second = QuestionBank(rng=random.Random(7)).allocate(config(duration_minutes=30))
    assert [q.id for q in first] == [q.id for q in second]


def test_allocation_settings_override():
    bank = QuestionBank(rng=random.Random(3), questions_per_minute=1, company_question_limit=1)
    questions = bank.allocate(config(duration_minutes=10, company="google"))
    assert len(questions) == 10
    assert len([q for q in questions if q.company == "google"]) == 1


# ============================================================================
# SEARCH & CUSTOM QUESTIONS
# ============================================================================

def test_search_by_type_and_difficulty(bank):
    results = bank.search(QuestionFilter(
        types={QuestionType.GENERAL},
        difficulties={QuestionDifficulty.EASY},
    ))
    assert {q.id for q in results} == {"gen_001", "gen_002"}


def test_search_text_and_limit(bank):
    results = bank.search(QuestionFilter(search="REACT"))
    assert results
    assert all(
        "react" in q.text.lower() or any("react" in t for t in q.tags)
        for q in results
    )
    assert len(bank.search(QuestionFilter(search="react", limit=1))) == 1


def test_search_by_role_and_company(bank):
    assert {q.id for q in bank.search(QuestionFilter(company="GOOGLE"))} == {"google_001", "google_002"}
    assert "lead_001" in {q.id for q in bank.search(QuestionFilter(role="engineering-manager"))}


def test_empty_filter_returns_everything(bank):
    assert len(bank.search(QuestionFilter())) == len(bank) == len(QUESTION_CATALOG)


async def test_add_question_is_searchable_and_allocatable():
    bank = QuestionBank(questions=[], rng=random.Random(0))
    question = await bank.add_question(
        "Walk me through your favorite debugging session.",
        QuestionType.GENERAL,
        QuestionDifficulty.EASY,
        company="Acme",
        tags=["debugging"],
    )

    assert question.id.startswith("custom_")
    assert question.is_custom
    assert question.company == "acme"
    assert bank.get_question(question.id) == question
    assert bank.search(QuestionFilter(tags=["Debugging"])) == [question]
    assert bank.allocate(config(
        duration_minutes=2,
        question_types={QuestionType.GENERAL},
        difficulty={QuestionDifficulty.EASY},
    )) == [question]


async def test_stats_and_filter_options(bank):
    await bank.add_question("Custom?", QuestionType.BEHAVIORAL, QuestionDifficulty.MEDIUM)
    stats = bank.stats()
    assert stats["total"] == len(QUESTION_CATALOG) + 1
    assert stats["custom"] == 1
    assert sum(stats["by_type"].values()) == stats["total"]
    assert stats["by_category"]["custom"] == 1

    options = bank.filter_options()
    assert options["types"] == [t.value for t in QuestionType]
    assert options["companies"] == ["amazon", "google", "microsoft"]
    assert "frontend-developer" in options["roles"]


def test_questions_are_immutable():
    question = QUESTION_CATALOG[0]
    assert isinstance(question, Question)
    with pytest.raises(Exception):
        question.text = "changed"


# ============================================================================
# CUSTOM QUESTION MANAGEMENT
# ============================================================================

async def test_update_custom_question():
    bank = QuestionBank(questions=[], rng=random.Random(0))
    question = await bank.add_question("Old text?", QuestionType.GENERAL, QuestionDifficulty.EASY)

    updated = await bank.update_question(question.id, text="New text?", company="Globex")

    assert updated.id == question.id
    assert updated.text == "New text?"
    assert updated.company == "globex"
    assert updated.type == QuestionType.GENERAL
    assert updated.is_custom
    assert bank.get_question(question.id) == updated


async def test_update_rejects_invalid_fields():
    bank = QuestionBank(questions=[], rng=random.Random(0))
    question = await bank.add_question("Text?", QuestionType.GENERAL, QuestionDifficulty.EASY)

    with pytest.raises(ConfigurationError):
        await bank.update_question(question.id, type="riddle")
    assert bank.get_question(question.id) == question


async def test_built_in_questions_are_read_only(bank):
    with pytest.raises(NotFoundError):
        await bank.update_question("beh_001", text="changed")
    with pytest.raises(NotFoundError):
        await bank.delete_question("beh_001")
    with pytest.raises(NotFoundError):
        await bank.delete_question("custom_missing")
    assert bank.get_question("beh_001").text != "changed"


async def test_delete_custom_question(bank):
    question = await bank.add_question("Temporary?", QuestionType.GENERAL, QuestionDifficulty.EASY)
    size = len(bank)

    deleted = await bank.delete_question(question.id)

    assert deleted == question
    assert bank.get_question(question.id) is None
    assert len(bank) == size - 1


def test_export_questions(bank):
    exported = json.loads(bank.export_questions(QuestionFilter(company="google")))

    assert {q["id"] for q in exported["questions"]} == {"google_001", "google_002"}
    assert exported["metadata"]["total_questions"] == 2
    assert exported["metadata"]["filters"] == {"company": "google"}


async def test_import_round_trips_an_export(bank):
    target = QuestionBank(questions=[], rng=random.Random(0))

    result = await target.import_questions(bank.export_questions(QuestionFilter(company="amazon")))

    imported = target.questions
    assert result == {"imported": len(imported), "total": len(imported)}
    assert imported
    assert all(q.is_custom and q.id.startswith("custom_") for q in imported)
    assert {q.text for q in imported} == {
        q.text for q in bank.search(QuestionFilter(company="amazon"))
    }


async def test_import_skips_invalid_entries():
    bank = QuestionBank(questions=[], rng=random.Random(0))

    result = await bank.import_questions({"questions": [
        {"text": "Why do you want this job?", "type": "general"},
        {"text": "No type given"},
        {"text": "Unknown type", "type": "riddle"},
        "not a question",
    ]})

    assert result == {"imported": 1, "total": 4}
    assert bank.questions[0].difficulty == QuestionDifficulty.MEDIUM


@pytest.mark.parametrize("payload", ["{not json", "{}", '{"questions": "many"}'])
async def test_import_rejects_malformed_payloads(payload):
    with pytest.raises(ConfigurationError):
        await QuestionBank(questions=[]).import_questions(payload)


async def test_custom_questions_survive_a_restart():
    store = InMemoryKeyValueStore()
    bank = QuestionBank(rng=random.Random(0), store=store)
    kept = await bank.add_question("Kept?", QuestionType.GENERAL, QuestionDifficulty.EASY, tags=["kept"])
    edited = await bank.add_question("Draft?", QuestionType.TECHNICAL, QuestionDifficulty.HARD)
    dropped = await bank.add_question("Dropped?", QuestionType.GENERAL, QuestionDifficulty.EASY)
    await bank.update_question(edited.id, text="Final?")
    await bank.delete_question(dropped.id)

    restarted = QuestionBank(rng=random.Random(0), store=store)
    assert await restarted.load_custom_questions() == 2

    assert restarted.get_question(kept.id) == kept
    assert restarted.get_question(edited.id).text == "Final?"
    assert restarted.get_question(dropped.id) is None
    assert len(restarted) == len(QUESTION_CATALOG) + 2


async def test_corrupt_stored_questions_are_skipped():
    store = InMemoryKeyValueStore()
    await store.set(QuestionBank.CUSTOM_QUESTIONS_KEY, [
        {"id": "custom_ok", "text": "Fine?", "type": "general", "difficulty": "easy"},
        {"id": "custom_bad", "text": "Broken?", "type": "riddle", "difficulty": "easy"},
    ])
    bank = QuestionBank(questions=[], store=store)

    assert await bank.load_custom_questions() == 1
    assert bank.get_question("custom_ok").is_custom


async def test_failed_write_leaves_catalog_unchanged():
    bank = QuestionBank(questions=[], store=FailingStore())

    with pytest.raises(PersistenceError):
        await bank.add_question("Lost?", QuestionType.GENERAL, QuestionDifficulty.EASY)
    assert len(bank) == 0
    with pytest.raises(PersistenceError):
        await bank.load_custom_questions()
