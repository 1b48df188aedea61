# tests/test_ai_reasoning.py
import json

import httpx
import pytest

from conftest import FailingOracle, SlowOracle, StaticOracle
from src.config.settings import Settings
from src.core.ai_reasoning import AIReasoningLayer, GeminiOracle, INTERVIEW_TIPS
from src.core.exceptions import OracleError
from src.models.catalog import QUESTION_CATALOG
from src.models.interview import InterviewSession, SessionConfig, SessionStatus
from src.models.question import CandidateProfile, QuestionDifficulty, QuestionType

QUESTION = next(q for q in QUESTION_CATALOG if q.type == QuestionType.BEHAVIORAL)


# ============================================================================
# FALLBACKS
# ============================================================================

async def test_no_oracle_returns_fallbacks():
    layer = AIReasoningLayer(oracle=None)
    assert layer.enabled is False

    analysis = await layer.analyze_response(QUESTION, "answer")
    assert analysis.is_fallback
    assert analysis.error == "oracle not configured"
    assert analysis.value.source == "fallback"
    assert analysis.value.score == 6

    follow_ups = await layer.generate_follow_up_questions(QUESTION, "answer")
    assert follow_ups.value.follow_up_questions[0].question.startswith("What would you do differently")

    personalized = await layer.generate_personalized_questions(CandidateProfile(), "backend-developer")
    assert personalized.is_fallback
    assert personalized.value == []


@pytest.mark.parametrize("oracle", [
    FailingOracle(),
    StaticOracle("I'd rather not answer in JSON."),
    StaticOracle("{not valid json}"),
    StaticOracle("[1, 2, 3]"),
])
async def test_bad_oracle_output_falls_back(oracle):
    result = await AIReasoningLayer(oracle=oracle).analyze_response(QUESTION, "answer")
    assert result.is_fallback
    assert result.value.source == "fallback"
    assert result.error


async def test_slow_oracle_times_out():
    layer = AIReasoningLayer(oracle=SlowOracle(), timeout_seconds=0.05)
    result = await layer.provide_coaching(
        InterviewSession(config=SessionConfig(), questions=[QUESTION], status=SessionStatus.ACTIVE),
        "draft answer",
    )
    assert result.is_fallback
    assert "timed out" in result.error
    assert result.value.source == "fallback"


# ============================================================================
# PARSING
# ============================================================================

async def test_analysis_extracted_from_surrounding_text():
    oracle = StaticOracle(
        'Here is my analysis: {"score": 14, "strengths": ["Concise"], '
        '"completeness": "Covers the basics"} Hope this helps!'
    )
    result = await AIReasoningLayer(oracle=oracle).analyze_response(QUESTION, "my answer")

    assert not result.is_fallback
    assert result.value.source == "oracle"
    assert result.value.score == 10
    assert result.value.strengths == ["Concise"]
    assert result.value.completeness == "Covers the basics"
    assert QUESTION.text in oracle.prompts[0]
    assert "my answer" in oracle.prompts[0]


async def test_follow_ups_accept_camel_case():
    oracle = StaticOracle(json.dumps({
        "followUpQuestions": [
            {"question": "How did you measure success?", "purpose": "Impact", "difficulty": "HARD"},
            {"question": "What would you change?", "difficulty": "unknown"},
        ],
        "responseQuality": "Solid",
        "suggestedAreas": ["Metrics"],
    }))
    result = await AIReasoningLayer(oracle=oracle).generate_follow_up_questions(
        QUESTION, "answer", role="backend-developer"
    )

    questions = result.value.follow_up_questions
    assert [q.difficulty for q in questions] == [QuestionDifficulty.HARD, QuestionDifficulty.MEDIUM]
    assert result.value.response_quality == "Solid"
    assert result.value.suggested_areas == ["Metrics"]
    assert "backend-developer" in oracle.prompts[0]


async def test_personalized_questions():
    oracle = StaticOracle(json.dumps({
        "questions": [
            {
                "question": "Design a rate limiter for our public API.",
                "type": "technical",
                "difficulty": "hard",
                "evaluationCriteria": ["Algorithm choice"],
            },
            "not a question object",
        ]
    }))
    profile = CandidateProfile(experience_level="senior", skills=["python", "redis"])
    result = await AIReasoningLayer(oracle=oracle).generate_personalized_questions(
        profile, "backend-developer", QuestionDifficulty.HARD
    )

    assert len(result.value) == 1
    assert result.value[0].type == QuestionType.TECHNICAL
    assert result.value[0].evaluation_criteria == ["Algorithm choice"]
    assert "redis" in oracle.prompts[0]


async def test_missing_required_field_falls_back():
    oracle = StaticOracle(json.dumps({"followUpQuestions": [{"purpose": "no question"}]}))
    result = await AIReasoningLayer(oracle=oracle).generate_follow_up_questions(QUESTION, "answer")
    assert result.is_fallback


# ============================================================================
# STATIC HELPERS
# ============================================================================

def test_interview_tips_default_to_technical():
    assert AIReasoningLayer.interview_tips("behavioral") == INTERVIEW_TIPS["behavioral"]
    assert AIReasoningLayer.interview_tips("astrology") == INTERVIEW_TIPS["technical"]


def test_evaluate_star_method():
    result = AIReasoningLayer.evaluate_star_method("We shipped it early and the deadline held.")
    assert result["score"] == 50
    assert result["missing"] == ["situation", "action"]
    assert len(result["suggestions"]) == 2


# ============================================================================
# GEMINI ORACLE
# ============================================================================

def make_oracle(handler):
    settings = Settings(databricks_host="https://workspace.example.com", databricks_token="token")
    client = httpx.AsyncClient(
        base_url=settings.databricks_host,
        transport=httpx.MockTransport(handler),
    )
    return GeminiOracle(settings, client=client)


async def test_gemini_oracle_posts_chat_completion():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "choices": [{"message": {"content": [{"type": "text", "text": "{\"a\": "}, "1}"]}}]
        })

    oracle = make_oracle(handler)
    text = await oracle.analyze("prompt text")
    await oracle.close()

    assert text == '{"a": 1}'
    assert seen["path"] == "/serving-endpoints/databricks-gemini-flash/invocations"
    assert seen["body"]["messages"] == [{"role": "user", "content": "prompt text"}]


async def test_gemini_oracle_http_error():
    oracle = make_oracle(lambda request: httpx.Response(503, json={"error": "busy"}))
    with pytest.raises(OracleError):
        await oracle.analyze("prompt")
    await oracle.close()
