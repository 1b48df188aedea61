# tests/test_evaluation_engine.py
import json

import pytest

from conftest import GOOD_ANSWER, FailingOracle, StaticOracle
from src.core import text_analysis
from src.core.ai_reasoning import AIReasoningLayer
from src.core.evaluation_engine import (
    GENERAL_RUBRIC,
    RUBRICS,
    ResponseEvaluator,
    format_criterion,
)
from src.models.catalog import QUESTION_CATALOG
from src.models.evaluation import CriterionScore, ScoreKind
from src.models.interview import QuestionResponse
from src.models.question import QuestionType


def first_of(question_type):
    return next(q for q in QUESTION_CATALOG if q.type == question_type)


@pytest.mark.parametrize("question_type,criteria", [
    (QuestionType.BEHAVIORAL, ["star", "clarity", "relevance", "depth", "specificity"]),
    (QuestionType.TECHNICAL, [
        "technical_accuracy", "completeness", "clarity",
        "practical_application", "problem_solving",
    ]),
    (QuestionType.SITUATIONAL, [
        "problem_analysis", "decision_making", "stakeholder_consideration",
        "risk_assessment", "communication",
    ]),
    (QuestionType.GENERAL, ["relevance", "clarity", "completeness", "engagement"]),
    (QuestionType.COMPANY_SPECIFIC, ["relevance", "clarity", "completeness", "engagement"]),
])
async def test_rubric_per_question_type(question_type, criteria):
    """Every question type is scored on its own rubric, in rubric order."""
    evaluation = await ResponseEvaluator().evaluate(first_of(question_type), GOOD_ANSWER)
    assert list(evaluation.scores) == criteria
    assert all(0 <= s.value <= 100 for s in evaluation.scores.values())


def test_general_rubric_is_the_default():
    assert QuestionType.GENERAL not in RUBRICS
    assert set(GENERAL_RUBRIC) == {"relevance", "clarity", "completeness", "engagement"}


async def test_composite_is_mean_of_criteria():
    evaluation = await ResponseEvaluator().evaluate(first_of(QuestionType.BEHAVIORAL), GOOD_ANSWER)
    values = [s.value for s in evaluation.scores.values()]
    assert evaluation.composite_score == round(sum(values) / len(values), 2)


async def test_empty_response_scores_zero_with_suggestions():
    evaluator = ResponseEvaluator()
    evaluation = await evaluator.evaluate(first_of(QuestionType.TECHNICAL), "")
    assert evaluation.composite_score == 0
    assert all(s.value == 0 for s in evaluation.scores.values())
    assert 0 < len(evaluation.suggestions) <= evaluator.policy.max_suggestions


async def test_evaluate_recorded_response_keeps_time_spent():
    question = first_of(QuestionType.BEHAVIORAL)
    response = QuestionResponse(
        question_id=question.id,
        text=GOOD_ANSWER,
        time_spent_seconds=95,
        question_index=0,
        question_type=question.type,
        question_difficulty=question.difficulty,
    )
    evaluation = await ResponseEvaluator().evaluate(question, response)
    assert evaluation.time_spent_seconds == 95
    assert evaluation.question_id == question.id
    assert evaluation.question_difficulty == question.difficulty


async def test_oracle_does_not_change_scores():
    """Scores are identical with a healthy oracle, a failing oracle and none."""
    question = first_of(QuestionType.BEHAVIORAL)
    healthy = StaticOracle(json.dumps({"score": 9, "strengths": ["Clear STAR structure"]}))

    plain = await ResponseEvaluator().evaluate(question, GOOD_ANSWER)
    with_oracle = await ResponseEvaluator(AIReasoningLayer(oracle=healthy)).evaluate(question, GOOD_ANSWER)
    with_failure = await ResponseEvaluator(AIReasoningLayer(oracle=FailingOracle())).evaluate(question, GOOD_ANSWER)

    assert plain.ai_feedback is None
    assert with_oracle.ai_feedback.source == "oracle"
    assert with_oracle.ai_feedback.score == 9
    assert with_failure.ai_feedback.source == "fallback"

    for other in (with_oracle, with_failure):
        assert other.numeric_scores == plain.numeric_scores
        assert other.composite_score == plain.composite_score
        assert other.suggestions == plain.suggestions


async def test_failing_criterion_scores_zero(monkeypatch):
    def explode(text):
        raise RuntimeError("regex blew up")

    monkeypatch.setattr(text_analysis, "score_depth", explode)
    evaluation = await ResponseEvaluator().evaluate(first_of(QuestionType.BEHAVIORAL), GOOD_ANSWER)

    assert evaluation.scores["depth"].value == 0
    assert evaluation.scores["depth"].details["error"] == "regex blew up"
    assert evaluation.scores["star"].value > 0


def test_suggestions_low_criteria_first_then_type_tips():
    evaluator = ResponseEvaluator()
    scores = {
        "clarity": CriterionScore(kind=ScoreKind.FLAG_SUM, value=25),
        "engagement": CriterionScore(kind=ScoreKind.PATTERN_FAMILIES, value=33.33),
        "relevance": CriterionScore(kind=ScoreKind.KEYWORD_OVERLAP, value=90),
    }
    suggestions = evaluator.suggestions(QuestionType.GENERAL, scores)

    assert suggestions[0].startswith("Structure your responses")
    assert suggestions[1] == "Focus on improving engagement through targeted practice"
    # General questions borrow the technical tips
    assert suggestions[2] == "Explain your thought process step by step"
    assert len(suggestions) == 4


def test_suggestions_are_capped_and_unique():
    evaluator = ResponseEvaluator()
    scores = {
        name: CriterionScore.zero()
        for name in ["star", "clarity", "relevance", "depth", "specificity"]
    }
    suggestions = evaluator.suggestions(QuestionType.BEHAVIORAL, scores)
    assert len(suggestions) == 5
    assert len(set(suggestions)) == 5


def test_composite_of_no_scores():
    assert ResponseEvaluator.composite_score({}) == 0


def test_format_criterion():
    assert format_criterion("technical_accuracy") == "Technical Accuracy"
    assert format_criterion("star") == "Star"
