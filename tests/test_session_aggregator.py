# tests/test_session_aggregator.py
from datetime import datetime, timedelta, timezone

import pytest

from src.core.session_aggregator import SessionAggregator, timeline_days
from src.models.catalog import QUESTION_CATALOG
from src.models.evaluation import CriterionScore, ResponseEvaluation, ScoreKind
from src.models.interview import (
    InterviewSession,
    QuestionResponse,
    SessionConfig,
    SessionStatus,
)
from src.models.question import QuestionDifficulty, QuestionType


def make_evaluation(composite, time_spent=120, **scores):
    return ResponseEvaluation(
        question_id="q",
        question_type=QuestionType.BEHAVIORAL,
        question_difficulty=QuestionDifficulty.MEDIUM,
        time_spent_seconds=time_spent,
        scores={
            name: CriterionScore(kind=ScoreKind.RATIO, value=value)
            for name, value in (scores or {"clarity": composite}).items()
        },
        composite_score=composite,
    )


@pytest.fixture
def aggregator():
    return SessionAggregator()


# ============================================================================
# OVERALL SCORE
# ============================================================================

def test_no_evaluations_score_zero(aggregator):
    assert aggregator.calculate_overall_score([]) == 0


def test_consistent_scores_get_bonus(aggregator):
    score = aggregator.calculate_overall_score([make_evaluation(80), make_evaluation(80)])
    assert score == 85


def test_varied_scores_get_no_bonus(aggregator):
    score = aggregator.calculate_overall_score([make_evaluation(50), make_evaluation(90)])
    assert score == 70


def test_slow_answers_are_penalized(aggregator):
    evaluations = [make_evaluation(50, time_spent=400), make_evaluation(90, time_spent=400)]
    assert aggregator.calculate_overall_score(evaluations) == 65


def test_rushed_answers_are_penalized(aggregator):
    evaluations = [make_evaluation(50, time_spent=30), make_evaluation(90, time_spent=30)]
    assert aggregator.calculate_overall_score(evaluations) == 60


def test_score_is_clamped(aggregator):
    assert aggregator.calculate_overall_score([make_evaluation(100), make_evaluation(100)]) == 100
    assert aggregator.calculate_overall_score([make_evaluation(0, time_spent=10)]) == 0


@pytest.mark.parametrize("score,level", [
    (95, "Excellent"),
    (90, "Excellent"),
    (85, "Very Good"),
    (70, "Good"),
    (60, "Fair"),
    (59, "Needs Improvement"),
    (0, "Needs Improvement"),
])
def test_overall_bands(aggregator, score, level):
    assert aggregator.overall_feedback(score).level == level


# ============================================================================
# STRENGTHS, WEAKNESSES, RECOMMENDATIONS
# ============================================================================

def test_strengths_and_weaknesses(aggregator):
    averages = {"clarity": 85, "star": 30, "depth": 55, "relevance": 45, "specificity": 70}

    strengths = aggregator.identify_strengths(averages)
    assert [s.criterion for s in strengths] == ["clarity"]
    assert strengths[0].skill == "Clarity"

    weaknesses = aggregator.identify_weaknesses(averages)
    assert [(w.criterion, w.priority) for w in weaknesses] == [
        ("star", "high"),
        ("relevance", "medium"),
        ("depth", "low"),
    ]


def test_recommendations_follow_weaknesses(aggregator):
    weaknesses = aggregator.identify_weaknesses({"star": 20, "decision_making": 50})
    recommendations = aggregator.generate_recommendations(weaknesses)

    assert [r.criterion for r in recommendations] == ["star", "decision_making"]
    assert recommendations[0].timeline == "1-2 weeks"
    assert recommendations[1].area == "Decision Making"
    assert recommendations[1].timeline == "2-4 weeks"
    assert recommendations[1].actions == [
        "Focus on improving decision making through targeted practice"
    ]


@pytest.mark.parametrize("timeline,days", [
    ("1-2 weeks", 14),
    ("2-4 weeks", 28),
    ("4-8 weeks", 56),
    ("2-3 months", 90),
    ("3 days", 3),
    ("someday", None),
])
def test_timeline_days(timeline, days):
    assert timeline_days(timeline) == days


def test_improvement_plan_buckets(aggregator):
    weaknesses = aggregator.identify_weaknesses({
        "star": 10,
        "clarity": 20,
        "problem_solving": 30,
    })
    plan = aggregator.improvement_plan(aggregator.generate_recommendations(weaknesses))

    assert [i.criterion for i in plan.immediate] == ["star"]
    assert [i.criterion for i in plan.short_term] == ["clarity"]
    assert [i.criterion for i in plan.long_term] == ["problem_solving"]


def test_skill_breakdown(aggregator):
    evaluations = [
        make_evaluation(50, clarity=0, star=80),
        make_evaluation(50, clarity=100),
    ]
    breakdown = aggregator.skill_breakdown(evaluations)

    assert breakdown["clarity"].average == 50
    assert breakdown["clarity"].min == 0
    assert breakdown["clarity"].max == 100
    assert breakdown["clarity"].consistency == 0
    assert breakdown["star"].consistency == 100


# ============================================================================
# AGGREGATE
# ============================================================================

def test_aggregate_builds_session_evaluation(aggregator):
    questions = QUESTION_CATALOG[:4]
    start = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)
    session = InterviewSession(
        config=SessionConfig(duration_minutes=8),
        questions=questions,
        status=SessionStatus.ABANDONED,
        start_time=start,
        end_time=start + timedelta(minutes=5),
        responses=[
            QuestionResponse(
                question_id=q.id,
                text="[SKIPPED]" if i == 1 else "answer",
                skipped=i == 1,
                question_index=i,
                question_type=q.type,
                question_difficulty=q.difficulty,
            )
            for i, q in enumerate(questions[:3])
        ],
    )
    evaluations = [make_evaluation(30, star=30), make_evaluation(40, star=40)]

    result = aggregator.aggregate(session, evaluations)

    assert result.session_id == session.id
    assert result.overall_score == 40
    assert result.feedback.overall.level == "Needs Improvement"
    assert result.feedback.weaknesses[0].criterion == "star"
    assert result.metadata.total_questions == 4
    assert result.metadata.answered_questions == 2
    assert result.metadata.skipped_questions == 1
    assert result.metadata.session_duration_seconds == 300
    assert result.performance_tracking is None


def test_aggregate_without_answers(aggregator):
    session = InterviewSession(
        config=SessionConfig(),
        questions=QUESTION_CATALOG[:2],
        status=SessionStatus.ABANDONED,
    )
    result = aggregator.aggregate(session, [])

    assert result.overall_score == 0
    assert result.evaluations == []
    assert result.feedback.strengths == []
    assert result.feedback.weaknesses == []
    assert result.feedback.skill_breakdown == {}
