"""
Session Aggregator for MockPrep

Combines per-response evaluations into the session evaluation:
- Overall score with consistency and time-management adjustments
- Qualitative band, strengths and weaknesses
- Recommendations and a bucketed improvement plan
- Per-criterion skill breakdown
"""

import logging
import re
from collections import defaultdict
from statistics import fmean, pvariance

from src.core.evaluation_engine import format_criterion
from src.models.evaluation import (
    EvaluationMetadata,
    ImprovementPlan,
    OverallFeedback,
    PlanItem,
    Recommendation,
    ResponseEvaluation,
    ScoringPolicy,
    SessionEvaluation,
    SessionFeedback,
    SkillStats,
    Strength,
    Weakness,
)
from src.models.interview import InterviewSession
from src.models.performance import PerformanceTracking

logger = logging.getLogger(__name__)


# Score bands, highest first
OVERALL_BANDS = [
    (90, "Excellent", "Outstanding performance! You demonstrated strong technical knowledge and excellent communication skills."),
    (80, "Very Good", "Strong performance with good technical understanding and clear communication."),
    (70, "Good", "Solid performance with room for improvement in some areas."),
    (60, "Fair", "Adequate performance but significant improvement needed."),
    (0, "Needs Improvement", "Performance below expectations. Focus on fundamental skills and practice."),
]

SKILL_DESCRIPTIONS = {
    "clarity": {
        "strength": "Excellent communication with clear, well-structured responses",
        "weakness": "Responses could be clearer and better organized",
    },
    "relevance": {
        "strength": "Consistently addresses the question directly and thoroughly",
        "weakness": "Sometimes strays from the main question or lacks focus",
    },
    "depth": {
        "strength": "Provides detailed analysis with concrete examples",
        "weakness": "Responses lack depth and specific examples",
    },
}

RECOMMENDATIONS = {
    "clarity": {
        "actions": [
            "Practice structuring responses with clear introduction, body, and conclusion",
            "Use the STAR method for behavioral questions",
            "Pause and organize thoughts before speaking",
        ],
        "resources": ["Communication skills courses", "Public speaking practice"],
        "timeline": "2-4 weeks",
    },
    "technical_accuracy": {
        "actions": [
            "Review fundamental concepts in your technology stack",
            "Practice coding problems regularly",
            "Stay updated with latest industry practices",
        ],
        "resources": ["Technical documentation", "Online coding platforms", "Tech blogs"],
        "timeline": "4-8 weeks",
    },
    "star": {
        "actions": [
            "Practice behavioral questions using STAR method",
            "Prepare specific examples from your experience",
            "Focus on quantifiable results and outcomes",
        ],
        "resources": ["STAR method guides", "Behavioral interview prep"],
        "timeline": "1-2 weeks",
    },
    "specificity": {
        "actions": [
            "Quantify the outcome of every example you prepare",
            "Name the tools, dates and team sizes involved",
        ],
        "resources": ["Resume bullet point guides"],
        "timeline": "1-2 weeks",
    },
    "problem_solving": {
        "actions": [
            "Work through design and debugging exercises out loud",
            "Compare at least two approaches before choosing one",
        ],
        "resources": ["System design primers", "Algorithm practice platforms"],
        "timeline": "2-3 months",
    },
}

_TIMELINE = re.compile(r"(\d+)\s*(?:-\s*(\d+))?\s*(day|week|month|year)s?", re.IGNORECASE)
_UNIT_DAYS = {"day": 1, "week": 7, "month": 30, "year": 365}


def timeline_days(timeline: str) -> int | None:
    """Upper bound of a timeline like '2-4 weeks', in days."""
    match = _TIMELINE.search(timeline or "")
    if not match:
        return None
    upper = int(match.group(2) or match.group(1))
    return upper * _UNIT_DAYS[match.group(3).lower()]


class SessionAggregator:
    """Builds a SessionEvaluation from per-response evaluations."""

    def __init__(self, policy: ScoringPolicy | None = None):
        self.policy = policy or ScoringPolicy()

    # =========================================================================
    # AGGREGATION
    # =========================================================================

    def aggregate(
        self,
        session: InterviewSession,
        evaluations: list[ResponseEvaluation],
        performance_tracking: PerformanceTracking | None = None,
    ) -> SessionEvaluation:
        """
        Produce the complete session evaluation.

        Args:
            session: The terminal session
            evaluations: Evaluations of its non-skipped responses
            performance_tracking: Cross-session tracking snapshot, if recorded

        Returns:
            SessionEvaluation
        """
        overall_score = self.calculate_overall_score(evaluations)
        averages = self.average_scores(evaluations)
        weaknesses = self.identify_weaknesses(averages)
        recommendations = self.generate_recommendations(weaknesses)

        feedback = SessionFeedback(
            overall=self.overall_feedback(overall_score),
            strengths=self.identify_strengths(averages),
            weaknesses=weaknesses,
            recommendations=recommendations,
            skill_breakdown=self.skill_breakdown(evaluations),
            improvement_plan=self.improvement_plan(recommendations),
        )

        skipped = sum(1 for r in session.responses if r.skipped)
        metadata = EvaluationMetadata(
            total_questions=len(session.questions),
            answered_questions=len(session.responses) - skipped,
            skipped_questions=skipped,
            session_duration_seconds=round(session.elapsed_seconds(), 2),
        )

        logger.info(
            f"Aggregated session {session.id}: overall={overall_score} "
            f"({feedback.overall.level}), {len(evaluations)} evaluations"
        )

        return SessionEvaluation(
            session_id=session.id,
            overall_score=overall_score,
            evaluations=evaluations,
            feedback=feedback,
            performance_tracking=performance_tracking,
            metadata=metadata,
        )

    def calculate_overall_score(self, evaluations: list[ResponseEvaluation]) -> float:
        """Mean composite with consistency bonus and time-management penalties."""
        if not evaluations:
            return 0

        composites = [e.composite_score for e in evaluations]
        score = fmean(composites)

        if pvariance(composites) < self.policy.low_variance_threshold:
            score += self.policy.consistency_bonus

        mean_time = fmean(e.time_spent_seconds for e in evaluations)
        if mean_time > self.policy.slow_response_seconds:
            score -= self.policy.slow_response_penalty
        elif mean_time < self.policy.rushed_response_seconds:
            score -= self.policy.rushed_response_penalty

        return round(max(0.0, min(100.0, score)))

    # =========================================================================
    # FEEDBACK
    # =========================================================================

    @staticmethod
    def overall_feedback(score: float) -> OverallFeedback:
        for threshold, level, message in OVERALL_BANDS:
            if score >= threshold:
                return OverallFeedback(level=level, message=message)
        return OverallFeedback(level=OVERALL_BANDS[-1][1], message=OVERALL_BANDS[-1][2])

    @staticmethod
    def _scores_by_criterion(evaluations: list[ResponseEvaluation]) -> dict[str, list[float]]:
        collected: dict[str, list[float]] = defaultdict(list)
        for evaluation in evaluations:
            for criterion, score in evaluation.scores.items():
                collected[criterion].append(score.value)
        return dict(collected)

    def average_scores(self, evaluations: list[ResponseEvaluation]) -> dict[str, float]:
        return {
            criterion: fmean(values)
            for criterion, values in self._scores_by_criterion(evaluations).items()
        }

    @staticmethod
    def _description(criterion: str, kind: str) -> str:
        described = SKILL_DESCRIPTIONS.get(criterion)
        if described:
            return described[kind]
        skill = format_criterion(criterion).lower()
        if kind == "strength":
            return f"Consistently strong {skill}"
        return f"{format_criterion(criterion)} needs more practice"

    def identify_strengths(self, averages: dict[str, float]) -> list[Strength]:
        return [
            Strength(
                criterion=criterion,
                skill=format_criterion(criterion),
                score=round(average, 2),
                description=self._description(criterion, "strength"),
            )
            for criterion, average in averages.items()
            if average >= self.policy.strength_threshold
        ]

    def identify_weaknesses(self, averages: dict[str, float]) -> list[Weakness]:
        """Criteria below the weakness threshold, worst first."""
        weaknesses = []
        for criterion, average in averages.items():
            if average >= self.policy.weakness_threshold:
                continue
            if average < 40:
                priority = "high"
            elif average < 50:
                priority = "medium"
            else:
                priority = "low"
            weaknesses.append(Weakness(
                criterion=criterion,
                skill=format_criterion(criterion),
                score=round(average, 2),
                description=self._description(criterion, "weakness"),
                priority=priority,
            ))
        return sorted(weaknesses, key=lambda w: w.score)

    @staticmethod
    def recommendation_for(criterion: str) -> dict:
        return RECOMMENDATIONS.get(criterion, {
            "actions": [
                f"Focus on improving {format_criterion(criterion).lower()} through targeted practice"
            ],
            "resources": ["Relevant learning materials"],
            "timeline": "2-4 weeks",
        })

    def generate_recommendations(self, weaknesses: list[Weakness]) -> list[Recommendation]:
        recommendations = []
        for weakness in weaknesses:
            template = self.recommendation_for(weakness.criterion)
            recommendations.append(Recommendation(
                criterion=weakness.criterion,
                area=weakness.skill,
                priority=weakness.priority,
                actions=list(template["actions"]),
                resources=list(template["resources"]),
                timeline=template["timeline"],
            ))
        return recommendations

    @staticmethod
    def improvement_plan(recommendations: list[Recommendation]) -> ImprovementPlan:
        """Bucket recommendations by the upper bound of their timeline."""
        plan = ImprovementPlan()
        for recommendation in recommendations:
            item = PlanItem(
                criterion=recommendation.criterion,
                skill=recommendation.area,
                priority=recommendation.priority,
                actions=recommendation.actions,
                resources=recommendation.resources,
            )
            days = timeline_days(recommendation.timeline)
            if days is not None and days <= 14:
                plan.immediate.append(item)
            elif days is not None and days <= 60:
                plan.short_term.append(item)
            else:
                plan.long_term.append(item)
        return plan

    def skill_breakdown(self, evaluations: list[ResponseEvaluation]) -> dict[str, SkillStats]:
        breakdown = {}
        for criterion, values in self._scores_by_criterion(evaluations).items():
            if len(values) < 2:
                consistency = 100.0
            else:
                consistency = max(0.0, 100 - pvariance(values) / 10)
            breakdown[criterion] = SkillStats(
                average=round(fmean(values), 2),
                min=min(values),
                max=max(values),
                consistency=round(consistency, 2),
            )
        return breakdown
