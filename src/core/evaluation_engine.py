"""
Evaluation Engine for MockPrep

Scores a single response against the rubric for its question type.
Scores come from deterministic text heuristics; the AI reasoning layer,
when present, only attaches qualitative feedback.
"""

import logging
from typing import Callable

from src.core import text_analysis
from src.core.ai_reasoning import AIReasoningLayer
from src.models.evaluation import (
    AIFeedback,
    CriterionScore,
    ResponseEvaluation,
    ScoringPolicy,
)
from src.models.interview import QuestionResponse
from src.models.question import Question, QuestionType

logger = logging.getLogger(__name__)

Scorer = Callable[[Question, str], CriterionScore]


def _families(criterion: str) -> Scorer:
    return lambda question, text: text_analysis.score_pattern_families(criterion, text)


# Criteria per question type, in rubric order
RUBRICS: dict[QuestionType, dict[str, Scorer]] = {
    QuestionType.BEHAVIORAL: {
        "star": lambda q, text: text_analysis.score_star(text),
        "clarity": lambda q, text: text_analysis.score_clarity(text),
        "relevance": lambda q, text: text_analysis.score_relevance(q.text, text),
        "depth": lambda q, text: text_analysis.score_depth(text),
        "specificity": lambda q, text: text_analysis.score_specificity(text),
    },
    QuestionType.TECHNICAL: {
        "technical_accuracy": lambda q, text: text_analysis.score_technical_accuracy(q.text, text),
        "completeness": text_analysis.score_completeness,
        "clarity": lambda q, text: text_analysis.score_clarity(text),
        "practical_application": _families("practical_application"),
        "problem_solving": _families("problem_solving"),
    },
    QuestionType.SITUATIONAL: {
        "problem_analysis": _families("problem_analysis"),
        "decision_making": _families("decision_making"),
        "stakeholder_consideration": _families("stakeholder_consideration"),
        "risk_assessment": _families("risk_assessment"),
        "communication": lambda q, text: text_analysis.score_clarity(text),
    },
}

GENERAL_RUBRIC: dict[str, Scorer] = {
    "relevance": lambda q, text: text_analysis.score_relevance(q.text, text),
    "clarity": lambda q, text: text_analysis.score_clarity(text),
    "completeness": text_analysis.score_completeness,
    "engagement": lambda q, text: text_analysis.score_engagement(text),
}

CRITERION_SUGGESTIONS = {
    "clarity": "Structure your responses with clear introduction, main points, and conclusion",
    "relevance": "Stay focused on the question and address all parts directly",
    "depth": "Provide more detailed explanations and concrete examples",
    "specificity": "Include specific numbers, dates, and measurable outcomes",
    "technical_accuracy": "Review fundamental concepts and stay current with best practices",
    "star": "Practice the STAR method: Situation, Task, Action, Result",
}

TYPE_TIPS = {
    QuestionType.TECHNICAL: [
        "Explain your thought process step by step",
        "Consider edge cases and error handling",
    ],
    QuestionType.BEHAVIORAL: [
        "Use the STAR method for structured responses",
        "Choose examples that highlight relevant skills",
    ],
    QuestionType.SITUATIONAL: [
        "Think through multiple perspectives and stakeholders",
        "Explain your decision-making process clearly",
    ],
}


def rubric_for(question_type: QuestionType) -> dict[str, Scorer]:
    return RUBRICS.get(question_type, GENERAL_RUBRIC)


def format_criterion(criterion: str) -> str:
    """technical_accuracy -> Technical Accuracy"""
    return criterion.replace("_", " ").title()


class ResponseEvaluator:
    """
    Per-response scoring component.

    Responsibilities:
    - Dispatch to the rubric for the question type
    - Normalize every criterion into a CriterionScore
    - Compute the composite score and suggestions
    - Attach oracle feedback without letting it touch the scores
    """

    def __init__(
        self,
        ai_reasoning: AIReasoningLayer | None = None,
        policy: ScoringPolicy | None = None,
    ):
        """
        Initialize the evaluator.

        Args:
            ai_reasoning: AI reasoning layer for qualitative feedback
            policy: Suggestion thresholds
        """
        self.ai_reasoning = ai_reasoning
        self.policy = policy or ScoringPolicy()

    # =========================================================================
    # RESPONSE EVALUATION
    # =========================================================================

    async def evaluate(
        self,
        question: Question,
        response: QuestionResponse | str,
    ) -> ResponseEvaluation:
        """
        Evaluate a single response.

        Args:
            question: The question answered
            response: Recorded response, or bare answer text

        Returns:
            Complete ResponseEvaluation
        """
        if isinstance(response, QuestionResponse):
            text = response.text
            time_spent = response.time_spent_seconds
        else:
            text = response or ""
            time_spent = 0.0

        scores = self.score(question, text)
        composite = self.composite_score(scores)

        ai_feedback: AIFeedback | None = None
        if self.ai_reasoning is not None:
            result = await self.ai_reasoning.analyze_response(question, text)
            ai_feedback = result.value

        evaluation = ResponseEvaluation(
            question_id=question.id,
            question_type=question.type,
            question_difficulty=question.difficulty,
            time_spent_seconds=time_spent,
            scores=scores,
            composite_score=composite,
            ai_feedback=ai_feedback,
            suggestions=self.suggestions(question.type, scores),
        )
        logger.debug(f"Evaluated {question.id}: composite={composite}")
        return evaluation

    def score(self, question: Question, text: str) -> dict[str, CriterionScore]:
        """Run every criterion of the question's rubric. A failing criterion scores 0."""
        scores: dict[str, CriterionScore] = {}
        for criterion, scorer in rubric_for(question.type).items():
            try:
                scores[criterion] = scorer(question, text)
            except Exception as e:
                logger.warning(f"Criterion {criterion} failed for {question.id}: {e}")
                scores[criterion] = CriterionScore.zero(error=str(e))
        return scores

    @staticmethod
    def composite_score(scores: dict[str, CriterionScore]) -> float:
        """Unweighted mean of the criterion values."""
        if not scores:
            return 0.0
        mean = sum(score.value for score in scores.values()) / len(scores)
        return round(min(100.0, max(0.0, mean)), 2)

    # =========================================================================
    # SUGGESTIONS
    # =========================================================================

    def suggestions(
        self,
        question_type: QuestionType,
        scores: dict[str, CriterionScore],
    ) -> list[str]:
        """Canned advice for each low criterion, then tips for the question type."""
        suggestions: list[str] = []
        for criterion, score in scores.items():
            if score.value < self.policy.suggestion_threshold:
                suggestions.append(
                    CRITERION_SUGGESTIONS.get(
                        criterion,
                        f"Focus on improving {format_criterion(criterion).lower()} through targeted practice",
                    )
                )

        suggestions.extend(TYPE_TIPS.get(question_type, TYPE_TIPS[QuestionType.TECHNICAL]))

        unique = list(dict.fromkeys(suggestions))
        return unique[:self.policy.max_suggestions]
