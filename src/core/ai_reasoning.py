"""
AI Reasoning Layer for MockPrep

The only component that talks to the text-generation oracle:
- Qualitative analysis of a response
- Follow-up question suggestions
- Questions personalized to a candidate profile
- Real-time coaching

The oracle is advisory. Every call is bounded by a timeout and returns an
OracleResult that holds either the parsed answer or a static fallback, so
callers never handle oracle failures themselves.
Integrated with Langfuse for tracing when keys are configured.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Protocol, TypeVar

import httpx
from langfuse import Langfuse

from src.config.settings import Settings, get_settings
from src.core.exceptions import OracleError
from src.core.text_analysis import score_star
from src.models.evaluation import AIFeedback, CoachingAdvice
from src.models.interview import InterviewSession
from src.models.question import (
    CandidateProfile,
    FollowUpQuestion,
    FollowUpSuggestions,
    PersonalizedQuestion,
    Question,
    QuestionDifficulty,
    QuestionType,
)
from src.prompts.evaluator import EvaluatorPrompts
from src.prompts.interviewer import InterviewerPrompts

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# ORACLE
# =============================================================================

class TextOracle(Protocol):
    """Opaque text generator. May fail, hang or return malformed text."""

    async def analyze(self, prompt: str) -> str:
        ...


class GeminiOracle:
    """Gemini served from a Databricks model serving endpoint."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or get_settings()
        self.client = client or httpx.AsyncClient(
            base_url=self.settings.databricks_host.rstrip("/"),
            headers={
                "Authorization": f"Bearer {self.settings.databricks_token}",
                "Content-Type": "application/json",
            },
            timeout=60.0,
        )

    async def close(self):
        await self.client.aclose()

    async def analyze(self, prompt: str) -> str:
        payload = {
            "messages": [
                {"role": "user", "content": prompt}
            ],
            "max_tokens": self.settings.oracle_max_tokens,
            "temperature": 0.7,
        }

        try:
            response = await self.client.post(self.settings.oracle_endpoint, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Gemini API error: {e}")
            raise OracleError(f"Gemini API error: {e}") from e

        return self._extract_content(response.json())

    @staticmethod
    def _extract_content(result: dict) -> str:
        """Extract text content from a chat completion, handling multi-part content."""
        content = result.get("choices", [{}])[0].get("message", {}).get("content", "")

        if isinstance(content, list):
            text_parts = []
            for part in content:
                if isinstance(part, str):
                    text_parts.append(part)
                elif isinstance(part, dict) and "text" in part:
                    text_parts.append(part["text"])
            content = "".join(text_parts)

        return content if isinstance(content, str) else str(content)


@dataclass
class OracleResult(Generic[T]):
    """Outcome of an oracle call: the parsed value, or a fallback and why."""

    value: T
    is_fallback: bool = False
    error: str | None = None

    @classmethod
    def ok(cls, value: T) -> "OracleResult[T]":
        return cls(value=value)

    @classmethod
    def fallback(cls, value: T, error: str | None = None) -> "OracleResult[T]":
        return cls(value=value, is_fallback=True, error=error)


# =============================================================================
# STATIC FALLBACKS
# =============================================================================

FALLBACK_FOLLOW_UPS: dict[str, list[dict[str, str]]] = {
    "technical": [
        {
            "question": "Can you walk me through how you would implement this in a production environment?",
            "purpose": "Test practical application knowledge",
        },
        {
            "question": "What challenges have you faced with this technology in real projects?",
            "purpose": "Assess real-world experience",
        },
    ],
    "behavioral": [
        {
            "question": "What would you do differently if you faced a similar situation again?",
            "purpose": "Test learning and growth mindset",
        },
        {
            "question": "How did this experience change your approach to similar challenges?",
            "purpose": "Assess self-reflection and improvement",
        },
    ],
    "situational": [
        {
            "question": "What factors would you consider when making this decision?",
            "purpose": "Test decision-making process",
        },
        {
            "question": "How would you communicate this decision to stakeholders?",
            "purpose": "Assess communication skills",
        },
    ],
}

INTERVIEW_TIPS: dict[str, list[str]] = {
    "technical": [
        "Explain your thought process step by step",
        "Consider edge cases and error handling",
        "Discuss trade-offs and alternative approaches",
        "Use concrete examples from your experience",
    ],
    "behavioral": [
        "Use the STAR method (Situation, Task, Action, Result)",
        "Be specific about your role and contributions",
        "Focus on what you learned and how you grew",
        "Choose examples that highlight relevant skills",
    ],
    "situational": [
        "Think through the problem systematically",
        "Consider multiple stakeholders and perspectives",
        "Explain your decision-making process",
        "Discuss potential risks and mitigation strategies",
    ],
    "system-design": [
        "Start with clarifying questions and requirements",
        "Think about scale and performance from the beginning",
        "Consider data flow and system boundaries",
        "Discuss trade-offs between different approaches",
    ],
}

STAR_SUGGESTIONS = {
    "situation": "Provide more context about the situation or setting",
    "task": "Clearly state the task, goal, or challenge you faced",
    "action": "Describe the specific actions you took",
    "result": "Explain the results or outcomes of your actions",
}


def fallback_analysis() -> AIFeedback:
    return AIFeedback(
        source="fallback",
        score=6,
        strengths=["Provided a response", "Showed engagement with the question"],
        weaknesses=[
            "Could provide more specific examples",
            "Could elaborate on technical details",
        ],
        suggestions=[
            "Use the STAR method for behavioral questions",
            "Provide concrete examples from your experience",
            "Explain your thought process clearly",
        ],
        completeness="Response addresses the basic question but could be more comprehensive.",
        clarity="Response is understandable but could be more structured.",
        examples="Consider adding specific examples to illustrate your points.",
    )


def fallback_follow_ups(question_type: QuestionType | str) -> FollowUpSuggestions:
    key = question_type.value if isinstance(question_type, QuestionType) else question_type
    questions = FALLBACK_FOLLOW_UPS.get(key, FALLBACK_FOLLOW_UPS["technical"])
    return FollowUpSuggestions(
        source="fallback",
        follow_up_questions=[FollowUpQuestion(**q) for q in questions],
        response_quality="Unable to analyze response quality at this time.",
        suggested_areas=[
            "Consider providing more specific examples",
            "Elaborate on the technical details",
        ],
    )


def fallback_coaching() -> CoachingAdvice:
    return CoachingAdvice(
        source="fallback",
        encouragement="You're doing well! Keep providing detailed responses.",
        suggestions=[
            "Take your time to think before answering",
            "Use specific examples from your experience",
            "Structure your responses clearly",
        ],
        time_management="You're maintaining good pace. Continue to be thorough but concise.",
        next_steps="Focus on providing concrete examples and explaining your thought process.",
    )


# =============================================================================
# REASONING LAYER
# =============================================================================

class AIReasoningLayer:
    """
    Central AI component wrapping the text-generation oracle.

    Without an oracle (no Databricks credentials and none injected) every
    operation returns its static fallback immediately.
    """

    def __init__(
        self,
        oracle: TextOracle | None = None,
        timeout_seconds: float | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize the reasoning layer.

        Args:
            oracle: Text oracle to call (defaults to GeminiOracle when configured)
            timeout_seconds: Per-call timeout (defaults from settings)
            settings: Settings override
        """
        self.settings = settings or get_settings()
        self.timeout_seconds = timeout_seconds or self.settings.oracle_timeout_seconds

        self._owns_oracle = False
        if oracle is None and self.settings.oracle_enabled:
            oracle = GeminiOracle(self.settings)
            self._owns_oracle = True
        self.oracle = oracle

        self.interviewer_prompts = InterviewerPrompts()
        self.evaluator_prompts = EvaluatorPrompts()

        # Initialize Langfuse for observability
        self.langfuse = None
        if self.settings.langfuse_enabled:
            try:
                self.langfuse = Langfuse(
                    public_key=self.settings.langfuse_public_key,
                    secret_key=self.settings.langfuse_secret_key,
                    host=self.settings.langfuse_base_url,
                )
                logger.info("Langfuse initialized for oracle tracing")
            except Exception as e:
                logger.warning(f"Failed to initialize Langfuse: {e}")

    @property
    def enabled(self) -> bool:
        return self.oracle is not None

    async def close(self):
        """Close the owned oracle client and flush Langfuse."""
        if self._owns_oracle and isinstance(self.oracle, GeminiOracle):
            await self.oracle.close()
        if self.langfuse:
            try:
                self.langfuse.flush()
            except Exception as e:
                logger.warning(f"Failed to flush Langfuse: {e}")

    # =========================================================================
    # ORACLE PLUMBING
    # =========================================================================

    def _start_span(self, name: str, metadata: dict[str, Any]):
        if not self.langfuse:
            return None
        try:
            return self.langfuse.start_span(name=name, metadata=metadata)
        except Exception as e:
            logger.warning(f"Langfuse span start failed: {e}")
            return None

    @staticmethod
    def _end_span(span, output: dict[str, Any]):
        if span is None:
            return
        try:
            span.update(output=output)
            span.end()
        except Exception as e:
            logger.warning(f"Langfuse span end failed: {e}")

    async def _call_oracle(self, prompt: str) -> str:
        """Call the oracle under the timeout, normalizing failures to OracleError."""
        if self.oracle is None:
            raise OracleError("No oracle configured")
        try:
            return await asyncio.wait_for(
                self.oracle.analyze(prompt),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise OracleError(f"Oracle timed out after {self.timeout_seconds}s") from e
        except OracleError:
            raise
        except Exception as e:
            raise OracleError(f"Oracle call failed: {e}") from e

    @staticmethod
    def _extract_json(response: str) -> dict[str, Any]:
        """Take the outermost JSON object out of free text."""
        json_start = response.find("{")
        json_end = response.rfind("}") + 1
        if json_start < 0 or json_end <= json_start:
            raise OracleError("No JSON object in oracle response")
        data = json.loads(response[json_start:json_end])
        if not isinstance(data, dict):
            raise OracleError("Oracle response is not a JSON object")
        return data

    async def _run(
        self,
        operation: str,
        prompt: str,
        parse: Callable[[dict[str, Any]], T],
        fallback: Callable[[], T],
        metadata: dict[str, Any] | None = None,
    ) -> OracleResult[T]:
        """Call the oracle, parse its answer, and fall back on any failure."""
        if self.oracle is None:
            return OracleResult.fallback(fallback(), "oracle not configured")

        span = self._start_span(operation, metadata or {})
        try:
            response = await self._call_oracle(prompt)
            value = parse(self._extract_json(response))
        except (OracleError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"{operation} fell back to static output: {e}")
            self._end_span(span, {"fallback": True, "error": str(e)})
            return OracleResult.fallback(fallback(), str(e))

        self._end_span(span, {"fallback": False})
        return OracleResult.ok(value)

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def analyze_response(
        self,
        question: Question,
        response_text: str,
    ) -> OracleResult[AIFeedback]:
        """
        Qualitative analysis of one response.

        Args:
            question: The question answered
            response_text: Candidate's answer

        Returns:
            OracleResult wrapping AIFeedback
        """
        prompt = self.evaluator_prompts.analysis_prompt(question, response_text)
        return await self._run(
            "analyze_response",
            prompt,
            self._parse_analysis,
            fallback_analysis,
            metadata={"question_id": question.id, "question_type": question.type.value},
        )

    async def generate_follow_up_questions(
        self,
        question: Question,
        response_text: str,
        role: str | None = None,
    ) -> OracleResult[FollowUpSuggestions]:
        """Suggest follow-up questions that dig into a response."""
        prompt = self.interviewer_prompts.follow_up_prompt(question, response_text, role)
        return await self._run(
            "generate_follow_up_questions",
            prompt,
            self._parse_follow_ups,
            lambda: fallback_follow_ups(question.type),
            metadata={"question_id": question.id, "role": role},
        )

    async def generate_personalized_questions(
        self,
        profile: CandidateProfile,
        role: str,
        difficulty: QuestionDifficulty = QuestionDifficulty.MEDIUM,
    ) -> OracleResult[list[PersonalizedQuestion]]:
        """Questions tailored to a candidate profile. Falls back to an empty list."""
        prompt = self.interviewer_prompts.personalization_prompt(profile, role, difficulty)
        return await self._run(
            "generate_personalized_questions",
            prompt,
            self._parse_personalized,
            list,
            metadata={"role": role, "difficulty": difficulty.value},
        )

    async def provide_coaching(
        self,
        session: InterviewSession,
        response_text: str,
    ) -> OracleResult[CoachingAdvice]:
        """Real-time coaching for the response currently being drafted."""
        prompt = self.evaluator_prompts.coaching_prompt(
            question=session.get_current_question(),
            response_text=response_text,
            question_number=min(session.current_question_index + 1, len(session.questions)),
            total_questions=len(session.questions),
            elapsed_seconds=session.elapsed_seconds(),
        )
        return await self._run(
            "provide_coaching",
            prompt,
            self._parse_coaching,
            fallback_coaching,
            metadata={"session_id": session.id},
        )

    # =========================================================================
    # STATIC HELPERS
    # =========================================================================

    @staticmethod
    def interview_tips(question_type: str) -> list[str]:
        return list(INTERVIEW_TIPS.get(question_type, INTERVIEW_TIPS["technical"]))

    @staticmethod
    def evaluate_star_method(response_text: str) -> dict[str, Any]:
        """STAR breakdown of a behavioral answer with advice for missing parts."""
        star = score_star(response_text)
        missing = [element for element, present in star.details.items() if not present]
        return {
            "score": star.value,
            "breakdown": star.details,
            "missing": missing,
            "suggestions": [STAR_SUGGESTIONS[element] for element in missing],
        }

    # =========================================================================
    # PARSERS
    # =========================================================================

    @staticmethod
    def _difficulty(value: Any) -> QuestionDifficulty:
        difficulty_map = {d.value: d for d in QuestionDifficulty}
        return difficulty_map.get(str(value).lower(), QuestionDifficulty.MEDIUM)

    @staticmethod
    def _parse_analysis(data: dict[str, Any]) -> AIFeedback:
        score = float(data.get("score") or 5)
        return AIFeedback(
            source="oracle",
            score=max(0.0, min(10.0, score)),
            strengths=list(data.get("strengths") or []),
            weaknesses=list(data.get("weaknesses") or []),
            suggestions=list(data.get("suggestions") or []),
            completeness=str(data.get("completeness") or ""),
            clarity=str(data.get("clarity") or ""),
            examples=str(data.get("examples") or ""),
        )

    def _parse_follow_ups(self, data: dict[str, Any]) -> FollowUpSuggestions:
        raw_questions = data.get("follow_up_questions", data.get("followUpQuestions")) or []
        questions = [
            FollowUpQuestion(
                question=item["question"],
                purpose=str(item.get("purpose") or ""),
                difficulty=self._difficulty(item.get("difficulty", "medium")),
            )
            for item in raw_questions
            if isinstance(item, dict)
        ]
        return FollowUpSuggestions(
            source="oracle",
            follow_up_questions=questions,
            response_quality=str(
                data.get("response_quality", data.get("responseQuality")) or ""
            ),
            suggested_areas=list(
                data.get("suggested_areas", data.get("suggestedAreas")) or []
            ),
        )

    def _parse_personalized(self, data: dict[str, Any]) -> list[PersonalizedQuestion]:
        type_map = {t.value: t for t in QuestionType}
        questions = []
        for item in data.get("questions") or []:
            if not isinstance(item, dict):
                continue
            questions.append(PersonalizedQuestion(
                question=item["question"],
                type=type_map.get(str(item.get("type", "")).lower(), QuestionType.TECHNICAL),
                difficulty=self._difficulty(item.get("difficulty", "medium")),
                reasoning=str(item.get("reasoning") or ""),
                evaluation_criteria=list(
                    item.get("evaluation_criteria", item.get("evaluationCriteria")) or []
                ),
            ))
        return questions

    @staticmethod
    def _parse_coaching(data: dict[str, Any]) -> CoachingAdvice:
        return CoachingAdvice(
            source="oracle",
            encouragement=str(data.get("encouragement") or "Keep going! You're doing great."),
            suggestions=list(data.get("suggestions") or []),
            time_management=str(
                data.get("time_management", data.get("timeManagement")) or ""
            ),
            next_steps=str(data.get("next_steps", data.get("nextSteps")) or ""),
        )
