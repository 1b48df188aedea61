"""
Question models for MockPrep
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class QuestionDifficulty(str, Enum):
    """Question difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionType(str, Enum):
    """Types of interview questions."""

    BEHAVIORAL = "behavioral"              # Tell me about a time...
    TECHNICAL = "technical"                # Explain / design / debug X
    SITUATIONAL = "situational"            # What would you do if...
    COMPANY_SPECIFIC = "company-specific"  # Why this company?
    GENERAL = "general"                    # Motivation, background


class Question(BaseModel):
    """A single catalogued interview question. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    # Identification
    id: str = Field(..., description="Unique question ID")

    # Content
    text: str = Field(..., description="The question text")

    # Classification
    type: QuestionType = Field(..., description="Type of question")
    difficulty: QuestionDifficulty = Field(..., description="Difficulty level")
    category: str = Field(default="general", description="Topic category")

    # Targeting
    role: str | None = Field(
        default=None,
        description="Role this question is written for"
    )
    company: str | None = Field(
        default=None,
        description="Company this question is asked at"
    )
    tags: list[str] = Field(
        default_factory=list,
        description="Topic tags used for role matching"
    )

    # Evaluation guidance
    evaluation_criteria: list[str] = Field(
        default_factory=list,
        description="Points expected in a good answer"
    )

    # Metadata
    is_custom: bool = Field(
        default=False,
        description="Whether the question was added at runtime"
    )


class QuestionFilter(BaseModel):
    """Predicates for searching the question catalog. Empty means no constraint."""

    types: set[QuestionType] = Field(default_factory=set)
    difficulties: set[QuestionDifficulty] = Field(default_factory=set)
    role: str | None = None
    company: str | None = None
    tags: list[str] = Field(default_factory=list)
    search: str | None = None
    limit: int | None = Field(default=None, ge=0)


class FollowUpQuestion(BaseModel):
    """A probing question suggested after a response."""

    question: str
    purpose: str = ""
    difficulty: QuestionDifficulty = QuestionDifficulty.MEDIUM


class FollowUpSuggestions(BaseModel):
    """Follow-up questions plus a short read on the response."""

    source: str = "oracle"
    follow_up_questions: list[FollowUpQuestion] = Field(default_factory=list)
    response_quality: str = ""
    suggested_areas: list[str] = Field(default_factory=list)


class PersonalizedQuestion(BaseModel):
    """A question tailored to a candidate profile."""

    question: str
    type: QuestionType = QuestionType.TECHNICAL
    difficulty: QuestionDifficulty = QuestionDifficulty.MEDIUM
    reasoning: str = ""
    evaluation_criteria: list[str] = Field(default_factory=list)


class CandidateProfile(BaseModel):
    """Background used to personalize questions."""

    experience_level: str | None = None
    skills: list[str] = Field(default_factory=list)
    previous_roles: list[str] = Field(default_factory=list)
    industry: str | None = None
