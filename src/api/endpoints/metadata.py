"""
Metadata API endpoints

Provides reference data for:
- Question catalog browsing
- Custom question management, import and export
- Filter options and catalog statistics
- Interview tips and STAR analysis
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field

from src.api.dependencies import get_ai_reasoning, get_question_bank, to_http_exception
from src.core.ai_reasoning import AIReasoningLayer
from src.core.exceptions import PracticeEngineError
from src.core.question_bank import QuestionBank
from src.models.question import (
    CandidateProfile,
    PersonalizedQuestion,
    Question,
    QuestionDifficulty,
    QuestionFilter,
    QuestionType,
)

router = APIRouter()


# ============================================================================
# REQUEST MODELS
# ============================================================================

class AddQuestionRequest(BaseModel):
    """Request model for adding a custom question."""
    text: str = Field(..., min_length=1)
    type: QuestionType
    difficulty: QuestionDifficulty
    category: str = "custom"
    role: str | None = None
    company: str | None = None
    tags: list[str] = []
    evaluation_criteria: list[str] = []


class UpdateQuestionRequest(BaseModel):
    """Request model for editing a custom question. Unset fields are kept."""
    text: str | None = Field(default=None, min_length=1)
    type: QuestionType | None = None
    difficulty: QuestionDifficulty | None = None
    category: str | None = None
    role: str | None = None
    company: str | None = None
    tags: list[str] | None = None
    evaluation_criteria: list[str] | None = None


class ImportQuestionsRequest(BaseModel):
    """Request model for importing questions; the export document fits as is."""
    questions: list[dict[str, Any]]


class PersonalizeRequest(BaseModel):
    """Request model for profile-tailored questions."""
    role: str
    difficulty: QuestionDifficulty = QuestionDifficulty.MEDIUM
    profile: CandidateProfile = Field(default_factory=CandidateProfile)


class StarAnalysisRequest(BaseModel):
    response_text: str


# ============================================================================
# QUESTIONS
# ============================================================================

def question_filter(
    type: list[QuestionType] = Query(default=[]),
    difficulty: list[QuestionDifficulty] = Query(default=[]),
    role: str | None = None,
    company: str | None = None,
    tags: list[str] = Query(default=[]),
    search: str | None = None,
    limit: int | None = Query(default=None, ge=0),
) -> QuestionFilter:
    """Catalog filter from query parameters. Repeat type/difficulty/tags to match any of several."""
    return QuestionFilter(
        types=set(type),
        difficulties=set(difficulty),
        role=role,
        company=company,
        tags=tags,
        search=search,
        limit=limit,
    )


@router.get("/questions")
async def list_questions(
    criteria: QuestionFilter = Depends(question_filter),
    bank: QuestionBank = Depends(get_question_bank),
) -> list[Question]:
    """Browse the catalog."""
    return bank.search(criteria)


@router.post("/questions", status_code=201)
async def add_question(
    request: AddQuestionRequest,
    bank: QuestionBank = Depends(get_question_bank),
) -> Question:
    """Add a custom question; it becomes eligible for allocation immediately."""
    try:
        return await bank.add_question(**request.model_dump())
    except PracticeEngineError as e:
        raise to_http_exception(e)


@router.get("/questions/export")
async def export_questions(
    criteria: QuestionFilter = Depends(question_filter),
    bank: QuestionBank = Depends(get_question_bank),
) -> Response:
    """Matching questions as a JSON document that /questions/import accepts."""
    return Response(content=bank.export_questions(criteria), media_type="application/json")


@router.post("/questions/import")
async def import_questions(
    request: ImportQuestionsRequest,
    bank: QuestionBank = Depends(get_question_bank),
) -> dict[str, int]:
    """Import questions as new custom questions. Invalid entries are skipped."""
    try:
        return await bank.import_questions(request.model_dump())
    except PracticeEngineError as e:
        raise to_http_exception(e)


@router.post("/questions/personalized")
async def personalized_questions(
    request: PersonalizeRequest,
    ai_reasoning: AIReasoningLayer = Depends(get_ai_reasoning),
) -> list[PersonalizedQuestion]:
    """Questions tailored to a candidate profile. Empty when no oracle is available."""
    result = await ai_reasoning.generate_personalized_questions(
        request.profile, request.role, request.difficulty
    )
    return result.value


@router.get("/questions/{question_id}")
async def get_question(
    question_id: str,
    bank: QuestionBank = Depends(get_question_bank),
) -> Question:
    question = bank.get_question(question_id)
    if question is None:
        raise HTTPException(status_code=404, detail="Question not found")
    return question


@router.patch("/questions/{question_id}")
async def update_question(
    question_id: str,
    request: UpdateQuestionRequest,
    bank: QuestionBank = Depends(get_question_bank),
) -> Question:
    """Edit a custom question. Built-in questions are read-only."""
    try:
        return await bank.update_question(question_id, **request.model_dump(exclude_unset=True))
    except PracticeEngineError as e:
        raise to_http_exception(e)


@router.delete("/questions/{question_id}")
async def delete_question(
    question_id: str,
    bank: QuestionBank = Depends(get_question_bank),
) -> Question:
    """Delete a custom question. Built-in questions are read-only."""
    try:
        return await bank.delete_question(question_id)
    except PracticeEngineError as e:
        raise to_http_exception(e)


# ============================================================================
# REFERENCE DATA
# ============================================================================

@router.get("/filters")
async def get_filter_options(
    bank: QuestionBank = Depends(get_question_bank),
) -> dict[str, list[str]]:
    """Get values usable for session configuration and catalog filters."""
    return bank.filter_options()


@router.get("/stats")
async def get_catalog_stats(
    bank: QuestionBank = Depends(get_question_bank),
) -> dict[str, Any]:
    return bank.stats()


@router.get("/roles/{role_id}/tags")
async def get_role_tags(
    role_id: str,
    bank: QuestionBank = Depends(get_question_bank),
) -> list[str]:
    """Tags a role maps to during allocation. Unknown roles map to none."""
    return bank.role_tags(role_id)


@router.get("/tips/{question_type}")
async def get_interview_tips(question_type: str) -> list[str]:
    """Answering tips for a question type. Unknown types get technical tips."""
    return AIReasoningLayer.interview_tips(question_type)


@router.post("/star-analysis")
async def analyze_star(request: StarAnalysisRequest) -> dict[str, Any]:
    """STAR breakdown of a behavioral answer."""
    return AIReasoningLayer.evaluate_star_method(request.response_text)
