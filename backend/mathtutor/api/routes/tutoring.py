"""Tutoring Routes — AI-backed endpoints whose output passes through math sanitization.

Invariants:
    - All routes require a bearer token (get_caller)
    - Response bodies are sanitized by TutoringService before serialization
"""

from fastapi import APIRouter, Depends

from mathtutor.api.deps import get_caller, get_tutoring_service
from mathtutor.infrastructure.identity import CallerIdentity
from mathtutor.schemas.tutoring import (
    CheckAnswerRequest,
    CheckAnswerResponse,
    ExplainRequest,
    ExplainResponse,
    SocraticAnswerRequest,
    SocraticAnswerResponse,
)
from mathtutor.services.tutoring import TutoringService

router = APIRouter(prefix="/api/v1", tags=["tutoring"])


@router.post("/check-answer", response_model=CheckAnswerResponse)
async def check_answer(
    body: CheckAnswerRequest,
    caller: CallerIdentity = Depends(get_caller),
    service: TutoringService = Depends(get_tutoring_service),
):
    """Grade a student's answer against the exercise's reference correction."""
    return await service.check_answer(caller, body)


@router.post("/validate-socratic-answer", response_model=SocraticAnswerResponse)
async def validate_socratic_answer(
    body: SocraticAnswerRequest,
    caller: CallerIdentity = Depends(get_caller),
    service: TutoringService = Depends(get_tutoring_service),
):
    """Check one step of the Socratic tutor dialogue."""
    return await service.validate_socratic_answer(caller, body)


@router.post(
    "/explain", response_model=ExplainResponse, response_model_exclude_none=True,
)
async def explain(
    body: ExplainRequest,
    caller: CallerIdentity = Depends(get_caller),
    service: TutoringService = Depends(get_tutoring_service),
):
    """Explanation plan (JSON) or detailed explanation (text) for a chapter."""
    return await service.explain(caller, body)
