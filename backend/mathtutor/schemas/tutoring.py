"""Tutoring Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - Request field names are snake_case; camelCase aliases accepted for the existing web client
    - CheckAnswerRequest.student_answer is non-empty after strip
    - SocraticAnswerRequest.student_answer must be present but may be empty
    - Response models mirror the JSON contract given to the model in core/build_prompts.py

Design Decisions:
    - populate_by_name: tests and new clients use snake_case, the web client sends camelCase
    - Responses validated AFTER math sanitization so a schema failure never masks a sanitization one
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mathtutor.core.domain_types import Evaluation, ExplanationRequestType


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CheckAnswerRequest(_Request):
    """check-answer body."""
    student_answer: str = Field(alias="studentAnswer", max_length=20_000)
    exercise_id: str = Field(alias="exerciseId", min_length=1, max_length=200)

    @field_validator("student_answer")
    @classmethod
    def strip_answer(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("student_answer cannot be empty or whitespace")
        return v


class SocraticAnswerRequest(_Request):
    """validate-socratic-answer body."""
    student_answer: str = Field(alias="studentAnswer", max_length=5_000)
    current_question: str = Field(alias="currentIaQuestion", min_length=1, max_length=5_000)
    expected_keywords: list[str] = Field(alias="expectedAnswerKeywords")


class ExplainRequest(_Request):
    """explain body."""
    prompt: str = Field(min_length=1, max_length=20_000)
    chapter_id: str = Field(alias="chapterId", min_length=1, max_length=200)
    request_type: ExplanationRequestType = Field(alias="requestType")


class PartFeedback(BaseModel):
    part_title: str
    evaluation: Evaluation
    explanation: str


class CheckAnswerResponse(BaseModel):
    is_globally_correct: bool
    summary: str
    detailed_feedback: list[PartFeedback]


class SocraticAnswerResponse(BaseModel):
    is_correct: bool


class ExplanationPlan(BaseModel):
    steps: list[str] = []
    key_concepts: list[str] = []


class ExplainResponse(BaseModel):
    plan: ExplanationPlan | None = None
    explanation: str | None = None
