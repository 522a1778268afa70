"""Tutoring Service — check-answer, Socratic step validation, and explanations.

Invariants:
    - Order per call: quota check -> normalize student input -> AI call -> parse
      -> validate_math_content -> schema check -> record usage
    - Student answers are normalized BEFORE being embedded in a prompt
    - Every AI string reaching the client went through validate_math_content
    - SanitizationFailed is logged here (with user and call type) and re-raised unchanged
    - Usage is recorded only after the response is fully sanitized

Design Decisions:
    - One service for the three handlers: they share the same sanitize/record tail
    - Diagnostics (original vs cleaned text) go to the server log only
"""

import logging

from pydantic import BaseModel, ValidationError

from mathtutor.core.build_prompts import (
    build_check_answer_prompt,
    build_detail_prompt,
    build_plan_prompt,
    build_socratic_prompt,
    extract_student_question,
)
from mathtutor.core.curriculum import correction_context, find_exercise
from mathtutor.core.domain_types import (
    AiCallType, ExerciseId, ExplanationRequestType, JsonValue,
)
from mathtutor.core.errors import (
    AIResponseFormatError, ErrorContext, ResourceNotFoundError, SanitizationFailed,
)
from mathtutor.core.math_delimiters import normalize_math_delimiters
from mathtutor.core.parse_ai_json import parse_ai_json
from mathtutor.core.repository_protocols import CurriculumReader, TextCompletionClient
from mathtutor.core.validate_content import validate_math_content
from mathtutor.infrastructure.identity import CallerIdentity
from mathtutor.schemas.tutoring import (
    CheckAnswerRequest,
    CheckAnswerResponse,
    ExplainRequest,
    ExplainResponse,
    ExplanationPlan,
    SocraticAnswerRequest,
    SocraticAnswerResponse,
)
from mathtutor.services.usage_limiter import UsageLimiter

logger = logging.getLogger(__name__)


class TutoringService:
    """Orchestrates one AI-backed tutoring request."""

    def __init__(
        self,
        ai_client: TextCompletionClient,
        limiter: UsageLimiter,
        curriculum: CurriculumReader,
    ):
        self.ai_client = ai_client
        self.limiter = limiter
        self.curriculum = curriculum

    async def check_answer(
        self, caller: CallerIdentity, body: CheckAnswerRequest,
    ) -> CheckAnswerResponse:
        call_type = AiCallType.ANSWER_VALIDATION
        await self.limiter.check(caller, call_type)
        student_answer = self._sanitize(body.student_answer, caller, call_type)

        levels = await self.curriculum.get_levels()
        exercise = find_exercise(levels, ExerciseId(body.exercise_id))
        if exercise is None:
            raise ResourceNotFoundError("Exercise", body.exercise_id)

        prompt = build_check_answer_prompt(
            exercise.get("statement", ""),
            correction_context(exercise),
            student_answer,
        )
        data = await self._complete_json(prompt, caller, call_type)
        response = _conform(CheckAnswerResponse, data, caller, call_type)
        await self.limiter.record(caller, call_type)
        return response

    async def validate_socratic_answer(
        self, caller: CallerIdentity, body: SocraticAnswerRequest,
    ) -> SocraticAnswerResponse:
        call_type = AiCallType.SOCRATIC_VALIDATION
        await self.limiter.check(caller, call_type)
        student_answer = self._sanitize(body.student_answer, caller, call_type)

        prompt = build_socratic_prompt(
            body.current_question, body.expected_keywords, student_answer,
        )
        data = await self._complete_json(prompt, caller, call_type)
        response = _conform(SocraticAnswerResponse, data, caller, call_type)
        await self.limiter.record(caller, call_type)
        return response

    async def explain(
        self, caller: CallerIdentity, body: ExplainRequest,
    ) -> ExplainResponse:
        call_type = AiCallType.EXPLANATION
        await self.limiter.check(caller, call_type)
        logger.info(
            f"Explanation requested ({body.request_type.value}) for chapter "
            f"{body.chapter_id}: {extract_student_question(body.prompt)[:80]!r}",
            extra={"user_id": caller.user_id, "call_type": call_type.value},
        )

        if body.request_type == ExplanationRequestType.PLAN:
            data = await self._complete_json(
                build_plan_prompt(body.prompt), caller, call_type,
            )
            response = ExplainResponse(
                plan=_conform(ExplanationPlan, data, caller, call_type),
            )
        else:
            text = await self.ai_client.complete(build_detail_prompt(body.prompt))
            response = ExplainResponse(
                explanation=self._sanitize(text, caller, call_type),
            )
        await self.limiter.record(caller, call_type)
        return response

    async def _complete_json(
        self, prompt: str, caller: CallerIdentity, call_type: AiCallType,
    ) -> JsonValue:
        raw = await self.ai_client.complete(prompt)
        try:
            data = parse_ai_json(
                raw, ErrorContext(user_id=caller.user_id, call_type=call_type.value),
            )
        except AIResponseFormatError as e:
            logger.error(
                f"Unparseable AI response ({e.reason}): {raw!r}",
                extra={"user_id": caller.user_id, "call_type": call_type.value},
            )
            raise
        return self._sanitize(data, caller, call_type)

    def _sanitize(
        self, value: JsonValue, caller: CallerIdentity, call_type: AiCallType,
    ) -> JsonValue:
        try:
            return validate_math_content(value)
        except SanitizationFailed as e:
            e.context.user_id = caller.user_id
            e.context.call_type = call_type.value
            logger.error(
                f"Legacy math markup survived sanitization. "
                f"Original: {e.original!r} Cleaned: {e.cleaned!r}",
                extra={
                    "user_id": caller.user_id,
                    "call_type": call_type.value,
                    "error_code": e.code,
                    "marker": e.marker,
                },
            )
            raise


def _conform(model: type[BaseModel], data: JsonValue, caller: CallerIdentity, call_type: AiCallType):
    """Validate sanitized AI JSON against the response model."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(
            f"AI response failed schema validation: {e.errors()}",
            extra={"user_id": caller.user_id, "call_type": call_type.value},
        )
        raise AIResponseFormatError(
            "schema", ErrorContext(user_id=caller.user_id, call_type=call_type.value),
        )
