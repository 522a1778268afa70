"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId and ExerciseId wrap str — identity provider and curriculum ids are opaque strings
    - JsonValue is the closed set of shapes a parsed AI response can take
    - Every AI call type has exactly one daily limit in AI_USAGE_LIMITS

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to the call_type DB column without custom encoders
"""

from enum import Enum
from typing import NewType, Union


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)
ExerciseId = NewType("ExerciseId", str)


# ─── Structured Content ──────────────────────────────────────────

JsonScalar = Union[str, int, float, bool, None]
JsonValue = Union[JsonScalar, list["JsonValue"], dict[str, "JsonValue"]]


# ─── Enums ───────────────────────────────────────────────────────

class AiCallType(str, Enum):
    """AI-backed features metered by the daily usage quota."""
    EXPLANATION = "EXPLANATION"
    HANDWRITING_CORRECTION = "HANDWRITING_CORRECTION"
    ANSWER_VALIDATION = "ANSWER_VALIDATION"
    SOCRATIC_VALIDATION = "SOCRATIC_VALIDATION"
    OCR = "OCR"


class Evaluation(str, Enum):
    """Per-part verdict returned by check-answer."""
    CORRECT = "correct"
    INCORRECT = "incorrect"
    PARTIAL = "partial"


class ExplanationRequestType(str, Enum):
    """explain: structured plan (JSON) or free-form detail (text)."""
    PLAN = "plan"
    DETAIL = "detail"


# Requests per user per window (see core/usage_window.py)
AI_USAGE_LIMITS: dict[AiCallType, int] = {
    AiCallType.EXPLANATION: 20,
    AiCallType.HANDWRITING_CORRECTION: 10,
    AiCallType.ANSWER_VALIDATION: 30,
    AiCallType.SOCRATIC_VALIDATION: 60,
    AiCallType.OCR: 30,
}
