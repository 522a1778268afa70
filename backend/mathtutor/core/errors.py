"""Error Hierarchy — typed, categorized exceptions for all MathTutor failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (4xx) are recoverable by the caller; infrastructure and
      sanitization errors (5xx) are critical
    - to_response() never includes debug_info (raw student/AI text stays server-side)

Design Decisions:
    - Single hierarchy with MathTutorError base: one FastAPI handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    RESOURCE_NOT_FOUND = "resource_not_found"
    SANITIZATION = "sanitization"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    call_type: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class MathTutorError(Exception):
    """Base exception for all MathTutor errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "call_type": self.context.call_type,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Sanitization ───────────────────────────────────────────────

SANITIZATION_USER_MESSAGE = (
    "The AI response could not be formatted correctly. Please retry."
)


class SanitizationFailed(MathTutorError):
    """Legacy math delimiters survived normalization.

    `original` and `cleaned` are diagnostics for server-side logs only;
    the response envelope carries the generic retry message.
    """
    def __init__(
        self,
        original: str,
        cleaned: str,
        marker: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.debug_info = {
            "original": original, "cleaned": cleaned, "marker": marker,
        }
        super().__init__(
            SANITIZATION_USER_MESSAGE,
            "SANITIZATION_FAILED", ErrorCategory.SANITIZATION,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.original = original
        self.cleaned = cleaned
        self.marker = marker


class AIResponseFormatError(MathTutorError):
    """AI returned an empty or non-JSON body where JSON was expected."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        messages = {
            "empty": "The AI returned an empty response. Please retry.",
            "invalid_json": "The AI response was malformed. Please retry.",
            "schema": "The AI response did not have the expected structure. Please retry.",
        }
        super().__init__(
            messages.get(reason, "The AI response was malformed. Please retry."),
            "AI_RESPONSE_FORMAT", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502,
        )
        self.reason = reason


# ─── Client Errors (400-level) ──────────────────────────────────

class AuthenticationError(MathTutorError):
    """Missing, invalid or expired bearer token."""
    def __init__(self, message: str = "Authentication is required.", context: ErrorContext | None = None):
        super().__init__(
            message, "AUTHENTICATION_REQUIRED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class UsageLimitExceededError(MathTutorError):
    """Daily AI quota reached for this call type."""
    def __init__(self, call_type: str, limit: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.call_type = call_type
        super().__init__(
            f"You have reached your limit of {limit} requests per day.",
            "USAGE_LIMIT_EXCEEDED", ErrorCategory.RATE_LIMIT,
            ErrorSeverity.WARNING, ctx, 429,
        )
        self.limit = limit


class ResourceNotFoundError(MathTutorError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(MathTutorError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class AnthropicAPIError(MathTutorError):
    """Anthropic API call failed."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Anthropic API error ({api_error_type}): {message}",
            "ANTHROPIC_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.api_error_type = api_error_type
