"""Shared FastAPI dependencies used across route modules.

Invariants:
    - get_caller raises AuthenticationError (401) for a missing or invalid bearer token
    - The AI client is built once per process (get_ai_client is cached)

Design Decisions:
    - HTTPBearer(auto_error=False): missing header goes through our error envelope,
      not FastAPI's default 403
"""

from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from mathtutor.config import get_settings
from mathtutor.core.errors import AuthenticationError
from mathtutor.core.repository_protocols import TextCompletionClient
from mathtutor.infrastructure.anthropic_client import ResilientAnthropicClient
from mathtutor.infrastructure.database import get_db
from mathtutor.infrastructure.identity import CallerIdentity, verify_access_token
from mathtutor.services.curriculum_store import CurriculumStore
from mathtutor.services.tutoring import TutoringService
from mathtutor.services.usage_limiter import SqlUsageLogRepository, UsageLimiter

security = HTTPBearer(auto_error=False)


def get_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> CallerIdentity:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    settings = get_settings()
    return verify_access_token(
        credentials.credentials,
        settings.identity_jwt_secret,
        settings.identity_jwt_audience,
        settings.admin_email,
    )


@lru_cache
def get_ai_client() -> TextCompletionClient:
    settings = get_settings()
    return ResilientAnthropicClient(
        api_key=settings.anthropic_api_key,
        model=settings.ai_model,
        max_tokens=settings.ai_max_tokens,
        max_retries=settings.anthropic_max_retries,
        base_delay_ms=settings.anthropic_base_delay_ms,
        max_delay_ms=settings.anthropic_max_delay_ms,
        timeout_seconds=settings.anthropic_timeout_seconds,
    )


def get_tutoring_service(
    db: AsyncSession = Depends(get_db),
    ai_client: TextCompletionClient = Depends(get_ai_client),
) -> TutoringService:
    settings = get_settings()
    return TutoringService(
        ai_client,
        UsageLimiter(SqlUsageLogRepository(db), settings.usage_window_hours),
        CurriculumStore(db, settings.curriculum_cache_seconds),
    )
