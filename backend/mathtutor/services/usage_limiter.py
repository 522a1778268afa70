"""AI Usage Limiter — per-user daily quotas backed by the ai_usage_logs table.

Invariants:
    - check() raises UsageLimitExceededError when count >= limit (admins exempt)
    - Fail-open: if the count query fails, the request is allowed and the failure logged
    - record() failures are logged, never surfaced (the student already got their answer)

Design Decisions:
    - Fail-open over fail-closed: a quota outage must not take tutoring down with it
    - Repository split from limiter: tests swap the repository, the policy stays real
"""

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mathtutor.core.domain_types import AiCallType, UserId
from mathtutor.core.errors import DatabaseError, ErrorContext, UsageLimitExceededError
from mathtutor.core.repository_protocols import UsageLogRepository
from mathtutor.core.usage_window import UsageStatus, evaluate_usage, window_start
from mathtutor.infrastructure.database import translate_db_errors
from mathtutor.infrastructure.identity import CallerIdentity
from mathtutor.models.ai_usage_log import AiUsageLog

logger = logging.getLogger(__name__)


class SqlUsageLogRepository:
    """UsageLogRepository over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_since(
        self, user_id: UserId, call_type: AiCallType, since: datetime,
    ) -> int:
        async with translate_db_errors(self.db, "count"):
            result = await self.db.execute(
                select(func.count(AiUsageLog.id)).where(
                    AiUsageLog.user_id == user_id,
                    AiUsageLog.call_type == call_type.value,
                    AiUsageLog.request_timestamp >= since,
                ),
            )
        return result.scalar_one()

    async def record(self, user_id: UserId, call_type: AiCallType) -> None:
        async with translate_db_errors(self.db, "insert"):
            self.db.add(AiUsageLog(user_id=user_id, call_type=call_type.value))
            await self.db.commit()


class UsageLimiter:
    """Quota policy applied before each AI call."""

    def __init__(self, repository: UsageLogRepository, window_hours: int = 24):
        self.repository = repository
        self.window_hours = window_hours

    async def check(self, caller: CallerIdentity, call_type: AiCallType) -> UsageStatus:
        """Raise UsageLimitExceededError if the caller is over quota."""
        try:
            count = await self.repository.count_since(
                caller.user_id, call_type, window_start(hours=self.window_hours),
            )
        except DatabaseError as e:
            logger.error(
                f"Usage check failed, allowing request: {e.message}",
                extra={"user_id": caller.user_id, "call_type": call_type.value},
            )
            return evaluate_usage(call_type, 0, caller.is_admin)

        status = evaluate_usage(call_type, count, caller.is_admin)
        if status.limit_exceeded:
            raise UsageLimitExceededError(
                call_type.value, status.limit,
                ErrorContext(user_id=caller.user_id),
            )
        return status

    async def record(self, caller: CallerIdentity, call_type: AiCallType) -> None:
        try:
            await self.repository.record(caller.user_id, call_type)
        except DatabaseError as e:
            logger.error(
                f"Failed to log AI call: {e.message}",
                extra={"user_id": caller.user_id, "call_type": call_type.value},
            )
