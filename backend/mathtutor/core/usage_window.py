"""Usage Window — pure quota arithmetic for the AI usage limiter.

Invariants:
    - Window is trailing (now - hours, now], not calendar-day aligned
    - Limit reached when count >= limit (the limit-th call is the last allowed)
    - Admins are never limited
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from mathtutor.core.domain_types import AI_USAGE_LIMITS, AiCallType

DEFAULT_WINDOW_HOURS = 24


@dataclass(frozen=True)
class UsageStatus:
    """Result of a quota check."""
    limit_exceeded: bool
    usage_count: int
    limit: int


def window_start(now: datetime | None = None, hours: int = DEFAULT_WINDOW_HOURS) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now - timedelta(hours=hours)


def limit_for(call_type: AiCallType) -> int:
    return AI_USAGE_LIMITS[call_type]


def evaluate_usage(
    call_type: AiCallType, usage_count: int, is_admin: bool = False,
) -> UsageStatus:
    """Compare a window count against the call type's daily limit."""
    limit = limit_for(call_type)
    if is_admin:
        return UsageStatus(False, usage_count, limit)
    return UsageStatus(usage_count >= limit, usage_count, limit)
