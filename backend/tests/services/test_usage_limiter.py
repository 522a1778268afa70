"""UsageLimiter policy tests — fake repository, real policy."""

import pytest

from mathtutor.core.domain_types import AiCallType
from mathtutor.core.errors import DatabaseError, UsageLimitExceededError
from mathtutor.services.usage_limiter import UsageLimiter
from tests.services.doubles import ADMIN, STUDENT


class _Repo:
    def __init__(self, count=0, fail_count=False, fail_record=False):
        self.count = count
        self.fail_count = fail_count
        self.fail_record = fail_record
        self.recorded = []

    async def count_since(self, user_id, call_type, since):
        if self.fail_count:
            raise DatabaseError("down", "count")
        return self.count

    async def record(self, user_id, call_type):
        if self.fail_record:
            raise DatabaseError("down", "insert")
        self.recorded.append((user_id, call_type))


async def test_under_limit_returns_status():
    status = await UsageLimiter(_Repo(count=3)).check(STUDENT, AiCallType.EXPLANATION)
    assert status.usage_count == 3
    assert status.limit == 20


async def test_at_limit_raises():
    with pytest.raises(UsageLimitExceededError) as exc_info:
        await UsageLimiter(_Repo(count=20)).check(STUDENT, AiCallType.EXPLANATION)
    assert exc_info.value.limit == 20
    assert exc_info.value.context.user_id == STUDENT.user_id


async def test_admin_not_limited():
    status = await UsageLimiter(_Repo(count=999)).check(ADMIN, AiCallType.EXPLANATION)
    assert not status.limit_exceeded


async def test_count_failure_fails_open():
    status = await UsageLimiter(_Repo(fail_count=True)).check(STUDENT, AiCallType.OCR)
    assert not status.limit_exceeded


async def test_record_failure_is_not_raised():
    repo = _Repo(fail_record=True)
    await UsageLimiter(repo).record(STUDENT, AiCallType.OCR)
    assert repo.recorded == []


async def test_record_passes_user_and_call_type():
    repo = _Repo()
    await UsageLimiter(repo).record(STUDENT, AiCallType.OCR)
    assert repo.recorded == [(STUDENT.user_id, AiCallType.OCR)]
