"""Database error translation — rollback at the failing statement, no SQL in responses.

Invariants:
    - A failed statement is rolled back before DatabaseError reaches the caller
    - DatabaseError messages are fixed descriptions, never driver text
    - Quota fail-open keeps the request usable on the same session
"""

import json
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError, InternalError, OperationalError

from mathtutor.core.domain_types import AiCallType
from mathtutor.core.errors import DatabaseError
from mathtutor.infrastructure.database import describe_db_error, get_db
from mathtutor.main import app
from mathtutor.services.usage_limiter import SqlUsageLogRepository
from tests.services.doubles import STUDENT

SECRET_PARAM = "student-1-secret"

LEVELS = [{
    "chapters": [{"series": [{"exercises": [
        {"id": "ex-1", "statement": "Calculer f'(x).", "correctionSnippet": "2x"},
    ]}]}],
}]

REPLY = json.dumps({
    "is_globally_correct": True,
    "summary": "Correct.",
    "detailed_feedback": [],
})


def _operational_error():
    return OperationalError(
        "SELECT count(ai_usage_logs.id) FROM ai_usage_logs WHERE user_id = $1",
        {"user_id": SECRET_PARAM},
        Exception("connection reset by peer"),
    )


class _Result:
    def __init__(self, value):
        self.value = value

    def scalar_one(self):
        return self.value

    def scalar_one_or_none(self):
        return self.value


class PostgresLikeSession:
    """AsyncSession double: after a failed statement, every statement fails until rollback."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.aborted = False
        self.rollbacks = 0
        self.commits = 0
        self.added = []

    def _check_aborted(self):
        if self.aborted:
            raise InternalError(
                "<statement>", {}, Exception("current transaction is aborted"),
            )

    async def execute(self, statement):
        self._check_aborted()
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            self.aborted = True
            raise outcome
        return _Result(outcome)

    def add(self, obj):
        self.added.append(obj)

    async def commit(self):
        self._check_aborted()
        self.commits += 1

    async def rollback(self):
        self.aborted = False
        self.rollbacks += 1


def _use_session(session):
    async def override_get_db():
        yield session
    app.dependency_overrides[get_db] = override_get_db


def test_describe_db_error_picks_most_specific():
    integrity = IntegrityError("INSERT", {}, Exception("dup"))
    assert describe_db_error(integrity) == "Integrity constraint violated"
    assert describe_db_error(_operational_error()) == "Connection or operational error"


async def test_count_failure_rolls_back_and_hides_sql():
    db = PostgresLikeSession(_operational_error())
    with pytest.raises(DatabaseError) as exc_info:
        await SqlUsageLogRepository(db).count_since(
            STUDENT.user_id, AiCallType.OCR, datetime.now(timezone.utc),
        )
    err = exc_info.value
    assert db.rollbacks == 1
    assert not db.aborted
    assert err.message == "Database count failed: Connection or operational error"
    assert "SELECT" not in err.message
    assert SECRET_PARAM not in json.dumps(err.to_response())


async def test_check_answer_survives_failed_quota_count(client, fake_ai):
    db = PostgresLikeSession(_operational_error(), LEVELS)
    _use_session(db)
    fake_ai.queue(REPLY)
    res = await client.post(
        "/api/v1/check-answer",
        json={"student_answer": "f'(x) = 2x", "exercise_id": "ex-1"},
    )
    assert res.status_code == 200
    assert res.json()["is_globally_correct"] is True
    assert db.rollbacks == 1
    assert db.commits == 1
    assert len(db.added) == 1


async def test_curriculum_read_failure_is_503_without_internals(client, fake_ai):
    db = PostgresLikeSession(0, _operational_error())
    _use_session(db)
    res = await client.post(
        "/api/v1/check-answer",
        json={"student_answer": "f'(x) = 2x", "exercise_id": "ex-1"},
    )
    assert res.status_code == 503
    assert "SELECT" not in res.text
    assert SECRET_PARAM not in res.text
    assert "connection reset" not in res.text
    assert fake_ai.prompts == []
