"""Usage window tests — pure quota arithmetic."""

from datetime import datetime, timedelta, timezone

from mathtutor.core.domain_types import AI_USAGE_LIMITS, AiCallType
from mathtutor.core.usage_window import evaluate_usage, limit_for, window_start


def test_window_start_is_24h_before_now():
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert window_start(now) == now - timedelta(hours=24)


def test_window_start_custom_hours():
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert window_start(now, hours=1) == datetime(2026, 3, 1, 11, 0, tzinfo=timezone.utc)


def test_every_call_type_has_a_limit():
    assert set(AI_USAGE_LIMITS) == set(AiCallType)
    assert limit_for(AiCallType.EXPLANATION) == 20
    assert limit_for(AiCallType.SOCRATIC_VALIDATION) == 60


def test_below_limit_allowed():
    status = evaluate_usage(AiCallType.ANSWER_VALIDATION, 29)
    assert not status.limit_exceeded
    assert status.limit == 30


def test_at_limit_exceeded():
    assert evaluate_usage(AiCallType.ANSWER_VALIDATION, 30).limit_exceeded


def test_admin_never_exceeded():
    status = evaluate_usage(AiCallType.OCR, 1000, is_admin=True)
    assert not status.limit_exceeded
    assert status.usage_count == 1000
