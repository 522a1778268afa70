"""Bearer-token verification tests."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from mathtutor.core.errors import AuthenticationError
from mathtutor.infrastructure.identity import verify_access_token

SECRET = "unit-secret"
AUD = "authenticated"


def _token(secret=SECRET, **claims):
    payload = {
        "sub": "user-42",
        "aud": AUD,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
        **claims,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def test_valid_token_yields_identity():
    caller = verify_access_token(_token(email="a@b.c"), SECRET, AUD)
    assert caller.user_id == "user-42"
    assert caller.email == "a@b.c"
    assert caller.is_admin is False


def test_admin_by_email_case_insensitive():
    caller = verify_access_token(
        _token(email="Prof@Example.com"), SECRET, AUD, admin_email="prof@example.com",
    )
    assert caller.is_admin


def test_admin_by_role_claim():
    caller = verify_access_token(_token(app_metadata={"role": "admin"}), SECRET, AUD)
    assert caller.is_admin


def test_wrong_secret_rejected():
    with pytest.raises(AuthenticationError):
        verify_access_token(_token(secret="other"), SECRET, AUD)


def test_expired_token_rejected():
    expired = _token(exp=datetime.now(timezone.utc) - timedelta(minutes=1))
    with pytest.raises(AuthenticationError):
        verify_access_token(expired, SECRET, AUD)


def test_wrong_audience_rejected():
    with pytest.raises(AuthenticationError):
        verify_access_token(_token(aud="service_role"), SECRET, AUD)


def test_missing_subject_rejected():
    token = jwt.encode({"aud": AUD}, SECRET, algorithm="HS256")
    with pytest.raises(AuthenticationError):
        verify_access_token(token, SECRET, AUD)
