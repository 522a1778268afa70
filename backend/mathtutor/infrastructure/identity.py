"""Caller Identity — verifies identity-provider access tokens.

Invariants:
    - Only HS256 tokens signed with identity_jwt_secret and carrying the configured audience are accepted
    - "sub" claim is required; it becomes the UserId
    - Any verification failure raises AuthenticationError (never returns None)

Design Decisions:
    - Local JWT verification over a round-trip to the provider's /user endpoint:
      the provider signs access tokens with a shared secret
    - is_admin derived from token claims only (admin email or app_metadata.role)
"""

from dataclasses import dataclass

from jose import JWTError, jwt

from mathtutor.core.domain_types import UserId
from mathtutor.core.errors import AuthenticationError

ALGORITHM = "HS256"


@dataclass(frozen=True)
class CallerIdentity:
    """Who is calling, as far as the tutoring handlers care."""
    user_id: UserId
    email: str | None = None
    is_admin: bool = False


def verify_access_token(
    token: str,
    secret: str,
    audience: str,
    admin_email: str | None = None,
) -> CallerIdentity:
    """Decode and verify a bearer token."""
    try:
        payload = jwt.decode(
            token, secret, algorithms=[ALGORITHM], audience=audience,
        )
    except JWTError:
        raise AuthenticationError("Invalid or expired authentication token.")

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Invalid or expired authentication token.")

    email = payload.get("email")
    role = (payload.get("app_metadata") or {}).get("role")
    is_admin = role == "admin" or bool(
        admin_email and email and email.lower() == admin_email.lower()
    )
    return CallerIdentity(UserId(subject), email, is_admin)
