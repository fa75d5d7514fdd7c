"""JWT authentication for the GraphQL API.

Access tokens authenticate requests; refresh tokens can only be exchanged for
a new token pair. Both are HS256-signed with ``SECRET_KEY``.
"""
from datetime import datetime, timedelta, timezone

import jwt
from django.conf import settings

from apps.accounts.models import User

ALGORITHM = "HS256"
ACCESS = "access"
REFRESH = "refresh"


def _encode(user: User, token_type: str, lifetime: timedelta, **claims) -> str:
    issued_at = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + lifetime,
        **claims,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token for a user."""
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.JWT_ACCESS_TOKEN_HOURS)
    return _encode(user, ACCESS, expires_delta, email=user.email)


def create_refresh_token(user: User, expires_delta: timedelta | None = None) -> str:
    """Create a JWT refresh token for a user."""
    if expires_delta is None:
        expires_delta = timedelta(days=settings.JWT_REFRESH_TOKEN_DAYS)
    return _encode(user, REFRESH, expires_delta)


def decode_token(token: str, token_type: str | None = None) -> dict | None:
    """Return the token's claims, or None if it is invalid, expired or of another type."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.InvalidTokenError:
        return None

    if token_type is not None and payload.get("type") != token_type:
        return None
    return payload


def get_user_from_token(token: str, token_type: str | None = None) -> User | None:
    """Get the active user a valid token was issued for."""
    payload = decode_token(token, token_type=token_type)
    if payload is None:
        return None

    try:
        return User.objects.select_related("profile").get(id=int(payload["sub"]), is_active=True)
    except (KeyError, ValueError, User.DoesNotExist):
        return None
