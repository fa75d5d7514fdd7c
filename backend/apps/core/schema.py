"""Core GraphQL schema for authentication."""
from typing import Annotated, Union

import strawberry
from django.contrib.auth import authenticate
from strawberry.types import Info

from apps.core.auth import REFRESH, create_access_token, create_refresh_token, get_user_from_token
from apps.core.context import Context


@strawberry.type
class AuthPayload:
    """Authentication response with tokens."""

    access_token: str
    refresh_token: str
    user_id: int
    email: str


@strawberry.type
class AuthError:
    """Authentication error."""

    message: str


AuthResult = Annotated[Union[AuthPayload, AuthError], strawberry.union("AuthResult")]


@strawberry.type
class DeleteResult:
    """Result of delete operations."""

    success: bool = False
    error: str | None = None


@strawberry.type
class CurrentUser:
    """Current authenticated user info."""

    id: int
    email: str
    first_name: str
    last_name: str
    company_name: str | None


def auth_payload(user) -> AuthPayload:
    """Issue a fresh token pair for a user."""
    return AuthPayload(
        access_token=create_access_token(user),
        refresh_token=create_refresh_token(user),
        user_id=user.id,
        email=user.email,
    )


@strawberry.type
class CoreQuery:
    """Core queries including auth status."""

    @strawberry.field
    def me(self, info: Info[Context, None]) -> CurrentUser | None:
        """Get current authenticated user."""
        user = info.context.user
        if user is None:
            return None

        profile = getattr(user, "profile", None)
        return CurrentUser(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            company_name=profile.company_name if profile else None,
        )


@strawberry.type
class AuthMutation:
    """Authentication mutations."""

    @strawberry.mutation
    def login(self, email: str, password: str) -> AuthResult:
        """Authenticate user and return tokens."""
        user = authenticate(username=email, password=password)

        if user is None or not user.is_active:
            return AuthError(message="Invalid email or password")

        return auth_payload(user)

    @strawberry.mutation
    def refresh_token(self, refresh_token: str) -> AuthResult:
        """Get new access token using refresh token."""
        user = get_user_from_token(refresh_token, token_type=REFRESH)

        if user is None:
            return AuthError(message="Invalid or expired refresh token")

        return auth_payload(user)
