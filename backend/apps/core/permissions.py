"""Permission utilities for GraphQL and services."""
from strawberry.types import Info

from apps.core.context import Context


class PermissionError(Exception):
    """Raised when a request has no authenticated user."""

    pass


def require_user(user):
    """Return the user or raise before any write path is entered."""
    if user is None or not getattr(user, "is_authenticated", False):
        raise PermissionError("Authentication required")
    return user


def get_current_user(info: Info[Context, None]):
    """Get the current authenticated user or raise error."""
    if not info.context.is_authenticated:
        raise PermissionError("Authentication required")
    return info.context.user


def check_user(info: Info[Context, None]):
    """Get the current user without raising.

    Returns (user, None) on success or (None, error_string) on failure.
    Use in mutations that return result types.
    """
    if not info.context.is_authenticated:
        return None, "Authentication required"
    return info.context.user, None
