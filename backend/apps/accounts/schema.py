"""GraphQL schema for registration and the company profile."""
import logging

import strawberry
import strawberry_django
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from strawberry import auto
from strawberry.types import Info

from apps.core.context import Context
from apps.core.permissions import check_user, get_current_user
from apps.core.schema import AuthError, AuthResult, auth_payload

from .models import Profile, User

logger = logging.getLogger(__name__)


@strawberry_django.type(Profile)
class ProfileType:
    company_name: auto
    company_email: auto
    company_phone: auto
    company_address: auto
    company_website: auto
    company_logo_url: auto
    company_tax_id: auto
    default_currency: auto
    default_tax_rate: auto
    default_notes: auto
    default_terms: auto
    updated_at: auto


@strawberry.input
class ProfileInput:
    """Input for saving the company profile. Omitted fields are left unchanged."""

    company_name: str | None = None
    company_email: str | None = None
    company_phone: str | None = None
    company_address: str | None = None
    company_website: str | None = None
    company_logo_url: str | None = None
    company_tax_id: str | None = None
    default_currency: str | None = None
    default_tax_rate: float | None = None
    default_notes: str | None = None
    default_terms: str | None = None


@strawberry.type
class ProfileResult:
    """Result of profile operations."""

    profile: ProfileType | None = None
    success: bool = False
    error: str | None = None


@strawberry.type
class AccountQuery:
    @strawberry.field
    def profile(self, info: Info[Context, None]) -> ProfileType:
        """Get the current user's company profile."""
        user = get_current_user(info)
        profile, _ = Profile.objects.get_or_create(user=user)
        return profile


@strawberry.type
class AccountMutation:
    @strawberry.mutation
    def register(
        self,
        email: str,
        password: str,
        first_name: str = "",
        last_name: str = "",
    ) -> AuthResult:
        """Create an account and return tokens for it."""
        email = User.objects.normalize_email(email.strip())
        if not email:
            return AuthError(message="Email is required")
        if User.objects.filter(email__iexact=email).exists():
            return AuthError(message="An account with this email already exists")

        try:
            validate_password(password)
        except ValidationError as e:
            return AuthError(message=" ".join(e.messages))

        user = User.objects.create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
        )
        logger.info("Registered user %s", user.id)
        return auth_payload(user)

    @strawberry.mutation
    def save_profile(self, info: Info[Context, None], input: ProfileInput) -> ProfileResult:
        """Update company details and invoice defaults."""
        user, err = check_user(info)
        if err:
            return ProfileResult(error=err)

        profile, _ = Profile.objects.get_or_create(user=user)
        for field_name, value in vars(input).items():
            if value is not None:
                setattr(profile, field_name, value)

        if profile.default_tax_rate < 0:
            return ProfileResult(error="Tax rate must not be negative")
        profile.default_currency = (profile.default_currency or "").upper()

        try:
            profile.full_clean(exclude=["user"])
        except ValidationError as e:
            return ProfileResult(error="; ".join(e.messages))

        profile.save()
        return ProfileResult(profile=profile, success=True)
