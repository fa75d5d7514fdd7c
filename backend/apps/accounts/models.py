"""User and company profile models."""
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models

from apps.core.models import TimestampedModel


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("The Email field must be set")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Email-based user; every invoice, client and template belongs to one."""

    username = None
    email = models.EmailField(unique=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        ordering = ["email"]

    def __str__(self):
        return self.email


class Profile(TimestampedModel):
    """Company details and invoice defaults used to pre-fill new invoices."""

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="profile",
    )

    company_name = models.CharField(max_length=255, blank=True)
    company_email = models.EmailField(blank=True)
    company_phone = models.CharField(max_length=50, blank=True)
    company_address = models.TextField(blank=True)
    company_website = models.CharField(max_length=255, blank=True)
    company_logo_url = models.URLField(max_length=2000, blank=True)
    company_tax_id = models.CharField(max_length=50, blank=True)

    default_currency = models.CharField(max_length=3, default="USD")
    default_tax_rate = models.FloatField(
        default=0,
        help_text="Default tax rate in % (e.g., 7.5)",
    )
    default_notes = models.TextField(blank=True)
    default_terms = models.TextField(blank=True)

    class Meta:
        verbose_name = "Profile"

    def __str__(self):
        return f"Profile for {self.user.email}"

    def company_snapshot(self) -> dict:
        """Capture the company fields copied onto each new invoice."""
        return {
            "name": self.company_name,
            "email": self.company_email,
            "phone": self.company_phone,
            "address": self.company_address,
            "web": self.company_website,
            "logo_url": self.company_logo_url,
            "tax_id": self.company_tax_id,
        }
