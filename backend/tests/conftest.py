"""Pytest configuration and fixtures."""
from datetime import date

import pytest

from apps.accounts.models import User
from apps.clients.models import Client


@pytest.fixture
def user(db):
    """Create a test user. A profile is created by signal."""
    return User.objects.create_user(
        email="test@example.com",
        password="testpass123",
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email="other@example.com",
        password="testpass123",
    )


@pytest.fixture
def client_record(db, user):
    """A billed client belonging to ``user``."""
    return Client.objects.create(
        user=user,
        name="Acme Corp",
        email="billing@acme.test",
        address="1 Main St",
    )


@pytest.fixture
def today():
    return date(2024, 1, 1)


