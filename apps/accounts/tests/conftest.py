import pytest
from apps.accounts.models import User


@pytest.fixture
def user(db):
    """Create and return a test user."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        first_name='Test',
        last_name='User',
        email_verified=True,
    )


@pytest.fixture
def user_unverified(db):
    """Create and return a user with unverified email."""
    return User.objects.create_user(
        email='unverified@example.com',
        password='TestPass123!',
        verification_token='test-verification-token',
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive user."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        is_active=False,
    )


@pytest.fixture
def user_with_reset_token(db):
    """Create a user with a password reset token."""
    return User.objects.create_user(
        email='resetuser@example.com',
        password='OldPass123!',
        email_verified=True,
        verification_token='valid-reset-token-12345',
    )
