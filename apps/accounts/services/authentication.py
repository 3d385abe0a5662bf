"""
Sign-up, sign-in and credential recovery.

Self-registration only ever creates merchant portal users; staff accounts
(admins and partners) are created through team-member administration.
Verification and password-reset tokens share `User.verification_token`.
"""

import logging
import secrets
from uuid import UUID

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.accounts.models import UserRole
from .exceptions import (
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidTokenError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

User = get_user_model()

LANDING_AREAS = {
    UserRole.ADMIN: 'admin',
    UserRole.PARTNER: 'partner',
    UserRole.MERCHANT: 'merchant',
}


def landing_area(user) -> str:
    """Application area a user lands in after signing in."""
    if user.is_admin:
        return LANDING_AREAS[UserRole.ADMIN]
    return LANDING_AREAS.get(user.role, LANDING_AREAS[UserRole.MERCHANT])


def _new_token() -> str:
    return secrets.token_urlsafe(32)


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    first_name: str = "",
    last_name: str = "",
    phone: str = ""
) -> User:
    """
    Create a merchant portal user waiting for e-mail verification.

    Raises:
        UserRegistrationError: If the email is taken
    """
    email = User.objects.normalize_email(email)
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("User with this email already exists")

    try:
        user = User.objects.create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            role=UserRole.MERCHANT,
            verification_token=_new_token(),
        )
    except IntegrityError as e:
        raise UserRegistrationError(f"Registration failed: {e}")

    logger.info("Registered merchant user %s", user.id)
    return user


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Check credentials and stamp `last_login`.

    The password is checked before the active flag so a deactivated
    account is only revealed to someone who knows its password.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        InactiveAccountError: Deactivated team member or portal user
    """
    user = User.objects.select_for_update().filter(email__iexact=email).first()
    if user is None or not user.check_password(password):
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    logger.info("User %s signed in (%s)", user.id, user.role)
    return user


@transaction.atomic
def verify_user_email(*, user_id: UUID, token: str) -> User:
    """
    Raises:
        InvalidTokenError: If the token is missing or is not the user's
    """
    user = User.objects.select_for_update().get(id=user_id)
    if not token or user.verification_token != token:
        raise InvalidTokenError("Invalid verification token")

    user.email_verified = True
    user.verification_token = None
    user.save(update_fields=['email_verified', 'verification_token'])
    return user


def _send_reset_email(email: str, token: str) -> None:
    try:
        send_mail(
            subject='Password reset',
            message=(
                f'Use this token to reset your password: {token}\n\n'
                f'Then sign in at {settings.PORTAL_LOGIN_URL}'
            ),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[email],
        )
    except Exception:
        logger.exception("Failed to send password reset email to %s", email)


@transaction.atomic
def request_password_reset(*, email: str) -> str:
    """
    Issue a reset token and mail it once the transaction commits.

    Raises:
        UserNotFoundError: If no active user has this email
    """
    user = User.objects.select_for_update().filter(email__iexact=email, is_active=True).first()
    if user is None:
        raise UserNotFoundError(f"No active user with email: {email}")

    token = _new_token()
    user.verification_token = token
    user.save(update_fields=['verification_token'])

    transaction.on_commit(lambda: _send_reset_email(user.email, token))
    return token


@transaction.atomic
def confirm_password_reset(*, token: str, new_password: str) -> User:
    """
    Raises:
        InvalidTokenError: If no active user holds the token
    """
    user = User.objects.select_for_update().filter(verification_token=token, is_active=True).first()
    if not token or user is None:
        raise InvalidTokenError("Invalid or expired reset token")

    user.set_password(new_password)
    user.verification_token = None
    user.save(update_fields=['password', 'verification_token'])

    logger.info("Password reset for user %s", user.id)
    return user
