"""Account management and team-member administration services."""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.contrib.auth import get_user_model

from apps.accounts.models import UserRole
from apps.organizations.models import Team
from .exceptions import (
    PasswordConfirmationError,
    UserRegistrationError,
    UserNotFoundError,
    CannotDeactivateSelfError,
)

logger = logging.getLogger(__name__)

User = get_user_model()

TEAM_MEMBER_FIELDS = ('first_name', 'last_name', 'phone', 'role', 'is_active')


@transaction.atomic
def delete_user_account(*, user_id: UUID, password: str) -> None:
    """
    GDPR-compliant account deletion (anonymization).

    Raises:
        PasswordConfirmationError: If password is incorrect
    """
    user = (
        User.objects
        .select_for_update()
        .get(id=user_id)
    )

    if not user.check_password(password):
        raise PasswordConfirmationError("Invalid password")

    user.anonymize()
    logger.info("Anonymized user %s", user_id)


def _get_user_for_update(user_id: UUID) -> User:
    try:
        return User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User {user_id} not found")


@transaction.atomic
def create_team_member(
    *,
    email: str,
    password: str,
    first_name: str = "",
    last_name: str = "",
    role: str = UserRole.PARTNER,
    phone: str = "",
    team: Optional[Team] = None
) -> User:
    """
    Create an active, verified back-office user.

    Assigning a team also assigns the team's organization.

    Raises:
        UserRegistrationError: If the email is already taken
    """
    email = User.objects.normalize_email(email)
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("User with this email already exists")

    user = User.objects.create_user(
        email=email,
        password=password,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        role=role,
        team=team,
        organization=team.organization if team else None,
        email_verified=True,
        is_active=True,
    )

    logger.info("Created team member %s with role %s", user.id, role)
    return user


@transaction.atomic
def update_team_member(*, user_id: UUID, team: Optional[Team] = None, **fields) -> User:
    """
    Update profile fields, role or team of a user.

    Passing `team` moves the user to that team and its organization.

    Raises:
        UserNotFoundError: If user does not exist
    """
    user = _get_user_for_update(user_id)

    update_fields = []
    for field in TEAM_MEMBER_FIELDS:
        if field in fields:
            setattr(user, field, fields[field])
            update_fields.append(field)

    if team is not None:
        user.team = team
        user.organization = team.organization
        update_fields.extend(['team', 'organization'])

    if update_fields:
        user.save(update_fields=update_fields)

    return user


@transaction.atomic
def deactivate_team_member(*, user_id: UUID, acting_user: User) -> User:
    """
    Deactivate a user account.

    Raises:
        CannotDeactivateSelfError: If the admin targets their own account
        UserNotFoundError: If user does not exist
    """
    if str(user_id) == str(acting_user.id):
        raise CannotDeactivateSelfError("You cannot deactivate your own account")

    user = _get_user_for_update(user_id)
    user.deactivate()

    logger.info("User %s deactivated by %s", user_id, acting_user.id)
    return user
