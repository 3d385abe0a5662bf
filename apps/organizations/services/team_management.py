"""
Team management service.

Membership is stored on the user (`user.team`, `user.organization`), so
adding and removing members locks the user row.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.organizations.models import Organization, Team

from .exceptions import (
    OrganizationNotFoundError,
    TeamNotFoundError,
    InactiveOrganizationError,
    InvalidTeamMemberError,
    AlreadyTeamMemberError,
    NotTeamMemberError,
)

logger = logging.getLogger(__name__)

TEAM_FIELDS = ('name', 'description', 'is_active')


def _get_team(team_id: UUID, lock: bool = False) -> Team:
    queryset = Team.objects.select_related('organization')
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(id=team_id)
    except Team.DoesNotExist:
        raise TeamNotFoundError(f"Team with ID {team_id} not found")


def _get_user(user_id: UUID) -> User:
    try:
        return User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise InvalidTeamMemberError(f"User with ID {user_id} not found")


def _assign(user: User, team: Team) -> None:
    if user.is_merchant:
        raise InvalidTeamMemberError("Merchant accounts cannot be team members")
    user.team = team
    user.organization = team.organization
    user.save(update_fields=['team', 'organization'])


@transaction.atomic
def create_team(
    *,
    organization_id: UUID,
    name: str,
    created_by: User,
    description: str = '',
    team_leader_id: Optional[UUID] = None
) -> Team:
    """
    Create a team in an active organization.

    The team leader, when given, becomes a member of the new team.

    Raises:
        OrganizationNotFoundError: If organization doesn't exist
        InactiveOrganizationError: If organization is deactivated
        InvalidTeamMemberError: If the leader is unknown or a merchant
    """
    try:
        organization = Organization.objects.get(id=organization_id)
    except Organization.DoesNotExist:
        raise OrganizationNotFoundError(f"Organization with ID {organization_id} not found")

    if not organization.is_active:
        raise InactiveOrganizationError(f"Organization {organization.name} is not active")

    leader = _get_user(team_leader_id) if team_leader_id else None

    team = Team.objects.create(
        organization=organization,
        name=name,
        description=description,
        team_leader=leader,
        created_by=created_by,
    )

    if leader is not None:
        _assign(leader, team)

    logger.info("Team %s created in organization %s", team.id, organization.id)
    return team


@transaction.atomic
def update_team(
    *,
    team_id: UUID,
    team_leader_id: Optional[UUID] = None,
    **fields
) -> Team:
    """
    Update team details. A new leader is also made a member.

    Raises:
        TeamNotFoundError: If team doesn't exist
        InvalidTeamMemberError: If the leader is unknown or a merchant
    """
    team = _get_team(team_id, lock=True)

    update_fields = ['updated_at']
    for field in TEAM_FIELDS:
        value = fields.get(field)
        if value is not None:
            setattr(team, field, value)
            update_fields.append(field)

    if team_leader_id is not None:
        leader = _get_user(team_leader_id)
        if leader.team_id != team.id:
            _assign(leader, team)
        team.team_leader = leader
        update_fields.append('team_leader')

    team.save(update_fields=update_fields)
    return team


@transaction.atomic
def delete_team(*, team_id: UUID) -> None:
    """
    Delete a team; its members stay in the organization.

    Raises:
        TeamNotFoundError: If team doesn't exist
    """
    deleted, _ = Team.objects.filter(id=team_id).delete()
    if not deleted:
        raise TeamNotFoundError(f"Team with ID {team_id} not found")

    logger.info("Team %s deleted", team_id)


@transaction.atomic
def add_team_member(*, team_id: UUID, user_id: UUID) -> User:
    """
    Put a user into a team and its organization.

    Raises:
        TeamNotFoundError: If team doesn't exist
        InvalidTeamMemberError: If the user is unknown or a merchant
        AlreadyTeamMemberError: If the user is already in the team
    """
    team = _get_team(team_id)
    user = _get_user(user_id)

    if team.has_member(user):
        raise AlreadyTeamMemberError(f"User is already a member of {team.name}")

    _assign(user, team)
    logger.info("User %s added to team %s", user.id, team.id)
    return user


@transaction.atomic
def remove_team_member(*, team_id: UUID, user_id: UUID) -> None:
    """
    Remove a user from a team. The user keeps their organization.

    Removing the team leader also clears the leader slot.

    Raises:
        TeamNotFoundError: If team doesn't exist
        NotTeamMemberError: If the user is not in the team
    """
    team = _get_team(team_id, lock=True)

    try:
        user = User.objects.select_for_update().get(id=user_id, team=team)
    except User.DoesNotExist:
        raise NotTeamMemberError(f"User is not a member of {team.name}")

    user.team = None
    user.save(update_fields=['team'])

    if team.team_leader_id == user.id:
        team.team_leader = None
        team.save(update_fields=['team_leader', 'updated_at'])

    logger.info("User %s removed from team %s", user.id, team.id)


def get_team_members(*, team_id: UUID) -> QuerySet:
    """
    Raises:
        TeamNotFoundError: If team doesn't exist
    """
    team = _get_team(team_id)
    return team.members.filter(is_active=True).order_by('first_name', 'last_name', 'email')
