"""
Organization management service.

Deleting an organization cascades to its teams; members keep their
accounts with organization and team cleared.
"""

import logging
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Q

from apps.accounts.models import User
from apps.organizations.models import Organization

from .exceptions import OrganizationNotFoundError

logger = logging.getLogger(__name__)

ORGANIZATION_FIELDS = ('name', 'description', 'color', 'logo_url', 'is_active')


def get_organizations_with_counts():
    """Organizations annotated with team_count and member_count."""
    return Organization.objects.annotate(
        team_count=Count('teams', distinct=True),
        member_count=Count('members', filter=Q(members__is_active=True), distinct=True),
    )


def create_organization(
    *,
    name: str,
    created_by: User,
    description: str = '',
    color: str = '#3B82F6',
    logo_url: str = '',
    is_active: bool = True
) -> Organization:
    organization = Organization.objects.create(
        name=name,
        description=description,
        color=color,
        logo_url=logo_url,
        is_active=is_active,
        created_by=created_by,
    )
    logger.info("Organization %s created by %s", organization.id, created_by.id)
    return organization


@transaction.atomic
def update_organization(*, organization_id: UUID, **fields) -> Organization:
    """
    Update organization details.

    Raises:
        OrganizationNotFoundError: If organization doesn't exist
    """
    try:
        organization = Organization.objects.select_for_update().get(id=organization_id)
    except Organization.DoesNotExist:
        raise OrganizationNotFoundError(f"Organization with ID {organization_id} not found")

    update_fields = ['updated_at']
    for field in ORGANIZATION_FIELDS:
        value = fields.get(field)
        if value is not None:
            setattr(organization, field, value)
            update_fields.append(field)

    organization.save(update_fields=update_fields)
    return organization


@transaction.atomic
def delete_organization(*, organization_id: UUID) -> None:
    """
    Delete organization and its teams.

    Raises:
        OrganizationNotFoundError: If organization doesn't exist
    """
    deleted, _ = Organization.objects.filter(id=organization_id).delete()
    if not deleted:
        raise OrganizationNotFoundError(f"Organization with ID {organization_id} not found")

    logger.info("Organization %s deleted", organization_id)
