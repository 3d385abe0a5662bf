"""Services for organizations and teams."""

from .exceptions import (
    OrganizationsServiceError,
    OrganizationNotFoundError,
    TeamNotFoundError,
    InactiveOrganizationError,
    InvalidTeamMemberError,
    AlreadyTeamMemberError,
    NotTeamMemberError,
)
from .organization_management import (
    get_organizations_with_counts,
    create_organization,
    update_organization,
    delete_organization,
)
from .team_management import (
    create_team,
    update_team,
    delete_team,
    add_team_member,
    remove_team_member,
    get_team_members,
)

__all__ = [
    # Exceptions
    'OrganizationsServiceError',
    'OrganizationNotFoundError',
    'TeamNotFoundError',
    'InactiveOrganizationError',
    'InvalidTeamMemberError',
    'AlreadyTeamMemberError',
    'NotTeamMemberError',
    # Organizations
    'get_organizations_with_counts',
    'create_organization',
    'update_organization',
    'delete_organization',
    # Teams
    'create_team',
    'update_team',
    'delete_team',
    'add_team_member',
    'remove_team_member',
    'get_team_members',
]
