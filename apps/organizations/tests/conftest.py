import pytest
from apps.organizations.models import Organization, Team


@pytest.fixture
def inactive_organization(db, admin_user):
    """Create and return a deactivated organization."""
    return Organization.objects.create(
        name='Closed Branch',
        is_active=False,
        created_by=admin_user,
    )


@pytest.fixture
def team_with_leader(db, organization, partner_user, admin_user):
    """Team led by the partner, who is also its member."""
    team = Team.objects.create(
        organization=organization,
        name='Brno Team',
        team_leader=partner_user,
        created_by=admin_user,
    )
    partner_user.team = team
    partner_user.organization = organization
    partner_user.save()
    return team
