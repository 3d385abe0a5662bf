from decimal import Decimal

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User, UserRole
from apps.contracts.models import (
    Contract,
    ContactInfo,
    CompanyInfo,
    BusinessLocation,
    ContractItem,
    ContractItemAddon,
)
from apps.merchants.models import Merchant
from apps.organizations.models import Organization, Team


def make_client(user=None):
    """Return an API client, authenticated with a JWT when a user is given."""
    client = APIClient()
    if user is not None:
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    """Create and return a back-office admin."""
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        first_name='Anna',
        last_name='Admin',
        role=UserRole.ADMIN,
        email_verified=True,
    )


@pytest.fixture
def partner_user(db):
    """Create and return a sales partner."""
    return User.objects.create_user(
        email='partner@example.com',
        password='TestPass123!',
        first_name='Petr',
        last_name='Partner',
        role=UserRole.PARTNER,
        email_verified=True,
    )


@pytest.fixture
def other_partner(db):
    """Create and return a second sales partner."""
    return User.objects.create_user(
        email='partner2@example.com',
        password='TestPass123!',
        first_name='Olga',
        last_name='Other',
        role=UserRole.PARTNER,
        email_verified=True,
    )


@pytest.fixture
def merchant_user(db):
    """Create and return a merchant portal user."""
    return User.objects.create_user(
        email='merchant@example.com',
        password='TestPass123!',
        first_name='Martin',
        last_name='Merchant',
        role=UserRole.MERCHANT,
        email_verified=True,
    )


@pytest.fixture
def admin_client(admin_user):
    """Return API client authenticated as admin."""
    return make_client(admin_user)


@pytest.fixture
def partner_client(partner_user):
    """Return API client authenticated as partner."""
    return make_client(partner_user)


@pytest.fixture
def merchant_client(merchant_user):
    """Return API client authenticated as merchant."""
    return make_client(merchant_user)


@pytest.fixture
def organization(db, admin_user):
    """Create and return an active organization."""
    return Organization.objects.create(
        name='Acme Sales',
        description='Main sales organization',
        color='#3B82F6',
        created_by=admin_user,
    )


@pytest.fixture
def team(db, organization, admin_user):
    """Create and return a team inside the organization."""
    return Team.objects.create(
        organization=organization,
        name='Prague Team',
        created_by=admin_user,
    )


@pytest.fixture
def client_for(db):
    """Return a factory building JWT-authenticated clients for any user."""
    return make_client


@pytest.fixture
def merchant(db):
    """Create and return a merchant without a portal account."""
    return Merchant.objects.create(
        company_name='Kavárna Na Rohu s.r.o.',
        ico='12345678',
        dic='CZ12345678',
        contact_person_name='Jana Nováková',
        contact_person_email='jana@narohu.cz',
        address_city='Praha',
    )


@pytest.fixture
def contract(db, partner_user):
    """Create and return an empty draft contract owned by the partner."""
    return Contract.objects.create(contract_number='100000', created_by=partner_user)


@pytest.fixture
def complete_contract(contract):
    """Draft contract with every section required for submission."""
    ContactInfo.objects.create(
        contract=contract,
        first_name='Jana',
        last_name='Nováková',
        email='jana@narohu.cz',
        phone='777123456',
    )
    CompanyInfo.objects.create(
        contract=contract,
        company_name='Kavárna Na Rohu s.r.o.',
        ico='12345678',
        address_street='Dlouhá 1',
        address_city='Praha',
        address_zip_code='11000',
    )
    BusinessLocation.objects.create(
        contract=contract,
        location_id='loc-1',
        name='Kavárna Dlouhá',
        estimated_turnover=Decimal('100000.00'),
    )
    item = ContractItem.objects.create(
        contract=contract,
        item_id='item-1',
        name='PAX A920',
        count=2,
        monthly_fee=Decimal('29.00'),
        company_cost=Decimal('12.50'),
    )
    ContractItemAddon.objects.create(
        contract_item=item,
        addon_id='addon-1',
        addon_name='Terminal Stand',
        monthly_fee=Decimal('2.00'),
        company_cost=Decimal('0.50'),
        is_per_device=True,
    )
    return contract
