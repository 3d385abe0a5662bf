from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.cache import cache
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.contracts.models import Contract, ContractCalculation, ContractStatus
from apps.dashboard.analytics import (
    ADMIN_STATS_CACHE_KEY,
    DashboardQueries,
    growth_percentage,
)
from apps.merchants.models import Merchant


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


def make_contract(number, user, status=ContractStatus.DRAFT, profit=None, payments=None, age_days=None):
    contract = Contract.objects.create(contract_number=number, created_by=user, status=status)
    if profit is not None or payments is not None:
        ContractCalculation.objects.create(
            contract=contract,
            total_monthly_profit=profit or Decimal('0.00'),
            total_customer_payments=payments or Decimal('0.00'),
        )
    if age_days is not None:
        Contract.objects.filter(id=contract.id).update(
            created_at=timezone.now() - timedelta(days=age_days)
        )
    return contract


class TestGrowthPercentage:

    @pytest.mark.parametrize('current,previous,expected', [
        (10, 5, 100.0),
        (5, 10, -50.0),
        (1, 3, -66.67),
        (0, 0, 100.0),
        (7, 0, 100.0),
    ])
    def test_growth(self, current, previous, expected):
        assert growth_percentage(current, previous) == expected


@pytest.mark.django_db
class TestAdminStats:

    def test_numbers(self, partner_user, merchant):
        make_contract('1', partner_user, ContractStatus.SIGNED, profit=Decimal('100.50'))
        make_contract('2', partner_user, ContractStatus.SUBMITTED, profit=Decimal('20.00'))
        make_contract('3', partner_user, age_days=45)

        stats = DashboardQueries.admin_stats(use_cache=False)

        assert stats['total_contracts'] == 3
        assert stats['signed_contracts'] == 1
        assert stats['pending_contracts'] == 1
        assert stats['total_merchants'] == 1
        assert stats['monthly_revenue'] == Decimal('120.50')
        assert stats['contract_growth'] == 100.0

    def test_empty(self, db):
        stats = DashboardQueries.admin_stats(use_cache=False)

        assert stats['total_contracts'] == 0
        assert stats['monthly_revenue'] == Decimal('0.00')

    def test_result_is_cached(self, partner_user):
        make_contract('1', partner_user)
        DashboardQueries.admin_stats()

        Contract.objects.filter(contract_number='1').update(status=ContractStatus.SIGNED)

        assert cache.get(ADMIN_STATS_CACHE_KEY) is not None
        assert DashboardQueries.admin_stats()['signed_contracts'] == 0
        assert DashboardQueries.admin_stats(use_cache=False)['signed_contracts'] == 1

    @pytest.mark.parametrize('change', ['contract', 'merchant', 'calculation'])
    def test_saves_invalidate_cache(self, partner_user, change):
        contract = make_contract('1', partner_user)
        DashboardQueries.admin_stats()
        assert cache.get(ADMIN_STATS_CACHE_KEY) is not None

        if change == 'contract':
            contract.notes = 'changed'
            contract.save()
        elif change == 'merchant':
            Merchant.objects.create(company_name='Pekárna', ico='1')
        else:
            ContractCalculation.objects.create(contract=contract)

        assert cache.get(ADMIN_STATS_CACHE_KEY) is None

    def test_delete_invalidates_cache(self, partner_user):
        contract = make_contract('1', partner_user)
        DashboardQueries.admin_stats()

        contract.delete()

        assert cache.get(ADMIN_STATS_CACHE_KEY) is None
        assert DashboardQueries.admin_stats()['total_contracts'] == 0


@pytest.mark.django_db
class TestContractsStats:

    def test_pipeline(self, partner_user):
        make_contract('1', partner_user, ContractStatus.SIGNED, payments=Decimal('100.00'))
        make_contract('2', partner_user, ContractStatus.SIGNED, payments=Decimal('50.00'))
        make_contract('3', partner_user, ContractStatus.LOST, payments=Decimal('400.00'))
        make_contract('4', partner_user, payments=Decimal('900.00'))

        stats = DashboardQueries.contracts_stats()

        assert stats['by_status']['signed'] == 2
        assert stats['by_status']['lost'] == 1
        assert stats['by_status']['approved'] == 0
        assert len(stats['by_status']) == len(ContractStatus.values)
        assert stats['total_contracts'] == 4
        assert stats['active_contracts'] == 2
        assert stats['total_value'] == Decimal('150.00')
        assert stats['conversion_rate'] == 50.0
        assert stats['average_deal_value'] == Decimal('75.00')
        assert stats['expiring_contracts'] == 0

    def test_expiring_contracts(self, partner_user):
        make_contract('1', partner_user, ContractStatus.SIGNED, age_days=400)
        make_contract('2', partner_user, ContractStatus.SIGNED, age_days=30)
        make_contract('3', partner_user, ContractStatus.LOST, age_days=400)

        assert DashboardQueries.contracts_stats()['expiring_contracts'] == 1

    def test_no_contracts(self, db):
        stats = DashboardQueries.contracts_stats()

        assert stats['conversion_rate'] == 0.0
        assert stats['average_deal_value'] == Decimal('0.00')
        assert stats['expiring_contracts'] == 0


@pytest.mark.django_db
class TestTeamPerformance:

    def test_counts_member_contracts(self, team, partner_user, other_partner):
        partner_user.team = team
        partner_user.save()
        make_contract('1', partner_user, ContractStatus.SIGNED, profit=Decimal('300.00'))
        make_contract('2', partner_user)
        make_contract('3', other_partner, ContractStatus.SIGNED, profit=Decimal('999.00'))

        [row] = DashboardQueries.team_performance()

        assert row['team_id'] == team.id
        assert row['team_name'] == 'Prague Team'
        assert row['organization_name'] == 'Acme Sales'
        assert row['member_count'] == 1
        assert row['contracts_created'] == 2
        assert row['contracts_signed'] == 1
        assert row['conversion_rate'] == 50.0
        assert row['total_monthly_profit'] == Decimal('300.00')

    def test_inactive_team_is_skipped(self, team):
        team.is_active = False
        team.save()

        assert DashboardQueries.team_performance() == []


@pytest.mark.django_db
class TestDashboardApi:

    @pytest.mark.parametrize('name', ['admin-stats', 'contracts-stats', 'team-performance'])
    def test_staff_only(self, merchant_client, partner_client, name):
        url = reverse(f'dashboard:{name}')

        assert merchant_client.get(url).status_code == status.HTTP_403_FORBIDDEN
        assert partner_client.get(url).status_code == status.HTTP_200_OK

    def test_admin_stats_payload(self, admin_client, partner_user):
        make_contract('1', partner_user, ContractStatus.SIGNED, profit=Decimal('10.00'))

        response = admin_client.get(reverse('dashboard:admin-stats'))

        assert response.data['signed_contracts'] == 1
        assert response.data['monthly_revenue'] == '10.00'

    def test_team_payload(self, admin_client, team):
        response = admin_client.get(reverse('dashboard:team-performance'))

        assert response.data[0]['team_name'] == 'Prague Team'
        assert response.data[0]['contracts_created'] == 0
