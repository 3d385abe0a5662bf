"""
Dashboard Statistics
====================

Aggregated numbers for the back-office dashboard: contract pipeline,
revenue and team performance.

Classes:
    DashboardQueries: Static methods for the dashboard queries.

Example:
    Getting the headline numbers::

        from apps.dashboard.analytics import DashboardQueries

        stats = DashboardQueries.admin_stats()
        print(f"{stats['signed_contracts']} of {stats['total_contracts']} signed")

Note:
    This module is read-only. ``admin_stats`` is cached for
    ``DASHBOARD_CACHE_TTL`` seconds; the cache is cleared by the receivers
    in ``apps.dashboard.cache_signals`` whenever contracts, merchants or
    calculations change.
"""

import logging
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.cache import cache
from django.db.models import Count, Q, Sum, DecimalField
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.accounts.models import User
from apps.contracts.models import Contract, ContractCalculation, ContractStatus
from apps.merchants.models import Merchant
from apps.organizations.models import Team

logger = logging.getLogger(__name__)

ADMIN_STATS_CACHE_KEY = 'dashboard:admin_stats'
GROWTH_WINDOW_DAYS = 30

# Signed contracts older than roughly eleven months are due for renewal
EXPIRING_AGE_DAYS = 335

ZERO = Decimal('0.00')


def invalidate_dashboard_cache():
    cache.delete(ADMIN_STATS_CACHE_KEY)
    logger.debug("Dashboard cache invalidated")


def growth_percentage(current, previous):
    """
    Percentage change between two periods, rounded to 2 places.

    A previous value of 0 counts as 100% growth.
    """
    if previous == 0:
        return 100.0
    return round((current - previous) / previous * 100, 2)


def _money_sum(field):
    return Coalesce(Sum(field), ZERO, output_field=DecimalField(max_digits=14, decimal_places=2))


class DashboardQueries:
    """
    Queries behind the dashboard endpoints.

    Methods:
        admin_stats: Headline numbers (cached).
        contracts_stats: Pipeline counts per status and contract value.
        team_performance: Contracts and profit per active team.

    Note:
        All methods return plain dictionaries or lists, ready for the
        response serializers.
    """

    @staticmethod
    def admin_stats(use_cache=True):
        """
        Headline numbers for the admin dashboard.

        Args:
            use_cache (bool): Read from and write to the cache.

        Returns:
            dict: A dictionary containing:
                - total_contracts (int): All contracts.
                - signed_contracts (int): Contracts in status ``signed``.
                - pending_contracts (int): Contracts in status ``submitted``.
                - total_merchants (int): All merchants.
                - monthly_revenue (Decimal): Sum of ``total_monthly_profit``
                  over all stored calculations.
                - contract_growth (float): Percentage change of contracts
                  created in the last 30 days against the 30 days before.

        Example:
            Force fresh numbers::

                stats = DashboardQueries.admin_stats(use_cache=False)
        """
        if use_cache:
            cached = cache.get(ADMIN_STATS_CACHE_KEY)
            if cached is not None:
                return cached

        now = timezone.now()
        window_start = now - timedelta(days=GROWTH_WINDOW_DAYS)
        previous_start = window_start - timedelta(days=GROWTH_WINDOW_DAYS)

        counts = Contract.objects.aggregate(
            total=Count('id'),
            signed=Count('id', filter=Q(status=ContractStatus.SIGNED)),
            pending=Count('id', filter=Q(status=ContractStatus.SUBMITTED)),
            current=Count('id', filter=Q(created_at__gte=window_start)),
            previous=Count('id', filter=Q(created_at__gte=previous_start, created_at__lt=window_start)),
        )
        revenue = ContractCalculation.objects.aggregate(
            total=_money_sum('total_monthly_profit')
        )['total']

        stats = {
            'total_contracts': counts['total'],
            'signed_contracts': counts['signed'],
            'pending_contracts': counts['pending'],
            'total_merchants': Merchant.objects.count(),
            'monthly_revenue': revenue,
            'contract_growth': growth_percentage(counts['current'], counts['previous']),
        }

        if use_cache:
            cache.set(ADMIN_STATS_CACHE_KEY, stats, settings.DASHBOARD_CACHE_TTL)
        return stats

    @staticmethod
    def contracts_stats():
        """
        Pipeline overview.

        Returns:
            dict: A dictionary containing:
                - by_status (dict): Count for every status, zero included.
                - total_contracts (int): All contracts.
                - active_contracts (int): Signed contracts.
                - total_value (Decimal): Monthly customer payments of signed contracts.
                - conversion_rate (float): Signed share of all contracts in %.
                - average_deal_value (Decimal): Total value per signed contract.
                - expiring_contracts (int): Signed contracts created more than
                  EXPIRING_AGE_DAYS ago.
        """
        by_status = {value: 0 for value in ContractStatus.values}
        for row in Contract.objects.values('status').annotate(count=Count('id')):
            by_status[row['status']] = row['count']

        total = sum(by_status.values())
        signed = by_status[ContractStatus.SIGNED]
        total_value = ContractCalculation.objects.filter(
            contract__status=ContractStatus.SIGNED
        ).aggregate(
            total=_money_sum('total_customer_payments')
        )['total']

        return {
            'by_status': by_status,
            'total_contracts': total,
            'active_contracts': signed,
            'total_value': total_value,
            'conversion_rate': round(signed / total * 100, 2) if total else 0.0,
            'average_deal_value': (total_value / signed).quantize(ZERO) if signed else ZERO,
            'expiring_contracts': Contract.objects.filter(
                status=ContractStatus.SIGNED,
                created_at__lt=timezone.now() - timedelta(days=EXPIRING_AGE_DAYS),
            ).count(),
        }

    @staticmethod
    def team_performance():
        """
        Per active team: members, contracts created by members, signed
        contracts, conversion rate and total monthly profit.

        Returns:
            list[dict]: One entry per team, best converting first.
        """
        results = []
        teams = Team.objects.filter(is_active=True).select_related('organization')

        for team in teams:
            member_ids = list(
                User.objects.filter(team=team, is_active=True).values_list('id', flat=True)
            )
            contracts = Contract.objects.filter(created_by_id__in=member_ids)
            counts = contracts.aggregate(
                total=Count('id'),
                signed=Count('id', filter=Q(status=ContractStatus.SIGNED)),
            )
            profit = ContractCalculation.objects.filter(
                contract__created_by_id__in=member_ids
            ).aggregate(total=_money_sum('total_monthly_profit'))['total']

            total = counts['total']
            results.append({
                'team_id': team.id,
                'team_name': team.name,
                'organization_name': team.organization.name,
                'member_count': len(member_ids),
                'contracts_created': total,
                'contracts_signed': counts['signed'],
                'conversion_rate': round(counts['signed'] / total * 100, 2) if total else 0.0,
                'total_monthly_profit': profit,
            })

        results.sort(key=lambda r: (r['conversion_rate'], r['contracts_signed']), reverse=True)
        return results
