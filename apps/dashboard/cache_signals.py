"""
Cache invalidation signals.

Dashboard aggregates are cleared whenever the data behind them changes.
"""

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from apps.contracts.models import Contract, ContractCalculation
from apps.merchants.models import Merchant

from .analytics import invalidate_dashboard_cache


@receiver([post_save, post_delete], sender=Contract, dispatch_uid='dashboard_contract_changed')
@receiver([post_save, post_delete], sender=Merchant, dispatch_uid='dashboard_merchant_changed')
@receiver([post_save, post_delete], sender=ContractCalculation, dispatch_uid='dashboard_calculation_changed')
def invalidate_on_change(sender, **kwargs):
    invalidate_dashboard_cache()
