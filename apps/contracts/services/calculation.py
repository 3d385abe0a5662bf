"""Contract fee calculation backed by the pure calculator module."""

import logging
from decimal import Decimal
from typing import List

from django.db import transaction
from django.db.models import Sum

from apps.contracts import calculator
from apps.contracts.models import BusinessLocation, Contract, ContractCalculation, ContractItem
from apps.contracts.signals import contract_calculated

logger = logging.getLogger(__name__)

RESULT_FIELDS = (
    'monthly_turnover',
    'total_customer_payments',
    'total_company_costs',
    'effective_regulated',
    'effective_unregulated',
    'regulated_fee',
    'unregulated_fee',
    'transaction_margin',
    'service_margin',
    'total_monthly_profit',
)


def contract_line_items(contract: Contract) -> List[calculator.LineItem]:
    items = []
    for item in ContractItem.objects.filter(contract=contract).prefetch_related('addons'):
        items.append(calculator.LineItem(
            count=item.count,
            monthly_fee=item.monthly_fee,
            company_cost=item.company_cost,
            name=item.name,
            addons=[
                calculator.Addon(
                    monthly_fee=addon.monthly_fee,
                    company_cost=addon.company_cost,
                    is_per_device=addon.is_per_device,
                    custom_quantity=addon.custom_quantity,
                    name=addon.addon_name,
                )
                for addon in item.addons.all()
            ],
        ))
    return items


def contract_monthly_turnover(contract: Contract) -> Decimal:
    """Sum of the estimated turnover of all business locations."""
    total = BusinessLocation.objects.filter(contract=contract).aggregate(
        total=Sum('estimated_turnover')
    )['total']
    return total or Decimal('0')


@transaction.atomic
def recalculate_contract(*, contract: Contract) -> ContractCalculation:
    """Run the calculator on the stored items and rates and persist the result."""
    calculation, _ = ContractCalculation.objects.select_for_update().get_or_create(contract=contract)

    result = calculator.calculate(
        contract_line_items(contract),
        monthly_turnover=contract_monthly_turnover(contract),
        regulated_rate=calculation.regulated_rate,
        unregulated_rate=calculation.unregulated_rate,
    )

    for field in RESULT_FIELDS:
        setattr(calculation, field, result[field])
    calculation.calculation_data = {'lines': result['lines']}
    calculation.save()

    logger.info(
        "Recalculated contract %s: profit %s",
        contract.contract_number, calculation.total_monthly_profit
    )
    contract_calculated.send(sender=Contract, contract=contract)
    return calculation


def preview_calculation(
    *,
    items: list,
    monthly_turnover=Decimal('0'),
    regulated_rate=Decimal('0'),
    unregulated_rate=Decimal('0')
) -> dict:
    """Calculate from request data without touching the database."""
    return calculator.calculate(
        calculator.line_items_from_data(items),
        monthly_turnover=monthly_turnover,
        regulated_rate=regulated_rate,
        unregulated_rate=unregulated_rate,
    )
