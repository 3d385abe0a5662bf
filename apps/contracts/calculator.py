"""
Monthly fee calculator for contract line items.

Pure functions over Decimal values. The only configuration read is the
card-rate deduction (``CALCULATOR_RATE_DEDUCTION``), and callers may pass
their own value instead.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

from django.conf import settings

ZERO = Decimal('0')
CENTS = Decimal('0.01')


def to_decimal(value) -> Decimal:
    if value is None or value == '':
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass
class Addon:
    monthly_fee: Decimal = ZERO
    company_cost: Decimal = ZERO
    is_per_device: bool = False
    custom_quantity: Optional[int] = None
    name: str = ''


@dataclass
class LineItem:
    count: int = 1
    monthly_fee: Decimal = ZERO
    company_cost: Decimal = ZERO
    addons: List[Addon] = field(default_factory=list)
    name: str = ''


def addon_quantity(item: LineItem, addon: Addon) -> int:
    """Per-device addons follow the line count, others use their own quantity."""
    if addon.is_per_device:
        return item.count
    return addon.custom_quantity or 1


def line_customer_total(item: LineItem) -> Decimal:
    total = item.count * to_decimal(item.monthly_fee)
    for addon in item.addons:
        total += addon_quantity(item, addon) * to_decimal(addon.monthly_fee)
    return total


def line_company_cost(item: LineItem) -> Decimal:
    total = item.count * to_decimal(item.company_cost)
    for addon in item.addons:
        total += addon_quantity(item, addon) * to_decimal(addon.company_cost)
    return total


def effective_rate(rate, deduction) -> Decimal:
    return max(ZERO, to_decimal(rate) - to_decimal(deduction))


def calculate(
    items: Sequence[LineItem],
    monthly_turnover=ZERO,
    regulated_rate=ZERO,
    unregulated_rate=ZERO,
    deduction=None,
) -> dict:
    """
    Calculate customer payments, company costs and margins.

    Rates are percentages. The deduction is subtracted from each card rate
    (never below zero) before the transaction fees are computed from the
    monthly turnover.

    Returns:
        Dict of quantized Decimals plus a ``lines`` breakdown.
    """
    if deduction is None:
        deduction = settings.CALCULATOR_RATE_DEDUCTION

    turnover = to_decimal(monthly_turnover)
    lines = []
    payments = ZERO
    costs = ZERO

    for item in items:
        customer_total = line_customer_total(item)
        company_total = line_company_cost(item)
        payments += customer_total
        costs += company_total
        lines.append({
            'name': item.name,
            'count': item.count,
            'customer_total': quantize(customer_total),
            'company_cost': quantize(company_total),
            'margin': quantize(customer_total - company_total),
        })

    effective_regulated = effective_rate(regulated_rate, deduction)
    effective_unregulated = effective_rate(unregulated_rate, deduction)
    regulated_fee = turnover * effective_regulated / 100
    unregulated_fee = turnover * effective_unregulated / 100
    transaction_margin = regulated_fee + unregulated_fee
    service_margin = payments - costs

    return {
        'monthly_turnover': quantize(turnover),
        'total_customer_payments': quantize(payments),
        'total_company_costs': quantize(costs),
        'effective_regulated': effective_regulated,
        'effective_unregulated': effective_unregulated,
        'regulated_fee': quantize(regulated_fee),
        'unregulated_fee': quantize(unregulated_fee),
        'transaction_margin': quantize(transaction_margin),
        'service_margin': quantize(service_margin),
        'total_monthly_profit': quantize(transaction_margin + service_margin),
        'lines': lines,
    }


def line_items_from_data(rows) -> List[LineItem]:
    """Build line items from plain dicts (request payloads, stored items)."""
    items = []
    for row in rows or []:
        addons = [
            Addon(
                monthly_fee=to_decimal(a.get('monthly_fee')),
                company_cost=to_decimal(a.get('company_cost')),
                is_per_device=bool(a.get('is_per_device')),
                custom_quantity=a.get('custom_quantity'),
                name=a.get('addon_name', ''),
            )
            for a in row.get('addons') or []
        ]
        items.append(LineItem(
            count=int(row.get('count') or 0),
            monthly_fee=to_decimal(row.get('monthly_fee')),
            company_cost=to_decimal(row.get('company_cost')),
            addons=addons,
            name=row.get('name', ''),
        ))
    return items
