"""
Merchant management service.

Merchants are matched on normalized company name plus ICO. Contracts are
linked to a merchant as soon as their company info carries both.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Sum

from apps.contracts.models import Contract, ContractStatus, BusinessLocation, ContractCalculation

from ..models import Merchant
from .exceptions import MerchantNotFoundError, DuplicateMerchantError
from .merchant_search import normalize_text

logger = logging.getLogger(__name__)

MERCHANT_FIELDS = (
    'company_name',
    'ico',
    'dic',
    'vat_number',
    'contact_person_name',
    'contact_person_email',
    'contact_person_phone',
    'address_street',
    'address_city',
    'address_zip_code',
)


def _find_exact(company_name: str, ico: str, exclude_id=None) -> Optional[Merchant]:
    queryset = Merchant.objects.filter(
        company_name_normalized=normalize_text(company_name),
        ico=(ico or '').strip(),
    )
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)
    return queryset.first()


def get_merchant(merchant_id: UUID) -> Merchant:
    try:
        return Merchant.objects.get(id=merchant_id)
    except Merchant.DoesNotExist:
        raise MerchantNotFoundError(f"Merchant with ID {merchant_id} not found")


@transaction.atomic
def create_merchant(*, company_name: str, created_by=None, **fields) -> Merchant:
    """
    Create a merchant.

    Raises:
        DuplicateMerchantError: If the same company name and ICO already exist
    """
    ico = fields.get('ico', '')
    existing = _find_exact(company_name, ico)
    if existing:
        raise DuplicateMerchantError(
            f"Merchant '{existing.company_name}' with ICO '{existing.ico}' already exists",
            existing=existing,
        )

    data = {k: v for k, v in fields.items() if k in MERCHANT_FIELDS}
    merchant = Merchant.objects.create(company_name=company_name, created_by=created_by, **data)

    logger.info("Created merchant %s (%s)", merchant.id, merchant.company_name)
    return merchant


@transaction.atomic
def update_merchant(*, merchant_id: UUID, **fields) -> Merchant:
    """
    Update merchant fields.

    Raises:
        MerchantNotFoundError: If merchant doesn't exist
        DuplicateMerchantError: If the change collides with another merchant
    """
    try:
        merchant = Merchant.objects.select_for_update().get(id=merchant_id)
    except Merchant.DoesNotExist:
        raise MerchantNotFoundError(f"Merchant with ID {merchant_id} not found")

    for field, value in fields.items():
        if field in MERCHANT_FIELDS:
            setattr(merchant, field, value)

    existing = _find_exact(merchant.company_name, merchant.ico, exclude_id=merchant.id)
    if existing:
        raise DuplicateMerchantError(
            f"Merchant '{existing.company_name}' with ICO '{existing.ico}' already exists",
            existing=existing,
        )

    merchant.save()
    return merchant


@transaction.atomic
def delete_merchant(*, merchant_id: UUID) -> None:
    """
    Delete a merchant. Its contracts stay, unlinked.

    Raises:
        MerchantNotFoundError: If merchant doesn't exist
    """
    merchant = get_merchant(merchant_id)
    unlinked = Contract.objects.filter(merchant=merchant).update(merchant=None)
    merchant.delete()
    logger.info("Deleted merchant %s, unlinked %d contract(s)", merchant_id, unlinked)


@transaction.atomic
def find_or_create_merchant_for_contract(*, contract: Contract) -> Optional[Merchant]:
    """
    Link the contract to a merchant built from its company info.

    Returns None when the company info lacks a name or ICO. A merchant
    already linked to the contract is returned as is; otherwise an
    existing merchant with the same company name and ICO is reused.
    """
    if contract.merchant_id:
        return contract.merchant

    company = getattr(contract, 'company_info', None)
    if company is None or not company.company_name.strip() or not company.ico.strip():
        return None

    merchant = _find_exact(company.company_name, company.ico)
    if merchant is None:
        contact = getattr(contract, 'contact_info', None)
        contact_name = company.contact_person_name
        contact_email = company.contact_person_email
        contact_phone = company.contact_person_phone
        if contact is not None:
            contact_name = contact_name or f"{contact.first_name} {contact.last_name}".strip()
            contact_email = contact_email or contact.email
            if not contact_phone and contact.phone:
                contact_phone = f"{contact.phone_prefix} {contact.phone}".strip()

        merchant = Merchant.objects.create(
            company_name=company.company_name.strip(),
            ico=company.ico,
            dic=company.dic,
            vat_number=company.vat_number,
            contact_person_name=contact_name,
            contact_person_email=contact_email,
            contact_person_phone=contact_phone,
            address_street=company.address_street,
            address_city=company.address_city,
            address_zip_code=company.address_zip_code,
            created_by=contract.created_by,
        )
        logger.info("Created merchant %s from contract %s", merchant.id, contract.contract_number)

    contract.merchant = merchant
    contract.save(update_fields=['merchant', 'updated_at'])
    return merchant


def get_merchant_overview(*, merchant_id: UUID) -> dict:
    """
    Summary numbers for one merchant.

    Raises:
        MerchantNotFoundError: If merchant doesn't exist
    """
    merchant = get_merchant(merchant_id)
    contracts = Contract.objects.filter(merchant=merchant)

    counts = contracts.aggregate(
        contract_count=Count('id'),
    )
    signed_count = contracts.filter(status=ContractStatus.SIGNED).count()
    location_count = BusinessLocation.objects.filter(contract__merchant=merchant).count()
    total_value = ContractCalculation.objects.filter(
        contract__merchant=merchant
    ).aggregate(total=Sum('total_customer_payments'))['total']
    latest = contracts.order_by('-created_at').first()

    return {
        'merchant': merchant,
        'contract_count': counts['contract_count'],
        'signed_count': signed_count,
        'location_count': location_count,
        'total_monthly_value': total_value or 0,
        'latest_contract_status': latest.status if latest else None,
    }
