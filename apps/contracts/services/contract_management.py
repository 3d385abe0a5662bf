"""
Contract lifecycle service: creation, visibility, submission and copying.

Contract numbers are sequential from CONTRACT_NUMBER_START. Two requests may
compute the same next number, so creation retries inside a savepoint when
the unique constraint rejects it.
"""

import logging
from typing import Iterable, Optional, Sequence
from uuid import UUID

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.db.models import Max, Q, QuerySet
from django.db.models.functions import Cast

from apps.accounts.models import User
from apps.contracts.models import (
    Contract,
    ContractSource,
    ContractStatus,
    ContactInfo,
    CompanyInfo,
    BusinessLocation,
    AuthorizedPerson,
    ActualOwner,
    ContractItem,
    ContractCalculation,
)
from apps.contracts.signals import contract_created
from apps.merchants.services import find_or_create_merchant_for_contract

from .calculation import recalculate_contract
from .workflow import change_status
from .exceptions import (
    ContractNotFoundError,
    ContractLockedError,
    ContractNumberError,
    IncompleteContractError,
    InvalidSegmentError,
)

logger = logging.getLogger(__name__)

NUMBER_ATTEMPTS = 5

SEGMENTS = (
    'contact_info',
    'company_info',
    'business_locations',
    'device_selection',
    'fees',
    'authorized_persons',
    'actual_owners',
)

COPY_EXCLUDED_FIELDS = ('id', 'contract', 'contract_item', 'created_at', 'updated_at')


def next_contract_number() -> str:
    """Highest existing number plus one, never below CONTRACT_NUMBER_START."""
    highest = (
        Contract.objects
        .annotate(number_value=Cast('contract_number', models.BigIntegerField()))
        .aggregate(highest=Max('number_value'))['highest']
    )
    start = settings.CONTRACT_NUMBER_START
    if highest is None or highest < start:
        return str(start)
    return str(highest + 1)


def create_contract(
    *,
    created_by: Optional[User],
    source: str = ContractSource.OTHER,
    merchant=None,
    notes: str = '',
    assigned_to: Optional[User] = None
) -> Contract:
    """
    Create a draft contract with the next free contract number.

    Raises:
        ContractNumberError: If no number could be allocated
    """
    for attempt in range(NUMBER_ATTEMPTS):
        try:
            with transaction.atomic():
                contract = Contract.objects.create(
                    contract_number=next_contract_number(),
                    created_by=created_by,
                    assigned_to=assigned_to,
                    source=source,
                    merchant=merchant,
                    notes=notes,
                )
        except IntegrityError:
            logger.warning("Contract number collision, retrying (attempt %d)", attempt + 1)
            continue

        logger.info("Created contract %s (%s)", contract.contract_number, contract.id)
        contract_created.send(sender=Contract, contract=contract, user=created_by)
        return contract

    raise ContractNumberError("Could not allocate a contract number")


def get_visible_contracts(user: User) -> QuerySet:
    """
    Contracts the user may see.

    Admins see everything, partners what they created or are assigned,
    merchants the contracts of their own company.
    """
    queryset = Contract.objects.select_related(
        'merchant', 'created_by', 'assigned_to', 'contact_info', 'company_info', 'calculation'
    )
    if user.is_admin:
        return queryset
    if user.is_partner:
        return queryset.filter(Q(created_by=user) | Q(assigned_to=user))
    if user.is_merchant:
        return queryset.filter(merchant__user=user)
    return queryset.none()


def get_contract_for_user(*, contract_id: UUID, user: User) -> Contract:
    """
    Raises:
        ContractNotFoundError: If the contract doesn't exist or isn't visible
    """
    try:
        return get_visible_contracts(user).get(id=contract_id)
    except Contract.DoesNotExist:
        raise ContractNotFoundError(f"Contract with ID {contract_id} not found")


def filter_contracts(
    queryset: QuerySet,
    *,
    statuses: Optional[Sequence[str]] = None,
    source: Optional[str] = None,
    merchant: Optional[UUID] = None,
    assigned_to: Optional[UUID] = None,
    created_from=None,
    created_to=None,
    search: Optional[str] = None
) -> QuerySet:
    if statuses:
        queryset = queryset.filter(status__in=statuses)
    if source:
        queryset = queryset.filter(source=source)
    if merchant:
        queryset = queryset.filter(merchant_id=merchant)
    if assigned_to:
        queryset = queryset.filter(assigned_to_id=assigned_to)
    if created_from:
        queryset = queryset.filter(created_at__date__gte=created_from)
    if created_to:
        queryset = queryset.filter(created_at__date__lte=created_to)
    if search:
        queryset = queryset.filter(
            Q(contract_number__icontains=search) |
            Q(company_info__company_name__icontains=search) |
            Q(company_info__ico__icontains=search) |
            Q(contact_info__email__icontains=search) |
            Q(merchant__company_name__icontains=search)
        )
    return queryset


def missing_sections(contract: Contract) -> list:
    missing = []
    contact = getattr(contract, 'contact_info', None)
    if contact is None or not contact.email:
        missing.append('contact email')
    company = getattr(contract, 'company_info', None)
    if company is None or not company.company_name or not company.ico:
        missing.append('company name and ICO')
    if not contract.business_locations.exists():
        missing.append('business location')
    if not contract.items.exists():
        missing.append('contract item')
    return missing


@transaction.atomic
def submit_contract(*, contract: Contract, user: Optional[User] = None) -> Contract:
    """
    Submit a completed wizard for approval.

    Raises:
        ContractLockedError: If the contract is signed or lost
        IncompleteContractError: If required sections are missing
    """
    if contract.is_locked:
        raise ContractLockedError(
            f"Contract {contract.contract_number} is {contract.status} and cannot be submitted"
        )

    missing = missing_sections(contract)
    if missing:
        raise IncompleteContractError(missing)

    find_or_create_merchant_for_contract(contract=contract)
    return change_status(contract=contract, new_status=ContractStatus.SUBMITTED, user=user)


def _clone(instance: models.Model, **overrides) -> models.Model:
    data = {
        f.name: getattr(instance, f.name)
        for f in instance._meta.concrete_fields
        if f.name not in COPY_EXCLUDED_FIELDS
    }
    data.update(overrides)
    return type(instance).objects.create(**data)


def _copy_one(model, source: Contract, target: Contract) -> None:
    instance = model.objects.filter(contract=source).first()
    if instance is not None:
        _clone(instance, contract=target)


def _copy_many(model, source: Contract, target: Contract) -> None:
    for instance in model.objects.filter(contract=source):
        _clone(instance, contract=target)


def _copy_items(source: Contract, target: Contract) -> None:
    for item in ContractItem.objects.filter(contract=source).prefetch_related('addons'):
        new_item = _clone(item, contract=target)
        for addon in item.addons.all():
            _clone(addon, contract_item=new_item)


def _copy_fees(source: Contract, target: Contract) -> None:
    calculation = ContractCalculation.objects.filter(contract=source).first()
    if calculation is not None:
        ContractCalculation.objects.update_or_create(
            contract=target,
            defaults={
                'regulated_rate': calculation.regulated_rate,
                'unregulated_rate': calculation.unregulated_rate,
            },
        )


@transaction.atomic
def copy_contract(*, source: Contract, segments: Iterable[str], user: Optional[User]) -> Contract:
    """
    Start a new draft for the same merchant from parts of an existing contract.

    Raises:
        InvalidSegmentError: If a segment name is unknown
    """
    segments = list(dict.fromkeys(segments))
    unknown = [s for s in segments if s not in SEGMENTS]
    if unknown:
        raise InvalidSegmentError(f"Unknown segment(s): {', '.join(unknown)}")

    target = create_contract(
        created_by=user,
        source=source.source,
        merchant=source.merchant,
        assigned_to=source.assigned_to,
    )

    if 'contact_info' in segments:
        _copy_one(ContactInfo, source, target)
    if 'company_info' in segments:
        _copy_one(CompanyInfo, source, target)
    if 'business_locations' in segments:
        _copy_many(BusinessLocation, source, target)
    if 'authorized_persons' in segments:
        _copy_many(AuthorizedPerson, source, target)
    if 'actual_owners' in segments:
        _copy_many(ActualOwner, source, target)
    if 'device_selection' in segments:
        _copy_items(source, target)
    if 'fees' in segments:
        _copy_fees(source, target)

    if 'device_selection' in segments or 'fees' in segments:
        recalculate_contract(contract=target)

    logger.info(
        "Copied contract %s to %s (%s)",
        source.contract_number, target.contract_number, ', '.join(segments)
    )
    return target


def get_contract(contract_id: UUID) -> Contract:
    try:
        return Contract.objects.get(id=contract_id)
    except Contract.DoesNotExist:
        raise ContractNotFoundError(f"Contract with ID {contract_id} not found")
