"""
Onboarding wizard persistence.

The wizard sends its whole state (or any subset of sections) on every
autosave. Single sections are upserted, list sections are synchronized by
their client-side key: rows not present in the payload are deleted.
"""

import logging
from typing import Optional, Tuple

from django.db import transaction

from apps.accounts.models import User
from apps.catalog.models import WarehouseItem
from apps.contracts.autosave import fingerprint
from apps.contracts.models import (
    Contract,
    ContactInfo,
    CompanyInfo,
    BusinessLocation,
    AuthorizedPerson,
    ActualOwner,
    ContractItem,
    ContractItemAddon,
    ContractCalculation,
)
from apps.merchants.services import find_or_create_merchant_for_contract

from .calculation import recalculate_contract
from .exceptions import ContractLockedError

logger = logging.getLogger(__name__)

SINGLE_SECTIONS = {
    'contact_info': ContactInfo,
    'company_info': CompanyInfo,
}

LIST_SECTIONS = {
    'business_locations': (BusinessLocation, 'location_id'),
    'authorized_persons': (AuthorizedPerson, 'person_id'),
    'actual_owners': (ActualOwner, 'owner_id'),
}

FEE_FIELDS = ('regulated_rate', 'unregulated_rate')

SKIPPED_FIELDS = ('id', 'contract', 'contract_item', 'created_at', 'updated_at')


def _writable(model, row: dict) -> dict:
    names = {
        f.name for f in model._meta.concrete_fields
        if f.name not in SKIPPED_FIELDS
    }
    return {k: v for k, v in row.items() if k in names}


def _save_single(model, contract: Contract, row: dict) -> None:
    model.objects.update_or_create(contract=contract, defaults=_writable(model, row))


def _sync_list(model, key: str, contract: Contract, rows: list) -> None:
    existing = {getattr(obj, key): obj for obj in model.objects.filter(contract=contract)}
    seen = set()

    for row in rows:
        data = _writable(model, row)
        client_key = data[key]
        seen.add(client_key)
        instance = existing.get(client_key)
        if instance is None:
            model.objects.create(contract=contract, **data)
            continue
        for field, value in data.items():
            setattr(instance, field, value)
        instance.save()

    stale = [obj.id for k, obj in existing.items() if k not in seen]
    if stale:
        model.objects.filter(id__in=stale).delete()


def _sync_items(contract: Contract, rows: list) -> None:
    existing = {item.item_id: item for item in ContractItem.objects.filter(contract=contract)}
    warehouse_ids = [row['warehouse_item_id'] for row in rows if row.get('warehouse_item_id')]
    warehouse = WarehouseItem.objects.in_bulk(warehouse_ids)
    seen = set()

    for row in rows:
        data = _writable(ContractItem, row)
        data['warehouse_item'] = warehouse.get(row.get('warehouse_item_id'))
        seen.add(data['item_id'])

        item = existing.get(data['item_id'])
        if item is None:
            item = ContractItem.objects.create(contract=contract, **data)
        else:
            for field, value in data.items():
                setattr(item, field, value)
            item.save()

        # Addons have no stable identity on the client; replace them.
        item.addons.all().delete()
        ContractItemAddon.objects.bulk_create([
            ContractItemAddon(contract_item=item, **_writable(ContractItemAddon, addon))
            for addon in row.get('addons') or []
        ])

    stale = [item.id for key, item in existing.items() if key not in seen]
    if stale:
        ContractItem.objects.filter(id__in=stale).delete()


@transaction.atomic
def save_onboarding_draft(
    *,
    contract: Contract,
    data: dict,
    user: Optional[User] = None
) -> Tuple[Contract, bool]:
    """
    Persist wizard sections in one transaction.

    Args:
        contract: Contract being edited
        data: Validated payload; any of current_step, visited_steps,
            contact_info, company_info, business_locations,
            authorized_persons, actual_owners, device_selection, fees
        user: Editing user

    Returns:
        (contract, saved); saved is False when the payload is identical to
        the last saved one

    Raises:
        ContractLockedError: If the contract is signed or lost
    """
    contract = Contract.objects.select_for_update().get(id=contract.id)
    if contract.is_locked:
        raise ContractLockedError(
            f"Contract {contract.contract_number} is {contract.status} and cannot be edited"
        )

    payload_fingerprint = fingerprint(data)
    if payload_fingerprint == contract.draft_fingerprint:
        return contract, False

    for section, model in SINGLE_SECTIONS.items():
        if section in data:
            _save_single(model, contract, data[section])

    for section, (model, key) in LIST_SECTIONS.items():
        if section in data:
            _sync_list(model, key, contract, data[section])

    if 'device_selection' in data:
        _sync_items(contract, data['device_selection'])

    if 'fees' in data:
        fees = {k: v for k, v in data['fees'].items() if k in FEE_FIELDS}
        ContractCalculation.objects.update_or_create(contract=contract, defaults=fees)

    update_fields = ['draft_fingerprint', 'updated_at']
    if 'current_step' in data:
        contract.current_step = data['current_step']
        update_fields.append('current_step')
    if 'visited_steps' in data:
        contract.visited_steps = sorted(set(data['visited_steps']))
        update_fields.append('visited_steps')
    contract.draft_fingerprint = payload_fingerprint
    contract.save(update_fields=update_fields)

    if 'company_info' in data:
        find_or_create_merchant_for_contract(contract=contract)

    if any(section in data for section in ('device_selection', 'fees', 'business_locations')):
        recalculate_contract(contract=contract)

    logger.info(
        "Saved draft of contract %s (%s)",
        contract.contract_number, ', '.join(sorted(data))
    )
    return contract, True
