"""
Contract status workflow and signatures.

The board allows moving a contract to any status. Entering a status stamps
its timestamp, and leaving `lost` clears the loss details.
"""

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.contracts.models import Contract, ContractStatus
from apps.contracts.signals import contract_status_changed

from .exceptions import (
    InvalidStatusError,
    InvalidStatusTransitionError,
    MissingLostReasonError,
)

logger = logging.getLogger(__name__)

STATUS_TIMESTAMPS = {
    ContractStatus.SUBMITTED: 'submitted_at',
    ContractStatus.APPROVED: 'admin_approved_at',
    ContractStatus.CONTRACT_GENERATED: 'contract_generated_at',
    ContractStatus.EMAIL_VIEWED: 'email_viewed_at',
    ContractStatus.SIGNED: 'signed_at',
}

UNSIGNABLE_STATUSES = (
    ContractStatus.DRAFT,
    ContractStatus.REQUEST_DRAFT,
    ContractStatus.LOST,
    ContractStatus.REJECTED,
)


def _apply_status(contract: Contract, new_status: str, user: Optional[User], update_fields: list) -> None:
    old_status = contract.status
    now = timezone.now()

    contract.status = new_status
    update_fields.append('status')

    timestamp_field = STATUS_TIMESTAMPS.get(new_status)
    if timestamp_field:
        setattr(contract, timestamp_field, now)
        update_fields.append(timestamp_field)
    if new_status == ContractStatus.APPROVED:
        contract.admin_approved_by = user
        update_fields.append('admin_approved_by')

    if old_status == ContractStatus.LOST:
        contract.lost_reason = ''
        contract.lost_notes = ''
        update_fields.extend(['lost_reason', 'lost_notes'])

    update_fields.append('updated_at')
    contract.save(update_fields=list(dict.fromkeys(update_fields)))

    logger.info(
        "Contract %s moved from %s to %s",
        contract.contract_number, old_status, new_status
    )
    contract_status_changed.send(
        sender=Contract,
        contract=contract,
        old_status=old_status,
        new_status=new_status,
        user=user,
    )


def _lock(contract: Contract) -> Contract:
    return Contract.objects.select_for_update().get(id=contract.id)


@transaction.atomic
def change_status(
    *,
    contract: Contract,
    new_status: str,
    user: Optional[User] = None,
    lost_reason: str = '',
    lost_notes: str = ''
) -> Contract:
    """
    Move a contract to another status.

    Moving to the current status is a no-op.

    Raises:
        InvalidStatusError: If the status is unknown
        MissingLostReasonError: If moving to `lost` without a reason
    """
    if new_status not in ContractStatus.values:
        raise InvalidStatusError(f"Unknown status: {new_status}")

    contract = _lock(contract)
    if contract.status == new_status:
        return contract

    update_fields = []
    if new_status == ContractStatus.LOST:
        if not lost_reason:
            raise MissingLostReasonError("A lost contract needs a reason")
        contract.lost_reason = lost_reason
        contract.lost_notes = lost_notes
        update_fields.extend(['lost_reason', 'lost_notes'])

    _apply_status(contract, new_status, user, update_fields)
    return contract


@transaction.atomic
def sign_contract(
    *,
    contract: Contract,
    signer_name: str,
    ip_address: Optional[str] = None,
    user: Optional[User] = None
) -> Contract:
    """
    Record the client's signature.

    Raises:
        InvalidStatusTransitionError: If the contract is already signed or
            in a status that cannot be signed
    """
    contract = _lock(contract)
    if contract.status == ContractStatus.SIGNED:
        raise InvalidStatusTransitionError(f"Contract {contract.contract_number} is already signed")
    if contract.status in UNSIGNABLE_STATUSES:
        raise InvalidStatusTransitionError(
            f"Contract {contract.contract_number} cannot be signed in status {contract.status}"
        )

    contract.signed_by_name = signer_name
    contract.signature_ip = ip_address or None
    _apply_status(contract, ContractStatus.SIGNED, user, ['signed_by_name', 'signature_ip'])
    return contract


def get_client_ip(request) -> Optional[str]:
    """First address of X-Forwarded-For, falling back to REMOTE_ADDR."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return request.META.get('REMOTE_ADDR') or None
