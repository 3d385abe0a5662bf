"""Bulk contract actions and CSV export."""

import csv
import io
import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User, UserRole
from apps.contracts.models import Contract

from .exceptions import InvalidAssigneeError
from .workflow import change_status

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ('Contract Number', 'Status', 'Created', 'Client', 'Email', 'Company', 'ICO')


@transaction.atomic
def bulk_update_status(
    *,
    contracts: QuerySet,
    status: str,
    user: Optional[User] = None,
    lost_reason: str = '',
    lost_notes: str = ''
) -> int:
    """
    Move every contract to `status`, one by one so each change is signalled.

    Returns:
        Number of contracts whose status changed
    """
    changed = 0
    for contract in contracts:
        old_status = contract.status
        updated = change_status(
            contract=contract,
            new_status=status,
            user=user,
            lost_reason=lost_reason,
            lost_notes=lost_notes,
        )
        if updated.status != old_status:
            changed += 1

    logger.info("Bulk status change to %s: %d contract(s)", status, changed)
    return changed


@transaction.atomic
def bulk_assign(*, contracts: QuerySet, assignee_id: Optional[UUID]) -> int:
    """
    Assign contracts to a staff user, or unassign with None.

    Raises:
        InvalidAssigneeError: If the user is unknown, inactive or a merchant
    """
    assignee = None
    if assignee_id is not None:
        try:
            assignee = User.objects.get(
                id=assignee_id,
                is_active=True,
                role__in=[UserRole.ADMIN, UserRole.PARTNER],
            )
        except User.DoesNotExist:
            raise InvalidAssigneeError(f"No active staff user with ID {assignee_id}")

    count = Contract.objects.filter(id__in=contracts.values('id')).update(assigned_to=assignee)
    logger.info("Assigned %d contract(s) to %s", count, assignee_id)
    return count


@transaction.atomic
def bulk_delete(*, contracts: QuerySet) -> int:
    ids = list(contracts.values_list('id', flat=True))
    Contract.objects.filter(id__in=ids).delete()
    logger.info("Deleted %d contract(s)", len(ids))
    return len(ids)


def export_contracts_csv(contracts: QuerySet) -> str:
    """Render contracts as CSV text with a header row."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_COLUMNS)

    for contract in contracts.select_related('contact_info', 'company_info'):
        contact = getattr(contract, 'contact_info', None)
        company = getattr(contract, 'company_info', None)
        writer.writerow([
            contract.contract_number,
            contract.get_status_display(),
            contract.created_at.date().isoformat(),
            f"{contact.first_name} {contact.last_name}".strip() if contact else '',
            contact.email if contact else '',
            company.company_name if company else '',
            company.ico if company else '',
        ])

    return output.getvalue()
