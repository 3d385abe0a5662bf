"""Contract document storage."""

import logging
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.accounts.models import User
from apps.contracts.models import Contract, ContractDocument

from .exceptions import DocumentNotFoundError

logger = logging.getLogger(__name__)


@transaction.atomic
def upload_document(
    *,
    contract: Contract,
    file,
    user: Optional[User] = None,
    document_name: str = '',
    document_type: str = 'other'
) -> ContractDocument:
    document = ContractDocument.objects.create(
        contract=contract,
        file=file,
        document_name=document_name or file.name,
        document_type=document_type,
        uploaded_by=user,
    )
    logger.info("Uploaded document %s to contract %s", document.id, contract.contract_number)
    return document


def get_document(*, contract: Contract, document_id: UUID) -> ContractDocument:
    """
    Raises:
        DocumentNotFoundError: If the document doesn't belong to the contract
    """
    try:
        return ContractDocument.objects.get(id=document_id, contract=contract)
    except (ContractDocument.DoesNotExist, ValidationError):
        raise DocumentNotFoundError(f"Document with ID {document_id} not found")


@transaction.atomic
def delete_document(*, contract: Contract, document_id: UUID) -> None:
    document = get_document(contract=contract, document_id=document_id)
    document.file.delete(save=False)
    document.delete()
    logger.info("Deleted document %s of contract %s", document_id, contract.contract_number)
