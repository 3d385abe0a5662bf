"""
Signal receivers that turn domain events into notifications.

Connected in NotificationsConfig.ready().
"""

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from apps.contracts.models import Contract, ContractStatus
from apps.contracts.signals import contract_created, contract_status_changed
from apps.merchants.models import Merchant

from .models import EntityType, NotificationPriority, NotificationType
from .services import notify, notify_admins

logger = logging.getLogger(__name__)

STATUS_PRIORITIES = {
    ContractStatus.SIGNED: NotificationPriority.HIGH,
    ContractStatus.SUBMITTED: NotificationPriority.MEDIUM,
    ContractStatus.REJECTED: NotificationPriority.MEDIUM,
    ContractStatus.LOST: NotificationPriority.MEDIUM,
}


@receiver(contract_created, sender=Contract, dispatch_uid='notify_contract_created')
def on_contract_created(sender, contract, user=None, **kwargs):
    author = user.get_display_name() if user else 'System'
    notify_admins(
        exclude=user,
        type=NotificationType.CONTRACT_CREATED,
        title=f"New contract {contract.contract_number}",
        message=f"{author} created contract {contract.contract_number}.",
        priority=NotificationPriority.LOW,
        entity_type=EntityType.CONTRACTS,
        related_entity_id=contract.id,
    )


@receiver(contract_status_changed, sender=Contract, dispatch_uid='notify_contract_status_changed')
def on_contract_status_changed(sender, contract, old_status, new_status, user=None, **kwargs):
    """Tell the contract's creator and assignee, but not whoever made the change."""
    recipients = {}
    for person in (contract.created_by, contract.assigned_to):
        if person is not None and person.is_active:
            recipients[person.id] = person
    if user is not None:
        recipients.pop(user.id, None)

    label = ContractStatus(new_status).label
    for person in recipients.values():
        notify(
            user=person,
            type=NotificationType.CONTRACT_STATUS_CHANGED,
            title=f"Contract {contract.contract_number}: {label}",
            message=f"Status changed from {old_status} to {new_status}.",
            priority=STATUS_PRIORITIES.get(new_status, NotificationPriority.LOW),
            entity_type=EntityType.CONTRACTS,
            related_entity_id=contract.id,
        )


@receiver(post_save, sender=Merchant, dispatch_uid='notify_merchant_registered')
def on_merchant_saved(sender, instance, created, **kwargs):
    if not created:
        return
    notify_admins(
        exclude=instance.created_by,
        type=NotificationType.MERCHANT_REGISTERED,
        title=f"New merchant {instance.company_name}",
        message=f"Merchant {instance} was registered.",
        entity_type=EntityType.MERCHANTS,
        related_entity_id=instance.id,
    )
