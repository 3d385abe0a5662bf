import pytest

from apps.accounts.models import User, UserRole
from apps.contracts.models import Contract, ContractStatus, LostReason
from apps.contracts.services import change_status, create_contract
from apps.merchants.models import Merchant
from apps.notifications.models import (
    Notification,
    NotificationType,
    NotificationPriority,
    EntityType,
)
from apps.notifications.services import (
    notify,
    notify_admins,
    list_notifications,
    unread_count,
    mark_as_read,
    mark_all_as_read,
    NotificationNotFoundError,
)


@pytest.mark.django_db
class TestNotificationService:

    def test_notify(self, partner_user):
        notification = notify(
            user=partner_user,
            type=NotificationType.SYSTEM_ALERT,
            title='Maintenance tonight',
        )

        assert notification.priority == NotificationPriority.MEDIUM
        assert not notification.is_read
        assert unread_count(user=partner_user) == 1

    def test_notify_admins_skips_excluded_and_inactive(self, admin_user):
        second = User.objects.create_user(email='admin2@example.com', password='x', role=UserRole.ADMIN)
        User.objects.create_user(
            email='admin3@example.com', password='x', role=UserRole.ADMIN, is_active=False
        )

        notifications = notify_admins(
            exclude=admin_user,
            type=NotificationType.SYSTEM_ALERT,
            title='Disk almost full',
        )

        assert [n.user for n in notifications] == [second]

    def test_list_is_limited_and_scoped(self, partner_user, other_partner, settings):
        settings.NOTIFICATION_LIST_LIMIT = 2
        for i in range(3):
            notify(user=partner_user, type=NotificationType.SYSTEM_ALERT, title=f'Alert {i}')
        notify(user=other_partner, type=NotificationType.SYSTEM_ALERT, title='Not yours')

        notifications = list(list_notifications(user=partner_user))

        assert len(notifications) == 2
        assert all(n.user == partner_user for n in notifications)

    def test_mark_as_read(self, partner_user):
        notification = notify(user=partner_user, type=NotificationType.SYSTEM_ALERT, title='Hi')

        notification = mark_as_read(notification_id=notification.id, user=partner_user)

        assert notification.is_read
        assert notification.read_at is not None
        assert unread_count(user=partner_user) == 0

    def test_cannot_read_foreign_notification(self, partner_user, other_partner):
        notification = notify(user=partner_user, type=NotificationType.SYSTEM_ALERT, title='Hi')

        with pytest.raises(NotificationNotFoundError):
            mark_as_read(notification_id=notification.id, user=other_partner)

    def test_mark_all_as_read(self, partner_user):
        for i in range(3):
            notify(user=partner_user, type=NotificationType.SYSTEM_ALERT, title=f'Alert {i}')

        assert mark_all_as_read(user=partner_user) == 3
        assert mark_all_as_read(user=partner_user) == 0


@pytest.mark.django_db
class TestReceivers:
    """Domain events produce notifications."""

    def test_contract_created_notifies_admins(self, admin_user, partner_user):
        contract = create_contract(created_by=partner_user)

        notification = Notification.objects.get(user=admin_user)
        assert notification.type == NotificationType.CONTRACT_CREATED
        assert notification.priority == NotificationPriority.LOW
        assert notification.entity_type == EntityType.CONTRACTS
        assert notification.related_entity_id == contract.id
        assert 'Petr Partner' in notification.message

    def test_admin_creating_contract_is_not_notified(self, admin_user):
        create_contract(created_by=admin_user)
        assert not Notification.objects.filter(user=admin_user).exists()

    def test_status_change_notifies_creator_and_assignee(self, contract, admin_user, other_partner, partner_user):
        Contract.objects.filter(id=contract.id).update(assigned_to=other_partner)
        contract.refresh_from_db()

        change_status(contract=contract, new_status=ContractStatus.SIGNED, user=admin_user)

        notifications = Notification.objects.filter(type=NotificationType.CONTRACT_STATUS_CHANGED)
        assert {n.user for n in notifications} == {partner_user, other_partner}
        assert all(n.priority == NotificationPriority.HIGH for n in notifications)
        assert notifications[0].title == 'Contract 100000: Signed'

    def test_actor_is_not_notified(self, contract, partner_user):
        change_status(
            contract=contract,
            new_status=ContractStatus.LOST,
            user=partner_user,
            lost_reason=LostReason.NO_RESPONSE,
        )

        assert not Notification.objects.filter(type=NotificationType.CONTRACT_STATUS_CHANGED).exists()

    def test_new_merchant_notifies_admins(self, admin_user, partner_user):
        merchant = Merchant.objects.create(company_name='Pekárna', ico='1', created_by=partner_user)

        notification = Notification.objects.get(user=admin_user, type=NotificationType.MERCHANT_REGISTERED)
        assert notification.related_entity_id == merchant.id

    def test_merchant_update_is_silent(self, admin_user, merchant):
        Notification.objects.all().delete()

        merchant.address_city = 'Brno'
        merchant.save()

        assert not Notification.objects.exists()
