"""Creating and reading in-app notifications."""

import logging
from typing import List, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User, UserRole
from apps.notifications.models import Notification, NotificationPriority

from .exceptions import NotificationNotFoundError

logger = logging.getLogger(__name__)


def notify(
    *,
    user: User,
    type: str,
    title: str,
    message: str = '',
    priority: str = NotificationPriority.MEDIUM,
    entity_type: str = '',
    related_entity_id: Optional[UUID] = None
) -> Notification:
    notification = Notification.objects.create(
        user=user,
        type=type,
        title=title,
        message=message,
        priority=priority,
        entity_type=entity_type,
        related_entity_id=related_entity_id,
    )
    logger.debug("Notified user %s: %s", user.id, title)
    return notification


def notify_admins(*, exclude: Optional[User] = None, **kwargs) -> List[Notification]:
    """Send the same notification to every active admin, except `exclude`."""
    admins = User.objects.filter(is_active=True, role=UserRole.ADMIN)
    if exclude is not None:
        admins = admins.exclude(id=exclude.id)

    fields = dict(kwargs)
    fields.setdefault('priority', NotificationPriority.MEDIUM)
    fields.setdefault('message', '')
    fields.setdefault('entity_type', '')
    notifications = Notification.objects.bulk_create([
        Notification(user=admin, **fields) for admin in admins
    ])
    logger.debug("Notified %d admin(s): %s", len(notifications), fields.get('title'))
    return notifications


def list_notifications(*, user: User, limit: Optional[int] = None) -> QuerySet:
    """Latest notifications of the user, newest first."""
    if limit is None:
        limit = settings.NOTIFICATION_LIST_LIMIT
    return Notification.objects.filter(user=user).order_by('-created_at')[:limit]


def unread_count(*, user: User) -> int:
    return Notification.objects.filter(user=user, is_read=False).count()


@transaction.atomic
def mark_as_read(*, notification_id: UUID, user: User) -> Notification:
    """
    Raises:
        NotificationNotFoundError: If the notification isn't the user's
    """
    try:
        notification = Notification.objects.select_for_update().get(id=notification_id, user=user)
    except Notification.DoesNotExist:
        raise NotificationNotFoundError(f"Notification with ID {notification_id} not found")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = timezone.now()
        notification.save(update_fields=['is_read', 'read_at', 'updated_at'])
    return notification


def mark_all_as_read(*, user: User) -> int:
    """Returns the number of notifications marked."""
    now = timezone.now()
    return Notification.objects.filter(user=user, is_read=False).update(
        is_read=True,
        read_at=now,
        updated_at=now,
    )
