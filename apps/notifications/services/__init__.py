"""Services for in-app notifications."""

from .exceptions import (
    NotificationsServiceError,
    NotificationNotFoundError,
)
from .notification_service import (
    notify,
    notify_admins,
    list_notifications,
    unread_count,
    mark_as_read,
    mark_all_as_read,
)

__all__ = [
    # Exceptions
    'NotificationsServiceError',
    'NotificationNotFoundError',
    # Notifications
    'notify',
    'notify_admins',
    'list_notifications',
    'unread_count',
    'mark_as_read',
    'mark_all_as_read',
]
