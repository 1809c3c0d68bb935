"""Services for notifications business logic."""

from .exceptions import (
    NotificationsServiceError,
    NotificationNotFoundError,
)
from .notification_management import (
    notify_user,
    mark_notification_sent,
    mark_notification_read,
    mark_all_read,
    get_unread_notifications,
    unread_count,
    purge_expired_notifications,
)

__all__ = [
    # Exceptions
    'NotificationsServiceError',
    'NotificationNotFoundError',
    # Notification Management
    'notify_user',
    'mark_notification_sent',
    'mark_notification_read',
    'mark_all_read',
    'get_unread_notifications',
    'unread_count',
    'purge_expired_notifications',
]
