"""
Notifications app services layer.

Other apps call these helpers after state changes to inform members.
"""

from .exceptions import (
    NotificationsServiceError,
    NotificationNotFoundError,
    EmptyMessageError,
)

from .notification_management import (
    create_notification,
    notify_group_members,
    notify_group_admins,
    list_notifications,
    unread_count,
    mark_as_read,
    mark_all_as_read,
    delete_notification,
)


__all__ = [
    # Exceptions
    'NotificationsServiceError',
    'NotificationNotFoundError',
    'EmptyMessageError',

    # Notification management
    'create_notification',
    'notify_group_members',
    'notify_group_admins',
    'list_notifications',
    'unread_count',
    'mark_as_read',
    'mark_all_as_read',
    'delete_notification',
]
