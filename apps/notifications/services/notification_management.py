"""
Notification service.

Creates notifications for single users and fans out group-wide
announcements with one bulk insert.
"""

import logging
from typing import Iterable, List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership
from apps.groups.roles import GroupRole
from apps.notifications.models import (
    Notification,
    NotificationType,
    NOTIFICATION_CATEGORIES,
)

from .exceptions import NotificationNotFoundError, EmptyMessageError

logger = logging.getLogger(__name__)

LIST_LIMIT = 50


def _category_for(notification_type: str) -> Optional[str]:
    for category, types in NOTIFICATION_CATEGORIES.items():
        if notification_type in types:
            return category
    return None


def _wants(membership: GroupMembership, notification_type: str) -> bool:
    category = _category_for(notification_type)
    if category is None:
        return True
    return membership.get_notification_settings().get(category, True)


def create_notification(
    *,
    user: User,
    notification_type: str = NotificationType.GENERAL,
    message: str,
    group: Optional[Group] = None
) -> Notification:
    """
    Create a notification for one user.

    Raises:
        EmptyMessageError: If message is blank
    """
    if not message or not message.strip():
        raise EmptyMessageError("Notification message is required")

    return Notification.objects.create(
        user=user,
        group=group,
        type=notification_type,
        message=message.strip(),
    )


def _fan_out(
    memberships: Iterable[GroupMembership],
    group: Group,
    notification_type: str,
    message: str
) -> List[Notification]:
    if not message or not message.strip():
        raise EmptyMessageError("Notification message is required")

    notifications = [
        Notification(user_id=m.user_id, group=group, type=notification_type, message=message.strip())
        for m in memberships
        if _wants(m, notification_type)
    ]
    created = Notification.objects.bulk_create(notifications)
    logger.debug("Sent %s %s notification(s) in group %s", len(created), notification_type, group.id)
    return created


def notify_group_members(
    *,
    group: Group,
    notification_type: str,
    message: str,
    exclude_user: Optional[User] = None
) -> List[Notification]:
    """
    Notify every non-banned member of a group.

    Members who switched off the matching category in their notification
    settings are skipped.
    """
    memberships = GroupMembership.objects.filter(group=group, is_banned=False)
    if exclude_user is not None:
        memberships = memberships.exclude(user=exclude_user)
    return _fan_out(memberships, group, notification_type, message)


def notify_group_admins(
    *,
    group: Group,
    notification_type: str,
    message: str,
    exclude_user: Optional[User] = None
) -> List[Notification]:
    """Notify the ADMIN members of a group."""
    memberships = GroupMembership.objects.filter(
        group=group,
        role=GroupRole.ADMIN,
        is_banned=False,
    )
    if exclude_user is not None:
        memberships = memberships.exclude(user=exclude_user)
    return _fan_out(memberships, group, notification_type, message)


def list_notifications(*, user: User, unread_only: bool = False) -> QuerySet[Notification]:
    """Latest notifications of a user (at most 50)."""
    qs = Notification.objects.filter(user=user).select_related('group')
    if unread_only:
        qs = qs.filter(read=False)
    return qs.order_by('-created_at')[:LIST_LIMIT]


def unread_count(*, user: User) -> int:
    return Notification.objects.filter(user=user, read=False).count()


def _get_own(notification_id: UUID, user: User) -> Notification:
    try:
        return Notification.objects.get(id=notification_id, user=user)
    except Notification.DoesNotExist:
        raise NotificationNotFoundError("Notification not found")


def mark_as_read(*, notification_id: UUID, user: User) -> Notification:
    """
    Mark one notification as read.

    Raises:
        NotificationNotFoundError: If it does not exist or is not the user's
    """
    notification = _get_own(notification_id, user)
    if not notification.read:
        notification.read = True
        notification.save(update_fields=['read'])
    return notification


def mark_all_as_read(*, user: User) -> int:
    """Mark every unread notification of the user as read. Returns the count."""
    return Notification.objects.filter(user=user, read=False).update(read=True)


@transaction.atomic
def delete_notification(*, notification_id: UUID, user: User) -> None:
    """
    Delete one of the user's notifications.

    Raises:
        NotificationNotFoundError: If it does not exist or is not the user's
    """
    _get_own(notification_id, user).delete()
