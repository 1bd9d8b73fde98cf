"""
Service layer unit tests for notifications app.

Tests cover:
- Creating single notifications
- Group fan-out and per-member category settings
- Reading, marking and deleting (owner only)
"""

import pytest

from apps.notifications.models import Notification, NotificationType
from apps.notifications.services import (
    create_notification,
    notify_group_members,
    notify_group_admins,
    list_notifications,
    unread_count,
    mark_as_read,
    mark_all_as_read,
    delete_notification,
)
from apps.notifications.services.exceptions import NotificationNotFoundError, EmptyMessageError


@pytest.mark.django_db
class TestCreateNotification:

    def test_create(self, member_user, group):
        notification = create_notification(
            user=member_user,
            notification_type=NotificationType.MEAL_REMINDER,
            message='  Lunch closes at noon.  ',
            group=group,
        )

        assert notification.message == 'Lunch closes at noon.'
        assert notification.read is False

    def test_blank_message(self, member_user):
        with pytest.raises(EmptyMessageError):
            create_notification(user=member_user, message='   ')


@pytest.mark.django_db
class TestFanOut:

    def test_members_except_sender(self, group, admin_user, member_user, quiet_member):
        created = notify_group_members(
            group=group,
            notification_type=NotificationType.GENERAL,
            message='House meeting tonight.',
            exclude_user=admin_user,
        )

        assert {n.user_id for n in created} == {member_user.id, quiet_member.id}

    def test_respects_category_settings(self, group, admin_user, member_user, quiet_member):
        notify_group_members(
            group=group,
            notification_type=NotificationType.EXPENSE_ADDED,
            message='New expense.',
        )

        recipients = set(Notification.objects.values_list('user_id', flat=True))
        assert recipients == {admin_user.id, member_user.id}

    def test_banned_members_skipped(self, group, member_user):
        group.memberships.filter(user=member_user).update(is_banned=True)

        created = notify_group_members(group=group, notification_type=NotificationType.GENERAL, message='Hi')

        assert member_user.id not in {n.user_id for n in created}

    def test_admins_only(self, group, admin_user):
        created = notify_group_admins(
            group=group,
            notification_type=NotificationType.JOIN_REQUEST,
            message='Someone wants to join.',
        )

        assert [n.user_id for n in created] == [admin_user.id]


@pytest.mark.django_db
class TestReading:

    def test_list_and_unread_count(self, member_user, notification):
        create_notification(user=member_user, message='Second')

        assert len(list_notifications(user=member_user)) == 2
        assert unread_count(user=member_user) == 2

        mark_as_read(notification_id=notification.id, user=member_user)

        assert unread_count(user=member_user) == 1
        assert len(list_notifications(user=member_user, unread_only=True)) == 1

    def test_list_is_capped(self, member_user):
        Notification.objects.bulk_create([
            Notification(user=member_user, message=f'Note {i}') for i in range(55)
        ])

        assert len(list_notifications(user=member_user)) == 50

    def test_mark_someone_elses(self, admin_user, notification):
        with pytest.raises(NotificationNotFoundError):
            mark_as_read(notification_id=notification.id, user=admin_user)

    def test_mark_all(self, member_user, notification):
        create_notification(user=member_user, message='Another')

        assert mark_all_as_read(user=member_user) == 2
        assert unread_count(user=member_user) == 0

    def test_delete_owner_only(self, admin_user, member_user, notification):
        with pytest.raises(NotificationNotFoundError):
            delete_notification(notification_id=notification.id, user=admin_user)

        delete_notification(notification_id=notification.id, user=member_user)
        assert not Notification.objects.exists()
