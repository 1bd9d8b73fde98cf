import pytest

from apps.accounts.models import User
from apps.accounts.services import (
    authenticate_user,
    delete_user_account,
    InvalidCredentialsError,
    PasswordConfirmationError,
)
from apps.groups.models import (
    ActivityType,
    Group,
    GroupActivityLog,
    GroupMembership,
    GroupRole,
)
from apps.notifications.models import Notification, NotificationType


@pytest.mark.django_db
class TestDeleteUserAccount:

    def test_personal_data_is_scrubbed(self, user):
        delete_user_account(user_id=user.id, password='TestPass123!')

        user.refresh_from_db()
        assert user.email == f"deleted_{user.id}@anonymized.local"
        assert user.display_name == 'Deleted User'
        assert user.is_active is False
        assert user.deleted_at is not None
        assert user.preferences == {}
        assert not user.has_usable_password()

    def test_old_credentials_stop_working(self, user):
        delete_user_account(user_id=user.id, password='TestPass123!')

        with pytest.raises(InvalidCredentialsError):
            authenticate_user(email='testuser@example.com', password='TestPass123!')

    def test_row_is_kept(self, user):
        delete_user_account(user_id=user.id, password='TestPass123!')

        assert User.objects.filter(id=user.id).exists()

    def test_sole_member_group_is_deleted(self, user, solo_group):
        delete_user_account(user_id=user.id, password='TestPass123!')

        assert not Group.objects.filter(id=solo_group.id).exists()

    def test_admin_role_handed_to_remaining_member(self, user, other_user, shared_group):
        delete_user_account(user_id=user.id, password='TestPass123!')

        successor = GroupMembership.objects.get(group=shared_group, user=other_user)
        assert successor.role == GroupRole.ADMIN
        assert Notification.objects.filter(
            user=other_user,
            group=shared_group,
            type=NotificationType.ROLE_CHANGED,
        ).exists()

    def test_banned_member_passed_over_for_admin(self, user, other_user, shared_group):
        newcomer = User.objects.create_user(
            email='newcomer@example.com',
            password='NewcomerPass123!',
            display_name='Newcomer',
        )
        GroupMembership.objects.filter(group=shared_group, user=other_user).update(
            role=GroupRole.BANNED, is_banned=True
        )
        GroupMembership.objects.create(user=newcomer, group=shared_group, role=GroupRole.MEMBER)

        delete_user_account(user_id=user.id, password='TestPass123!')

        assert GroupMembership.objects.get(group=shared_group, user=newcomer).role == GroupRole.ADMIN
        assert GroupMembership.objects.get(group=shared_group, user=other_user).role == GroupRole.BANNED

    def test_leaves_every_group(self, user, other_user, shared_group, solo_group):
        delete_user_account(user_id=user.id, password='TestPass123!')

        assert not GroupMembership.objects.filter(user=user).exists()
        assert not Group.objects.filter(id=solo_group.id).exists()
        shared_group.refresh_from_db()
        assert shared_group.member_count == 1

    def test_departure_is_logged(self, user, shared_group):
        delete_user_account(user_id=user.id, password='TestPass123!')

        assert GroupActivityLog.objects.filter(
            group=shared_group,
            user=user,
            type=ActivityType.MEMBER_LEFT,
        ).exists()

    def test_member_leaving_keeps_admin(self, user, other_user, shared_group):
        delete_user_account(user_id=other_user.id, password='OtherPass123!')

        admin = GroupMembership.objects.get(group=shared_group, user=user)
        assert admin.role == GroupRole.ADMIN
        assert Notification.objects.filter(
            user=user,
            type=NotificationType.MEMBER_REMOVED,
        ).exists()

    def test_wrong_password_changes_nothing(self, user, shared_group, solo_group):
        with pytest.raises(PasswordConfirmationError):
            delete_user_account(user_id=user.id, password='WrongPass123!')

        user.refresh_from_db()
        assert user.is_active is True
        assert user.email == 'testuser@example.com'
        assert GroupMembership.objects.filter(user=user).count() == 2
        assert Group.objects.filter(id=solo_group.id).exists()
