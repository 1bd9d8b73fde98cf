import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership
from apps.groups.roles import GroupRole
from apps.notifications.models import Notification, NotificationType


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        display_name='Flat Admin',
    )


@pytest.fixture
def member_user(db):
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        display_name='Plain Member',
    )


@pytest.fixture
def quiet_member(db):
    return User.objects.create_user(
        email='quiet@example.com',
        password='TestPass123!',
        display_name='Quiet Member',
    )


@pytest.fixture
def member_client(member_user):
    return _client_for(member_user)


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def group(db, admin_user, member_user, quiet_member):
    """Group whose quiet member switched off payment updates."""
    group = Group.objects.create(name='Flat 4B', created_by=admin_user, member_count=3)
    GroupMembership.objects.create(user=admin_user, group=group, role=GroupRole.ADMIN, is_current=True)
    GroupMembership.objects.create(user=member_user, group=group, role=GroupRole.MEMBER)
    GroupMembership.objects.create(
        user=quiet_member,
        group=group,
        role=GroupRole.MEMBER,
        notification_settings={'payment_updates': False},
    )
    return group


@pytest.fixture
def notification(member_user, group):
    return Notification.objects.create(
        user=member_user,
        group=group,
        type=NotificationType.GENERAL,
        message='Rent is due on Friday.',
    )
