import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership
from apps.groups.roles import GroupRole


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def group_owner(db):
    """Create and return a test user (group creator)."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        display_name='Group Owner',
    )


@pytest.fixture
def manager_user(db):
    """Create and return a manager user."""
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        display_name='Group Manager',
    )


@pytest.fixture
def member_user(db):
    """Create and return a member user."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        display_name='Group Member',
    )


@pytest.fixture
def group_other_user(db):
    """Create and return a user not in any group."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        display_name='Other User',
    )


@pytest.fixture
def authenticated_client(group_owner):
    """Return API client authenticated as group creator."""
    return _client_for(group_owner)


@pytest.fixture
def manager_client(manager_user):
    return _client_for(manager_user)


@pytest.fixture
def member_client(member_user):
    """Return API client authenticated as group member."""
    return _client_for(member_user)


@pytest.fixture
def other_client(group_other_user):
    """Return API client authenticated as non-member user."""
    return _client_for(group_other_user)


@pytest.fixture
def group(db, group_owner):
    """Create and return a public group with its admin membership."""
    group = Group.objects.create(
        name='Flat 4B',
        description='Shared flat on the fourth floor',
        created_by=group_owner,
        member_count=1,
    )
    GroupMembership.objects.create(
        user=group_owner,
        group=group,
        role=GroupRole.ADMIN,
        is_current=True,
    )
    return group


@pytest.fixture
def group_with_members(group, manager_user, member_user):
    """Group with admin, manager, and member."""
    GroupMembership.objects.create(user=manager_user, group=group, role=GroupRole.MANAGER)
    GroupMembership.objects.create(user=member_user, group=group, role=GroupRole.MEMBER)
    group.member_count = 3
    group.save(update_fields=['member_count'])
    return group


@pytest.fixture
def private_group(db, group_owner):
    """Private group protected by the password 'letmein'."""
    group = Group(
        name='Hostel Room 12',
        is_private=True,
        created_by=group_owner,
        member_count=1,
    )
    group.set_password('letmein')
    group.save()
    GroupMembership.objects.create(user=group_owner, group=group, role=GroupRole.ADMIN)
    return group
