import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership, GroupRole


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a test user."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        display_name='Test User',
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive user."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        display_name='Inactive User',
        is_active=False,
    )


@pytest.fixture
def other_user(db):
    """Create and return another test user."""
    return User.objects.create_user(
        email='otheruser@example.com',
        password='OtherPass123!',
        display_name='Other User',
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def shared_group(user, other_user):
    """Group run by ``user`` with ``other_user`` as a plain member."""
    group = Group.objects.create(name='Flat 4B', created_by=user, member_count=2)
    GroupMembership.objects.create(user=user, group=group, role=GroupRole.ADMIN, is_current=True)
    GroupMembership.objects.create(user=other_user, group=group, role=GroupRole.MEMBER)
    return group


@pytest.fixture
def solo_group(user):
    """Group whose only member is ``user``."""
    group = Group.objects.create(name='Solo Kitchen', created_by=user, member_count=1)
    GroupMembership.objects.create(user=user, group=group, role=GroupRole.ADMIN)
    return group
