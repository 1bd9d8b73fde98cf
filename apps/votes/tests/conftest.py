import pytest
from datetime import timedelta
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership
from apps.groups.roles import GroupRole
from apps.votes.models import Vote, VoteType


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


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
def other_member(db):
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        display_name='Other Member',
    )


@pytest.fixture
def outsider(db):
    return User.objects.create_user(
        email='outsider@example.com',
        password='TestPass123!',
        display_name='Outsider',
    )


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def member_client(member_user):
    return _client_for(member_user)


@pytest.fixture
def other_client(other_member):
    return _client_for(other_member)


@pytest.fixture
def outsider_client(outsider):
    return _client_for(outsider)


@pytest.fixture
def group(db, admin_user, member_user, other_member):
    group = Group.objects.create(name='Flat 4B', created_by=admin_user, member_count=3)
    GroupMembership.objects.create(user=admin_user, group=group, role=GroupRole.ADMIN, is_current=True)
    GroupMembership.objects.create(user=member_user, group=group, role=GroupRole.MEMBER)
    GroupMembership.objects.create(user=other_member, group=group, role=GroupRole.MEMBER)
    return group


@pytest.fixture
def vote(group, member_user):
    """Open election of a meal manager, closing in two days."""
    return Vote.objects.create(
        group=group,
        created_by=member_user,
        title='Meal manager for October',
        type=VoteType.MEAL_MANAGER,
        options=['Alice', 'Bob'],
        results={'Alice': [], 'Bob': []},
        end_date=timezone.now() + timedelta(days=2),
    )


@pytest.fixture
def expired_vote(group, member_user):
    return Vote.objects.create(
        group=group,
        created_by=member_user,
        title='Cleaning rota',
        options=['Weekly', 'Daily'],
        results={'Weekly': [], 'Daily': []},
        start_date=timezone.now() - timedelta(days=5),
        end_date=timezone.now() - timedelta(hours=1),
    )
