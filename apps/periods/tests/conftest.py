import pytest
from datetime import date
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership, PeriodMode
from apps.groups.roles import GroupRole
from apps.periods.models import MealPeriod, PeriodStatus


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
def admin_user(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        display_name='Flat Admin',
    )


@pytest.fixture
def manager_user(db):
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        display_name='Meal Manager',
    )


@pytest.fixture
def member_user(db):
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        display_name='Plain Member',
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
def manager_client(manager_user):
    return _client_for(manager_user)


@pytest.fixture
def member_client(member_user):
    return _client_for(member_user)


@pytest.fixture
def outsider_client(outsider):
    return _client_for(outsider)


@pytest.fixture
def group(db, admin_user, manager_user, member_user):
    """CUSTOM-mode group with an admin, a manager and a member."""
    group = Group.objects.create(
        name='Flat 4B',
        created_by=admin_user,
        member_count=3,
        period_mode=PeriodMode.CUSTOM,
    )
    GroupMembership.objects.create(user=admin_user, group=group, role=GroupRole.ADMIN, is_current=True)
    GroupMembership.objects.create(user=manager_user, group=group, role=GroupRole.MANAGER)
    GroupMembership.objects.create(user=member_user, group=group, role=GroupRole.MEMBER)
    return group


@pytest.fixture
def active_period(group, admin_user):
    return MealPeriod.objects.create(
        group=group,
        name='September 2026',
        start_date=date(2026, 9, 1),
        status=PeriodStatus.ACTIVE,
        created_by=admin_user,
    )


@pytest.fixture
def ended_period(group, admin_user):
    return MealPeriod.objects.create(
        group=group,
        name='August 2026',
        start_date=date(2026, 8, 1),
        end_date=date(2026, 8, 31),
        status=PeriodStatus.ENDED,
        carry_forward=True,
        closing_balance='250.00',
        notes='Summer',
        created_by=admin_user,
    )
