import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership, PeriodMode
from apps.groups.roles import GroupRole
from apps.periods.models import MealPeriod, PeriodStatus
from apps.shopping.models import ShoppingItem, MarketDate


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
def manager_user(db):
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        display_name='Market Manager',
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
    """Group with fines of 50 enabled and an admin, a manager and a member."""
    group = Group.objects.create(
        name='Flat 4B',
        created_by=admin_user,
        member_count=3,
        period_mode=PeriodMode.CUSTOM,
        fine_enabled=True,
        fine_amount=Decimal('50.00'),
    )
    GroupMembership.objects.create(user=admin_user, group=group, role=GroupRole.ADMIN, is_current=True)
    GroupMembership.objects.create(user=manager_user, group=group, role=GroupRole.MANAGER)
    GroupMembership.objects.create(user=member_user, group=group, role=GroupRole.MEMBER)
    return group


@pytest.fixture
def active_period(group, admin_user):
    return MealPeriod.objects.create(
        group=group,
        name='Current',
        start_date=timezone.localdate() - timedelta(days=30),
        status=PeriodStatus.ACTIVE,
        created_by=admin_user,
    )


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def item(group, member_user, active_period, today):
    return ShoppingItem.objects.create(
        group=group,
        user=member_user,
        name='Potatoes',
        quantity=Decimal('80.00'),
        unit='kg',
        date=today,
        period=active_period,
    )


@pytest.fixture
def missed_duty(group, member_user, manager_user, today):
    """Member's market duty of yesterday, still UPCOMING."""
    return MarketDate.objects.create(
        group=group,
        user=member_user,
        date=today - timedelta(days=1),
        created_by=manager_user,
    )
