import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.finance.models import ExtraExpense, ExpenseType
from apps.groups.models import Group, GroupMembership, PeriodMode
from apps.groups.roles import GroupRole
from apps.meals.models import Meal, MealType
from apps.periods.models import MealPeriod, PeriodStatus


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
def accountant_user(db):
    return User.objects.create_user(
        email='accountant@example.com',
        password='TestPass123!',
        display_name='Accountant',
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
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def accountant_client(accountant_user):
    return _client_for(accountant_user)


@pytest.fixture
def member_client(member_user):
    return _client_for(member_user)


@pytest.fixture
def outsider_client(outsider):
    return _client_for(outsider)


@pytest.fixture
def group(db, admin_user, accountant_user, member_user):
    """Group with an admin, an accountant and a member."""
    group = Group.objects.create(
        name='Flat 4B',
        created_by=admin_user,
        member_count=3,
        period_mode=PeriodMode.CUSTOM,
    )
    GroupMembership.objects.create(user=admin_user, group=group, role=GroupRole.ADMIN, is_current=True)
    GroupMembership.objects.create(user=accountant_user, group=group, role=GroupRole.ACCOUNTANT)
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
def meals_and_expense(group, active_period, admin_user, member_user, today):
    """Three meals (two by the member) and an expense of 300: meal rate 100."""
    for meal_type in (MealType.LUNCH, MealType.DINNER):
        Meal.objects.create(user=member_user, group=group, date=today, type=meal_type, period=active_period)
    Meal.objects.create(user=admin_user, group=group, date=today, type=MealType.LUNCH, period=active_period)
    return ExtraExpense.objects.create(
        group=group,
        user=admin_user,
        amount=Decimal('300.00'),
        description='Rice and lentils',
        date=today,
        type=ExpenseType.GROCERY,
        period=active_period,
    )
