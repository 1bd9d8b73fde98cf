import pytest
from decimal import Decimal
from datetime import timedelta
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.finance.models import ExtraExpense, ExpenseType, Payment, PaymentStatus
from apps.groups.models import Group, GroupMembership, PeriodMode
from apps.groups.roles import GroupRole
from apps.meals.models import Meal, GuestMeal, MealType
from apps.periods.models import MealPeriod, PeriodStatus


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def analytics_admin(db):
    """Create the group admin."""
    return User.objects.create_user(
        email='analytics_admin@example.com',
        password='TestPass123!',
        display_name='Analytics Admin',
    )


@pytest.fixture
def analytics_accountant(db):
    """Create the group accountant."""
    return User.objects.create_user(
        email='analytics_accountant@example.com',
        password='TestPass123!',
        display_name='Analytics Accountant',
    )


@pytest.fixture
def analytics_member(db):
    """Create a plain member."""
    return User.objects.create_user(
        email='analytics_member@example.com',
        password='TestPass123!',
        display_name='Analytics Member',
    )


@pytest.fixture
def analytics_outsider(db):
    """Create a user not in the group."""
    return User.objects.create_user(
        email='analytics_outsider@example.com',
        password='TestPass123!',
        display_name='Analytics Outsider',
    )


@pytest.fixture
def admin_client(analytics_admin):
    return _client_for(analytics_admin)


@pytest.fixture
def accountant_client(analytics_accountant):
    return _client_for(analytics_accountant)


@pytest.fixture
def member_client(analytics_member):
    return _client_for(analytics_member)


@pytest.fixture
def outsider_client(analytics_outsider):
    return _client_for(analytics_outsider)


# =============================================================================
# Group and period
# =============================================================================

@pytest.fixture
def analytics_group(db, analytics_admin, analytics_accountant, analytics_member):
    """Create a group with an admin, an accountant and a member."""
    group = Group.objects.create(
        name='Analytics Flat',
        created_by=analytics_admin,
        member_count=3,
        period_mode=PeriodMode.CUSTOM,
    )
    GroupMembership.objects.create(user=analytics_admin, group=group, role=GroupRole.ADMIN, is_current=True)
    GroupMembership.objects.create(user=analytics_accountant, group=group, role=GroupRole.ACCOUNTANT)
    GroupMembership.objects.create(user=analytics_member, group=group, role=GroupRole.MEMBER)
    return group


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def analytics_period(analytics_group, analytics_admin, today):
    return MealPeriod.objects.create(
        group=analytics_group,
        name='Current',
        start_date=today - timedelta(days=10),
        status=PeriodStatus.ACTIVE,
        created_by=analytics_admin,
    )


# =============================================================================
# Meals, payments and expenses
# =============================================================================

@pytest.fixture
def analytics_data(analytics_group, analytics_period, analytics_admin, analytics_member, today):
    """
    Four meals in total and 400 of expenses: meal rate 100.

    The member eats two meals and paid 500. The admin eats one meal, hosts
    one guest and has a pending payment of 100 that does not count.
    """
    group, period = analytics_group, analytics_period
    Meal.objects.create(user=analytics_member, group=group, date=today, type=MealType.LUNCH, period=period)
    Meal.objects.create(user=analytics_member, group=group, date=today, type=MealType.DINNER, period=period)
    Meal.objects.create(user=analytics_admin, group=group, date=today, type=MealType.LUNCH, period=period)
    GuestMeal.objects.create(
        user=analytics_admin, group=group, date=today, type=MealType.LUNCH, count=1, period=period
    )

    Payment.objects.create(
        user=analytics_member, group=group, amount=Decimal('500.00'), date=today,
        status=PaymentStatus.COMPLETED, period=period,
    )
    Payment.objects.create(
        user=analytics_admin, group=group, amount=Decimal('100.00'), date=today,
        status=PaymentStatus.PENDING, period=period,
    )

    ExtraExpense.objects.create(
        group=group, user=analytics_admin, amount=Decimal('250.00'), description='Rice',
        date=today, type=ExpenseType.GROCERY, period=period,
    )
    ExtraExpense.objects.create(
        group=group, user=analytics_admin, amount=Decimal('100.00'), description='Gas bill',
        date=today - timedelta(days=1), type=ExpenseType.UTILITY, period=period,
    )
    ExtraExpense.objects.create(
        group=group, user=analytics_member, amount=Decimal('50.00'), description='Spices',
        date=today, type=ExpenseType.GROCERY, period=period,
    )
