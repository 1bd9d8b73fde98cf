import pytest
import pandas as pd
from datetime import timedelta
from decimal import Decimal
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.excel.services.exporting import write_workbook
from apps.finance.models import ExtraExpense, ExpenseType, Payment, PaymentMethod
from apps.groups.models import Group, GroupMembership, PeriodMode
from apps.groups.roles import GroupRole
from apps.meals.models import Meal, MealType
from apps.periods.models import MealPeriod, PeriodStatus
from apps.shopping.models import ShoppingItem


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
def accountant_user(db):
    return User.objects.create_user(
        email='accountant@example.com',
        password='TestPass123!',
        display_name='Accountant',
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
def outsider_client(outsider):
    return _client_for(outsider)


@pytest.fixture
def group(db, admin_user, member_user, accountant_user):
    """Group with an admin, a member and an accountant (no spreadsheet rights)."""
    group = Group.objects.create(
        name='Flat 4B',
        created_by=admin_user,
        member_count=3,
        period_mode=PeriodMode.CUSTOM,
    )
    GroupMembership.objects.create(user=admin_user, group=group, role=GroupRole.ADMIN, is_current=True)
    GroupMembership.objects.create(user=member_user, group=group, role=GroupRole.MEMBER)
    GroupMembership.objects.create(user=accountant_user, group=group, role=GroupRole.ACCOUNTANT)
    return group


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def active_period(group, admin_user, today):
    return MealPeriod.objects.create(
        group=group,
        name='Current',
        start_date=today - timedelta(days=30),
        status=PeriodStatus.ACTIVE,
        created_by=admin_user,
    )


@pytest.fixture
def flat_data(group, active_period, admin_user, member_user, today):
    """Meals, a payment, a shopping item and an expense of 300 dated today."""
    Meal.objects.create(user=member_user, group=group, date=today, type=MealType.LUNCH, period=active_period)
    Meal.objects.create(user=member_user, group=group, date=today, type=MealType.DINNER, period=active_period)
    Meal.objects.create(user=admin_user, group=group, date=today, type=MealType.LUNCH, period=active_period)
    Payment.objects.create(
        user=member_user,
        group=group,
        amount=Decimal('500.00'),
        date=today,
        method=PaymentMethod.CASH,
        period=active_period,
        created_by=member_user,
    )
    Payment.objects.create(
        user=admin_user,
        group=group,
        amount=Decimal('250.00'),
        date=today,
        method=PaymentMethod.CARD,
        period=active_period,
        created_by=admin_user,
    )
    ShoppingItem.objects.create(
        group=group,
        user=admin_user,
        name='Rice',
        quantity=Decimal('5.00'),
        unit='kg',
        date=today,
        period=active_period,
    )
    ExtraExpense.objects.create(
        group=group,
        user=admin_user,
        amount=Decimal('300.00'),
        description='Rice and lentils',
        date=today,
        type=ExpenseType.GROCERY,
        period=active_period,
    )


@pytest.fixture
def make_workbook():
    """Build an uploaded xlsx file from column names and row lists."""
    def _make(columns, rows, name='upload.xlsx'):
        content = write_workbook({'Sheet1': pd.DataFrame(rows, columns=columns)})
        return SimpleUploadedFile(
            name,
            content,
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        )
    return _make
