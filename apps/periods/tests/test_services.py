"""
Service layer unit tests for periods app.

Tests cover:
- Period lifecycle (start, end, lock, unlock, archive, restart)
- Naming and date rules
- Monthly periods
- Period summaries
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

from django.utils import timezone

from apps.finance.models import ExtraExpense, Payment, PaymentStatus
from apps.groups.models import GroupMembership, PeriodMode
from apps.meals.models import Meal, GuestMeal, MealType
from apps.meals.services import toggle_meal
from apps.notifications.models import Notification, NotificationType
from apps.periods.models import MealPeriod, PeriodStatus
from apps.periods.utils import month_period_name
from apps.periods.services import (
    get_current_period,
    get_period,
    get_period_for_date,
    resolve_editable_period,
    list_periods,
    get_periods_by_month,
    start_period,
    end_period,
    lock_period,
    unlock_period,
    archive_period,
    restart_period,
    ensure_month_period,
    get_period_summary,
)
from apps.periods.services.exceptions import (
    PeriodNotFoundError,
    PeriodPermissionError,
    ActivePeriodExistsError,
    NoActivePeriodError,
    InvalidPeriodDatesError,
    PeriodOverlapError,
    PeriodStateError,
    PeriodLockedError,
)


@pytest.mark.django_db
class TestStartPeriod:

    def test_manager_starts_period(self, group, manager_user):
        period = start_period(
            group_id=group.id,
            user=manager_user,
            name='October 2026',
            start_date=date(2026, 10, 1),
            end_date=date(2026, 10, 31),
        )

        assert period.status == PeriodStatus.ACTIVE
        assert period.created_by == manager_user
        assert get_current_period(group_id=group.id) == period

    def test_members_are_notified(self, group, admin_user):
        start_period(group_id=group.id, user=admin_user, name='Term', start_date=date(2026, 10, 1))

        assert Notification.objects.filter(
            group=group,
            type=NotificationType.PERIOD_STARTED
        ).count() == 3

    def test_member_cannot_start(self, group, member_user):
        with pytest.raises(PeriodPermissionError):
            start_period(group_id=group.id, user=member_user, name='Term', start_date=date(2026, 10, 1))

    def test_outsider_cannot_start(self, group, outsider):
        with pytest.raises(PeriodPermissionError):
            start_period(group_id=group.id, user=outsider, name='Term', start_date=date(2026, 10, 1))

    def test_only_one_active_period(self, group, admin_user, active_period):
        with pytest.raises(ActivePeriodExistsError):
            start_period(group_id=group.id, user=admin_user, name='Second', start_date=date(2026, 10, 1))

    def test_end_must_be_after_start(self, group, admin_user):
        with pytest.raises(InvalidPeriodDatesError):
            start_period(
                group_id=group.id,
                user=admin_user,
                name='Backwards',
                start_date=date(2026, 10, 10),
                end_date=date(2026, 10, 10),
            )

    def test_overlap_with_ended_period_rejected(self, group, admin_user, ended_period):
        with pytest.raises(PeriodOverlapError):
            start_period(
                group_id=group.id,
                user=admin_user,
                name='Overlapping',
                start_date=date(2026, 8, 15),
                end_date=date(2026, 9, 15),
            )

    def test_duplicate_name_gets_suffix(self, group, admin_user, ended_period):
        period = start_period(
            group_id=group.id,
            user=admin_user,
            name='August 2026',
            start_date=date(2026, 9, 1),
        )

        assert period.name == 'August 2026 (2)'


@pytest.mark.django_db
class TestEndPeriod:

    def test_closing_balance(self, group, admin_user, member_user, active_period):
        active_period.opening_balance = Decimal('100.00')
        active_period.save()
        Payment.objects.create(
            user=member_user, group=group, amount=Decimal('500.00'),
            date=date(2026, 9, 3), period=active_period,
        )
        Payment.objects.create(
            user=member_user, group=group, amount=Decimal('200.00'),
            date=date(2026, 9, 4), period=active_period, status=PaymentStatus.PENDING,
        )
        ExtraExpense.objects.create(
            group=group, user=admin_user, amount=Decimal('150.00'),
            description='Rice', date=date(2026, 9, 5), period=active_period,
        )

        period = end_period(group_id=group.id, user=admin_user, end_date=date(2026, 9, 30))

        assert period.status == PeriodStatus.ENDED
        assert period.end_date == date(2026, 9, 30)
        assert period.closing_balance == Decimal('450.00')

    def test_end_date_defaults_to_today(self, group, admin_user, active_period):
        period = end_period(group_id=group.id, user=admin_user, period_id=active_period.id)

        assert period.end_date == timezone.localdate()

    def test_monthly_group_switches_to_custom(self, group, admin_user, active_period):
        group.period_mode = PeriodMode.MONTHLY
        group.save()

        end_period(group_id=group.id, user=admin_user)

        group.refresh_from_db()
        assert group.period_mode == PeriodMode.CUSTOM

    def test_no_active_period(self, group, admin_user):
        with pytest.raises(NoActivePeriodError):
            end_period(group_id=group.id, user=admin_user)

    def test_ended_period_cannot_end_again(self, group, admin_user, ended_period):
        with pytest.raises(PeriodStateError):
            end_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

    def test_period_of_other_group(self, group, admin_user):
        with pytest.raises(PeriodNotFoundError):
            end_period(group_id=group.id, user=admin_user, period_id=uuid4())


@pytest.mark.django_db
class TestLockAndArchive:

    def test_lock_period(self, group, admin_user, ended_period):
        period = lock_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

        assert period.is_locked is True
        assert period.status == PeriodStatus.LOCKED
        assert Notification.objects.filter(type=NotificationType.PERIOD_LOCKED).count() == 3

    def test_lock_twice(self, group, admin_user, ended_period):
        lock_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

        with pytest.raises(PeriodStateError):
            lock_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

    def test_locked_period_rejects_edits(self, group, admin_user, ended_period):
        lock_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

        with pytest.raises(PeriodLockedError):
            resolve_editable_period(group_id=group.id, day=date(2026, 8, 10))

    def test_unlock_defaults_to_ended(self, group, admin_user, ended_period):
        lock_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

        period = unlock_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

        assert period.is_locked is False
        assert period.status == PeriodStatus.ENDED

    def test_unlock_as_active_while_another_is_active(self, group, admin_user, ended_period, active_period):
        lock_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

        with pytest.raises(ActivePeriodExistsError):
            unlock_period(
                group_id=group.id,
                user=admin_user,
                period_id=ended_period.id,
                status=PeriodStatus.ACTIVE,
            )

    def test_unlock_requires_lock(self, group, admin_user, ended_period):
        with pytest.raises(PeriodStateError):
            unlock_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

    def test_archive_active_period_ends_it(self, group, admin_user, active_period):
        period = archive_period(group_id=group.id, user=admin_user, period_id=active_period.id)

        assert period.status == PeriodStatus.ARCHIVED
        assert period.end_date == timezone.localdate()
        assert get_current_period(group_id=group.id) is None

    def test_archived_hidden_from_list(self, group, admin_user, ended_period, active_period):
        archive_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

        assert list(list_periods(group_id=group.id)) == [active_period]
        assert len(list_periods(group_id=group.id, include_archived=True)) == 2

    def test_member_cannot_lock(self, group, member_user, ended_period):
        with pytest.raises(PeriodPermissionError):
            lock_period(group_id=group.id, user=member_user, period_id=ended_period.id)

    def test_archived_period_rejects_edits(self, group, admin_user, ended_period):
        archive_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

        with pytest.raises(PeriodLockedError, match="archived"):
            resolve_editable_period(group_id=group.id, day=date(2026, 8, 15))

    def test_lock_closes_open_ended_period(self, group, admin_user, active_period):
        period = lock_period(group_id=group.id, user=admin_user, period_id=active_period.id)

        assert period.end_date == max(timezone.localdate(), active_period.start_date)

    def test_locked_dates_stay_frozen_under_newer_period(self, group, admin_user, ended_period):
        lock_period(group_id=group.id, user=admin_user, period_id=ended_period.id)
        newer = MealPeriod.objects.create(
            group=group,
            name="Overlapping",
            start_date=date(2026, 8, 15),
            status=PeriodStatus.ACTIVE,
            created_by=admin_user,
        )

        assert get_period_for_date(group_id=group.id, day=date(2026, 8, 20)) == newer
        with pytest.raises(PeriodLockedError):
            resolve_editable_period(group_id=group.id, day=date(2026, 8, 20))
        assert resolve_editable_period(group_id=group.id, day=date(2026, 9, 2)) == newer


@pytest.mark.django_db
class TestRestartPeriod:

    def test_restart_copies_settings(self, group, admin_user, ended_period):
        period = restart_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

        assert period.name == 'August 2026 (Restarted)'
        assert period.status == PeriodStatus.ACTIVE
        assert period.start_date == timezone.localdate()
        assert period.end_date is None
        assert period.carry_forward is True
        assert period.opening_balance == Decimal('250.00')
        assert period.notes == 'Summer'

    def test_second_restart_is_numbered(self, group, admin_user, ended_period):
        first = restart_period(group_id=group.id, user=admin_user, period_id=ended_period.id)
        end_period(group_id=group.id, user=admin_user, period_id=first.id)

        second = restart_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

        assert second.name == 'August 2026 (Restarted 2)'

    def test_custom_name(self, group, admin_user, ended_period):
        period = restart_period(
            group_id=group.id,
            user=admin_user,
            period_id=ended_period.id,
            new_name='Autumn',
        )

        assert period.name == 'Autumn'

    def test_restart_while_active_rejected(self, group, admin_user, ended_period, active_period):
        with pytest.raises(ActivePeriodExistsError):
            restart_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

    def test_restart_with_data_moves_records(self, group, admin_user, member_user, ended_period):
        meal = Meal.objects.create(
            user=member_user, group=group, date=date(2026, 8, 2),
            type=MealType.LUNCH, period=ended_period,
        )

        period = restart_period(
            group_id=group.id,
            user=admin_user,
            period_id=ended_period.id,
            with_data=True,
        )

        meal.refresh_from_db()
        assert meal.period == period

    def test_restart_without_data_keeps_records(self, group, admin_user, member_user, ended_period):
        meal = Meal.objects.create(
            user=member_user, group=group, date=date(2026, 8, 2),
            type=MealType.LUNCH, period=ended_period,
        )

        restart_period(group_id=group.id, user=admin_user, period_id=ended_period.id)

        meal.refresh_from_db()
        assert meal.period == ended_period


@pytest.mark.django_db
class TestLookups:

    def test_open_ended_period_contains_future_dates(self, group, active_period):
        far = timezone.localdate() + timedelta(days=365)

        assert get_period_for_date(group_id=group.id, day=far) == active_period

    def test_date_before_all_periods(self, group, active_period):
        assert get_period_for_date(group_id=group.id, day=date(2020, 1, 1)) is None

    def test_periods_by_month(self, group, ended_period, active_period):
        august = get_periods_by_month(group_id=group.id, year=2026, month=8)
        october = get_periods_by_month(group_id=group.id, year=2026, month=10)

        assert list(august) == [ended_period]
        assert list(october) == [active_period]

    def test_get_period_of_other_group(self, group):
        with pytest.raises(PeriodNotFoundError):
            get_period(group_id=group.id, period_id=uuid4())


@pytest.mark.django_db
class TestMonthPeriod:

    def test_monthly_group_gets_current_month(self, group):
        group.period_mode = PeriodMode.MONTHLY
        group.save()

        period = ensure_month_period(group_id=group.id)

        today = timezone.localdate()
        assert period.name == month_period_name(today)
        assert period.start_date == today.replace(day=1)
        assert period.status == PeriodStatus.ACTIVE

    def test_existing_active_period_is_kept(self, group, active_period):
        group.period_mode = PeriodMode.MONTHLY
        group.save()

        assert ensure_month_period(group_id=group.id) == active_period
        assert MealPeriod.objects.filter(group=group).count() == 1

    def test_custom_group_without_period(self, group):
        assert ensure_month_period(group_id=group.id) is None

    def test_locked_month_is_not_reopened(self, group, admin_user):
        group.period_mode = PeriodMode.MONTHLY
        group.save()
        month = ensure_month_period(group_id=group.id)
        lock_period(group_id=group.id, user=admin_user, period_id=month.id)

        assert ensure_month_period(group_id=group.id) is None
        assert MealPeriod.objects.filter(group=group).count() == 1
        with pytest.raises(PeriodLockedError):
            toggle_meal(
                group_id=group.id,
                user=admin_user,
                target_user_id=admin_user.id,
                day=timezone.localdate(),
                meal_type=MealType.DINNER,
                action="add",
            )

    def test_archived_month_is_not_reopened(self, group, admin_user):
        group.period_mode = PeriodMode.MONTHLY
        group.save()
        month = ensure_month_period(group_id=group.id)
        archive_period(group_id=group.id, user=admin_user, period_id=month.id)

        assert ensure_month_period(group_id=group.id) is None
        assert MealPeriod.objects.filter(group=group).count() == 1


@pytest.mark.django_db
class TestPeriodSummary:

    def test_summary_totals(self, group, admin_user, member_user, active_period):
        Meal.objects.create(user=member_user, group=group, date=date(2026, 9, 2), type=MealType.LUNCH, period=active_period)
        Meal.objects.create(user=admin_user, group=group, date=date(2026, 9, 2), type=MealType.LUNCH, period=active_period)
        GuestMeal.objects.create(user=member_user, group=group, date=date(2026, 9, 2), type=MealType.DINNER, count=3, period=active_period)
        ExtraExpense.objects.create(
            group=group, user=admin_user, amount=Decimal('100.00'),
            description='Vegetables', date=date(2026, 9, 2), period=active_period,
        )

        summary = get_period_summary(group_id=group.id, period_id=active_period.id)

        assert summary['total_meals'] == 2
        assert summary['total_guest_meals'] == 3
        assert summary['total_expenses'] == Decimal('100.00')
        assert summary['meal_rate'] == Decimal('20.00')
        assert summary['active_members'] == 1

    def test_active_members_are_current_and_not_banned(self, group, manager_user, member_user, active_period):
        GroupMembership.objects.filter(group=group, user=manager_user).update(is_current=True)
        GroupMembership.objects.filter(group=group, user=member_user).update(is_current=True, is_banned=True)

        summary = get_period_summary(group_id=group.id, period_id=active_period.id)

        assert summary['active_members'] == 2
