"""
Analytics Module
=================

This module provides the period calculations behind billing and the
dashboard: meal rate, per-member costs, and expense breakdowns.

Classes:
    MealCalculations: Meal rate and per-member cost/balance figures.
    DashboardQueries: Cached dashboard payload for one member.
    ExpenseAnalytics: Extra-expense breakdowns for charts.
    UserAnalytics: One member's figures across all of their groups.

Key Features:
    - Meal rate = total extra expenses / total meals (guest meals included)
    - Per-member cost, paid amount and balance
    - Expense breakdown by type, by member, and per day
    - Meal rate across periods and expenses per calendar month
    - Group-scoped caching (see ``apps.analytics.cache``)

Example:
    Getting a period's meal rate::

        from apps.analytics.analytics import MealCalculations

        rate = MealCalculations.meal_rate(group.id, period.id)
        rows = MealCalculations.user_summaries(group.id, period.id)

Note:
    This module is read-only and doesn't modify any data. All methods
    are static and can be called without instantiation. A missing period
    yields zero figures rather than an error.
"""

import calendar
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Sum, Count
from django.db.models.functions import Coalesce, TruncMonth
from django.utils import timezone

from apps.finance.models import ExtraExpense, Payment, PaymentStatus
from apps.groups.models import GroupMembership
from apps.meals.models import Meal, GuestMeal
from apps.notifications.models import Notification
from apps.periods.models import MealPeriod, PeriodStatus
from apps.periods.utils import active_period, month_bounds

from .cache import cached
from .exceptions import PeriodNotFoundError

ZERO = Decimal('0.00')
CENT = Decimal('0.01')
DASHBOARD_TTL = 300
RECENT_ACTIVITY_LIMIT = 10
TREND_PERIODS = 6
TREND_MONTHS = 6


def _money(value) -> Decimal:
    return Decimal(value or 0).quantize(CENT, rounding=ROUND_HALF_UP)


class MealCalculations:
    """
    Period billing figures.

    Methods:
        total_meals: Meals plus guest meals of a period.
        total_expenses: Sum of the period's extra expenses.
        meal_rate: Cost of one meal in the period (cached).
        user_meal_count: Meals plus hosted guest meals of one member.
        user_summaries: Meals, cost, paid and balance of every member.
    """

    @staticmethod
    def total_meals(group_id, period_id) -> int:
        if period_id is None:
            return 0
        meals = Meal.objects.filter(group_id=group_id, period_id=period_id).count()
        guests = (
            GuestMeal.objects
            .filter(group_id=group_id, period_id=period_id)
            .aggregate(total=Coalesce(Sum('count'), 0))['total']
        )
        return meals + guests

    @staticmethod
    def total_expenses(group_id, period_id) -> Decimal:
        if period_id is None:
            return ZERO
        total = (
            ExtraExpense.objects
            .filter(group_id=group_id, period_id=period_id)
            .aggregate(total=Sum('amount'))['total']
        )
        return _money(total)

    @staticmethod
    def total_payments(group_id, period_id) -> Decimal:
        if period_id is None:
            return ZERO
        total = (
            Payment.objects
            .filter(group_id=group_id, period_id=period_id, status=PaymentStatus.COMPLETED)
            .aggregate(total=Sum('amount'))['total']
        )
        return _money(total)

    @staticmethod
    def meal_rate(group_id, period_id) -> Decimal:
        """
        Cost of one meal: total extra expenses / total meals.

        Args:
            group_id (UUID): The group.
            period_id (UUID | None): The period; None yields 0.

        Returns:
            Decimal: Rate rounded to 2 decimals, 0 when there are no meals.
        """
        if period_id is None:
            return ZERO

        def compute():
            meals = MealCalculations.total_meals(group_id, period_id)
            if meals == 0:
                return ZERO
            return _money(MealCalculations.total_expenses(group_id, period_id) / meals)

        return cached(group_id, f'meal-rate:{period_id}', compute)

    @staticmethod
    def user_meal_count(group_id, user_id, period_id) -> int:
        if period_id is None:
            return 0
        meals = Meal.objects.filter(group_id=group_id, period_id=period_id, user_id=user_id).count()
        guests = (
            GuestMeal.objects
            .filter(group_id=group_id, period_id=period_id, user_id=user_id)
            .aggregate(total=Coalesce(Sum('count'), 0))['total']
        )
        return meals + guests

    @staticmethod
    def user_summaries(group_id, period_id) -> list:
        """
        Per-member billing of a period.

        Returns:
            list[dict]: One row per active member with keys ``user_id``,
            ``name``, ``email``, ``role``, ``meals``, ``guest_meals``,
            ``total_meals``, ``cost``, ``paid`` and ``balance``
            (paid - cost).
        """
        rate = MealCalculations.meal_rate(group_id, period_id)

        memberships = (
            GroupMembership.objects
            .filter(group_id=group_id, is_banned=False)
            .select_related('user')
            .order_by('joined_at')
        )

        meals_by_user = {}
        guests_by_user = {}
        paid_by_user = {}
        if period_id is not None:
            meals_by_user = dict(
                Meal.objects
                .filter(group_id=group_id, period_id=period_id)
                .values('user_id')
                .annotate(n=Count('id'))
                .values_list('user_id', 'n')
            )
            guests_by_user = dict(
                GuestMeal.objects
                .filter(group_id=group_id, period_id=period_id)
                .values('user_id')
                .annotate(n=Sum('count'))
                .values_list('user_id', 'n')
            )
            paid_by_user = dict(
                Payment.objects
                .filter(group_id=group_id, period_id=period_id, status=PaymentStatus.COMPLETED)
                .values('user_id')
                .annotate(total=Sum('amount'))
                .values_list('user_id', 'total')
            )

        rows = []
        for membership in memberships:
            user = membership.user
            meals = meals_by_user.get(user.id, 0)
            guests = guests_by_user.get(user.id, 0) or 0
            total = meals + guests
            cost = _money(rate * total)
            paid = _money(paid_by_user.get(user.id))
            rows.append({
                'user_id': user.id,
                'name': user.get_display_name(),
                'email': user.email,
                'role': membership.role,
                'meals': meals,
                'guest_meals': guests,
                'total_meals': total,
                'cost': cost,
                'paid': paid,
                'balance': paid - cost,
            })
        return rows

    @staticmethod
    def rate_trend(group_id, limit=TREND_PERIODS) -> list:
        """
        Meal rate of the group's latest periods, oldest first.

        Archived periods are left out.

        Returns:
            list[dict]: ``period_id``, ``name``, ``start_date``, ``status``
            and ``meal_rate`` per period.
        """
        periods = list(
            MealPeriod.objects
            .filter(group_id=group_id)
            .exclude(status=PeriodStatus.ARCHIVED)
            .order_by('-start_date', '-created_at')[:limit]
        )
        return [
            {
                'period_id': period.id,
                'name': period.name,
                'start_date': period.start_date,
                'status': period.status,
                'meal_rate': MealCalculations.meal_rate(group_id, period.id),
            }
            for period in reversed(periods)
        ]


class DashboardQueries:
    """Dashboard payload of one member, cached per group, period and user."""

    @staticmethod
    def _recent_activity(group_id, user):
        items = []
        for meal in (
            Meal.objects.filter(group_id=group_id)
            .select_related('user')
            .order_by('-created_at')[:RECENT_ACTIVITY_LIMIT]
        ):
            items.append({
                'kind': 'meal',
                'at': meal.created_at,
                'text': f"{meal.user.get_display_name()} added {meal.get_type_display().lower()} for {meal.date}",
            })
        for payment in (
            Payment.objects.filter(group_id=group_id)
            .select_related('user')
            .order_by('-created_at')[:RECENT_ACTIVITY_LIMIT]
        ):
            items.append({
                'kind': 'payment',
                'at': payment.created_at,
                'text': f"{payment.user.get_display_name()} paid {payment.amount}",
            })
        for notification in (
            Notification.objects.filter(group_id=group_id, user=user)
            .order_by('-created_at')[:RECENT_ACTIVITY_LIMIT]
        ):
            items.append({
                'kind': 'notification',
                'at': notification.created_at,
                'text': notification.message,
            })

        items.sort(key=lambda item: item['at'], reverse=True)
        return items[:RECENT_ACTIVITY_LIMIT]

    @staticmethod
    def group_dashboard(group_id, user) -> dict:
        """
        Everything the group home screen shows.

        Returns:
            dict: ``period`` (or None), ``meal_rate``, ``total_meals``,
            ``total_expenses``, ``total_payments``, ``member_count``, the
            member's own figures under ``me``, and ``recent_activity``.
        """
        period = active_period(group_id)
        period_id = period.id if period else None

        def compute():
            summaries = MealCalculations.user_summaries(group_id, period_id)
            mine = next((row for row in summaries if row['user_id'] == user.id), None)
            return {
                'period': {
                    'id': period.id,
                    'name': period.name,
                    'start_date': period.start_date,
                    'end_date': period.end_date,
                    'status': period.status,
                } if period else None,
                'meal_rate': MealCalculations.meal_rate(group_id, period_id),
                'total_meals': MealCalculations.total_meals(group_id, period_id),
                'total_expenses': MealCalculations.total_expenses(group_id, period_id),
                'total_payments': MealCalculations.total_payments(group_id, period_id),
                'member_count': len(summaries),
                'me': {
                    'meals': mine['total_meals'],
                    'cost': mine['cost'],
                    'paid': mine['paid'],
                    'balance': mine['balance'],
                } if mine else None,
                'recent_activity': DashboardQueries._recent_activity(group_id, user),
            }

        return cached(
            group_id,
            f'dashboard:{period_id}:{user.id}',
            compute,
            timeout=DASHBOARD_TTL
        )


class ExpenseAnalytics:
    """Extra-expense breakdowns of a period."""

    @staticmethod
    def _expenses(group_id, period_id):
        if period_id is None:
            return ExtraExpense.objects.none()
        return ExtraExpense.objects.filter(group_id=group_id, period_id=period_id)

    @staticmethod
    def breakdown_by_type(group_id, period_id) -> list:
        rows = (
            ExpenseAnalytics._expenses(group_id, period_id)
            .values('type')
            .annotate(total=Sum('amount'), count=Count('id'))
            .order_by('-total')
        )
        return [
            {'type': row['type'], 'total': _money(row['total']), 'count': row['count']}
            for row in rows
        ]

    @staticmethod
    def top_expenses(group_id, period_id, limit=10) -> list:
        expenses = (
            ExpenseAnalytics._expenses(group_id, period_id)
            .select_related('user')
            .order_by('-amount', '-date')[:limit]
        )
        return [
            {
                'id': e.id,
                'description': e.description,
                'amount': e.amount,
                'type': e.type,
                'date': e.date,
                'user': e.user.get_display_name(),
            }
            for e in expenses
        ]

    @staticmethod
    def totals_by_user(group_id, period_id) -> list:
        rows = (
            ExpenseAnalytics._expenses(group_id, period_id)
            .values('user_id', 'user__display_name', 'user__email')
            .annotate(total=Sum('amount'), count=Count('id'))
            .order_by('-total')
        )
        return [
            {
                'user_id': row['user_id'],
                'name': row['user__display_name'] or row['user__email'].split('@')[0],
                'total': _money(row['total']),
                'count': row['count'],
            }
            for row in rows
        ]

    @staticmethod
    def daily_trend(group_id, period_id) -> list:
        rows = (
            ExpenseAnalytics._expenses(group_id, period_id)
            .values('date')
            .annotate(total=Sum('amount'))
            .order_by('date')
        )
        return [{'date': row['date'], 'total': _money(row['total'])} for row in rows]

    @staticmethod
    def monthly_totals(group_id, months=TREND_MONTHS, today=None) -> list:
        """
        Extra expenses per calendar month, by expense date.

        Covers the current month and the ``months - 1`` before it, oldest
        first. Months without expenses are listed with a zero total.
        """
        today = today or timezone.localdate()
        firsts = [_month_start(today, back) for back in range(months - 1, -1, -1)]
        _, last_day = month_bounds(today)

        rows = (
            ExtraExpense.objects
            .filter(group_id=group_id, date__gte=firsts[0], date__lte=last_day)
            .annotate(month=TruncMonth('date'))
            .values('month')
            .annotate(total=Sum('amount'))
            .order_by('month')
        )
        totals = {row['month']: row['total'] for row in rows}

        return [
            {
                'month': first,
                'label': f"{calendar.month_abbr[first.month]} {first.year}",
                'total': _money(totals.get(first)),
            }
            for first in firsts
        ]

    @staticmethod
    def summary(group_id, period_id) -> dict:
        """All breakdowns of a period in one payload (cached)."""
        def compute():
            return {
                'total': MealCalculations.total_expenses(group_id, period_id),
                'by_type': ExpenseAnalytics.breakdown_by_type(group_id, period_id),
                'top': ExpenseAnalytics.top_expenses(group_id, period_id),
                'by_user': ExpenseAnalytics.totals_by_user(group_id, period_id),
                'daily': ExpenseAnalytics.daily_trend(group_id, period_id),
            }

        return cached(group_id, f'expenses:{period_id}', compute)


def _month_start(day: date, back: int) -> date:
    """First day of the month ``back`` months before the month of ``day``."""
    year, month = divmod(day.year * 12 + day.month - 1 - back, 12)
    return date(year, month + 1, 1)


def group_trends(group_id) -> dict:
    """Meal rate across periods and monthly expenses (cached)."""
    today = timezone.localdate()

    def compute():
        return {
            'meal_rate': MealCalculations.rate_trend(group_id),
            'monthly_expenses': ExpenseAnalytics.monthly_totals(group_id, today=today),
        }

    return cached(group_id, f'trends:{today}', compute)


class UserAnalytics:
    """Figures of one member across every group they belong to."""

    @staticmethod
    def groups_overview(user) -> dict:
        """
        The current period of each of the user's groups.

        Returns:
            dict: ``groups`` (one row per non-banned membership, the
            current group first) and ``totals`` of the user's own meals,
            cost, paid and balance over all of them.
        """
        memberships = (
            GroupMembership.objects
            .filter(user=user, is_banned=False)
            .select_related('group')
            .order_by('-is_current', 'joined_at')
        )

        groups = []
        totals = {'meals': 0, 'cost': ZERO, 'paid': ZERO, 'balance': ZERO}
        for membership in memberships:
            group_id = membership.group_id
            period = active_period(group_id)
            period_id = period.id if period else None
            summaries = MealCalculations.user_summaries(group_id, period_id)
            mine = next((row for row in summaries if row['user_id'] == user.id), None)

            groups.append({
                'group_id': group_id,
                'name': membership.group.name,
                'role': membership.role,
                'is_current': membership.is_current,
                'member_count': len(summaries),
                'period': period.name if period else None,
                'meal_rate': MealCalculations.meal_rate(group_id, period_id),
                'total_meals': MealCalculations.total_meals(group_id, period_id),
                'total_expenses': MealCalculations.total_expenses(group_id, period_id),
                'my_meals': mine['total_meals'] if mine else 0,
                'my_balance': mine['balance'] if mine else ZERO,
            })
            if mine:
                totals['meals'] += mine['total_meals']
                totals['cost'] += mine['cost']
                totals['paid'] += mine['paid']
                totals['balance'] += mine['balance']

        return {'groups': groups, 'totals': totals}


def resolve_period(group_id, period_id=None):
    """The requested period of the group, or its active period when omitted."""
    if period_id is None:
        return active_period(group_id)
    return MealPeriod.objects.filter(group_id=group_id, id=period_id).first()


def get_report_period(group_id, period_id=None):
    """
    Like ``resolve_period`` but an unknown ``period_id`` is an error.

    Raises:
        PeriodNotFoundError: If period_id doesn't belong to the group
    """
    period = resolve_period(group_id, period_id)
    if period_id is not None and period is None:
        raise PeriodNotFoundError("Period not found")
    return period
