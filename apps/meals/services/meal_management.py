"""
Meal service.

Adds and removes members' meals, lists them, and computes meal counts.
The period of every meal is resolved from its date; meals of a locked
period cannot change.
"""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, QuerySet, Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.analytics.analytics import resolve_period
from apps.analytics.cache import invalidate_group_cache
from apps.groups.models import GroupMembership
from apps.meals.models import Meal, GuestMeal, MealSettings, MealType
from apps.periods.services import resolve_editable_period

from .exceptions import (
    MealPermissionError,
    MealNotFoundError,
    InvalidMealActionError,
    MealLimitError,
    MealCutoffError,
)
from .settings_management import get_meal_settings, is_meal_admin, require_meal_member

logger = logging.getLogger(__name__)

ADD = 'add'
REMOVE = 'remove'


def _meal_time(settings: MealSettings, meal_type: str):
    return {
        MealType.BREAKFAST: settings.breakfast_time,
        MealType.LUNCH: settings.lunch_time,
        MealType.DINNER: settings.dinner_time,
    }[meal_type]


def check_cutoff(settings: MealSettings, day: date, meal_type: str) -> None:
    """
    Regular members cannot edit past days. Today's meal closes at the
    earlier of its serving time and the group's meal cutoff time.

    Raises:
        MealCutoffError: If the day or meal is closed
    """
    now = timezone.localtime()
    today = now.date()
    if day < today:
        raise MealCutoffError("Meals of past days can no longer be changed")
    if day > today:
        return

    cutoff = min(_meal_time(settings, meal_type), settings.meal_cutoff_time)
    if now.time() >= cutoff:
        raise MealCutoffError(
            f"Meal time cutoff has passed ({cutoff.strftime('%H:%M')})"
        )


@transaction.atomic
def toggle_meal(
    *,
    group_id: UUID,
    user: User,
    target_user_id: UUID,
    day: date,
    meal_type: str,
    action: str
) -> Optional[Meal]:
    """
    Add or remove one meal of a member.

    Args:
        group_id: UUID of the group
        user: Member performing the change
        target_user_id: Member whose meal changes (self unless meal admin)
        day: Date of the meal
        meal_type: MealType value
        action: ``'add'`` or ``'remove'``

    Returns:
        The meal after ``add`` (existing meals are returned unchanged),
        None after ``remove``

    Raises:
        MealPermissionError: If the user may not change the target's meals
        MealCutoffError: If a regular member edits after the cutoff
        MealLimitError: If the target already has max_meals_per_day meals
        MealNotFoundError: If the meal to remove does not exist
        PeriodLockedError: If the day falls into a locked period
    """
    if action not in (ADD, REMOVE):
        raise InvalidMealActionError(f"Unknown action '{action}', expected 'add' or 'remove'")

    membership = require_meal_member(group_id, user)
    privileged = is_meal_admin(membership)

    if str(target_user_id) != str(user.id):
        if not privileged:
            raise MealPermissionError("You can only change your own meals")
        target_is_member = GroupMembership.objects.filter(
            group_id=group_id,
            user_id=target_user_id,
            is_banned=False
        ).exists()
        if not target_is_member:
            raise MealPermissionError("The selected user is not a member of this group")

    period = resolve_editable_period(group_id=group_id, day=day)
    settings = get_meal_settings(group_id=group_id)

    if not privileged:
        check_cutoff(settings, day, meal_type)

    meals = Meal.objects.filter(
        group_id=group_id,
        user_id=target_user_id,
        date=day
    )

    if action == REMOVE:
        deleted, _ = meals.filter(type=meal_type).delete()
        if not deleted:
            raise MealNotFoundError("Meal not found")
        invalidate_group_cache(group_id)
        return None

    existing = meals.filter(type=meal_type).first()
    if existing is not None:
        return existing

    if meals.count() >= settings.max_meals_per_day:
        raise MealLimitError(f"Maximum {settings.max_meals_per_day} meals per day reached")

    meal = Meal.objects.create(
        group_id=group_id,
        user_id=target_user_id,
        date=day,
        type=meal_type,
        period=period,
    )
    invalidate_group_cache(group_id)
    logger.debug("Meal %s %s added for %s by %s", meal_type, day, target_user_id, user.id)
    return meal


def get_meals(
    *,
    group_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: Optional[UUID] = None,
    period_id: Optional[UUID] = None
) -> QuerySet[Meal]:
    """Meals of a group, optionally narrowed by date range, member and period."""
    qs = Meal.objects.filter(group_id=group_id).select_related('user')
    if start_date:
        qs = qs.filter(date__gte=start_date)
    if end_date:
        qs = qs.filter(date__lte=end_date)
    if user_id:
        qs = qs.filter(user_id=user_id)
    if period_id:
        qs = qs.filter(period_id=period_id)
    return qs.order_by('-date', 'type')


def get_meal_stats(*, group_id: UUID, period_id: Optional[UUID] = None) -> dict:
    """
    Meal counts of a period (the current one by default).

    Returns:
        dict with ``period_id``, ``total_meals``, ``total_guest_meals``,
        ``by_type`` ({MealType: count}) and ``by_user`` rows.
    """
    period = resolve_period(group_id, period_id)
    if period is None:
        return {
            'period_id': None,
            'total_meals': 0,
            'total_guest_meals': 0,
            'by_type': {t: 0 for t in MealType.values},
            'by_user': [],
        }

    meals = Meal.objects.filter(group_id=group_id, period=period)
    guests = GuestMeal.objects.filter(group_id=group_id, period=period)

    by_type = {t: 0 for t in MealType.values}
    for row in meals.values('type').annotate(n=Count('id')):
        by_type[row['type']] = row['n']

    guests_by_user = dict(
        guests.values('user_id').annotate(n=Sum('count')).values_list('user_id', 'n')
    )
    by_user = []
    for row in (
        meals.values('user_id', 'user__display_name', 'user__email')
        .annotate(n=Count('id'))
        .order_by('-n')
    ):
        by_user.append({
            'user_id': row['user_id'],
            'name': row['user__display_name'] or row['user__email'].split('@')[0],
            'meals': row['n'],
            'guest_meals': guests_by_user.get(row['user_id'], 0),
        })

    return {
        'period_id': period.id,
        'total_meals': meals.count(),
        'total_guest_meals': sum(guests_by_user.values()),
        'by_type': by_type,
        'by_user': by_user,
    }
