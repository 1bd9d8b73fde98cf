"""
Guest meal service.

A member records how many guests they host per day and meal type. The
guests count toward the period's meals and are billed to the host.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet, Sum

from apps.accounts.models import User
from apps.analytics.cache import invalidate_group_cache
from apps.meals.models import GuestMeal
from apps.periods.services import resolve_editable_period

from .exceptions import (
    MealPermissionError,
    GuestMealsDisabledError,
    GuestMealLimitError,
    GuestMealNotFoundError,
)
from .meal_management import check_cutoff
from .settings_management import get_meal_settings, is_meal_admin, require_meal_member


@transaction.atomic
def upsert_guest_meal(
    *,
    group_id: UUID,
    user: User,
    day: date,
    meal_type: str,
    count: int
) -> Optional[GuestMeal]:
    """
    Set the number of guests the user hosts for one meal.

    The day's total across meal types, with this type replaced by
    ``count``, must stay within guest_meal_limit. A count of 0 deletes
    the entry.

    Returns:
        The guest meal, or None when it was deleted

    Raises:
        MealPermissionError: If the user is not an active member
        GuestMealsDisabledError: If the group does not allow guest meals
        GuestMealLimitError: If the day's total would exceed the limit
        MealCutoffError: If a regular member edits after the cutoff
        PeriodLockedError: If the day falls into a locked period
    """
    membership = require_meal_member(group_id, user)
    settings = get_meal_settings(group_id=group_id)

    if not settings.allow_guest_meals:
        raise GuestMealsDisabledError("Guest meals are not allowed in this group")

    period = resolve_editable_period(group_id=group_id, day=day)
    if not is_meal_admin(membership):
        check_cutoff(settings, day, meal_type)

    entries = GuestMeal.objects.filter(group_id=group_id, user=user, date=day)

    if count <= 0:
        entries.filter(type=meal_type).delete()
        invalidate_group_cache(group_id)
        return None

    other_types = (
        entries.exclude(type=meal_type)
        .aggregate(total=Sum('count'))['total']
    ) or 0
    if other_types + count > settings.guest_meal_limit:
        raise GuestMealLimitError(
            f"Guest meal limit is {settings.guest_meal_limit} per day "
            f"({other_types} already added for other meals)"
        )

    guest_meal, _ = GuestMeal.objects.update_or_create(
        group_id=group_id,
        user=user,
        date=day,
        type=meal_type,
        defaults={'count': count, 'period': period},
    )
    invalidate_group_cache(group_id)
    return guest_meal


def _get_guest_meal(group_id: UUID, guest_meal_id: UUID) -> GuestMeal:
    try:
        return GuestMeal.objects.get(id=guest_meal_id, group_id=group_id)
    except GuestMeal.DoesNotExist:
        raise GuestMealNotFoundError("Guest meal not found")


@transaction.atomic
def delete_guest_meal(*, group_id: UUID, guest_meal_id: UUID, user: User) -> None:
    """
    Delete a guest meal (host or meal admin).

    Raises:
        GuestMealNotFoundError: If it does not exist in the group
        MealPermissionError: If the user is neither host nor meal admin
        MealCutoffError: If a regular member edits after the cutoff
        PeriodLockedError: If it belongs to a locked period
    """
    membership = require_meal_member(group_id, user)
    guest_meal = _get_guest_meal(group_id, guest_meal_id)
    privileged = is_meal_admin(membership)

    if guest_meal.user_id != user.id and not privileged:
        raise MealPermissionError("You can only remove your own guest meals")

    resolve_editable_period(group_id=group_id, day=guest_meal.date)
    if not privileged:
        check_cutoff(get_meal_settings(group_id=group_id), guest_meal.date, guest_meal.type)

    guest_meal.delete()
    invalidate_group_cache(group_id)


def get_guest_meals(
    *,
    group_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: Optional[UUID] = None,
    period_id: Optional[UUID] = None
) -> QuerySet[GuestMeal]:
    qs = GuestMeal.objects.filter(group_id=group_id).select_related('user')
    if start_date:
        qs = qs.filter(date__gte=start_date)
    if end_date:
        qs = qs.filter(date__lte=end_date)
    if user_id:
        qs = qs.filter(user_id=user_id)
    if period_id:
        qs = qs.filter(period_id=period_id)
    return qs.order_by('-date', 'type')
