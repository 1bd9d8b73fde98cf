"""
Automatic meal service.

Adds the subscribed meals of every member with auto meals enabled for a
given day. Runs on demand for one group (meal admins) or for every group
through the ``process_auto_meals`` management command.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Optional
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.analytics.cache import invalidate_group_cache
from apps.meals.models import Meal, GuestMeal, MealSettings, AutoMealSettings
from apps.periods.services import resolve_editable_period, PeriodLockedError

from .exceptions import MealPermissionError
from .settings_management import get_meal_settings, is_meal_admin, require_meal_member

logger = logging.getLogger(__name__)


@transaction.atomic
def trigger_auto_meals(*, group_id: UUID, day: date, user: Optional[User] = None) -> dict:
    """
    Add the auto meals of a group for one day.

    Members whose subscription window does not cover ``day`` (or who
    excluded it) are skipped, and so are members already at
    max_meals_per_day. Meal types already present are left alone,
    and nothing is added beyond max_meals_per_day. With guest meals
    enabled in a subscription, one guest is added per new meal while the
    day's guest limit allows it.

    Args:
        group_id: UUID of the group
        day: Date to process
        user: Meal admin triggering the run; None for scheduled runs

    Returns:
        dict: ``processed`` (meals added), ``skipped`` (members skipped)
        and ``total_users`` (members with auto meals enabled)

    Raises:
        MealPermissionError: If a triggering user is not a meal admin
        PeriodLockedError: If the day falls into a locked period
    """
    if user is not None:
        membership = require_meal_member(group_id, user)
        if not is_meal_admin(membership):
            raise MealPermissionError("Only admins, managers and meal managers can trigger auto meals")

    settings = get_meal_settings(group_id=group_id)
    period = resolve_editable_period(group_id=group_id, day=day)

    subscriptions = list(
        AutoMealSettings.objects
        .filter(
            group_id=group_id,
            is_enabled=True,
            user__group_memberships__group_id=group_id,
            user__group_memberships__is_banned=False,
        )
        .select_related('user')
    )

    existing = defaultdict(set)
    for user_id, meal_type in Meal.objects.filter(group_id=group_id, date=day).values_list('user_id', 'type'):
        existing[user_id].add(meal_type)

    guests = defaultdict(int)
    guest_types = defaultdict(set)
    for user_id, meal_type, count in GuestMeal.objects.filter(group_id=group_id, date=day).values_list('user_id', 'type', 'count'):
        guests[user_id] += count
        guest_types[user_id].add(meal_type)

    new_meals = []
    new_guest_meals = []
    processed = 0
    skipped = 0

    for subscription in subscriptions:
        user_id = subscription.user_id
        if not subscription.applies_on(day) or len(existing[user_id]) >= settings.max_meals_per_day:
            skipped += 1
            continue

        for meal_type in subscription.enabled_types():
            if meal_type in existing[user_id]:
                continue
            if len(existing[user_id]) >= settings.max_meals_per_day:
                break

            new_meals.append(Meal(
                group_id=group_id,
                user_id=user_id,
                date=day,
                type=meal_type,
                period=period,
            ))
            existing[user_id].add(meal_type)
            processed += 1

            if _adds_guest(subscription, settings, guests[user_id], guest_types[user_id], meal_type):
                new_guest_meals.append(GuestMeal(
                    group_id=group_id,
                    user_id=user_id,
                    date=day,
                    type=meal_type,
                    count=1,
                    period=period,
                ))
                guests[user_id] += 1
                guest_types[user_id].add(meal_type)

    Meal.objects.bulk_create(new_meals)
    GuestMeal.objects.bulk_create(new_guest_meals)

    if new_meals or new_guest_meals:
        invalidate_group_cache(group_id)

    logger.info(
        "Auto meals for group %s on %s: %s added, %s member(s) skipped",
        group_id, day, processed, skipped
    )
    return {
        'processed': processed,
        'skipped': skipped,
        'total_users': len(subscriptions),
    }


def _adds_guest(subscription, settings, guest_total, guest_types, meal_type) -> bool:
    return (
        subscription.guest_meal_enabled
        and settings.allow_guest_meals
        and meal_type not in guest_types
        and guest_total < settings.guest_meal_limit
    )


def process_auto_meals_for_all_groups(*, day: date) -> dict:
    """
    Run ``trigger_auto_meals`` for every group with auto meals enabled.

    Groups whose day falls into a locked period are skipped.

    Returns:
        dict: ``{group_id: result}`` of the processed groups
    """
    results = {}
    group_ids = MealSettings.objects.filter(auto_meal_enabled=True).values_list('group_id', flat=True)
    for group_id in group_ids:
        try:
            results[group_id] = trigger_auto_meals(group_id=group_id, day=day)
        except PeriodLockedError:
            logger.warning("Skipping auto meals of group %s: %s is in a locked period", group_id, day)
    return results
