"""
Meal settings service.

Group-wide meal rules (times, cutoff, limits) and per-member automatic
meal subscriptions.
"""

import logging
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.analytics.cache import invalidate_group_cache
from apps.groups.models import GroupMembership
from apps.groups.roles import MEAL_ADMIN_ROLES
from apps.groups.services import get_active_membership
from apps.meals.models import MealSettings, AutoMealSettings

from .exceptions import MealPermissionError

logger = logging.getLogger(__name__)

MEAL_SETTINGS_FIELDS = (
    'breakfast_time',
    'lunch_time',
    'dinner_time',
    'auto_meal_enabled',
    'meal_cutoff_time',
    'max_meals_per_day',
    'allow_guest_meals',
    'guest_meal_limit',
)

AUTO_MEAL_FIELDS = (
    'is_enabled',
    'breakfast_enabled',
    'lunch_enabled',
    'dinner_enabled',
    'guest_meal_enabled',
    'start_date',
    'end_date',
    'excluded_dates',
    'excluded_meal_types',
)


def require_meal_member(group_id: UUID, user: User) -> GroupMembership:
    """
    Raises:
        MealPermissionError: If the user is not an active member
    """
    membership = get_active_membership(group_id, user)
    if membership is None:
        raise MealPermissionError("You are not a member of this group")
    return membership


def is_meal_admin(membership: GroupMembership) -> bool:
    return membership.role in MEAL_ADMIN_ROLES


def get_meal_settings(*, group_id: UUID) -> MealSettings:
    """Meal settings of a group, created with defaults on first read."""
    settings, _ = MealSettings.objects.get_or_create(group_id=group_id)
    return settings


@transaction.atomic
def update_meal_settings(*, group_id: UUID, user: User, **fields) -> MealSettings:
    """
    Update the group's meal rules.

    Args:
        group_id: UUID of the group
        user: Admin, manager or meal manager
        **fields: Any of MEAL_SETTINGS_FIELDS

    Raises:
        MealPermissionError: If the user's role cannot manage meals
    """
    membership = require_meal_member(group_id, user)
    if not is_meal_admin(membership):
        raise MealPermissionError("Only admins, managers and meal managers can change meal settings")

    settings = get_meal_settings(group_id=group_id)
    update_fields = ['updated_at']
    for field in MEAL_SETTINGS_FIELDS:
        if field in fields and fields[field] is not None:
            setattr(settings, field, fields[field])
            update_fields.append(field)
    settings.save(update_fields=update_fields)

    invalidate_group_cache(group_id)
    logger.info("Meal settings of group %s updated by %s", group_id, user.id)
    return settings


def get_auto_meal_settings(*, group_id: UUID, user: User) -> AutoMealSettings:
    """
    The member's auto meal settings, created disabled on first read.

    Raises:
        MealPermissionError: If the user is not an active member
    """
    require_meal_member(group_id, user)
    settings, _ = AutoMealSettings.objects.get_or_create(group_id=group_id, user=user)
    return settings


@transaction.atomic
def update_auto_meal_settings(*, group_id: UUID, user: User, **fields) -> AutoMealSettings:
    """
    Update the member's own auto meal subscription.

    Dates in ``excluded_dates`` are stored as ISO strings.

    Raises:
        MealPermissionError: If the user is not an active member
    """
    settings = get_auto_meal_settings(group_id=group_id, user=user)

    if fields.get('excluded_dates') is not None:
        fields['excluded_dates'] = sorted({
            d.isoformat() if hasattr(d, 'isoformat') else str(d)
            for d in fields['excluded_dates']
        })

    update_fields = ['updated_at']
    for field in AUTO_MEAL_FIELDS:
        if field in fields:
            setattr(settings, field, fields[field])
            update_fields.append(field)
    settings.save(update_fields=update_fields)
    return settings
