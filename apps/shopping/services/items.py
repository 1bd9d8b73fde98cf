"""
Shopping list service.

Members add what they bought (or need to buy) to the active period. The
quantity of an item is the money spent on it; purchased items make up
the period's bazaar total.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Q, QuerySet, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.accounts.models import User
from apps.analytics.analytics import resolve_period
from apps.analytics.cache import invalidate_group_cache
from apps.notifications.models import NotificationType
from apps.notifications.services import notify_group_members
from apps.periods.services import get_current_period, resolve_editable_period
from apps.shopping.models import ShoppingItem

from .access import require_shopping_member, can_manage_market
from .exceptions import (
    ShoppingPermissionError,
    ShoppingItemNotFoundError,
    NoActivePeriodError,
)

logger = logging.getLogger(__name__)

ITEM_FIELDS = ('name', 'quantity', 'unit', 'date', 'purchased')
ZERO = Decimal('0.00')


@transaction.atomic
def create_shopping_item(
    *,
    group_id: UUID,
    user: User,
    name: str,
    quantity: Decimal = ZERO,
    unit: str = '',
    date: Optional[date] = None,
    purchased: bool = False
) -> ShoppingItem:
    """
    Add an item to the shopping list.

    The item joins the period its date falls into. The group needs an
    active period.

    Args:
        group_id: UUID of the group
        user: Member adding the item
        name: Item name
        quantity: Money spent on the item
        unit: Optional unit label (kg, pcs...)
        date: Day of the purchase, defaults to today
        purchased: Whether the item is already bought

    Returns:
        ShoppingItem: The created item

    Raises:
        ShoppingPermissionError: If the user is not a member
        NoActivePeriodError: If the group has no active period, or no period
            covers the date
        PeriodLockedError: If the date falls into a locked or archived period
    """
    membership = require_shopping_member(group_id, user)

    if get_current_period(group_id=group_id) is None:
        raise NoActivePeriodError("An active period is required to add shopping items")

    day = date or timezone.localdate()
    period = _period_for_day(group_id, day)

    item = ShoppingItem.objects.create(
        group_id=group_id,
        user=user,
        name=name,
        quantity=quantity,
        unit=unit,
        date=day,
        purchased=purchased,
        period=period,
    )

    group = membership.group
    notify_group_members(
        group=group,
        notification_type=NotificationType.SHOPPING_ADDED,
        message=f"{user.get_display_name()} added {name} to the shopping list of {group.name}.",
        exclude_user=user,
    )

    invalidate_group_cache(group_id)
    logger.info("Shopping item %s added to group %s by %s", item.id, group_id, user.id)
    return item


def _period_for_day(group_id: UUID, day: date):
    period = resolve_editable_period(group_id=group_id, day=day)
    if period is None:
        raise NoActivePeriodError(f"No period covers {day}")
    return period


def _get_item(group_id: UUID, item_id: UUID) -> ShoppingItem:
    try:
        return ShoppingItem.objects.select_for_update().get(id=item_id, group_id=group_id)
    except ShoppingItem.DoesNotExist:
        raise ShoppingItemNotFoundError("Shopping item not found")


def _get_editable_item(group_id: UUID, item_id: UUID, user: User) -> ShoppingItem:
    """
    Item the user may change: their own, or any with manage_market.

    Raises:
        ShoppingPermissionError: If the user may not change the item
        ShoppingItemNotFoundError: If the item doesn't exist in the group
        PeriodLockedError: If the item's day falls into a locked period
    """
    membership = require_shopping_member(group_id, user)
    item = _get_item(group_id, item_id)

    if item.user_id != user.id and not can_manage_market(membership):
        raise ShoppingPermissionError("You can only change your own shopping items")

    resolve_editable_period(group_id=group_id, day=item.date)
    return item


@transaction.atomic
def update_shopping_item(*, group_id: UUID, item_id: UUID, user: User, **fields) -> ShoppingItem:
    """
    Update an item; only fields passed with a value are changed.

    Raises:
        ShoppingPermissionError: If the user may not change the item
        ShoppingItemNotFoundError: If the item doesn't exist in the group
        PeriodLockedError: If the item's current or new day falls into a
            locked period
        NoActivePeriodError: If no period covers the new day
    """
    item = _get_editable_item(group_id, item_id, user)

    new_day = fields.get('date')
    if new_day is not None and new_day != item.date:
        item.period = _period_for_day(group_id, new_day)

    for field in ITEM_FIELDS:
        if fields.get(field) is not None:
            setattr(item, field, fields[field])
    item.save()

    invalidate_group_cache(group_id)
    return item


@transaction.atomic
def toggle_purchased(*, group_id: UUID, item_id: UUID, user: User) -> ShoppingItem:
    item = _get_editable_item(group_id, item_id, user)
    item.purchased = not item.purchased
    item.save(update_fields=['purchased', 'updated_at'])

    invalidate_group_cache(group_id)
    return item


@transaction.atomic
def delete_shopping_item(*, group_id: UUID, item_id: UUID, user: User) -> None:
    item = _get_editable_item(group_id, item_id, user)
    item.delete()

    invalidate_group_cache(group_id)
    logger.info("Shopping item %s deleted by %s", item_id, user.id)


@transaction.atomic
def clear_purchased_items(*, group_id: UUID, user: User) -> int:
    """
    Remove the purchased items of the active period.

    Returns:
        int: Number of deleted items

    Raises:
        ShoppingPermissionError: If the user lacks manage_market
    """
    membership = require_shopping_member(group_id, user)
    if not can_manage_market(membership):
        raise ShoppingPermissionError("You do not have permission to clear the shopping list")

    period = get_current_period(group_id=group_id)
    qs = ShoppingItem.objects.filter(group_id=group_id, purchased=True)
    qs = qs.filter(period=period) if period else qs.filter(period__isnull=True)

    deleted, _ = qs.delete()
    if deleted:
        invalidate_group_cache(group_id)
    logger.info("Cleared %s purchased item(s) in group %s", deleted, group_id)
    return deleted


def list_shopping_items(
    *,
    group_id: UUID,
    period_id: Optional[UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    purchased: Optional[bool] = None
) -> QuerySet[ShoppingItem]:
    qs = ShoppingItem.objects.filter(group_id=group_id).select_related('user')
    if period_id:
        qs = qs.filter(period_id=period_id)
    if start_date:
        qs = qs.filter(date__gte=start_date)
    if end_date:
        qs = qs.filter(date__lte=end_date)
    if purchased is not None:
        qs = qs.filter(purchased=purchased)
    return qs


def shopping_summary(*, group_id: UUID, period_id: Optional[UUID] = None) -> dict:
    """
    Counts and totals of a period's shopping list (current by default).

    Returns:
        dict: ``period_id``, ``total_items``, ``purchased_items``,
        ``pending_items``, ``total_quantity`` and ``purchased_quantity``
    """
    period = resolve_period(group_id, period_id)
    if period is None:
        return {
            'period_id': None,
            'total_items': 0,
            'purchased_items': 0,
            'pending_items': 0,
            'total_quantity': ZERO,
            'purchased_quantity': ZERO,
        }

    totals = ShoppingItem.objects.filter(group_id=group_id, period=period).aggregate(
        total_items=Count('id'),
        purchased_items=Count('id', filter=Q(purchased=True)),
        total_quantity=Coalesce(Sum('quantity'), ZERO),
        purchased_quantity=Coalesce(Sum('quantity', filter=Q(purchased=True)), ZERO),
    )
    return {
        'period_id': period.id,
        'pending_items': totals['total_items'] - totals['purchased_items'],
        **totals,
    }
