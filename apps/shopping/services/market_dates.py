"""
Market duty service.

Market managers assign shopping days to members. A member who misses
their day can be fined when the group has fines enabled; the fine is
booked as a negative ADJUSTMENT on their balance.
"""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.analytics.cache import invalidate_group_cache
from apps.finance.models import AccountTransaction, HistoryAction, TransactionType
from apps.finance.services.transactions import record_history
from apps.groups.models import GroupMembership
from apps.notifications.models import NotificationType
from apps.notifications.services import create_notification
from apps.periods.services import get_current_period
from apps.shopping.models import MarketDate, MarketDateStatus

from .access import require_shopping_member, require_market_manager, can_manage_market
from .exceptions import (
    ShoppingPermissionError,
    MarketDateNotFoundError,
    InvalidAssigneeError,
    DuplicateMarketDateError,
    FineNotAllowedError,
)

logger = logging.getLogger(__name__)


@transaction.atomic
def assign_market_date(*, group_id: UUID, user: User, assignee_id: UUID, date: date) -> MarketDate:
    """
    Give a member market duty on a day.

    Args:
        group_id: UUID of the group
        user: Member with the manage_market permission
        assignee_id: Member taking the duty
        date: Duty day

    Returns:
        MarketDate: The UPCOMING duty

    Raises:
        ShoppingPermissionError: If the user lacks manage_market
        InvalidAssigneeError: If the assignee is not an active member
        DuplicateMarketDateError: If the assignee already has duty that day
    """
    membership = require_market_manager(group_id, user)

    assignee = (
        GroupMembership.objects
        .filter(group_id=group_id, user_id=assignee_id, is_banned=False)
        .select_related('user')
        .first()
    )
    if assignee is None:
        raise InvalidAssigneeError("Assigned user is not a member of this group")

    try:
        with transaction.atomic():
            market_date = MarketDate.objects.create(
                group_id=group_id,
                user=assignee.user,
                date=date,
                created_by=user,
            )
    except IntegrityError:
        raise DuplicateMarketDateError(f"{assignee.user.get_display_name()} already has market duty on {date}")

    group = membership.group
    create_notification(
        user=assignee.user,
        notification_type=NotificationType.MARKET_DATE_ASSIGNED,
        message=f"You have been assigned market duty for {group.name} on {date:%d %b %Y}.",
        group=group,
    )

    logger.info("Market duty on %s assigned to %s in group %s", date, assignee.user_id, group_id)
    return market_date


def list_market_dates(
    *,
    group_id: UUID,
    user_id: Optional[UUID] = None,
    status: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> QuerySet[MarketDate]:
    qs = MarketDate.objects.filter(group_id=group_id).select_related('user')
    if user_id:
        qs = qs.filter(user_id=user_id)
    if status:
        qs = qs.filter(status=status)
    if start_date:
        qs = qs.filter(date__gte=start_date)
    if end_date:
        qs = qs.filter(date__lte=end_date)
    return qs


def _get_market_date(group_id: UUID, market_date_id: UUID) -> MarketDate:
    try:
        return (
            MarketDate.objects
            .select_for_update(of=('self',))
            .select_related('user', 'group')
            .get(id=market_date_id, group_id=group_id)
        )
    except MarketDate.DoesNotExist:
        raise MarketDateNotFoundError("Market date not found")


@transaction.atomic
def update_market_date_status(
    *,
    group_id: UUID,
    market_date_id: UUID,
    user: User,
    status: str
) -> MarketDate:
    """
    Change the status of a market duty (market managers or the assignee).

    Raises:
        ShoppingPermissionError: If the user is neither
        MarketDateNotFoundError: If the duty doesn't exist in the group
    """
    membership = require_shopping_member(group_id, user)
    market_date = _get_market_date(group_id, market_date_id)

    if market_date.user_id != user.id and not can_manage_market(membership):
        raise ShoppingPermissionError("You are not authorized to update this market date")

    market_date.status = status
    market_date.save(update_fields=['status', 'updated_at'])

    if market_date.user_id != user.id:
        create_notification(
            user=market_date.user,
            notification_type=NotificationType.MARKET_DATE_UPDATED,
            message=(
                f"Your market duty on {market_date.date:%d %b %Y} in "
                f"{market_date.group.name} is now {market_date.get_status_display().lower()}."
            ),
            group=market_date.group,
        )
    return market_date


@transaction.atomic
def delete_market_date(*, group_id: UUID, market_date_id: UUID, user: User) -> None:
    require_market_manager(group_id, user)
    market_date = _get_market_date(group_id, market_date_id)
    market_date.delete()


@transaction.atomic
def apply_fine(*, group_id: UUID, market_date_id: UUID, user: User) -> MarketDate:
    """
    Fine a member for a missed market duty.

    The duty is closed as COMPLETED and flagged as fined, and the group's
    fine_amount is debited from the assignee's balance in the current
    period.

    Raises:
        ShoppingPermissionError: If the user lacks manage_market
        MarketDateNotFoundError: If the duty doesn't exist in the group
        FineNotAllowedError: If fines are disabled, or the duty is already
            completed, fined, cancelled or still in the future
    """
    require_market_manager(group_id, user)
    market_date = _get_market_date(group_id, market_date_id)
    group = market_date.group

    if not group.fine_enabled:
        raise FineNotAllowedError("Fines are not enabled for this group")
    if group.fine_amount <= 0:
        raise FineNotAllowedError("The group has no fine amount set")
    if market_date.fined:
        raise FineNotAllowedError("Market date is already fined")
    if market_date.status == MarketDateStatus.COMPLETED:
        raise FineNotAllowedError("Cannot fine a completed market date")
    if market_date.status == MarketDateStatus.CANCELLED:
        raise FineNotAllowedError("Cannot fine a cancelled market date")
    if market_date.date > timezone.localdate():
        raise FineNotAllowedError("Cannot fine a future market date")

    market_date.status = MarketDateStatus.COMPLETED
    market_date.fined = True
    market_date.save(update_fields=['status', 'fined', 'updated_at'])

    entry = AccountTransaction.objects.create(
        group=group,
        user=user,
        target_user=market_date.user,
        amount=-group.fine_amount,
        type=TransactionType.ADJUSTMENT,
        description=f"Fine for missed market duty on {market_date.date}",
        period=get_current_period(group_id=group_id),
        created_by=user,
    )
    record_history(entry, HistoryAction.CREATED, user)

    create_notification(
        user=market_date.user,
        notification_type=NotificationType.MARKET_DATE_UPDATED,
        message=(
            f"You have been fined {group.fine_amount} for missing market duty on "
            f"{market_date.date:%d %b %Y} in {group.name}."
        ),
        group=group,
    )

    invalidate_group_cache(group_id)
    logger.info("Fined %s %s for market duty %s", market_date.user_id, group.fine_amount, market_date.id)
    return market_date
