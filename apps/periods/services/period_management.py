"""
Meal period service.

Handles the period lifecycle (start, end, lock, archive, restart), the
lookup of the period a date belongs to, and period summaries.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Q, QuerySet, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.accounts.models import User
from apps.analytics.analytics import MealCalculations
from apps.analytics.cache import invalidate_group_cache
from apps.finance.models import AccountTransaction, ExtraExpense, Payment, PaymentStatus
from apps.groups.models import Group, GroupMembership, PeriodMode
from apps.groups.roles import PERIOD_ADMIN_ROLES
from apps.groups.services import get_active_membership
from apps.meals.models import Meal, GuestMeal
from apps.notifications.models import NotificationType
from apps.notifications.services import notify_group_members
from apps.periods.models import MealPeriod, PeriodStatus
from apps.periods.utils import (
    active_period,
    create_month_period,
    month_bounds,
    unique_period_name,
)
from apps.shopping.models import ShoppingItem

from .exceptions import (
    PeriodNotFoundError,
    PeriodPermissionError,
    ActivePeriodExistsError,
    NoActivePeriodError,
    InvalidPeriodDatesError,
    PeriodOverlapError,
    PeriodStateError,
    PeriodLockedError,
)

logger = logging.getLogger(__name__)


def _require_period_admin(group_id: UUID, user: User, action: str) -> GroupMembership:
    membership = get_active_membership(group_id, user)
    if membership is None:
        raise PeriodPermissionError("You are not a member of this group")
    if membership.role not in PERIOD_ADMIN_ROLES:
        raise PeriodPermissionError(f"Insufficient permissions to {action} a period")
    return membership


def _get_group(group_id: UUID, *, lock: bool = False) -> Group:
    qs = Group.objects.select_for_update() if lock else Group.objects
    try:
        return qs.get(id=group_id)
    except Group.DoesNotExist:
        raise PeriodNotFoundError(f"Group with ID {group_id} not found")


def _get_own_period(group_id: UUID, period_id: UUID, *, lock: bool = False) -> MealPeriod:
    qs = MealPeriod.objects.select_for_update() if lock else MealPeriod.objects
    try:
        return qs.get(id=period_id, group_id=group_id)
    except MealPeriod.DoesNotExist:
        raise PeriodNotFoundError("Period not found")


# =============================================================================
# Lookups
# =============================================================================

def get_current_period(*, group_id: UUID) -> Optional[MealPeriod]:
    """The ACTIVE period of the group, or None."""
    return active_period(group_id)


def get_period(*, group_id: UUID, period_id: UUID) -> MealPeriod:
    """
    Get a period of the group.

    Raises:
        PeriodNotFoundError: If the period doesn't exist or belongs to another group
    """
    return _get_own_period(group_id, period_id)


def _covering(group_id: UUID, day: date) -> QuerySet[MealPeriod]:
    return (
        MealPeriod.objects
        .filter(group_id=group_id, start_date__lte=day)
        .filter(Q(end_date__isnull=True) | Q(end_date__gte=day))
    )


def get_period_for_date(*, group_id: UUID, day: date) -> Optional[MealPeriod]:
    """
    Non-archived period whose range contains ``day``.

    An open end date means the period is still running. When ranges
    overlap, the most recently started period wins.
    """
    return (
        _covering(group_id, day)
        .exclude(status=PeriodStatus.ARCHIVED)
        .order_by('-start_date', '-created_at')
        .first()
    )


def get_frozen_period_for_date(*, group_id: UUID, day: date) -> Optional[MealPeriod]:
    """Locked or archived period whose range contains ``day``, if any."""
    return (
        _covering(group_id, day)
        .filter(Q(is_locked=True) | Q(status__in=[PeriodStatus.LOCKED, PeriodStatus.ARCHIVED]))
        .order_by('-start_date', '-created_at')
        .first()
    )


def resolve_editable_period(*, group_id: UUID, day: date) -> Optional[MealPeriod]:
    """
    Period a new entry dated ``day`` belongs to.

    A date inside any locked or archived period stays read-only, even
    when a newer period overlaps it.

    Raises:
        PeriodLockedError: If a locked or archived period covers ``day``
    """
    frozen = get_frozen_period_for_date(group_id=group_id, day=day)
    if frozen is not None:
        if frozen.status == PeriodStatus.ARCHIVED:
            raise PeriodLockedError(f"Period '{frozen.name}' is archived. No further edits are allowed.")
        raise PeriodLockedError(f"Period '{frozen.name}' is locked. No further edits are allowed.")
    return get_period_for_date(group_id=group_id, day=day)


def list_periods(*, group_id: UUID, include_archived: bool = False) -> QuerySet[MealPeriod]:
    qs = MealPeriod.objects.filter(group_id=group_id).select_related('created_by')
    if not include_archived:
        qs = qs.exclude(status=PeriodStatus.ARCHIVED)
    return qs.order_by('-start_date', '-created_at')


def get_periods_by_month(*, group_id: UUID, year: int, month: int) -> QuerySet[MealPeriod]:
    """Periods of the group that overlap the given calendar month."""
    first, last = month_bounds(date(year, month, 1))
    return (
        MealPeriod.objects
        .filter(group_id=group_id, start_date__lte=last)
        .filter(Q(end_date__isnull=True) | Q(end_date__gte=first))
        .order_by('start_date')
    )


# =============================================================================
# Lifecycle
# =============================================================================

def _check_overlap(group_id: UUID, start: date, end: date) -> None:
    overlapping = (
        MealPeriod.objects
        .filter(group_id=group_id, start_date__lte=end)
        .exclude(status=PeriodStatus.ARCHIVED)
        .filter(Q(end_date__isnull=True) | Q(end_date__gte=start))
    )
    clash = overlapping.first()
    if clash is not None:
        raise PeriodOverlapError(f"Period dates overlap with existing period '{clash.name}'")


@transaction.atomic
def start_period(
    *,
    group_id: UUID,
    user: User,
    name: str,
    start_date: date,
    end_date: Optional[date] = None,
    opening_balance: Decimal = Decimal('0'),
    carry_forward: bool = False,
    notes: str = ''
) -> MealPeriod:
    """
    Start a new ACTIVE period.

    A name already used in the group gets a ``" (2)"``, ``" (3)"``...
    suffix.

    Args:
        group_id: UUID of the group
        user: Member starting the period (manager, admin or moderator)
        name: Period name
        start_date: First day
        end_date: Optional last day; must be after start_date
        opening_balance: Money carried into the period
        carry_forward: Whether the closing balance carries into the next period
        notes: Free text

    Returns:
        Created MealPeriod

    Raises:
        PeriodPermissionError: If the user's role cannot manage periods
        ActivePeriodExistsError: If the group already has an active period
        InvalidPeriodDatesError: If end_date is not after start_date
        PeriodOverlapError: If the range overlaps another period
    """
    group = _get_group(group_id, lock=True)
    _require_period_admin(group_id, user, 'start')

    current = active_period(group_id)
    if current is not None:
        raise ActivePeriodExistsError(
            f"There is already an active period: '{current.name}'. End it before starting a new one."
        )

    if end_date is not None:
        if end_date <= start_date:
            raise InvalidPeriodDatesError("End date must be after start date")
        _check_overlap(group_id, start_date, end_date)

    period = MealPeriod.objects.create(
        group=group,
        name=unique_period_name(group_id, name.strip()),
        start_date=start_date,
        end_date=end_date,
        status=PeriodStatus.ACTIVE,
        opening_balance=opening_balance,
        carry_forward=carry_forward,
        notes=notes,
        created_by=user,
    )

    notify_group_members(
        group=group,
        notification_type=NotificationType.PERIOD_STARTED,
        message=f'A new meal period "{period.name}" has started.',
    )
    invalidate_group_cache(group_id)
    logger.info("Period %s started in group %s by %s", period.id, group_id, user.id)
    return period


def _closing_balance(period: MealPeriod) -> Decimal:
    payments = (
        Payment.objects
        .filter(period=period, status=PaymentStatus.COMPLETED)
        .aggregate(total=Sum('amount'))['total']
    ) or Decimal('0')
    expenses = (
        ExtraExpense.objects
        .filter(period=period)
        .aggregate(total=Sum('amount'))['total']
    ) or Decimal('0')
    return Decimal(period.opening_balance) + payments - expenses


@transaction.atomic
def end_period(
    *,
    group_id: UUID,
    user: User,
    period_id: Optional[UUID] = None,
    end_date: Optional[date] = None
) -> MealPeriod:
    """
    End the given period, or the current one.

    Computes the closing balance (opening + completed payments - extra
    expenses). A MONTHLY group switches back to CUSTOM.

    Raises:
        PeriodPermissionError: If the user's role cannot manage periods
        PeriodNotFoundError: If period_id is not a period of the group
        NoActivePeriodError: If no period_id is given and none is active
        PeriodStateError: If the period is not ACTIVE
        InvalidPeriodDatesError: If end_date is before the start date
    """
    group = _get_group(group_id, lock=True)
    _require_period_admin(group_id, user, 'end')

    if period_id is not None:
        period = _get_own_period(group_id, period_id, lock=True)
        if period.status != PeriodStatus.ACTIVE:
            raise PeriodStateError(
                f"Cannot end period '{period.name}' because it is not active (Status: {period.status})"
            )
    else:
        period = active_period(group_id)
        if period is None:
            raise NoActivePeriodError("No active period found")

    end_date = end_date or timezone.localdate()
    if end_date < period.start_date:
        raise InvalidPeriodDatesError("End date cannot be before the start date")

    period.end_date = end_date
    period.status = PeriodStatus.ENDED
    period.closing_balance = _closing_balance(period)
    period.save(update_fields=['end_date', 'status', 'closing_balance', 'updated_at'])

    if group.period_mode == PeriodMode.MONTHLY:
        group.period_mode = PeriodMode.CUSTOM
        group.save(update_fields=['period_mode', 'updated_at'])

    notify_group_members(
        group=group,
        notification_type=NotificationType.PERIOD_ENDED,
        message=f'The meal period "{period.name}" has ended.',
    )
    invalidate_group_cache(group_id)
    logger.info("Period %s ended by %s", period.id, user.id)
    return period


@transaction.atomic
def lock_period(*, group_id: UUID, user: User, period_id: UUID) -> MealPeriod:
    """
    Lock a period so that its meals and money records become read-only.

    Raises:
        PeriodPermissionError: If the user's role cannot manage periods
        PeriodNotFoundError: If the period is not a period of the group
        PeriodStateError: If it is already locked or archived
    """
    _require_period_admin(group_id, user, 'lock')
    period = _get_own_period(group_id, period_id, lock=True)

    if period.is_locked:
        raise PeriodStateError("Period is already locked")
    if period.status == PeriodStatus.ARCHIVED:
        raise PeriodStateError("Archived periods cannot be locked")

    # An open-ended period is closed today so the lock doesn't freeze every later date.
    if period.end_date is None:
        period.end_date = max(timezone.localdate(), period.start_date)

    period.is_locked = True
    period.status = PeriodStatus.LOCKED
    period.save(update_fields=['end_date', 'is_locked', 'status', 'updated_at'])

    notify_group_members(
        group=period.group,
        notification_type=NotificationType.PERIOD_LOCKED,
        message=f'The meal period "{period.name}" has been locked. No further edits are allowed.',
    )
    invalidate_group_cache(group_id)
    return period


@transaction.atomic
def unlock_period(
    *,
    group_id: UUID,
    user: User,
    period_id: UUID,
    status: str = PeriodStatus.ENDED
) -> MealPeriod:
    """
    Clear the lock of a period.

    Args:
        status: Status after unlocking, ENDED or ACTIVE. ACTIVE is only
            possible while no other period is active.

    Raises:
        PeriodPermissionError: If the user's role cannot manage periods
        PeriodNotFoundError: If the period is not a period of the group
        PeriodStateError: If it is not locked or status is not allowed
        ActivePeriodExistsError: If reactivating while another period is active
    """
    _require_period_admin(group_id, user, 'unlock')
    period = _get_own_period(group_id, period_id, lock=True)

    if not period.is_locked:
        raise PeriodStateError("Period is not locked")
    if status not in (PeriodStatus.ENDED, PeriodStatus.ACTIVE):
        raise PeriodStateError("A period can only be unlocked as ENDED or ACTIVE")
    if status == PeriodStatus.ACTIVE:
        current = active_period(group_id)
        if current is not None and current.id != period.id:
            raise ActivePeriodExistsError(f"There is already an active period: '{current.name}'")

    period.is_locked = False
    period.status = status
    period.save(update_fields=['is_locked', 'status', 'updated_at'])

    invalidate_group_cache(group_id)
    return period


@transaction.atomic
def archive_period(*, group_id: UUID, user: User, period_id: UUID) -> MealPeriod:
    """
    Archive a period. An ACTIVE period is ended today first.

    Raises:
        PeriodPermissionError: If the user's role cannot manage periods
        PeriodNotFoundError: If the period is not a period of the group
        PeriodStateError: If it is already archived
    """
    _require_period_admin(group_id, user, 'archive')
    period = _get_own_period(group_id, period_id, lock=True)

    if period.status == PeriodStatus.ARCHIVED:
        raise PeriodStateError("Period is already archived")

    update_fields = ['status', 'updated_at']
    if period.status == PeriodStatus.ACTIVE:
        period.end_date = timezone.localdate()
        update_fields.append('end_date')

    period.status = PeriodStatus.ARCHIVED
    period.save(update_fields=update_fields)

    invalidate_group_cache(group_id)
    return period


def _restarted_name(group_id: UUID, name: str) -> str:
    taken = set(
        MealPeriod.objects
        .filter(group_id=group_id, name__startswith=f"{name} (Restarted")
        .values_list('name', flat=True)
    )
    candidate = f"{name} (Restarted)"
    n = 2
    while candidate in taken:
        candidate = f"{name} (Restarted {n})"
        n += 1
    return candidate


@transaction.atomic
def restart_period(
    *,
    group_id: UUID,
    user: User,
    period_id: UUID,
    new_name: Optional[str] = None,
    with_data: bool = False
) -> MealPeriod:
    """
    Open a new ACTIVE period with the settings of an existing one.

    The new period starts today. Its opening balance is the old closing
    balance when carry_forward is set. With ``with_data`` the meals,
    guest meals, shopping items, expenses, payments and transactions of
    the old period move to the new one.

    Raises:
        PeriodPermissionError: If the user's role cannot manage periods
        PeriodNotFoundError: If the period is not a period of the group
        ActivePeriodExistsError: If any period is currently active
    """
    group = _get_group(group_id, lock=True)
    _require_period_admin(group_id, user, 'restart')
    source = _get_own_period(group_id, period_id)

    if active_period(group_id) is not None:
        raise ActivePeriodExistsError(
            "Cannot restart period while another period is active. End the current period first."
        )

    if new_name and new_name.strip():
        name = unique_period_name(group_id, new_name.strip())
    else:
        name = _restarted_name(group_id, source.name)

    opening = Decimal('0')
    if source.carry_forward and source.closing_balance is not None:
        opening = source.closing_balance

    period = MealPeriod.objects.create(
        group=group,
        name=name,
        start_date=timezone.localdate(),
        end_date=None,
        status=PeriodStatus.ACTIVE,
        opening_balance=opening,
        carry_forward=source.carry_forward,
        notes=source.notes,
        created_by=user,
    )

    if with_data:
        for model in (Meal, GuestMeal, ShoppingItem, ExtraExpense, Payment, AccountTransaction):
            moved = model.objects.filter(group_id=group_id, period=source).update(period=period)
            logger.debug("Moved %s %s row(s) to period %s", moved, model.__name__, period.id)

    notify_group_members(
        group=group,
        notification_type=NotificationType.PERIOD_STARTED,
        message=f'A new meal period "{period.name}" has started.',
    )
    invalidate_group_cache(group_id)
    logger.info("Period %s restarted as %s by %s", source.id, period.id, user.id)
    return period


@transaction.atomic
def ensure_month_period(*, group_id: UUID) -> Optional[MealPeriod]:
    """
    Make sure a MONTHLY group has a period for the current month.

    No period is opened while another one, archived or not, already
    covers today. A locked month stays the period of its dates.

    Returns:
        The active period (possibly just created), or None for CUSTOM
        groups without one and for MONTHLY groups whose current month is
        locked, ended or archived.
    """
    group = _get_group(group_id, lock=True)
    current = active_period(group_id)
    if current is not None or group.period_mode != PeriodMode.MONTHLY:
        return current

    today = timezone.localdate()
    if _covering(group_id, today).exists():
        return None

    period = create_month_period(group=group, day=today)
    invalidate_group_cache(group_id)
    logger.info("Opened monthly period %s for group %s", period.name, group_id)
    return period


# =============================================================================
# Summary
# =============================================================================

def get_period_summary(*, group_id: UUID, period_id: UUID) -> dict:
    """
    Totals of one period.

    Returns:
        dict with ``period``, ``total_meals``, ``total_guest_meals``,
        ``total_shopping``, ``total_payments``, ``total_expenses``,
        ``active_members`` and ``meal_rate``.

    Raises:
        PeriodNotFoundError: If the period is not a period of the group
    """
    period = _get_own_period(group_id, period_id)

    total_meals = Meal.objects.filter(group_id=group_id, period=period).count()
    total_guest_meals = (
        GuestMeal.objects
        .filter(group_id=group_id, period=period)
        .aggregate(total=Coalesce(Sum('count'), 0))['total']
    )
    total_shopping = (
        ShoppingItem.objects
        .filter(group_id=group_id, period=period, purchased=True)
        .aggregate(total=Sum('quantity'))['total']
    ) or Decimal('0')

    return {
        'period': period,
        'total_meals': total_meals,
        'total_guest_meals': total_guest_meals,
        'total_shopping': total_shopping,
        'total_payments': MealCalculations.total_payments(group_id, period.id),
        'total_expenses': MealCalculations.total_expenses(group_id, period.id),
        'active_members': (
            GroupMembership.objects.filter(group_id=group_id, is_current=True, is_banned=False).count()
        ),
        'meal_rate': MealCalculations.meal_rate(group_id, period.id),
    }
