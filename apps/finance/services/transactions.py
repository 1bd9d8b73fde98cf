"""
Account transaction service.

The group ledger. Every create, update and delete appends a
TransactionHistory row holding a snapshot of the entry, so the audit
trail survives deletions.
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Q, QuerySet

from apps.accounts.models import User
from apps.analytics.cache import invalidate_group_cache
from apps.finance.models import (
    AccountTransaction,
    TransactionHistory,
    HistoryAction,
)
from apps.groups.roles import (
    can_view_user_balance,
    can_create_transaction,
    can_modify_transactions,
    can_delete_transactions,
)
from apps.periods.models import MealPeriod
from apps.periods.services import get_current_period, PeriodLockedError

from .access import require_finance_member, get_target_membership
from .exceptions import (
    FinancePermissionError,
    TransactionNotFoundError,
    InvalidAmountError,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
HISTORY_LIMIT = 50


def record_history(
    entry: AccountTransaction,
    action: str,
    changed_by: Optional[User],
    previous_amount: Optional[Decimal] = None
) -> TransactionHistory:
    """Append an audit row for a ledger entry."""
    return TransactionHistory.objects.create(
        transaction_id=entry.id,
        group_id=entry.group_id,
        target_user_id=entry.target_user_id,
        action=action,
        changed_by=changed_by,
        previous_amount=previous_amount,
        new_amount=None if action == HistoryAction.DELETED else entry.amount,
        snapshot=entry.snapshot(),
    )


def ensure_unlocked(period: Optional[MealPeriod]) -> None:
    """
    Raises:
        PeriodLockedError: If the period is locked or archived
    """
    if period is not None and period.is_frozen:
        raise PeriodLockedError(f"Period '{period.name}' is locked. No further edits are allowed.")


@transaction.atomic
def create_transaction(
    *,
    group_id: UUID,
    user: User,
    target_user_id: UUID,
    amount: Decimal,
    transaction_type: str,
    description: str = ''
) -> AccountTransaction:
    """
    Add a ledger entry in the current period.

    Admins and accountants may create any entry. Other members may only
    record a PAYMENT to an admin or accountant.

    Args:
        group_id: UUID of the group
        user: User creating the entry
        target_user_id: Member whose balance the amount applies to
        amount: Signed amount, must not be zero
        transaction_type: TransactionType value
        description: Optional note

    Returns:
        AccountTransaction: The new entry

    Raises:
        FinancePermissionError: If the role rules deny the entry
        InvalidTargetError: If the target is not a member
        InvalidAmountError: If amount is zero
    """
    membership = require_finance_member(group_id, user)
    target = get_target_membership(group_id, target_user_id)

    if not can_create_transaction(membership.role, transaction_type, target.role):
        raise FinancePermissionError("You do not have permission to create this transaction")
    if amount == 0:
        raise InvalidAmountError("Amount must not be zero")

    entry = AccountTransaction.objects.create(
        group_id=group_id,
        user=user,
        target_user=target.user,
        amount=amount,
        type=transaction_type,
        description=description,
        period=get_current_period(group_id=group_id),
        created_by=user,
    )
    record_history(entry, HistoryAction.CREATED, user)

    invalidate_group_cache(group_id)
    logger.info("Transaction %s (%s %s) created by %s", entry.id, transaction_type, amount, user.id)
    return entry


def _get_transaction(group_id: UUID, transaction_id: UUID) -> AccountTransaction:
    try:
        return (
            AccountTransaction.objects
            .select_for_update(of=('self',))
            .select_related('period')
            .get(id=transaction_id, group_id=group_id)
        )
    except AccountTransaction.DoesNotExist:
        raise TransactionNotFoundError("Transaction not found")


@transaction.atomic
def update_transaction(
    *,
    group_id: UUID,
    transaction_id: UUID,
    user: User,
    amount: Optional[Decimal] = None,
    description: Optional[str] = None,
    transaction_type: Optional[str] = None
) -> AccountTransaction:
    """
    Change a ledger entry (admins and accountants).

    Raises:
        FinancePermissionError: If the user may not modify transactions
        TransactionNotFoundError: If the entry doesn't exist in the group
        InvalidAmountError: If the new amount is zero
        PeriodLockedError: If the entry belongs to a locked period
    """
    membership = require_finance_member(group_id, user)
    if not can_modify_transactions(membership.role):
        raise FinancePermissionError("Only admins and accountants can modify transactions")

    entry = _get_transaction(group_id, transaction_id)
    ensure_unlocked(entry.period)

    previous_amount = entry.amount
    if amount is not None:
        if amount == 0:
            raise InvalidAmountError("Amount must not be zero")
        entry.amount = amount
    if description is not None:
        entry.description = description
    if transaction_type is not None:
        entry.type = transaction_type
    entry.save()

    record_history(entry, HistoryAction.UPDATED, user, previous_amount=previous_amount)
    invalidate_group_cache(group_id)
    logger.info("Transaction %s updated by %s", entry.id, user.id)
    return entry


@transaction.atomic
def delete_transaction(*, group_id: UUID, transaction_id: UUID, user: User) -> None:
    """
    Delete a ledger entry (admins only).

    Raises:
        FinancePermissionError: If the user is not an ADMIN
        TransactionNotFoundError: If the entry doesn't exist in the group
        PeriodLockedError: If the entry belongs to a locked period
    """
    membership = require_finance_member(group_id, user)
    if not can_delete_transactions(membership.role):
        raise FinancePermissionError("Only admins can delete transactions")

    entry = _get_transaction(group_id, transaction_id)
    ensure_unlocked(entry.period)

    record_history(entry, HistoryAction.DELETED, user, previous_amount=entry.amount)
    entry.delete()

    invalidate_group_cache(group_id)
    logger.info("Transaction %s deleted by %s", transaction_id, user.id)


def list_transactions(
    *,
    group_id: UUID,
    target_user_id: Optional[UUID] = None,
    period_id: Optional[UUID] = None,
    cursor: Optional[UUID] = None,
    limit: int = DEFAULT_PAGE_SIZE
) -> dict:
    """
    Page through ledger entries, newest first.

    Args:
        group_id: UUID of the group
        target_user_id: Only entries applying to this member
        period_id: Only entries of this period
        cursor: ID of the last entry of the previous page
        limit: Page size (capped at 100)

    Returns:
        dict: ``items`` (list of AccountTransaction) and ``next_cursor``
        (ID of the last item, or None on the last page)

    Raises:
        TransactionNotFoundError: If the cursor entry doesn't exist
    """
    limit = max(1, min(limit, MAX_PAGE_SIZE))

    qs = (
        AccountTransaction.objects
        .filter(group_id=group_id)
        .select_related('user', 'target_user', 'created_by')
        .order_by('-created_at', '-id')
    )
    if target_user_id:
        qs = qs.filter(target_user_id=target_user_id)
    if period_id:
        qs = qs.filter(period_id=period_id)

    if cursor:
        try:
            last = AccountTransaction.objects.get(id=cursor, group_id=group_id)
        except AccountTransaction.DoesNotExist:
            raise TransactionNotFoundError("Invalid cursor")
        qs = qs.filter(
            Q(created_at__lt=last.created_at)
            | Q(created_at=last.created_at, id__lt=last.id)
        )

    items = list(qs[:limit + 1])
    has_more = len(items) > limit
    items = items[:limit]

    return {
        'items': items,
        'next_cursor': items[-1].id if has_more else None,
    }


def list_transaction_history(
    *,
    group_id: UUID,
    user: User,
    target_user_id: Optional[UUID] = None,
    transaction_id: Optional[UUID] = None
) -> QuerySet[TransactionHistory]:
    """
    Audit trail of the ledger, newest first.

    With ``transaction_id`` the full trail of that entry is returned, even
    after it was deleted. Otherwise the last 50 changes to the balance of
    ``target_user_id`` (the caller by default) are returned.

    Raises:
        FinancePermissionError: If the caller may not see that member's balance
        TransactionNotFoundError: If no history exists for transaction_id
    """
    membership = require_finance_member(group_id, user)

    qs = (
        TransactionHistory.objects
        .filter(group_id=group_id)
        .select_related('changed_by', 'target_user')
        .order_by('-created_at')
    )

    if transaction_id is not None:
        qs = qs.filter(transaction_id=transaction_id)
        first = qs.first()
        if first is None:
            raise TransactionNotFoundError("Transaction not found")
        if not can_view_user_balance(membership.role, user.id, first.target_user_id):
            raise FinancePermissionError("You can only view your own transaction history")
        return qs

    target_user_id = target_user_id or user.id
    if not can_view_user_balance(membership.role, user.id, target_user_id):
        raise FinancePermissionError("You can only view your own transaction history")
    return qs.filter(target_user_id=target_user_id)[:HISTORY_LIMIT]
