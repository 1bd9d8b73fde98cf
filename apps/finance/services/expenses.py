"""
Extra expense service.

Shared costs of the group. Each expense is mirrored by an EXPENSE ledger
entry of the negated amount on the spender, kept in sync on update and
removed on delete.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.analytics.cache import invalidate_group_cache
from apps.finance.models import (
    AccountTransaction,
    ExtraExpense,
    ExpenseType,
    HistoryAction,
    TransactionType,
)
from apps.notifications.models import NotificationType
from apps.notifications.services import notify_group_members
from apps.periods.services import get_current_period

from .access import require_finance_member
from .exceptions import (
    ExpenseNotFoundError,
    ActivePeriodRequiredError,
    InvalidAmountError,
)
from .transactions import record_history, ensure_unlocked

logger = logging.getLogger(__name__)

EXPENSE_FIELDS = ('description', 'amount', 'date', 'type', 'receipt_url')


@transaction.atomic
def create_expense(
    *,
    group_id: UUID,
    user: User,
    description: str,
    amount: Decimal,
    date: date,
    expense_type: str = ExpenseType.OTHER,
    receipt_url: str = ''
) -> ExtraExpense:
    """
    Record a shared expense in the active period.

    Args:
        group_id: UUID of the group
        user: Member who spent the money
        description: What was bought
        amount: Positive amount
        date: Day of the expense
        expense_type: ExpenseType value
        receipt_url: Optional link to a receipt

    Returns:
        ExtraExpense: The expense with its ledger entry attached

    Raises:
        FinancePermissionError: If the user is not a member
        ActivePeriodRequiredError: If the group has no active period
        InvalidAmountError: If amount is not positive
    """
    membership = require_finance_member(group_id, user)
    if amount <= 0:
        raise InvalidAmountError("Amount must be greater than zero")

    period = get_current_period(group_id=group_id)
    if period is None:
        raise ActivePeriodRequiredError("An active period is required to add expenses")

    entry = AccountTransaction.objects.create(
        group_id=group_id,
        user=user,
        target_user=user,
        amount=-amount,
        type=TransactionType.EXPENSE,
        description=description,
        period=period,
        created_by=user,
    )
    record_history(entry, HistoryAction.CREATED, user)

    expense = ExtraExpense.objects.create(
        group_id=group_id,
        user=user,
        amount=amount,
        description=description,
        date=date,
        type=expense_type,
        receipt_url=receipt_url,
        period=period,
        transaction=entry,
    )

    group = membership.group
    notify_group_members(
        group=group,
        notification_type=NotificationType.EXPENSE_ADDED,
        message=(
            f"{user.get_display_name()} added a new {expense_type.lower()} expense "
            f"of {amount} for {description} in {group.name}."
        ),
        exclude_user=user,
    )

    invalidate_group_cache(group_id)
    logger.info("Expense %s of %s added to group %s by %s", expense.id, amount, group_id, user.id)
    return expense


def _get_expense(group_id: UUID, expense_id: UUID) -> ExtraExpense:
    try:
        return (
            ExtraExpense.objects
            .select_for_update(of=('self',))
            .select_related('period', 'transaction')
            .get(id=expense_id, group_id=group_id)
        )
    except ExtraExpense.DoesNotExist:
        raise ExpenseNotFoundError("Expense not found")


@transaction.atomic
def update_expense(*, group_id: UUID, expense_id: UUID, user: User, **fields) -> ExtraExpense:
    """
    Update an expense and its ledger entry.

    Args:
        group_id: UUID of the group
        expense_id: UUID of the expense
        user: Member making the change
        **fields: Any of description, amount, date, type, receipt_url

    Raises:
        FinancePermissionError: If the user is not a member
        ExpenseNotFoundError: If the expense doesn't exist in the group
        InvalidAmountError: If the new amount is not positive
        PeriodLockedError: If the expense belongs to a locked period
    """
    require_finance_member(group_id, user)
    expense = _get_expense(group_id, expense_id)
    ensure_unlocked(expense.period)

    if 'amount' in fields and fields['amount'] is not None and fields['amount'] <= 0:
        raise InvalidAmountError("Amount must be greater than zero")

    for field in EXPENSE_FIELDS:
        if fields.get(field) is not None:
            setattr(expense, field, fields[field])
    expense.save()

    entry = expense.transaction
    if entry is not None:
        previous_amount = entry.amount
        entry.amount = -expense.amount
        entry.description = expense.description
        entry.save(update_fields=['amount', 'description', 'updated_at'])
        record_history(entry, HistoryAction.UPDATED, user, previous_amount=previous_amount)

    invalidate_group_cache(group_id)
    logger.info("Expense %s updated by %s", expense.id, user.id)
    return expense


@transaction.atomic
def delete_expense(*, group_id: UUID, expense_id: UUID, user: User) -> None:
    """
    Delete an expense together with its ledger entry.

    Raises:
        FinancePermissionError: If the user is not a member
        ExpenseNotFoundError: If the expense doesn't exist in the group
        PeriodLockedError: If the expense belongs to a locked period
    """
    require_finance_member(group_id, user)
    expense = _get_expense(group_id, expense_id)
    ensure_unlocked(expense.period)

    entry = expense.transaction
    expense.delete()
    if entry is not None:
        record_history(entry, HistoryAction.DELETED, user, previous_amount=entry.amount)
        entry.delete()

    invalidate_group_cache(group_id)
    logger.info("Expense %s deleted by %s", expense_id, user.id)


def list_expenses(
    *,
    group_id: UUID,
    period_id: Optional[UUID] = None,
    user_id: Optional[UUID] = None,
    expense_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> QuerySet[ExtraExpense]:
    qs = ExtraExpense.objects.filter(group_id=group_id).select_related('user')
    if period_id:
        qs = qs.filter(period_id=period_id)
    if user_id:
        qs = qs.filter(user_id=user_id)
    if expense_type:
        qs = qs.filter(type=expense_type)
    if start_date:
        qs = qs.filter(date__gte=start_date)
    if end_date:
        qs = qs.filter(date__lte=end_date)
    return qs
