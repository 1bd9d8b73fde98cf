"""
Balance service.

Balances are computed from the ledger of the current period. Without an
active period every figure is 0.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db.models import F, Sum
from django.db.models.functions import Coalesce

from apps.accounts.models import User
from apps.analytics.analytics import MealCalculations
from apps.finance.models import AccountTransaction, ExtraExpense
from apps.groups.models import GroupMembership
from apps.groups.roles import can_view_user_balance
from apps.periods.services import get_current_period

from .access import require_finance_member, require_finance_privileged, get_target_membership
from .exceptions import FinancePermissionError

ZERO = Decimal('0.00')


def _sum(qs, field='amount') -> Decimal:
    return qs.aggregate(total=Coalesce(Sum(field), ZERO))['total']


def user_balance(group_id: UUID, user_id: UUID, period_id: Optional[UUID]) -> Decimal:
    """Sum of the period's ledger entries targeting the user."""
    if period_id is None:
        return ZERO
    return _sum(AccountTransaction.objects.filter(
        group_id=group_id,
        period_id=period_id,
        target_user_id=user_id,
    ))


def group_total_balance(group_id: UUID, period_id: Optional[UUID]) -> Decimal:
    """Sum of the period's self-entries (user == target)."""
    if period_id is None:
        return ZERO
    return _sum(AccountTransaction.objects.filter(
        group_id=group_id,
        period_id=period_id,
        user_id=F('target_user_id'),
    ))


def user_total_spent(group_id: UUID, user_id: UUID, period_id: Optional[UUID]) -> Decimal:
    if period_id is None:
        return ZERO
    return _sum(ExtraExpense.objects.filter(group_id=group_id, period_id=period_id, user_id=user_id))


def available_balance(group_id: UUID, user_id: UUID, period_id: Optional[UUID]) -> dict:
    """
    Balance left after paying for the user's meals.

    Returns:
        dict: ``balance``, ``meal_count``, ``meal_rate``, ``meal_cost``
        and ``available_balance`` (balance - meal_count * meal_rate)
    """
    balance = user_balance(group_id, user_id, period_id)
    meal_count = MealCalculations.user_meal_count(group_id, user_id, period_id)
    meal_rate = MealCalculations.meal_rate(group_id, period_id)
    meal_cost = (meal_rate * meal_count).quantize(Decimal('0.01'))
    return {
        'balance': balance,
        'meal_count': meal_count,
        'meal_rate': meal_rate,
        'meal_cost': meal_cost,
        'available_balance': balance - meal_cost,
    }


def get_user_balance(*, group_id: UUID, user: User, target_user_id: Optional[UUID] = None) -> dict:
    """
    Balance figures of one member in the current period.

    Members may read their own balance; admins and accountants anyone's.

    Raises:
        FinancePermissionError: If the viewer may not see the target's balance
        InvalidTargetError: If the target is not a member
    """
    membership = require_finance_member(group_id, user)
    target_id = target_user_id or user.id
    if not can_view_user_balance(membership.role, user.id, target_id):
        raise FinancePermissionError("You can only view your own balance")

    target = get_target_membership(group_id, target_id)
    period = get_current_period(group_id=group_id)
    period_id = period.id if period else None

    figures = available_balance(group_id, target.user_id, period_id)
    return {
        'user_id': target.user_id,
        'name': target.user.get_display_name(),
        'role': target.role,
        'period_id': period_id,
        'total_spent': user_total_spent(group_id, target.user_id, period_id),
        **figures,
    }


def group_balance_summary(*, group_id: UUID, user: User) -> dict:
    """
    Balances of every member plus group totals (admins and accountants).

    Returns:
        dict: ``members`` (list of per-member figures), ``group_total_balance``,
        ``total_expenses``, ``meal_rate`` and ``net_group_balance``
        (group total - expenses)
    """
    require_finance_privileged(group_id, user, "view all balances")

    period = get_current_period(group_id=group_id)
    period_id = period.id if period else None

    memberships = (
        GroupMembership.objects
        .filter(group_id=group_id, is_banned=False)
        .select_related('user')
        .order_by('joined_at')
    )
    members = []
    for membership in memberships:
        figures = available_balance(group_id, membership.user_id, period_id)
        members.append({
            'user_id': membership.user_id,
            'name': membership.user.get_display_name(),
            'role': membership.role,
            'total_spent': user_total_spent(group_id, membership.user_id, period_id),
            **figures,
        })

    group_total = group_total_balance(group_id, period_id)
    total_expenses = ZERO
    if period_id is not None:
        total_expenses = _sum(ExtraExpense.objects.filter(group_id=group_id, period_id=period_id))

    return {
        'period_id': period_id,
        'members': members,
        'group_total_balance': group_total,
        'total_expenses': total_expenses,
        'meal_rate': MealCalculations.meal_rate(group_id, period_id),
        'net_group_balance': group_total - total_expenses,
    }
