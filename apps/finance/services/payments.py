"""
Payment service.

Members record the money they paid into the meal fund. Payments are
created COMPLETED; only admins and accountants may change or remove them.
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
from apps.finance.models import Payment, PaymentMethod, PaymentStatus
from apps.groups.roles import is_finance_privileged
from apps.notifications.models import NotificationType
from apps.notifications.services import create_notification, notify_group_admins
from apps.periods.services import resolve_editable_period

from .access import require_finance_member, require_finance_privileged, get_target_membership
from .exceptions import FinancePermissionError, PaymentNotFoundError, InvalidAmountError

logger = logging.getLogger(__name__)


@transaction.atomic
def create_payment(
    *,
    group_id: UUID,
    user: User,
    amount: Decimal,
    date: date,
    method: str = PaymentMethod.CASH,
    description: str = '',
    user_id: Optional[UUID] = None
) -> Payment:
    """
    Record a payment.

    Args:
        group_id: UUID of the group
        user: User recording the payment
        amount: Paid amount, must be positive
        date: Day of the payment
        method: PaymentMethod value
        description: Optional note
        user_id: Payer; defaults to the recording user. Only admins and
            accountants may record payments of other members.

    Returns:
        Payment: The COMPLETED payment, attached to the period covering ``date``

    Raises:
        FinancePermissionError: If the user is not a member or records for someone else
        InvalidTargetError: If the payer is not a member
        InvalidAmountError: If amount is not positive
        PeriodLockedError: If the date falls into a locked period
    """
    membership = require_finance_member(group_id, user)
    payer_id = user_id or user.id

    if str(payer_id) != str(user.id) and not is_finance_privileged(membership.role):
        raise FinancePermissionError("You can only record your own payments")
    if amount <= 0:
        raise InvalidAmountError("Amount must be greater than zero")

    payer = get_target_membership(group_id, payer_id).user
    period = resolve_editable_period(group_id=group_id, day=date)

    payment = Payment.objects.create(
        group_id=group_id,
        user=payer,
        amount=amount,
        date=date,
        method=method,
        status=PaymentStatus.COMPLETED,
        description=description,
        period=period,
        created_by=user,
    )

    group = membership.group
    notify_group_admins(
        group=group,
        notification_type=NotificationType.PAYMENT_RECEIVED,
        message=f"{payer.get_display_name()} paid {amount} in {group.name}.",
        exclude_user=user,
    )
    if payer.id != user.id:
        create_notification(
            user=payer,
            notification_type=NotificationType.PAYMENT_CREATED,
            message=f"{user.get_display_name()} recorded your payment of {amount} in {group.name}.",
            group=group,
        )

    invalidate_group_cache(group_id)
    logger.info("Payment %s of %s recorded for %s in group %s", payment.id, amount, payer.id, group_id)
    return payment


def list_payments(
    *,
    group_id: UUID,
    user_id: Optional[UUID] = None,
    period_id: Optional[UUID] = None,
    status: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> QuerySet[Payment]:
    qs = Payment.objects.filter(group_id=group_id).select_related('user', 'created_by')
    if user_id:
        qs = qs.filter(user_id=user_id)
    if period_id:
        qs = qs.filter(period_id=period_id)
    if status:
        qs = qs.filter(status=status)
    if start_date:
        qs = qs.filter(date__gte=start_date)
    if end_date:
        qs = qs.filter(date__lte=end_date)
    return qs


def _get_payment(group_id: UUID, payment_id: UUID) -> Payment:
    try:
        return Payment.objects.select_for_update().get(id=payment_id, group_id=group_id)
    except Payment.DoesNotExist:
        raise PaymentNotFoundError("Payment not found")


@transaction.atomic
def update_payment_status(*, group_id: UUID, payment_id: UUID, user: User, status: str) -> Payment:
    """
    Change the status of a payment (admins and accountants).

    Raises:
        FinancePermissionError: If the user is not privileged
        PaymentNotFoundError: If the payment doesn't exist in the group
        PeriodLockedError: If the payment belongs to a locked period
    """
    require_finance_privileged(group_id, user, "change payments")
    payment = _get_payment(group_id, payment_id)
    resolve_editable_period(group_id=group_id, day=payment.date)

    payment.status = status
    payment.save(update_fields=['status', 'updated_at'])

    invalidate_group_cache(group_id)
    logger.info("Payment %s marked %s by %s", payment.id, status, user.id)
    return payment


@transaction.atomic
def delete_payment(*, group_id: UUID, payment_id: UUID, user: User) -> None:
    """
    Delete a payment (admins and accountants).

    Raises:
        FinancePermissionError: If the user is not privileged
        PaymentNotFoundError: If the payment doesn't exist in the group
        PeriodLockedError: If the payment belongs to a locked period
    """
    require_finance_privileged(group_id, user, "delete payments")
    payment = _get_payment(group_id, payment_id)
    resolve_editable_period(group_id=group_id, day=payment.date)

    payment.delete()
    invalidate_group_cache(group_id)
    logger.info("Payment %s deleted by %s", payment_id, user.id)
