"""
Membership checks shared by the finance services.
"""

from uuid import UUID

from apps.accounts.models import User
from apps.groups.models import GroupMembership
from apps.groups.roles import is_finance_privileged
from apps.groups.services import get_active_membership

from .exceptions import FinancePermissionError, InvalidTargetError


def require_finance_member(group_id: UUID, user: User) -> GroupMembership:
    """
    Raises:
        FinancePermissionError: If the user is not an active member
    """
    membership = get_active_membership(group_id, user)
    if membership is None:
        raise FinancePermissionError("You are not a member of this group")
    return membership


def require_finance_privileged(group_id: UUID, user: User, action: str) -> GroupMembership:
    """
    Raises:
        FinancePermissionError: If the user is not an ADMIN or ACCOUNTANT
    """
    membership = require_finance_member(group_id, user)
    if not is_finance_privileged(membership.role):
        raise FinancePermissionError(f"Only admins and accountants can {action}")
    return membership


def get_target_membership(group_id: UUID, user_id: UUID) -> GroupMembership:
    """
    Raises:
        InvalidTargetError: If the user is not an active member
    """
    membership = (
        GroupMembership.objects
        .filter(group_id=group_id, user_id=user_id, is_banned=False)
        .select_related('user')
        .first()
    )
    if membership is None:
        raise InvalidTargetError("Target user is not a member of this group")
    return membership
