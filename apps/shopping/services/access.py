"""
Membership checks shared by the shopping services.
"""

from uuid import UUID

from apps.accounts.models import User
from apps.groups.models import GroupMembership
from apps.groups.roles import GroupPermission
from apps.groups.services import get_active_membership

from .exceptions import ShoppingPermissionError


def require_shopping_member(group_id: UUID, user: User) -> GroupMembership:
    """
    Raises:
        ShoppingPermissionError: If the user is not an active member
    """
    membership = get_active_membership(group_id, user)
    if membership is None:
        raise ShoppingPermissionError("You are not a member of this group")
    return membership


def can_manage_market(membership: GroupMembership) -> bool:
    return membership.has_permission(GroupPermission.MANAGE_MARKET)


def require_market_manager(group_id: UUID, user: User) -> GroupMembership:
    """
    Raises:
        ShoppingPermissionError: If the user lacks the manage_market permission
    """
    membership = require_shopping_member(group_id, user)
    if not can_manage_market(membership):
        raise ShoppingPermissionError("You do not have permission to manage market duties")
    return membership
