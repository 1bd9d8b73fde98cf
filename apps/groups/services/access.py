"""
Membership lookups shared by the groups services and the other apps.
"""

from typing import Iterable, Optional
from uuid import UUID

from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership
from apps.groups.roles import GroupPermission

from .exceptions import (
    GroupNotFoundError,
    NotMemberError,
    InsufficientPermissionsError,
)


def get_group(group_id: UUID, *, lock: bool = False) -> Group:
    """
    Fetch a group, optionally with a row lock.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    qs = Group.objects.select_for_update() if lock else Group.objects
    try:
        return qs.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")


def get_active_membership(group_id: UUID, user: User) -> Optional[GroupMembership]:
    """Non-banned membership of the user in the group, or None."""
    return (
        GroupMembership.objects
        .filter(group_id=group_id, user=user, is_banned=False)
        .select_related('group')
        .first()
    )


def require_membership(group_id: UUID, user: User) -> GroupMembership:
    """
    Raises:
        NotMemberError: If the user is not an active member
    """
    membership = get_active_membership(group_id, user)
    if membership is None:
        raise NotMemberError("You are not a member of this group")
    return membership


def require_permission(
    group_id: UUID,
    user: User,
    action: GroupPermission,
    message: str = "You do not have permission to perform this action"
) -> GroupMembership:
    """
    Raises:
        NotMemberError: If the user is not an active member
        InsufficientPermissionsError: If the role table denies the action
    """
    membership = require_membership(group_id, user)
    if not membership.has_permission(action):
        raise InsufficientPermissionsError(message)
    return membership


def require_role(
    group_id: UUID,
    user: User,
    roles: Iterable[str],
    message: str = "You do not have permission to perform this action"
) -> GroupMembership:
    """
    Raises:
        NotMemberError: If the user is not an active member
        InsufficientPermissionsError: If the member's role is not in roles
    """
    membership = require_membership(group_id, user)
    if membership.role not in roles:
        raise InsufficientPermissionsError(message)
    return membership
