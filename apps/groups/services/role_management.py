"""
Role management service.

Handles member role updates with concurrency protection.
"""

from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.groups.models import GroupMembership, ActivityType
from apps.groups.roles import GroupRole
from apps.notifications.models import NotificationType
from apps.notifications.services import create_notification

from .access import get_group
from .activity_log import log_activity
from .exceptions import (
    NotMemberError,
    CannotChangeRoleError,
    InsufficientPermissionsError,
)


@transaction.atomic
def update_member_role(
    *,
    group_id: UUID,
    user_id: UUID,
    new_role: str,
    updated_by: User
) -> GroupMembership:
    """
    Update a member's role (admin only).

    Uses select_for_update to prevent concurrent role changes.
    The group creator's role is fixed and admins cannot change their own.
    Assigning BANNED also flags the membership as banned.

    Args:
        group_id: UUID of the group
        user_id: UUID of the user whose role to update
        new_role: Any GroupRole value
        updated_by: User performing the update (must be admin)

    Returns:
        Updated GroupMembership instance

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If target user is not a member
        CannotChangeRoleError: If target is the creator or updated_by itself
        InsufficientPermissionsError: If updated_by is not admin
        ValueError: If new_role is invalid
    """
    if new_role not in GroupRole.values:
        raise ValueError(f"Invalid role. Must be one of: {GroupRole.values}")

    group = get_group(group_id)

    if not group.is_admin(updated_by):
        raise InsufficientPermissionsError("Only group admins can update member roles")

    try:
        membership = (
            GroupMembership.objects
            .select_for_update()
            .select_related('user')
            .get(group=group, user_id=user_id)
        )
    except GroupMembership.DoesNotExist:
        raise NotMemberError("User is not a member of this group")

    if group.created_by_id is not None and membership.user_id == group.created_by_id:
        raise CannotChangeRoleError("Cannot change the group creator's role")

    if membership.user_id == updated_by.id:
        raise CannotChangeRoleError("You cannot change your own role")

    previous_role = membership.role
    membership.role = new_role
    membership.is_banned = new_role == GroupRole.BANNED
    membership.save(update_fields=['role', 'is_banned'])

    create_notification(
        user=membership.user,
        group=group,
        notification_type=NotificationType.ROLE_CHANGED,
        message=f"Your role in {group.name} is now {GroupRole(new_role).label}.",
    )
    log_activity(
        group=group,
        user=updated_by,
        activity_type=ActivityType.ROLE_CHANGED,
        details={
            'user_id': str(membership.user_id),
            'from': previous_role,
            'to': new_role,
        },
    )

    return membership
