"""
Group management service.

Handles group CRUD, the "current group" pointer and the period mode,
with proper transaction safety.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership, PeriodMode, ActivityType
from apps.groups.roles import GroupRole, GroupPermission, PERIOD_ADMIN_ROLES
from apps.periods.utils import active_period, create_month_period

from .access import get_group, require_membership, require_permission, require_role
from .activity_log import log_activity
from .exceptions import (
    GroupNotFoundError,
    InsufficientPermissionsError,
    PeriodModeChangeError,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    'name',
    'description',
    'is_private',
    'max_members',
    'features',
    'fine_amount',
    'fine_enabled',
    'is_active',
)


@transaction.atomic
def create_group(
    *,
    name: str,
    creator: User,
    description: str = '',
    is_private: bool = False,
    password: str = '',
    max_members: int = 20,
    features: Optional[dict] = None
) -> Group:
    """
    Create a new group and add the creator as ADMIN.

    The new group becomes the creator's current group.

    Args:
        name: Group name
        creator: User creating the group
        description: Optional description
        is_private: Whether joining needs a password, token or approval
        password: Optional join password (stored hashed)
        max_members: Capacity of the group
        features: Optional feature flags

    Returns:
        Created Group instance
    """
    group = Group(
        name=name,
        description=description,
        is_private=is_private,
        max_members=max_members,
        features=features or {},
        period_mode=PeriodMode.MONTHLY,
        created_by=creator,
        member_count=1,
    )
    group.set_password(password)
    group.save()

    GroupMembership.objects.filter(user=creator, is_current=True).update(is_current=False)
    GroupMembership.objects.create(
        user=creator,
        group=group,
        role=GroupRole.ADMIN,
        is_current=True,
    )

    log_activity(
        group=group,
        user=creator,
        activity_type=ActivityType.GROUP_CREATED,
        details={'name': name},
    )
    logger.info("Group %s created by %s", group.id, creator.id)
    return group


def get_group_by_id(*, group_id: UUID) -> Group:
    """
    Get a group by ID with its creator.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    try:
        return Group.objects.select_related('created_by').get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")


def get_user_groups(*, user: User) -> QuerySet[Group]:
    """Groups where the user is a non-banned member."""
    return (
        Group.objects
        .filter(memberships__user=user, memberships__is_banned=False)
        .select_related('created_by')
        .distinct()
    )


def get_current_group(*, user: User) -> Optional[Group]:
    membership = (
        GroupMembership.objects
        .filter(user=user, is_current=True, is_banned=False)
        .select_related('group')
        .first()
    )
    return membership.group if membership else None


@transaction.atomic
def set_current_group(*, group_id: UUID, user: User) -> GroupMembership:
    """
    Make a group the user's current group, unsetting all the others.

    Raises:
        NotMemberError: If user is not a member
    """
    membership = require_membership(group_id, user)

    GroupMembership.objects.filter(user=user).exclude(id=membership.id).update(is_current=False)
    if not membership.is_current:
        membership.is_current = True
        membership.save(update_fields=['is_current'])

    return membership


@transaction.atomic
def update_group(*, group_id: UUID, user: User, **fields) -> Group:
    """
    Update group details.

    Args:
        group_id: UUID of the group
        user: User performing the update (needs edit_group)
        **fields: Any of UPDATABLE_FIELDS, plus ``password`` which is
            re-hashed (an empty string clears it)

    Returns:
        Updated Group instance

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        InsufficientPermissionsError: If the role cannot edit the group
    """
    group = get_group(group_id, lock=True)
    require_permission(group_id, user, GroupPermission.EDIT_GROUP, "Only group admins can update the group")

    update_fields = ['updated_at']
    for field in UPDATABLE_FIELDS:
        if field in fields and fields[field] is not None:
            setattr(group, field, fields[field])
            update_fields.append(field)

    if 'password' in fields and fields['password'] is not None:
        group.set_password(fields['password'])
        update_fields.append('password')

    group.save(update_fields=update_fields)

    log_activity(
        group=group,
        user=user,
        activity_type=ActivityType.GROUP_UPDATED,
        details={'fields': [f for f in update_fields if f not in ('updated_at', 'password')]},
    )
    return group


@transaction.atomic
def delete_group(*, group_id: UUID, user: User) -> None:
    """
    Delete a group (creator only).

    Cascading deletes remove memberships, periods, meals and money records.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If user is not the creator
    """
    group = get_group(group_id, lock=True)

    if group.created_by_id != user.id:
        raise InsufficientPermissionsError("Only the group creator can delete the group")

    group.delete()
    logger.info("Group %s deleted by %s", group_id, user.id)


@transaction.atomic
def update_period_mode(*, group_id: UUID, user: User, mode: str) -> Group:
    """
    Switch a group between MONTHLY and CUSTOM periods.

    Leaving MONTHLY is refused while a period is active. Switching to
    MONTHLY without an active period opens the current month's period.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If role is not admin/manager/moderator
        PeriodModeChangeError: If the active monthly period blocks the change
    """
    group = get_group(group_id, lock=True)
    require_role(
        group_id,
        user,
        PERIOD_ADMIN_ROLES,
        "Only admins, managers and moderators can change the period mode"
    )

    if mode == group.period_mode:
        return group

    current = active_period(group_id)
    if group.period_mode == PeriodMode.MONTHLY and current is not None:
        raise PeriodModeChangeError(
            "Cannot change period mode while a monthly period is active. End it first."
        )

    group.period_mode = mode
    group.save(update_fields=['period_mode', 'updated_at'])

    if mode == PeriodMode.MONTHLY and current is None:
        create_month_period(group=group, day=timezone.localdate(), created_by=user)

    log_activity(
        group=group,
        user=user,
        activity_type=ActivityType.PERIOD_MODE_CHANGED,
        details={'mode': mode},
    )
    return group
