"""
Membership management service.

Handles joining, leaving and removing members with concurrency protection.
"""

import logging
from typing import Optional, Union
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.models import (
    Group,
    GroupMembership,
    JoinRequest,
    JoinRequestStatus,
    InviteToken,
    ActivityType,
    DEFAULT_NOTIFICATION_SETTINGS,
)
from apps.groups.roles import GroupRole
from apps.notifications.models import NotificationType
from apps.notifications.services import (
    create_notification,
    notify_group_admins,
)

from .access import get_group, require_membership
from .activity_log import log_activity
from .exceptions import (
    AlreadyMemberError,
    NotMemberError,
    InvalidPasswordError,
    JoinRequestRequiredError,
    InvalidInviteTokenError,
    ExpiredInviteTokenError,
    GroupFullError,
    CannotRemoveAdminError,
    InsufficientPermissionsError,
)

logger = logging.getLogger(__name__)


def _resolve_token(group: Group, token: str) -> InviteToken:
    try:
        invite = InviteToken.objects.select_for_update().get(token=token.strip().upper())
    except InviteToken.DoesNotExist:
        raise InvalidInviteTokenError("Invalid invite token")

    if invite.group_id != group.id or invite.is_used:
        raise InvalidInviteTokenError("Invalid invite token")
    if invite.is_expired:
        raise ExpiredInviteTokenError("Invite token has expired")
    return invite


def add_member(
    *,
    group: Group,
    user: User,
    role: str = GroupRole.MEMBER
) -> GroupMembership:
    """
    Create a membership and bump member_count. Caller holds the group lock.

    Raises:
        AlreadyMemberError: If the membership already exists
    """
    try:
        with transaction.atomic():
            membership = GroupMembership.objects.create(user=user, group=group, role=role)
    except IntegrityError:
        raise AlreadyMemberError("Already a member")

    group.member_count = group.memberships.count()
    group.save(update_fields=['member_count', 'updated_at'])
    return membership


@transaction.atomic
def join_group(
    *,
    group_id: UUID,
    user: User,
    password: Optional[str] = None,
    token: Optional[str] = None
) -> Union[GroupMembership, JoinRequest]:
    """
    Join a group directly, with a password, or with an invite token.

    Joining a private group with a token files a pending join request
    instead of adding the member; admins then approve it.

    Args:
        group_id: UUID of the group
        user: User joining the group
        password: Password of a private group
        token: Invite token (10 letters)

    Returns:
        Created GroupMembership, or the pending JoinRequest for private
        groups joined with a token

    Raises:
        GroupNotFoundError: If group doesn't exist
        AlreadyMemberError: If user is already a member
        InvalidInviteTokenError: If token is unknown, used or for another group
        ExpiredInviteTokenError: If token has expired
        InvalidPasswordError: If the private group's password is wrong
        JoinRequestRequiredError: If a private group has no password
        GroupFullError: If the group reached max_members
    """
    group = get_group(group_id, lock=True)

    if GroupMembership.objects.filter(group=group, user=user).exists():
        raise AlreadyMemberError("Already a member")

    invite = _resolve_token(group, token) if token else None

    if group.is_private and invite is None:
        if not group.has_password:
            raise JoinRequestRequiredError(
                "This group is private and has no password. Request access instead."
            )
        if not group.check_password(password):
            raise InvalidPasswordError("Invalid password")

    if group.is_full:
        raise GroupFullError("Group is full")

    if invite is not None:
        invite.used_at = timezone.now()
        invite.used_by = user
        invite.save(update_fields=['used_at', 'used_by'])

    if group.is_private and invite is not None:
        join_request, created = JoinRequest.objects.get_or_create(
            user=user,
            group=group,
            defaults={'status': JoinRequestStatus.PENDING},
        )
        if not created:
            join_request.status = JoinRequestStatus.PENDING
            join_request.processed_by = None
            join_request.save(update_fields=['status', 'processed_by', 'updated_at'])

        notify_group_admins(
            group=group,
            notification_type=NotificationType.JOIN_REQUEST,
            message=f"{user.get_display_name()} requested to join {group.name}.",
        )
        return join_request

    membership = add_member(
        group=group,
        user=user,
        role=invite.role if invite is not None else GroupRole.MEMBER,
    )

    notify_group_admins(
        group=group,
        notification_type=NotificationType.MEMBER_ADDED,
        message=f"{user.get_display_name()} joined {group.name}.",
        exclude_user=user,
    )
    create_notification(
        user=user,
        group=group,
        notification_type=NotificationType.MEMBER_ADDED,
        message=f"Welcome to {group.name}!",
    )
    log_activity(
        group=group,
        user=user,
        activity_type=ActivityType.MEMBER_JOINED,
        details={'via': 'token' if invite else 'direct', 'role': membership.role},
    )
    logger.info("User %s joined group %s", user.id, group.id)
    return membership


@transaction.atomic
def leave_group(*, group_id: UUID, user: User) -> None:
    """
    Leave a group.

    An admin leaving a group with no other admin hands the ADMIN role to the
    oldest remaining member. The last member leaving deletes the group.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
    """
    group = get_group(group_id, lock=True)

    try:
        membership = (
            GroupMembership.objects
            .select_for_update()
            .get(user=user, group=group)
        )
    except GroupMembership.DoesNotExist:
        raise NotMemberError(f"User is not a member of {group.name}")

    was_admin = membership.role == GroupRole.ADMIN
    membership.delete()

    remaining = GroupMembership.objects.filter(group=group).order_by('joined_at')
    if not remaining.exists():
        group.delete()
        logger.info("Group %s deleted after last member left", group_id)
        return

    if was_admin and not remaining.filter(role=GroupRole.ADMIN).exists():
        successor = remaining.exclude(role=GroupRole.BANNED).first() or remaining.first()
        successor.role = GroupRole.ADMIN
        successor.is_banned = False
        successor.save(update_fields=['role', 'is_banned'])
        create_notification(
            user=successor.user,
            group=group,
            notification_type=NotificationType.ROLE_CHANGED,
            message=f"You are now an admin of {group.name}.",
        )

    group.member_count = remaining.count()
    group.save(update_fields=['member_count', 'updated_at'])

    notify_group_admins(
        group=group,
        notification_type=NotificationType.MEMBER_REMOVED,
        message=f"{user.get_display_name()} left {group.name}.",
    )
    log_activity(group=group, user=user, activity_type=ActivityType.MEMBER_LEFT)


@transaction.atomic
def remove_member(
    *,
    group_id: UUID,
    user_id: UUID,
    removed_by: User
) -> None:
    """
    Remove a member from a group (admin only).

    Admins cannot be removed; demote them first.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If removed_by is not admin
        NotMemberError: If target user is not a member
        CannotRemoveAdminError: If the target is an admin
    """
    group = get_group(group_id, lock=True)

    if not group.is_admin(removed_by):
        raise InsufficientPermissionsError("Only group admins can remove members")

    try:
        membership = (
            GroupMembership.objects
            .select_for_update()
            .select_related('user')
            .get(group=group, user_id=user_id)
        )
    except GroupMembership.DoesNotExist:
        raise NotMemberError("User is not a member of this group")

    if membership.role == GroupRole.ADMIN:
        raise CannotRemoveAdminError("Cannot remove a group admin")

    removed_user = membership.user
    membership.delete()

    group.member_count = group.memberships.count()
    group.save(update_fields=['member_count', 'updated_at'])

    create_notification(
        user=removed_user,
        group=group,
        notification_type=NotificationType.MEMBER_REMOVED,
        message=f"You have been removed from {group.name}.",
    )
    log_activity(
        group=group,
        user=removed_by,
        activity_type=ActivityType.MEMBER_REMOVED,
        details={'user_id': str(removed_user.id)},
    )


def get_group_members(*, group_id: UUID) -> QuerySet[GroupMembership]:
    """
    Get all members of a group, admins first.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    get_group(group_id)

    return (
        GroupMembership.objects
        .filter(group_id=group_id)
        .select_related('user')
        .order_by('joined_at')
    )


def get_notification_settings(*, group_id: UUID, user: User) -> dict:
    """
    Raises:
        NotMemberError: If user is not a member
    """
    return require_membership(group_id, user).get_notification_settings()


@transaction.atomic
def update_notification_settings(*, group_id: UUID, user: User, settings: dict) -> dict:
    """
    Merge known notification toggles into the member's settings.

    Raises:
        NotMemberError: If user is not a member
    """
    membership = require_membership(group_id, user)

    merged = membership.get_notification_settings()
    for key, value in settings.items():
        if key in DEFAULT_NOTIFICATION_SETTINGS:
            merged[key] = bool(value)

    membership.notification_settings = merged
    membership.save(update_fields=['notification_settings'])
    return merged
