"""
Join request service.

Users ask to join private groups; members holding manage_join_requests
approve or reject.
"""

from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.groups.models import (
    GroupMembership,
    JoinRequest,
    JoinRequestStatus,
    ActivityType,
)
from apps.groups.roles import GroupPermission
from apps.notifications.models import NotificationType
from apps.notifications.services import create_notification, notify_group_admins

from .access import get_group, require_permission
from .activity_log import log_activity
from .membership_management import add_member
from .exceptions import (
    AlreadyMemberError,
    GroupFullError,
    JoinRequestExistsError,
    JoinRequestNotFoundError,
)

APPROVE = 'approve'
REJECT = 'reject'


@transaction.atomic
def create_join_request(*, group_id: UUID, user: User, message: str = '') -> JoinRequest:
    """
    Ask to join a group. A previously rejected request is reopened.

    Raises:
        GroupNotFoundError: If group doesn't exist
        AlreadyMemberError: If user is already a member
        JoinRequestExistsError: If a pending or approved request exists
    """
    group = get_group(group_id)

    if GroupMembership.objects.filter(group=group, user=user).exists():
        raise AlreadyMemberError("Already a member")

    existing = JoinRequest.objects.select_for_update().filter(group=group, user=user).first()
    if existing is not None:
        if existing.status == JoinRequestStatus.PENDING:
            raise JoinRequestExistsError("You already have a pending request for this group")
        if existing.status == JoinRequestStatus.APPROVED:
            raise JoinRequestExistsError("Your request was already approved")

        existing.status = JoinRequestStatus.PENDING
        existing.message = message
        existing.processed_by = None
        existing.save(update_fields=['status', 'message', 'processed_by', 'updated_at'])
        join_request = existing
    else:
        join_request = JoinRequest.objects.create(group=group, user=user, message=message)

    notify_group_admins(
        group=group,
        notification_type=NotificationType.JOIN_REQUEST,
        message=f"{user.get_display_name()} requested to join {group.name}.",
    )
    return join_request


@transaction.atomic
def process_join_request(*, request_id: UUID, user: User, action: str) -> JoinRequest:
    """
    Approve or reject a pending join request.

    Args:
        request_id: UUID of the join request
        user: Reviewer (needs manage_join_requests)
        action: 'approve' or 'reject'

    Raises:
        JoinRequestNotFoundError: If request doesn't exist or is not pending
        InsufficientPermissionsError: If reviewer lacks the permission
        GroupFullError: If approving would exceed max_members
        ValueError: If action is unknown
    """
    if action not in (APPROVE, REJECT):
        raise ValueError("Action must be 'approve' or 'reject'")

    try:
        join_request = (
            JoinRequest.objects
            .select_for_update()
            .select_related('user', 'group')
            .get(id=request_id, status=JoinRequestStatus.PENDING)
        )
    except JoinRequest.DoesNotExist:
        raise JoinRequestNotFoundError("Join request not found")

    require_permission(
        join_request.group_id,
        user,
        GroupPermission.MANAGE_JOIN_REQUESTS,
        "You cannot manage join requests for this group"
    )
    group = get_group(join_request.group_id, lock=True)

    if action == APPROVE:
        if group.is_full:
            raise GroupFullError("Group is full")
        add_member(group=group, user=join_request.user)
        join_request.status = JoinRequestStatus.APPROVED
        notification_type = NotificationType.JOIN_REQUEST_APPROVED
        message = f"Your request to join {group.name} was approved."
    else:
        join_request.status = JoinRequestStatus.REJECTED
        notification_type = NotificationType.JOIN_REQUEST_REJECTED
        message = f"Your request to join {group.name} was rejected."

    join_request.processed_by = user
    join_request.save(update_fields=['status', 'processed_by', 'updated_at'])

    create_notification(
        user=join_request.user,
        group=group,
        notification_type=notification_type,
        message=message,
    )
    log_activity(
        group=group,
        user=user,
        activity_type=ActivityType.JOIN_REQUEST_PROCESSED,
        details={'user_id': str(join_request.user_id), 'action': action},
    )
    return join_request


def list_join_requests(
    *,
    group_id: UUID,
    user: User,
    status: str = JoinRequestStatus.PENDING
) -> QuerySet[JoinRequest]:
    """
    Raises:
        InsufficientPermissionsError: If user lacks manage_join_requests
    """
    require_permission(
        group_id,
        user,
        GroupPermission.MANAGE_JOIN_REQUESTS,
        "You cannot view join requests for this group"
    )
    qs = JoinRequest.objects.filter(group_id=group_id).select_related('user', 'processed_by')
    if status:
        qs = qs.filter(status=status)
    return qs
