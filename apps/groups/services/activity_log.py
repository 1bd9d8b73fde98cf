"""
Activity log service.

Records administrative actions and exposes the latest entries to
admins and moderators.
"""

from typing import Optional
from uuid import UUID

from django.db.models import QuerySet

from apps.accounts.models import User
from apps.groups.models import Group, GroupActivityLog
from apps.groups.roles import ACTIVITY_LOG_ROLES

from .access import require_role

ACTIVITY_LOG_LIMIT = 50


def log_activity(
    *,
    group: Group,
    user: Optional[User],
    activity_type: str,
    details: Optional[dict] = None
) -> GroupActivityLog:
    return GroupActivityLog.objects.create(
        group=group,
        user=user,
        type=activity_type,
        details=details or {},
    )


def get_activity_logs(*, group_id: UUID, user: User) -> QuerySet[GroupActivityLog]:
    """
    Latest 50 activity entries of a group.

    Raises:
        NotMemberError: If user is not a member
        InsufficientPermissionsError: If user is not ADMIN or MODERATOR
    """
    require_role(
        group_id,
        user,
        ACTIVITY_LOG_ROLES,
        "Only admins and moderators can view activity logs"
    )
    return (
        GroupActivityLog.objects
        .filter(group_id=group_id)
        .select_related('user')
        .order_by('-created_at')[:ACTIVITY_LOG_LIMIT]
    )
