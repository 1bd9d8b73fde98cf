"""
Groups app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    GroupsServiceError,
    GroupNotFoundError,
    AlreadyMemberError,
    NotMemberError,
    InsufficientPermissionsError,
    InvalidPasswordError,
    JoinRequestRequiredError,
    InvalidInviteTokenError,
    ExpiredInviteTokenError,
    GroupFullError,
    CannotRemoveAdminError,
    CannotChangeRoleError,
    JoinRequestExistsError,
    JoinRequestNotFoundError,
    InvitationNotFoundError,
    InvalidInvitationError,
    PeriodModeChangeError,
)

from .access import (
    get_group,
    get_active_membership,
    require_membership,
    require_permission,
    require_role,
)

from .activity_log import (
    log_activity,
    get_activity_logs,
)

from .group_management import (
    create_group,
    update_group,
    delete_group,
    get_group_by_id,
    get_user_groups,
    get_current_group,
    set_current_group,
    update_period_mode,
)

from .membership_management import (
    join_group,
    leave_group,
    remove_member,
    get_group_members,
    get_notification_settings,
    update_notification_settings,
)

from .role_management import (
    update_member_role,
)

from .join_requests import (
    create_join_request,
    process_join_request,
    list_join_requests,
)

from .invite_management import (
    create_invite_token,
    get_invite_token,
    send_invitations,
    accept_invitation,
)


__all__ = [
    # Exceptions
    'GroupsServiceError',
    'GroupNotFoundError',
    'AlreadyMemberError',
    'NotMemberError',
    'InsufficientPermissionsError',
    'InvalidPasswordError',
    'JoinRequestRequiredError',
    'InvalidInviteTokenError',
    'ExpiredInviteTokenError',
    'GroupFullError',
    'CannotRemoveAdminError',
    'CannotChangeRoleError',
    'JoinRequestExistsError',
    'JoinRequestNotFoundError',
    'InvitationNotFoundError',
    'InvalidInvitationError',
    'PeriodModeChangeError',

    # Access
    'get_group',
    'get_active_membership',
    'require_membership',
    'require_permission',
    'require_role',

    # Activity log
    'log_activity',
    'get_activity_logs',

    # Group Management
    'create_group',
    'update_group',
    'delete_group',
    'get_group_by_id',
    'get_user_groups',
    'get_current_group',
    'set_current_group',
    'update_period_mode',

    # Membership Management
    'join_group',
    'leave_group',
    'remove_member',
    'get_group_members',
    'get_notification_settings',
    'update_notification_settings',

    # Role Management
    'update_member_role',

    # Join requests
    'create_join_request',
    'process_join_request',
    'list_join_requests',

    # Invites
    'create_invite_token',
    'get_invite_token',
    'send_invitations',
    'accept_invitation',
]
