"""
Domain-specific exceptions for groups app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class GroupsServiceError(Exception):
    """Base exception for all groups service errors."""
    pass


class GroupNotFoundError(GroupsServiceError):
    """Raised when a group does not exist or is inaccessible."""
    pass


class AlreadyMemberError(GroupsServiceError):
    """Raised when a user tries to join a group they're already in."""
    pass


class NotMemberError(GroupsServiceError):
    """Raised when a user tries to perform an action requiring membership."""
    pass


class InsufficientPermissionsError(GroupsServiceError):
    """Raised when a user lacks required permissions for an action."""
    pass


class InvalidPasswordError(GroupsServiceError):
    """Raised when a private group's password does not match."""
    pass


class JoinRequestRequiredError(GroupsServiceError):
    """Raised when a private group has no password and must be requested."""
    pass


class InvalidInviteTokenError(GroupsServiceError):
    """Raised when an invite token is unknown, used, or for another group."""
    pass


class ExpiredInviteTokenError(GroupsServiceError):
    """Raised when an invite token has expired."""
    pass


class GroupFullError(GroupsServiceError):
    """Raised when a group has reached max_members."""
    pass


class CannotRemoveAdminError(GroupsServiceError):
    """Raised when attempting to remove a group admin."""
    pass


class CannotChangeRoleError(GroupsServiceError):
    """Raised when a role change is not allowed (creator, self)."""
    pass


class JoinRequestExistsError(GroupsServiceError):
    """Raised when a pending or approved join request already exists."""
    pass


class JoinRequestNotFoundError(GroupsServiceError):
    """Raised when a join request does not exist or was already processed."""
    pass


class InvitationNotFoundError(GroupsServiceError):
    """Raised when an email invitation token is unknown."""
    pass


class InvalidInvitationError(GroupsServiceError):
    """Raised when an invitation is expired, used, or addressed to someone else."""
    pass


class PeriodModeChangeError(GroupsServiceError):
    """Raised when the period mode cannot change while a period is active."""
    pass
