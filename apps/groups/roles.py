"""
Group roles and the static role → permission table.

This module has no model imports so that models, services and other apps
can all depend on it.
"""

from django.db import models


class GroupRole(models.TextChoices):
    ADMIN = 'ADMIN', 'Admin'
    MODERATOR = 'MODERATOR', 'Moderator'
    MANAGER = 'MANAGER', 'Manager'
    LEADER = 'LEADER', 'Leader'
    MEAL_MANAGER = 'MEAL_MANAGER', 'Meal manager'
    ACCOUNTANT = 'ACCOUNTANT', 'Accountant'
    MARKET_MANAGER = 'MARKET_MANAGER', 'Market manager'
    MEMBER = 'MEMBER', 'Member'
    BANNED = 'BANNED', 'Banned'


class GroupPermission(models.TextChoices):
    VIEW_GROUP = 'view_group', 'View group'
    EDIT_GROUP = 'edit_group', 'Edit group'
    DELETE_GROUP = 'delete_group', 'Delete group'
    MANAGE_MEMBERS = 'manage_members', 'Manage members'
    MANAGE_SETTINGS = 'manage_settings', 'Manage settings'
    SEND_MESSAGES = 'send_messages', 'Send messages'
    MANAGE_MEALS = 'manage_meals', 'Manage meals'
    MANAGE_FINANCE = 'manage_finance', 'Manage finance'
    MANAGE_MARKET = 'manage_market', 'Manage market'
    VIEW_FINANCE = 'view_finance', 'View finance'
    MANAGE_JOIN_REQUESTS = 'manage_join_requests', 'Manage join requests'
    CREATE_INVITES = 'create_invites', 'Create invites'
    VIEW_ACTIVITY_LOGS = 'view_activity_logs', 'View activity logs'


P = GroupPermission

ROLE_PERMISSIONS = {
    GroupRole.ADMIN: frozenset(P.values),
    GroupRole.MODERATOR: frozenset({
        P.VIEW_GROUP, P.SEND_MESSAGES, P.MANAGE_MEMBERS, P.MANAGE_MEALS,
        P.VIEW_FINANCE, P.MANAGE_JOIN_REQUESTS, P.CREATE_INVITES,
        P.VIEW_ACTIVITY_LOGS,
    }),
    GroupRole.MANAGER: frozenset({
        P.VIEW_GROUP, P.SEND_MESSAGES, P.MANAGE_MEALS, P.MANAGE_MARKET,
        P.VIEW_FINANCE, P.CREATE_INVITES, P.VIEW_ACTIVITY_LOGS,
    }),
    GroupRole.LEADER: frozenset({
        P.VIEW_GROUP, P.SEND_MESSAGES, P.MANAGE_MEMBERS, P.VIEW_FINANCE,
    }),
    GroupRole.MEAL_MANAGER: frozenset({
        P.VIEW_GROUP, P.SEND_MESSAGES, P.MANAGE_MEALS, P.VIEW_FINANCE,
    }),
    GroupRole.ACCOUNTANT: frozenset({
        P.VIEW_GROUP, P.SEND_MESSAGES, P.MANAGE_FINANCE, P.VIEW_FINANCE,
    }),
    GroupRole.MARKET_MANAGER: frozenset({
        P.VIEW_GROUP, P.SEND_MESSAGES, P.MANAGE_MARKET, P.VIEW_FINANCE,
    }),
    GroupRole.MEMBER: frozenset({
        P.VIEW_GROUP, P.SEND_MESSAGES, P.VIEW_FINANCE,
    }),
    GroupRole.BANNED: frozenset(),
}

# Role groupings used by the services
PERIOD_ADMIN_ROLES = frozenset({GroupRole.MANAGER, GroupRole.ADMIN, GroupRole.MODERATOR})
MEAL_ADMIN_ROLES = frozenset({GroupRole.ADMIN, GroupRole.MANAGER, GroupRole.MEAL_MANAGER})
FINANCE_PRIVILEGED_ROLES = frozenset({GroupRole.ADMIN, GroupRole.ACCOUNTANT})
INVITE_ROLES = frozenset({GroupRole.ADMIN, GroupRole.MODERATOR, GroupRole.MANAGER})
ACTIVITY_LOG_ROLES = frozenset({GroupRole.ADMIN, GroupRole.MODERATOR})


def has_permission(role, action, custom_permissions=None) -> bool:
    """
    Resolve whether a role may perform an action.

    Args:
        role: GroupRole value (or None for non-members)
        action: GroupPermission value
        custom_permissions: Optional per-member overrides, ``{action: bool}``

    Returns:
        True if allowed. BANNED is never allowed, an explicit override
        wins over the role table.
    """
    if role is None or role == GroupRole.BANNED:
        return False

    if custom_permissions and isinstance(custom_permissions.get(action), bool):
        return custom_permissions[action]

    return action in ROLE_PERMISSIONS.get(role, frozenset())


def get_role_permissions(role) -> list:
    """Sorted list of permissions granted by the role table."""
    return sorted(ROLE_PERMISSIONS.get(role, frozenset()))


# =============================================================================
# Balance / transaction rules
# =============================================================================

def is_finance_privileged(role) -> bool:
    return role in FINANCE_PRIVILEGED_ROLES


def can_view_user_balance(role, viewer_id, target_id) -> bool:
    """Members see their own balance, privileged roles see everyone's."""
    return str(viewer_id) == str(target_id) or is_finance_privileged(role)


def can_modify_transactions(role) -> bool:
    return is_finance_privileged(role)


def can_delete_transactions(role) -> bool:
    return role == GroupRole.ADMIN


def can_create_transaction(role, transaction_type, target_role) -> bool:
    """
    Privileged roles create any transaction. Everyone else may only pay
    money to a privileged member (e.g. hand cash to the accountant).
    """
    if role is None or role == GroupRole.BANNED:
        return False
    if is_finance_privileged(role):
        return True
    return transaction_type == 'PAYMENT' and is_finance_privileged(target_role)
