"""
Who may export and import which spreadsheets.

Privileged roles export every type for any scope and may import. Plain
members export their own meals, shopping and payments only.
"""

from datetime import date, timedelta
from typing import Optional, Tuple
from uuid import UUID

from django.db import models
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.models import GroupMembership
from apps.groups.roles import GroupRole
from apps.groups.services import get_active_membership

from .exceptions import ExcelPermissionError, InvalidExportOptionsError


class ExportType(models.TextChoices):
    MEALS = 'meals', 'Meals'
    SHOPPING = 'shopping', 'Shopping'
    PAYMENTS = 'payments', 'Payments'
    EXPENSES = 'expenses', 'Expenses'
    BALANCES = 'balances', 'Balances'
    CALCULATIONS = 'calculations', 'Calculations'
    ALL = 'all', 'All'


class ExportScope(models.TextChoices):
    ALL = 'all', 'All members'
    USER = 'user', 'Myself'
    INDIVIDUAL = 'individual', 'One member'


class DateRange(models.TextChoices):
    DAY = 'day', 'Today'
    WEEK = 'week', 'This week'
    MONTH = 'month', 'This month'
    CUSTOM = 'custom', 'Custom'


class ImportType(models.TextChoices):
    MEALS = 'meals', 'Meals'
    SHOPPING = 'shopping', 'Shopping'
    PAYMENTS = 'payments', 'Payments'


EXPORT_ROLES = frozenset({GroupRole.ADMIN, GroupRole.MANAGER, GroupRole.MEAL_MANAGER, GroupRole.MEMBER})
IMPORT_ROLES = frozenset({GroupRole.ADMIN, GroupRole.MANAGER, GroupRole.MEAL_MANAGER})
PRIVILEGED_ROLES = IMPORT_ROLES

MEMBER_EXPORT_TYPES = frozenset({ExportType.MEALS, ExportType.SHOPPING, ExportType.PAYMENTS})


def get_excel_permissions(role: Optional[str]) -> dict:
    """
    Spreadsheet capabilities of a role.

    Returns:
        dict: ``can_export``, ``can_import``, ``export_types``,
        ``export_scopes`` and ``import_types``
    """
    privileged = role in PRIVILEGED_ROLES
    can_export = role in EXPORT_ROLES
    return {
        'can_export': can_export,
        'can_import': role in IMPORT_ROLES,
        'export_types': (
            list(ExportType.values) if privileged
            else sorted(t.value for t in MEMBER_EXPORT_TYPES) if can_export
            else []
        ),
        'export_scopes': (
            list(ExportScope.values) if privileged
            else [ExportScope.USER.value] if can_export
            else []
        ),
        'import_types': list(ImportType.values) if role in IMPORT_ROLES else [],
    }


def require_export(group_id: UUID, user: User, export_type: str, scope: str) -> GroupMembership:
    """
    Raises:
        ExcelPermissionError: If the member may not export this type or scope
    """
    membership = get_active_membership(group_id, user)
    if membership is None:
        raise ExcelPermissionError("You are not a member of this group")

    permissions = get_excel_permissions(membership.role)
    if not permissions['can_export']:
        raise ExcelPermissionError("You don't have permission to export data")
    if export_type not in permissions['export_types']:
        raise ExcelPermissionError(f"You don't have permission to export {export_type}")
    if scope not in permissions['export_scopes']:
        raise ExcelPermissionError(f"You don't have permission to export with scope '{scope}'")
    return membership


def require_import(group_id: UUID, user: User, import_type: str) -> GroupMembership:
    """
    Raises:
        ExcelPermissionError: If the member may not import this type
    """
    membership = get_active_membership(group_id, user)
    if membership is None:
        raise ExcelPermissionError("You are not a member of this group")

    permissions = get_excel_permissions(membership.role)
    if not permissions['can_import']:
        raise ExcelPermissionError("You don't have permission to import data")
    if import_type not in permissions['import_types']:
        raise ExcelPermissionError(f"You don't have permission to import {import_type}")
    return membership


def resolve_date_range(
    date_range: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    today: Optional[date] = None
) -> Tuple[date, date]:
    """
    Inclusive bounds of an export.

    Weeks start on Monday. ``custom`` needs both bounds.

    Raises:
        InvalidExportOptionsError: If custom bounds are missing or reversed
    """
    today = today or timezone.localdate()

    if date_range == DateRange.CUSTOM:
        if start_date is None or end_date is None:
            raise InvalidExportOptionsError("A custom range needs a start and an end date")
        if end_date < start_date:
            raise InvalidExportOptionsError("End date cannot be before the start date")
        return start_date, end_date
    if date_range == DateRange.DAY:
        return today, today
    if date_range == DateRange.WEEK:
        start = today - timedelta(days=today.weekday())
        return start, start + timedelta(days=6)

    start = today.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, next_month - timedelta(days=1)
