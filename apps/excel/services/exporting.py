"""
Spreadsheet export.

Every export type is built as a pandas DataFrame and written with
``pd.ExcelWriter(engine='openpyxl')`` into an in-memory workbook, one sheet
per type. Dates are written as ISO strings so that the same frames serve
the JSON preview.
"""

import io
import logging
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple
from uuid import UUID

import pandas as pd
from django.utils.text import slugify

from apps.accounts.models import User
from apps.analytics.analytics import MealCalculations, resolve_period
from apps.finance.models import Payment, ExtraExpense
from apps.groups.models import GroupMembership
from apps.meals.models import Meal, MealType
from apps.periods.services import get_period_for_date
from apps.shopping.models import ShoppingItem

from .exceptions import InvalidExportOptionsError
from .permissions import ExportType, ExportScope, require_export, resolve_date_range

logger = logging.getLogger(__name__)

MEAL_COLUMNS = ['Date', 'Name', 'Breakfast', 'Lunch', 'Dinner', 'Total']
SHOPPING_COLUMNS = ['Date', 'Description', 'Amount', 'AddedBy']
PAYMENT_COLUMNS = ['Date', 'Name', 'Amount', 'Method', 'Status']
EXPENSE_COLUMNS = ['Date', 'Name', 'Description', 'Type', 'Amount']
BALANCE_COLUMNS = ['Name', 'Role', 'Meals', 'GuestMeals', 'TotalMeals', 'Cost', 'Paid', 'Balance']
CALCULATION_COLUMNS = ['Period', 'Start', 'End', 'TotalMeals', 'TotalExpenses', 'MealRate', 'TotalPayments']

SHEET_NAMES = {
    ExportType.MEALS: 'Meals',
    ExportType.SHOPPING: 'Shopping',
    ExportType.PAYMENTS: 'Payments',
    ExportType.EXPENSES: 'Expenses',
    ExportType.BALANCES: 'Balances',
    ExportType.CALCULATIONS: 'Calculations',
}

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _members(group_id: UUID, user_ids: Optional[List[UUID]]) -> List[User]:
    qs = (
        GroupMembership.objects
        .filter(group_id=group_id, is_banned=False)
        .select_related('user')
        .order_by('joined_at')
    )
    if user_ids is not None:
        qs = qs.filter(user_id__in=user_ids)
    return [m.user for m in qs]


def _days(start: date, end: date) -> List[date]:
    return [start + timedelta(days=n) for n in range((end - start).days + 1)]


def meals_frame(group_id: UUID, start: date, end: date, user_ids: Optional[List[UUID]] = None) -> pd.DataFrame:
    """One row per day and member with 0/1 per meal type."""
    members = _members(group_id, user_ids)

    meals = Meal.objects.filter(group_id=group_id, date__gte=start, date__lte=end)
    if user_ids is not None:
        meals = meals.filter(user_id__in=user_ids)
    taken = set(meals.values_list('date', 'user_id', 'type'))

    rows = []
    for day in _days(start, end):
        for member in members:
            flags = [int((day, member.id, t) in taken) for t in MealType.values]
            rows.append([day.isoformat(), member.get_display_name(), *flags, sum(flags)])
    return pd.DataFrame(rows, columns=MEAL_COLUMNS)


def shopping_frame(group_id: UUID, start: date, end: date, user_ids: Optional[List[UUID]] = None) -> pd.DataFrame:
    items = (
        ShoppingItem.objects
        .filter(group_id=group_id, date__gte=start, date__lte=end)
        .select_related('user')
        .order_by('date', 'created_at')
    )
    if user_ids is not None:
        items = items.filter(user_id__in=user_ids)

    rows = [
        [
            item.date.isoformat(),
            item.name,
            float(item.quantity),
            item.user.get_display_name() if item.user else '',
        ]
        for item in items
    ]
    return pd.DataFrame(rows, columns=SHOPPING_COLUMNS)


def payments_frame(group_id: UUID, start: date, end: date, user_ids: Optional[List[UUID]] = None) -> pd.DataFrame:
    payments = (
        Payment.objects
        .filter(group_id=group_id, date__gte=start, date__lte=end)
        .select_related('user')
        .order_by('date', 'created_at')
    )
    if user_ids is not None:
        payments = payments.filter(user_id__in=user_ids)

    rows = [
        [p.date.isoformat(), p.user.get_display_name(), float(p.amount), p.method, p.status]
        for p in payments
    ]
    return pd.DataFrame(rows, columns=PAYMENT_COLUMNS)


def expenses_frame(group_id: UUID, start: date, end: date, user_ids: Optional[List[UUID]] = None) -> pd.DataFrame:
    expenses = (
        ExtraExpense.objects
        .filter(group_id=group_id, date__gte=start, date__lte=end)
        .select_related('user')
        .order_by('date', 'created_at')
    )
    if user_ids is not None:
        expenses = expenses.filter(user_id__in=user_ids)

    rows = [
        [e.date.isoformat(), e.user.get_display_name(), e.description, e.type, float(e.amount)]
        for e in expenses
    ]
    return pd.DataFrame(rows, columns=EXPENSE_COLUMNS)


def _period_of(group_id: UUID, start: date):
    return get_period_for_date(group_id=group_id, day=start) or resolve_period(group_id)


def balances_frame(group_id: UUID, start: date, end: date, user_ids: Optional[List[UUID]] = None) -> pd.DataFrame:
    """Member billing of the period containing ``start`` (or the active one)."""
    period = _period_of(group_id, start)
    summaries = MealCalculations.user_summaries(group_id, period.id if period else None)
    if user_ids is not None:
        summaries = [row for row in summaries if row['user_id'] in user_ids]

    rows = [
        [
            row['name'],
            row['role'],
            row['meals'],
            row['guest_meals'],
            row['total_meals'],
            float(row['cost']),
            float(row['paid']),
            float(row['balance']),
        ]
        for row in summaries
    ]
    return pd.DataFrame(rows, columns=BALANCE_COLUMNS)


def calculations_frame(group_id: UUID, start: date, end: date, user_ids: Optional[List[UUID]] = None) -> pd.DataFrame:
    """Period totals and meal rate. Scope does not narrow group figures."""
    period = _period_of(group_id, start)
    if period is None:
        return pd.DataFrame([], columns=CALCULATION_COLUMNS)

    rows = [[
        period.name,
        period.start_date.isoformat(),
        period.end_date.isoformat() if period.end_date else '',
        MealCalculations.total_meals(group_id, period.id),
        float(MealCalculations.total_expenses(group_id, period.id)),
        float(MealCalculations.meal_rate(group_id, period.id)),
        float(MealCalculations.total_payments(group_id, period.id)),
    ]]
    return pd.DataFrame(rows, columns=CALCULATION_COLUMNS)


FRAME_BUILDERS = {
    ExportType.MEALS: meals_frame,
    ExportType.SHOPPING: shopping_frame,
    ExportType.PAYMENTS: payments_frame,
    ExportType.EXPENSES: expenses_frame,
    ExportType.BALANCES: balances_frame,
    ExportType.CALCULATIONS: calculations_frame,
}


def write_workbook(frames: Dict[str, pd.DataFrame]) -> bytes:
    """Write ``{sheet name: frame}`` into an xlsx file in memory."""
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        for sheet_name, df in frames.items():
            df.to_excel(writer, index=False, sheet_name=sheet_name)
    output.seek(0)
    return output.getvalue()


def _scope_user_ids(membership: GroupMembership, scope: str, user_id: Optional[UUID]) -> Optional[List[UUID]]:
    if scope == ExportScope.ALL:
        return None
    if scope == ExportScope.INDIVIDUAL:
        if user_id is None:
            raise InvalidExportOptionsError("Choose the member to export")
        if not GroupMembership.objects.filter(
            group_id=membership.group_id, user_id=user_id, is_banned=False
        ).exists():
            raise InvalidExportOptionsError("That user is not a member of this group")
        return [user_id]
    return [membership.user_id]


def build_frames(
    *,
    group_id: UUID,
    user: User,
    export_type: str,
    scope: str,
    date_range: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: Optional[UUID] = None
) -> Tuple[Dict[str, pd.DataFrame], date, date]:
    """
    Frames of an export after checking the member's role.

    Args:
        group_id: UUID of the group
        user: Member exporting
        export_type: ExportType value
        scope: ExportScope value
        date_range: DateRange value
        start_date: Start of a custom range
        end_date: End of a custom range
        user_id: Member to export with scope ``individual``

    Returns:
        tuple: ``({sheet name: DataFrame}, start, end)``

    Raises:
        ExcelPermissionError: If the role may not export this type or scope
        InvalidExportOptionsError: If the range or the scope target is invalid
    """
    membership = require_export(group_id, user, export_type, scope)
    start, end = resolve_date_range(date_range, start_date, end_date)
    user_ids = _scope_user_ids(membership, scope, user_id)

    types = list(FRAME_BUILDERS) if export_type == ExportType.ALL else [ExportType(export_type)]
    frames = {
        SHEET_NAMES[t]: FRAME_BUILDERS[t](group_id, start, end, user_ids)
        for t in types
    }
    return frames, start, end


def export_workbook(**options) -> Tuple[str, bytes]:
    """
    Build an export as an xlsx file.

    Takes the same keyword arguments as ``build_frames``.

    Returns:
        tuple: ``(filename, content)``
    """
    frames, start, end = build_frames(**options)
    membership = GroupMembership.objects.select_related('group').get(
        group_id=options['group_id'], user=options['user']
    )
    filename = f"{slugify(membership.group.name) or 'group'}_{options['export_type']}_{start}_to_{end}.xlsx"

    content = write_workbook(frames)
    logger.info(
        "Exported %s (%s) of group %s for %s",
        options['export_type'], options['scope'], options['group_id'], options['user'].id
    )
    return filename, content


def export_preview(**options) -> dict:
    """
    Rows of an export as JSON-ready records.

    Returns:
        dict: ``start_date``, ``end_date`` and ``sheets`` mapping each sheet
        name to its list of row dicts
    """
    frames, start, end = build_frames(**options)
    return {
        'start_date': start,
        'end_date': end,
        'sheets': {name: df.to_dict(orient='records') for name, df in frames.items()},
    }
