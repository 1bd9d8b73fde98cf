"""
Spreadsheet import and import templates.

The first sheet of an uploaded workbook is read with ``pd.read_excel``.
Member names are matched case-insensitively against display names and
emails. Each row is written in its own transaction; failing rows are
reported and skipped.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple
from uuid import UUID

import pandas as pd
from django.db import transaction

from apps.accounts.models import User
from apps.analytics.cache import invalidate_group_cache
from apps.finance.models import Payment, PaymentMethod, PaymentStatus
from apps.groups.models import GroupMembership
from apps.meals.models import Meal, MealType
from apps.periods.services import resolve_editable_period, PeriodsServiceError
from apps.shopping.models import ShoppingItem

from .exceptions import InvalidWorkbookError
from .exporting import MEAL_COLUMNS, SHOPPING_COLUMNS, PAYMENT_COLUMNS, write_workbook
from .permissions import ImportType, require_import

logger = logging.getLogger(__name__)

TEMPLATE_COLUMNS = {
    ImportType.MEALS: MEAL_COLUMNS[:-1],
    ImportType.SHOPPING: SHOPPING_COLUMNS,
    ImportType.PAYMENTS: PAYMENT_COLUMNS,
}

REQUIRED_COLUMNS = {
    ImportType.MEALS: {'Date', 'Name'},
    ImportType.SHOPPING: {'Date', 'Description', 'Amount'},
    ImportType.PAYMENTS: {'Date', 'Name', 'Amount'},
}


class RowError(Exception):
    """A single spreadsheet row that cannot be imported."""
    pass


def _blank(value) -> bool:
    return value is None or (not isinstance(value, str) and pd.isna(value)) or str(value).strip() == ''


def _text(value) -> str:
    return '' if _blank(value) else str(value).strip()


def _parse_date(value) -> date:
    if _blank(value):
        raise RowError("Date is missing")
    try:
        return pd.to_datetime(value).date()
    except (ValueError, TypeError):
        raise RowError(f"Invalid date '{value}'")


def _parse_amount(value, *, positive: bool) -> Decimal:
    if _blank(value):
        raise RowError("Amount is missing")
    try:
        amount = Decimal(str(value).strip()).quantize(Decimal('0.01'))
    except InvalidOperation:
        raise RowError(f"Invalid amount '{value}'")
    if amount < 0 or (positive and amount == 0):
        raise RowError(f"Amount must be {'positive' if positive else 'zero or more'}")
    return amount


def _is_marked(value) -> bool:
    if _blank(value):
        return False
    text = str(value).strip().lower()
    return text not in ('0', '0.0', 'no', 'false', 'n')


def _member_lookup(group_id: UUID) -> Dict[str, User]:
    lookup = {}
    for membership in (
        GroupMembership.objects
        .filter(group_id=group_id, is_banned=False)
        .select_related('user')
    ):
        user = membership.user
        lookup[user.email.lower()] = user
        lookup.setdefault(user.get_display_name().lower(), user)
    return lookup


def _find_member(lookup: Dict[str, User], name) -> User:
    key = _text(name).lower()
    if not key:
        raise RowError("Name is missing")
    try:
        return lookup[key]
    except KeyError:
        raise RowError(f"No member named '{_text(name)}'")


def _period(group_id: UUID, day: date):
    try:
        return resolve_editable_period(group_id=group_id, day=day)
    except PeriodsServiceError as e:
        raise RowError(str(e))


def _import_meal_row(group_id: UUID, row: dict, lookup: Dict[str, User], importer: User) -> None:
    day = _parse_date(row.get('Date'))
    member = _find_member(lookup, row.get('Name'))
    period = _period(group_id, day)

    for meal_type in MealType.values:
        if _is_marked(row.get(meal_type.capitalize())):
            Meal.objects.get_or_create(
                user=member,
                group_id=group_id,
                date=day,
                type=meal_type,
                defaults={'period': period},
            )


def _import_shopping_row(group_id: UUID, row: dict, lookup: Dict[str, User], importer: User) -> None:
    day = _parse_date(row.get('Date'))
    name = _text(row.get('Description'))
    if not name:
        raise RowError("Description is missing")
    quantity = _parse_amount(row.get('Amount'), positive=False)
    added_by = _find_member(lookup, row['AddedBy']) if not _blank(row.get('AddedBy')) else importer

    ShoppingItem.objects.create(
        group_id=group_id,
        user=added_by,
        name=name[:200],
        quantity=quantity,
        date=day,
        period=_period(group_id, day),
    )


def _import_payment_row(group_id: UUID, row: dict, lookup: Dict[str, User], importer: User) -> None:
    day = _parse_date(row.get('Date'))
    member = _find_member(lookup, row.get('Name'))
    amount = _parse_amount(row.get('Amount'), positive=True)

    method = _text(row.get('Method')).upper().replace(' ', '_') or PaymentMethod.CASH
    if method not in PaymentMethod.values:
        raise RowError(f"Unknown payment method '{_text(row.get('Method'))}'")
    payment_status = _text(row.get('Status')).upper() or PaymentStatus.COMPLETED
    if payment_status not in PaymentStatus.values:
        raise RowError(f"Unknown payment status '{_text(row.get('Status'))}'")

    Payment.objects.create(
        group_id=group_id,
        user=member,
        amount=amount,
        date=day,
        method=method,
        status=payment_status,
        description='Imported from spreadsheet',
        period=_period(group_id, day),
        created_by=importer,
    )


ROW_IMPORTERS = {
    ImportType.MEALS: _import_meal_row,
    ImportType.SHOPPING: _import_shopping_row,
    ImportType.PAYMENTS: _import_payment_row,
}


def read_rows(file, import_type: str) -> List[dict]:
    """
    Rows of the first sheet as dicts keyed by column header.

    Raises:
        InvalidWorkbookError: If the file is not a readable workbook or
            lacks a required column
    """
    try:
        df = pd.read_excel(file, sheet_name=0, dtype=object)
    except Exception as e:
        raise InvalidWorkbookError("The file could not be read as an Excel workbook") from e

    df.columns = [str(column).strip() for column in df.columns]
    missing = REQUIRED_COLUMNS[import_type] - set(df.columns)
    if missing:
        raise InvalidWorkbookError(f"Missing column(s): {', '.join(sorted(missing))}")
    return df.to_dict(orient='records')


def import_workbook(*, group_id: UUID, user: User, import_type: str, file) -> dict:
    """
    Create meals, shopping items or payments from an uploaded workbook.

    Meals that already exist are left untouched. Rows dated inside a
    locked period are rejected.

    Args:
        group_id: UUID of the group
        user: Member importing (ADMIN, MANAGER or MEAL_MANAGER)
        import_type: ImportType value
        file: Uploaded file or binary stream

    Returns:
        dict: ``imported``, ``total``, ``failed`` and ``errors``
        (``"Row n: reason"`` with spreadsheet row numbers)

    Raises:
        ExcelPermissionError: If the role may not import
        InvalidWorkbookError: If the workbook is unreadable
    """
    require_import(group_id, user, import_type)
    rows = read_rows(file, import_type)
    lookup = _member_lookup(group_id)
    import_row = ROW_IMPORTERS[ImportType(import_type)]

    imported = 0
    errors = []
    # Header is row 1
    for number, row in enumerate(rows, start=2):
        try:
            with transaction.atomic():
                import_row(group_id, row, lookup, user)
        except RowError as e:
            errors.append(f"Row {number}: {e}")
            continue
        imported += 1

    if imported:
        invalidate_group_cache(group_id)

    logger.info(
        "Imported %s/%s %s row(s) into group %s by %s",
        imported, len(rows), import_type, group_id, user.id
    )
    return {
        'imported': imported,
        'total': len(rows),
        'failed': len(errors),
        'errors': errors,
    }


def import_template(import_type: Optional[str] = None) -> Tuple[str, bytes]:
    """
    Empty workbook with the import columns.

    One sheet for the given type, or one sheet per type when omitted.

    Returns:
        tuple: ``(filename, content)``
    """
    types = [ImportType(import_type)] if import_type else list(ImportType)
    frames = {t.label: pd.DataFrame(columns=TEMPLATE_COLUMNS[t]) for t in types}
    name = import_type or 'import'
    return f"{name}_template.xlsx", write_workbook(frames)
