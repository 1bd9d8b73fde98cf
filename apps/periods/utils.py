"""Period naming and monthly period helpers."""

import calendar
from datetime import date
from typing import Optional, Tuple
from uuid import UUID

from apps.periods.models import MealPeriod, PeriodStatus


def month_period_name(day: date) -> str:
    """``date(2026, 10, 5)`` → ``'October 2026'``."""
    return f"{calendar.month_name[day.month]} {day.year}"


def month_bounds(day: date) -> Tuple[date, date]:
    """First and last day of the month containing ``day``."""
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def unique_period_name(group_id: UUID, name: str) -> str:
    """Return ``name`` or the first free ``"name (N)"`` variant, N >= 2."""
    taken = set(
        MealPeriod.objects
        .filter(group_id=group_id, name__startswith=name)
        .values_list('name', flat=True)
    )
    if name not in taken:
        return name

    n = 2
    while f"{name} ({n})" in taken:
        n += 1
    return f"{name} ({n})"


def create_month_period(*, group, day: date, created_by=None) -> MealPeriod:
    """
    Create the ACTIVE period covering the month of ``day``.

    Callers are responsible for checking that no period is active.
    """
    start, end = month_bounds(day)
    return MealPeriod.objects.create(
        group=group,
        name=unique_period_name(group.id, month_period_name(day)),
        start_date=start,
        end_date=end,
        status=PeriodStatus.ACTIVE,
        created_by=created_by,
    )


def active_period(group_id: UUID) -> Optional[MealPeriod]:
    return (
        MealPeriod.objects
        .filter(group_id=group_id, status=PeriodStatus.ACTIVE)
        .first()
    )
