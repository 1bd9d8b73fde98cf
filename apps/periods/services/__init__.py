"""
Periods app services layer.

Meals, finance and shopping resolve the period of a new entry through
``resolve_editable_period`` so that locked periods stay read-only.
"""

from .exceptions import (
    PeriodsServiceError,
    PeriodNotFoundError,
    PeriodPermissionError,
    ActivePeriodExistsError,
    NoActivePeriodError,
    InvalidPeriodDatesError,
    PeriodOverlapError,
    PeriodStateError,
    PeriodLockedError,
)

from .period_management import (
    get_current_period,
    get_period,
    get_period_for_date,
    get_frozen_period_for_date,
    resolve_editable_period,
    list_periods,
    get_periods_by_month,
    start_period,
    end_period,
    lock_period,
    unlock_period,
    archive_period,
    restart_period,
    ensure_month_period,
    get_period_summary,
)


__all__ = [
    # Exceptions
    'PeriodsServiceError',
    'PeriodNotFoundError',
    'PeriodPermissionError',
    'ActivePeriodExistsError',
    'NoActivePeriodError',
    'InvalidPeriodDatesError',
    'PeriodOverlapError',
    'PeriodStateError',
    'PeriodLockedError',

    # Lookups
    'get_current_period',
    'get_period',
    'get_period_for_date',
    'get_frozen_period_for_date',
    'resolve_editable_period',
    'list_periods',
    'get_periods_by_month',

    # Lifecycle
    'start_period',
    'end_period',
    'lock_period',
    'unlock_period',
    'archive_period',
    'restart_period',
    'ensure_month_period',

    # Summary
    'get_period_summary',
]
