"""
Domain-specific exceptions for periods app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class PeriodsServiceError(Exception):
    """Base exception for all periods service errors."""
    pass


class PeriodNotFoundError(PeriodsServiceError):
    """Raised when a period does not exist or belongs to another group."""
    pass


class PeriodPermissionError(PeriodsServiceError):
    """Raised when a user may not manage the group's periods."""
    pass


class ActivePeriodExistsError(PeriodsServiceError):
    """Raised when starting a period while another one is active."""
    pass


class NoActivePeriodError(PeriodsServiceError):
    """Raised when an operation needs an active period and there is none."""
    pass


class InvalidPeriodDatesError(PeriodsServiceError):
    """Raised when start/end dates are inconsistent."""
    pass


class PeriodOverlapError(PeriodsServiceError):
    """Raised when a period's range overlaps another period."""
    pass


class PeriodStateError(PeriodsServiceError):
    """Raised when a period is not in the status an operation requires."""
    pass


class PeriodLockedError(PeriodsServiceError):
    """Raised when writing data that falls into a locked period."""
    pass
