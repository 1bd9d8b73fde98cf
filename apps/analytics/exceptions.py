"""
Domain exceptions for analytics app.

Exception Hierarchy:
    AnalyticsServiceError (base)
    └── PeriodNotFoundError

Usage:
    from apps.analytics.exceptions import PeriodNotFoundError

    period = resolve_period(group_id, period_id)
    if period_id is not None and period is None:
        raise PeriodNotFoundError("Period not found")
"""


class AnalyticsServiceError(Exception):
    """
    Base exception for all analytics service errors.

    Views catch it and answer with the matching status code:

        try:
            period = get_report_period(group_id, period_id)
        except AnalyticsServiceError as e:
            return _service_error_response(e)
    """

    pass


class PeriodNotFoundError(AnalyticsServiceError):
    """Raised when the requested period does not belong to the group."""

    pass
