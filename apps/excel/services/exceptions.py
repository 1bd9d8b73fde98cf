"""
Domain-specific exceptions for excel app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class ExcelServiceError(Exception):
    """Base exception for all excel service errors."""
    pass


class ExcelPermissionError(ExcelServiceError):
    """Raised when a member's role does not allow the export or import."""
    pass


class InvalidExportOptionsError(ExcelServiceError):
    """Raised when the export type, scope or date range is invalid."""
    pass


class InvalidWorkbookError(ExcelServiceError):
    """Raised when an uploaded file cannot be read as a workbook."""
    pass
