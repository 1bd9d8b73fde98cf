"""
Domain-specific exceptions for finance app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class FinanceServiceError(Exception):
    """Base exception for all finance service errors."""
    pass


class FinancePermissionError(FinanceServiceError):
    """Raised when a user may not read or change the group's money."""
    pass


class PaymentNotFoundError(FinanceServiceError):
    """Raised when a payment does not exist in the group."""
    pass


class ExpenseNotFoundError(FinanceServiceError):
    """Raised when an extra expense does not exist in the group."""
    pass


class TransactionNotFoundError(FinanceServiceError):
    """Raised when an account transaction does not exist in the group."""
    pass


class ActivePeriodRequiredError(FinanceServiceError):
    """Raised when recording money without an active period."""
    pass


class InvalidAmountError(FinanceServiceError):
    """Raised when an amount is zero, negative or otherwise unusable."""
    pass


class InvalidTargetError(FinanceServiceError):
    """Raised when the target user is not an active member of the group."""
    pass
