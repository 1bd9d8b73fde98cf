"""
Domain-specific exceptions for shopping app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class ShoppingServiceError(Exception):
    """Base exception for all shopping service errors."""
    pass


class ShoppingPermissionError(ShoppingServiceError):
    """Raised when a user may not change the shopping list or market duties."""
    pass


class ShoppingItemNotFoundError(ShoppingServiceError):
    """Raised when a shopping item does not exist in the group."""
    pass


class MarketDateNotFoundError(ShoppingServiceError):
    """Raised when a market date does not exist in the group."""
    pass


class NoActivePeriodError(ShoppingServiceError):
    """Raised when adding items while the group has no active period."""
    pass


class InvalidAssigneeError(ShoppingServiceError):
    """Raised when market duty is assigned to a non-member."""
    pass


class DuplicateMarketDateError(ShoppingServiceError):
    """Raised when a member already has market duty on that day."""
    pass


class FineNotAllowedError(ShoppingServiceError):
    """Raised when a market date cannot be fined."""
    pass
