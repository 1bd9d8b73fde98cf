"""
Domain-specific exceptions for meals app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class MealsServiceError(Exception):
    """Base exception for all meals service errors."""
    pass


class MealPermissionError(MealsServiceError):
    """Raised when a user may not change the meals or settings in question."""
    pass


class MealNotFoundError(MealsServiceError):
    """Raised when removing a meal that does not exist."""
    pass


class InvalidMealActionError(MealsServiceError):
    """Raised for an unknown toggle action."""
    pass


class MealLimitError(MealsServiceError):
    """Raised when a member already has max_meals_per_day meals on a day."""
    pass


class MealCutoffError(MealsServiceError):
    """Raised when a regular member edits a past day or today's meal after its cutoff."""
    pass


class GuestMealsDisabledError(MealsServiceError):
    """Raised when the group does not allow guest meals."""
    pass


class GuestMealLimitError(MealsServiceError):
    """Raised when a day's guest meals would exceed guest_meal_limit."""
    pass


class GuestMealNotFoundError(MealsServiceError):
    """Raised when a guest meal does not exist or belongs to another group."""
    pass
