"""
Meals app services layer.

Meal writes resolve their period from the meal date and invalidate the
group's cached figures.
"""

from .exceptions import (
    MealsServiceError,
    MealPermissionError,
    MealNotFoundError,
    InvalidMealActionError,
    MealLimitError,
    MealCutoffError,
    GuestMealsDisabledError,
    GuestMealLimitError,
    GuestMealNotFoundError,
)

from .settings_management import (
    get_meal_settings,
    update_meal_settings,
    get_auto_meal_settings,
    update_auto_meal_settings,
)

from .meal_management import (
    toggle_meal,
    get_meals,
    get_meal_stats,
)

from .guest_meals import (
    upsert_guest_meal,
    delete_guest_meal,
    get_guest_meals,
)

from .auto_meals import (
    trigger_auto_meals,
    process_auto_meals_for_all_groups,
)


__all__ = [
    # Exceptions
    'MealsServiceError',
    'MealPermissionError',
    'MealNotFoundError',
    'InvalidMealActionError',
    'MealLimitError',
    'MealCutoffError',
    'GuestMealsDisabledError',
    'GuestMealLimitError',
    'GuestMealNotFoundError',

    # Settings
    'get_meal_settings',
    'update_meal_settings',
    'get_auto_meal_settings',
    'update_auto_meal_settings',

    # Meals
    'toggle_meal',
    'get_meals',
    'get_meal_stats',

    # Guest meals
    'upsert_guest_meal',
    'delete_guest_meal',
    'get_guest_meals',

    # Auto meals
    'trigger_auto_meals',
    'process_auto_meals_for_all_groups',
]
