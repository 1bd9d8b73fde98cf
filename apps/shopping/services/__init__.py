"""
Shopping app services layer.

The shopping list of the active period and members' market duties.
"""

from .exceptions import (
    ShoppingServiceError,
    ShoppingPermissionError,
    ShoppingItemNotFoundError,
    MarketDateNotFoundError,
    NoActivePeriodError,
    InvalidAssigneeError,
    DuplicateMarketDateError,
    FineNotAllowedError,
)

from .items import (
    create_shopping_item,
    update_shopping_item,
    toggle_purchased,
    delete_shopping_item,
    clear_purchased_items,
    list_shopping_items,
    shopping_summary,
)

from .market_dates import (
    assign_market_date,
    list_market_dates,
    update_market_date_status,
    delete_market_date,
    apply_fine,
)


__all__ = [
    # Exceptions
    'ShoppingServiceError',
    'ShoppingPermissionError',
    'ShoppingItemNotFoundError',
    'MarketDateNotFoundError',
    'NoActivePeriodError',
    'InvalidAssigneeError',
    'DuplicateMarketDateError',
    'FineNotAllowedError',

    # Shopping items
    'create_shopping_item',
    'update_shopping_item',
    'toggle_purchased',
    'delete_shopping_item',
    'clear_purchased_items',
    'list_shopping_items',
    'shopping_summary',

    # Market dates
    'assign_market_date',
    'list_market_dates',
    'update_market_date_status',
    'delete_market_date',
    'apply_fine',
]
