"""
Finance app services layer.

Payments, shared expenses, the account ledger and balances.
"""

from .exceptions import (
    FinanceServiceError,
    FinancePermissionError,
    PaymentNotFoundError,
    ExpenseNotFoundError,
    TransactionNotFoundError,
    ActivePeriodRequiredError,
    InvalidAmountError,
    InvalidTargetError,
)

from .payments import (
    create_payment,
    list_payments,
    update_payment_status,
    delete_payment,
)

from .expenses import (
    create_expense,
    update_expense,
    delete_expense,
    list_expenses,
)

from .transactions import (
    create_transaction,
    update_transaction,
    delete_transaction,
    list_transactions,
    list_transaction_history,
)

from .balances import (
    user_balance,
    group_total_balance,
    available_balance,
    get_user_balance,
    group_balance_summary,
)


__all__ = [
    # Exceptions
    'FinanceServiceError',
    'FinancePermissionError',
    'PaymentNotFoundError',
    'ExpenseNotFoundError',
    'TransactionNotFoundError',
    'ActivePeriodRequiredError',
    'InvalidAmountError',
    'InvalidTargetError',

    # Payments
    'create_payment',
    'list_payments',
    'update_payment_status',
    'delete_payment',

    # Expenses
    'create_expense',
    'update_expense',
    'delete_expense',
    'list_expenses',

    # Transactions
    'create_transaction',
    'update_transaction',
    'delete_transaction',
    'list_transactions',
    'list_transaction_history',

    # Balances
    'user_balance',
    'group_total_balance',
    'available_balance',
    'get_user_balance',
    'group_balance_summary',
]
