"""Services for payment transactions."""

from .exceptions import (
    PaymentsServiceError,
    TransactionNotFoundError,
    InvalidTransactionStateError,
    PlanNotPayableError,
    InvalidPaymentAmountError,
)
from .transaction_management import (
    get_transaction_by_number,
    get_plan_transactions,
    initiate_payment,
    confirm_payment,
    fail_payment,
    refund_payment,
)

__all__ = [
    # Exceptions
    'PaymentsServiceError',
    'TransactionNotFoundError',
    'InvalidTransactionStateError',
    'PlanNotPayableError',
    'InvalidPaymentAmountError',
    # Transactions
    'get_transaction_by_number',
    'get_plan_transactions',
    'initiate_payment',
    'confirm_payment',
    'fail_payment',
    'refund_payment',
]
