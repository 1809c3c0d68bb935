"""Domain-specific exceptions for payment services."""


class PaymentsServiceError(Exception):
    """Base exception for payment services."""
    pass


class TransactionNotFoundError(PaymentsServiceError):
    """Raised when payment transaction does not exist."""
    pass


class InvalidTransactionStateError(PaymentsServiceError):
    """Raised when a transaction cannot move to the requested status."""
    pass


class PlanNotPayableError(PaymentsServiceError):
    """Raised when paying a plan that is not ACTIVE or LATE."""
    pass


class InvalidPaymentAmountError(PaymentsServiceError):
    """Raised when the amount is not positive or exceeds what is owed."""
    pass
