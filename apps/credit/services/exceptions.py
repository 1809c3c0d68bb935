"""Domain-specific exceptions for credit services."""


class CreditServiceError(Exception):
    """Base exception for credit services."""
    pass


class CreditProfileNotFoundError(CreditServiceError):
    """Raised when user has no credit profile."""
    pass


class DuplicateCreditProfileError(CreditServiceError):
    """Raised when user already has a credit profile."""
    pass


class InsufficientCreditError(CreditServiceError):
    """Raised when available credit does not cover the requested amount."""
    pass


class CreditDefaultError(CreditServiceError):
    """Raised when a user in default requests new credit."""
    pass


class CreditNotAllowedError(CreditServiceError):
    """Raised when the product, amount or duration is not eligible for credit."""
    pass


class CreditSettingsNotFoundError(CreditServiceError):
    """Raised when no active credit settings cover the duration and amount."""
    pass


class PlanNotFoundError(CreditServiceError):
    """Raised when installment plan does not exist."""
    pass


class InvalidPlanStateError(CreditServiceError):
    """Raised when an operation is not allowed in the plan's current status."""
    pass


class OverpaymentError(CreditServiceError):
    """Raised when a payment exceeds what the plan still owes."""
    pass


class InvalidAmountError(CreditServiceError):
    """Raised when a payment or reversal amount is not positive."""
    pass
