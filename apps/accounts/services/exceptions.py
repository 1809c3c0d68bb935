"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when user does not exist."""
    pass


class DuplicateUserError(AccountsServiceError):
    """Raised when email, phone, national id or identity subject is already taken."""
    pass


class InactiveUserError(AccountsServiceError):
    """Raised when an operation requires an active account."""
    pass


class AddressNotFoundError(AccountsServiceError):
    """Raised when address does not exist or belongs to another user."""
    pass


class GeocodingError(AccountsServiceError):
    """Raised when the geocoding provider cannot be reached or answers garbage."""
    pass


class SessionNotFoundError(AccountsServiceError):
    """Raised when session does not exist."""
    pass


class InvalidSessionError(AccountsServiceError):
    """Raised when session is expired or was invalidated."""
    pass
