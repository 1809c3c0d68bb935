"""Domain-specific exceptions for core services."""


class CoreServiceError(Exception):
    """Base exception for core services."""
    pass


class CodeNotFoundError(CoreServiceError):
    """Raised when a code list entry does not exist."""
    pass


class InvalidCodeError(CoreServiceError):
    """Raised when a code is not an active entry of its code list."""
    pass
