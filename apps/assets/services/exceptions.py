"""Domain-specific exceptions for asset services."""


class AssetsServiceError(Exception):
    """Base exception for asset services."""
    pass


class LandNotFoundError(AssetsServiceError):
    """Raised when land does not exist for the owner."""
    pass


class VehicleNotFoundError(AssetsServiceError):
    """Raised when vehicle does not exist for the owner."""
    pass


class DuplicateVehicleError(AssetsServiceError):
    """Raised when the registration number is already registered."""
    pass
