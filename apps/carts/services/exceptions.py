"""Domain-specific exceptions for cart services."""


class CartsServiceError(Exception):
    """Base exception for cart services."""
    pass


class CartNotFoundError(CartsServiceError):
    """Raised when the user has no usable cart."""
    pass


class CartItemNotFoundError(CartsServiceError):
    """Raised when a cart item does not exist in the user's cart."""
    pass


class InvalidCartItemError(CartsServiceError):
    """Raised when a cart line cannot be priced (e.g. credit on a cash-only product)."""
    pass


class EmptyCartError(CartsServiceError):
    """Raised when checking out a cart without items."""
    pass
