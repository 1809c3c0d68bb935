"""Domain-specific exceptions for order services."""


class OrdersServiceError(Exception):
    """Base exception for order services."""
    pass


class OrderNotFoundError(OrdersServiceError):
    """Raised when order does not exist."""
    pass


class EmptyOrderError(OrdersServiceError):
    """Raised when an order has no items."""
    pass


class ProductUnavailableError(OrdersServiceError):
    """Raised when an ordered product is inactive."""
    pass


class InvalidOrderStateError(OrdersServiceError):
    """Raised when an order cannot move to the requested status."""
    pass


class InvalidQuantityError(OrdersServiceError):
    """Raised when a line quantity is outside 1..MAX_ITEM_QUANTITY."""
    pass
