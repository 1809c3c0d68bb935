"""Domain-specific exceptions for wishlist services."""


class WishlistsServiceError(Exception):
    """Base exception for wishlist services."""
    pass


class WishlistItemNotFoundError(WishlistsServiceError):
    """Raised when a wishlist entry does not exist for the user."""
    pass


class DuplicateWishlistItemError(WishlistsServiceError):
    """Raised when the product is already on the user's wishlist."""
    pass
