"""Services for wishlists."""

from .exceptions import (
    WishlistsServiceError,
    WishlistItemNotFoundError,
    DuplicateWishlistItemError,
)
from .wishlist_management import (
    add_to_wishlist,
    update_wishlist_item,
    remove_from_wishlist,
    get_wishlist,
    move_to_cart,
)

__all__ = [
    # Exceptions
    'WishlistsServiceError',
    'WishlistItemNotFoundError',
    'DuplicateWishlistItemError',
    # Wishlists
    'add_to_wishlist',
    'update_wishlist_item',
    'remove_from_wishlist',
    'get_wishlist',
    'move_to_cart',
]
