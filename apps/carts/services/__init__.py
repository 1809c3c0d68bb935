"""Services for shopping carts."""

from .exceptions import (
    CartsServiceError,
    CartNotFoundError,
    CartItemNotFoundError,
    InvalidCartItemError,
    EmptyCartError,
)
from .cart_management import (
    get_or_create_active_cart,
    add_to_cart,
    update_cart_item,
    remove_cart_item,
    clear_cart,
    expire_stale_carts,
    checkout_cart,
)

__all__ = [
    # Exceptions
    'CartsServiceError',
    'CartNotFoundError',
    'CartItemNotFoundError',
    'InvalidCartItemError',
    'EmptyCartError',
    # Carts
    'get_or_create_active_cart',
    'add_to_cart',
    'update_cart_item',
    'remove_cart_item',
    'clear_cart',
    'expire_stale_carts',
    'checkout_cart',
]
