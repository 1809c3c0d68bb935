"""Wishlist operations."""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.carts.models import CartItem
from apps.carts.services import add_to_cart
from apps.catalog.services import get_product_by_id

from ..models import Wishlist
from .exceptions import DuplicateWishlistItemError, WishlistItemNotFoundError

logger = logging.getLogger(__name__)


def _lock_item(user: User, item_id: UUID) -> Wishlist:
    try:
        return Wishlist.objects.select_for_update().get(id=item_id, user=user)
    except Wishlist.DoesNotExist:
        raise WishlistItemNotFoundError(f"Wishlist item {item_id} not found")


@transaction.atomic
def add_to_wishlist(
    *,
    user: User,
    product_id: UUID,
    notes: str = '',
    priority: int = 1
) -> Wishlist:
    """
    Save a product on the user's wishlist.

    A previously removed entry for the same product is restored with the
    new notes and priority.

    Raises:
        ProductNotFoundError: If product doesn't exist or is inactive
        DuplicateWishlistItemError: If the product is already on the wishlist
    """
    product = get_product_by_id(product_id=product_id)

    existing = Wishlist.all_objects.select_for_update().filter(user=user, product=product).first()
    if existing is not None and not existing.is_deleted:
        raise DuplicateWishlistItemError(f"Product {product.sku} is already on the wishlist")

    item = existing or Wishlist(user=user, product=product)
    item.is_deleted = False
    item.update_notes(notes)
    item.priority = priority
    item.full_clean(validate_unique=existing is None)
    item.save()

    logger.info("Wishlist item added", extra={
        'user_id': str(user.id),
        'product_id': str(product.id),
        'priority': item.priority,
    })
    return item


@transaction.atomic
def update_wishlist_item(
    *,
    user: User,
    item_id: UUID,
    notes: Optional[str] = None,
    priority: Optional[int] = None
) -> Wishlist:
    """Change notes and/or priority; omitted values are kept."""
    item = _lock_item(user, item_id)

    if notes is not None:
        item.update_notes(notes)
    if priority is not None:
        item.priority = priority

    item.full_clean(validate_unique=False)
    item.save(update_fields=['notes', 'priority', 'updated_at'])
    return item


@transaction.atomic
def remove_from_wishlist(*, user: User, item_id: UUID) -> None:
    item = _lock_item(user, item_id)
    item.delete()
    logger.info("Wishlist item removed", extra={'user_id': str(user.id), 'item_id': str(item_id)})


def get_wishlist(*, user: User) -> Dict[str, Any]:
    """
    The user's wishlist, highest priority first.

    Returns:
        {
            'user_id': UUID(...),
            'user_name': 'Awa Ndiaye',
            'items': [Wishlist, ...],
            'total_items': 2,
        }
    """
    items = list(
        Wishlist.objects
        .filter(user=user)
        .select_related('product')
        .order_by('-priority', '-created_at')
    )
    return {
        'user_id': user.id,
        'user_name': user.display_name,
        'items': items,
        'total_items': len(items),
    }


@transaction.atomic
def move_to_cart(
    *,
    user: User,
    item_id: UUID,
    quantity: int = 1,
    payment_method_code: str = 'CASH',
    credit_duration: Optional[int] = None,
    credit_frequency_code: str = ''
) -> CartItem:
    """
    Add a wishlisted product to the active cart and drop it from the wishlist.

    Raises:
        WishlistItemNotFoundError: If the entry doesn't exist for the user
        (plus any add_to_cart error; the wishlist is untouched in that case)
    """
    item = _lock_item(user, item_id)

    cart_item = add_to_cart(
        user=user,
        product_id=item.product_id,
        quantity=quantity,
        payment_method_code=payment_method_code,
        credit_duration=credit_duration,
        credit_frequency_code=credit_frequency_code,
    )
    item.delete()

    logger.info("Wishlist item moved to cart", extra={
        'user_id': str(user.id),
        'product_id': str(item.product_id),
        'cart_id': str(cart_item.cart_id),
    })
    return cart_item
