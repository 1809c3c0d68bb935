"""
Service layer unit tests for wishlists app.

Tests cover:
- Adding entries (duplicates, restoring removed entries)
- Updating and removing entries
- Wishlist summary
- Moving entries to the cart
"""

import uuid

import pytest
from decimal import Decimal

from apps.carts.models import Cart
from apps.catalog.services import InsufficientStockError, ProductNotFoundError
from apps.wishlists.models import Wishlist
from apps.wishlists.serializers import WishlistResponseSerializer
from apps.wishlists.services import (
    add_to_wishlist,
    update_wishlist_item,
    remove_from_wishlist,
    get_wishlist,
    move_to_cart,
)
from apps.wishlists.services.exceptions import (
    DuplicateWishlistItemError,
    WishlistItemNotFoundError,
)


# =============================================================================
# Add / Update / Remove Tests
# =============================================================================

@pytest.mark.django_db
class TestWishlistEntries:

    def test_add(self, customer, product):
        item = add_to_wishlist(user=customer, product_id=product.id, notes=' gift ', priority=4)

        assert item.notes == 'gift'
        assert item.priority == 4
        assert item.is_high_priority()

    def test_duplicate(self, customer, product):
        add_to_wishlist(user=customer, product_id=product.id)

        with pytest.raises(DuplicateWishlistItemError):
            add_to_wishlist(user=customer, product_id=product.id)

    def test_same_product_for_two_users(self, customer, other_customer, product):
        add_to_wishlist(user=customer, product_id=product.id)
        add_to_wishlist(user=other_customer, product_id=product.id)

        assert product.wishlisted_by.count() == 2

    def test_removed_entry_is_restored(self, customer, product):
        item = add_to_wishlist(user=customer, product_id=product.id, notes='first')
        remove_from_wishlist(user=customer, item_id=item.id)

        restored = add_to_wishlist(user=customer, product_id=product.id, priority=2)

        assert restored.id == item.id
        assert restored.notes == ''
        assert restored.priority == 2
        assert Wishlist.objects.filter(user=customer).count() == 1

    def test_unknown_product(self, customer):
        with pytest.raises(ProductNotFoundError):
            add_to_wishlist(user=customer, product_id=uuid.uuid4())

    def test_update_keeps_omitted_values(self, customer, product):
        item = add_to_wishlist(user=customer, product_id=product.id, notes='gift', priority=2)

        updated = update_wishlist_item(user=customer, item_id=item.id, priority=5)

        assert updated.priority == 5
        assert updated.notes == 'gift'

    def test_update_other_users_entry(self, customer, other_customer, product):
        item = add_to_wishlist(user=customer, product_id=product.id)

        with pytest.raises(WishlistItemNotFoundError):
            update_wishlist_item(user=other_customer, item_id=item.id, notes='mine now')

    def test_remove(self, customer, product):
        item = add_to_wishlist(user=customer, product_id=product.id)

        remove_from_wishlist(user=customer, item_id=item.id)

        assert not Wishlist.objects.filter(user=customer).exists()
        assert Wishlist.all_objects.filter(id=item.id, is_deleted=True).exists()


# =============================================================================
# Summary Tests
# =============================================================================

@pytest.mark.django_db
class TestGetWishlist:

    def test_ordered_by_priority(self, customer, product, credit_product):
        add_to_wishlist(user=customer, product_id=product.id, priority=2)
        add_to_wishlist(user=customer, product_id=credit_product.id, priority=5)

        wishlist = get_wishlist(user=customer)

        assert wishlist['user_id'] == customer.id
        assert wishlist['user_name'] == 'Awa Marie Ndiaye'
        assert wishlist['total_items'] == 2
        assert [item.product_id for item in wishlist['items']] == [credit_product.id, product.id]

    def test_serialized(self, customer, product):
        add_to_wishlist(user=customer, product_id=product.id, notes='gift')

        data = WishlistResponseSerializer(get_wishlist(user=customer)).data

        assert data['total_items'] == 1
        assert data['items'][0]['product_name'] == 'USB Charger'
        assert data['items'][0]['product_price'] == '100.00'
        assert data['items'][0]['notes'] == 'gift'

    def test_empty(self, customer):
        wishlist = get_wishlist(user=customer)

        assert wishlist['items'] == []
        assert wishlist['total_items'] == 0


# =============================================================================
# Move To Cart Tests
# =============================================================================

@pytest.mark.django_db
class TestMoveToCart:

    def test_move(self, customer, product):
        item = add_to_wishlist(user=customer, product_id=product.id)

        cart_item = move_to_cart(user=customer, item_id=item.id, quantity=2)

        assert cart_item.total_amount == Decimal('200.00')
        assert Cart.objects.get(user=customer).items.count() == 1
        assert not Wishlist.objects.filter(user=customer).exists()

    def test_failed_move_keeps_entry(self, customer, product):
        item = add_to_wishlist(user=customer, product_id=product.id)

        with pytest.raises(InsufficientStockError):
            move_to_cart(user=customer, item_id=item.id, quantity=50)

        assert Wishlist.objects.filter(id=item.id).exists()
