"""
Service layer unit tests for catalog app.

Tests cover:
- Categories (slugs, nesting, tree)
- Products (creation, stock, counters)
- Search and similar-product detection
- Image gallery
- Reviews and rating aggregation
"""

import uuid

import pytest
from decimal import Decimal

from django.core.exceptions import ValidationError

from apps.catalog.models import Product, ProductImage
from apps.catalog.services import (
    create_category,
    update_category,
    get_category_tree,
    create_product,
    update_product,
    get_product_by_id,
    deactivate_product,
    adjust_stock,
    record_product_view,
    search_products,
    find_similar_products,
    add_product_image,
    set_primary_image,
    remove_product_image,
    create_review,
    approve_review,
    mark_review_helpful,
    delete_review,
)
from apps.catalog.services.exceptions import (
    CategoryNotFoundError,
    DuplicateProductError,
    DuplicateReviewError,
    ImageNotFoundError,
    InsufficientStockError,
    InvalidCategoryError,
    ProductNotFoundError,
)
from apps.orders.models import OrderStatus
from apps.orders.services import advance_order_status, create_order


# =============================================================================
# Category Tests
# =============================================================================

@pytest.mark.django_db
class TestCategories:

    def test_slug_is_unique(self):
        first = create_category(name='Home Appliances')
        second = create_category(name='Home  appliances')

        assert first.slug == 'home-appliances'
        assert second.slug == 'home-appliances-2'
        assert first.seo_title == 'Home Appliances'

    def test_unknown_parent(self):
        with pytest.raises(CategoryNotFoundError):
            create_category(name='Orphan', parent_id=uuid.uuid4())

    def test_rename_regenerates_slug(self, category):
        updated = update_category(category_id=category.id, data={'name': 'Mobile Phones'})

        assert updated.slug == 'mobile-phones'

    def test_cannot_nest_under_descendant(self, category):
        child = create_category(name='Smartphones', parent_id=category.id)

        with pytest.raises(InvalidCategoryError):
            update_category(category_id=category.id, data={'parent_id': child.id})
        with pytest.raises(InvalidCategoryError):
            update_category(category_id=category.id, data={'parent_id': category.id})

    def test_tree(self, category, product):
        child = create_category(name='Smartphones', parent_id=category.id)
        create_category(name='Hidden', is_active=False)

        tree = get_category_tree()

        assert [node['name'] for node in tree] == ['Phones']
        assert tree[0]['product_count'] == 1
        assert [node['id'] for node in tree[0]['children']] == [child.id]
        assert len(get_category_tree(include_inactive=True)) == 2


# =============================================================================
# Product Tests
# =============================================================================

@pytest.mark.django_db
class TestProducts:

    def test_create(self, category):
        product = create_product(
            name='Solar Lamp',
            sku=' lmp-01 ',
            price=Decimal('25.00'),
            category_id=category.id,
            tags=['solar', 'solar', 'outdoor'],
            dimensions={'length': '10', 'width': '10', 'height': '30'},
            brand='Sunny',
        )

        assert product.sku == 'LMP-01'
        assert product.slug == 'solar-lamp-lmp-01'
        assert product.tags == ['solar', 'outdoor']
        assert product.dimensions == {'length': '10.00', 'width': '10.00', 'height': '30.00', 'unit': 'cm'}
        assert product.brand == 'Sunny'

    def test_duplicate_sku(self, product, category):
        with pytest.raises(DuplicateProductError):
            create_product(name='Other', sku='chg-001', price=Decimal('5.00'), category_id=category.id)

    def test_invalid_price(self, category):
        with pytest.raises(ValidationError):
            create_product(name='Free', sku='FREE-1', price=Decimal('0.00'), category_id=category.id)

    def test_update_ignores_unknown_fields(self, product):
        updated = update_product(product_id=product.id, data={'price': Decimal('90.00'), 'stock': 999})

        assert updated.price == Decimal('90.00')
        assert updated.stock == 10

    def test_deactivate(self, product):
        deactivate_product(product_id=product.id)

        with pytest.raises(ProductNotFoundError):
            get_product_by_id(product_id=product.id)
        assert get_product_by_id(product_id=product.id, active_only=False).is_active is False

    def test_adjust_stock(self, product):
        assert adjust_stock(product_id=product.id, delta=-10).stock == 0
        assert adjust_stock(product_id=product.id, delta=4).stock == 4

        with pytest.raises(InsufficientStockError):
            adjust_stock(product_id=product.id, delta=-5)

    def test_record_view(self, product):
        record_product_view(product_id=product.id)
        record_product_view(product_id=product.id)

        product.refresh_from_db()
        assert product.view_count == 2


# =============================================================================
# Search Tests
# =============================================================================

@pytest.mark.django_db
class TestSearch:

    def test_query_and_filters(self, product, credit_product):
        assert list(search_products(query='charger')) == [product]
        assert list(search_products(credit_eligible=True)) == [credit_product]
        assert list(search_products(min_price=Decimal('500'))) == [credit_product]
        assert list(search_products(ordering='price_asc')) == [product, credit_product]

    def test_category_includes_children(self, category, product):
        child = create_category(name='Accessories', parent_id=category.id)
        update_product(product_id=product.id, data={'category_id': child.id})

        assert list(search_products(category_id=category.id)) == [product]

    def test_tag_filter(self, product, credit_product):
        update_product(product_id=credit_product.id, data={'tags': ['5G']})

        assert list(search_products(tag='5G')) == [credit_product]

    def test_inactive_excluded(self, product):
        deactivate_product(product_id=product.id)

        assert list(search_products()) == []

    def test_similar_products(self, product, credit_product):
        matches = find_similar_products(name='Charger USB')

        assert [p for p, _ in matches] == [product]
        assert matches[0][1] == 100
        assert find_similar_products(name='Charger USB', exclude_id=product.id) == []


# =============================================================================
# Image Tests
# =============================================================================

@pytest.mark.django_db
class TestImages:

    def test_first_image_is_primary(self, product):
        first = add_product_image(product_id=product.id, image_url='https://cdn.example.com/1.jpg')
        second = add_product_image(product_id=product.id, image_url='https://cdn.example.com/2.jpg')

        assert first.is_primary
        assert not second.is_primary
        assert second.position == 1

    def test_single_primary(self, product):
        first = add_product_image(product_id=product.id, image_url='https://cdn.example.com/1.jpg')
        second = add_product_image(product_id=product.id, image_url='https://cdn.example.com/2.jpg')

        set_primary_image(product_id=product.id, image_id=second.id)

        assert list(ProductImage.objects.filter(is_primary=True)) == [second]
        first.refresh_from_db()
        assert not first.is_primary

    def test_removing_primary_promotes_next(self, product):
        first = add_product_image(product_id=product.id, image_url='https://cdn.example.com/1.jpg')
        second = add_product_image(product_id=product.id, image_url='https://cdn.example.com/2.jpg')

        remove_product_image(product_id=product.id, image_id=first.id)

        second.refresh_from_db()
        assert second.is_primary
        assert product.main_image_url == 'https://cdn.example.com/2.jpg'

    def test_image_of_other_product(self, product, credit_product):
        image = add_product_image(product_id=product.id, image_url='https://cdn.example.com/1.jpg')

        with pytest.raises(ImageNotFoundError):
            set_primary_image(product_id=credit_product.id, image_id=image.id)

    def test_unknown_product(self):
        with pytest.raises(ProductNotFoundError):
            add_product_image(product_id=uuid.uuid4(), image_url='https://cdn.example.com/1.jpg')


# =============================================================================
# Review Tests
# =============================================================================

@pytest.mark.django_db
class TestReviews:

    def test_review_pending_until_approved(self, customer, product):
        review = create_review(product_id=product.id, user=customer, rating=4, title='Works')

        assert not review.is_approved
        assert not review.is_verified_purchase
        product.refresh_from_db()
        assert product.review_count == 0

    def test_verified_purchase(self, customer, product):
        order = create_order(user=customer, items=[{'product_id': product.id, 'quantity': 1}])
        for status in (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            advance_order_status(order_id=order.id, status=status)

        review = create_review(product_id=product.id, user=customer, rating=5)

        assert review.is_verified_purchase
        assert review.order_id == order.id

    def test_duplicate_review(self, customer, product):
        create_review(product_id=product.id, user=customer, rating=4)

        with pytest.raises(DuplicateReviewError):
            create_review(product_id=product.id, user=customer, rating=2)

    def test_rating_out_of_range(self, customer, product):
        with pytest.raises(ValidationError):
            create_review(product_id=product.id, user=customer, rating=6)

    def test_rating_from_approved_reviews(self, customer, other_customer, product):
        first = create_review(product_id=product.id, user=customer, rating=5)
        second = create_review(product_id=product.id, user=other_customer, rating=2)

        approve_review(review_id=first.id)
        approve_review(review_id=second.id)
        product.refresh_from_db()
        assert product.rating == Decimal('3.50')
        assert product.review_count == 2

        delete_review(review_id=second.id)
        product.refresh_from_db()
        assert product.rating == Decimal('5.00')
        assert product.review_count == 1

    def test_helpful(self, customer, product):
        review = create_review(product_id=product.id, user=customer, rating=4)

        assert mark_review_helpful(review_id=review.id).helpful_count == 1
