"""Tests for catalog serializers."""

import uuid

import pytest
from decimal import Decimal

from apps.catalog.serializers import (
    CategoryResponseSerializer,
    ProductRequestSerializer,
    ProductResponseSerializer,
)
from apps.catalog.services import add_product_image, create_category


def _product_data(**overrides):
    data = {
        'name': 'Solar Lamp',
        'price': '25.00',
        'sku': 'LMP-01',
        'category_id': str(uuid.uuid4()),
    }
    data.update(overrides)
    return data


class TestProductRequestSerializer:

    def test_valid(self):
        serializer = ProductRequestSerializer(data=_product_data(tags=['solar']))
        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data['credit_eligible'] is False

    def test_price_must_be_positive(self):
        serializer = ProductRequestSerializer(data=_product_data(price='0.00'))
        assert not serializer.is_valid()
        assert 'price' in serializer.errors

    def test_compare_price_above_price(self):
        serializer = ProductRequestSerializer(data=_product_data(compare_price='20.00'))
        assert not serializer.is_valid()
        assert 'compare_price' in serializer.errors

    def test_credit_terms_need_eligibility(self):
        serializer = ProductRequestSerializer(data=_product_data(max_credit_duration=6))
        assert not serializer.is_valid()
        assert 'max_credit_duration' in serializer.errors

        serializer = ProductRequestSerializer(data=_product_data(credit_eligible=True, max_credit_duration=6))
        assert serializer.is_valid(), serializer.errors


@pytest.mark.django_db
class TestOutputSerializers:

    def test_product_response(self, product):
        product.compare_price = Decimal('125.00')
        product.save()
        add_product_image(product_id=product.id, image_url='https://cdn.example.com/1.jpg')

        data = ProductResponseSerializer(product).data

        assert data['discount_percentage'] == '20.00'
        assert data['stock_status'] == 'IN_STOCK'
        assert data['main_image_url'] == 'https://cdn.example.com/1.jpg'
        assert data['category']['slug'] == 'phones'
        assert len(data['images']) == 1

    def test_category_response(self, category, product):
        create_category(name='Smartphones', parent_id=category.id)

        data = CategoryResponseSerializer(category).data

        assert data['product_count'] == 1
        assert [child['name'] for child in data['children']] == ['Smartphones']
        assert data['parent'] is None
