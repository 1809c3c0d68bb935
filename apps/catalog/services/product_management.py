"""Product CRUD, stock and counter operations."""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from django.db import transaction

from apps.core.serializers import DimensionsSerializer, clean_document

from ..models import Product
from .category_management import get_category_by_id
from .exceptions import DuplicateProductError, InsufficientStockError, ProductNotFoundError
from .slugs import unique_slug

logger = logging.getLogger(__name__)


def get_product_by_id(*, product_id: UUID, active_only: bool = True) -> Product:
    """
    Retrieve product by ID.

    Raises:
        ProductNotFoundError: If product doesn't exist (or is inactive)
    """
    products = Product.objects.select_related('category')
    if active_only:
        products = products.filter(is_active=True)
    try:
        return products.get(id=product_id)
    except Product.DoesNotExist:
        raise ProductNotFoundError(f"Product {product_id} not found")


def _lock_product(product_id: UUID) -> Product:
    try:
        return Product.objects.select_for_update().get(id=product_id)
    except Product.DoesNotExist:
        raise ProductNotFoundError(f"Product {product_id} not found")


@transaction.atomic
def create_product(
    *,
    name: str,
    sku: str,
    price: Decimal,
    category_id: UUID,
    description: str = '',
    short_description: str = '',
    compare_price: Optional[Decimal] = None,
    cost: Optional[Decimal] = None,
    stock: int = 0,
    min_stock: int = 0,
    credit_eligible: bool = False,
    min_credit_amount: Optional[Decimal] = None,
    max_credit_duration: Optional[int] = None,
    tags: Optional[List[str]] = None,
    dimensions: Optional[Dict[str, Any]] = None,
    **extra: Any
) -> Product:
    """
    Create a product.

    Args:
        name: Product name (2-255 characters)
        sku: Unique stock keeping unit
        price: Selling price (> 0)
        category_id: Owning category
        compare_price: Reference price shown struck through
        cost: Purchase cost
        stock: Units on hand
        min_stock: Low stock threshold
        credit_eligible: Whether installment credit is offered
        min_credit_amount: Smallest amount financed on credit
        max_credit_duration: Longest credit duration in months
        tags: Free-form tags
        dimensions: Dimensions document (length, width, height, unit)
        **extra: Other model fields (brand, model_name, color, warranty, weight, ...)

    Returns:
        Created Product instance

    Raises:
        CategoryNotFoundError: If category doesn't exist
        DuplicateProductError: If SKU is already used
        django.core.exceptions.ValidationError: If a field is invalid
    """
    category = get_category_by_id(category_id=category_id)

    sku = sku.strip().upper()
    if Product.all_objects.filter(sku=sku).exists():
        raise DuplicateProductError(f"SKU '{sku}' already exists")

    product = Product(
        name=name.strip(),
        sku=sku,
        price=price,
        category=category,
        description=description,
        short_description=short_description,
        compare_price=compare_price,
        cost=cost,
        stock=stock,
        min_stock=min_stock,
        credit_eligible=credit_eligible,
        min_credit_amount=min_credit_amount,
        max_credit_duration=max_credit_duration,
        dimensions=clean_document(DimensionsSerializer, dimensions) or {},
        slug=unique_slug(model=Product, value=f"{name} {sku}"),
        **extra
    )
    for tag in tags or []:
        product.add_tag(tag)

    product.full_clean()
    product.save()

    logger.info("Product created", extra={'product_id': str(product.id), 'sku': product.sku})
    return product


@transaction.atomic
def update_product(*, product_id: UUID, data: Dict[str, Any]) -> Product:
    """
    Update product fields.

    Raises:
        ProductNotFoundError: If product doesn't exist
        CategoryNotFoundError: If new category doesn't exist
    """
    product = _lock_product(product_id)

    allowed_fields = [
        'name', 'description', 'short_description', 'price', 'compare_price', 'cost',
        'min_stock', 'weight', 'brand', 'model_name', 'color', 'warranty', 'warranty_unit',
        'is_featured', 'is_active', 'credit_eligible', 'min_credit_amount',
        'max_credit_duration', 'tags', 'attributes', 'seo_title', 'seo_description',
        'meta_keywords',
    ]

    for field, value in data.items():
        if field in allowed_fields:
            setattr(product, field, value)

    if 'dimensions' in data:
        product.dimensions = clean_document(DimensionsSerializer, data['dimensions']) or {}
    if 'category_id' in data:
        product.category = get_category_by_id(category_id=data['category_id'])

    product.full_clean()
    product.save()
    return product


@transaction.atomic
def deactivate_product(*, product_id: UUID) -> Product:
    """Hide a product from the catalog without deleting it."""
    product = _lock_product(product_id)
    product.is_active = False
    product.save(update_fields=['is_active', 'updated_at'])
    logger.info("Product deactivated", extra={'product_id': str(product.id)})
    return product


@transaction.atomic
def adjust_stock(*, product_id: UUID, delta: int) -> Product:
    """
    Add (positive delta) or remove (negative delta) units.

    Raises:
        ProductNotFoundError: If product doesn't exist
        InsufficientStockError: If removal exceeds stock on hand
    """
    product = _lock_product(product_id)

    if product.stock + delta < 0:
        raise InsufficientStockError(
            f"Only {product.stock} unit(s) of {product.sku} in stock, cannot remove {-delta}"
        )

    product.stock += delta
    product.save(update_fields=['stock', 'updated_at'])

    if delta < 0 and product.is_low_stock():
        logger.warning("Product stock low", extra={
            'product_id': str(product.id),
            'stock': product.stock,
            'min_stock': product.min_stock,
        })
    return product


@transaction.atomic
def record_product_view(*, product_id: UUID) -> Product:
    """Increment the view counter."""
    product = _lock_product(product_id)
    product.increment_view_count()
    product.save(update_fields=['view_count', 'updated_at'])
    return product


@transaction.atomic
def record_product_purchase(*, product_id: UUID, quantity: int) -> Product:
    """Increment the purchase counter."""
    product = _lock_product(product_id)
    product.increment_purchase_count(quantity)
    product.save(update_fields=['purchase_count', 'updated_at'])
    return product
