"""Product review operations and rating aggregation."""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Avg, Count

from apps.accounts.models import User
from apps.orders.models import OrderItem, OrderStatus

from ..models import Product, ProductReview
from .exceptions import DuplicateReviewError, ProductNotFoundError, ReviewNotFoundError

logger = logging.getLogger(__name__)


def _lock_review(review_id: UUID) -> ProductReview:
    try:
        return ProductReview.objects.select_for_update().get(id=review_id)
    except ProductReview.DoesNotExist:
        raise ReviewNotFoundError(f"Review {review_id} not found")


@transaction.atomic
def create_review(
    *,
    product_id: UUID,
    user: User,
    rating: int,
    title: str = '',
    comment: str = ''
) -> ProductReview:
    """
    Create a review pending moderation.

    The review is flagged as a verified purchase when the user has a
    delivered order containing the product.

    Raises:
        ProductNotFoundError: If product doesn't exist
        DuplicateReviewError: If user already reviewed this product
        django.core.exceptions.ValidationError: If rating is outside 1-5
    """
    try:
        product = Product.objects.get(id=product_id, is_active=True)
    except Product.DoesNotExist:
        raise ProductNotFoundError(f"Product {product_id} not found")

    if ProductReview.all_objects.filter(product=product, user=user).exists():
        raise DuplicateReviewError(f"User {user.id} already reviewed product {product_id}")

    delivered_item = (
        OrderItem.objects
        .filter(
            product=product,
            order__user=user,
            order__status_code=OrderStatus.DELIVERED,
        )
        .select_related('order')
        .first()
    )

    review = ProductReview(
        product=product,
        user=user,
        order=delivered_item.order if delivered_item else None,
        rating=rating,
        title=title,
        comment=comment,
    )
    if delivered_item:
        review.mark_as_verified_purchase()

    review.full_clean(validate_unique=False)
    review.save()
    return review


@transaction.atomic
def approve_review(*, review_id: UUID) -> ProductReview:
    """
    Publish a review and refresh the product rating.

    Raises:
        ReviewNotFoundError: If review doesn't exist
    """
    review = _lock_review(review_id)
    if not review.is_approved:
        review.approve()
        review.save(update_fields=['is_approved', 'updated_at'])
        update_product_rating(product_id=review.product_id)
    return review


@transaction.atomic
def mark_review_helpful(*, review_id: UUID) -> ProductReview:
    """Increment the helpful counter of a review."""
    review = _lock_review(review_id)
    review.increment_helpful_count()
    review.save(update_fields=['helpful_count', 'updated_at'])
    return review


@transaction.atomic
def delete_review(*, review_id: UUID) -> None:
    """Soft delete a review and refresh the product rating."""
    review = _lock_review(review_id)
    product_id = review.product_id
    review.delete()
    update_product_rating(product_id=product_id)


@transaction.atomic
def update_product_rating(*, product_id: UUID) -> Product:
    """
    Recalculate a product's rating from its approved reviews.

    Uses select_for_update() to prevent race conditions when reviews
    are approved concurrently.

    Raises:
        ProductNotFoundError: If product doesn't exist
    """
    try:
        product = Product.objects.select_for_update().get(id=product_id)
    except Product.DoesNotExist:
        raise ProductNotFoundError(f"Product {product_id} not found")

    aggregates = product.reviews.filter(is_approved=True).aggregate(
        avg=Avg('rating'),
        count=Count('id')
    )

    average: Optional[float] = aggregates['avg']
    product.rating = (
        Decimal(str(average)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        if average is not None else Decimal('0.00')
    )
    product.review_count = aggregates['count']
    product.save(update_fields=['rating', 'review_count', 'updated_at'])

    logger.debug("Product rating updated", extra={
        'product_id': str(product.id),
        'rating': str(product.rating),
        'review_count': product.review_count,
    })
    return product
