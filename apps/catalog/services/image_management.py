"""Product image gallery management."""

from typing import Optional
from uuid import UUID

from django.db import transaction

from ..models import Product, ProductImage
from .exceptions import ImageNotFoundError, ProductNotFoundError


def _get_image(*, product_id: UUID, image_id: UUID) -> ProductImage:
    try:
        return ProductImage.objects.select_for_update().get(id=image_id, product_id=product_id)
    except ProductImage.DoesNotExist:
        raise ImageNotFoundError(f"Image {image_id} not found on product {product_id}")


@transaction.atomic
def add_product_image(
    *,
    product_id: UUID,
    image_url: str,
    alt_text: str = '',
    position: Optional[int] = None,
    is_primary: bool = False
) -> ProductImage:
    """
    Attach an image to a product.

    The first image becomes primary; position defaults to the end of
    the gallery.

    Raises:
        ProductNotFoundError: If product doesn't exist
        django.core.exceptions.ValidationError: If the URL is invalid
    """
    if not Product.objects.filter(id=product_id).exists():
        raise ProductNotFoundError(f"Product {product_id} not found")

    existing = ProductImage.objects.filter(product_id=product_id)
    if not existing.exists():
        is_primary = True
    if position is None:
        position = existing.count()

    image = ProductImage(
        product_id=product_id,
        image_url=image_url,
        alt_text=alt_text,
        position=position,
    )
    image.full_clean()
    image.save()

    if is_primary:
        image = set_primary_image(product_id=product_id, image_id=image.id)
    return image


@transaction.atomic
def set_primary_image(*, product_id: UUID, image_id: UUID) -> ProductImage:
    """
    Make one image the product's only primary image.

    Raises:
        ImageNotFoundError: If the image doesn't belong to the product
    """
    image = _get_image(product_id=product_id, image_id=image_id)

    ProductImage.objects.filter(product_id=product_id, is_primary=True).exclude(id=image.id).update(is_primary=False)

    if not image.is_primary:
        image.is_primary = True
        image.save(update_fields=['is_primary', 'updated_at'])
    return image


@transaction.atomic
def remove_product_image(*, product_id: UUID, image_id: UUID) -> None:
    """Soft delete an image, promoting the next one if it was primary."""
    image = _get_image(product_id=product_id, image_id=image_id)
    was_primary = image.is_primary
    image.delete()

    if was_primary:
        successor = ProductImage.objects.filter(product_id=product_id).order_by('position').first()
        if successor:
            set_primary_image(product_id=product_id, image_id=successor.id)
