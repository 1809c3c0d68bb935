from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.core.validators import (
    MaxLengthValidator,
    MaxValueValidator,
    MinLengthValidator,
    MinValueValidator,
    RegexValidator,
)
from django.db import models
from django.utils import timezone

from apps.core.models import BaseModel


SLUG_VALIDATOR = RegexValidator(
    r'^[a-z0-9-]+$',
    'Slug may only contain lowercase letters, digits and hyphens'
)

SUPPORTED_IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.webp')


class StockStatus(models.TextChoices):
    IN_STOCK = 'IN_STOCK', 'In stock'
    LOW_STOCK = 'LOW_STOCK', 'Low stock'
    OUT_OF_STOCK = 'OUT_OF_STOCK', 'Out of stock'


class Category(BaseModel):
    """Product category, optionally nested under a parent."""

    name = models.CharField(max_length=100, validators=[MinLengthValidator(2)])
    description = models.TextField(blank=True, validators=[MaxLengthValidator(2000)])
    slug = models.CharField(max_length=120, unique=True, validators=[SLUG_VALIDATOR])
    image_url = models.URLField(max_length=512, blank=True)

    parent = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='children'
    )
    position = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    # SEO
    seo_title = models.CharField(max_length=70, blank=True)
    seo_description = models.CharField(max_length=160, blank=True)

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        indexes = [
            models.Index(fields=['parent', 'position']),
            models.Index(fields=['is_active']),
        ]
        ordering = ['position', 'name']

    def __str__(self):
        return self.name

    def is_root(self):
        return self.parent_id is None

    def has_children(self):
        return self.children.exists()

    def count_active_products(self):
        return self.products.filter(is_active=True).count()


class Product(BaseModel):
    """Catalog item, optionally purchasable on installment credit."""

    name = models.CharField(max_length=255, validators=[MinLengthValidator(2)])
    description = models.TextField(blank=True)
    short_description = models.CharField(max_length=500, blank=True)

    # Pricing
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    compare_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    # Inventory
    sku = models.CharField(max_length=100, unique=True)
    stock = models.PositiveIntegerField(default=0)
    min_stock = models.PositiveIntegerField(default=0)

    # Physical attributes
    weight = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))]
    )
    dimensions = models.JSONField(default=dict, blank=True)
    brand = models.CharField(max_length=100, blank=True)
    model_name = models.CharField(max_length=100, blank=True)
    color = models.CharField(max_length=50, blank=True)
    warranty = models.PositiveIntegerField(default=0)
    warranty_unit = models.CharField(max_length=10, default='MONTHS')

    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='products')

    is_featured = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    # Credit
    credit_eligible = models.BooleanField(default=False)
    min_credit_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    max_credit_duration = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)]
    )

    # Aggregates (denormalized)
    rating = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('5'))]
    )
    review_count = models.PositiveIntegerField(default=0)
    view_count = models.PositiveIntegerField(default=0)
    purchase_count = models.PositiveIntegerField(default=0)

    tags = models.JSONField(default=list, blank=True)
    attributes = models.JSONField(default=dict, blank=True)

    # SEO
    slug = models.CharField(max_length=280, unique=True, validators=[SLUG_VALIDATOR])
    seo_title = models.CharField(max_length=70, blank=True)
    seo_description = models.CharField(max_length=160, blank=True)
    meta_keywords = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = 'products'
        indexes = [
            models.Index(fields=['category', 'is_active']),
            models.Index(fields=['is_active', 'is_featured']),
            models.Index(fields=['credit_eligible']),
            models.Index(fields=['-purchase_count']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def is_in_stock(self):
        return self.stock > 0

    def is_low_stock(self):
        return self.stock <= self.min_stock

    def has_discount(self):
        return self.compare_price is not None and self.compare_price > self.price

    @property
    def discount_percentage(self):
        """Percentage off compare_price, 2 decimal places, 0 without a discount."""
        if not self.has_discount():
            return Decimal('0')
        ratio = (self.compare_price - self.price) * 100 / self.compare_price
        return ratio.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

    @property
    def main_image_url(self):
        image = self.images.filter(is_primary=True).first()
        return image.image_url if image else None

    @property
    def all_image_urls(self):
        return list(self.images.order_by('position').values_list('image_url', flat=True))

    def is_new_product(self, now=None):
        if not self.created_at:
            return False
        now = now or timezone.now()
        window = timedelta(days=settings.KREDIKA['NEW_PRODUCT_DAYS'])
        return self.created_at + window > now

    def increment_view_count(self):
        self.view_count += 1

    def increment_purchase_count(self, quantity):
        self.purchase_count += quantity

    def add_tag(self, tag):
        """Append a trimmed tag; blank tags are ignored."""
        if not tag or not tag.strip():
            return
        if self.tags is None:
            self.tags = []
        tag = tag.strip()
        if tag not in self.tags:
            self.tags.append(tag)

    def has_tag(self, tag):
        return tag in (self.tags or [])

    @property
    def stock_status(self):
        if self.is_in_stock():
            return StockStatus.LOW_STOCK if self.is_low_stock() else StockStatus.IN_STOCK
        return StockStatus.OUT_OF_STOCK

    def is_credit_amount_allowed(self, amount):
        """Credit eligible and at least the product's minimum credit amount."""
        if not self.credit_eligible:
            return False
        return self.min_credit_amount is None or amount >= self.min_credit_amount


class ProductImage(BaseModel):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='images')

    image_url = models.URLField(max_length=512)
    alt_text = models.CharField(max_length=100, blank=True)
    position = models.PositiveIntegerField(default=0)
    is_primary = models.BooleanField(default=False)

    class Meta:
        db_table = 'product_images'
        ordering = ['position', 'created_at']

    def __str__(self):
        return self.image_url

    def is_supported_format(self):
        return self.image_url.lower().endswith(SUPPORTED_IMAGE_EXTENSIONS)

    @property
    def effective_alt_text(self):
        if self.alt_text:
            return self.alt_text
        return f"Image of product {self.product.name}"


class ProductReview(BaseModel):
    """Customer review; only approved reviews count towards the product rating."""

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='reviews')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='product_reviews')
    order = models.ForeignKey(
        'orders.Order',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviews'
    )

    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    title = models.CharField(max_length=100, blank=True)
    comment = models.TextField(blank=True)

    is_verified_purchase = models.BooleanField(default=False)
    is_approved = models.BooleanField(default=False)
    helpful_count = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'product_reviews'
        unique_together = [['product', 'user']]
        indexes = [
            models.Index(fields=['product', 'is_approved']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user_id} rated {self.product_id}: {self.rating}/5"

    def mark_as_verified_purchase(self):
        self.is_verified_purchase = True

    def approve(self):
        self.is_approved = True

    def increment_helpful_count(self):
        self.helpful_count += 1

    def is_positive_review(self):
        return self.rating >= 4

    def is_negative_review(self):
        return self.rating <= 2

    def is_neutral_review(self):
        return self.rating == 3
