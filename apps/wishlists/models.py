from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from apps.core.models import BaseModel


MIN_PRIORITY = 1
MAX_PRIORITY = 5


class Wishlist(BaseModel):
    """A product saved by a user, with personal notes and a 1-5 priority."""

    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='wishlist_items')
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='wishlisted_by')

    notes = models.CharField(max_length=500, blank=True)
    priority = models.PositiveSmallIntegerField(
        default=MIN_PRIORITY,
        validators=[MinValueValidator(MIN_PRIORITY), MaxValueValidator(MAX_PRIORITY)]
    )

    class Meta:
        db_table = 'wishlists'
        unique_together = [['user', 'product']]
        ordering = ['-priority', '-created_at']

    def __str__(self):
        return f"{self.user_id} wants {self.product_id} ({self.priority}/5)"

    def increase_priority(self):
        if self.priority < MAX_PRIORITY:
            self.priority += 1

    def decrease_priority(self):
        if self.priority > MIN_PRIORITY:
            self.priority -= 1

    def is_high_priority(self):
        return self.priority >= 4

    def has_notes(self):
        return bool(self.notes and self.notes.strip())

    @property
    def display_info(self):
        """Product: Phone X | Priority: 3/5 | Notes: for my birthday"""
        product = self.product.name if self.product_id else None
        return (
            f"Product: {product} | Priority: {self.priority}/5 | "
            f"Notes: {self.notes if self.has_notes() else 'No notes'}"
        )

    def is_for_product(self, product_id):
        return self.product_id == product_id

    def is_owned_by(self, user_id):
        return self.user_id == user_id

    def update_notes(self, notes):
        """Store trimmed notes; blank notes clear them."""
        self.notes = notes.strip() if notes and notes.strip() else ''
