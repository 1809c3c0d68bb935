from django.db import models
from django.core.validators import MinValueValidator, RegexValidator
from django.utils import timezone
import uuid


class StaleObjectError(Exception):
    """Raised when saving an instance whose row was modified concurrently."""
    pass


class SoftDeleteQuerySet(models.QuerySet):
    """QuerySet whose bulk delete flags rows instead of removing them."""

    def delete(self):
        return self.update(is_deleted=True, updated_at=timezone.now())

    def hard_delete(self):
        return super().delete()


class SoftDeleteManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """Default manager hiding soft-deleted rows."""

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)


class BaseModel(models.Model):
    """
    Abstract base for every persisted entity.

    Provides a UUID primary key, soft delete, timestamps, audit
    columns and a version counter for optimistic locking.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    is_deleted = models.BooleanField(default=False, db_index=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Audit
    created_by = models.CharField(max_length=100, blank=True, editable=False)
    last_modified_by = models.CharField(max_length=100, blank=True)

    version = models.PositiveIntegerField(default=0, editable=False)

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        """Save, bumping `version` and rejecting stale writes."""
        if self._state.adding:
            super().save(*args, **kwargs)
            return

        expected = self.version
        claimed = (
            type(self).all_objects
            .filter(pk=self.pk, version=expected)
            .update(version=expected + 1)
        )
        if not claimed:
            raise StaleObjectError(
                f"{type(self).__name__} {self.pk} was modified concurrently "
                f"(expected version {expected})"
            )
        self.version = expected + 1

        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'version', 'updated_at'}
        super().save(*args, **kwargs)

    def delete(self, using=None, keep_parents=False):
        """Soft delete: flag the row and keep it."""
        self.is_deleted = True
        self.save(update_fields=['is_deleted', 'updated_at'])

    def hard_delete(self):
        return super().delete()


class CodeList(BaseModel):
    """Reference data entry (e.g. ORDER_STATUS:DELIVERED)."""

    type = models.CharField(
        max_length=50,
        validators=[RegexValidator(r'^[A-Z_]+$', 'Type must be uppercase letters and underscores')]
    )
    code = models.CharField(
        max_length=30,
        validators=[RegexValidator(r'^[A-Z0-9_]+$', 'Code must be uppercase letters, digits and underscores')]
    )
    value = models.CharField(max_length=255, blank=True)
    label = models.CharField(max_length=255, blank=True)
    description = models.CharField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True)
    position = models.PositiveIntegerField(default=0, validators=[MinValueValidator(0)])

    # color, icon, theme, priority
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'code_lists'
        unique_together = [['type', 'code']]
        indexes = [
            models.Index(fields=['type', 'is_active']),
        ]
        ordering = ['type', 'position', 'code']

    def __str__(self):
        return self.composite_key

    def is_inactive(self):
        return not self.is_active

    @property
    def composite_key(self):
        return f"{self.type}:{self.code}"
