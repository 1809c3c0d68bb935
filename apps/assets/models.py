from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from apps.core.models import BaseModel


class AssetDocument(BaseModel):
    """Supporting document (title deed, registration card, insurance, ...)."""

    document_type = models.CharField(max_length=50)
    file_url = models.URLField(max_length=512)
    valid_until = models.DateField(null=True, blank=True)

    class Meta:
        abstract = True

    def __str__(self):
        return f"{self.document_type} ({self.valid_until or 'no expiry'})"

    def is_expired(self, today=None):
        today = today or timezone.localdate()
        return self.valid_until is not None and self.valid_until < today


class Land(BaseModel):
    """A plot of land declared by a user."""

    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='lands')

    location = models.CharField(max_length=255)
    land_type = models.CharField(max_length=50)
    area = models.FloatField(validators=[MinValueValidator(0.0)])
    reference = models.CharField(max_length=100, blank=True)
    acquisition_date = models.DateField(null=True, blank=True)

    latitude = models.DecimalField(
        max_digits=10,
        decimal_places=8,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('-90')), MaxValueValidator(Decimal('90'))]
    )
    longitude = models.DecimalField(
        max_digits=11,
        decimal_places=8,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('-180')), MaxValueValidator(Decimal('180'))]
    )

    class Meta:
        db_table = 'lands'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.land_type} at {self.location} ({self.area} m²)"

    def has_coordinates(self):
        return self.latitude is not None and self.longitude is not None


class LandDocument(AssetDocument):
    land = models.ForeignKey(Land, on_delete=models.CASCADE, related_name='documents')

    class Meta:
        db_table = 'land_documents'
        ordering = ['-created_at']


class Vehicle(BaseModel):
    """A vehicle declared by a user."""

    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='vehicles')

    registration_number = models.CharField(max_length=30, unique=True)
    type = models.CharField(max_length=50)
    brand = models.CharField(max_length=100, blank=True)
    model = models.CharField(max_length=100, blank=True)
    chassis_number = models.CharField(max_length=50, blank=True)
    color = models.CharField(max_length=50, blank=True)
    acquisition_date = models.DateField(null=True, blank=True)

    class Meta:
        db_table = 'vehicles'
        ordering = ['-created_at']

    def __str__(self):
        label = ' '.join(part for part in (self.brand, self.model) if part)
        return f"{self.registration_number} {label}".strip()


class VehicleDocument(AssetDocument):
    vehicle = models.ForeignKey(Vehicle, on_delete=models.CASCADE, related_name='documents')

    class Meta:
        db_table = 'vehicle_documents'
        ordering = ['-created_at']
