import math
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import (
    MaxValueValidator,
    MinLengthValidator,
    MinValueValidator,
    RegexValidator,
)
from django.db import models
from django.utils import timezone

from apps.core.models import BaseModel


PHONE_VALIDATOR = RegexValidator(
    r'^\+(?:[0-9] ?){6,14}[0-9]$',
    'Use the international format, e.g. +33 6 12 34 56 78'
)

IP_ADDRESS_VALIDATOR = RegexValidator(
    r'^((25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)$'
    r'|^([0-9a-fA-F]{1,4}:){7}[0-9a-fA-F]{1,4}$',
    'Invalid IP address'
)

CONSUMER_EMAIL_DOMAINS = {'gmail.com', 'yahoo.com', 'hotmail.com', 'outlook.com', 'live.com'}

EARTH_RADIUS_KM = 6371


def validate_past_date(value):
    if value >= timezone.localdate():
        raise ValidationError('Date must be in the past')


class UserStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    SUSPENDED = 'SUSPENDED', 'Suspended'
    INACTIVE = 'INACTIVE', 'Inactive'


class User(BaseModel):
    """
    Customer profile.

    Authentication is handled by the identity provider; `keycloak_id`
    links the profile to the provider's subject.
    """

    full_name = models.CharField(max_length=100, validators=[MinLengthValidator(2)])
    email = models.EmailField(unique=True)
    phone_number = models.CharField(
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        validators=[PHONE_VALIDATOR]
    )
    date_of_birth = models.DateField(null=True, blank=True, validators=[validate_past_date])
    national_id = models.CharField(
        max_length=50,
        unique=True,
        null=True,
        blank=True,
        validators=[MinLengthValidator(5)]
    )
    profession = models.CharField(max_length=100, blank=True)
    monthly_income = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.01'))]
    )

    role_code = models.CharField(max_length=20, default='CUSTOMER')
    status_code = models.CharField(max_length=20, choices=UserStatus.choices, default=UserStatus.ACTIVE)

    # Verification
    is_verified = models.BooleanField(default=False)
    email_verified = models.BooleanField(default=False)
    phone_verified = models.BooleanField(default=False)

    keycloak_id = models.CharField(max_length=64, unique=True, null=True, blank=True)
    profile_image_url = models.URLField(max_length=512, blank=True)
    preferred_language = models.CharField(max_length=2, default='fr')
    last_login_at = models.DateTimeField(null=True, blank=True)

    roles = models.JSONField(default=list, blank=True)
    preferences = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['email']),
            models.Index(fields=['keycloak_id']),
            models.Index(fields=['status_code']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.display_name} <{self.email}>"

    @property
    def age(self):
        """Age in full years, or None without a birth date."""
        if not self.date_of_birth:
            return None
        today = timezone.localdate()
        born = self.date_of_birth
        return today.year - born.year - ((today.month, today.day) < (born.month, born.day))

    def is_adult(self):
        age = self.age
        return age is not None and age >= 18

    def is_fully_verified(self):
        return self.email_verified and self.phone_verified

    @property
    def default_address(self):
        return self.addresses.filter(is_default=True).first()

    @property
    def display_name(self):
        """Full name, falling back to the local part of the email."""
        if self.full_name and self.full_name.strip():
            return self.full_name
        return self.email.split('@')[0] if self.email else ''

    def has_role(self, role):
        return role in (self.roles or [])

    def add_role(self, role):
        """Add a role if non-blank and not already present."""
        if not role or not role.strip():
            return
        if self.roles is None:
            self.roles = []
        if role not in self.roles:
            self.roles.append(role)

    def update_last_login(self):
        self.last_login_at = timezone.now()

    def is_active_account(self):
        return (self.status_code or '').upper() == UserStatus.ACTIVE

    def has_credit_profile(self):
        return hasattr(self, 'credit_profile')

    @property
    def active_cart(self):
        return self.carts.filter(status_code='ACTIVE').first()

    @property
    def initials(self):
        """First letters of the first and last names, uppercased."""
        if not self.full_name or not self.full_name.strip():
            return ''
        names = self.full_name.split()
        if len(names) == 1:
            return names[0][0].upper()
        return (names[0][0] + names[-1][0]).upper()

    def has_professional_email(self):
        if not self.email or '@' not in self.email:
            return False
        return self.email.split('@')[1].lower() not in CONSUMER_EMAIL_DOMAINS


class UserAddress(BaseModel):
    """Postal address, optionally geocoded."""

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='addresses')

    type_code = models.CharField(max_length=20)
    street = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    region = models.CharField(max_length=100, blank=True)
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=2, validators=[MinLengthValidator(2)])
    is_default = models.BooleanField(default=False)

    latitude = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(-90.0), MaxValueValidator(90.0)]
    )
    longitude = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(-180.0), MaxValueValidator(180.0)]
    )

    class Meta:
        db_table = 'user_addresses'
        indexes = [
            models.Index(fields=['user', 'is_default']),
        ]
        ordering = ['-is_default', 'created_at']

    def __str__(self):
        return f"{self.formatted_type}: {self.short_address}"

    def has_coordinates(self):
        return self.latitude is not None and self.longitude is not None

    def distance_to(self, other):
        """
        Great-circle distance in kilometres (haversine).

        Returns -1 when either address has no coordinates.
        """
        if not self.has_coordinates() or not other.has_coordinates():
            return -1
        lat1, lat2 = math.radians(self.latitude), math.radians(other.latitude)
        d_lat = math.radians(other.latitude - self.latitude)
        d_lng = math.radians(other.longitude - self.longitude)
        a = (
            math.sin(d_lat / 2) ** 2
            + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
        )
        return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    @property
    def full_address(self):
        parts = [self.street, self.city]
        if self.region:
            parts.append(self.region)
        parts.append(f"{self.postal_code} {self.country}".strip())
        return ', '.join(part for part in parts if part)

    @property
    def geocoding_query(self):
        return f"{self.street}, {self.city}, {self.country}"

    def is_complete(self):
        """All mandatory parts present and a 2-letter country code."""
        return bool(
            self.user_id
            and self.type_code
            and self.street
            and self.city
            and self.postal_code
            and self.country and len(self.country) == 2
        )

    def is_similar_to(self, other):
        if other is None:
            return False
        fields = ['street', 'city', 'region', 'postal_code', 'country']
        return all(getattr(self, f) == getattr(other, f) for f in fields)

    @property
    def short_address(self):
        return f"{self.city}, {self.country}"

    @property
    def formatted_type(self):
        """HOME -> Home."""
        if not self.type_code:
            return ''
        return self.type_code[0] + self.type_code[1:].lower()

    def is_international(self):
        home = settings.KREDIKA['HOME_COUNTRY']
        return (self.country or '').upper() != home.upper()

    def clone(self):
        """Unsaved copy with the same postal fields (no coordinates)."""
        return UserAddress(
            user_id=self.user_id,
            type_code=self.type_code,
            street=self.street,
            city=self.city,
            region=self.region,
            postal_code=self.postal_code,
            country=self.country,
            is_default=self.is_default,
        )


class UserSession(BaseModel):
    """Application session opened by a client device."""

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='sessions')

    session_token = models.CharField(max_length=256, unique=True, validators=[MinLengthValidator(64)])
    device_info = models.JSONField(default=dict, blank=True)
    ip_address = models.CharField(max_length=45, blank=True, validators=[IP_ADDRESS_VALIDATOR])
    user_agent = models.CharField(max_length=500, blank=True)

    expires_at = models.DateTimeField()
    last_activity = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'user_sessions'
        indexes = [
            models.Index(fields=['user', 'is_active']),
            models.Index(fields=['expires_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Session {self.session_token[:8]}... ({self.user_id})"

    def is_expired(self, now=None):
        now = now or timezone.now()
        return self.expires_at is not None and now > self.expires_at

    def is_valid(self, now=None):
        return self.is_active and not self.is_expired(now)

    def touch(self):
        self.last_activity = timezone.now()

    def invalidate(self):
        self.is_active = False

    def extend(self, minutes):
        """Push expiry back by `minutes`; non-positive values are ignored."""
        if minutes > 0:
            self.expires_at = self.expires_at + timedelta(minutes=minutes)

    def remaining_minutes(self, now=None):
        if self.expires_at is None:
            return None
        now = now or timezone.now()
        return int((self.expires_at - now).total_seconds() // 60)

    def is_inactive_too_long(self, max_inactive_minutes, now=None):
        if self.last_activity is None:
            return True
        now = now or timezone.now()
        return (now - self.last_activity) > timedelta(minutes=max_inactive_minutes)

    @property
    def device_type(self):
        agent = self.user_agent
        if not agent:
            return 'Unknown'
        if 'Mobile' in agent:
            return 'Mobile'
        if 'Tablet' in agent:
            return 'Tablet'
        if any(os_name in agent for os_name in ('Windows', 'Macintosh', 'Linux')):
            return 'Desktop'
        return 'Other'

    def is_new_device(self, known_user_agents):
        if not self.user_agent or known_user_agents is None:
            return False
        return self.user_agent not in known_user_agents
