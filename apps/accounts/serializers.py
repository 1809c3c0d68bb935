from django.utils import timezone
from rest_framework import serializers

from apps.core.serializers import DeviceInfoSerializer, UserPreferencesSerializer

from .models import User, UserAddress, UserSession, PHONE_VALIDATOR


# =============================================================================
# Input Serializers
# =============================================================================

class UserRequestSerializer(serializers.Serializer):
    """
    Validate input for creating or updating a customer profile.

    Fields:
        full_name (str): 2-100 characters
        email (str): Valid email address
        phone_number (str): International format (+221 77 123 45 67)
        date_of_birth (date): Must be in the past
        national_id (str): 5-50 characters
        profession (str): Optional occupation
        monthly_income (Decimal): Non-negative declared income
        profile_image_url (str): Avatar URL
    """

    full_name = serializers.CharField(min_length=2, max_length=100)
    email = serializers.EmailField()
    phone_number = serializers.CharField(
        max_length=20,
        required=False,
        allow_null=True,
        validators=[PHONE_VALIDATOR]
    )
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    national_id = serializers.CharField(min_length=5, max_length=50, required=False, allow_null=True)
    profession = serializers.CharField(max_length=100, required=False, allow_blank=True)
    monthly_income = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True
    )
    profile_image_url = serializers.URLField(required=False, allow_blank=True)
    preferences = UserPreferencesSerializer(required=False, allow_null=True)

    def validate_date_of_birth(self, value):
        """Birth date must be in the past."""
        if value and value >= timezone.localdate():
            raise serializers.ValidationError('Date of birth must be in the past')
        return value


class UserAddressRequestSerializer(serializers.Serializer):
    """Validate input for adding or editing an address."""

    type_code = serializers.CharField(max_length=20, default='HOME')
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    country = serializers.CharField(min_length=2, max_length=2)
    region = serializers.CharField(max_length=100, required=False, allow_blank=True)
    postal_code = serializers.CharField(max_length=20, required=False, allow_blank=True)
    is_default = serializers.BooleanField(default=False)
    latitude = serializers.FloatField(min_value=-90.0, max_value=90.0, required=False, allow_null=True)
    longitude = serializers.FloatField(min_value=-180.0, max_value=180.0, required=False, allow_null=True)

    def validate_country(self, value):
        return value.upper()

    def validate(self, attrs):
        """Coordinates come in pairs."""
        if (attrs.get('latitude') is None) != (attrs.get('longitude') is None):
            raise serializers.ValidationError({
                'longitude': 'Latitude and longitude must be provided together'
            })
        return attrs


class SessionRequestSerializer(serializers.Serializer):
    """Client context for opening a session."""

    ip_address = serializers.IPAddressField(required=False, allow_blank=True)
    user_agent = serializers.CharField(max_length=500, required=False, allow_blank=True)
    device_info = DeviceInfoSerializer(required=False, allow_null=True)


# =============================================================================
# Output Serializers
# =============================================================================

class UserSimpleSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'full_name', 'display_name', 'email']
        read_only_fields = fields


class UserResponseSerializer(serializers.ModelSerializer):
    """Customer profile."""

    age = serializers.IntegerField(read_only=True)
    initials = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'full_name',
            'email',
            'phone_number',
            'age',
            'initials',
            'profile_image_url',
            'status_code',
            'created_at',
            'keycloak_id',
        ]
        read_only_fields = fields


class UserAddressResponseSerializer(serializers.ModelSerializer):
    full_address = serializers.CharField(read_only=True)

    class Meta:
        model = UserAddress
        fields = [
            'id',
            'type_code',
            'street',
            'city',
            'region',
            'postal_code',
            'country',
            'is_default',
            'full_address',
            'latitude',
            'longitude',
        ]
        read_only_fields = fields


class UserSessionResponseSerializer(serializers.ModelSerializer):
    device_type = serializers.CharField(read_only=True)
    remaining_minutes = serializers.SerializerMethodField()

    class Meta:
        model = UserSession
        fields = [
            'id',
            'session_token',
            'ip_address',
            'device_type',
            'expires_at',
            'last_activity',
            'is_active',
            'remaining_minutes',
        ]
        read_only_fields = fields

    def get_remaining_minutes(self, obj):
        return obj.remaining_minutes()
