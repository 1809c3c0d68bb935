"""
Serializers for the structured JSON documents stored in JSONFields.

These validate the payload before it is persisted and normalise it
(drop unset keys, stringify decimals and datetimes).
"""

from rest_framework import serializers

from .models import CodeList


class CompactSerializer(serializers.Serializer):
    """Serializer whose output omits keys with null values."""

    def to_representation(self, instance):
        data = super().to_representation(instance)
        return {key: value for key, value in data.items() if value is not None}


def clean_document(serializer_class, data):
    """
    Validate a JSON document and return its normalised form.

    Raises:
        rest_framework.exceptions.ValidationError: If the document is invalid
    """
    if data is None:
        return None
    serializer = serializer_class(data=data)
    serializer.is_valid(raise_exception=True)
    return serializer_class(serializer.validated_data).data


# =============================================================================
# JSON Document Serializers
# =============================================================================

class MetadataSerializer(CompactSerializer):
    """Display hints attached to a code list entry."""

    color = serializers.RegexField(r'^#[0-9A-Fa-f]{6}$', required=False, allow_null=True)
    icon = serializers.CharField(max_length=50, required=False, allow_null=True)
    theme = serializers.ChoiceField(choices=['dark', 'light'], required=False, allow_null=True)
    priority = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class DimensionsSerializer(CompactSerializer):
    """Product dimensions, centimetres by default."""

    length = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    width = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    height = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    unit = serializers.ChoiceField(choices=['cm', 'm', 'inch'], default='cm')


class DeviceInfoSerializer(CompactSerializer):
    os = serializers.CharField(max_length=50, required=False, allow_null=True)
    version = serializers.CharField(max_length=50, required=False, allow_null=True)
    model = serializers.CharField(max_length=100, required=False, allow_null=True)


class NotificationDataSerializer(CompactSerializer):
    """Business context carried by a notification."""

    order_id = serializers.CharField(max_length=64, required=False, allow_null=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    reference = serializers.CharField(max_length=64, required=False, allow_null=True)
    deep_link = serializers.CharField(max_length=500, required=False, allow_null=True)
    expiry_date = serializers.DateTimeField(required=False, allow_null=True)


class NotificationSettingsSerializer(CompactSerializer):
    email = serializers.BooleanField(default=True)
    sms = serializers.BooleanField(default=False)
    push = serializers.BooleanField(default=True)


class UserPreferencesSerializer(CompactSerializer):
    language = serializers.CharField(min_length=2, max_length=2, required=False, allow_null=True)
    dark_mode = serializers.BooleanField(default=False)
    timezone = serializers.CharField(max_length=64, required=False, allow_null=True)
    notifications = NotificationSettingsSerializer(required=False, allow_null=True)


class ProductDataSerializer(CompactSerializer):
    sku = serializers.CharField(max_length=100, required=False, allow_null=True)
    barcode = serializers.CharField(max_length=64, required=False, allow_null=True)
    manufacturer = serializers.CharField(max_length=100, required=False, allow_null=True)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False, allow_null=True)


class GatewayErrorSerializer(CompactSerializer):
    code = serializers.CharField(max_length=50)
    message = serializers.CharField(max_length=500, required=False, allow_null=True)


class GatewayResponseSerializer(CompactSerializer):
    """Payment gateway callback payload."""

    transaction_id = serializers.CharField(max_length=100)
    status = serializers.ChoiceField(choices=['success', 'failed'])
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    currency = serializers.CharField(min_length=3, max_length=3, required=False, allow_null=True)
    timestamp = serializers.DateTimeField(required=False, allow_null=True)
    error = GatewayErrorSerializer(required=False, allow_null=True)

    def validate(self, attrs):
        """A failed response must carry an error."""
        if attrs.get('status') == 'failed' and not attrs.get('error'):
            raise serializers.ValidationError({
                'error': 'Failed gateway responses must include an error'
            })
        return attrs


# =============================================================================
# Output Serializers
# =============================================================================

class CodeListSerializer(serializers.ModelSerializer):
    """Code list entry for dropdowns and admin screens."""

    composite_key = serializers.CharField(read_only=True)

    class Meta:
        model = CodeList
        fields = [
            'id', 'type', 'code', 'value', 'label', 'description',
            'is_active', 'position', 'metadata', 'composite_key',
        ]
        read_only_fields = fields
