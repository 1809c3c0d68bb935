from rest_framework import serializers

from .models import Land, LandDocument, Vehicle, VehicleDocument


# =============================================================================
# Input Serializers
# =============================================================================

class LandDocumentRequestSerializer(serializers.Serializer):
    document_type = serializers.CharField(max_length=50)
    file_url = serializers.URLField(max_length=512)
    valid_until = serializers.DateField(required=False, allow_null=True)


# =============================================================================
# Output Serializers
# =============================================================================

class LandDocumentResponseSerializer(serializers.ModelSerializer):
    class Meta:
        model = LandDocument
        fields = ['id', 'document_type', 'file_url', 'valid_until']
        read_only_fields = fields


class LandResponseSerializer(serializers.ModelSerializer):
    documents = LandDocumentResponseSerializer(many=True, read_only=True)

    class Meta:
        model = Land
        fields = [
            'id',
            'location',
            'land_type',
            'area',
            'reference',
            'acquisition_date',
            'latitude',
            'longitude',
            'owner',
            'documents',
        ]
        read_only_fields = fields


class VehicleDocumentResponseSerializer(serializers.ModelSerializer):
    class Meta:
        model = VehicleDocument
        fields = ['id', 'document_type', 'file_url', 'valid_until']
        read_only_fields = fields


class VehicleResponseSerializer(serializers.ModelSerializer):
    documents = VehicleDocumentResponseSerializer(many=True, read_only=True)

    class Meta:
        model = Vehicle
        fields = [
            'id',
            'registration_number',
            'type',
            'brand',
            'model',
            'chassis_number',
            'color',
            'acquisition_date',
            'owner',
            'documents',
        ]
        read_only_fields = fields
