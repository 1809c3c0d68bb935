from django.contrib import admin

from .models import Land, LandDocument, Vehicle, VehicleDocument


class LandDocumentInline(admin.TabularInline):
    model = LandDocument
    extra = 0
    fields = ['document_type', 'file_url', 'valid_until']


class VehicleDocumentInline(admin.TabularInline):
    model = VehicleDocument
    extra = 0
    fields = ['document_type', 'file_url', 'valid_until']


@admin.register(Land)
class LandAdmin(admin.ModelAdmin):
    list_display = ['location', 'land_type', 'area', 'reference', 'owner', 'acquisition_date']
    list_filter = ['land_type']
    search_fields = ['location', 'reference', 'owner__email']
    inlines = [LandDocumentInline]


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ['registration_number', 'type', 'brand', 'model', 'owner', 'acquisition_date']
    list_filter = ['type', 'brand']
    search_fields = ['registration_number', 'chassis_number', 'owner__email']
    inlines = [VehicleDocumentInline]
