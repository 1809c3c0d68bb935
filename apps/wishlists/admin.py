from django.contrib import admin

from .models import Wishlist


@admin.register(Wishlist)
class WishlistAdmin(admin.ModelAdmin):
    list_display = ['user', 'product', 'priority', 'created_at']
    list_filter = ['priority']
    search_fields = ['user__email', 'product__name', 'product__sku']
