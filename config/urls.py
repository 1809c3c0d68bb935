"""
URL configuration for config project.

Business operations are exposed as services, not HTTP endpoints; only the
admin site and a health probe are routed here.
"""
from django.contrib import admin
from django.urls import path

from config.views import health_check

urlpatterns = [
    # Health check
    path('api/health/', health_check, name='health-check'),

    # Admin
    path('admin/', admin.site.urls),
]


# Custom error handlers
handler404 = 'config.views.error_404'
handler500 = 'config.views.error_500'
