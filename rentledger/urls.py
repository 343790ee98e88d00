"""
URL configuration for the rentledger project.
"""
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

from common.health import get_health_urls

admin.site.site_header = "Rental Ledger Administration"
admin.site.site_title = "Rental Ledger"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('api.urls')),
]

# Add health check endpoints (for load balancers, monitoring)
urlpatterns += get_health_urls()

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
