"""
URL configuration for the gigmarket project.

Every app exposes its endpoints through its own `api/urls.py`; all of them are
mounted below the common `api/` prefix.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('user_auth_app.api.urls')),
    path('api/', include('profile_app.api.urls')),
    path('api/', include('gigs_app.api.urls')),
    path('api/', include('orders_app.api.urls')),
    path('api/', include('payments_app.api.urls')),
    path('api/', include('disputes_app.api.urls')),
    path('api/', include('reviews_app.api.urls')),
    path('api/', include('notifications_app.api.urls')),
    path('api/', include('platform_stats_app.api.urls')),
    path('api-auth/', include('rest_framework.urls')),
]

urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
