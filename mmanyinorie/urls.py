"""
URL configuration for mmanyinorie project.
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

urlpatterns = [
    # Django admin
    path('admin/', admin.site.urls),

    # Core app – landing, community dashboard, settings, reports
    path('', include(('core.urls', 'core'), namespace='core')),

    # Accounts app – sign in/up, profile, avatar upload
    path('accounts/', include(('accounts.urls', 'accounts'), namespace='accounts')),

    # Invitations – accept/complete flow and per-community invite management
    path('', include(('invitations.urls', 'invitations'), namespace='invitations')),

    # Members app – members, families, payments
    path('app/<uuid:community_id>/', include(('members.urls', 'members'), namespace='members')),

    # Contribution templates
    path('app/<uuid:community_id>/contributions/', include(('contributions.urls', 'contributions'), namespace='contributions')),
]

# Media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
