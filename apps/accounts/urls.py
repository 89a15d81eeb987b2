# accounts/urls.py

from django.urls import path
from . import views, ajax_views

app_name = 'accounts'

urlpatterns = [
    # =============================================================================
    # AUTHENTICATION
    # =============================================================================

    path('sign-in/', views.login_view, name='login'),
    path('sign-out/', views.logout_view, name='logout'),
    path('sign-up/', views.signup_view, name='signup'),

    # =============================================================================
    # PROFILE & SECURITY
    # =============================================================================

    path('profile/', views.profile_view, name='profile'),
    path('profile/password/', views.change_password, name='change_password'),
    path('profile/delete/', views.delete_account, name='delete_account'),
    path('profile/picture/', ajax_views.update_profile_picture, name='update_profile_picture'),

    # =============================================================================
    # JSON API
    # =============================================================================

    path('api/token/', views.api_token, name='api_token'),
    path('api/upload-avatar/', ajax_views.upload_avatar, name='upload_avatar'),
]
