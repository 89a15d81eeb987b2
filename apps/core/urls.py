# core/urls.py

"""
URL Configuration for Core Module

Landing, community creation and switching, and the per-community dashboard,
settings and reports pages (under app/<uuid:community_id>/).
"""

from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # =============================================================================
    # LANDING & COMMUNITIES
    # =============================================================================
    path('', views.home, name='home'),
    path('create-community/', views.create_community_view, name='create_community'),
    path('app/switch-community/', views.switch_community, name='switch_community'),

    # =============================================================================
    # COMMUNITY PAGES
    # =============================================================================
    path('app/<uuid:community_id>/', views.dashboard, name='dashboard'),
    path('app/<uuid:community_id>/settings/', views.settings_view, name='settings'),
    path('app/<uuid:community_id>/settings/recalculate/', views.recalculate_view, name='recalculate_tiers'),
    path('app/<uuid:community_id>/reports/', views.reports_view, name='reports'),
]
