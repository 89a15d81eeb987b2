# members/urls.py

"""
URL Configuration for Members Module

Mounted under app/<uuid:community_id>/, so every view receives the
community id. Organized into three main sections:
1. Regular Views (views.py) - Full page loads
2. Modal Views (modal_views.py) - HTMX modal actions without page refresh
3. HTMX Views (htmx_views.py) - Dynamic search and filtering

All URLs use UUID primary keys
"""

from django.urls import path
from . import views, htmx_views, modal_views

app_name = 'members'

urlpatterns = [
    # =============================================================================
    # MEMBERS
    # =============================================================================

    # Regular Views
    path('members/', views.member_list, name='member_list'),
    path('members/<uuid:pk>/', views.member_detail, name='member_detail'),

    # Modal Views
    path('members/modal/add/', modal_views.member_add_modal, name='member_add_modal'),
    path('members/modal/add/submit/', modal_views.member_add_submit, name='member_add_submit'),
    path('members/<uuid:pk>/modal/edit/', modal_views.member_edit_modal, name='member_edit_modal'),
    path('members/<uuid:pk>/modal/edit/submit/', modal_views.member_edit_submit, name='member_edit_submit'),
    path('members/<uuid:pk>/modal/delete/', modal_views.member_delete_modal, name='member_delete_modal'),
    path('members/<uuid:pk>/modal/delete/submit/', modal_views.member_delete_submit, name='member_delete_submit'),

    # HTMX Views
    path('members/htmx/search/', htmx_views.member_search, name='member_search'),

    # =============================================================================
    # FAMILIES
    # =============================================================================

    # Regular Views
    path('families/', views.family_list, name='family_list'),
    path('families/<uuid:pk>/', views.family_detail, name='family_detail'),

    # Modal Views
    path('families/modal/add/', modal_views.family_add_modal, name='family_add_modal'),
    path('families/modal/add/submit/', modal_views.family_add_submit, name='family_add_submit'),
    path('families/<uuid:pk>/modal/edit/', modal_views.family_edit_modal, name='family_edit_modal'),
    path('families/<uuid:pk>/modal/edit/submit/', modal_views.family_edit_submit, name='family_edit_submit'),
    path('families/<uuid:pk>/modal/delete/', modal_views.family_delete_modal, name='family_delete_modal'),
    path('families/<uuid:pk>/modal/delete/submit/', modal_views.family_delete_submit, name='family_delete_submit'),

    # Patriarch actions
    path('families/<uuid:family_pk>/modal/add-member/', modal_views.patriarch_add_modal, name='patriarch_add_modal'),
    path('families/<uuid:family_pk>/modal/add-member/submit/', modal_views.patriarch_add_submit, name='patriarch_add_submit'),
    path('families/<uuid:family_pk>/modal/invite/', modal_views.patriarch_invite_modal, name='patriarch_invite_modal'),
    path('families/<uuid:family_pk>/modal/invite/submit/', modal_views.patriarch_invite_submit, name='patriarch_invite_submit'),

    # =============================================================================
    # PAYMENTS
    # =============================================================================

    # Regular Views
    path('payments/', views.payment_overview, name='payment_overview'),

    # Modal Views
    path('members/<uuid:member_pk>/payments/modal/record/', modal_views.payment_record_modal, name='payment_record_modal'),
    path('members/<uuid:member_pk>/payments/modal/record/submit/', modal_views.payment_record_submit, name='payment_record_submit'),
    path('payments/<uuid:pk>/modal/edit/', modal_views.payment_edit_modal, name='payment_edit_modal'),
    path('payments/<uuid:pk>/modal/edit/submit/', modal_views.payment_edit_submit, name='payment_edit_submit'),
    path('payments/<uuid:pk>/modal/delete/', modal_views.payment_delete_modal, name='payment_delete_modal'),
    path('payments/<uuid:pk>/modal/delete/submit/', modal_views.payment_delete_submit, name='payment_delete_submit'),

    # HTMX Views
    path('payments/htmx/search/', htmx_views.payment_search, name='payment_search'),
]
