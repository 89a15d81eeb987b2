# contributions/urls.py

"""
URL Configuration for contribution templates.

Mounted under app/<uuid:community_id>/contributions/.
"""

from django.urls import path
from . import views, modal_views

app_name = 'contributions'

urlpatterns = [
    # Regular Views
    path('', views.contribution_list, name='contribution_list'),

    # Modal Views
    path('modal/add/', modal_views.contribution_add_modal, name='contribution_add_modal'),
    path('modal/add/submit/', modal_views.contribution_add_submit, name='contribution_add_submit'),
    path('<uuid:pk>/modal/edit/', modal_views.contribution_edit_modal, name='contribution_edit_modal'),
    path('<uuid:pk>/modal/edit/submit/', modal_views.contribution_edit_submit, name='contribution_edit_submit'),
    path('<uuid:pk>/modal/delete/', modal_views.contribution_delete_modal, name='contribution_delete_modal'),
    path('<uuid:pk>/modal/delete/submit/', modal_views.contribution_delete_submit, name='contribution_delete_submit'),
]
