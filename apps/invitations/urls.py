# invitations/urls.py

from django.urls import path
from . import views, modal_views

app_name = 'invitations'

urlpatterns = [
    # =============================================================================
    # PUBLIC ACCEPT FLOW
    # =============================================================================

    path('auth/accept-invite/', views.accept_invite, name='accept_invite'),
    path('auth/complete-invite/', views.complete_invite, name='complete_invite'),

    # =============================================================================
    # MODAL ACTIONS
    # =============================================================================

    path('app/<uuid:community_id>/invitations/new/modal/', modal_views.invite_modal, name='invite_modal'),
    path('app/<uuid:community_id>/invitations/new/submit/', modal_views.invite_submit, name='invite_submit'),
    path('app/<uuid:community_id>/invitations/member/<uuid:member_pk>/link/', modal_views.invite_link_modal, name='invite_link_modal'),
    path('app/<uuid:community_id>/invitations/member/<uuid:member_pk>/resend/modal/', modal_views.resend_modal, name='resend_modal'),
    path('app/<uuid:community_id>/invitations/member/<uuid:member_pk>/resend/submit/', modal_views.resend_submit, name='resend_submit'),
    path('app/<uuid:community_id>/invitations/<uuid:pk>/revoke/', modal_views.revoke_submit, name='revoke_submit'),
]
