# invitations/modal_views.py

"""
Invitation Modal Action Views

HTMX modals for inviting members, fetching an invite link, resending and
revoking. Each action has a _modal (GET) view and a _submit (POST) view.
"""

from django.shortcuts import render, get_object_or_404
from django.template.loader import render_to_string
from django.views.decorators.http import require_http_methods
import logging

from core.decorators import community_required
from core.utils import create_error_response, create_result_response
from members.models import Member
from utils.forms import get_form_errors_as_string
from .forms import InviteMemberForm
from .models import Invitation
from .services import InvitationService

logger = logging.getLogger(__name__)


# =============================================================================
# INVITE MEMBER
# =============================================================================

@community_required(admin=True)
@require_http_methods(["GET"])
def invite_modal(request, community):
    form = InviteMemberForm(community, initial={'family': request.GET.get('family')})
    return render(request, 'invitations/modals/_invite_modal.html', {
        'community': community,
        'form': form,
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def invite_submit(request, community):
    form = InviteMemberForm(community, request.POST)
    if not form.is_valid():
        return create_error_response(get_form_errors_as_string(form), title='Invitation Failed', close_modal=False)

    result = InvitationService.invite_member(
        community, form.to_service_data(), inviter=request.user, request=request
    )
    html = ''
    if result.success:
        # The modal stays open to show the link for copying
        html = render_to_string('invitations/_invite_link.html', {
            'invitation': result.obj,
            'link': result.obj.link,
        }, request=request)
        response = create_result_response(result, html, success_title='Invitation Sent!', error_title='Invitation Failed')
        del response['HX-Close-Modal']
        return response
    return create_result_response(result, error_title='Invitation Failed')


# =============================================================================
# INVITE LINK / RESEND / REVOKE
# =============================================================================

@community_required(admin=True)
@require_http_methods(["GET"])
def invite_link_modal(request, community, member_pk):
    member = get_object_or_404(Member, pk=member_pk, community=community)
    result = InvitationService.get_invite_link(community, member, request=request)
    if not result.success:
        return create_error_response(result.message, title='Not Found')

    return render(request, 'invitations/modals/_link_modal.html', {
        'member': member,
        'link': result.obj,
    })


@community_required(admin=True)
@require_http_methods(["GET"])
def resend_modal(request, community, member_pk):
    member = get_object_or_404(Member, pk=member_pk, community=community)
    return render(request, 'invitations/modals/_resend_modal.html', {
        'member': member,
        'pending': member.invitations.filter(status='pending').first(),
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def resend_submit(request, community, member_pk):
    member = get_object_or_404(Member, pk=member_pk, community=community)
    result = InvitationService.resend_invitation(community, member, inviter=request.user, request=request)
    html = ''
    if result.success:
        html = render_to_string('invitations/_invite_link.html', {
            'invitation': result.obj,
            'link': result.obj.link,
        }, request=request)
    return create_result_response(result, html, success_title='Invitation Sent', error_title='Resend Failed')


@community_required(admin=True)
@require_http_methods(["POST"])
def revoke_submit(request, community, pk):
    invitation = get_object_or_404(Invitation, pk=pk, community=community)
    result = InvitationService.revoke_invitation(invitation)
    return create_result_response(result, success_title='Invitation Revoked', error_title='Revoke Failed')
