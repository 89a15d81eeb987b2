# invitations/views.py

"""
Public invitation pages: the emailed link lands on accept-invite, which then
sends the (signed-in) user to complete-invite.
"""

from django.contrib import messages
from django.shortcuts import render, redirect
from django.urls import reverse
from django.views.decorators.cache import never_cache
import logging

from .services import InvitationService

logger = logging.getLogger(__name__)


@never_cache
def accept_invite(request):
    """Show who invited the visitor, following replaced or stale tokens"""
    token = request.GET.get('token', '').strip()
    result = InvitationService.resolve_invitation(token)

    if not result.success:
        return render(request, 'invitations/accept_invite.html', {'error': result.message})

    invitation = result.obj
    if invitation.token != token:
        return redirect(invitation.get_accept_path())

    context = {
        'invitation': invitation,
        'community_name': invitation.community_name or 'Community',
        'complete_url': f"{reverse('invitations:complete_invite')}?token={invitation.token}",
    }
    return render(request, 'invitations/accept_invite.html', context)


@never_cache
def complete_invite(request):
    """Consume the invitation for the signed-in user"""
    token = request.GET.get('token', '').strip()
    if not token:
        return render(request, 'invitations/complete_invite.html', {'error': "Invalid invitation link."})

    if not request.user.is_authenticated:
        messages.info(request, "Please sign in to accept your invitation.")
        next_url = f"{reverse('invitations:complete_invite')}?token={token}"
        return redirect(f"{reverse('accounts:login')}?next={next_url}")

    result = InvitationService.accept_invitation(token, request.user)
    if not result.success:
        return render(request, 'invitations/complete_invite.html', {'error': result.message})

    messages.success(request, result.message, extra_tags='sweetalert')
    return redirect('core:dashboard', community_id=result.obj.community_id)
