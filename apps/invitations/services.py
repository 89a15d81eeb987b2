# invitations/services.py

"""
Invitation Business Logic

- invite_member: placeholder member (status 'invited') plus a pending invitation
- create_or_resend_invite: new token, older pending ones revoked and linked
- get_invite_link / resend_invitation / revoke_invitation
- resolve_invitation: follow replaced_by chains, expire stale invitations
- accept_invitation: link the signed-in user to the placeholder member
"""

from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError, transaction
from django.utils import timezone
import logging

from members import streams
from members.models import Member
from members.services import CommunityService, ServiceResult
from .emails import EmailDeliveryError, send_invitation_email, notify_new_member
from .models import Invitation

logger = logging.getLogger(__name__)

MAX_REPLACEMENT_HOPS = 10


def get_inviter_name(user):
    if user is None:
        return ''
    profile = getattr(user, 'profile', None)
    return (
        (profile.display_name if profile else '')
        or user.get_full_name()
        or user.email
        or user.get_username()
    )


def build_invite_link(invitation, request=None):
    """Absolute accept link; APP_URL is the origin outside of a request"""
    path = invitation.get_accept_path()
    if request is not None:
        return request.build_absolute_uri(path)
    return f"{settings.APP_URL.rstrip('/')}{path}"


class InvitationService:
    """Invitation lifecycle"""

    @staticmethod
    def create_or_resend_invite(community, member, email, inviter=None, role='user', ttl_days=None):
        """
        Create a fresh pending invitation for (community, email) and revoke any
        older pending ones, pointing them at the new token.

        Returns:
            Invitation
        """
        email = (email or '').strip().lower()

        with transaction.atomic():
            previous = list(
                Invitation.objects.select_for_update().filter(
                    community=community, email=email, status='pending'
                )
            )

            invitation = Invitation(
                community=community,
                community_name=community.name,
                member=member,
                email=email,
                first_name=member.first_name if member else '',
                last_name=member.last_name if member else '',
                role=role if role in ('user', 'admin') else 'user',
                inviter=inviter,
                inviter_name=get_inviter_name(inviter),
            )
            if ttl_days is not None:
                invitation.expires_at = (
                    timezone.now() + timedelta(days=ttl_days) if ttl_days > 0 else None
                )
            invitation.save()

            for old in previous:
                old.status = 'revoked'
                old.replaced_by = invitation.token
                old.save(update_fields=['status', 'replaced_by', 'updated_at'])

        if previous:
            logger.info(f"Revoked {len(previous)} pending invitation(s) for {email} in community {community.pk}")
        logger.info(f"Invitation {invitation.pk} created for {email} in community {community.pk}")
        return invitation

    @staticmethod
    def _deliver(invitation, link):
        """Send the email; returns an error text or None"""
        try:
            send_invitation_email(invitation, link)
        except (EmailDeliveryError, ImproperlyConfigured) as e:
            return str(e)
        return None

    @staticmethod
    def invite_member(community, data, inviter=None, request=None, send_email=True):
        """
        Add a placeholder member with status 'invited' and a pending invitation
        for it in one transaction, then email the link.

        Returns:
            ServiceResult whose obj is the Invitation; the accept link is on
            `invitation.link` and `invitation.email_sent` tells whether the
            email went out
        """
        email = (data.get('email') or '').strip().lower()
        if not email:
            return ServiceResult(False, "An email address is required to send an invitation.")

        if Member.objects.filter(community=community, email=email, status='active').exists():
            return ServiceResult(False, f"{email} is already a member of this community.")

        role = data.get('role') if data.get('role') in ('user', 'admin') else 'user'
        service = CommunityService(community, user=inviter)

        try:
            with transaction.atomic(), streams.batch():
                result = service.add_member({
                    **data,
                    'email': email,
                    'role': role,
                    'status': 'invited',
                    'user': None,
                })
                if not result.success:
                    return result

                member = result.obj
                invitation = InvitationService.create_or_resend_invite(
                    community, member, email, inviter=inviter, role=role
                )
        except DatabaseError as e:
            logger.error(f"Error inviting {email} to community {community.pk}: {e}", exc_info=True)
            return ServiceResult(False, str(e))

        invitation.link = build_invite_link(invitation, request)
        invitation.email_sent = False

        message = f"{member.name} has been invited. Share the link with them to join."
        if send_email:
            error = InvitationService._deliver(invitation, invitation.link)
            if error:
                message = f"{member.name} has been invited, but the email was not sent: {error} Share the link with them to join."
            else:
                invitation.email_sent = True

        return ServiceResult(True, message, invitation)

    @staticmethod
    def get_invite_link(community, member, request=None):
        invitation = (
            Invitation.objects.filter(community=community, member=member, status='pending')
            .order_by('-created_at')
            .first()
        )
        if invitation is None:
            return ServiceResult(False, "No pending invitation found for this member.")

        return ServiceResult(True, "Invitation link ready.", build_invite_link(invitation, request))

    @staticmethod
    def resend_invitation(community, member, inviter=None, request=None):
        """Issue a new link for an invited member and email it"""
        if member.community_id != community.pk:
            return ServiceResult(False, "Member not found in this community.")
        if member.status != 'invited':
            return ServiceResult(False, f"{member.name} has already joined.")
        if not member.email:
            return ServiceResult(False, f"{member.name} has no email address.")

        previous = member.invitations.order_by('-created_at').first()
        try:
            invitation = InvitationService.create_or_resend_invite(
                community, member, member.email,
                inviter=inviter,
                role=previous.role if previous else member.role,
            )
        except DatabaseError as e:
            logger.error(f"Error resending invitation for member {member.pk}: {e}", exc_info=True)
            return ServiceResult(False, str(e))

        invitation.link = build_invite_link(invitation, request)
        error = InvitationService._deliver(invitation, invitation.link)
        invitation.email_sent = error is None
        if error:
            return ServiceResult(True, f"A new invitation link was created, but the email was not sent: {error}", invitation)
        return ServiceResult(True, f"A new invitation has been sent to {invitation.email}.", invitation)

    @staticmethod
    def revoke_invitation(invitation):
        if not invitation.is_pending:
            return ServiceResult(False, "Only pending invitations can be revoked.")

        invitation.status = 'revoked'
        invitation.save(update_fields=['status', 'updated_at'])
        logger.info(f"Invitation {invitation.pk} for {invitation.email} revoked")
        return ServiceResult(True, f"The invitation to {invitation.email} has been revoked.", invitation)

    # =========================================================================
    # ACCEPTANCE
    # =========================================================================

    @staticmethod
    def resolve_invitation(token):
        """
        Find the usable invitation for `token`.

        A pending invitation past its expiry is marked 'expired'. A non-pending
        one leads to its replacement, else to the newest pending invitation for
        the same community and email.

        Returns:
            ServiceResult whose obj is the pending Invitation
        """
        token = (token or '').strip()
        if not token:
            return ServiceResult(False, "Invalid invitation link (missing token).")

        invitation = Invitation.objects.select_related('community', 'member').filter(token=token).first()
        if invitation is None:
            return ServiceResult(False, "This invitation could not be found.")

        for _ in range(MAX_REPLACEMENT_HOPS):
            if invitation.is_pending and invitation.is_expired:
                invitation.status = 'expired'
                invitation.save(update_fields=['status', 'updated_at'])
                logger.info(f"Invitation {invitation.pk} expired")

            if invitation.is_pending:
                return ServiceResult(True, '', invitation)

            replacement = None
            if invitation.replaced_by:
                replacement = Invitation.objects.select_related('community', 'member').filter(
                    token=invitation.replaced_by
                ).first()
            if replacement is None:
                replacement = (
                    Invitation.objects.select_related('community', 'member')
                    .filter(community=invitation.community, email=invitation.email, status='pending')
                    .exclude(token=invitation.token)
                    .order_by('-created_at')
                    .first()
                )
            if replacement is None:
                break
            invitation = replacement

        return ServiceResult(False, "This invitation has already been used or has expired.")

    @staticmethod
    def accept_invitation(token, user):
        """
        Consume an invitation for the signed-in `user`.

        The invitation email must match the user's email. The placeholder
        member is linked to the user and activated, the community becomes the
        user's primary one when they have none, and owners/admins are notified.
        """
        resolved = InvitationService.resolve_invitation(token)
        if not resolved.success:
            return resolved
        invitation = resolved.obj
        community = invitation.community

        user_email = (user.email or '').strip().lower()
        if invitation.email and user_email and invitation.email != user_email:
            logger.warning(f"User {user.pk} tried to accept invitation {invitation.pk} sent to {invitation.email}")
            return ServiceResult(False, "This invitation was sent to a different email address.")

        try:
            with transaction.atomic():
                invitation = Invitation.objects.select_for_update().get(pk=invitation.pk)
                if not invitation.is_pending:
                    return ServiceResult(False, "This invitation has already been used or has expired.")

                existing = Member.objects.filter(community=community, user=user).first()
                member = invitation.member

                if existing is not None:
                    # Already on the roster; drop the unused placeholder
                    if member is not None and member.pk != existing.pk and member.status == 'invited':
                        member.delete()
                    member = existing
                    invitation.member = existing
                elif member is None:
                    return ServiceResult(
                        False,
                        "This invitation is no longer valid. Please contact your community administrator."
                    )
                else:
                    member.user = user
                    member.status = 'active'
                    member.role = invitation.role
                    if user_email:
                        member.email = user_email
                    member.set_change_reason('Invitation accepted')
                    member.save(update_fields=['user', 'status', 'role', 'email', 'change_reason'])

                invitation.status = 'accepted'
                invitation.accepted_by = user
                invitation.accepted_at = timezone.now()
                invitation.save(update_fields=['status', 'member', 'accepted_by', 'accepted_at', 'updated_at'])

                profile = user.profile
                if profile.primary_community_id is None:
                    profile.primary_community = community
                    profile.save(update_fields=['primary_community', 'updated_at'])

                transaction.on_commit(lambda: notify_new_member(community, member, user))
        except DatabaseError as e:
            logger.error(f"Error accepting invitation {invitation.pk}: {e}", exc_info=True)
            return ServiceResult(False, "Could not complete invitation. Please contact your community administrator.")

        logger.info(f"User {user.pk} joined community {community.pk} through invitation {invitation.pk}")
        return ServiceResult(True, f"Welcome to {community.name}!", member)
