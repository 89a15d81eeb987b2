"""Tests for invitations and outbound email."""

from datetime import timedelta

import pytest
from django.contrib.auth.models import User
from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone

from invitations.emails import get_admin_emails, get_from_address, notify_new_member
from invitations.models import Invitation
from invitations.services import InvitationService, build_invite_link
from members.models import Member


pytestmark = pytest.mark.django_db


@pytest.fixture
def invite_data(this_year):
    return {
        'first_name': 'Ada',
        'last_name': 'Eze',
        'email': 'Ada@Example.com',
        'year_of_birth': this_year - 30,
        'gender': 'female',
    }


@pytest.fixture
def invitation(community, owner, invite_data):
    result = InvitationService.invite_member(community, invite_data, inviter=owner, send_email=False)
    assert result.success, result.message
    return result.obj


class TestInviteMember:
    """Tests for InvitationService.invite_member."""

    def test_creates_placeholder_and_pending_invitation(self, community, owner, invite_data, mailoutbox):
        result = InvitationService.invite_member(community, invite_data, inviter=owner)

        assert result.success
        invitation = result.obj
        assert invitation.email == 'ada@example.com'
        assert invitation.status == 'pending'
        assert invitation.inviter_name == 'Chidi Okafor'
        assert invitation.member.status == 'invited'
        assert invitation.member.user is None
        assert invitation.email_sent
        assert invitation.link.endswith(f"?token={invitation.token}")

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ['ada@example.com']
        assert mailoutbox[0].subject == 'Invitation to join Umunna Houston'
        assert invitation.link in mailoutbox[0].body

    def test_email_required(self, community, invite_data):
        invite_data['email'] = ''

        result = InvitationService.invite_member(community, invite_data)

        assert not result.success
        assert Member.objects.count() == 0

    def test_active_member_email_rejected(self, community, make_member, invite_data):
        make_member(email='ada@example.com')

        result = InvitationService.invite_member(community, invite_data)

        assert not result.success
        assert 'already a member' in result.message

    def test_email_failure_still_creates_invitation(self, community, owner, invite_data, settings):
        settings.EMAIL_BACKEND = 'anymail.backends.resend.EmailBackend'
        settings.RESEND_API_KEY = ''

        result = InvitationService.invite_member(community, invite_data, inviter=owner)

        assert result.success
        assert not result.obj.email_sent
        assert 'the email was not sent' in result.message
        assert Invitation.objects.filter(status='pending').count() == 1

    def test_link_uses_app_url_outside_request(self, invitation, settings):
        settings.APP_URL = 'https://orie.example.org/'

        assert build_invite_link(invitation) == (
            f"https://orie.example.org/auth/accept-invite/?token={invitation.token}"
        )


class TestResend:

    def test_resend_revokes_previous(self, community, owner, invitation, mailoutbox):
        result = InvitationService.resend_invitation(community, invitation.member, inviter=owner)

        assert result.success
        invitation.refresh_from_db()
        assert invitation.status == 'revoked'
        assert invitation.replaced_by == result.obj.token
        assert len(mailoutbox) == 1

    def test_joined_member_cannot_be_reinvited(self, community, make_member):
        member = make_member()

        result = InvitationService.resend_invitation(community, member)

        assert not result.success
        assert result.message == "Ngozi Okafor has already joined."

    def test_get_invite_link(self, community, invitation):
        result = InvitationService.get_invite_link(community, invitation.member)

        assert result.success
        assert invitation.token in result.obj

    def test_revoke_only_pending(self, invitation):
        assert InvitationService.revoke_invitation(invitation).success
        assert not InvitationService.revoke_invitation(invitation).success


class TestResolveInvitation:
    """Tests for token resolution."""

    def test_missing_and_unknown_tokens(self):
        assert InvitationService.resolve_invitation('').message == "Invalid invitation link (missing token)."
        assert InvitationService.resolve_invitation('nope').message == "This invitation could not be found."

    def test_pending_invitation_resolves_to_itself(self, invitation):
        result = InvitationService.resolve_invitation(invitation.token)

        assert result.success
        assert result.obj.pk == invitation.pk

    def test_old_token_follows_replacement(self, community, invitation):
        newer = InvitationService.resend_invitation(community, invitation.member).obj

        result = InvitationService.resolve_invitation(invitation.token)

        assert result.success
        assert result.obj.token == newer.token

    def test_expired_invitation(self, invitation):
        Invitation.objects.filter(pk=invitation.pk).update(expires_at=timezone.now() - timedelta(days=1))

        result = InvitationService.resolve_invitation(invitation.token)

        assert not result.success
        invitation.refresh_from_db()
        assert invitation.status == 'expired'


class TestAcceptInvitation:
    """Tests for accepting an invitation."""

    def test_accept_links_member(self, community, invitation, other_user):
        result = InvitationService.accept_invitation(invitation.token, other_user)

        assert result.success
        assert result.message == "Welcome to Umunna Houston!"

        member = Member.objects.get(pk=invitation.member.pk)
        assert member.user == other_user
        assert member.status == 'active'
        assert member.role == 'user'

        invitation.refresh_from_db()
        assert invitation.status == 'accepted'
        assert invitation.accepted_by == other_user

        other_user.profile.refresh_from_db()
        assert other_user.profile.primary_community == community
        assert community.get_role(other_user) == 'user'

    def test_accept_copies_admin_role(self, community, owner, invite_data, other_user):
        invite_data['role'] = 'admin'
        invitation = InvitationService.invite_member(community, invite_data, inviter=owner, send_email=False).obj

        InvitationService.accept_invitation(invitation.token, other_user)

        assert community.is_admin(other_user)

    def test_email_mismatch_rejected(self, invitation):
        stranger = User.objects.create_user(username='obi', email='obi@example.com', password='x-pass-12345')

        result = InvitationService.accept_invitation(invitation.token, stranger)

        assert not result.success
        assert result.message == "This invitation was sent to a different email address."

    def test_cannot_accept_twice(self, invitation, other_user):
        InvitationService.accept_invitation(invitation.token, other_user)

        result = InvitationService.accept_invitation(invitation.token, other_user)

        assert not result.success

    def test_existing_member_drops_placeholder(self, community, invitation, make_member, other_user):
        existing = make_member(first_name='Ada', user=other_user)
        placeholder_pk = invitation.member.pk

        result = InvitationService.accept_invitation(invitation.token, other_user)

        assert result.success
        assert result.obj.pk == existing.pk
        assert not Member.objects.filter(pk=placeholder_pk).exists()
        invitation.refresh_from_db()
        assert invitation.status == 'accepted'
        assert invitation.member == existing

    def test_admins_notified_on_commit(
        self, community, invitation, other_user, owner_member, mailoutbox, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            InvitationService.accept_invitation(invitation.token, other_user)

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ['chair@example.com']
        assert mailoutbox[0].subject == 'New member joined Umunna Houston'


class TestEmails:

    def test_from_address_uses_domain(self, settings):
        settings.RESEND_DOMAIN = 'orie.example.org'
        settings.EMAIL_FROM_NAME = 'Mmanyin Orie'

        assert get_from_address() == 'Mmanyin Orie <no-reply@orie.example.org>'

    def test_invalid_domain_is_improperly_configured(self, settings):
        settings.RESEND_DOMAIN = 'not a domain'

        with pytest.raises(ImproperlyConfigured):
            get_from_address()

    def test_admin_emails_deduplicated(self, community, owner_member, make_member):
        make_member(first_name='Emeka', email='treasurer@example.com', role='admin')
        make_member(first_name='Uche', email='uche@example.com')

        assert sorted(get_admin_emails(community)) == ['chair@example.com', 'treasurer@example.com']

    def test_notification_failure_is_swallowed(self, community, owner_member, settings):
        settings.EMAIL_BACKEND = 'anymail.backends.resend.EmailBackend'
        settings.RESEND_API_KEY = ''

        assert notify_new_member(community, owner_member) == 0
