# invitations/emails.py

"""
Outbound email for invitations and new-member notifications.

Messages go through Django's email framework; in production the backend is
django-anymail's Resend backend (see EMAIL_BACKEND in settings).
"""

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured, ValidationError
from django.core.mail import EmailMultiAlternatives
from django.core.validators import validate_email
from django.template.loader import render_to_string
import logging

logger = logging.getLogger(__name__)

RESEND_BACKEND = 'anymail.backends.resend.EmailBackend'


class EmailDeliveryError(Exception):
    """Raised when a message could not be handed to the email backend"""


def get_from_address():
    """
    'Mmanyin Orie <no-reply@{domain}>' with the domain from RESEND_DOMAIN.

    Raises:
        ImproperlyConfigured: when the resulting address is not a valid email
    """
    domain = (getattr(settings, 'RESEND_DOMAIN', '') or 'resend.dev').strip()
    address = f"no-reply@{domain}"

    try:
        validate_email(address)
    except ValidationError:
        raise ImproperlyConfigured(f"Invalid sender address '{address}'. Check RESEND_DOMAIN.")

    return f"{settings.EMAIL_FROM_NAME} <{address}>"


def check_email_configured():
    if settings.EMAIL_BACKEND == RESEND_BACKEND and not settings.RESEND_API_KEY:
        raise ImproperlyConfigured(
            "Email sending is not configured. Administrator must set a Resend API key."
        )


def _send(subject, recipients, text_template, html_template, context):
    check_email_configured()

    message = EmailMultiAlternatives(
        subject=subject,
        body=render_to_string(text_template, context),
        from_email=get_from_address(),
        to=list(recipients),
    )
    message.attach_alternative(render_to_string(html_template, context), 'text/html')

    try:
        return message.send()
    except Exception as e:
        logger.error(f"Failed to send '{subject}' to {recipients}: {e}", exc_info=True)
        raise EmailDeliveryError("Could not send the invitation email.") from e


# =============================================================================
# INVITATION EMAIL
# =============================================================================

def send_invitation_email(invitation, invite_link):
    context = {
        'community_name': invitation.community_name,
        'inviter_name': invitation.inviter_name or 'A community administrator',
        'invite_link': invite_link,
        'invitation': invitation,
    }
    sent = _send(
        f"Invitation to join {invitation.community_name}",
        [invitation.email],
        'emails/invitation.txt',
        'emails/invitation.html',
        context,
    )
    logger.info(f"Invitation email sent to {invitation.email} for community {invitation.community_id}")
    return sent


# =============================================================================
# NEW MEMBER NOTIFICATION
# =============================================================================

def get_admin_emails(community):
    """Valid email addresses of the community's owner and admins"""
    candidates = list(
        community.members.filter(role__in=['owner', 'admin']).values_list('email', flat=True)
    )
    candidates.append(community.owner.email)

    emails = []
    for email in candidates:
        email = (email or '').strip().lower()
        if not email or email in emails:
            continue
        try:
            validate_email(email)
        except ValidationError:
            continue
        emails.append(email)
    return emails


def notify_new_member(community, member, user=None):
    """
    Tell owners and admins that someone joined. Delivery failures are logged
    and never block the join itself.
    """
    recipients = get_admin_emails(community)
    if not recipients:
        return 0

    who = member.name or (user.email if user else '') or str(member.pk)
    context = {
        'community_name': community.name,
        'who': who,
        'member': member,
        'member_email': member.email or (user.email if user else ''),
    }

    try:
        return _send(
            f"New member joined {community.name}",
            recipients,
            'emails/new_member.txt',
            'emails/new_member.html',
            context,
        )
    except (EmailDeliveryError, ImproperlyConfigured) as e:
        logger.warning(f"New-member notification for community {community.pk} not sent: {e}")
        return 0
