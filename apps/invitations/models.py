# invitations/models.py

from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import User
from django.db import models
from django.urls import reverse
from django.utils import timezone
from django.utils.crypto import get_random_string
import logging

from utils.models import SystemModel

logger = logging.getLogger(__name__)

CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'


def generate_token():
    return get_random_string(32)


def generate_code():
    return get_random_string(8, allowed_chars=CODE_ALPHABET)


def default_expiry():
    ttl_days = settings.INVITATION_TTL_DAYS
    if not ttl_days or ttl_days <= 0:
        return None
    return timezone.now() + timedelta(days=ttl_days)


# =============================================================================
# INVITATION MODEL
# =============================================================================

class Invitation(SystemModel):
    """
    A one-time invitation to join a community.

    Looked up by `token` from the emailed link. Re-sending creates a new
    invitation and points the old one at it through `replaced_by`, so stale
    links still lead to the current invitation.
    """

    STATUS_CHOICES = (
        ('pending', 'Pending'),
        ('accepted', 'Accepted'),
        ('revoked', 'Revoked'),
        ('expired', 'Expired'),
    )

    ROLE_CHOICES = (
        ('user', 'User'),
        ('admin', 'Admin'),
    )

    token = models.CharField(max_length=64, unique=True, default=generate_token, editable=False)
    code = models.CharField(max_length=8, default=generate_code, editable=False)

    community = models.ForeignKey(
        'accounts.Community',
        on_delete=models.CASCADE,
        related_name='invitations'
    )
    community_name = models.CharField(max_length=191, blank=True)
    member = models.ForeignKey(
        'members.Member',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invitations'
    )

    email = models.EmailField()
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='user')

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pending', db_index=True)
    expires_at = models.DateTimeField(null=True, blank=True, default=default_expiry)

    inviter = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_invitations'
    )
    inviter_name = models.CharField(max_length=150, blank=True)
    replaced_by = models.CharField(max_length=64, blank=True)

    accepted_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='accepted_invitations'
    )
    accepted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'invitations'
        verbose_name = 'Invitation'
        verbose_name_plural = 'Invitations'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['community', 'email', 'status'], name='invites_comm_email_idx'),
        ]

    def __str__(self):
        return f"{self.email} → {self.community_name or self.community_id} ({self.status})"

    def save(self, *args, **kwargs):
        self.email = (self.email or '').strip().lower()
        if not self.community_name and self.community_id:
            self.community_name = self.community.name
        super().save(*args, **kwargs)

    @property
    def full_name(self):
        return ' '.join(part for part in (self.first_name, self.last_name) if part)

    @property
    def is_pending(self):
        return self.status == 'pending'

    @property
    def is_expired(self):
        return bool(self.expires_at and self.expires_at < timezone.now())

    def get_accept_path(self):
        return f"{reverse('invitations:accept_invite')}?token={self.token}"
