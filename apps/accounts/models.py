# accounts/models.py

from django.conf import settings
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.crypto import get_random_string
from django.utils.text import slugify
from django_countries.fields import CountryField
from zoneinfo import available_timezones
import pycountry
import logging

from utils.models import SystemModel

logger = logging.getLogger(__name__)


def default_tier1_age():
    return settings.COMMUNITY_DEFAULTS['tier1_age']


def default_tier2_age():
    return settings.COMMUNITY_DEFAULTS['tier2_age']


def default_currency():
    return settings.COMMUNITY_DEFAULTS['currency']


# =============================================================================
# COMMUNITY MODEL
# =============================================================================

class Community(SystemModel):
    """A tenant: every member, family, template and setting hangs off one community"""

    SUBSCRIPTION_STATUS_CHOICES = (
        ('active', 'Active'),
        ('trialing', 'Trialing'),
        ('past_due', 'Past Due'),
        ('canceled', 'Canceled'),
        ('incomplete', 'Incomplete'),
    )

    name = models.CharField(max_length=191)
    slug = models.SlugField(max_length=191, unique=True)
    owner = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='owned_communities'
    )
    country = CountryField(blank_label='(select country)', default='NG')
    timezone = models.CharField(
        max_length=50,
        choices=[(tz, tz) for tz in sorted(available_timezones())],
        default='UTC'
    )

    # Tier & currency settings
    tier1_age = models.PositiveIntegerField(
        "Tier 1 Age",
        default=default_tier1_age,
        help_text="Members younger than this are 'Under 18'"
    )
    tier2_age = models.PositiveIntegerField(
        "Tier 2 Age",
        default=default_tier2_age,
        help_text="Members this age and older fall into Group 2"
    )
    currency = models.CharField(
        "Currency Symbol",
        max_length=8,
        default=default_currency
    )
    currency_code = models.CharField(
        "Currency Code",
        max_length=3,
        default='NGN',
        help_text="ISO 4217 code used in exported reports"
    )

    # Subscription
    subscription_status = models.CharField(
        max_length=20,
        choices=SUBSCRIPTION_STATUS_CHOICES,
        default='trialing'
    )
    plan_id = models.CharField(max_length=50, default='free')

    class Meta:
        db_table = 'communities'
        verbose_name = "Community"
        verbose_name_plural = "Communities"
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = self.generate_slug(self.name)
        super().save(*args, **kwargs)

    @classmethod
    def generate_slug(cls, name):
        """Slug from the name with a random suffix so two communities can share a name"""
        base = slugify(name)[:170] or 'community'
        slug = f"{base}-{get_random_string(6).lower()}"
        while cls.objects.filter(slug=slug).exists():
            slug = f"{base}-{get_random_string(6).lower()}"
        return slug

    def clean(self):
        super().clean()
        errors = {}

        if self.tier1_age is not None and self.tier2_age is not None:
            if self.tier1_age <= 0:
                errors['tier1_age'] = "Tier 1 age must be greater than zero."
            if self.tier2_age <= self.tier1_age:
                errors['tier2_age'] = "Tier 2 age must be greater than Tier 1 age."
            if self.tier2_age > 150:
                errors['tier2_age'] = "Tier 2 age cannot exceed 150."

        if not (self.currency or '').strip():
            errors['currency'] = "Currency symbol is required."

        if self.currency_code:
            if not pycountry.currencies.get(alpha_3=self.currency_code.upper()):
                errors['currency_code'] = f"'{self.currency_code}' is not a valid ISO 4217 currency code"
            else:
                self.currency_code = self.currency_code.upper()

        if errors:
            raise ValidationError(errors)

    # -------------------------------------------------------------------------
    # SETTINGS
    # -------------------------------------------------------------------------

    @property
    def settings(self):
        """The tier/currency settings as a plain dict"""
        return {
            'tier1_age': self.tier1_age,
            'tier2_age': self.tier2_age,
            'currency': self.currency,
        }

    @staticmethod
    def get_currency_choices():
        """ISO 4217 choices for the settings form"""
        return sorted(
            ((currency.alpha_3, f"{currency.name} ({currency.alpha_3})") for currency in pycountry.currencies),
            key=lambda choice: choice[1]
        )

    def format_currency(self, amount):
        from core.utils import format_money
        return format_money(amount, self.currency)

    # -------------------------------------------------------------------------
    # MEMBERSHIP HELPERS
    # -------------------------------------------------------------------------

    def get_membership(self, user):
        """The member row linking `user` to this community, if any"""
        if not user or not user.is_authenticated:
            return None
        return self.members.filter(user=user).first()

    def get_role(self, user):
        if user and user.is_authenticated and self.owner_id == user.pk:
            return 'owner'
        membership = self.get_membership(user)
        return membership.role if membership else None

    def is_admin(self, user):
        """Owners and admins may manage the community"""
        return self.get_role(user) in ('owner', 'admin')

    def has_member(self, user):
        return self.get_role(user) is not None

    @property
    def active_members_count(self):
        return self.members.filter(status='active').count()


# =============================================================================
# USER PROFILE MODEL
# =============================================================================

def avatar_upload_to(instance, filename):
    return f"avatars/{instance.user_id}/profile.png"


class UserProfile(SystemModel):
    """Extended profile information for users"""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    display_name = models.CharField(max_length=150, blank=True)

    photo = models.ImageField(
        upload_to=avatar_upload_to,
        null=True,
        blank=True
    )
    # Rotated on every upload; appended to the photo URL so caches see a new object
    avatar_token = models.CharField(max_length=64, blank=True)

    primary_community = models.ForeignKey(
        Community,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='primary_profiles'
    )

    # Security fields
    failed_login_attempts = models.PositiveIntegerField(default=0)
    account_locked_until = models.DateTimeField(null=True, blank=True)
    last_login_at = models.DateTimeField(null=True, blank=True)
    last_activity = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'user_profiles'
        verbose_name = 'User Profile'
        verbose_name_plural = 'User Profiles'

    def __str__(self):
        return self.display_name or self.user.get_username()

    @property
    def photo_url(self):
        if not self.photo:
            return None
        url = self.photo.url
        return f"{url}?token={self.avatar_token}" if self.avatar_token else url

    @property
    def initials(self):
        source = self.display_name or self.user.get_full_name() or self.user.email or self.user.username
        parts = [part for part in source.split() if part]
        return ''.join(part[0] for part in parts[:2]).upper() or '?'

    @property
    def memberships(self):
        """Communities this user belongs to, derived from linked member rows"""
        return Community.objects.filter(
            models.Q(members__user=self.user) | models.Q(owner=self.user)
        ).distinct().order_by('name')
