# members/models.py

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db.models import Q
from decimal import Decimal
import logging

from utils.models import BaseModel
from utils.managers import CommunityQuerySet
from . import utils as ledger

logger = logging.getLogger(__name__)


# =============================================================================
# FAMILY MODEL
# =============================================================================

class Family(BaseModel):
    """
    A named household inside a community. Members point at it by id, so
    renaming a family never touches member rows.
    """

    community = models.ForeignKey(
        'accounts.Community',
        on_delete=models.CASCADE,
        related_name='families'
    )
    name = models.CharField("Family Name", max_length=120)

    class Meta:
        db_table = 'families'
        verbose_name = 'Family'
        verbose_name_plural = 'Families'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['community', 'name'], name='unique_family_name_per_community'),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        super().clean()
        self.name = (self.name or '').strip()
        if not self.name:
            raise ValidationError({'name': "Family name cannot be empty."})

    @property
    def member_count(self):
        return self.members.count()

    @property
    def patriarch(self):
        return self.members.filter(is_patriarch=True).order_by('join_date').first()


# =============================================================================
# CORE MEMBER MODEL
# =============================================================================

class Member(BaseModel):
    """
    A person on a community roster.

    `tier` and `contribution` are snapshots written by the service layer when
    the member is added or edited and refreshed by recalculate_tiers(); they
    are not recomputed on read.
    """

    GENDER_CHOICES = (
        ('male', 'Male'),
        ('female', 'Female'),
    )

    ROLE_CHOICES = (
        ('owner', 'Owner'),
        ('admin', 'Admin'),
        ('user', 'User'),
    )

    STATUS_CHOICES = (
        ('active', 'Active'),
        ('invited', 'Invited'),
    )

    community = models.ForeignKey(
        'accounts.Community',
        on_delete=models.CASCADE,
        related_name='members'
    )

    # =============================================================================
    # PERSONAL INFORMATION
    # =============================================================================

    first_name = models.CharField("First Name", max_length=100)
    middle_name = models.CharField("Middle Name", max_length=100, blank=True, default='')
    last_name = models.CharField("Last Name", max_length=100, blank=True, default='')
    name = models.CharField("Full Name", max_length=310, editable=False, db_index=True)

    year_of_birth = models.PositiveIntegerField(
        "Year of Birth",
        validators=[MinValueValidator(1900)]
    )
    gender = models.CharField("Gender", max_length=10, choices=GENDER_CHOICES)

    family = models.ForeignKey(
        Family,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='members'
    )
    is_patriarch = models.BooleanField("Patriarch", default=False)

    # =============================================================================
    # CONTACT INFORMATION
    # =============================================================================

    email = models.EmailField("Email", blank=True, default='')
    phone = models.CharField("Phone", max_length=20, blank=True, default='')
    phone_country_code = models.CharField("Country Code", max_length=6, blank=True, default='+234')

    # =============================================================================
    # DUES SNAPSHOT
    # =============================================================================

    tier = models.CharField("Tier", max_length=50, db_index=True)
    contribution = models.DecimalField(
        "Expected Contribution",
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00')
    )

    # =============================================================================
    # MEMBERSHIP
    # =============================================================================

    join_date = models.DateTimeField("Join Date", default=timezone.now)
    role = models.CharField("Role", max_length=10, choices=ROLE_CHOICES, default='user')
    status = models.CharField("Status", max_length=10, choices=STATUS_CHOICES, default='active', db_index=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='community_memberships'
    )

    class Meta:
        db_table = 'members'
        verbose_name = 'Member'
        verbose_name_plural = 'Members'
        ordering = ['name']
        indexes = [
            models.Index(fields=['community', 'family'], name='members_comm_family_idx'),
            models.Index(fields=['community', 'status'], name='members_comm_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['community', 'user'],
                condition=Q(user__isnull=False),
                name='unique_member_user_per_community'
            ),
        ]

    def __str__(self):
        return self.name or self.first_name

    # =============================================================================
    # DERIVED VALUES
    # =============================================================================

    @property
    def age(self):
        return ledger.calculate_age(self.year_of_birth)

    @property
    def family_name(self):
        return self.family.name if self.family_id else ''

    @property
    def full_phone(self):
        if not self.phone:
            return ''
        return f"{self.phone_country_code}{self.phone}"

    @property
    def is_admin(self):
        return self.role in ('owner', 'admin')

    @property
    def is_active(self):
        return self.status == 'active'

    def get_payments(self):
        """Payments in ledger order (date, then entry order)"""
        return list(self.payments.all())

    @property
    def paid_amount(self):
        return ledger.get_paid_amount(self.get_payments())

    @property
    def balance(self):
        return ledger.get_balance(self.contribution, self.get_payments())

    @property
    def payment_status(self):
        return ledger.get_payment_status(self.contribution, self.get_payments())

    def get_paid_amount_for(self, contribution, month=None):
        return ledger.get_paid_amount_for_contribution(self.get_payments(), contribution.pk, month)

    def get_balance_for(self, contribution, month=None):
        return ledger.get_balance_for_contribution(self.get_payments(), contribution, month)

    # =============================================================================
    # VALIDATION AND SAVE METHODS
    # =============================================================================

    def clean(self):
        super().clean()
        errors = {}

        current_year = timezone.localdate().year
        if self.year_of_birth and self.year_of_birth > current_year:
            errors['year_of_birth'] = "Year of birth cannot be in the future."

        if not (self.first_name or '').strip():
            errors['first_name'] = "First name is required."

        if self.family_id and self.community_id and self.family.community_id != self.community_id:
            errors['family'] = "Family belongs to a different community."

        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.first_name = (self.first_name or '').strip()
        self.middle_name = (self.middle_name or '').strip()
        self.last_name = (self.last_name or '').strip()
        self.name = ledger.build_full_name(self.first_name, self.middle_name, self.last_name)
        self.email = (self.email or '').strip().lower()

        update_fields = kwargs.get('update_fields')
        if update_fields is None:
            self.full_clean()
        elif {'first_name', 'middle_name', 'last_name'} & set(update_fields):
            kwargs['update_fields'] = set(update_fields) | {'name'}

        super().save(*args, **kwargs)


# =============================================================================
# PAYMENT MODEL
# =============================================================================

class PaymentQuerySet(CommunityQuerySet):

    def for_community(self, community):
        if community is None:
            return self.none()
        return self.filter(member__community=community)

    def in_range(self, start_date=None, end_date=None):
        queryset = self
        if start_date:
            queryset = queryset.filter(date__gte=start_date)
        if end_date:
            queryset = queryset.filter(date__lte=end_date)
        return queryset


class Payment(BaseModel):
    """One payment a member made against a contribution template"""

    member = models.ForeignKey(
        Member,
        on_delete=models.CASCADE,
        related_name='payments'
    )
    contribution = models.ForeignKey(
        'contributions.CustomContribution',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments'
    )
    amount = models.DecimalField(
        "Amount",
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    date = models.DateField("Payment Date", default=timezone.localdate)
    month = models.PositiveSmallIntegerField(
        "Month Covered",
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(12)],
        help_text="Calendar month (1-12) a monthly payment covers"
    )

    objects = models.Manager.from_queryset(PaymentQuerySet)()

    class Meta:
        db_table = 'payments'
        verbose_name = 'Payment'
        verbose_name_plural = 'Payments'
        ordering = ['date', 'created_at']
        indexes = [
            models.Index(fields=['member', 'contribution'], name='payments_member_contrib_idx'),
            models.Index(fields=['date'], name='payments_date_idx'),
        ]

    def __str__(self):
        return f"{self.member} - {self.amount} on {self.date}"

    @property
    def contribution_name(self):
        return self.contribution.name if self.contribution_id else 'Deleted contribution'

    def clean(self):
        super().clean()
        if self.contribution_id and self.member_id:
            if self.contribution.community_id != self.member.community_id:
                raise ValidationError({'contribution': "Contribution belongs to a different community."})

    def save(self, *args, **kwargs):
        if kwargs.get('update_fields') is None:
            self.full_clean()
        super().save(*args, **kwargs)
