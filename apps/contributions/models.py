# contributions/models.py

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


class CustomContribution(BaseModel):
    """
    A dues template: an amount charged once or every month to members whose
    tier is listed in `tiers`.
    """

    FREQUENCY_CHOICES = (
        ('one-time', 'One-time'),
        ('monthly', 'Monthly'),
    )

    community = models.ForeignKey(
        'accounts.Community',
        on_delete=models.CASCADE,
        related_name='custom_contributions'
    )
    name = models.CharField("Name", max_length=120)
    amount = models.DecimalField(
        "Amount",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    description = models.TextField("Description", blank=True, default='')
    frequency = models.CharField("Frequency", max_length=10, choices=FREQUENCY_CHOICES, default='one-time')
    tiers = models.JSONField(
        "Applies To Tiers",
        default=list,
        blank=True,
        help_text="Tier labels, e.g. ['Group 1 (18-24)', 'Group 2 (25+)']"
    )

    class Meta:
        db_table = 'custom_contributions'
        verbose_name = 'Contribution Template'
        verbose_name_plural = 'Contribution Templates'
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def is_monthly(self):
        return self.frequency == 'monthly'

    def applies_to(self, tier):
        return tier in (self.tiers or [])

    def clean(self):
        super().clean()
        errors = {}

        if not (self.name or '').strip():
            errors['name'] = "Name is required."

        if not isinstance(self.tiers, list) or not all(isinstance(t, str) for t in self.tiers):
            errors['tiers'] = "Tiers must be a list of tier labels."

        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.name = (self.name or '').strip()
        if kwargs.get('update_fields') is None:
            self.full_clean()
        super().save(*args, **kwargs)
