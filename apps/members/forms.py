# members/forms.py

from django import forms
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator
from django.utils import timezone
import calendar
import logging

from utils.forms import (
    BootstrapFormMixin,
    BaseFilterForm,
    MoneyField,
    PhoneNumberField,
    DatePickerInput,
    validate_positive_amount,
)
from core.utils import format_money
from .models import Member, Family
from . import utils as ledger

logger = logging.getLogger(__name__)

MONTH_CHOICES = [(index, calendar.month_name[index]) for index in range(1, 13)]


# =============================================================================
# FILTER FORMS (HTMX SEARCH)
# =============================================================================

class MemberFilterForm(BaseFilterForm):
    """Filter form for the member HTMX search"""

    family = forms.ChoiceField(label='Family', required=False)
    tier = forms.ChoiceField(label='Tier', required=False)

    status = forms.ChoiceField(
        label='Status',
        choices=[('', 'All Statuses')] + list(Member.STATUS_CHOICES),
        required=False
    )

    role = forms.ChoiceField(
        label='Role',
        choices=[('', 'All Roles')] + list(Member.ROLE_CHOICES),
        required=False
    )

    gender = forms.ChoiceField(
        label='Gender',
        choices=[('', 'All')] + list(Member.GENDER_CHOICES),
        required=False
    )

    payment_status = forms.ChoiceField(
        label='Payment',
        choices=[
            ('', 'Any Payment Status'),
            ('paid', 'Paid'),
            ('partial', 'Partial'),
            ('unpaid', 'Unpaid'),
        ],
        required=False
    )

    def __init__(self, community, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['q'].widget.attrs['placeholder'] = 'Search by name, email or phone...'
        self.fields['family'].choices = [('', 'All Families')] + [
            (str(family.pk), family.name) for family in community.families.all()
        ]
        self.fields['tier'].choices = [('', 'All Tiers')] + [
            (label, label) for label in ledger.get_tier_choices(community.tier1_age, community.tier2_age)
        ]


# =============================================================================
# MEMBER FORMS
# =============================================================================

class MemberForm(BootstrapFormMixin, forms.Form):
    """
    Member details as entered in the add/edit dialogs.

    The family is either picked from the community's families or typed in
    `new_family`; the service creates a typed family when it does not exist.
    """

    first_name = forms.CharField(label='First Name', max_length=100)
    middle_name = forms.CharField(label='Middle Name', max_length=100, required=False)
    last_name = forms.CharField(label='Last Name', max_length=100)

    year_of_birth = forms.IntegerField(label='Year of Birth', min_value=1900)
    gender = forms.ChoiceField(label='Gender', choices=Member.GENDER_CHOICES)

    family = forms.ModelChoiceField(
        label='Family',
        queryset=Family.objects.none(),
        required=False,
        empty_label='No family'
    )
    new_family = forms.CharField(
        label='Or create a new family',
        max_length=120,
        required=False
    )
    is_patriarch = forms.BooleanField(label='Head of family (patriarch)', required=False)

    email = forms.EmailField(label='Email', required=False)
    phone_country_code = forms.CharField(
        label='Country Code',
        max_length=6,
        initial='+234',
        required=False,
        validators=[RegexValidator(r'^\+\d{1,4}$', 'Enter a code such as +234.')]
    )
    phone = PhoneNumberField(label='Phone', required=False)

    def __init__(self, community, *args, **kwargs):
        self.community = community
        super().__init__(*args, **kwargs)
        self.fields['family'].queryset = community.families.all()

    @classmethod
    def initial_for(cls, member):
        return {
            'first_name': member.first_name,
            'middle_name': member.middle_name,
            'last_name': member.last_name,
            'year_of_birth': member.year_of_birth,
            'gender': member.gender,
            'family': member.family_id,
            'is_patriarch': member.is_patriarch,
            'email': member.email,
            'phone_country_code': member.phone_country_code,
            'phone': member.phone,
        }

    def clean_first_name(self):
        first_name = self.cleaned_data['first_name'].strip()
        if not first_name:
            raise ValidationError('First name is required.')
        return first_name

    def clean_year_of_birth(self):
        year = self.cleaned_data['year_of_birth']
        if year > timezone.localdate().year:
            raise ValidationError('Year cannot be in the future.')
        return year

    def clean(self):
        cleaned_data = super().clean()
        new_family = (cleaned_data.get('new_family') or '').strip()
        if new_family:
            cleaned_data['family'] = new_family
        return cleaned_data

    def to_service_data(self):
        """Cleaned values in the shape CommunityService.add_member expects"""
        data = dict(self.cleaned_data)
        data.pop('new_family', None)
        data['middle_name'] = data.get('middle_name') or ''
        data['phone'] = data.get('phone') or ''
        return data


class PatriarchMemberForm(MemberForm):
    """A patriarch adds people to their own family only"""

    def __init__(self, community, *args, **kwargs):
        super().__init__(community, *args, **kwargs)
        for name in ('family', 'new_family', 'is_patriarch'):
            self.fields.pop(name)


# =============================================================================
# FAMILY FORM
# =============================================================================

class FamilyForm(BootstrapFormMixin, forms.Form):
    name = forms.CharField(label='Family Name', max_length=120)


# =============================================================================
# PAYMENT FORM
# =============================================================================

class PaymentForm(BootstrapFormMixin, forms.Form):
    """
    Record or edit a payment against one contribution template.

    A payment may not exceed what is still owed on the template (for a
    monthly template, owed for the chosen month). When editing, the payment
    being edited does not count as already paid.
    """

    contribution = forms.ModelChoiceField(label='Contribution', queryset=None, empty_label=None)
    amount = MoneyField(label='Amount', validators=[validate_positive_amount])
    date = forms.DateField(label='Payment Date', widget=DatePickerInput())
    month = forms.TypedChoiceField(
        label='Month Covered',
        choices=[('', 'Month of payment date')] + MONTH_CHOICES,
        coerce=int,
        empty_value=None,
        required=False,
        help_text='Only used for monthly contributions'
    )

    def __init__(self, community, member, *args, payment=None, **kwargs):
        self.community = community
        self.member = member
        self.payment = payment
        super().__init__(*args, **kwargs)
        self.fields['contribution'].queryset = community.custom_contributions.all()
        if not self.is_bound and 'date' not in self.initial:
            self.initial['date'] = timezone.localdate()

    def clean(self):
        cleaned_data = super().clean()
        contribution = cleaned_data.get('contribution')
        amount = cleaned_data.get('amount')

        if contribution is None or amount is None:
            return cleaned_data

        if not contribution.is_monthly:
            cleaned_data['month'] = None
        elif cleaned_data.get('month') is None and cleaned_data.get('date'):
            cleaned_data['month'] = cleaned_data['date'].month

        payments = [p for p in self.member.get_payments() if self.payment is None or p.pk != self.payment.pk]
        month = cleaned_data.get('month') if contribution.is_monthly else None
        balance = ledger.get_balance_for_contribution(payments, contribution, month)

        if amount > balance:
            raise ValidationError({
                'amount': f"Payment cannot exceed balance of {format_money(max(balance, 0), self.community.currency)}."
            })

        return cleaned_data
