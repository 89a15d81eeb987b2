# core/forms.py

from django import forms
from django.core.exceptions import ValidationError
from django_countries.fields import CountryField
from zoneinfo import available_timezones
import logging

from utils.forms import BootstrapFormMixin, DateRangeFormMixin, DatePickerInput
from accounts.models import Community
from members.models import Member
from members.reports import REPORT_TYPES, FORMATS

logger = logging.getLogger(__name__)

TIMEZONE_CHOICES = [(tz, tz) for tz in sorted(available_timezones())]


# =============================================================================
# COMMUNITY FORMS
# =============================================================================

class CommunityCreateForm(BootstrapFormMixin, forms.Form):
    """
    New community plus the details needed for the owner's own member row
    (year of birth and gender drive the owner's tier like any other member).
    """

    name = forms.CharField(
        label='Community Name',
        max_length=191,
        help_text='e.g. The Igbo Union of Metro Atlanta'
    )
    country = CountryField(blank_label='(select country)').formfield(initial='NG')
    timezone = forms.ChoiceField(label='Timezone', choices=TIMEZONE_CHOICES, initial='UTC')

    year_of_birth = forms.IntegerField(label='Your Year of Birth', min_value=1900)
    gender = forms.ChoiceField(label='Your Gender', choices=Member.GENDER_CHOICES)

    def clean_name(self):
        name = self.cleaned_data['name'].strip()
        if not name:
            raise ValidationError("Please enter a name for your community.")
        return name


class CommunitySettingsForm(BootstrapFormMixin, forms.Form):
    """Tier boundaries and currency; model validation runs in the service"""

    tier1_age = forms.IntegerField(label='Tier 1 Age', min_value=1, max_value=150)
    tier2_age = forms.IntegerField(label='Tier 2 Age', min_value=1, max_value=150)
    currency = forms.CharField(label='Currency Symbol', max_length=8)
    currency_code = forms.ChoiceField(label='Currency Code', choices=())

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['currency_code'].choices = Community.get_currency_choices()

    @classmethod
    def initial_for(cls, community):
        return {
            'tier1_age': community.tier1_age,
            'tier2_age': community.tier2_age,
            'currency': community.currency,
            'currency_code': community.currency_code,
        }

    def clean(self):
        cleaned_data = super().clean()
        tier1_age = cleaned_data.get('tier1_age')
        tier2_age = cleaned_data.get('tier2_age')
        if tier1_age and tier2_age and tier2_age <= tier1_age:
            raise ValidationError({'tier2_age': "Tier 2 age must be greater than Tier 1 age."})
        return cleaned_data


# =============================================================================
# REPORT FORM
# =============================================================================

class ReportForm(BootstrapFormMixin, DateRangeFormMixin, forms.Form):

    report_type = forms.ChoiceField(label='Report', choices=REPORT_TYPES)
    export_format = forms.ChoiceField(
        label='Format',
        choices=[(value, value.upper()) for value in FORMATS],
        initial='pdf'
    )
    start_date = forms.DateField(label='From', required=False, widget=DatePickerInput())
    end_date = forms.DateField(label='To', required=False, widget=DatePickerInput())
