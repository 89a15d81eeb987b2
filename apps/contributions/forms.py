# contributions/forms.py

from django import forms
from decimal import Decimal

from utils.forms import BootstrapFormMixin, MoneyField
from members.utils import get_tier_choices
from .models import CustomContribution


class CustomContributionForm(BootstrapFormMixin, forms.Form):
    """
    Add/edit form for a dues template.

    The tier checkboxes offer the community's current tier labels; labels a
    template already carries from older tier settings stay selectable so an
    edit does not silently drop them.
    """

    name = forms.CharField(label='Name', max_length=120)
    amount = MoneyField(label='Amount', min_value=Decimal('0.00'))
    frequency = forms.ChoiceField(
        label='Frequency',
        choices=CustomContribution.FREQUENCY_CHOICES,
        initial='one-time'
    )
    tiers = forms.MultipleChoiceField(
        label='Applies To',
        required=False,
        widget=forms.CheckboxSelectMultiple
    )
    description = forms.CharField(
        label='Description',
        required=False,
        widget=forms.Textarea(attrs={'rows': 3})
    )

    def __init__(self, community, *args, template=None, **kwargs):
        super().__init__(*args, **kwargs)
        labels = get_tier_choices(community.tier1_age, community.tier2_age)
        if template is not None:
            labels += [label for label in template.tiers or [] if label not in labels]
        self.fields['tiers'].choices = [(label, label) for label in labels]

    @classmethod
    def initial_for(cls, template):
        return {
            'name': template.name,
            'amount': template.amount,
            'frequency': template.frequency,
            'tiers': list(template.tiers or []),
            'description': template.description,
        }

    def clean_name(self):
        name = self.cleaned_data['name'].strip()
        if not name:
            raise forms.ValidationError("Name is required.")
        return name

    def to_service_data(self):
        data = dict(self.cleaned_data)
        data['tiers'] = list(data.get('tiers') or [])
        return data
