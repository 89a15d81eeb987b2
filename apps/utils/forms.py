# utils/forms.py

"""
Form building blocks shared by the members, contributions, core and accounts
forms: styled widgets, money/phone fields, the HTMX filter form and the
helper that flattens form errors into one SweetAlert message.
"""

from django import forms
from django.core.exceptions import ValidationError
from decimal import Decimal, InvalidOperation
import re
import logging

logger = logging.getLogger(__name__)

NON_NUMERIC = re.compile(r'[^\d.-]')
NON_DIGIT = re.compile(r'\D')


def _merge_attrs(defaults, attrs):
    merged = dict(defaults)
    merged.update(attrs or {})
    return merged


# =============================================================================
# WIDGETS
# =============================================================================

class DatePickerInput(forms.DateInput):
    """Native <input type="date">, always rendered as ISO so browsers prefill it"""
    input_type = 'date'

    def __init__(self, attrs=None, format=None):
        super().__init__(
            attrs=_merge_attrs({'class': 'form-control'}, attrs),
            format=format or '%Y-%m-%d',
        )


# =============================================================================
# FIELDS
# =============================================================================

class MoneyField(forms.DecimalField):
    """
    Two-decimal amount that accepts what people paste from bank alerts,
    e.g. '$1,250.00' or '₦ 5 000'.
    """

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('max_digits', 12)
        kwargs.setdefault('decimal_places', 2)
        kwargs.setdefault('min_value', Decimal('0.00'))
        kwargs.setdefault('widget', forms.NumberInput(attrs={
            'class': 'form-control money-input', 'step': '0.01', 'min': '0', 'placeholder': '0.00',
        }))
        super().__init__(*args, **kwargs)

    def to_python(self, value):
        if isinstance(value, str) and value not in self.empty_values:
            value = NON_NUMERIC.sub('', value)
            try:
                Decimal(value)
            except InvalidOperation:
                raise ValidationError('Enter a valid amount.')
        return super().to_python(value)


class PhoneNumberField(forms.CharField):
    """Local phone number; the country code lives on the member row"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('max_length', 20)
        kwargs.setdefault('widget', forms.TextInput(attrs={'placeholder': '8012345678', 'inputmode': 'tel'}))
        super().__init__(*args, **kwargs)

    def clean(self, value):
        value = super().clean(value)
        if value in self.empty_values:
            return value

        digits = NON_DIGIT.sub('', value)
        if not 6 <= len(digits) <= 15:
            raise ValidationError('Enter a valid phone number.')
        return digits


# =============================================================================
# MIXINS
# =============================================================================

def _bootstrap_class(widget):
    if isinstance(widget, (forms.CheckboxInput, forms.RadioSelect, forms.CheckboxSelectMultiple)):
        return 'form-check-input'
    if isinstance(widget, forms.Select):
        return 'form-select'
    if isinstance(widget, (forms.widgets.Input, forms.Textarea)):
        return 'form-control'
    return None


class BootstrapFormMixin:
    """Adds Bootstrap 5 classes to every widget; help text doubles as placeholder"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            widget = field.widget
            css_class = _bootstrap_class(widget)
            if css_class is None:
                continue

            classes = widget.attrs.get('class', '').split()
            if css_class not in classes:
                widget.attrs['class'] = ' '.join(classes + [css_class])

            text_like = isinstance(widget, (forms.TextInput, forms.EmailInput, forms.NumberInput))
            if text_like and field.help_text:
                widget.attrs.setdefault('placeholder', field.help_text)


class DateRangeFormMixin:
    """Rejects an end_date earlier than start_date"""

    def clean(self):
        cleaned_data = super().clean()
        start, end = cleaned_data.get('start_date'), cleaned_data.get('end_date')
        if start and end and end < start:
            raise ValidationError({'end_date': 'End date must be after start date.'})
        return cleaned_data


# =============================================================================
# HTMX FILTER FORM
# =============================================================================

class BaseFilterForm(BootstrapFormMixin, forms.Form):
    """
    Search box plus filters that re-query `search_url` and swap #results.
    The text box waits for typing to pause; every other field fires on change.
    """

    q = forms.CharField(
        label='Search',
        required=False,
        widget=forms.TextInput(attrs={'type': 'search', 'placeholder': 'Search...'}),
    )

    def __init__(self, *args, search_url='', **kwargs):
        super().__init__(*args, **kwargs)
        for name, field in self.fields.items():
            field.widget.attrs.update({
                'hx-get': search_url,
                'hx-trigger': 'keyup changed delay:500ms' if name == 'q' else 'change',
                'hx-target': '#results',
                'hx-include': '[name]',
            })


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

def validate_positive_amount(value):
    if value is not None and value <= 0:
        raise ValidationError('Amount must be greater than zero.')


def get_form_errors_as_string(form):
    """One line per error, prefixed with the field label; non-field errors bare"""
    lines = []
    for name, errors in form.errors.items():
        field = form.fields.get(name)
        prefix = '' if name == '__all__' else f"{(field and field.label) or name}: "
        lines.extend(f"{prefix}{error}" for error in errors)
    return '\n'.join(lines)
