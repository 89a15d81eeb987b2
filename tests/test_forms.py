"""Tests for the shared form building blocks."""

from decimal import Decimal

import pytest
from django import forms

from members.forms import FamilyForm
from utils.forms import BootstrapFormMixin, MoneyField, get_form_errors_as_string


class StyledForm(BootstrapFormMixin, forms.Form):
    name = forms.CharField(help_text='Full name')
    notes = forms.CharField(widget=forms.Textarea, required=False)
    kind = forms.ChoiceField(choices=[('a', 'A')])
    active = forms.BooleanField(required=False)
    amount = MoneyField(required=False)


class TestBootstrapFormMixin:

    def test_classes_per_widget(self):
        fields = StyledForm().fields

        assert fields['name'].widget.attrs['class'] == 'form-control'
        assert fields['notes'].widget.attrs['class'] == 'form-control'
        assert fields['kind'].widget.attrs['class'] == 'form-select'
        assert fields['active'].widget.attrs['class'] == 'form-check-input'
        assert fields['amount'].widget.attrs['class'] == 'form-control money-input'

    def test_help_text_becomes_placeholder(self):
        assert StyledForm().fields['name'].widget.attrs['placeholder'] == 'Full name'

    def test_renders(self):
        assert 'class="form-control"' in str(FamilyForm())


class TestMoneyField:

    @pytest.mark.parametrize('raw, expected', [
        ('$1,250.00', Decimal('1250.00')),
        ('₦ 5 000', Decimal('5000')),
    ])
    def test_strips_symbols(self, raw, expected):
        assert MoneyField().clean(raw) == expected

    def test_rejects_garbage(self):
        with pytest.raises(forms.ValidationError):
            MoneyField().clean('abc.def')


def test_errors_prefixed_with_label():
    form = FamilyForm(data={'name': ''})

    assert not form.is_valid()
    assert get_form_errors_as_string(form) == 'Family Name: This field is required.'
