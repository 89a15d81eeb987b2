# accounts/forms.py

from django import forms
from django.contrib.auth.forms import AuthenticationForm, PasswordChangeForm
from django.contrib.auth.models import User
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from utils.forms import BootstrapFormMixin
from .models import UserProfile


# =============================================================================
# SIGN-IN FORM
# =============================================================================

class LoginForm(AuthenticationForm):
    """Sign-in form using email instead of username"""

    username = forms.EmailField(
        label=_('Email'),
        widget=forms.EmailInput(attrs={
            'class': 'form-control',
            'id': 'userEmail',
            'placeholder': 'Enter your email address',
            'autofocus': True
        })
    )
    password = forms.CharField(
        label=_('Password'),
        widget=forms.PasswordInput(attrs={
            'class': 'form-control',
            'id': 'userPassword',
            'placeholder': 'Enter your password'
        })
    )
    remember_me = forms.BooleanField(
        required=False,
        label=_('Remember me'),
        widget=forms.CheckboxInput(attrs={
            'class': 'form-check-input',
            'id': 'rememberMe'
        })
    )

    error_messages = {
        'invalid_login': _("Invalid email or password."),
        'inactive': _("This account is inactive."),
    }


# =============================================================================
# SIGN-UP FORM
# =============================================================================

class SignUpForm(BootstrapFormMixin, forms.Form):
    """Creates a User and its UserProfile; the email doubles as the username"""

    display_name = forms.CharField(label='Full Name', min_length=2, max_length=50)
    email = forms.EmailField(label='Email')
    password1 = forms.CharField(label='Password', widget=forms.PasswordInput, min_length=6)
    password2 = forms.CharField(label='Confirm Password', widget=forms.PasswordInput)

    def clean_email(self):
        email = self.cleaned_data['email'].strip().lower()
        if User.objects.filter(email__iexact=email).exists() or User.objects.filter(username__iexact=email).exists():
            raise ValidationError("An account with this email already exists.")
        return email

    def clean(self):
        cleaned_data = super().clean()
        password1 = cleaned_data.get('password1')
        password2 = cleaned_data.get('password2')

        if password1 and password2 and password1 != password2:
            self.add_error('password2', "Passwords do not match.")
        elif password1:
            try:
                validate_password(password1)
            except ValidationError as e:
                self.add_error('password1', e)

        return cleaned_data

    def save(self):
        display_name = self.cleaned_data['display_name'].strip()
        first_name, _, last_name = display_name.partition(' ')

        user = User.objects.create_user(
            username=self.cleaned_data['email'],
            email=self.cleaned_data['email'],
            password=self.cleaned_data['password1'],
            first_name=first_name[:150],
            last_name=last_name.strip()[:150],
        )
        profile, _ = UserProfile.objects.get_or_create(user=user)
        profile.display_name = display_name
        profile.save(update_fields=['display_name', 'updated_at'])
        return user


# =============================================================================
# PROFILE FORMS
# =============================================================================

class ProfileForm(BootstrapFormMixin, forms.ModelForm):

    display_name = forms.CharField(
        min_length=2,
        max_length=50,
        error_messages={
            'min_length': 'Display name must be at least 2 characters.',
            'max_length': 'Display name must not be longer than 50 characters.',
        }
    )

    class Meta:
        model = UserProfile
        fields = ['display_name', 'primary_community']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['primary_community'].required = False
        self.fields['primary_community'].queryset = self.instance.memberships


class ChangePasswordForm(BootstrapFormMixin, PasswordChangeForm):
    error_messages = {
        **PasswordChangeForm.error_messages,
        'password_incorrect': _("The current password you entered is incorrect."),
    }


class DeleteAccountForm(BootstrapFormMixin, forms.Form):

    confirmation = forms.CharField(
        label='Type DELETE to confirm',
        max_length=10
    )

    def clean_confirmation(self):
        value = self.cleaned_data['confirmation'].strip()
        if value != 'DELETE':
            raise ValidationError("Type DELETE to confirm.")
        return value
