# invitations/forms.py

from django import forms

from members.forms import MemberForm


class InviteMemberForm(MemberForm):
    """Member details plus the role the invitee will get; email is required"""

    role = forms.ChoiceField(
        choices=(('user', 'User'), ('admin', 'Admin')),
        initial='user',
        widget=forms.Select(attrs={'class': 'form-select'})
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['email'].required = True
        self.fields.pop('is_patriarch', None)
