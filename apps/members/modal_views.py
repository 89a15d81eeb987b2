# members/modal_views.py

"""
Members Modal Action Views

HTMX-powered modals for member, family and payment changes.
Each action has two views:
1. _modal (GET) - Loads the modal HTML
2. _submit (POST) - Runs the CommunityService mutation and answers with
   SweetAlert headers (see core.utils)

Successful submits also send an HX-Trigger 'communityChanged' event so open
lists reload themselves.
"""

from django.shortcuts import render, get_object_or_404
from django.urls import reverse
from django.views.decorators.http import require_http_methods
import logging

from core.decorators import community_required
from core.utils import (
    create_error_response,
    create_redirect_response,
    create_result_response,
)
from utils.forms import get_form_errors_as_string
from .forms import MemberForm, PatriarchMemberForm, FamilyForm, PaymentForm
from .models import Member, Family, Payment
from .services import CommunityService

logger = logging.getLogger(__name__)


def _service(request, community):
    return CommunityService(community, user=request.user)


def _form_error(form, title):
    return create_error_response(get_form_errors_as_string(form), title=title, close_modal=False)


# =============================================================================
# MEMBER MODALS
# =============================================================================

@community_required(admin=True)
@require_http_methods(["GET"])
def member_add_modal(request, community):
    form = MemberForm(community, initial={'family': request.GET.get('family')})
    return render(request, 'members/modals/_member_form_modal.html', {
        'community': community,
        'form': form,
        'submit_url': reverse('members:member_add_submit', kwargs={'community_id': community.pk}),
        'title': 'Add Member',
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def member_add_submit(request, community):
    form = MemberForm(community, request.POST)
    if not form.is_valid():
        return _form_error(form, 'Add Failed')

    result = _service(request, community).add_member(form.to_service_data())
    return create_result_response(result, success_title='Member Added', error_title='Add Failed')


@community_required(admin=True)
@require_http_methods(["GET"])
def member_edit_modal(request, community, pk):
    member = get_object_or_404(Member, pk=pk, community=community)
    form = MemberForm(community, initial=MemberForm.initial_for(member))
    return render(request, 'members/modals/_member_form_modal.html', {
        'community': community,
        'member': member,
        'form': form,
        'submit_url': reverse('members:member_edit_submit', kwargs={'community_id': community.pk, 'pk': member.pk}),
        'title': f'Edit {member.name}',
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def member_edit_submit(request, community, pk):
    member = get_object_or_404(Member, pk=pk, community=community)
    form = MemberForm(community, request.POST)
    if not form.is_valid():
        return _form_error(form, 'Update Failed')

    result = _service(request, community).update_member(member, form.to_service_data())
    return create_result_response(result, success_title='Member Updated', error_title='Update Failed')


@community_required(admin=True)
@require_http_methods(["GET"])
def member_delete_modal(request, community, pk):
    member = get_object_or_404(Member, pk=pk, community=community)
    return render(request, 'members/modals/_member_delete_modal.html', {
        'community': community,
        'member': member,
        'payment_count': member.payments.count(),
        'is_self': member.user_id == request.user.pk,
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def member_delete_submit(request, community, pk):
    member = get_object_or_404(Member, pk=pk, community=community)

    if member.role == 'owner' or member.user_id == community.owner_id:
        return create_error_response("The community owner cannot be removed.", title='Delete Failed')

    result = _service(request, community).delete_member(member)
    if not result.success:
        return create_result_response(result, error_title='Delete Failed')

    return create_redirect_response(
        redirect_url=reverse('members:member_list', kwargs={'community_id': community.pk}),
        message=result.message,
        title='Member Removed'
    )


# =============================================================================
# PATRIARCH MODALS
# =============================================================================

@community_required
@require_http_methods(["GET"])
def patriarch_add_modal(request, community, family_pk):
    family = get_object_or_404(Family, pk=family_pk, community=community)
    if not _service(request, community).is_patriarch_or_admin(request.user, family):
        return create_error_response("You are not authorized to add members to this family.", title='Not Allowed')

    return render(request, 'members/modals/_member_form_modal.html', {
        'community': community,
        'family': family,
        'form': PatriarchMemberForm(community),
        'submit_url': reverse(
            'members:patriarch_add_submit',
            kwargs={'community_id': community.pk, 'family_pk': family.pk}
        ),
        'title': f'Add to the {family.name} family',
    })


@community_required
@require_http_methods(["POST"])
def patriarch_add_submit(request, community, family_pk):
    family = get_object_or_404(Family, pk=family_pk, community=community)
    form = PatriarchMemberForm(community, request.POST)
    if not form.is_valid():
        return _form_error(form, 'Add Failed')

    result = _service(request, community).add_member_as_patriarch(
        request.user, {**form.to_service_data(), 'family': family}
    )
    return create_result_response(result, success_title='Member Added', error_title='Add Failed')


@community_required
@require_http_methods(["GET"])
def patriarch_invite_modal(request, community, family_pk):
    from invitations.forms import InviteMemberForm

    family = get_object_or_404(Family, pk=family_pk, community=community)
    if not _service(request, community).is_patriarch_or_admin(request.user, family):
        return create_error_response("You are not authorized to invite members to this family.", title='Not Allowed')

    form = InviteMemberForm(community)
    for name in ('family', 'new_family', 'role'):
        form.fields.pop(name)

    return render(request, 'invitations/modals/_invite_modal.html', {
        'community': community,
        'family': family,
        'form': form,
        'submit_url': reverse(
            'members:patriarch_invite_submit',
            kwargs={'community_id': community.pk, 'family_pk': family.pk}
        ),
    })


@community_required
@require_http_methods(["POST"])
def patriarch_invite_submit(request, community, family_pk):
    from invitations.forms import InviteMemberForm

    family = get_object_or_404(Family, pk=family_pk, community=community)
    form = InviteMemberForm(community, request.POST)
    for name in ('family', 'new_family', 'role'):
        form.fields.pop(name)
    if not form.is_valid():
        return _form_error(form, 'Invitation Failed')

    result = _service(request, community).invite_member_as_patriarch(
        request.user, {**form.to_service_data(), 'family': family}, request=request
    )
    return create_result_response(result, success_title='Invitation Sent', error_title='Invitation Failed')


# =============================================================================
# FAMILY MODALS
# =============================================================================

@community_required(admin=True)
@require_http_methods(["GET"])
def family_add_modal(request, community):
    return render(request, 'members/families/modals/_family_form_modal.html', {
        'community': community,
        'form': FamilyForm(),
        'submit_url': reverse('members:family_add_submit', kwargs={'community_id': community.pk}),
        'title': 'Add Family',
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def family_add_submit(request, community):
    form = FamilyForm(request.POST)
    if not form.is_valid():
        return _form_error(form, 'Creation Failed')

    result = _service(request, community).add_family(form.cleaned_data['name'])
    return create_result_response(result, success_title='Family Created', error_title='Creation Failed')


@community_required(admin=True)
@require_http_methods(["GET"])
def family_edit_modal(request, community, pk):
    family = get_object_or_404(Family, pk=pk, community=community)
    return render(request, 'members/families/modals/_family_form_modal.html', {
        'community': community,
        'family': family,
        'form': FamilyForm(initial={'name': family.name}),
        'submit_url': reverse('members:family_edit_submit', kwargs={'community_id': community.pk, 'pk': family.pk}),
        'title': f'Rename {family.name}',
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def family_edit_submit(request, community, pk):
    family = get_object_or_404(Family, pk=pk, community=community)
    form = FamilyForm(request.POST)
    if not form.is_valid():
        return _form_error(form, 'Update Failed')

    result = _service(request, community).update_family(family, form.cleaned_data['name'])
    return create_result_response(result, success_title='Family Updated', error_title='Update Failed')


@community_required(admin=True)
@require_http_methods(["GET"])
def family_delete_modal(request, community, pk):
    family = get_object_or_404(Family, pk=pk, community=community)
    member_count = family.members.count()
    return render(request, 'members/families/modals/_family_delete_modal.html', {
        'community': community,
        'family': family,
        'member_count': member_count,
        'can_delete': member_count == 0,
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def family_delete_submit(request, community, pk):
    family = get_object_or_404(Family, pk=pk, community=community)
    result = _service(request, community).delete_family(family)
    return create_result_response(result, success_title='Family Deleted', error_title='Deletion Failed')


# =============================================================================
# PAYMENT MODALS
# =============================================================================

@community_required(admin=True)
@require_http_methods(["GET"])
def payment_record_modal(request, community, member_pk):
    member = get_object_or_404(Member, pk=member_pk, community=community)
    initial = {'contribution': request.GET.get('contribution')}
    if request.GET.get('month'):
        initial['month'] = request.GET['month']

    return render(request, 'members/payments/modals/_payment_form_modal.html', {
        'community': community,
        'member': member,
        'form': PaymentForm(community, member, initial=initial),
        'submit_url': reverse(
            'members:payment_record_submit',
            kwargs={'community_id': community.pk, 'member_pk': member.pk}
        ),
        'title': f'Record Payment for {member.name}',
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def payment_record_submit(request, community, member_pk):
    member = get_object_or_404(Member, pk=member_pk, community=community)
    form = PaymentForm(community, member, request.POST)
    if not form.is_valid():
        return _form_error(form, 'Payment Failed')

    data = form.cleaned_data
    result = _service(request, community).record_payment(
        member,
        data['contribution'],
        data['amount'],
        date=data['date'],
        month=data.get('month'),
    )
    return create_result_response(result, success_title='Payment Recorded', error_title='Payment Failed')


@community_required(admin=True)
@require_http_methods(["GET"])
def payment_edit_modal(request, community, pk):
    payment = get_object_or_404(Payment.objects.select_related('member'), pk=pk, member__community=community)
    form = PaymentForm(
        community,
        payment.member,
        payment=payment,
        initial={
            'contribution': payment.contribution_id,
            'amount': payment.amount,
            'date': payment.date,
            'month': payment.month,
        }
    )
    return render(request, 'members/payments/modals/_payment_form_modal.html', {
        'community': community,
        'member': payment.member,
        'payment': payment,
        'form': form,
        'submit_url': reverse('members:payment_edit_submit', kwargs={'community_id': community.pk, 'pk': payment.pk}),
        'title': 'Edit Payment',
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def payment_edit_submit(request, community, pk):
    payment = get_object_or_404(Payment.objects.select_related('member'), pk=pk, member__community=community)
    form = PaymentForm(community, payment.member, request.POST, payment=payment)
    if not form.is_valid():
        return _form_error(form, 'Update Failed')

    result = _service(request, community).update_payment(payment, form.cleaned_data)
    return create_result_response(result, success_title='Payment Updated', error_title='Update Failed')


@community_required(admin=True)
@require_http_methods(["GET"])
def payment_delete_modal(request, community, pk):
    payment = get_object_or_404(
        Payment.objects.select_related('member', 'contribution'),
        pk=pk,
        member__community=community
    )
    return render(request, 'members/payments/modals/_payment_delete_modal.html', {
        'community': community,
        'payment': payment,
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def payment_delete_submit(request, community, pk):
    payment = get_object_or_404(Payment.objects.select_related('member'), pk=pk, member__community=community)
    result = _service(request, community).delete_payment(payment)
    return create_result_response(result, success_title='Payment Deleted', error_title='Deletion Failed')
