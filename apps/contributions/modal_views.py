# contributions/modal_views.py

"""
Contribution template modals. Every successful change is followed by a tier
recalculation inside CommunityService, so member dues stay in step with the
templates.
"""

from django.shortcuts import render, get_object_or_404
from django.urls import reverse
from django.views.decorators.http import require_http_methods
import logging

from core.decorators import community_required
from core.utils import create_error_response, create_result_response
from members.services import CommunityService
from utils.forms import get_form_errors_as_string
from .forms import CustomContributionForm
from .models import CustomContribution

logger = logging.getLogger(__name__)


# =============================================================================
# ADD TEMPLATE
# =============================================================================

@community_required(admin=True)
@require_http_methods(["GET"])
def contribution_add_modal(request, community):
    return render(request, 'contributions/modals/_contribution_form_modal.html', {
        'community': community,
        'form': CustomContributionForm(community),
        'submit_url': reverse('contributions:contribution_add_submit', kwargs={'community_id': community.pk}),
        'title': 'Add Contribution',
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def contribution_add_submit(request, community):
    form = CustomContributionForm(community, request.POST)
    if not form.is_valid():
        return create_error_response(get_form_errors_as_string(form), title='Add Failed', close_modal=False)

    result = CommunityService(community, user=request.user).add_custom_contribution(form.to_service_data())
    return create_result_response(result, success_title='Contribution Added', error_title='Add Failed')


# =============================================================================
# EDIT TEMPLATE
# =============================================================================

@community_required(admin=True)
@require_http_methods(["GET"])
def contribution_edit_modal(request, community, pk):
    template = get_object_or_404(CustomContribution, pk=pk, community=community)
    form = CustomContributionForm(community, template=template, initial=CustomContributionForm.initial_for(template))
    return render(request, 'contributions/modals/_contribution_form_modal.html', {
        'community': community,
        'template': template,
        'form': form,
        'submit_url': reverse(
            'contributions:contribution_edit_submit',
            kwargs={'community_id': community.pk, 'pk': template.pk}
        ),
        'title': f'Edit {template.name}',
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def contribution_edit_submit(request, community, pk):
    template = get_object_or_404(CustomContribution, pk=pk, community=community)
    form = CustomContributionForm(community, request.POST, template=template)
    if not form.is_valid():
        return create_error_response(get_form_errors_as_string(form), title='Update Failed', close_modal=False)

    result = CommunityService(community, user=request.user).update_custom_contribution(
        template, form.to_service_data()
    )
    return create_result_response(result, success_title='Contribution Updated', error_title='Update Failed')


# =============================================================================
# DELETE TEMPLATE
# =============================================================================

@community_required(admin=True)
@require_http_methods(["GET"])
def contribution_delete_modal(request, community, pk):
    template = get_object_or_404(CustomContribution, pk=pk, community=community)
    return render(request, 'contributions/modals/_contribution_delete_modal.html', {
        'community': community,
        'template': template,
        'payment_count': template.payments.count(),
    })


@community_required(admin=True)
@require_http_methods(["POST"])
def contribution_delete_submit(request, community, pk):
    template = get_object_or_404(CustomContribution, pk=pk, community=community)
    result = CommunityService(community, user=request.user).delete_custom_contribution(template)
    return create_result_response(result, success_title='Contribution Removed', error_title='Deletion Failed')
