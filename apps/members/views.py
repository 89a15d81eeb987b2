# members/views.py

"""
Page views for members, families and payments.

Lists load their rows over HTMX (see htmx_views); every change goes through a
modal (see modal_views) backed by CommunityService.
"""

from django.shortcuts import render, get_object_or_404
from django.urls import reverse
from django.db.models import Prefetch
import logging

from core.decorators import community_required
from .forms import MemberFilterForm
from .models import Member, Family, Payment
from .services import CommunityService
from . import stats as member_stats

logger = logging.getLogger(__name__)


# =============================================================================
# MEMBER VIEWS
# =============================================================================

@community_required
def member_list(request, community):
    """Member roster - HTMX loads the rows on page load"""
    filter_form = MemberFilterForm(
        community,
        search_url=reverse('members:member_search', kwargs={'community_id': community.pk})
    )

    service = CommunityService(community, user=request.user)
    try:
        stats = member_stats.get_dashboard_stats(community, members=service.members, families=service.families)
    except Exception as e:
        logger.error(f"Error getting member statistics for community {community.pk}: {e}")
        stats = {}

    context = {
        'community': community,
        'filter_form': filter_form,
        'stats': stats,
        'is_admin': request.community_role in ('owner', 'admin'),
    }
    return render(request, 'members/list.html', context)


@community_required
def member_detail(request, community, pk):
    """Dues per template, payment history and invitation state for one member"""
    member = get_object_or_404(
        Member.objects.select_related('family', 'user').prefetch_related(
            Prefetch('payments', queryset=Payment.objects.select_related('contribution'))
        ),
        pk=pk,
        community=community
    )

    service = CommunityService(community, user=request.user)
    templates = service.contributions

    context = {
        'community': community,
        'member': member,
        'breakdown': member_stats.get_member_contribution_breakdown(member, templates, service.today()),
        'payments': member.get_payments(),
        'invitations': member.invitations.all()[:5],
        'is_admin': request.community_role in ('owner', 'admin'),
        'history': member.get_history(limit=10),
    }
    return render(request, 'members/detail.html', context)


# =============================================================================
# FAMILY VIEWS
# =============================================================================

@community_required
def family_list(request, community):
    service = CommunityService(community, user=request.user)
    members = service.members

    context = {
        'community': community,
        'families': member_stats.get_family_statistics(community, families=service.families, members=members),
        'unassigned_count': sum(1 for member in members if member.family_id is None),
        'is_admin': request.community_role in ('owner', 'admin'),
    }
    return render(request, 'members/families/list.html', context)


@community_required
def family_detail(request, community, pk):
    family = get_object_or_404(Family, pk=pk, community=community)
    service = CommunityService(community, user=request.user)

    members = (
        family.members.select_related('user')
        .prefetch_related('payments')
        .order_by('-is_patriarch', 'name')
    )

    context = {
        'community': community,
        'family': family,
        'members': members,
        'is_admin': request.community_role in ('owner', 'admin'),
        'can_manage': service.is_patriarch_or_admin(request.user, family),
    }
    return render(request, 'members/families/detail.html', context)


# =============================================================================
# PAYMENT VIEWS
# =============================================================================

@community_required
def payment_overview(request, community):
    """Every member against every template that applies to them"""
    service = CommunityService(community, user=request.user)
    templates = service.contributions
    today = service.today()

    rows = []
    for member in service.members:
        rows.append({
            'member': member,
            'breakdown': member_stats.get_member_contribution_breakdown(member, templates, today),
            'paid': member.paid_amount,
            'balance': member.balance,
            'status': member.payment_status,
        })

    context = {
        'community': community,
        'rows': rows,
        'templates': templates,
        'is_admin': request.community_role in ('owner', 'admin'),
    }
    return render(request, 'members/payments/overview.html', context)
