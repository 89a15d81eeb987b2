# core/views.py

"""
View functions for the core app: landing redirect, community creation and
switching, the community dashboard, settings and report exports.
"""

from django.shortcuts import render, redirect, get_object_or_404
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_http_methods, require_POST
import logging

from accounts.models import Community
from core.decorators import community_required
from members.services import CommunityService
from members import reports
from members import stats as member_stats
from .forms import CommunityCreateForm, CommunitySettingsForm, ReportForm
from .services import create_community, set_primary_community, get_landing_community

logger = logging.getLogger(__name__)


# =============================================================================
# LANDING & COMMUNITIES
# =============================================================================

@login_required
def home(request):
    """Send the user to their community, the switcher or community creation"""
    community = get_landing_community(request.user)
    if community is not None:
        return redirect('core:dashboard', community_id=community.pk)

    profile = getattr(request.user, 'profile', None)
    if profile is not None and profile.memberships.exists():
        return redirect('core:switch_community')
    return redirect('core:create_community')


@login_required
@require_http_methods(["GET", "POST"])
def create_community_view(request):
    if request.method == 'POST':
        form = CommunityCreateForm(request.POST)
        if form.is_valid():
            result = create_community(request.user, form.cleaned_data)
            if result.success:
                messages.success(request, result.message, extra_tags='sweetalert')
                return redirect('core:dashboard', community_id=result.obj.pk)
            messages.error(request, result.message)
        else:
            messages.error(request, "Please correct the errors below.")
    else:
        form = CommunityCreateForm()

    return render(request, 'core/create_community.html', {'form': form})


@login_required
@require_http_methods(["GET", "POST"])
def switch_community(request):
    """List the user's communities; POST marks one as primary"""
    profile = getattr(request.user, 'profile', None)
    communities = list(profile.memberships) if profile else []

    if request.method == 'POST':
        community = get_object_or_404(Community, pk=request.POST.get('community_id'))
        result = set_primary_community(request.user, community)
        if result.success:
            messages.success(request, result.message, extra_tags='sweetalert')
        else:
            messages.error(request, result.message)
        return redirect('core:switch_community')

    context = {
        'communities': [
            {
                'community': community,
                'role': community.get_role(request.user),
                'is_primary': profile is not None and profile.primary_community_id == community.pk,
            }
            for community in communities
        ],
    }
    return render(request, 'core/switch_community.html', context)


# =============================================================================
# DASHBOARD
# =============================================================================

@community_required
def dashboard(request, community):
    service = CommunityService(community, user=request.user)

    try:
        stats = member_stats.get_dashboard_stats(community, members=service.members, families=service.families)
        trends = member_stats.get_payment_trends(community)
    except Exception as e:
        logger.error(f"Error loading dashboard for community {community.pk}: {e}", exc_info=True)
        stats, trends = {}, []

    context = {
        'community': community,
        'stats': stats,
        'trends': trends,
        'templates': service.contributions,
        'is_admin': request.community_role in ('owner', 'admin'),
    }
    return render(request, 'core/dashboard.html', context)


# =============================================================================
# SETTINGS
# =============================================================================

@community_required(admin=True)
@require_http_methods(["GET", "POST"])
def settings_view(request, community):
    """Tier boundaries and currency; a separate action recalculates dues"""
    service = CommunityService(community, user=request.user)

    if request.method == 'POST':
        form = CommunitySettingsForm(request.POST)
        if form.is_valid():
            result = service.update_settings(**form.cleaned_data)
            if result.success:
                messages.success(request, result.message, extra_tags='sweetalert')
                return redirect('core:settings', community_id=community.pk)
            messages.error(request, result.message)
        else:
            messages.error(request, "Please correct the errors below.")
    else:
        form = CommunitySettingsForm(initial=CommunitySettingsForm.initial_for(community))

    context = {
        'community': community,
        'form': form,
        'tier_choices': service.tier_choices,
        'is_admin': True,
    }
    return render(request, 'core/settings.html', context)


@community_required(admin=True)
@require_POST
def recalculate_view(request, community):
    result = CommunityService(community, user=request.user).recalculate_tiers()
    if result.success:
        messages.success(request, f"{result.message} ({result.obj} updated)", extra_tags='sweetalert')
    else:
        messages.error(request, result.message)
    return redirect('core:settings', community_id=community.pk)


# =============================================================================
# REPORTS
# =============================================================================

@community_required
@require_http_methods(["GET"])
def reports_view(request, community):
    """Report picker; submitting with a format downloads the file"""
    start_date, end_date = reports.get_default_date_range(community)

    if 'export_format' not in request.GET:
        form = ReportForm(initial={'start_date': start_date, 'end_date': end_date})
        return render(request, 'core/reports.html', {'community': community, 'form': form})

    form = ReportForm(request.GET)
    if not form.is_valid():
        messages.error(request, "Please correct the errors below.")
        return render(request, 'core/reports.html', {'community': community, 'form': form})

    data = form.cleaned_data
    if data['report_type'] == 'member-list':
        table = reports.build_member_list(community, CommunityService(community, user=request.user).members)
    else:
        table = reports.build_payment_report(
            community,
            data.get('start_date') or start_date,
            data.get('end_date') or end_date
        )

    logger.info(f"User {request.user.pk} exported {data['report_type']} for community {community.pk}")
    return reports.export_response(table, data['export_format'])
