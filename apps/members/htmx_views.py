# members/htmx_views.py

from django.db.models import Q
from django.shortcuts import render
from django.views.decorators.http import require_http_methods
import uuid
import logging

from core.decorators import community_required
from core.utils import parse_filters, paginate_queryset
from .models import Member, Payment
from . import utils as ledger
from . import stats as member_stats

logger = logging.getLogger(__name__)


def _as_uuid(value):
    try:
        return uuid.UUID(value) if value else None
    except ValueError:
        return None


# =============================================================================
# MEMBER SEARCH
# =============================================================================

@community_required
@require_http_methods(["GET"])
def member_search(request, community):
    """HTMX member search by name, email, phone, family, tier and status"""

    filters = parse_filters(request, [
        'q', 'family', 'tier', 'status', 'role', 'gender', 'payment_status'
    ])

    members = (
        Member.objects.filter(community=community)
        .select_related('family', 'user')
        .prefetch_related('payments')
        .order_by('name')
    )

    query = filters['q']
    if query:
        members = members.filter(
            Q(name__icontains=query) |
            Q(email__icontains=query) |
            Q(phone__icontains=query) |
            Q(family__name__icontains=query) |
            Q(tier__icontains=query)
        )

    if filters['family']:
        members = members.filter(family_id=_as_uuid(filters['family']))
    if filters['tier']:
        members = members.filter(tier=filters['tier'])
    if filters['status']:
        members = members.filter(status=filters['status'])
    if filters['role']:
        members = members.filter(role=filters['role'])
    if filters['gender']:
        members = members.filter(gender=filters['gender'])

    # Payment status depends on the ledger, so it is filtered in Python
    if filters['payment_status']:
        members = [
            member for member in members
            if ledger.get_payment_status(member.contribution, member.get_payments()) == filters['payment_status']
        ]

    members_page, paginator = paginate_queryset(request, members, per_page=20)

    stats = {
        'total': paginator.count,
        'active': sum(1 for member in members_page if member.status == 'active'),
        'invited': sum(1 for member in members_page if member.status == 'invited'),
    }

    return render(request, 'members/_member_results.html', {
        'community': community,
        'members_page': members_page,
        'stats': stats,
        'is_admin': request.community_role in ('owner', 'admin'),
    })


# =============================================================================
# PAYMENT SEARCH
# =============================================================================

@community_required
@require_http_methods(["GET"])
def payment_search(request, community):
    """HTMX payment list filtered by member, template and date range"""

    filters = parse_filters(request, ['q', 'contribution', 'start_date', 'end_date'])

    payments = (
        Payment.objects.for_community(community)
        .select_related('member__family', 'contribution')
        .order_by('-date', '-created_at')
    )

    if filters['q']:
        payments = payments.filter(
            Q(member__name__icontains=filters['q']) |
            Q(member__family__name__icontains=filters['q'])
        )
    if filters['contribution']:
        payments = payments.filter(contribution_id=_as_uuid(filters['contribution']))

    try:
        start_date = ledger.to_date(filters['start_date'])
        end_date = ledger.to_date(filters['end_date'])
    except ValueError:
        start_date = end_date = None
    payments = payments.in_range(start_date, end_date)

    payments_page, paginator = paginate_queryset(request, payments, per_page=25)

    return render(request, 'members/payments/_payment_results.html', {
        'community': community,
        'payments_page': payments_page,
        'stats': member_stats.get_payment_statistics(community, start_date, end_date),
        'is_admin': request.community_role in ('owner', 'admin'),
    })
