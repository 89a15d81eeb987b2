# members/stats.py
"""
Statistics for the community dashboard, member detail and reports pages.

Totals are computed from member snapshots (each member's stored contribution
and prefetched payments) so they agree with what the member list shows.
"""

from collections import Counter, OrderedDict
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from django.db.models import Count, Sum
from django.db.models.functions import TruncMonth
import logging

from core.utils import format_money, get_community_today, get_community_timezone
from . import utils as ledger

logger = logging.getLogger(__name__)


# =============================================================================
# DASHBOARD STATISTICS
# =============================================================================

def get_dashboard_stats(community, members=None, families=None):
    """
    Headline figures for one community.

    Args:
        community: Community
        members: optional member snapshot (with payments prefetched)
        families: optional family snapshot

    Returns:
        dict with totals, formatted money values, tier and payment-status
        breakdowns and the five most recently joined members
    """
    from .streams import load_members, load_families

    members = list(members) if members is not None else load_members(community.pk)
    families = list(families) if families is not None else load_families(community.pk)

    total_contributions = Decimal('0')
    total_paid = Decimal('0')
    status_counts = Counter()
    tier_counts = Counter()

    for member in members:
        payments = member.get_payments()
        total_contributions += member.contribution or Decimal('0')
        total_paid += ledger.get_paid_amount(payments)
        status_counts[ledger.get_payment_status(member.contribution, payments)] += 1
        tier_counts[member.tier] += 1

    total_balance = total_contributions - total_paid

    # Current labels first, then any stale labels awaiting recalculation
    tier_breakdown = OrderedDict(
        (label, tier_counts.pop(label, 0))
        for label in ledger.get_tier_choices(community.tier1_age, community.tier2_age)
    )
    tier_breakdown.update(sorted(tier_counts.items()))

    collection_rate = (
        round(total_paid / total_contributions * 100, 1) if total_contributions > 0 else Decimal('0')
    )

    recent_members = sorted(members, key=lambda member: member.join_date, reverse=True)[:5]

    return {
        'total_members': len(members),
        'active_members': sum(1 for member in members if member.status == 'active'),
        'invited_members': sum(1 for member in members if member.status == 'invited'),
        'total_families': len(families),
        'total_contributions': total_contributions,
        'total_paid': total_paid,
        'total_balance': total_balance,
        'total_contributions_formatted': format_money(total_contributions, community.currency),
        'total_paid_formatted': format_money(total_paid, community.currency),
        'total_balance_formatted': format_money(total_balance, community.currency),
        'collection_rate': collection_rate,
        'payment_status': {
            'paid': status_counts['paid'],
            'partial': status_counts['partial'],
            'unpaid': status_counts['unpaid'],
        },
        'tier_breakdown': tier_breakdown,
        'recent_members': recent_members,
    }


def get_family_statistics(community, families=None, members=None):
    """Per-family member counts and dues, largest family first"""
    from .streams import load_members, load_families

    members = list(members) if members is not None else load_members(community.pk)
    families = list(families) if families is not None else load_families(community.pk)

    rows = OrderedDict(
        (family.pk, {
            'family': family,
            'member_count': 0,
            'patriarch': None,
            'contribution': Decimal('0'),
            'paid': Decimal('0'),
        })
        for family in families
    )

    for member in members:
        row = rows.get(member.family_id)
        if row is None:
            continue
        row['member_count'] += 1
        row['contribution'] += member.contribution or Decimal('0')
        row['paid'] += ledger.get_paid_amount(member.get_payments())
        if member.is_patriarch and row['patriarch'] is None:
            row['patriarch'] = member

    for row in rows.values():
        row['balance'] = row['contribution'] - row['paid']

    return sorted(rows.values(), key=lambda row: (-row['member_count'], row['family'].name))


# =============================================================================
# MEMBER DETAIL
# =============================================================================

def get_member_contribution_breakdown(member, templates, today=None):
    """
    One row per template that applies to the member's tier.

    Monthly templates also get one row per month from the join month to the
    current month, each with the amount paid and still owed for that month.
    """
    today = today or get_community_today(member.community)
    payments = member.get_payments()
    tz = get_community_timezone(member.community)
    months = max(0, ledger.count_elapsed_months(member.join_date, today, tz))
    join = ledger.to_date(member.join_date, tz)

    breakdown = []
    for template in templates:
        if not template.applies_to(member.tier):
            continue

        row = {
            'contribution': template,
            'expected': template.amount * months if template.is_monthly else template.amount,
            'paid': ledger.get_paid_amount_for_contribution(payments, template.pk),
            'months': [],
        }
        row['balance'] = row['expected'] - row['paid']

        if template.is_monthly:
            for offset in range(months):
                month_start = join.replace(day=1) + relativedelta(months=offset)
                row['months'].append({
                    'date': month_start,
                    'month': month_start.month,
                    'paid': ledger.get_paid_amount_for_contribution(payments, template.pk, month_start.month),
                    'balance': ledger.get_balance_for_contribution(payments, template, month_start.month),
                })

        breakdown.append(row)

    return breakdown


# =============================================================================
# PAYMENT STATISTICS
# =============================================================================

def get_payment_statistics(community, start_date=None, end_date=None):
    """Count and total of payments in a date range, grouped by template"""
    from .models import Payment

    payments = Payment.objects.for_community(community).in_range(start_date, end_date)

    totals = payments.aggregate(total=Sum('amount'), count=Count('id'))
    by_contribution = list(
        payments.values('contribution__name')
        .annotate(total=Sum('amount'), count=Count('id'))
        .order_by('-total')
    )
    for row in by_contribution:
        row['name'] = row.pop('contribution__name') or 'Deleted contribution'
        row['total_formatted'] = format_money(row['total'], community.currency)

    total = totals['total'] or Decimal('0')
    return {
        'count': totals['count'] or 0,
        'total': total,
        'total_formatted': format_money(total, community.currency),
        'by_contribution': by_contribution,
    }


def get_payment_trends(community, months=6):
    """
    Payment totals for each of the last `months` calendar months (oldest
    first), with empty months reported as zero.
    """
    from .models import Payment

    today = get_community_today(community)
    first_month = today.replace(day=1) - relativedelta(months=months - 1)

    totals = {
        row['period'].strftime('%Y-%m'): row['total']
        for row in (
            Payment.objects.for_community(community)
            .filter(date__gte=first_month)
            .annotate(period=TruncMonth('date'))
            .values('period')
            .annotate(total=Sum('amount'))
        )
        if row['period']
    }

    trend = []
    for offset in range(months):
        period = first_month + relativedelta(months=offset)
        key = period.strftime('%Y-%m')
        trend.append({
            'period': key,
            'label': period.strftime('%b %Y'),
            'total': totals.get(key, Decimal('0')),
        })
    return trend
