# members/utils.py

"""
Members Utility Functions

Pure utility functions with NO side effects (no database writes):
- Age and tier derivation
- Elapsed-month counting for monthly dues
- Expected contribution from the community's templates
- Payment ledger sums and balances
- Name helpers

All functions are pure - they calculate and return values without modifying the database.
Database writes are handled by services.py and signals.py.
"""

from datetime import date, datetime
from decimal import Decimal

from dateutil.parser import isoparse
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)

UNDER_TIER1_LABEL = 'Under 18'

ONE_TIME = 'one-time'
MONTHLY = 'monthly'


def _get(obj, name, default=None):
    """Read a field from a model instance or a plain dict"""
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def to_date(value, tz=None):
    """
    Calendar date of a date, datetime or ISO string. Aware datetimes are read
    in `tz` (the community timezone) or, without one, the server timezone.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = isoparse(value)
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value, tz)
        return value.date()
    return value


def _as_decimal(value):
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# =============================================================================
# NAME HELPERS
# =============================================================================

def build_full_name(first_name, middle_name='', last_name=''):
    """
    Join the non-empty name parts with single spaces.

    Example:
        >>> build_full_name('Ada', '', 'Okafor')
        'Ada Okafor'
    """
    parts = [(part or '').strip() for part in (first_name, middle_name, last_name)]
    return ' '.join(part for part in parts if part)


# =============================================================================
# AGE & TIER
# =============================================================================

def calculate_age(year_of_birth, today=None):
    """Age in whole years as the calendar-year difference (birthday ignored)"""
    today = today or timezone.localdate()
    return today.year - int(year_of_birth)


def get_tier(age, tier1_age=18, tier2_age=25):
    """
    Tier label for an age.

    age < tier1_age             -> 'Under 18'
    tier1_age <= age < tier2_age -> 'Group 1 ({tier1_age}-{tier2_age - 1})'
    age >= tier2_age            -> 'Group 2 ({tier2_age}+)'

    The first label is fixed text even when tier1_age is not 18. Labels are
    regenerated from the settings every time, so changing the ages renames
    the tiers.
    """
    if age < tier1_age:
        return UNDER_TIER1_LABEL
    if age < tier2_age:
        return f"Group 1 ({tier1_age}-{tier2_age - 1})"
    return f"Group 2 ({tier2_age}+)"


def get_tier_choices(tier1_age=18, tier2_age=25):
    """The three current tier labels, youngest first"""
    return [
        UNDER_TIER1_LABEL,
        f"Group 1 ({tier1_age}-{tier2_age - 1})",
        f"Group 2 ({tier2_age}+)",
    ]


# =============================================================================
# CONTRIBUTION CALCULATION
# =============================================================================

def count_elapsed_months(join_date, today=None, tz=None):
    """
    Number of calendar months from the join month to the current month,
    counting both ends. Day of month is ignored.

    Joined this month -> 1; joined in March, now June -> 4;
    joined November 2024, now February 2025 -> 4.

    The join month is taken in `tz`, which must be the timezone `today` was
    computed in. May be zero or negative for a join date in the future;
    callers clamp.
    """
    join = to_date(join_date, tz)
    today = to_date(today, tz) or timezone.localdate(timezone=tz)
    return (today.year - join.year) * 12 + (today.month - join.month) + 1


def calculate_contribution(tier, join_date, templates, today=None, tz=None):
    """
    Expected total for a member in `tier` who joined on `join_date`.

    Sums every template whose tiers include `tier`:
    one-time -> amount; monthly -> amount x elapsed months (never negative).

    Args:
        tier: Tier label (see get_tier)
        join_date: date, datetime or ISO string
        templates: iterable of CustomContribution instances or dicts
        today: override for the current date
        tz: timezone the join date is read in (the community timezone)

    Returns:
        Decimal
    """
    total = Decimal('0')
    months = None

    for template in templates:
        if tier not in (_get(template, 'tiers') or []):
            continue

        amount = _as_decimal(_get(template, 'amount'))

        if _get(template, 'frequency') == MONTHLY:
            if months is None:
                months = max(0, count_elapsed_months(join_date, today, tz))
            total += amount * months
        else:
            total += amount

    return total


# =============================================================================
# PAYMENT LEDGER
# =============================================================================

def _payment_contribution_id(payment):
    value = _get(payment, 'contribution_id')
    return str(value) if value is not None else None


def payment_matches_month(payment, month):
    """
    True when the payment covers `month` (1-12): either its explicit month
    or the month of its payment date.
    """
    explicit = _get(payment, 'month')
    if explicit is not None and int(explicit) == int(month):
        return True
    paid_on = to_date(_get(payment, 'date'))
    return paid_on is not None and paid_on.month == int(month)


def get_paid_amount_for_contribution(payments, contribution_id, month=None):
    """Sum of payments made against one contribution template (optionally one month)"""
    contribution_id = str(contribution_id)
    total = Decimal('0')

    for payment in payments or []:
        if _payment_contribution_id(payment) != contribution_id:
            continue
        if month is not None and not payment_matches_month(payment, month):
            continue
        total += _as_decimal(_get(payment, 'amount'))

    return total


def get_balance_for_contribution(payments, contribution, month=None):
    """
    Outstanding amount for one template.

    The same rule applies to both frequencies: the template amount minus what
    was paid against it (for a monthly template, per month when `month` is given).
    Negative means overpaid.
    """
    paid = get_paid_amount_for_contribution(payments, _get(contribution, 'id'), month)
    return _as_decimal(_get(contribution, 'amount')) - paid


def get_paid_amount(payments):
    """Sum of all payments"""
    return sum((_as_decimal(_get(payment, 'amount')) for payment in payments or []), Decimal('0'))


def get_balance(contribution_total, payments):
    """Expected contribution minus everything paid"""
    return _as_decimal(contribution_total) - get_paid_amount(payments)


def get_payment_status(contribution_total, payments):
    """
    Payment status label used by stats and reports.

    Returns:
        str: 'paid', 'partial' or 'unpaid'
    """
    paid = get_paid_amount(payments)
    balance = _as_decimal(contribution_total) - paid
    if balance <= 0:
        return 'paid'
    if paid > 0:
        return 'partial'
    return 'unpaid'
