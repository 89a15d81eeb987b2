"""Tests for the pure tier, contribution and payment ledger helpers."""

from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from members.utils import (
    build_full_name,
    calculate_age,
    calculate_contribution,
    count_elapsed_months,
    get_balance,
    get_balance_for_contribution,
    get_paid_amount_for_contribution,
    get_payment_status,
    get_tier,
    get_tier_choices,
    payment_matches_month,
    to_date,
)

TODAY = date(2025, 6, 15)

ONE_TIME = {'id': 'dues', 'amount': Decimal('50'), 'frequency': 'one-time', 'tiers': ['Group 1 (18-24)', 'Group 2 (25+)']}
MONTHLY = {'id': 'levy', 'amount': Decimal('10'), 'frequency': 'monthly', 'tiers': ['Group 2 (25+)']}


class TestTiers:
    """Tests for age and tier derivation."""

    @pytest.mark.parametrize('age, expected', [
        (0, 'Under 18'),
        (17, 'Under 18'),
        (18, 'Group 1 (18-24)'),
        (24, 'Group 1 (18-24)'),
        (25, 'Group 2 (25+)'),
        (90, 'Group 2 (25+)'),
    ])
    def test_default_boundaries(self, age, expected):
        assert get_tier(age) == expected

    def test_labels_follow_settings(self):
        """Changing the ages renames the groups but not the youngest label."""
        assert get_tier(15, 16, 21) == 'Under 18'
        assert get_tier(16, 16, 21) == 'Group 1 (16-20)'
        assert get_tier(21, 16, 21) == 'Group 2 (21+)'

    def test_choices_youngest_first(self):
        assert get_tier_choices(18, 25) == ['Under 18', 'Group 1 (18-24)', 'Group 2 (25+)']

    def test_age_ignores_birthday(self):
        assert calculate_age(2000, today=date(2025, 1, 1)) == 25
        assert calculate_age('2000', today=date(2025, 12, 31)) == 25


class TestElapsedMonths:
    """Tests for count_elapsed_months."""

    def test_same_month_counts_one(self):
        assert count_elapsed_months(date(2025, 6, 30), TODAY) == 1

    def test_counts_both_ends(self):
        assert count_elapsed_months(date(2025, 3, 31), TODAY) == 4

    def test_crosses_year_boundary(self):
        assert count_elapsed_months(date(2024, 11, 1), date(2025, 2, 1)) == 4

    def test_future_join_is_not_positive(self):
        assert count_elapsed_months(date(2025, 8, 1), TODAY) <= 0

    def test_accepts_strings_and_datetimes(self):
        assert count_elapsed_months('2025-05-20T10:00:00+00:00', TODAY) == 2
        assert count_elapsed_months(datetime(2025, 4, 2, 8, 0), TODAY) == 3

    def test_join_read_in_timezone_ahead_of_utc(self):
        # 23:30 UTC on Jan 31 is already Feb 1 in Lagos
        joined = datetime(2026, 1, 31, 23, 30, tzinfo=dt_timezone.utc)

        assert count_elapsed_months(joined, date(2026, 2, 1), ZoneInfo('Africa/Lagos')) == 1
        assert count_elapsed_months(joined, date(2026, 2, 1), ZoneInfo('UTC')) == 2

    def test_join_read_in_timezone_behind_utc(self):
        # 03:00 UTC on Feb 1 is still Jan 31 in Chicago
        joined = datetime(2026, 2, 1, 3, 0, tzinfo=dt_timezone.utc)

        assert count_elapsed_months(joined, date(2026, 1, 31), ZoneInfo('America/Chicago')) == 1


class TestCalculateContribution:
    """Tests for the expected contribution total."""

    def test_no_templates(self):
        assert calculate_contribution('Group 2 (25+)', TODAY, [], TODAY) == Decimal('0')

    def test_one_time_only(self):
        result = calculate_contribution('Group 1 (18-24)', date(2020, 1, 1), [ONE_TIME, MONTHLY], TODAY)
        assert result == Decimal('50')

    def test_monthly_joined_this_month(self):
        result = calculate_contribution('Group 2 (25+)', date(2025, 6, 1), [MONTHLY], TODAY)
        assert result == Decimal('10')

    def test_monthly_four_months(self):
        result = calculate_contribution('Group 2 (25+)', date(2025, 3, 10), [ONE_TIME, MONTHLY], TODAY)
        assert result == Decimal('90')  # 50 + 10 x 4

    def test_tier_outside_every_template(self):
        assert calculate_contribution('Under 18', date(2025, 1, 1), [ONE_TIME, MONTHLY], TODAY) == Decimal('0')

    def test_future_join_charges_no_months(self):
        assert calculate_contribution('Group 2 (25+)', date(2026, 1, 1), [MONTHLY], TODAY) == Decimal('0')


class TestPaymentLedger:
    """Tests for paid amounts, balances and status."""

    @pytest.fixture
    def payments(self):
        return [
            {'contribution_id': 'dues', 'amount': Decimal('20'), 'date': date(2025, 1, 5), 'month': None},
            {'contribution_id': 'levy', 'amount': Decimal('10'), 'date': date(2025, 5, 2), 'month': None},
            {'contribution_id': 'levy', 'amount': Decimal('10'), 'date': date(2025, 6, 1), 'month': 4},
        ]

    def test_paid_for_contribution(self, payments):
        assert get_paid_amount_for_contribution(payments, 'dues') == Decimal('20')
        assert get_paid_amount_for_contribution(payments, 'levy') == Decimal('20')
        assert get_paid_amount_for_contribution(payments, 'missing') == Decimal('0')

    def test_month_uses_explicit_month_or_date(self, payments):
        assert get_paid_amount_for_contribution(payments, 'levy', month=5) == Decimal('10')
        assert get_paid_amount_for_contribution(payments, 'levy', month=4) == Decimal('10')
        assert payment_matches_month(payments[2], 6)

    def test_balance_for_one_time(self, payments):
        assert get_balance_for_contribution(payments, ONE_TIME) == Decimal('30')

    def test_balance_for_month(self, payments):
        assert get_balance_for_contribution(payments, MONTHLY, month=5) == Decimal('0')
        assert get_balance_for_contribution(payments, MONTHLY, month=7) == Decimal('10')

    def test_overpaid_balance_is_negative(self, payments):
        assert get_balance(Decimal('30'), payments) == Decimal('-10')

    @pytest.mark.parametrize('total, expected', [
        (Decimal('40'), 'paid'),
        (Decimal('30'), 'paid'),
        (Decimal('100'), 'partial'),
    ])
    def test_status(self, payments, total, expected):
        assert get_payment_status(total, payments) == expected

    def test_status_unpaid(self):
        assert get_payment_status(Decimal('50'), []) == 'unpaid'


class TestHelpers:

    def test_full_name_skips_blank_parts(self):
        assert build_full_name('Ada', '', 'Okafor') == 'Ada Okafor'
        assert build_full_name(' Ada ', 'Nneka', None) == 'Ada Nneka'

    def test_to_date(self):
        assert to_date(None) is None
        assert to_date('2025-02-03') == date(2025, 2, 3)
        assert to_date(date(2025, 2, 3)) == date(2025, 2, 3)
        late = datetime(2026, 1, 31, 23, 30, tzinfo=dt_timezone.utc)
        assert to_date(late, ZoneInfo('Africa/Lagos')) == date(2026, 2, 1)
