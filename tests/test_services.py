"""Tests for CommunityService."""

from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from dateutil.relativedelta import relativedelta
from django.utils import timezone

from contributions.models import CustomContribution
from members.models import Family, Member, Payment
from members.services import CommunityService, ServiceResult
from members.stats import get_member_contribution_breakdown


pytestmark = pytest.mark.django_db


class TestServiceResult:

    def test_truthiness_follows_success(self):
        assert ServiceResult(True, 'ok')
        assert not ServiceResult(False, 'nope')
        assert ServiceResult(True, 'ok').obj is None


class TestAddMember:
    """Tests for adding members."""

    def test_tier_and_contribution_snapshot(self, make_member, annual_dues, monthly_levy, tiers):
        member = make_member(age=30)

        assert member.tier == tiers[2]
        assert member.contribution == Decimal('60.00')  # 50 once + 10 for this month
        assert member.name == 'Ngozi Okafor'
        assert member.payments.count() == 0

    @pytest.mark.parametrize('age, index', [(17, 0), (18, 1), (24, 1), (25, 2)])
    def test_tier_boundaries(self, make_member, tiers, age, index):
        assert make_member(age=age).tier == tiers[index]

    def test_monthly_dues_count_elapsed_months(self, make_member, monthly_levy):
        joined = timezone.now() - relativedelta(months=3)
        member = make_member(age=40, join_date=joined)

        assert member.contribution == Decimal('40.00')

    def test_under_18_owes_nothing(self, make_member, annual_dues, monthly_levy):
        assert make_member(age=10).contribution == Decimal('0.00')

    def test_family_by_name_is_created(self, make_member, community):
        member = make_member(family='Okafor')

        assert member.family.name == 'Okafor'
        assert Family.objects.filter(community=community).count() == 1

    def test_existing_family_is_reused(self, make_member, community):
        make_member(first_name='Ngozi', family='Okafor')
        make_member(first_name='Emeka', family=' Okafor ')

        assert Family.objects.filter(community=community).count() == 1
        assert Family.objects.get(community=community).member_count == 2

    def test_future_year_of_birth_rejected(self, service, this_year):
        result = service.add_member({'first_name': 'Baby', 'year_of_birth': this_year + 1, 'gender': 'male'})

        assert not result.success
        assert 'future' in result.message
        assert Member.objects.count() == 0

    def test_blank_first_name_rejected(self, service, this_year):
        result = service.add_member({'first_name': '   ', 'year_of_birth': this_year - 30, 'gender': 'male'})

        assert not result.success
        assert 'First name is required.' in result.message

    def test_missing_year_of_birth_rejected(self, service):
        result = service.add_member({'first_name': 'Ngozi', 'gender': 'female'})

        assert result == ServiceResult(False, "Year of birth: This field is required.")
        assert Member.objects.count() == 0

    @pytest.mark.parametrize('year_of_birth', [None, '  ', 'nineteen-eighty'])
    def test_blank_or_bad_year_of_birth_rejected(self, service, year_of_birth):
        result = service.add_member({'first_name': 'Ngozi', 'year_of_birth': year_of_birth, 'gender': 'female'})

        assert not result.success
        assert result.message.startswith('Year of birth:')
        assert Member.objects.count() == 0


class TestUpdateMember:

    def test_update_recomputes_tier(self, service, make_member, annual_dues, tiers, this_year):
        member = make_member(age=17)
        assert member.contribution == Decimal('0.00')

        result = service.update_member(member, {'year_of_birth': this_year - 20})

        assert result.success
        member.refresh_from_db()
        assert member.tier == tiers[1]
        assert member.contribution == Decimal('50.00')

    def test_update_keeps_payments_and_join_date(self, service, make_member, annual_dues):
        member = make_member()
        service.record_payment(member, annual_dues, Decimal('20'))
        join_date = member.join_date

        result = service.update_member(member, {'first_name': 'Nkechi', 'middle_name': 'Ada'})

        assert result.success
        member.refresh_from_db()
        assert member.name == 'Nkechi Ada Okafor'
        assert member.join_date == join_date
        assert member.payments.count() == 1

    def test_same_values_twice_is_stable(self, service, make_member, annual_dues, monthly_levy):
        member = make_member()
        data = {'first_name': 'Ngozi', 'last_name': 'Okafor', 'gender': 'female'}

        service.update_member(member, data)
        member.refresh_from_db()
        first = (member.tier, member.contribution)
        service.update_member(member, data)
        member.refresh_from_db()

        assert (member.tier, member.contribution) == first

    def test_member_of_other_community_rejected(self, make_member, other_user):
        from accounts.models import Community

        elsewhere = Community.objects.create(name='Elsewhere', owner=other_user)
        member = make_member()

        result = CommunityService(elsewhere).update_member(member, {'first_name': 'X'})

        assert not result.success
        assert result.message == "Member not found in this community."

    def test_none_year_of_birth_rejected(self, service, make_member, this_year):
        member = make_member(age=30)

        result = service.update_member(member, {'year_of_birth': None})

        assert not result.success
        assert 'Year of birth' in result.message
        member.refresh_from_db()
        assert member.year_of_birth == this_year - 30

    def test_none_values_blank_text_and_skip_the_rest(self, service, make_member):
        member = make_member(middle_name='Ada')

        result = service.update_member(member, {'middle_name': None, 'is_patriarch': None})

        assert result.success
        member.refresh_from_db()
        assert member.middle_name == ''
        assert member.is_patriarch is False

    def test_delete_member(self, service, make_member):
        member = make_member()

        result = service.delete_member(member)

        assert result.success
        assert not Member.objects.filter(pk=member.pk).exists()


class TestFamilies:
    """Tests for family add, rename and delete."""

    def test_add_family_trims_name(self, service):
        result = service.add_family('  Okafor  ')

        assert result.success
        assert result.obj.name == 'Okafor'

    def test_add_family_rejects_blank_and_duplicates(self, service):
        service.add_family('Okafor')

        assert service.add_family('   ').message == "Family name cannot be empty."
        assert service.add_family('Okafor').message == 'Family "Okafor" already exists.'

    def test_rename_moves_every_member(self, service, make_member):
        family = service.add_family('Okafor').obj
        first = make_member(first_name='Ngozi', family=family)
        second = make_member(first_name='Emeka', family=family)

        result = service.update_family(family, 'Okafor-Eze')

        assert result.success
        for member in (first, second):
            member.refresh_from_db()
            assert member.family_name == 'Okafor-Eze'
        assert not Family.objects.filter(name='Okafor').exists()

    def test_rename_to_existing_name_rejected(self, service):
        family = service.add_family('Okafor').obj
        service.add_family('Eze')

        result = service.update_family(family, 'Eze')

        assert not result.success
        family.refresh_from_db()
        assert family.name == 'Okafor'

    def test_delete_family_with_members_rejected(self, service, make_member):
        family = service.add_family('Okafor').obj
        make_member(first_name='Ngozi', family=family)
        make_member(first_name='Emeka', family=family)

        result = service.delete_family(family)

        assert not result.success
        assert result.message == "Cannot delete family with 2 member(s)."
        assert Family.objects.filter(pk=family.pk).exists()

    def test_delete_empty_family(self, service):
        family = service.add_family('Okafor').obj

        assert service.delete_family(family).success
        assert not Family.objects.filter(pk=family.pk).exists()


class TestSettingsAndRecalculation:

    def test_update_settings_does_not_touch_members(self, service, make_member, community, tiers):
        member = make_member(age=20)

        result = service.update_settings(tier1_age=16, tier2_age=20)

        assert result.success
        community.refresh_from_db()
        assert (community.tier1_age, community.tier2_age) == (16, 20)
        member.refresh_from_db()
        assert member.tier == tiers[1]

    def test_update_settings_rejects_inverted_ages(self, service, community):
        result = service.update_settings(tier1_age=30, tier2_age=20)

        assert not result.success
        assert 'Tier 2 age must be greater than Tier 1 age.' in result.message
        assert community.tier1_age == 18

    def test_update_settings_rejects_unknown_currency(self, service):
        result = service.update_settings(currency_code='XYZ')

        assert not result.success
        assert 'ISO 4217' in result.message

    def test_update_settings_rejects_unknown_fields(self, service):
        assert not service.update_settings(plan_id='pro').success

    def test_recalculate_applies_new_ages(self, service, make_member):
        member = make_member(age=20)
        service.update_settings(tier1_age=16, tier2_age=20)

        result = service.recalculate_tiers()

        assert result.success
        assert result.obj == 1
        member.refresh_from_db()
        assert member.tier == 'Group 2 (20+)'

    def test_recalculate_is_idempotent(self, service, make_member, annual_dues):
        make_member(age=20)
        make_member(first_name='Emeka', age=40)
        Member.objects.update(contribution=Decimal('0.00'))

        assert service.recalculate_tiers().obj == 2
        assert service.recalculate_tiers().obj == 0

    def test_dry_run_writes_nothing(self, service, make_member, annual_dues):
        member = make_member(age=40)
        Member.objects.filter(pk=member.pk).update(contribution=Decimal('0.00'))

        result = service.recalculate_tiers(dry_run=True)

        assert result.obj == 1
        member.refresh_from_db()
        assert member.contribution == Decimal('0.00')


class TestCommunityTimezone:
    """Month counting follows the community's calendar, not the server's."""

    @pytest.fixture
    def at(self, monkeypatch, community):
        def _at(tz_name, moment):
            community.timezone = tz_name
            community.save()
            monkeypatch.setattr(timezone, 'now', lambda: moment)
        return _at

    @pytest.mark.parametrize('tz_name, moment', [
        # Already Feb 1 in Lagos
        ('Africa/Lagos', datetime(2026, 1, 31, 23, 30, tzinfo=dt_timezone.utc)),
        # Still Jan 31 in Chicago
        ('America/Chicago', datetime(2026, 2, 1, 3, 0, tzinfo=dt_timezone.utc)),
    ])
    def test_join_today_owes_one_month(self, service, make_member, monthly_levy, at, tz_name, moment):
        at(tz_name, moment)

        member = make_member(age=40)

        assert member.contribution == Decimal('10.00')
        assert service.recalculate_tiers().obj == 0

    def test_member_breakdown_counts_local_months(self, make_member, monthly_levy, at):
        at('Africa/Lagos', datetime(2026, 1, 31, 23, 30, tzinfo=dt_timezone.utc))
        member = make_member(age=40)

        [row] = get_member_contribution_breakdown(member, [monthly_levy])

        assert row['expected'] == Decimal('10.00')
        assert [month['date'] for month in row['months']] == [date(2026, 2, 1)]


class TestContributionTemplates:
    """Template changes are followed by a recalculation."""

    def test_add_template_updates_members(self, service, make_member, tiers):
        member = make_member(age=30)

        result = service.add_custom_contribution({
            'name': 'Building Fund',
            'amount': Decimal('100.00'),
            'frequency': 'one-time',
            'tiers': [tiers[2]],
        })

        assert result.success
        member.refresh_from_db()
        assert member.contribution == Decimal('100.00')

    def test_update_template_amount(self, service, make_member, annual_dues):
        member = make_member(age=30)

        service.update_custom_contribution(annual_dues, {'amount': Decimal('75.00')})

        member.refresh_from_db()
        assert member.contribution == Decimal('75.00')

    def test_delete_template_keeps_payments(self, service, make_member, annual_dues):
        member = make_member(age=30)
        payment = service.record_payment(member, annual_dues, Decimal('50')).obj

        result = service.delete_custom_contribution(annual_dues)

        assert result.success
        payment.refresh_from_db()
        assert payment.contribution is None
        assert payment.contribution_name == 'Deleted contribution'
        member.refresh_from_db()
        assert member.contribution == Decimal('0.00')

    def test_blank_name_rejected(self, service):
        result = service.add_custom_contribution({'name': ' ', 'amount': Decimal('1'), 'tiers': []})

        assert not result.success
        assert not CustomContribution.objects.exists()


class TestPayments:

    def test_record_payment(self, service, make_member, annual_dues):
        member = make_member(age=30)

        result = service.record_payment(member, annual_dues, Decimal('20.00'))

        assert result.success
        assert result.message == "Payment of $20.00 for Ngozi Okafor towards Annual Dues has been recorded."
        assert member.paid_amount == Decimal('20.00')
        assert member.balance == Decimal('30.00')
        assert member.payment_status == 'partial'

    def test_zero_amount_rejected(self, service, make_member, annual_dues):
        member = make_member()

        assert not service.record_payment(member, annual_dues, Decimal('0')).success
        assert Payment.objects.count() == 0

    def test_update_and_delete_payment(self, service, make_member, annual_dues):
        member = make_member()
        payment = service.record_payment(member, annual_dues, Decimal('20')).obj

        assert service.update_payment(payment, {'amount': Decimal('50')}).success
        assert member.payment_status == 'paid'

        assert service.delete_payment(payment).success
        assert member.payment_status == 'unpaid'


class TestPatriarch:
    """Tests for patriarch-scoped operations."""

    @pytest.fixture
    def patriarch(self, service, make_member, other_user):
        family = service.add_family('Eze').obj
        return make_member(
            first_name='Obi', last_name='Eze', age=60, gender='male',
            family=family, is_patriarch=True, user=other_user, email=other_user.email,
        )

    def test_patriarch_can_manage_own_family(self, service, patriarch, other_user):
        assert service.is_patriarch_or_admin(other_user, 'Eze')
        assert not service.is_patriarch_or_admin(other_user, 'Okafor')

    def test_owner_is_always_allowed(self, service, owner):
        assert service.is_patriarch_or_admin(owner, 'Anything')

    def test_add_member_as_patriarch(self, service, patriarch, other_user):
        result = service.add_member_as_patriarch(other_user, {
            'first_name': 'Chioma', 'year_of_birth': patriarch.year_of_birth + 30,
            'gender': 'female', 'family': 'Eze', 'role': 'admin',
        })

        assert result.success
        assert result.obj.family == patriarch.family
        assert result.obj.role == 'user'
        assert result.obj.status == 'active'

    def test_add_to_other_family_rejected(self, service, patriarch, other_user):
        service.add_family('Okafor')

        result = service.add_member_as_patriarch(other_user, {
            'first_name': 'Chioma', 'year_of_birth': 2000, 'gender': 'female', 'family': 'Okafor',
        })

        assert not result.success
        assert result.message == "You are not authorized to add members to this family."

    def test_invite_member_as_patriarch(self, service, patriarch, other_user, mailoutbox):
        result = service.invite_member_as_patriarch(other_user, {
            'first_name': 'Chioma', 'last_name': 'Eze', 'email': 'Chioma@Example.com',
            'year_of_birth': patriarch.year_of_birth + 30, 'gender': 'female',
            'family': 'Eze', 'role': 'admin',
        })

        assert result.success
        assert result.message == "Invitation sent to Chioma Eze."
        invitation = result.obj
        assert invitation.email == 'chioma@example.com'
        assert invitation.member.family == patriarch.family
        assert invitation.member.role == 'user'
        assert invitation.member.status == 'invited'
        assert [message.to for message in mailoutbox] == [['chioma@example.com']]

    def test_invite_to_other_family_rejected(self, service, patriarch, other_user, mailoutbox):
        service.add_family('Okafor')

        result = service.invite_member_as_patriarch(other_user, {
            'first_name': 'Chioma', 'email': 'chioma@example.com',
            'year_of_birth': 2000, 'gender': 'female', 'family': 'Okafor',
        })

        assert result == ServiceResult(False, "You are not authorized to invite members to this family.")
        assert not Member.objects.filter(email='chioma@example.com').exists()
        assert mailoutbox == []
