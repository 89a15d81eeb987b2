"""Tests for management commands."""

from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from accounts.models import Community
from contributions.models import CustomContribution
from members.models import Member
from utils.models import AuditLog


pytestmark = pytest.mark.django_db


def run(*args):
    out = StringIO()
    call_command(*args, stdout=out, stderr=StringIO())
    return out.getvalue()


class TestRecalculateTiers:

    def test_requires_target(self):
        with pytest.raises(CommandError, match='--community or --all'):
            run('recalculate_tiers')

    def test_unknown_community(self):
        with pytest.raises(CommandError, match='not found'):
            run('recalculate_tiers', '--community', 'no-such-slug')

    def test_by_slug(self, community, make_member, annual_dues):
        member = make_member(age=40)
        Member.objects.filter(pk=member.pk).update(contribution=Decimal('0.00'))

        output = run('recalculate_tiers', '--community', community.slug)

        assert '1 member(s) updated' in output
        member.refresh_from_db()
        assert member.contribution == Decimal('50.00')
        entry = AuditLog.objects.get(object_id=str(member.pk), action='UPDATE')
        assert entry.request_path == 'manage.py recalculate_tiers'
        assert entry.change_reason == 'Tier recalculation'

    def test_all_dry_run(self, community, make_member, annual_dues):
        member = make_member(age=40)
        Member.objects.filter(pk=member.pk).update(contribution=Decimal('0.00'))

        output = run('recalculate_tiers', '--all', '--dry-run')

        assert 'DRY RUN' in output
        assert '1 member(s) would be updated' in output
        member.refresh_from_db()
        assert member.contribution == Decimal('0.00')


class TestInitializeCommunity:

    def test_creates_community_with_templates(self, owner):
        output = run('initialize_community', '--name', 'Umuada Dallas', '--owner', 'chair@example.com',
                     '--currency', '$', '--currency-code', 'usd', '--year-of-birth', '1970')

        community = Community.objects.get(name='Umuada Dallas')
        assert "Created 'Umuada Dallas'" in output
        assert community.owner == owner
        assert community.currency_code == 'USD'
        assert set(CustomContribution.objects.filter(community=community).values_list('name', flat=True)) == {
            'Annual Dues', 'Monthly Levy',
        }

        owner_member = Member.objects.get(community=community, user=owner)
        assert owner_member.role == 'owner'
        assert owner_member.contribution == Decimal('60.00')  # both templates, joined this month

    def test_without_templates(self, owner):
        run('initialize_community', '--name', 'Umuada Dallas', '--owner', 'chair', '--no-templates')

        assert not CustomContribution.objects.exists()

    def test_unknown_owner(self, db):
        with pytest.raises(CommandError, match="User 'ghost@example.com' not found"):
            run('initialize_community', '--name', 'X', '--owner', 'ghost@example.com')

    def test_invalid_settings(self, owner):
        with pytest.raises(CommandError, match='Tier 2 age'):
            run('initialize_community', '--name', 'X', '--owner', 'chair', '--tier1-age', '30', '--tier2-age', '20')

        assert not Community.objects.exists()
