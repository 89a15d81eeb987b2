"""Pytest configuration and fixtures."""

from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.utils import timezone

from accounts.models import Community
from contributions.models import CustomContribution
from members.services import CommunityService
from members.utils import get_tier_choices


@pytest.fixture
def owner(db):
    """Community owner account."""
    return User.objects.create_user(
        username='chair',
        email='chair@example.com',
        password='s3cure-pass-123',
        first_name='Chidi',
        last_name='Okafor',
    )


@pytest.fixture
def other_user(db):
    """A signed-up user who belongs to no community."""
    return User.objects.create_user(
        username='ada',
        email='ada@example.com',
        password='s3cure-pass-123',
        first_name='Ada',
        last_name='Eze',
    )


@pytest.fixture
def community(owner):
    """Community with default tiers (18 / 25) and no templates."""
    return Community.objects.create(
        name='Umunna Houston',
        owner=owner,
        tier1_age=18,
        tier2_age=25,
        currency='$',
        currency_code='USD',
    )


@pytest.fixture
def service(community, owner):
    return CommunityService(community, user=owner)


@pytest.fixture
def tiers(community):
    """(under, group1, group2) labels for the community settings."""
    return tuple(get_tier_choices(community.tier1_age, community.tier2_age))


@pytest.fixture
def this_year():
    return timezone.localdate().year


@pytest.fixture
def annual_dues(community, tiers):
    """One-time template for both adult groups."""
    return CustomContribution.objects.create(
        community=community,
        name='Annual Dues',
        amount=Decimal('50.00'),
        frequency='one-time',
        tiers=[tiers[1], tiers[2]],
    )


@pytest.fixture
def monthly_levy(community, tiers):
    """Monthly template for Group 2 only."""
    return CustomContribution.objects.create(
        community=community,
        name='Monthly Levy',
        amount=Decimal('10.00'),
        frequency='monthly',
        tiers=[tiers[2]],
    )


@pytest.fixture
def make_member(service, this_year):
    """Factory adding a member through the service."""

    def _make(first_name='Ngozi', age=30, **extra):
        data = {
            'first_name': first_name,
            'last_name': extra.pop('last_name', 'Okafor'),
            'year_of_birth': this_year - age,
            'gender': extra.pop('gender', 'female'),
        }
        data.update(extra)
        result = service.add_member(data)
        assert result.success, result.message
        return result.obj

    return _make


@pytest.fixture
def owner_member(make_member, owner):
    """The owner's own member row, as create_community would add it."""
    return make_member(
        first_name='Chidi',
        age=50,
        gender='male',
        email=owner.email,
        role='owner',
        user=owner,
    )
