# core/services.py

"""
Community lifecycle: creating a community with its owner's member row and
choosing the community a user lands in after sign-in.
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction, DatabaseError
import logging

from accounts.models import Community, UserProfile
from members.services import CommunityService, ServiceResult, validation_message

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES = (
    {
        'name': 'Annual Dues',
        'amount': Decimal('50.00'),
        'frequency': 'one-time',
        'description': 'Yearly membership dues',
        'groups': ('group1', 'group2'),
    },
    {
        'name': 'Monthly Levy',
        'amount': Decimal('10.00'),
        'frequency': 'monthly',
        'description': 'Monthly contribution for adult members',
        'groups': ('group2',),
    },
)


def create_community(owner, data, with_default_templates=False):
    """
    Create a community owned by `owner`.

    The owner also gets an active member row with role 'owner' and, when they
    have no primary community yet, the new community becomes their primary one.

    Args:
        owner: User
        data: dict with name and optionally country, timezone, tier1_age,
              tier2_age, currency, currency_code, year_of_birth, gender
        with_default_templates: also add the starter contribution templates

    Returns:
        ServiceResult with the Community as obj
    """
    name = (data.get('name') or '').strip()
    if not name:
        return ServiceResult(False, "Please enter a name for your community.")

    try:
        with transaction.atomic():
            community = Community(
                name=name,
                owner=owner,
                **{
                    field: data[field]
                    for field in ('country', 'timezone', 'tier1_age', 'tier2_age', 'currency', 'currency_code')
                    if data.get(field) not in (None, '')
                }
            )
            community.full_clean(exclude=['slug'])
            community.save()

            service = CommunityService(community, user=owner)
            if with_default_templates:
                _add_default_templates(service)

            result = service.add_member({
                'first_name': owner.first_name or owner.get_username(),
                'last_name': owner.last_name,
                'email': owner.email,
                'year_of_birth': data.get('year_of_birth') or service.today().year - community.tier2_age,
                'gender': data.get('gender') or 'male',
                'role': 'owner',
                'status': 'active',
                'user': owner,
            })
            if not result.success:
                raise ValidationError(result.message)

            profile = get_profile(owner)
            if profile.primary_community_id is None:
                profile.primary_community = community
                profile.save(update_fields=['primary_community', 'updated_at'])
    except ValidationError as e:
        logger.warning(f"Community creation for user {owner.pk} rejected: {validation_message(e)}")
        return ServiceResult(False, validation_message(e))
    except DatabaseError as e:
        logger.error(f"Community creation for user {owner.pk} failed: {e}", exc_info=True)
        return ServiceResult(False, "Could not create your community. Please try again.")

    logger.info(f"Community '{community.name}' ({community.pk}) created by user {owner.pk}")
    return ServiceResult(True, f"{community.name} has been created.", community)


def _add_default_templates(service):
    group1, group2 = service.tier_choices[1:]
    labels = {'group1': group1, 'group2': group2}
    for template in DEFAULT_TEMPLATES:
        result = service.add_custom_contribution({
            'name': template['name'],
            'amount': template['amount'],
            'frequency': template['frequency'],
            'description': template['description'],
            'tiers': [labels[group] for group in template['groups']],
        })
        if not result.success:
            raise ValidationError(result.message)


def get_profile(user):
    """user.profile, created when missing; writes go through the cached instance"""
    try:
        return user.profile
    except UserProfile.DoesNotExist:
        return UserProfile.objects.create(user=user)


def set_primary_community(user, community):
    if not community.has_member(user):
        return ServiceResult(False, "You are not a member of this community.")

    profile = get_profile(user)
    profile.primary_community = community
    profile.save(update_fields=['primary_community', 'updated_at'])

    logger.info(f"User {user.pk} set primary community to {community.pk}")
    return ServiceResult(
        True,
        "You will be directed here automatically next time you sign in.",
        community
    )


def get_landing_community(user):
    """
    Where a signed-in user lands: the primary community if it is still one of
    theirs, else their only community, else None (create or choose one).
    """
    profile = getattr(user, 'profile', None)
    memberships = list(profile.memberships) if profile else []

    if profile and profile.primary_community_id:
        for community in memberships:
            if community.pk == profile.primary_community_id:
                return community

    if len(memberships) == 1:
        return memberships[0]
    return None
