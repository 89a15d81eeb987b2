# members/services.py

"""
Community Business Logic Services

CommunityService is the single entry point for reading and changing one
community's data:
- Live collections (members, families, contribution templates, settings)
  kept fresh through members.streams
- Member, family, payment and template mutations
- Tier and contribution recalculation
- Patriarch-scoped operations

Every mutation returns a ServiceResult. Expected failures (validation, name
collisions, authorization) come back as success=False with the message to show
the user; database errors are logged and their text returned verbatim.
Views, management commands and tests all construct the service explicitly:

    with CommunityService(community, user=request.user) as service:
        result = service.add_family('Okafor')
"""

from decimal import Decimal
from typing import Any, NamedTuple

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone
import logging

from core.utils import format_money, get_community_today, get_community_timezone
from contributions.models import CustomContribution
from . import streams
from .models import Member, Family, Payment
from .utils import calculate_age, get_tier, get_tier_choices, calculate_contribution

logger = logging.getLogger(__name__)

MEMBER_FIELDS = (
    'first_name', 'middle_name', 'last_name', 'year_of_birth', 'gender',
    'is_patriarch', 'email', 'phone', 'phone_country_code', 'role', 'status',
)

TEMPLATE_FIELDS = ('name', 'amount', 'description', 'frequency', 'tiers')

SETTINGS_FIELDS = ('tier1_age', 'tier2_age', 'currency', 'currency_code')

# Blanked rather than skipped when a caller passes None
TEXT_FIELDS = ('first_name', 'middle_name', 'last_name', 'email', 'phone', 'phone_country_code')


class ServiceResult(NamedTuple):
    success: bool
    message: str
    obj: Any = None

    def __bool__(self):
        return self.success


def clean_year_of_birth(value):
    """Year of birth as an int; ValidationError when missing or not a number"""
    if value is None or str(value).strip() == '':
        raise ValidationError({'year_of_birth': "This field is required."})
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError({'year_of_birth': "Enter a whole number."})


def validation_message(error):
    """Flatten a ValidationError into one user-facing sentence"""
    if hasattr(error, 'message_dict'):
        messages = []
        for field, field_messages in error.message_dict.items():
            prefix = '' if field == '__all__' else f"{field.replace('_', ' ').capitalize()}: "
            messages.extend(f"{prefix}{message}" for message in field_messages)
        return ' '.join(messages)
    return ' '.join(error.messages)


# =============================================================================
# COMMUNITY SERVICE
# =============================================================================

class CommunityService:
    """Aggregates and mutates the data of one community"""

    def __init__(self, community, user=None):
        self.community = community
        self.user = user
        self._collections = {}
        self._unsubscribers = []
        self._listeners = []

    def __repr__(self):
        return f"<CommunityService {self.community} open={self.is_open}>"

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    @property
    def is_open(self):
        return bool(self._unsubscribers)

    def open(self):
        """Load the initial snapshots and follow every collection stream"""
        if self.is_open:
            return self

        for collection in streams.COLLECTIONS:
            stream = streams.get_stream(self.community.pk, collection)
            self._collections[collection] = stream.load()
            self._unsubscribers.append(
                stream.subscribe(lambda snapshot, name=collection: self._receive(name, snapshot))
            )

        logger.debug(f"Opened {self!r}")
        return self

    def close(self):
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._collections = {}
        logger.debug(f"Closed service for community {self.community.pk}")

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def add_listener(self, callback):
        """`callback(collection, snapshot)` after each pushed snapshot"""
        self._listeners.append(callback)

    def _receive(self, collection, snapshot):
        self._collections[collection] = snapshot
        if collection == streams.SETTINGS and snapshot:
            for field, value in snapshot.items():
                setattr(self.community, field, value)
        for callback in list(self._listeners):
            callback(collection, snapshot)

    def _collection(self, name):
        if name in self._collections:
            return self._collections[name]
        return streams.LOADERS[name](self.community.pk)

    # -------------------------------------------------------------------------
    # LIVE COLLECTIONS
    # -------------------------------------------------------------------------

    @property
    def members(self):
        return self._collection(streams.MEMBERS)

    @property
    def families(self):
        return self._collection(streams.FAMILIES)

    @property
    def contributions(self):
        return self._collection(streams.CONTRIBUTIONS)

    @property
    def settings(self):
        return self._collection(streams.SETTINGS) or self.community.settings

    @property
    def tier_choices(self):
        return get_tier_choices(self.community.tier1_age, self.community.tier2_age)

    # -------------------------------------------------------------------------
    # CALCULATOR SHORTCUTS
    # -------------------------------------------------------------------------

    def today(self):
        return get_community_today(self.community)

    def local_timezone(self):
        return get_community_timezone(self.community)

    def get_tier(self, age):
        return get_tier(age, self.community.tier1_age, self.community.tier2_age)

    def _templates(self):
        """Templates read from the database; mutations never trust the cache"""
        return list(CustomContribution.objects.filter(community=self.community))

    def compute_dues(self, year_of_birth, join_date, templates=None):
        """(tier, contribution) for a member born in `year_of_birth`"""
        today = self.today()
        tier = self.get_tier(calculate_age(year_of_birth, today))
        contribution = calculate_contribution(
            tier,
            join_date,
            self._templates() if templates is None else templates,
            today,
            self.local_timezone(),
        )
        return tier, contribution

    def _fail(self, action, error):
        if isinstance(error, ValidationError):
            message = validation_message(error)
            logger.warning(f"{action} rejected in community {self.community.pk}: {message}")
        else:
            message = str(error)
            logger.error(f"{action} failed in community {self.community.pk}: {message}", exc_info=True)
        return ServiceResult(False, message)

    # =========================================================================
    # MEMBERS
    # =========================================================================

    def _resolve_family(self, family):
        """Family instance, family name (created when new) or None"""
        if family is None or isinstance(family, Family):
            if family is not None and family.community_id != self.community.pk:
                raise ValidationError({'family': "Family belongs to a different community."})
            return family

        name = str(family).strip()
        if not name:
            return None
        family, created = Family.objects.get_or_create(community=self.community, name=name)
        if created:
            logger.info(f"Created family '{name}' while adding a member to community {self.community.pk}")
        return family

    def add_member(self, data):
        """
        Add a member: age from year of birth, tier from age and settings,
        contribution from the templates, join date now, no payments.

        Args:
            data: dict with first_name, middle_name, last_name, year_of_birth,
                  gender, family (Family, name or None), is_patriarch, email,
                  phone, phone_country_code and optionally role, status, user

        Returns:
            ServiceResult with the new Member as obj
        """
        try:
            year_of_birth = clean_year_of_birth(data.get('year_of_birth'))
            with transaction.atomic():
                family = self._resolve_family(data.get('family'))
                join_date = data.get('join_date') or timezone.now()
                tier, contribution = self.compute_dues(year_of_birth, join_date)
                fields = {field: data[field] for field in MEMBER_FIELDS if data.get(field) is not None}
                fields['year_of_birth'] = year_of_birth

                member = Member(
                    community=self.community,
                    family=family,
                    tier=tier,
                    contribution=contribution,
                    join_date=join_date,
                    user=data.get('user'),
                    **fields
                )
                member.save()
        except (ValidationError, DatabaseError) as e:
            return self._fail('Add member', e)

        logger.info(f"Member {member.name} added to community {self.community.pk} in tier '{tier}'")
        return ServiceResult(True, f"{member.name} has been added.", member)

    def update_member(self, member, data):
        """
        Replace the member's editable fields and recompute name, tier and
        contribution from them. Payments, join date and account link are kept.
        Last write wins.
        """
        if member.community_id != self.community.pk:
            return ServiceResult(False, "Member not found in this community.")

        try:
            with transaction.atomic():
                member = Member.objects.select_for_update().get(pk=member.pk)

                for field in MEMBER_FIELDS:
                    if field not in data:
                        continue
                    value = data[field]
                    if field == 'year_of_birth':
                        value = clean_year_of_birth(value)
                    elif value is None:
                        if field not in TEXT_FIELDS:
                            continue
                        value = ''
                    setattr(member, field, value)
                if 'family' in data:
                    member.family = self._resolve_family(data['family'])

                member.tier, member.contribution = self.compute_dues(member.year_of_birth, member.join_date)
                member.save()
        except Member.DoesNotExist:
            return ServiceResult(False, "Member not found in this community.")
        except (ValidationError, DatabaseError) as e:
            return self._fail('Update member', e)

        logger.info(f"Member {member.pk} updated in community {self.community.pk}")
        return ServiceResult(True, f"{member.name}'s details have been updated.", member)

    def delete_member(self, member):
        if member.community_id != self.community.pk:
            return ServiceResult(False, "Member not found in this community.")

        name = member.name or 'Member'
        try:
            with transaction.atomic():
                member.delete()
        except DatabaseError as e:
            return self._fail('Delete member', e)

        logger.info(f"Member {name} removed from community {self.community.pk}")
        return ServiceResult(True, f"{name} has been removed.")

    # =========================================================================
    # FAMILIES
    # =========================================================================

    def add_family(self, name):
        trimmed = (name or '').strip()
        if not trimmed:
            return ServiceResult(False, "Family name cannot be empty.")

        if Family.objects.filter(community=self.community, name=trimmed).exists():
            return ServiceResult(False, f'Family "{trimmed}" already exists.')

        try:
            with transaction.atomic():
                family = Family.objects.create(community=self.community, name=trimmed)
        except DatabaseError as e:
            return self._fail('Add family', e)

        logger.info(f"Family '{trimmed}' created in community {self.community.pk}")
        return ServiceResult(True, f'The "{trimmed}" family has been added.', family)

    def update_family(self, family, new_name):
        """
        Rename a family. Members reference the family row, so they follow the
        rename without being rewritten; the member stream is republished in the
        same commit so views show the new name.
        """
        if family.community_id != self.community.pk:
            return ServiceResult(False, "Family not found in this community.")

        trimmed = (new_name or '').strip()
        if not trimmed:
            return ServiceResult(False, "Family name cannot be empty.")

        collision = Family.objects.filter(community=self.community, name=trimmed).exclude(pk=family.pk)
        if collision.exists():
            return ServiceResult(False, f'Family "{trimmed}" already exists.')

        old_name = family.name
        try:
            with transaction.atomic(), streams.batch():
                family.name = trimmed
                family.save(update_fields=['name'])
        except DatabaseError as e:
            family.name = old_name
            return self._fail('Rename family', e)

        logger.info(f"Family '{old_name}' renamed to '{trimmed}' in community {self.community.pk}")
        return ServiceResult(True, f'Family "{old_name}" has been renamed to "{trimmed}".', family)

    def delete_family(self, family):
        if family.community_id != self.community.pk:
            return ServiceResult(False, "Family not found in this community.")

        member_count = family.members.count()
        if member_count:
            logger.warning(f"Refused to delete family '{family.name}' with {member_count} member(s)")
            return ServiceResult(False, f"Cannot delete family with {member_count} member(s).")

        name = family.name
        try:
            with transaction.atomic():
                family.delete()
        except DatabaseError as e:
            return self._fail('Delete family', e)

        logger.info(f"Family '{name}' deleted from community {self.community.pk}")
        return ServiceResult(True, f'The "{name}" family has been removed.')

    # =========================================================================
    # SETTINGS & RECALCULATION
    # =========================================================================

    def update_settings(self, **fields):
        """
        Update tier ages and currency. Member tiers are not touched; call
        recalculate_tiers() to apply new ages.
        """
        unknown = set(fields) - set(SETTINGS_FIELDS)
        if unknown:
            return ServiceResult(False, f"Unknown setting(s): {', '.join(sorted(unknown))}")

        community = self.community
        previous = {field: getattr(community, field) for field in fields}

        for field, value in fields.items():
            setattr(community, field, value)

        try:
            community.full_clean(exclude=['owner', 'slug'])
            with transaction.atomic():
                community.save(update_fields=list(fields) + ['updated_at'])
        except (ValidationError, DatabaseError) as e:
            for field, value in previous.items():
                setattr(community, field, value)
            return self._fail('Update settings', e)

        logger.info(f"Settings updated for community {community.pk}: {fields}")
        return ServiceResult(True, "Membership settings have been saved.", community)

    def recalculate_tiers(self, dry_run=False):
        """
        Recompute tier and contribution for every member from year of birth,
        join date and the current templates. Only members whose values changed
        are written, in a single transaction.

        Returns:
            ServiceResult whose obj is the number of members (to be) updated
        """
        try:
            with transaction.atomic(), streams.batch():
                templates = self._templates()
                today = self.today()
                tz = self.local_timezone()
                updated = 0

                members = Member.objects.filter(community=self.community).select_for_update()
                for member in members:
                    tier = self.get_tier(calculate_age(member.year_of_birth, today))
                    contribution = calculate_contribution(tier, member.join_date, templates, today, tz)

                    if member.tier == tier and member.contribution == contribution:
                        continue

                    updated += 1
                    if dry_run:
                        logger.info(
                            f"[dry-run] {member.name}: {member.tier} -> {tier}, "
                            f"{member.contribution} -> {contribution}"
                        )
                        continue

                    member.tier = tier
                    member.contribution = Decimal(contribution)
                    member.set_change_reason('Tier recalculation')
                    member.save(update_fields=['tier', 'contribution', 'change_reason'])
        except DatabaseError as e:
            return self._fail('Recalculate tiers', e)

        logger.info(
            f"Recalculated tiers for community {self.community.pk}: "
            f"{updated} member(s) {'would change' if dry_run else 'updated'}"
        )
        return ServiceResult(
            True,
            "All member groups and default contributions have been recalculated.",
            updated
        )

    # =========================================================================
    # CONTRIBUTION TEMPLATES
    # =========================================================================

    def _after_template_change(self, result):
        recalculation = self.recalculate_tiers()
        if not recalculation.success:
            return ServiceResult(True, f"{result.message} {recalculation.message}", result.obj)
        return result

    def add_custom_contribution(self, data):
        try:
            with transaction.atomic():
                template = CustomContribution(
                    community=self.community,
                    **{field: data[field] for field in TEMPLATE_FIELDS if field in data}
                )
                template.save()
        except (ValidationError, DatabaseError) as e:
            return self._fail('Add template', e)

        logger.info(f"Template '{template.name}' added to community {self.community.pk}")
        return self._after_template_change(ServiceResult(True, f'"{template.name}" has been added.', template))

    def update_custom_contribution(self, template, data):
        if template.community_id != self.community.pk:
            return ServiceResult(False, "Template not found in this community.")

        try:
            with transaction.atomic():
                for field in TEMPLATE_FIELDS:
                    if field in data:
                        setattr(template, field, data[field])
                template.save()
        except (ValidationError, DatabaseError) as e:
            template.refresh_from_db()
            return self._fail('Update template', e)

        logger.info(f"Template {template.pk} updated in community {self.community.pk}")
        return self._after_template_change(ServiceResult(True, f'"{template.name}" has been updated.', template))

    def delete_custom_contribution(self, template):
        """Delete a template; payments made against it stay, detached"""
        if template.community_id != self.community.pk:
            return ServiceResult(False, "Template not found in this community.")

        name = template.name or 'Template'
        try:
            with transaction.atomic():
                template.delete()
        except DatabaseError as e:
            return self._fail('Delete template', e)

        logger.info(f"Template '{name}' deleted from community {self.community.pk}")
        return self._after_template_change(ServiceResult(True, f'"{name}" has been removed.'))

    # =========================================================================
    # PAYMENTS
    # =========================================================================

    def record_payment(self, member, contribution, amount, date=None, month=None):
        if member.community_id != self.community.pk:
            return ServiceResult(False, "Member not found in this community.")
        if contribution is not None and contribution.community_id != self.community.pk:
            return ServiceResult(False, "Contribution not found in this community.")

        try:
            with transaction.atomic():
                payment = Payment(
                    member=member,
                    contribution=contribution,
                    amount=amount,
                    date=date or self.today(),
                    month=month,
                )
                payment.save()
        except (ValidationError, DatabaseError) as e:
            return self._fail('Record payment', e)

        contribution_name = contribution.name if contribution else 'Contribution'
        logger.info(f"Payment {payment.pk} of {amount} recorded for member {member.pk}")
        return ServiceResult(
            True,
            f"Payment of {format_money(payment.amount, self.community.currency)} for {member.name} "
            f"towards {contribution_name} has been recorded.",
            payment
        )

    def update_payment(self, payment, data):
        if payment.member.community_id != self.community.pk:
            return ServiceResult(False, "Payment not found in this community.")

        try:
            with transaction.atomic():
                for field in ('contribution', 'amount', 'date', 'month'):
                    if field in data:
                        setattr(payment, field, data[field])
                payment.save()
        except (ValidationError, DatabaseError) as e:
            payment.refresh_from_db()
            return self._fail('Update payment', e)

        logger.info(f"Payment {payment.pk} updated")
        return ServiceResult(True, "Payment details have been updated.", payment)

    def delete_payment(self, payment):
        if payment.member.community_id != self.community.pk:
            return ServiceResult(False, "Payment not found in this community.")

        try:
            with transaction.atomic():
                payment.delete()
        except DatabaseError as e:
            return self._fail('Delete payment', e)

        logger.info(f"Payment removed from member {payment.member_id}")
        return ServiceResult(True, "The payment has been removed.")

    # =========================================================================
    # INVITATIONS
    # =========================================================================

    def invite_member(self, data, request=None, send_email=True):
        from invitations.services import InvitationService
        return InvitationService.invite_member(
            self.community, data, inviter=self.user, request=request, send_email=send_email
        )

    def get_invite_link(self, member, request=None):
        from invitations.services import InvitationService
        return InvitationService.get_invite_link(self.community, member, request=request)

    # =========================================================================
    # PATRIARCH OPERATIONS
    # =========================================================================

    def is_patriarch_or_admin(self, user, family):
        """
        True when `user` owns or administers the community, or is the
        patriarch of `family` (a Family or a family name).
        """
        if user is None or not user.is_authenticated:
            return False

        if self.community.owner_id == user.pk:
            return True

        caller = Member.objects.filter(community=self.community, user=user).select_related('family').first()
        if caller is None:
            logger.warning(f"User {user.pk} is not a member of community {self.community.pk}")
            return False

        if caller.role in ('owner', 'admin'):
            return True

        family_name = family.name if isinstance(family, Family) else str(family or '').strip()
        if caller.is_patriarch and caller.family_id and caller.family.name == family_name:
            return True

        logger.warning(f"User {user.pk} is not an admin or the patriarch of family '{family_name}'")
        return False

    def add_member_as_patriarch(self, user, data):
        """Add an active 'user' member to the caller's family"""
        if not data.get('family'):
            return ServiceResult(False, "Missing required fields for adding a member.")

        if not self.is_patriarch_or_admin(user, data['family']):
            return ServiceResult(False, "You are not authorized to add members to this family.")

        family = data['family']
        if not isinstance(family, Family):
            family = Family.objects.filter(community=self.community, name=str(family).strip()).first()
            if family is None:
                return ServiceResult(False, "Family not found in this community.")

        result = self.add_member({
            **data,
            'family': family,
            'role': 'user',
            'status': 'active',
            'is_patriarch': False,
            'user': None,
        })
        if result.success:
            return ServiceResult(True, f"{result.obj.name} has been added to the family.", result.obj)
        return result

    def invite_member_as_patriarch(self, user, data, request=None):
        if not data.get('family') or not data.get('email'):
            return ServiceResult(False, "Missing required fields for invitation.")

        if not self.is_patriarch_or_admin(user, data['family']):
            return ServiceResult(False, "You are not authorized to invite members to this family.")

        from invitations.services import InvitationService
        result = InvitationService.invite_member(
            self.community,
            {**data, 'role': 'user'},
            inviter=user,
            request=request,
            send_email=True,
        )
        if result.success and result.obj.email_sent:
            invitation = result.obj
            return ServiceResult(True, f"Invitation sent to {invitation.member.name}.", invitation)
        return result
