# members/signals.py

"""
Members Signals

Every write to a member, payment or family schedules a fresh snapshot of the
matching collection stream once the transaction commits.
"""

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from . import streams
from .models import Member, Family, Payment

logger = logging.getLogger(__name__)


# =============================================================================
# MEMBER SIGNALS
# =============================================================================

@receiver(post_save, sender=Member)
@receiver(post_delete, sender=Member)
def publish_members_on_member_change(sender, instance, **kwargs):
    streams.schedule_publish(instance.community_id, streams.MEMBERS)


@receiver(post_save, sender=Payment)
@receiver(post_delete, sender=Payment)
def publish_members_on_payment_change(sender, instance, **kwargs):
    """Payments travel inside the member snapshot"""
    community_id = (
        Member.objects.filter(pk=instance.member_id)
        .values_list('community_id', flat=True)
        .first()
    )
    if community_id is None:
        logger.debug(f"Payment {instance.pk} has no surviving member; nothing to publish")
        return
    streams.schedule_publish(community_id, streams.MEMBERS)


# =============================================================================
# FAMILY SIGNALS
# =============================================================================

@receiver(post_save, sender=Family)
@receiver(post_delete, sender=Family)
def publish_families_on_family_change(sender, instance, **kwargs):
    streams.schedule_publish(instance.community_id, streams.FAMILIES)
    # Member snapshots carry the family name
    if kwargs.get('created') is False:
        streams.schedule_publish(instance.community_id, streams.MEMBERS)
