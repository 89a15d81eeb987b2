# contributions/signals.py

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from members import streams
from .models import CustomContribution


@receiver(post_save, sender=CustomContribution)
@receiver(post_delete, sender=CustomContribution)
def publish_contributions_on_change(sender, instance, **kwargs):
    streams.schedule_publish(instance.community_id, streams.CONTRIBUTIONS)
