# accounts/signals.py

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver
import logging

from .models import Community, UserProfile

logger = logging.getLogger(__name__)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_profile(sender, instance, created, **kwargs):
    """Every user gets a profile the moment the account exists"""
    if created:
        UserProfile.objects.get_or_create(
            user=instance,
            defaults={'display_name': instance.get_full_name()}
        )
        logger.debug(f"Created profile for user {instance.pk}")


@receiver(post_save, sender=Community)
def publish_settings_on_community_change(sender, instance, created, **kwargs):
    if not created:
        from members import streams
        streams.schedule_publish(instance.pk, streams.SETTINGS)
