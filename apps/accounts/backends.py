# accounts/backends.py

from datetime import timedelta

from django.conf import settings
from django.contrib.auth.backends import ModelBackend
from django.contrib.auth import get_user_model
from django.db.models import Q
from django.utils import timezone
import logging

from utils.middleware import get_client_ip

logger = logging.getLogger(__name__)

User = get_user_model()


class EmailAuthBackend(ModelBackend):
    """
    Authentication backend that:
    - Allows sign-in with email or username
    - Locks the account for a while after repeated failed attempts
    - Records the last sign-in on the UserProfile
    """

    def authenticate(self, request, username=None, password=None, email=None, **kwargs):
        login_field = email or username

        if login_field is None or password is None:
            return None

        user = User.objects.filter(
            Q(email__iexact=login_field) | Q(username__iexact=login_field)
        ).select_related('profile').first()

        ip_address = get_client_ip(request) if request is not None else 'Unknown'

        if not user:
            # Run the default password hasher to reduce timing difference
            User().set_password(password)
            logger.warning(f"Sign-in attempt for unknown user: {login_field} from IP: {ip_address}")
            return None

        profile = getattr(user, 'profile', None)

        if profile and profile.account_locked_until:
            if timezone.now() < profile.account_locked_until:
                logger.warning(f"Sign-in attempt for locked account: {user.email} from IP: {ip_address}")
                return None
            profile.account_locked_until = None
            profile.failed_login_attempts = 0
            profile.save(update_fields=['account_locked_until', 'failed_login_attempts'])

        if not user.is_active:
            logger.warning(f"Sign-in attempt for inactive account: {user.email}")
            return None

        if user.check_password(password):
            if profile:
                profile.failed_login_attempts = 0
                profile.account_locked_until = None
                profile.last_login_at = timezone.now()
                profile.last_activity = profile.last_login_at
                profile.save(update_fields=[
                    'failed_login_attempts',
                    'account_locked_until',
                    'last_login_at',
                    'last_activity',
                ])
            logger.info(f"Successful sign-in: {user.email}")
            return user

        if profile:
            profile.failed_login_attempts += 1
            if profile.failed_login_attempts >= settings.LOGIN_MAX_FAILED_ATTEMPTS:
                profile.account_locked_until = timezone.now() + timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES)
            profile.save(update_fields=['failed_login_attempts', 'account_locked_until'])
            logger.warning(
                f"Failed sign-in for {user.email}. "
                f"Attempt {profile.failed_login_attempts} from IP: {ip_address}"
            )
        return None

    def get_user(self, user_id):
        try:
            return User.objects.get(pk=user_id)
        except User.DoesNotExist:
            return None
