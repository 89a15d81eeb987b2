# accounts/context_processors.py

import logging

logger = logging.getLogger(__name__)


def user_context(request):
    """
    Provides user-specific context: names, avatar and community memberships.
    """
    context = {}

    if not request.user.is_authenticated:
        return context

    profile = getattr(request.user, 'profile', None)

    context['user_first_name'] = request.user.first_name
    context['user_last_name'] = request.user.last_name
    context['user_full_name'] = request.user.get_full_name()
    context['user_email'] = request.user.email

    if profile:
        context['user_display_name'] = profile.display_name or request.user.get_full_name() or request.user.email
        context['user_profile_pic'] = profile.photo_url
        context['user_initials'] = profile.initials
        context['user_memberships'] = profile.memberships
        context['user_primary_community'] = profile.primary_community
    else:
        logger.warning(f"User {request.user.pk} has no profile")
        context['user_display_name'] = request.user.get_full_name() or request.user.email
        context['user_profile_pic'] = None
        context['user_initials'] = (request.user.email or request.user.username or '?')[:1].upper()
        context['user_memberships'] = []
        context['user_primary_community'] = None

    return context
