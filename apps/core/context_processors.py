# core/context_processors.py

import logging

logger = logging.getLogger(__name__)


def active_community(request):
    """
    Provides the community the current page belongs to (set by
    community_required) and the caller's role in it, for the navigation.
    """
    community = getattr(request, 'community', None)
    role = getattr(request, 'community_role', None)

    context = {
        'active_community': community,
        'community_role': role,
        'is_community_admin': role in ('owner', 'admin'),
        'community_currency': None,
    }

    if community is not None:
        context['community_currency'] = community.currency

    return context
