# core/decorators.py

from functools import wraps

from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404
import logging

from accounts.models import Community
from core.utils import create_error_response

logger = logging.getLogger(__name__)


def community_required(view_func=None, *, admin=False):
    """
    Resolve `community_id` from the URL and check the user belongs to it.

    The wrapped view receives the Community instead of the id; the caller's
    role is available as request.community_role. With admin=True only owners
    and admins get through; HTMX callers get a SweetAlert error instead of 403.

    Usage:
        @community_required
        def member_list(request, community): ...

        @community_required(admin=True)
        def settings_view(request, community): ...
    """
    def decorator(func):
        @wraps(func)
        @login_required
        def wrapper(request, community_id, *args, **kwargs):
            community = get_object_or_404(Community, pk=community_id)
            role = community.get_role(request.user)

            if role is None:
                logger.warning(f"User {request.user.pk} denied access to community {community.pk}")
                raise PermissionDenied("You are not a member of this community.")

            if admin and role not in ('owner', 'admin'):
                logger.warning(f"User {request.user.pk} ({role}) denied admin action in community {community.pk}")
                if request.headers.get('HX-Request'):
                    return create_error_response(
                        "Only owners and admins can do this.",
                        title='Not Allowed'
                    )
                raise PermissionDenied("Only owners and admins can do this.")

            request.community = community
            request.community_role = role
            return func(request, community, *args, **kwargs)

        return wrapper

    if view_func is not None:
        return decorator(view_func)
    return decorator
