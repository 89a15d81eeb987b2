# utils/middleware.py

import logging

from .context import set_request_context, clear_request_context

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Real client IP, honouring X-Forwarded-For when behind a proxy."""
    forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded_for:
        return forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


class RequestContextMiddleware:
    """Populate the thread-local audit context for the duration of a request."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        user = getattr(request, 'user', None)
        if user is not None and not user.is_authenticated:
            user = None

        session = getattr(request, 'session', None)

        set_request_context(
            user=user,
            ip_address=get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT', '')[:255],
            request_path=request.path[:255],
            session_key=(session.session_key or '') if session is not None else '',
        )
        try:
            return self.get_response(request)
        finally:
            clear_request_context()
