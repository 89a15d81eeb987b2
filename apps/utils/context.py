# utils/context.py

"""
Thread-local request context.

RequestContextMiddleware stores who is making the current request and where it
came from; BaseModel reads it back to stamp audit fields and write AuditLog
rows without every service having to pass the request around.
"""

import threading
from contextlib import contextmanager

_thread_locals = threading.local()


def set_request_context(user=None, ip_address=None, user_agent='', request_path='', session_key=''):
    _thread_locals.context = {
        'user': user,
        'ip_address': ip_address,
        'user_agent': user_agent or '',
        'request_path': request_path or '',
        'session_key': session_key or '',
    }


def get_request_context():
    """Return the context dict for the current thread, or None outside a request."""
    return getattr(_thread_locals, 'context', None)


def clear_request_context():
    if hasattr(_thread_locals, 'context'):
        del _thread_locals.context


@contextmanager
def request_context(user=None, **kwargs):
    """
    Temporarily attribute changes to `user` (management commands, shell).

    Usage:
        with request_context(user=owner, request_path='manage.py recalculate_tiers'):
            ...
    """
    previous = get_request_context()
    set_request_context(user=user, **kwargs)
    try:
        yield get_request_context()
    finally:
        if previous is None:
            clear_request_context()
        else:
            _thread_locals.context = previous
