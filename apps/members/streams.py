# members/streams.py

"""
Collection streams.

One CollectionStream exists per (community, collection) while somebody is
subscribed to it. Model signals schedule a publish after the surrounding
transaction commits; the stream then loads a fresh snapshot and hands it to
every subscriber.

Collections: 'members', 'families', 'contributions', 'settings'.

Who listens: a CommunityService that has been open()ed. Views build a
service per request without opening it and read straight from the database,
so in the web process streams normally have no subscribers. Long-lived
consumers such as a shell session or a worker holding a service open are
what subscribe. Writes made while nobody is subscribed schedule nothing.

Usage:
    unsubscribe = subscribe(community.id, 'members', lambda snapshot: ...)
    ...
    unsubscribe()
"""

import threading
from contextlib import contextmanager

from django.db import transaction
import logging

logger = logging.getLogger(__name__)

MEMBERS = 'members'
FAMILIES = 'families'
CONTRIBUTIONS = 'contributions'
SETTINGS = 'settings'

COLLECTIONS = (MEMBERS, FAMILIES, CONTRIBUTIONS, SETTINGS)


# =============================================================================
# SNAPSHOT LOADERS
# =============================================================================

def load_members(community_id):
    from members.models import Member
    return list(
        Member.objects.filter(community_id=community_id)
        .select_related('family', 'user')
        .prefetch_related('payments')
        .order_by('name')
    )


def load_families(community_id):
    from members.models import Family
    return list(Family.objects.filter(community_id=community_id).order_by('name'))


def load_contributions(community_id):
    from contributions.models import CustomContribution
    return list(CustomContribution.objects.filter(community_id=community_id).order_by('name'))


def load_settings(community_id):
    from accounts.models import Community
    community = Community.objects.filter(pk=community_id).first()
    return community.settings if community else None


LOADERS = {
    MEMBERS: load_members,
    FAMILIES: load_families,
    CONTRIBUTIONS: load_contributions,
    SETTINGS: load_settings,
}


# =============================================================================
# STREAM
# =============================================================================

class CollectionStream:
    """Observable snapshot of one collection of one community"""

    def __init__(self, community_id, collection):
        if collection not in LOADERS:
            raise ValueError(f"Unknown collection: {collection}")
        self.community_id = community_id
        self.collection = collection
        self._subscribers = []
        self._lock = threading.Lock()

    def __repr__(self):
        return f"<CollectionStream {self.collection} of {self.community_id}>"

    def load(self):
        return LOADERS[self.collection](self.community_id)

    def subscribe(self, callback):
        """Register `callback(snapshot)`; returns a function that unregisters it"""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            self._remove(callback)

        return unsubscribe

    def _remove(self, callback):
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)
            empty = not self._subscribers
        if empty:
            _discard_stream(self)

    @property
    def subscriber_count(self):
        return len(self._subscribers)

    def publish(self):
        """Load a fresh snapshot and deliver it to every subscriber"""
        with self._lock:
            subscribers = list(self._subscribers)
        if not subscribers:
            return None

        snapshot = self.load()
        for callback in subscribers:
            try:
                callback(snapshot)
            except Exception:
                # One broken listener must not starve the others
                logger.exception(f"Subscriber of {self!r} failed")
        return snapshot


# =============================================================================
# REGISTRY
# =============================================================================

_streams = {}
_registry_lock = threading.Lock()
_batch_state = threading.local()


def get_stream(community_id, collection):
    key = (str(community_id), collection)
    with _registry_lock:
        stream = _streams.get(key)
        if stream is None:
            stream = CollectionStream(community_id, collection)
            _streams[key] = stream
        return stream


def _discard_stream(stream):
    key = (str(stream.community_id), stream.collection)
    with _registry_lock:
        if _streams.get(key) is stream and not stream.subscriber_count:
            del _streams[key]


def subscribe(community_id, collection, callback):
    return get_stream(community_id, collection).subscribe(callback)


def has_subscribers(community_id, collection):
    stream = _streams.get((str(community_id), collection))
    return bool(stream and stream.subscriber_count)


def publish(community_id, collection):
    """Publish now (normally called from an on_commit hook)"""
    stream = _streams.get((str(community_id), collection))
    if stream is None:
        return None
    return stream.publish()


def schedule_publish(community_id, collection):
    """
    Publish once the current transaction commits (immediately outside one).
    Inside batch() the publish is deferred and coalesced. Nothing is
    scheduled for a collection nobody is subscribed to.
    """
    pending = getattr(_batch_state, 'pending', None)
    if pending is not None:
        pending.add((str(community_id), collection))
        return

    if not has_subscribers(community_id, collection):
        return

    transaction.on_commit(lambda: publish(community_id, collection))


@contextmanager
def batch():
    """
    Coalesce the publishes of many writes into one per collection.

    Used for multi-row writes such as tier recalculation. Nested batches
    join the outermost one.
    """
    if getattr(_batch_state, 'pending', None) is not None:
        yield
        return

    _batch_state.pending = set()
    try:
        yield
        pending = _batch_state.pending
    finally:
        _batch_state.pending = None

    for community_id, collection in pending:
        schedule_publish(community_id, collection)
