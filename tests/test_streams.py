"""Tests for collection streams and the live CommunityService collections."""

from decimal import Decimal

import pytest

from members import streams
from members.services import CommunityService


pytestmark = pytest.mark.django_db


class TestCollectionStream:
    """Tests for subscribe / publish / unsubscribe."""

    def test_unknown_collection_rejected(self, community):
        with pytest.raises(ValueError):
            streams.CollectionStream(community.pk, 'loans')

    def test_publish_without_subscribers_is_noop(self, community):
        assert streams.publish(community.pk, streams.FAMILIES) is None

    def test_writes_without_subscribers_schedule_nothing(
        self, service, make_member, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks() as callbacks:
            family = service.add_family('Okafor').obj
            make_member(family=family)
            service.recalculate_tiers()

        assert callbacks == []

    def test_subscriber_receives_snapshot_after_commit(
        self, community, service, django_capture_on_commit_callbacks
    ):
        received = []
        unsubscribe = streams.subscribe(community.pk, streams.FAMILIES, received.append)

        try:
            with django_capture_on_commit_callbacks(execute=True):
                service.add_family('Okafor')
        finally:
            unsubscribe()

        assert len(received) == 1
        assert [family.name for family in received[0]] == ['Okafor']

    def test_unsubscribe_discards_stream(self, community):
        unsubscribe = streams.subscribe(community.pk, streams.MEMBERS, lambda snapshot: None)
        assert streams.has_subscribers(community.pk, streams.MEMBERS)

        unsubscribe()

        assert not streams.has_subscribers(community.pk, streams.MEMBERS)

    def test_broken_subscriber_does_not_block_others(self, community):
        received = []

        def broken(snapshot):
            raise RuntimeError('boom')

        first = streams.subscribe(community.pk, streams.FAMILIES, broken)
        second = streams.subscribe(community.pk, streams.FAMILIES, received.append)
        try:
            streams.publish(community.pk, streams.FAMILIES)
        finally:
            first()
            second()

        assert received == [[]]

    def test_batch_coalesces_publishes(self, community, service, make_member, django_capture_on_commit_callbacks):
        make_member(first_name='Ngozi', age=20)
        make_member(first_name='Emeka', age=21)
        service.update_settings(tier1_age=16, tier2_age=19)

        received = []
        unsubscribe = streams.subscribe(community.pk, streams.MEMBERS, received.append)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                assert service.recalculate_tiers().obj == 2
        finally:
            unsubscribe()

        assert len(received) == 1


class TestLiveService:
    """CommunityService follows its streams while open."""

    def test_closed_service_reads_database(self, service, make_member):
        make_member()

        assert not service.is_open
        assert len(service.members) == 1

    def test_open_service_receives_changes(self, community, owner, make_member, django_capture_on_commit_callbacks):
        events = []
        with CommunityService(community, user=owner) as live:
            live.add_listener(lambda collection, snapshot: events.append(collection))
            assert live.members == []

            with django_capture_on_commit_callbacks(execute=True):
                make_member()

            assert [member.name for member in live.members] == ['Ngozi Okafor']
            assert streams.MEMBERS in events

        assert not live.is_open
        assert not streams.has_subscribers(community.pk, streams.MEMBERS)

    def test_rename_republishes_members(self, community, owner, make_member, django_capture_on_commit_callbacks):
        with CommunityService(community, user=owner) as live:
            with django_capture_on_commit_callbacks(execute=True):
                family = live.add_family('Okafor').obj
                make_member(family=family)

            with django_capture_on_commit_callbacks(execute=True):
                live.update_family(family, 'Okafor-Eze')

            assert [f.name for f in live.families] == ['Okafor-Eze']
            assert live.members[0].family_name == 'Okafor-Eze'

    def test_settings_snapshot_updates_community(self, community, owner, django_capture_on_commit_callbacks):
        with CommunityService(community, user=owner) as live:
            with django_capture_on_commit_callbacks(execute=True):
                live.update_settings(currency='€', currency_code='EUR')

            assert live.settings['currency'] == '€'

    def test_template_changes_reach_contributions(self, community, owner, tiers, django_capture_on_commit_callbacks):
        with CommunityService(community, user=owner) as live:
            with django_capture_on_commit_callbacks(execute=True):
                live.add_custom_contribution({
                    'name': 'Burial Levy',
                    'amount': Decimal('25.00'),
                    'frequency': 'one-time',
                    'tiers': [tiers[2]],
                })

            assert [template.name for template in live.contributions] == ['Burial Levy']
