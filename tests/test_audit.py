"""Tests for the audit trail written by BaseModel."""

import pytest
from django.urls import reverse

from members.models import Family, Member
from utils.context import get_request_context, request_context
from utils.models import AuditLog, diff_instances


pytestmark = pytest.mark.django_db


class TestAuditTrail:

    def test_create_update_delete(self, service):
        family = service.add_family('Okafor').obj
        family.name = 'Okafor-Eze'
        family.set_change_reason('Marriage')
        family.save()
        family_id = str(family.pk)
        family.delete()

        entries = AuditLog.objects.filter(object_id=family_id).order_by('timestamp')
        assert [entry.action for entry in entries] == ['CREATE', 'UPDATE', 'DELETE']
        assert entries[1].changes['name'] == {'old': 'Okafor', 'new': 'Okafor-Eze'}
        assert entries[1].change_reason == 'Marriage'

    def test_unchanged_save_not_logged(self, make_member):
        member = make_member()
        member.save()

        assert AuditLog.objects.filter(object_id=str(member.pk)).count() == 1

    def test_request_context_stamps_actor(self, make_member, owner):
        with request_context(user=owner, ip_address='10.0.0.7', request_path='/shell'):
            member = make_member()

        assert member.created_by_id == str(owner.pk)
        assert member.created_from_ip == '10.0.0.7'
        entry = member.get_history()[0]
        assert entry.user_name == 'Chidi Okafor'
        assert entry.request_path == '/shell'
        assert get_request_context() is None

    def test_diff_skips_bookkeeping_fields(self, make_member):
        member = make_member()
        before = Member.objects.get(pk=member.pk)
        member.first_name = 'Nneka'
        member.updated_from_ip = '10.0.0.9'

        assert set(diff_instances(before, member)) == {'first_name'}

    def test_view_request_is_attributed(self, client, community, owner, owner_member):
        client.force_login(owner)

        client.post(
            reverse('members:family_add_submit', kwargs={'community_id': community.pk}),
            {'name': 'Eze'}, HTTP_USER_AGENT='pytest-browser',
        )

        family = Family.objects.get(community=community, name='Eze')
        entry = family.get_history()[0]
        assert entry.user_id == str(owner.pk)
        assert entry.user_agent == 'pytest-browser'
        assert family.created_by_id == str(owner.pk)
