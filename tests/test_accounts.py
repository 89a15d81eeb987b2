"""Tests for sign-in, API tokens, avatar uploads and account deletion."""

import base64
import io
import json

import pytest
from django.contrib.auth import authenticate
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from PIL import Image

from accounts.tokens import issue_api_token, verify_api_token


pytestmark = pytest.mark.django_db


def make_image_bytes(fmt='JPEG', size=(8, 8)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color=(200, 40, 40)).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path
    return tmp_path


class TestApiTokens:

    def test_round_trip(self, owner):
        assert verify_api_token(issue_api_token(owner)) == owner

    def test_tampered_token_rejected(self, owner):
        assert verify_api_token(issue_api_token(owner) + 'x') is None

    def test_inactive_user_rejected(self, owner):
        token = issue_api_token(owner)
        owner.is_active = False
        owner.save()

        assert verify_api_token(token) is None

    def test_token_endpoint_requires_login(self, client, owner):
        assert client.get(reverse('accounts:api_token')).status_code == 302

        client.force_login(owner)
        response = client.get(reverse('accounts:api_token'))

        assert verify_api_token(response.json()['token']) == owner


class TestUploadAvatar:
    """Tests for the bearer-token avatar upload API."""

    url = '/accounts/api/upload-avatar/'

    def upload(self, client, token=None, content=None):
        headers = {'HTTP_AUTHORIZATION': f'Bearer {token}'} if token else {}
        data = {}
        if content is not None:
            data['file'] = SimpleUploadedFile('me.jpg', content, content_type='image/jpeg')
        return client.post(self.url, data, **headers)

    def test_missing_token(self, client):
        response = self.upload(client, content=make_image_bytes())

        assert response.status_code == 401
        assert response.json()['error'] == 'Missing Authorization: Bearer <token>'

    def test_invalid_token(self, client):
        response = self.upload(client, token='garbage', content=make_image_bytes())

        assert response.status_code == 401

    def test_missing_file(self, client, owner):
        response = self.upload(client, token=issue_api_token(owner))

        assert response.status_code == 400
        assert response.json()['error'] == 'No file provided'

    def test_json_body_rejected(self, client, owner):
        response = client.post(
            self.url, data='{}', content_type='application/json',
            HTTP_AUTHORIZATION=f'Bearer {issue_api_token(owner)}',
        )

        assert response.status_code == 400
        assert response.json()['error'] == 'Expected multipart/form-data'

    def test_not_an_image(self, client, owner):
        response = self.upload(client, token=issue_api_token(owner), content=b'plain text')

        assert response.status_code == 400

    def test_upload_stores_png_and_changes_url(self, client, owner, media_root):
        token = issue_api_token(owner)

        first = self.upload(client, token=token, content=make_image_bytes()).json()
        second = self.upload(client, token=token, content=make_image_bytes('PNG')).json()

        assert first['ok'] and second['ok']
        assert second['path'] == f"avatars/{owner.pk}/profile.png"
        assert first['url'] != second['url']
        with Image.open(media_root / second['path']) as stored:
            assert stored.format == 'PNG'


class TestUpdateProfilePicture:

    url = '/accounts/profile/picture/'

    def post(self, client, payload):
        return client.post(self.url, data=json.dumps(payload), content_type='application/json')

    def test_data_url_upload(self, client, owner):
        client.force_login(owner)
        encoded = base64.b64encode(make_image_bytes('PNG')).decode()

        response = self.post(client, {'image': f'data:image/png;base64,{encoded}'})

        assert response.status_code == 200
        assert response.json()['success']
        owner.profile.refresh_from_db()
        assert owner.profile.photo_url == response.json()['image_url']

    def test_unsupported_format(self, client, owner):
        client.force_login(owner)

        response = self.post(client, {'image': 'data:image/bmp;base64,AAAA'})

        assert response.status_code == 400
        assert 'Unsupported image format' in response.json()['message']


class TestDeleteAccount:

    url = '/accounts/profile/delete/'

    def test_requires_confirmation(self, client, other_user):
        client.force_login(other_user)

        client.post(self.url, {'confirmation': 'delete me'})

        assert type(other_user).objects.filter(pk=other_user.pk).exists()

    def test_owner_must_hand_over_first(self, client, owner, community):
        client.force_login(owner)

        client.post(self.url, {'confirmation': 'DELETE'})

        assert type(owner).objects.filter(pk=owner.pk).exists()

    def test_member_row_survives_deletion(self, client, other_user, make_member):
        member = make_member(first_name='Ada', user=other_user)
        client.force_login(other_user)

        response = client.post(self.url, {'confirmation': 'DELETE'})

        assert response.status_code == 302
        assert not type(other_user).objects.filter(pk=other_user.pk).exists()
        member.refresh_from_db()
        assert member.user is None


class TestEmailAuthBackend:
    """Sign-in by email or username, with lockout."""

    def test_email_or_username(self, owner):
        assert authenticate(username='CHAIR@example.com', password='s3cure-pass-123') == owner
        assert authenticate(username='chair', password='s3cure-pass-123') == owner

    def test_lockout_after_repeated_failures(self, owner, settings):
        settings.LOGIN_MAX_FAILED_ATTEMPTS = 3

        for _ in range(3):
            assert authenticate(username='chair', password='wrong') is None

        owner.profile.refresh_from_db()
        assert owner.profile.account_locked_until is not None
        assert authenticate(username='chair', password='s3cure-pass-123') is None

    def test_success_resets_counter(self, owner):
        authenticate(username='chair', password='wrong')

        assert authenticate(username='chair', password='s3cure-pass-123') == owner
        owner.profile.refresh_from_db()
        assert owner.profile.failed_login_attempts == 0
        assert owner.profile.last_login_at is not None
