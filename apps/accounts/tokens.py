# accounts/tokens.py

"""
Bearer tokens for the JSON API.

A token is the user's primary key signed with the project SECRET_KEY. Tokens
expire after settings.API_TOKEN_MAX_AGE seconds.
"""

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core import signing

API_TOKEN_SALT = 'accounts.api-token'


def issue_api_token(user):
    return signing.dumps({'uid': user.pk}, salt=API_TOKEN_SALT, compress=True)


def verify_api_token(token):
    """Return the active user the token was issued to, or None"""
    if not token:
        return None
    try:
        payload = signing.loads(token, salt=API_TOKEN_SALT, max_age=settings.API_TOKEN_MAX_AGE)
    except signing.BadSignature:
        return None

    User = get_user_model()
    return User.objects.filter(pk=payload.get('uid'), is_active=True).first()


def get_bearer_token(request):
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()
