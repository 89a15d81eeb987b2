# accounts/ajax_views.py

import base64
import binascii
import io
import json
import logging

from django.contrib.auth.decorators import login_required
from django.core.files.base import ContentFile
from django.http import JsonResponse
from django.utils.crypto import get_random_string
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from PIL import Image, UnidentifiedImageError

from .models import UserProfile, avatar_upload_to
from .tokens import get_bearer_token, verify_api_token

logger = logging.getLogger(__name__)

ALLOWED_DATA_URL_PREFIXES = (
    'data:image/jpeg;base64,',
    'data:image/png;base64,',
    'data:image/gif;base64,',
    'data:image/webp;base64,',
)


class InvalidAvatar(ValueError):
    pass


def store_avatar(user, raw_bytes):
    """
    Normalise the uploaded image to PNG and store it at avatars/{user_id}/profile.png.

    The previous object is replaced and the avatar token rotated, so the
    returned URL differs from the old one.
    """
    try:
        image = Image.open(io.BytesIO(raw_bytes))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidAvatar("The uploaded file is not a valid image.") from e

    if image.mode not in ('RGB', 'RGBA'):
        image = image.convert('RGBA')

    buffer = io.BytesIO()
    image.save(buffer, format='PNG')

    profile, _ = UserProfile.objects.get_or_create(user=user)

    path = avatar_upload_to(profile, 'profile.png')
    storage = profile.photo.storage
    if storage.exists(path):
        storage.delete(path)

    profile.avatar_token = get_random_string(32)
    profile.photo.save('profile.png', ContentFile(buffer.getvalue()), save=False)
    profile.save(update_fields=['photo', 'avatar_token', 'updated_at'])

    logger.info(f"Avatar updated for user {user.pk}")
    return profile


@csrf_exempt
@require_http_methods(["POST"])
def upload_avatar(request):
    """
    POST multipart/form-data with a `file` field.
    Identity comes from `Authorization: Bearer <token>` (see accounts.tokens).
    """
    token = get_bearer_token(request)
    if not token:
        return JsonResponse({'error': 'Missing Authorization: Bearer <token>'}, status=401)

    user = verify_api_token(token)
    if user is None:
        return JsonResponse({'error': 'Invalid or expired token'}, status=401)

    if not request.content_type or 'multipart/form-data' not in request.content_type:
        return JsonResponse({'error': 'Expected multipart/form-data'}, status=400)

    upload = request.FILES.get('file')
    if not upload:
        return JsonResponse({'error': 'No file provided'}, status=400)

    try:
        profile = store_avatar(user, upload.read())
    except InvalidAvatar as e:
        return JsonResponse({'error': str(e)}, status=400)

    return JsonResponse({
        'ok': True,
        'url': profile.photo_url,
        'path': profile.photo.name,
    })


@login_required
@require_http_methods(["POST"])
def update_profile_picture(request):
    """Update the signed-in user's picture from a base64 data URL"""
    try:
        data = json.loads(request.body)
    except json.JSONDecodeError:
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    image_data = data.get("image")
    if not image_data:
        return JsonResponse({"success": False, "message": "No image data provided."}, status=400)

    prefix = next((p for p in ALLOWED_DATA_URL_PREFIXES if image_data.startswith(p)), None)
    if prefix is None:
        return JsonResponse(
            {"success": False, "message": "Unsupported image format. Only JPG, PNG, GIF and WEBP are allowed."},
            status=400
        )

    try:
        decoded = base64.b64decode(image_data[len(prefix):], validate=True)
    except (binascii.Error, ValueError):
        return JsonResponse({"success": False, "message": "Invalid image data."}, status=400)

    try:
        profile = store_avatar(request.user, decoded)
    except InvalidAvatar as e:
        return JsonResponse({"success": False, "message": str(e)}, status=400)

    return JsonResponse({
        "success": True,
        "message": "Profile picture updated successfully!",
        "image_url": profile.photo_url
    })
