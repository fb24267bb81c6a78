"""
Clinic branding: the site settings document and uploaded logos.

Logos arrive either as multipart uploads (``Logo`` rows) or as data URLs
embedded in the branding document; both end up in ``default_storage``
under ``uploads/``.
"""
from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
import re
import time
from typing import Optional

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.db import transaction
from rest_framework import exceptions

from clinic.models import Logo, SiteSetting

logger = logging.getLogger(__name__)

BRANDING = 'branding'
DEFAULT_BRANDING = {
    'clinicName': 'OLIVAREZ CLINIC',
    'tagline': 'Health at Your Fingertips',
    'primaryLogo': '/logo.png',
    'secondaryLogo': '',
}

_DATA_URL = re.compile(r'^data:image/([a-zA-Z0-9.+-]+);base64,(.+)$', re.DOTALL)


def get_branding() -> dict:
    setting, _ = SiteSetting.objects.get_or_create(type=BRANDING, defaults={'settings': dict(DEFAULT_BRANDING)})
    return {**DEFAULT_BRANDING, **(setting.settings or {})}


def image_extension(subtype: str) -> str:
    """File extension (no dot) for an ``image/<subtype>`` MIME type."""
    subtype = subtype.lower()
    guessed = mimetypes.guess_extension(f'image/{subtype}')
    if guessed:
        return guessed.lstrip('.')
    return re.sub(r'[^a-z0-9]', '', subtype) or 'img'


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """Split a ``data:image/<ext>;base64,...`` URL into extension and bytes."""
    match = _DATA_URL.match(data_url.strip())
    if not match:
        raise exceptions.ValidationError('Invalid data URL')
    subtype, payload = match.groups()
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise exceptions.ValidationError('Invalid base64 image data')
    if len(raw) > settings.UPLOAD_MAX_MB * 1024 * 1024:
        raise exceptions.ValidationError(f'Image exceeds {settings.UPLOAD_MAX_MB} MB')
    return image_extension(subtype), raw


def save_data_url(data_url: str, prefix: str) -> str:
    ext, raw = decode_data_url(data_url)
    name = default_storage.save(f"uploads/{prefix}-{int(time.time() * 1000)}.{ext}", ContentFile(raw))
    logger.info('stored branding image %s (%d bytes)', name, len(raw))
    return default_storage.url(name)


@transaction.atomic
def update_branding(data: dict) -> dict:
    current = get_branding()
    for key in ('primaryLogo', 'secondaryLogo'):
        value = data.get(key)
        if value and value.startswith('data:image'):
            data[key] = save_data_url(value, key.replace('Logo', '-logo'))
    current.update(data)
    SiteSetting.objects.update_or_create(type=BRANDING, defaults={'settings': current})
    return current


def absolute_url(path: str, request=None) -> str:
    """Prefix ``path`` with ``PUBLIC_BASE_URL`` or, failing that, the request host."""
    if not path or path.startswith(('http://', 'https://')):
        return path
    if not path.startswith('/'):
        path = '/' + path
    if settings.PUBLIC_BASE_URL:
        return settings.PUBLIC_BASE_URL + path
    if request is not None:
        return request.build_absolute_uri(path)
    return path


def format_logo(logo: Logo, request=None) -> dict:
    return {
        'id': str(logo.id),
        'position': logo.position,
        'url': absolute_url(logo.file.url, request),
        'contentType': logo.content_type,
        'size': logo.size,
        'updatedAt': logo.updated_at.isoformat(),
    }


def validate_logo_upload(upload):
    content_type = getattr(upload, 'content_type', '') or ''
    if not any(content_type.startswith(t) for t in settings.ALLOWED_LOGO_TYPES):
        raise exceptions.ValidationError(f'Unsupported file type: {content_type or "unknown"}')
    if upload.size > settings.LOGO_MAX_MB * 1024 * 1024:
        raise exceptions.ValidationError(f'Logo exceeds {settings.LOGO_MAX_MB} MB')


@transaction.atomic
def replace_logo(position: str, upload) -> Logo:
    validate_logo_upload(upload)
    logo = Logo.objects.select_for_update().filter(position=position).first()
    old_name = logo.file.name if logo else None
    if logo is None:
        logo = Logo(position=position)
    logo.file.save(upload.name, upload, save=False)
    logo.content_type = upload.content_type
    logo.size = upload.size
    logo.save()
    if old_name and old_name != logo.file.name:
        default_storage.delete(old_name)
    return logo


def logo_for(position: str) -> Optional[Logo]:
    return Logo.objects.filter(position=position).first()
