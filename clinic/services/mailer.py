import base64
import binascii
import logging

from django.conf import settings
from django.core.mail import EmailMessage
from rest_framework import exceptions

from clinic.exceptions import BadGateway, ServiceUnavailable

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = 'Orange Card PDF'
DEFAULT_MESSAGE = 'Please find attached your Orange Card PDF.'
DEFAULT_FILE_NAME = 'orange-card.pdf'


def smtp_configured() -> bool:
    return bool(settings.EMAIL_HOST_USER and settings.EMAIL_HOST_PASSWORD)


def decode_pdf(pdf_data: str) -> bytes:
    """Accept a ``data:application/pdf;base64,...`` URL or bare base64."""
    payload = pdf_data
    if pdf_data.startswith('data:'):
        _, comma, payload = pdf_data.partition(',')
        if not comma or not payload.strip():
            raise exceptions.ValidationError({'pdfData': 'Malformed data URL'})
    try:
        raw = base64.b64decode(payload.strip(), validate=True)
    except (binascii.Error, ValueError):
        raise exceptions.ValidationError({'pdfData': 'Invalid base64 PDF data'})
    if not raw:
        raise exceptions.ValidationError({'pdfData': 'PDF data is empty'})
    return raw


def send_pdf(*, email: str, pdf_data: str, subject=None, message=None, file_name=None) -> None:
    if not smtp_configured():
        logger.warning('email requested but SMTP_USER/SMTP_PASS are not set')
        raise ServiceUnavailable('Email service not configured. Please contact administrator.')
    content = decode_pdf(pdf_data)
    msg = EmailMessage(
        subject=subject or DEFAULT_SUBJECT,
        body=message or DEFAULT_MESSAGE,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[email],
    )
    msg.attach(file_name or DEFAULT_FILE_NAME, content, 'application/pdf')
    try:
        msg.send(fail_silently=False)
    except Exception as e:
        logger.exception('failed to send PDF to %s', email)
        raise BadGateway(f'Failed to send email: {e}')
    logger.info('sent PDF %s (%d bytes) to %s', file_name or DEFAULT_FILE_NAME, len(content), email)
