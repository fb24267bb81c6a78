"""
WSGI entrypoint for the MediSync clinic backend.

Used by gunicorn/uwsgi deployments that only need plain HTTP.  The
websocket update feed requires the ASGI entrypoint in ``medisync.asgi``.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'medisync.settings')

application = get_wsgi_application()
