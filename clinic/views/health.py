import logging
import platform

from django.conf import settings
from django.db import DatabaseError, connections
from django.http import JsonResponse
from django.utils import timezone

logger = logging.getLogger(__name__)


def database_status() -> dict:
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
    except DatabaseError as e:
        logger.error('database health check failed: %s', e)
        return {'connected': False, 'message': str(e)}
    ok = bool(row and row[0] == 1)
    return {'connected': ok, 'message': 'Database connection successful' if ok else 'Unexpected reply'}


def _report() -> dict:
    db = database_status()
    return {
        'status': 'OK' if db['connected'] else 'WARNING',
        'timestamp': timezone.now().isoformat(),
        'server': {'version': settings.APP_VERSION, 'python': platform.python_version()},
        'database': db,
    }


def healthz(request):
    report = _report()
    return JsonResponse(report, status=200 if report['database']['connected'] else 500)


def api_health(request):
    """Like ``healthz`` but reports database trouble as WARNING with a 200."""
    return JsonResponse(_report())
