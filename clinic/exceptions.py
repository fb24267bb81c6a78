import logging

from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view'))
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    code = getattr(exc, 'default_code', None) or 'api_error'
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code)


class Conflict(APIException):
    status_code = 409
    default_detail = 'Conflict'
    default_code = 'conflict'


class ServiceUnavailable(APIException):
    status_code = 503
    default_detail = 'Service unavailable'
    default_code = 'service_unavailable'


class BadGateway(APIException):
    status_code = 502
    default_detail = 'Upstream service failed'
    default_code = 'bad_gateway'
