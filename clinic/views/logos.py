from __future__ import annotations

from rest_framework import exceptions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..models import Logo
from ..permissions import has_role
from ..services.audit import log_action
from ..services.branding import format_logo, logo_for, replace_logo

_UPLOAD_FIELDS = {'primaryLogo': Logo.POSITION_PRIMARY, 'secondaryLogo': Logo.POSITION_SECONDARY}


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def logos(request):
    if request.method == 'GET':
        return Response({logo.position: format_logo(logo, request) for logo in Logo.objects.all()})

    if not has_role(request.user, {'admin'}):
        raise exceptions.PermissionDenied('only administrators can upload logos')
    uploads = {pos: request.FILES[field] for field, pos in _UPLOAD_FIELDS.items() if field in request.FILES}
    if not uploads:
        raise exceptions.ValidationError('No logo files uploaded (expected primaryLogo and/or secondaryLogo)')
    saved = {}
    for position, upload in uploads.items():
        logo = replace_logo(position, upload)
        saved[position] = format_logo(logo, request)
        log_action(user=request.user, action='logo_upload', object_type='logo', object_id=position,
                   detail={'size': logo.size, 'contentType': logo.content_type})
    return Response({'ok': True, 'logos': saved}, status=201)


@api_view(['GET'])
@permission_classes([AllowAny])
def logo_detail(request, position: str):
    logo = logo_for(position)
    if logo is None:
        raise exceptions.NotFound(f'No {position} logo uploaded')
    return Response(format_logo(logo, request))
