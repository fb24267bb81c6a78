"""
Site branding settings.

Reading is public (the login page shows the clinic name and logo);
updates are restricted to administrators.
"""
from __future__ import annotations

from rest_framework import exceptions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..permissions import has_role
from ..serializers.settings import BrandingSerializer
from ..services.audit import log_action
from ..services.branding import get_branding, update_branding


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def branding_settings(request):
    if request.method == 'GET':
        return Response(get_branding())

    if not has_role(request.user, {'admin'}):
        raise exceptions.PermissionDenied('only administrators can change branding')
    s = BrandingSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    branding = update_branding(dict(s.validated_data))
    log_action(user=request.user, action='branding_update', object_type='site_setting', object_id='branding')
    return Response({'ok': True, 'message': 'Branding settings updated successfully', 'data': branding})
