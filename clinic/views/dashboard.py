"""
Administrative dashboard endpoint.

Provides clinic-wide counts and the BMI category distribution of the
student population.  The summary is cached briefly and invalidated by
record, appointment and inventory writes.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsClinicalRole
from ..services.dashboard import get_summary


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalRole])
def admin_dashboard(request):
    return Response(get_summary())
