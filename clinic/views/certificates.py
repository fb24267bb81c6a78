from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import exceptions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..models import MedicalRecord
from ..permissions import IsOwnerOrClinical
from ..services.certificates import render_certificate


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def bmi_certificate(request, record_id):
    """Printable HTML BMI certificate for a record."""
    record = get_object_or_404(
        MedicalRecord.objects.select_related('patient', 'patient__patient_profile', 'doctor'), pk=record_id
    )
    if not IsOwnerOrClinical().has_object_permission(request, None, record):
        raise exceptions.PermissionDenied('forbidden for this record')
    return HttpResponse(render_certificate(record, request), content_type='text/html; charset=utf-8')
