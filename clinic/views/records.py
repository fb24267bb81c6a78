"""
Medical record endpoints.

Students only ever see and create their own records (self-recorded
measurements have no doctor).  Clinical roles can read and write any
record; when a doctor creates a record they become its author unless a
``doctorId`` is given.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import exceptions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import User
from ..permissions import IsOwnerOrClinical, is_clinical
from ..serializers.records import MedicalRecordWriteSerializer
from ..services.audit import log_action
from ..services.dashboard import notify_changed
from ..services.records import (
    create_record, format_record, record_queryset, resolve_doctor, resolve_patient, update_record,
)


def _get_record(request, record_id):
    record = get_object_or_404(record_queryset(), pk=record_id)
    if not IsOwnerOrClinical().has_object_permission(request, None, record):
        raise exceptions.PermissionDenied('forbidden for this record')
    return record


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def medical_records(request):
    user = request.user
    if request.method == 'GET':
        qs = record_queryset()
        if not is_clinical(user):
            qs = qs.filter(patient=user)
        return Response([format_record(r) for r in qs])

    s = MedicalRecordWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data

    if is_clinical(user):
        if 'patientId' not in data:
            raise exceptions.ValidationError({'patientId': 'Patient ID is required'})
        patient = resolve_patient(data['patientId'])
        if 'doctorId' in data:
            doctor = resolve_doctor(data['doctorId'])
        else:
            doctor = user if user.role == User.ROLE_DOCTOR else None
    else:
        if data.get('patientId', user.id) != user.id:
            raise exceptions.PermissionDenied('students can only create their own records')
        patient, doctor = user, None

    record = create_record(data, patient=patient, doctor=doctor)
    log_action(user=user, action='record_create', object_type='medical_record', object_id=record.id,
               detail={'patientId': patient.id, 'bmi': record.bmi})
    notify_changed('records')
    return Response(format_record(record_queryset().get(pk=record.pk)), status=201)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def medical_record_detail(request, record_id):
    record = _get_record(request, record_id)
    if request.method == 'GET':
        return Response(format_record(record))

    if request.method == 'PUT':
        s = MedicalRecordWriteSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)
        if not is_clinical(request.user):
            # owners cannot move a record to someone else or claim a doctor
            data.pop('patientId', None)
            data.pop('doctorId', None)
        elif 'patientId' in data:
            record.patient = resolve_patient(data.pop('patientId'))
        update_record(record, data)
        log_action(user=request.user, action='record_update', object_type='medical_record',
                   object_id=record.id, detail={'fields': sorted(data)})
        notify_changed('records')
        return Response(format_record(record_queryset().get(pk=record.pk)))

    record.delete()
    log_action(user=request.user, action='record_delete', object_type='medical_record', object_id=record_id)
    notify_changed('records')
    return Response({'ok': True})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_records(request, patient_id: int):
    if not (is_clinical(request.user) or request.user.id == patient_id):
        raise exceptions.PermissionDenied('forbidden for this patient')
    get_object_or_404(User, pk=patient_id)
    qs = record_queryset().filter(patient_id=patient_id)
    return Response([format_record(r) for r in qs])
