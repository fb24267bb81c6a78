"""
Appointment booking endpoints.

Students book and see only their own appointments; clinical roles
manage everyone's.  ``slots`` lists the free half-hour windows of a
doctor on a given day.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import exceptions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Appointment
from ..permissions import IsOwnerOrClinical, is_clinical
from ..serializers.appointments import AppointmentWriteSerializer, SlotQuerySerializer
from ..services.appointments import format_appointment, free_slots, save_appointment
from ..services.audit import log_action
from ..services.dashboard import notify_changed


def _appointments():
    return Appointment.objects.select_related('patient', 'doctor')


def _get_appointment(request, appointment_id):
    appt = get_object_or_404(_appointments(), pk=appointment_id)
    if not IsOwnerOrClinical().has_object_permission(request, None, appt):
        raise exceptions.PermissionDenied('forbidden for this appointment')
    return appt


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def appointments(request):
    user = request.user
    if request.method == 'GET':
        qs = _appointments()
        if not is_clinical(user):
            qs = qs.filter(patient=user)
        return Response([format_appointment(a) for a in qs])

    s = AppointmentWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    if not is_clinical(user) and s.validated_data['patientId'] != user.id:
        raise exceptions.PermissionDenied('students can only book appointments for themselves')
    appt = save_appointment(s.validated_data)
    log_action(user=user, action='appointment_create', object_type='appointment', object_id=appt.id)
    notify_changed('appointments')
    return Response(format_appointment(appt), status=201)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, appointment_id):
    appt = _get_appointment(request, appointment_id)
    if request.method == 'GET':
        return Response(format_appointment(appt))

    if request.method == 'PUT':
        s = AppointmentWriteSerializer(appt, data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)
        if not is_clinical(request.user) and data.get('patientId', request.user.id) != request.user.id:
            raise exceptions.PermissionDenied('students can only book appointments for themselves')
        save_appointment(data, appt)
        log_action(user=request.user, action='appointment_update', object_type='appointment', object_id=appt.id)
        notify_changed('appointments')
        return Response(format_appointment(appt))

    appt.delete()
    log_action(user=request.user, action='appointment_delete', object_type='appointment', object_id=appointment_id)
    notify_changed('appointments')
    return Response({'ok': True})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_appointments(request, patient_id: int):
    if not (is_clinical(request.user) or request.user.id == patient_id):
        raise exceptions.PermissionDenied('forbidden for this patient')
    return Response([format_appointment(a) for a in _appointments().filter(patient_id=patient_id)])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def doctor_appointments(request, doctor_id: int):
    qs = _appointments().filter(doctor_id=doctor_id)
    if not is_clinical(request.user):
        qs = qs.filter(patient=request.user)
    return Response([format_appointment(a) for a in qs])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def available_slots(request):
    q = SlotQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({
        'doctorId': q.validated_data['doctorId'],
        'date': q.validated_data['date'].isoformat(),
        'slots': free_slots(q.validated_data['doctorId'], q.validated_data['date']),
    })
