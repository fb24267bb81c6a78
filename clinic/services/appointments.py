from __future__ import annotations

from datetime import datetime, time, timedelta
from typing import List

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import exceptions

from clinic.models import Appointment

User = get_user_model()

SLOT_START_HOUR = 8
SLOT_END_HOUR = 17
SLOT_MINUTES = 30


def generate_time_slots(start_hour: int = SLOT_START_HOUR, end_hour: int = SLOT_END_HOUR,
                        interval: int = SLOT_MINUTES) -> List[str]:
    """``HH:MM`` labels from ``start_hour`` up to (not including) ``end_hour``."""
    slots = []
    for hour in range(start_hour, end_hour):
        for minute in range(0, 60, interval):
            slots.append(f"{hour:02d}:{minute:02d}")
    return slots


def _overlaps(start: time, end: time, other_start: time, other_end: time) -> bool:
    return start < other_end and other_start < end


def free_slots(doctor_id, day) -> List[dict]:
    busy = list(
        Appointment.objects.filter(doctor_id=doctor_id, date=day, status=Appointment.STATUS_SCHEDULED)
        .values_list('start_time', 'end_time')
    )
    result = []
    for label in generate_time_slots():
        start = datetime.strptime(label, '%H:%M')
        end = (start + timedelta(minutes=SLOT_MINUTES)).time()
        start = start.time()
        if any(_overlaps(start, end, b_start, b_end) for b_start, b_end in busy):
            continue
        result.append({'startTime': label, 'endTime': end.strftime('%H:%M')})
    return result


def format_appointment(appt: Appointment) -> dict:
    return {
        'id': str(appt.id),
        'patientId': appt.patient_id,
        'patientName': appt.patient.display_name,
        'doctorId': appt.doctor_id,
        'doctorName': appt.doctor.display_name,
        'date': appt.date.isoformat(),
        'startTime': appt.start_time.strftime('%H:%M'),
        'endTime': appt.end_time.strftime('%H:%M'),
        'status': appt.status,
        'reason': appt.reason,
        'notes': appt.notes,
        'createdAt': appt.created_at.isoformat(),
        'updatedAt': appt.updated_at.isoformat(),
    }


def _user_or_400(user_id, field: str, role: str):
    user = User.objects.filter(pk=user_id, role=role).first()
    if user is None:
        raise exceptions.ValidationError({field: f'No {role} with id {user_id}'})
    return user


@transaction.atomic
def save_appointment(data: dict, appt: Appointment | None = None) -> Appointment:
    appt = appt or Appointment()
    if 'patientId' in data:
        appt.patient = _user_or_400(data['patientId'], 'patientId', User.ROLE_STUDENT)
    if 'doctorId' in data:
        appt.doctor = _user_or_400(data['doctorId'], 'doctorId', User.ROLE_DOCTOR)
    if 'date' in data:
        appt.date = data['date']
    if 'startTime' in data:
        appt.start_time = data['startTime']
    if 'endTime' in data:
        appt.end_time = data['endTime']
    if 'status' in data:
        appt.status = data['status']
    if 'reason' in data:
        appt.reason = data['reason']
    if 'notes' in data:
        appt.notes = data['notes']
    appt.save()
    return appt
