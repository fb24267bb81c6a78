"""
Medical record persistence and formatting.

BMI handling follows one rule everywhere: a positive BMI supplied by the
client is kept, otherwise it is derived from height and weight, and the
stored value is rounded to two decimals.  ``0`` stays the marker for "not
computable".
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone
from rest_framework import exceptions

from clinic.models import Appointment, MedicalRecord, Medication, Vaccination, VitalSigns
from clinic.services.health_metrics import (
    BmiCategory, MedicalRecordSnapshot, classify_bmi, compute_bmi, describe_bmi, is_valid_bmi,
)

User = get_user_model()
logger = logging.getLogger(__name__)

STORED_BMI_DIGITS = 2

_SCALAR_FIELDS = {
    'date': 'date',
    'type': 'record_type',
    'bloodPressure': 'blood_pressure',
    'temperature': 'temperature',
    'diagnosis': 'diagnosis',
    'notes': 'notes',
    'followUpDate': 'follow_up_date',
}

_VITAL_FIELDS = {
    'heartRate': 'heart_rate',
    'bloodPressure': 'blood_pressure',
    'bloodGlucose': 'blood_glucose',
    'respiratoryRate': 'respiratory_rate',
    'oxygenSaturation': 'oxygen_saturation',
}


def record_queryset():
    return MedicalRecord.objects.select_related('patient', 'doctor', 'vital_signs').prefetch_related(
        'medications', 'vaccinations'
    )


def stored_bmi(height: float, weight: float, supplied: Optional[float] = None) -> float:
    """BMI to persist: the supplied value when positive, else computed."""
    if supplied is not None and is_valid_bmi(supplied):
        return round(supplied, STORED_BMI_DIGITS)
    return round(compute_bmi(height, weight), STORED_BMI_DIGITS)


def default_certificate_enabled(bmi: float) -> bool:
    return is_valid_bmi(bmi) and classify_bmi(bmi) is BmiCategory.NORMAL


def _format_vitals(record: MedicalRecord) -> Optional[dict]:
    try:
        vitals = record.vital_signs
    except VitalSigns.DoesNotExist:
        return None
    return {
        'heartRate': vitals.heart_rate,
        'bloodPressure': vitals.blood_pressure or None,
        'bloodGlucose': vitals.blood_glucose,
        'respiratoryRate': vitals.respiratory_rate,
        'oxygenSaturation': vitals.oxygen_saturation,
    }


def _format_vaccination(v: Vaccination) -> dict:
    return {
        'id': v.id,
        'name': v.name,
        'dateAdministered': v.date_administered.isoformat(),
        'doseNumber': v.dose_number,
        'manufacturer': v.manufacturer,
        'lotNumber': v.lot_number,
        'administeredBy': v.administered_by,
        'notes': v.notes,
    }


def format_record(record: MedicalRecord) -> dict:
    summary = describe_bmi(record.bmi)
    return {
        'id': str(record.id),
        'patientId': record.patient_id,
        'patientName': record.patient.display_name,
        'doctorId': record.doctor_id,
        'doctorName': record.doctor.display_name if record.doctor_id else None,
        'selfRecorded': record.doctor_id is None,
        'appointmentId': str(record.appointment_id) if record.appointment_id else None,
        'date': record.date.isoformat(),
        'type': record.record_type,
        'height': record.height,
        'weight': record.weight,
        'bmi': record.bmi,
        'bmiCategory': summary['categoryLabel'],
        'bmiColor': summary['color'],
        'bloodPressure': record.blood_pressure,
        'temperature': record.temperature,
        'diagnosis': record.diagnosis,
        'notes': record.notes,
        'followUpDate': record.follow_up_date.isoformat() if record.follow_up_date else None,
        'certificateEnabled': record.certificate_enabled,
        'medications': [m.name for m in record.medications.all()],
        'vitalSigns': _format_vitals(record),
        'vaccinations': [_format_vaccination(v) for v in record.vaccinations.all()],
        'createdAt': record.created_at.isoformat(),
        'updatedAt': record.updated_at.isoformat(),
    }


def _resolve_user(user_id, field: str, roles=None):
    if user_id is None:
        return None
    user = User.objects.filter(pk=user_id).first()
    if user is None or (roles and user.role not in roles):
        raise exceptions.ValidationError({field: f'Unknown user {user_id}'})
    return user


def _resolve_appointment(appointment_id):
    if appointment_id is None:
        return None
    appt = Appointment.objects.filter(pk=appointment_id).first()
    if appt is None:
        raise exceptions.ValidationError({'appointmentId': 'Appointment not found'})
    return appt


def _write_vitals(record: MedicalRecord, data: dict):
    vitals, _ = VitalSigns.objects.get_or_create(record=record)
    for key, attr in _VITAL_FIELDS.items():
        if key in data:
            value = data[key]
            if attr == 'blood_pressure':
                value = value or ''
            setattr(vitals, attr, value)
    vitals.save()


def _write_vaccinations(record: MedicalRecord, items: Iterable[dict]):
    Vaccination.objects.bulk_create([
        Vaccination(
            record=record,
            name=item['name'],
            date_administered=item['dateAdministered'],
            dose_number=item.get('doseNumber'),
            manufacturer=item.get('manufacturer', ''),
            lot_number=item.get('lotNumber', ''),
            administered_by=item.get('administeredBy', ''),
            notes=item.get('notes', ''),
        )
        for item in items
    ])


def _replace_medications(record: MedicalRecord, names: List[str]):
    record.medications.all().delete()
    Medication.objects.bulk_create([Medication(record=record, name=n) for n in names if n.strip()])


@transaction.atomic
def create_record(data: dict, *, patient, doctor=None) -> MedicalRecord:
    height = data.get('height', 0.0)
    weight = data.get('weight', 0.0)
    bmi = stored_bmi(height, weight, data.get('bmi'))
    if 'certificateEnabled' in data:
        certificate = data['certificateEnabled'] and is_valid_bmi(bmi)
    else:
        certificate = default_certificate_enabled(bmi)

    record = MedicalRecord(
        patient=patient,
        doctor=doctor,
        appointment=_resolve_appointment(data.get('appointmentId')),
        date=data.get('date') or timezone.localdate(),
        height=height,
        weight=weight,
        bmi=bmi,
        certificate_enabled=certificate,
    )
    for key, attr in _SCALAR_FIELDS.items():
        if key in data and key != 'date':
            value = data[key]
            setattr(record, attr, '' if value is None and attr in ('record_type', 'blood_pressure') else value)
    record.save()

    if data.get('medications'):
        _replace_medications(record, data['medications'])
    if data.get('vitalSigns'):
        _write_vitals(record, data['vitalSigns'])
    if data.get('vaccinations'):
        _write_vaccinations(record, data['vaccinations'])
    logger.info('created record %s for patient %s (bmi=%s)', record.id, patient.id, bmi)
    return record


@transaction.atomic
def update_record(record: MedicalRecord, data: dict) -> MedicalRecord:
    """Apply a partial update.

    BMI is recomputed from the supplied-or-stored height and weight when
    either changes and no positive BMI comes with the payload.  When the
    BMI changes and the certificate flag is not part of the payload, the
    flag is re-derived from the new category.
    """
    previous_bmi = record.bmi
    if 'height' in data:
        record.height = data['height']
    if 'weight' in data:
        record.weight = data['weight']

    supplied = data.get('bmi')
    if supplied is not None and is_valid_bmi(supplied):
        record.bmi = round(supplied, STORED_BMI_DIGITS)
    elif 'height' in data or 'weight' in data or 'bmi' in data:
        record.bmi = stored_bmi(record.height, record.weight)

    if 'certificateEnabled' in data:
        record.certificate_enabled = data['certificateEnabled'] and is_valid_bmi(record.bmi)
    elif record.bmi != previous_bmi:
        record.certificate_enabled = default_certificate_enabled(record.bmi)

    if 'doctorId' in data:
        record.doctor = _resolve_user(data['doctorId'], 'doctorId')
    if 'appointmentId' in data:
        record.appointment = _resolve_appointment(data['appointmentId'])
    for key, attr in _SCALAR_FIELDS.items():
        if key in data:
            value = data[key]
            if key == 'date' and value is None:
                continue
            setattr(record, attr, '' if value is None and attr in ('record_type', 'blood_pressure') else value)
    record.save()

    if 'medications' in data:
        _replace_medications(record, data['medications'])
    if data.get('vitalSigns'):
        _write_vitals(record, data['vitalSigns'])
    if data.get('vaccinations'):
        _write_vaccinations(record, data['vaccinations'])
    return record


def snapshots_for_patient(patient_id) -> List[MedicalRecordSnapshot]:
    """Newest first, so same-day readings rank the latest entry first."""
    rows = MedicalRecord.objects.filter(patient_id=patient_id).order_by('-date', '-created_at').values_list('date', 'bmi')
    return [MedicalRecordSnapshot(date=d, bmi=b) for d, b in rows]


def resolve_doctor(doctor_id):
    return _resolve_user(doctor_id, 'doctorId')


def resolve_patient(patient_id):
    return _resolve_user(patient_id, 'patientId', roles={User.ROLE_STUDENT})
