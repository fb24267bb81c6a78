from __future__ import annotations

from django.template.loader import render_to_string
from django.utils import timezone
from rest_framework import exceptions

from clinic.models import MedicalRecord
from clinic.services.branding import absolute_url, get_branding, logo_for
from clinic.services.health_metrics import compute_bmi, describe_bmi, is_valid_bmi
from clinic.services.patients import calculate_age


def certificate_bmi(record: MedicalRecord) -> float:
    if is_valid_bmi(record.bmi):
        return record.bmi
    return compute_bmi(record.height, record.weight)


def certificate_context(record: MedicalRecord, request=None) -> dict:
    if not record.certificate_enabled:
        raise exceptions.ValidationError('Certificate is not enabled for this record')
    bmi = certificate_bmi(record)
    if not is_valid_bmi(bmi):
        raise exceptions.ValidationError('BMI could not be computed for this record')

    branding = get_branding()
    logo = logo_for('primary')
    logo_url = logo.file.url if logo else branding.get('primaryLogo')
    profile = getattr(record.patient, 'patient_profile', None)
    summary = describe_bmi(bmi, digits=1)
    return {
        'clinic_name': branding['clinicName'],
        'tagline': branding['tagline'],
        'logo_url': absolute_url(logo_url, request) if logo_url else '',
        'patient_name': record.patient.display_name,
        'student_id': profile.student_id if profile else '',
        'age': calculate_age(profile.date_of_birth) if profile else None,
        'height': record.height,
        'weight': record.weight,
        'bmi': f"{summary['bmi']:.1f}",
        'category': summary['categoryLabel'],
        'color': summary['color'],
        'record_date': record.date,
        'issued_on': timezone.localdate(),
        'doctor_name': record.doctor.display_name if record.doctor_id else '',
        'certificate_id': f"HC-{record.id.hex[:8].upper()}",
    }


def render_certificate(record: MedicalRecord, request=None) -> str:
    return render_to_string('clinic/bmi_certificate.html', certificate_context(record, request))
