"""
Database models for the MediSync clinic backend.

These models capture the clinic's core concepts: users with clinic
roles, student health profiles, medical records with their vitals,
medications and vaccinations, appointments, the medicine inventory and
the branding assets shown on certificates.  Field names follow Django
conventions; the camelCase JSON shape expected by the front-end is
produced by the service formatters.
"""
from __future__ import annotations

import os
import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user model with a clinic role.

    Students are the patients of the clinic and carry a
    :class:`PatientProfile`.  The remaining roles are clinic personnel;
    doctors and staff are identified by a ``staff_id``.
    """
    ROLE_ADMIN = 'admin'
    ROLE_DOCTOR = 'doctor'
    ROLE_STAFF = 'staff'
    ROLE_HEAD_NURSE = 'head_nurse'
    ROLE_STUDENT = 'student'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_STAFF, 'Staff'),
        (ROLE_HEAD_NURSE, 'Head nurse'),
        (ROLE_STUDENT, 'Student'),
    ]
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_STUDENT, db_index=True)
    phone = models.CharField(max_length=32, blank=True)
    staff_id = models.CharField(max_length=32, blank=True)
    position = models.CharField(max_length=100, blank=True)
    department = models.CharField(max_length=100, blank=True)

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class PatientProfile(models.Model):
    """Health and demographic details of a student."""
    GENDER_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
        ('other', 'Other'),
    ]
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='patient_profile')
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    address = models.CharField(max_length=255, blank=True)
    emergency_contact = models.CharField(max_length=255, blank=True)
    student_id = models.CharField(max_length=32, blank=True, db_index=True)
    medical_history = models.TextField(blank=True)
    allergies = models.JSONField(default=list, blank=True)
    insurance_provider = models.CharField(max_length=100, blank=True)
    insurance_policy_number = models.CharField(max_length=100, blank=True)

    def __str__(self) -> str:
        return f"{self.user.username} ({self.student_id or 'no id'})"


class Appointment(models.Model):
    STATUS_SCHEDULED = 'scheduled'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='patient_appointments')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='doctor_appointments')
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)
    reason = models.CharField(max_length=255)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['date', 'start_time']
        indexes = [
            models.Index(fields=['doctor', 'date'], name='clinic_appt_doctor_date_idx'),
            models.Index(fields=['patient', 'date'], name='clinic_appt_patient_date_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.date} {self.start_time:%H:%M} p={self.patient_id} d={self.doctor_id}"


class MedicalRecord(models.Model):
    """A single clinic visit or self-recorded measurement.

    ``doctor`` is empty for self-recorded entries.  ``bmi`` is stored
    rounded to two decimals; ``0`` marks a BMI that could not be
    computed.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='medical_records')
    doctor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='authored_records'
    )
    appointment = models.ForeignKey(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='medical_records'
    )
    date = models.DateField(db_index=True)
    record_type = models.CharField(max_length=50, blank=True)
    height = models.FloatField(default=0)
    weight = models.FloatField(default=0)
    bmi = models.FloatField(default=0)
    blood_pressure = models.CharField(max_length=20, blank=True)
    temperature = models.FloatField(null=True, blank=True)
    diagnosis = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    follow_up_date = models.DateField(null=True, blank=True)
    certificate_enabled = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['patient', 'date'], name='clinic_rec_patient_date_idx'),
        ]

    def __str__(self) -> str:
        return f"record {self.id} p={self.patient_id} @ {self.date}"


class Medication(models.Model):
    record = models.ForeignKey(MedicalRecord, on_delete=models.CASCADE, related_name='medications')
    name = models.CharField(max_length=255)

    def __str__(self) -> str:
        return self.name


class VitalSigns(models.Model):
    record = models.OneToOneField(MedicalRecord, on_delete=models.CASCADE, related_name='vital_signs')
    heart_rate = models.PositiveIntegerField(null=True, blank=True)
    blood_pressure = models.CharField(max_length=20, blank=True)
    blood_glucose = models.FloatField(null=True, blank=True)
    respiratory_rate = models.PositiveIntegerField(null=True, blank=True)
    oxygen_saturation = models.FloatField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"vitals for {self.record_id}"


class Vaccination(models.Model):
    record = models.ForeignKey(MedicalRecord, on_delete=models.CASCADE, related_name='vaccinations')
    name = models.CharField(max_length=100)
    date_administered = models.DateField()
    dose_number = models.PositiveSmallIntegerField(null=True, blank=True)
    manufacturer = models.CharField(max_length=100, blank=True)
    lot_number = models.CharField(max_length=50, blank=True)
    administered_by = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)

    def __str__(self) -> str:
        return f"{self.name} dose {self.dose_number or '?'}"


class Medicine(models.Model):
    """An inventory item in the clinic's medicine cabinet."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=100)
    quantity = models.PositiveIntegerField(default=0)
    threshold = models.PositiveIntegerField(default=0)
    unit = models.CharField(max_length=32)
    description = models.TextField(blank=True)
    dosage = models.CharField(max_length=100, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    supplier = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    @property
    def low_stock(self) -> bool:
        return self.quantity <= self.threshold

    def __str__(self) -> str:
        return f"{self.name} ({self.quantity} {self.unit})"


class SiteSetting(models.Model):
    """A JSON settings document keyed by type (e.g. ``branding``)."""
    type = models.CharField(max_length=50, unique=True)
    settings = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.type


def _logo_upload(instance, filename: str) -> str:
    ext = os.path.splitext(filename)[1].lower()
    return f"uploads/assets/logos/logo-{instance.position}-{uuid.uuid4().hex}{ext}"


class Logo(models.Model):
    POSITION_PRIMARY = 'primary'
    POSITION_SECONDARY = 'secondary'
    POSITION_CHOICES = [
        (POSITION_PRIMARY, 'Primary'),
        (POSITION_SECONDARY, 'Secondary'),
    ]
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    position = models.CharField(max_length=16, choices=POSITION_CHOICES, unique=True)
    file = models.FileField(upload_to=_logo_upload, max_length=512)
    content_type = models.CharField(max_length=128, blank=True)
    size = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"logo {self.position}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='clinic_audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='clinic_audit_object_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
