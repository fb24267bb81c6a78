"""
User and student profile helpers.

Formatting lives here so that list, detail and profile endpoints agree on
the JSON shape the front-end consumes.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import transaction
from rest_framework import exceptions

from clinic.exceptions import Conflict
from clinic.models import PatientProfile

User = get_user_model()


def calculate_age(date_of_birth: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Whole years between ``date_of_birth`` and ``today``; ``None`` when unknown."""
    if not date_of_birth:
        return None
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def split_name(name: str) -> tuple[str, str]:
    parts = (name or '').strip().split(' ', 1)
    return parts[0], (parts[1] if len(parts) > 1 else '')


def format_profile(profile: Optional[PatientProfile]) -> Optional[dict]:
    if profile is None:
        return None
    return {
        'studentId': profile.student_id,
        'gender': profile.gender,
        'dateOfBirth': profile.date_of_birth.isoformat() if profile.date_of_birth else None,
        'age': calculate_age(profile.date_of_birth),
        'address': profile.address,
        'emergencyContact': profile.emergency_contact,
        'medicalHistory': profile.medical_history,
        'allergies': profile.allergies or [],
        'insuranceProvider': profile.insurance_provider,
        'insurancePolicyNumber': profile.insurance_policy_number,
    }


def format_user(user) -> dict:
    profile = getattr(user, 'patient_profile', None) if user.role == User.ROLE_STUDENT else None
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'name': user.display_name,
        'role': user.role,
        'phone': user.phone,
        'department': user.department,
        'staffId': user.staff_id or None,
        'position': user.position or None,
        'profile': format_profile(profile),
        'createdAt': user.date_joined.isoformat(),
    }


def _check_password(password: str, user=None):
    try:
        validate_password(password, user=user)
    except ValidationError as e:
        raise exceptions.ValidationError({'password': e.messages})


_PROFILE_FIELDS = {
    'studentId': 'student_id',
    'gender': 'gender',
    'dateOfBirth': 'date_of_birth',
    'address': 'address',
    'emergencyContact': 'emergency_contact',
    'medicalHistory': 'medical_history',
    'allergies': 'allergies',
    'insuranceProvider': 'insurance_provider',
    'insurancePolicyNumber': 'insurance_policy_number',
}

_USER_FIELDS = {
    'phone': 'phone',
    'department': 'department',
    'staffId': 'staff_id',
    'position': 'position',
}


def _apply_profile(user, data: dict):
    profile, _ = PatientProfile.objects.get_or_create(user=user)
    for key, attr in _PROFILE_FIELDS.items():
        if key in data:
            value = data[key]
            if value is None and attr != 'date_of_birth':
                value = ''
            setattr(profile, attr, value)
    profile.save()
    return profile


@transaction.atomic
def create_user(data: dict):
    """Create a user (and a profile for students) from validated data.

    The email doubles as the username; a duplicate raises a 409.
    """
    email = data['email'].lower()
    if User.objects.filter(email__iexact=email).exists() or User.objects.filter(username__iexact=email).exists():
        raise Conflict('User with this email already exists')
    password = data.get('password') or ''
    if not password:
        raise exceptions.ValidationError({'password': 'Password is required'})
    first, last = split_name(data['name'])
    user = User(username=email, email=email, first_name=first, last_name=last, role=data['role'])
    _check_password(password, user)
    for key, attr in _USER_FIELDS.items():
        if key in data:
            setattr(user, attr, data[key] or '')
    user.set_password(password)
    user.save()
    if user.role == User.ROLE_STUDENT:
        _apply_profile(user, data)
    return user


@transaction.atomic
def update_user(user, data: dict, *, allow_role_change: bool):
    if 'email' in data:
        email = data['email'].lower()
        if User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
            raise Conflict('User with this email already exists')
        user.email = email
    if 'name' in data:
        user.first_name, user.last_name = split_name(data['name'])
    if allow_role_change and 'role' in data:
        user.role = data['role']
    for key, attr in _USER_FIELDS.items():
        if key in data:
            setattr(user, attr, data[key] or '')
    if data.get('password'):
        _check_password(data['password'], user)
        user.set_password(data['password'])
    user.save()
    if user.role == User.ROLE_STUDENT:
        _apply_profile(user, data)
    return user


def register_student(data: dict):
    return create_user({**data, 'role': User.ROLE_STUDENT})

