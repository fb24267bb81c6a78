import bleach
from rest_framework import serializers

from clinic.permissions import VALID_ROLES


def _clean(v):
    return bleach.clean((v or '').strip(), tags=set(), strip=True)


class UserWriteSerializer(serializers.Serializer):
    """Create/update payload for a clinic user and, for students, their profile."""
    email = serializers.EmailField()
    name = serializers.CharField(max_length=150)
    role = serializers.ChoiceField(choices=sorted(VALID_ROLES))
    password = serializers.CharField(required=False, allow_blank=True, write_only=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    department = serializers.CharField(required=False, allow_blank=True, max_length=100)
    staffId = serializers.CharField(required=False, allow_blank=True, max_length=32)
    position = serializers.CharField(required=False, allow_blank=True, max_length=100)
    studentId = serializers.CharField(required=False, allow_blank=True, max_length=32)
    gender = serializers.ChoiceField(choices=['male', 'female', 'other'], required=False, allow_blank=True)
    dateOfBirth = serializers.DateField(required=False, allow_null=True)
    address = serializers.CharField(required=False, allow_blank=True, max_length=255)
    emergencyContact = serializers.CharField(required=False, allow_blank=True, max_length=255)
    medicalHistory = serializers.CharField(required=False, allow_blank=True)
    allergies = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    insuranceProvider = serializers.CharField(required=False, allow_blank=True, max_length=100)
    insurancePolicyNumber = serializers.CharField(required=False, allow_blank=True, max_length=100)

    def validate_name(self, v):
        v = _clean(v)
        if len(v) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters')
        return v

    def validate_address(self, v):
        return _clean(v)

    def validate_medicalHistory(self, v):
        return _clean(v)

    def validate(self, attrs):
        if self.partial:
            return attrs
        role = attrs.get('role')
        if role == 'student' and not (attrs.get('studentId') or '').strip():
            raise serializers.ValidationError({'studentId': 'Student ID is required for student role'})
        if role in ('staff', 'doctor') and not (attrs.get('staffId') or '').strip():
            raise serializers.ValidationError({'staffId': f'Staff ID is required for {role} role'})
        return attrs
