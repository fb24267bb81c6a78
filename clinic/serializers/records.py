import bleach
from rest_framework import serializers


class VitalSignsSerializer(serializers.Serializer):
    heartRate = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    bloodPressure = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=20)
    bloodGlucose = serializers.FloatField(required=False, allow_null=True)
    respiratoryRate = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    oxygenSaturation = serializers.FloatField(required=False, allow_null=True, min_value=0, max_value=100)


class VaccinationSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    dateAdministered = serializers.DateField()
    doseNumber = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    manufacturer = serializers.CharField(required=False, allow_blank=True, max_length=100)
    lotNumber = serializers.CharField(required=False, allow_blank=True, max_length=50)
    administeredBy = serializers.CharField(required=False, allow_blank=True, max_length=100)
    notes = serializers.CharField(required=False, allow_blank=True)


class MedicalRecordWriteSerializer(serializers.Serializer):
    """Single parse step for record payloads.

    Height, weight and BMI arrive as numbers or numeric strings depending
    on the client; ``FloatField`` turns both into floats so the services
    never see strings.
    """
    patientId = serializers.IntegerField(required=False, min_value=1)
    doctorId = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    appointmentId = serializers.UUIDField(required=False, allow_null=True)
    date = serializers.DateField(required=False)
    type = serializers.CharField(required=False, allow_blank=True, max_length=50)
    height = serializers.FloatField(required=False, min_value=0)
    weight = serializers.FloatField(required=False, min_value=0)
    bmi = serializers.FloatField(required=False, allow_null=True)
    bloodPressure = serializers.CharField(required=False, allow_blank=True, max_length=20)
    temperature = serializers.FloatField(required=False, allow_null=True)
    diagnosis = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    followUpDate = serializers.DateField(required=False, allow_null=True)
    certificateEnabled = serializers.BooleanField(required=False)
    medications = serializers.ListField(child=serializers.CharField(max_length=255), required=False)
    vitalSigns = VitalSignsSerializer(required=False, allow_null=True)
    vaccinations = VaccinationSerializer(many=True, required=False)

    def validate_diagnosis(self, v):
        return bleach.clean(v or '', tags=set(), strip=True)

    def validate_notes(self, v):
        return bleach.clean(v or '', tags=set(), strip=True)


class BmiCalculatorSerializer(serializers.Serializer):
    height = serializers.FloatField()
    weight = serializers.FloatField()
