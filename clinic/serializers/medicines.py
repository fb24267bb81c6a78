from rest_framework import serializers


class MedicineWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=100)
    quantity = serializers.IntegerField(min_value=0)
    threshold = serializers.IntegerField(min_value=0)
    unit = serializers.CharField(max_length=32)
    description = serializers.CharField(required=False, allow_blank=True)
    dosage = serializers.CharField(required=False, allow_blank=True, max_length=100)
    expiryDate = serializers.DateField(required=False, allow_null=True)
    supplier = serializers.CharField(required=False, allow_blank=True, max_length=255)
