from rest_framework import serializers

STATUS_CHOICES = ['scheduled', 'completed', 'cancelled']


class AppointmentWriteSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    doctorId = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
    startTime = serializers.TimeField()
    endTime = serializers.TimeField()
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False)
    reason = serializers.CharField(max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        start = attrs.get('startTime', getattr(self.instance, 'start_time', None))
        end = attrs.get('endTime', getattr(self.instance, 'end_time', None))
        if start and end and end <= start:
            raise serializers.ValidationError({'endTime': 'End time must be after start time'})
        return attrs


class SlotQuerySerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
