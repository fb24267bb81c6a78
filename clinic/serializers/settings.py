from rest_framework import serializers


class BrandingSerializer(serializers.Serializer):
    clinicName = serializers.CharField(required=False, max_length=255)
    tagline = serializers.CharField(required=False, allow_blank=True, max_length=255)
    primaryLogo = serializers.CharField(required=False, allow_blank=True)
    secondaryLogo = serializers.CharField(required=False, allow_blank=True)


class SendPdfSerializer(serializers.Serializer):
    email = serializers.EmailField()
    pdfData = serializers.CharField()
    subject = serializers.CharField(required=False, allow_blank=True, max_length=255)
    message = serializers.CharField(required=False, allow_blank=True)
    fileName = serializers.CharField(required=False, allow_blank=True, max_length=255)
