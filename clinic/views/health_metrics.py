"""
BMI calculator and per-patient health summary.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import exceptions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import User
from ..permissions import is_clinical
from ..serializers.records import BmiCalculatorSerializer
from ..services.health_metrics import compute_trend, describe_bmi, summarize, trend_display_color
from ..services.records import snapshots_for_patient

CALCULATOR_DIGITS = 1


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def bmi_calculator(request):
    s = BmiCalculatorSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response(summarize(s.validated_data['height'], s.validated_data['weight'], digits=CALCULATOR_DIGITS))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_health_metrics(request, patient_id: int):
    if not (is_clinical(request.user) or request.user.id == patient_id):
        raise exceptions.PermissionDenied('forbidden for this patient')
    get_object_or_404(User, pk=patient_id)

    snapshots = snapshots_for_patient(patient_id)
    latest_bmi = snapshots[0].bmi if snapshots else 0.0
    trend = compute_trend(snapshots)
    return Response({
        'patientId': patient_id,
        'latest': describe_bmi(latest_bmi, digits=CALCULATOR_DIGITS),
        'latestDate': snapshots[0].date.isoformat() if snapshots else None,
        'trend': trend.value,
        'trendColor': trend_display_color(trend, latest_bmi).value,
        'trendIcon': trend.icon,
        'history': [{'date': s.date.isoformat(), 'bmi': s.bmi} for s in reversed(snapshots)],
    })
