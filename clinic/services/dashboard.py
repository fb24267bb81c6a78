"""
Dashboard aggregation, caching and live refresh notifications.
"""
from __future__ import annotations

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db.models import F
from django.utils import timezone

from clinic.models import Appointment, MedicalRecord, Medicine
from clinic.services.health_metrics import BmiCategory, classify_bmi, is_valid_bmi

User = get_user_model()
logger = logging.getLogger(__name__)

CACHE_KEY = 'dashboard:summary'
UPDATES_GROUP = 'updates'


def bmi_distribution() -> dict:
    """Category counts over each student's most recent record."""
    counts = {c.value: 0 for c in BmiCategory}
    counts['notAvailable'] = 0
    seen = set()
    rows = MedicalRecord.objects.filter(patient__role=User.ROLE_STUDENT).order_by(
        'patient_id', '-date', '-created_at'
    ).values_list('patient_id', 'bmi')
    for patient_id, bmi in rows:
        if patient_id in seen:
            continue
        seen.add(patient_id)
        if is_valid_bmi(bmi):
            counts[classify_bmi(bmi).value] += 1
        else:
            counts['notAvailable'] += 1
    return counts


def build_summary() -> dict:
    today = timezone.localdate()
    scheduled = Appointment.objects.filter(status=Appointment.STATUS_SCHEDULED)
    return {
        'students': User.objects.filter(role=User.ROLE_STUDENT).count(),
        'records': MedicalRecord.objects.count(),
        'appointmentsToday': scheduled.filter(date=today).count(),
        'upcomingAppointments': scheduled.filter(date__gt=today).count(),
        'lowStockMedicines': Medicine.objects.filter(quantity__lte=F('threshold')).count(),
        'bmiDistribution': bmi_distribution(),
        'generatedAt': timezone.now().isoformat(),
    }


def get_summary() -> dict:
    data = cache.get(CACHE_KEY)
    if data is None:
        data = build_summary()
        cache.set(CACHE_KEY, data, settings.DASHBOARD_CACHE_SECONDS)
    return data


def refresh_summary() -> dict:
    data = build_summary()
    cache.set(CACHE_KEY, data, settings.DASHBOARD_CACHE_SECONDS)
    return data


def broadcast_refresh(keys) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    now = timezone.now()
    event = {'type': 'broadcast.refresh', 'version': int(now.timestamp()), 'ts': now.isoformat(), 'keys': list(keys)[:50]}
    async_to_sync(channel_layer.group_send)(UPDATES_GROUP, event)


def notify_changed(*keys: str) -> None:
    """Drop the cached summary and tell connected dashboards to reload."""
    cache.delete(CACHE_KEY)
    try:
        broadcast_refresh((CACHE_KEY,) + keys)
    except Exception:
        # channel layer outages are non-fatal for writes
        logger.warning('dashboard refresh broadcast failed', exc_info=True)
