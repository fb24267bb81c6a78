"""
Medicine inventory endpoints.
"""
from __future__ import annotations

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Medicine
from ..permissions import InventoryWriteOrClinicalRead
from ..serializers.medicines import MedicineWriteSerializer
from ..services.audit import log_action
from ..services.dashboard import notify_changed

_FIELDS = {
    'name': 'name',
    'category': 'category',
    'quantity': 'quantity',
    'threshold': 'threshold',
    'unit': 'unit',
    'description': 'description',
    'dosage': 'dosage',
    'expiryDate': 'expiry_date',
    'supplier': 'supplier',
}


def format_medicine(m: Medicine) -> dict:
    return {
        'id': str(m.id),
        'name': m.name,
        'category': m.category,
        'quantity': m.quantity,
        'threshold': m.threshold,
        'unit': m.unit,
        'description': m.description,
        'dosage': m.dosage,
        'expiryDate': m.expiry_date.isoformat() if m.expiry_date else None,
        'supplier': m.supplier,
        'lowStock': m.low_stock,
        'createdAt': m.created_at.isoformat(),
        'updatedAt': m.updated_at.isoformat(),
    }


def _apply(m: Medicine, data: dict) -> Medicine:
    for key, attr in _FIELDS.items():
        if key in data:
            setattr(m, attr, data[key])
    with transaction.atomic():
        m.save()
    return m


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, InventoryWriteOrClinicalRead])
def medicines(request):
    if request.method == 'GET':
        return Response([format_medicine(m) for m in Medicine.objects.all()])
    s = MedicineWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    m = _apply(Medicine(), s.validated_data)
    log_action(user=request.user, action='medicine_create', object_type='medicine', object_id=m.id)
    notify_changed('medicines')
    return Response(format_medicine(m), status=201)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, InventoryWriteOrClinicalRead])
def medicine_detail(request, medicine_id):
    m = get_object_or_404(Medicine, pk=medicine_id)
    if request.method == 'GET':
        return Response(format_medicine(m))
    if request.method == 'PUT':
        s = MedicineWriteSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        _apply(m, s.validated_data)
        log_action(user=request.user, action='medicine_update', object_type='medicine', object_id=m.id,
                   detail={'fields': sorted(s.validated_data)})
        notify_changed('medicines')
        return Response(format_medicine(m))
    m.delete()
    log_action(user=request.user, action='medicine_delete', object_type='medicine', object_id=medicine_id)
    notify_changed('medicines')
    return Response({'ok': True})
