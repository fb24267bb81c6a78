"""
Custom permission classes for role based access control.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

CLINICAL_ROLES = {"admin", "doctor", "staff", "head_nurse"}
INVENTORY_ROLES = {"admin", "head_nurse", "staff"}
VALID_ROLES = CLINICAL_ROLES | {"student"}


def has_role(user, roles) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "role", None) in roles)


def is_clinical(user) -> bool:
    return has_role(user, CLINICAL_ROLES)


class IsClinicalRole(BasePermission):
    """Allow access only to clinic personnel (admin, doctor, staff, head nurse)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return is_clinical(getattr(request, "user", None))


class InventoryWriteOrClinicalRead(BasePermission):
    """Clinical roles may read; admin, head nurse and staff may write."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if request.method in SAFE_METHODS:
            return is_clinical(user)
        return has_role(user, INVENTORY_ROLES)


class IsOwnerOrClinical(BasePermission):
    """Object must belong to the user (expects `obj.patient_id`) unless the user is clinical."""
    def has_object_permission(self, request, view, obj) -> bool:
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated):
            return False
        if is_clinical(user):
            return True
        return getattr(obj, "patient_id", None) == user.id
