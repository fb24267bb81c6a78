"""
User management endpoints.

Clinical roles can browse users; only administrators create or delete
them.  Students can read and edit their own account, doctors can edit
any account's details but not its role, email or password.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import exceptions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import User
from ..permissions import IsClinicalRole, VALID_ROLES, has_role, is_clinical
from ..serializers.users import UserWriteSerializer
from ..services.audit import log_action
from ..services.patients import create_user, format_user, update_user


def _users():
    return User.objects.select_related('patient_profile').order_by('id')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def users(request):
    if request.method == 'GET':
        if not is_clinical(request.user):
            raise exceptions.PermissionDenied('clinic personnel only')
        return Response([format_user(u) for u in _users()])

    if not has_role(request.user, {'admin'}):
        raise exceptions.PermissionDenied('only administrators can create users')
    s = UserWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = create_user(s.validated_data)
    log_action(user=request.user, action='user_create', object_type='user', object_id=user.id,
               detail={'role': user.role})
    return Response(format_user(user), status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalRole])
def users_by_role(request, role: str):
    if role not in VALID_ROLES:
        raise exceptions.ValidationError({'role': f'Unknown role {role}'})
    return Response([format_user(u) for u in _users().filter(role=role)])


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail(request, user_id: int):
    user = get_object_or_404(_users(), pk=user_id)
    me = request.user
    is_self = me.id == user.id

    if request.method == 'GET':
        if not (is_self or is_clinical(me)):
            raise exceptions.PermissionDenied('forbidden for this user')
        return Response(format_user(user))

    if request.method == 'PUT':
        is_admin = has_role(me, {'admin'})
        if not (is_self or is_admin or has_role(me, {'doctor'})):
            raise exceptions.PermissionDenied('forbidden for this user')
        s = UserWriteSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        if not (is_self or is_admin) and {'password', 'email'} & set(s.validated_data):
            raise exceptions.PermissionDenied('only the account owner or an administrator can change credentials')
        update_user(user, s.validated_data, allow_role_change=is_admin)
        log_action(user=me, action='user_update', object_type='user', object_id=user.id)
        return Response(format_user(user))

    if not has_role(me, {'admin'}):
        raise exceptions.PermissionDenied('only administrators can delete users')
    if is_self:
        raise exceptions.ValidationError('administrators cannot delete their own account')
    user.delete()
    log_action(user=me, action='user_delete', object_type='user', object_id=user_id)
    return Response({'ok': True})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def current_profile(request):
    """Return the signed-in user, including age derived from date of birth."""
    user = User.objects.select_related('patient_profile').get(pk=request.user.pk)
    return Response(format_user(user))
