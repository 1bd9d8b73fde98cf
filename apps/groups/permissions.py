"""
Custom permission classes for group-scoped endpoints.

Every app routes its group endpoints as ``/api/<app>/<group_id>/...``;
these classes read the group from the URL kwargs (``group_id``, or ``pk`` on
the group ViewSet) and fall back to a ``group_id`` query parameter.

Usage:
    from apps.groups.permissions import IsGroupMember

    @api_view(['GET'])
    @permission_classes([IsAuthenticated, IsGroupMember])
    def meal_list(request, group_id):
        ...
"""

from django.core.exceptions import ValidationError
from rest_framework.permissions import BasePermission

from apps.groups.models import GroupMembership
from apps.groups.roles import GroupRole


def _group_id_from(request, view):
    group_id = view.kwargs.get('group_id') or view.kwargs.get('pk')
    if not group_id:
        group_id = request.query_params.get('group_id')
    return group_id


def _membership(request, group_id):
    try:
        return (
            GroupMembership.objects
            .filter(group_id=group_id, user=request.user, is_banned=False)
            .first()
        )
    except (ValidationError, ValueError):
        return None


class IsGroupMember(BasePermission):
    """
    Permission: user must be an active (non-banned) member of the group.

    Requests that name no group are allowed; the view scopes them to the
    user. An unknown group denies access (403).
    """

    message = 'You must be a member of this group.'

    def has_permission(self, request, view):
        group_id = _group_id_from(request, view)
        if not group_id:
            return True
        return _membership(request, group_id) is not None

    def has_object_permission(self, request, view, obj):
        # obj is a Group instance
        return obj.has_member(request.user)


class IsGroupAdmin(BasePermission):
    """
    Permission: user must hold the ADMIN role in the group.
    """

    message = 'Only group admins can perform this action.'

    def has_permission(self, request, view):
        group_id = _group_id_from(request, view)
        if not group_id:
            return False
        membership = _membership(request, group_id)
        return membership is not None and membership.role == GroupRole.ADMIN

    def has_object_permission(self, request, view, obj):
        return obj.is_admin(request.user)
