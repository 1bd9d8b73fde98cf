from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .serializers import NotificationSerializer, NotificationFilterSerializer
from .services import (
    list_notifications,
    unread_count,
    mark_as_read,
    mark_all_as_read,
    delete_notification,
    NotificationNotFoundError,
)


@extend_schema(
    parameters=[
        OpenApiParameter('unread', OpenApiTypes.BOOL, description='Only unread notifications'),
    ],
    responses={200: NotificationSerializer(many=True)},
    description="Latest 50 notifications of the current user.",
    tags=['notifications'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """List the current user's notifications."""
    filters = NotificationFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)

    notifications = list_notifications(
        user=request.user,
        unread_only=filters.validated_data['unread'],
    )
    return Response({
        'results': NotificationSerializer(notifications, many=True).data,
        'unread_count': unread_count(user=request.user),
    })


@extend_schema(
    request=None,
    responses={200: NotificationSerializer},
    description="Mark a notification as read.",
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_read(request, notification_id):
    """Mark one notification as read (owner only)."""
    try:
        notification = mark_as_read(notification_id=notification_id, user=request.user)
    except NotificationNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(NotificationSerializer(notification).data)


@extend_schema(
    request=None,
    description="Mark all notifications of the current user as read.",
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_read_all(request):
    """Mark everything as read."""
    updated = mark_all_as_read(user=request.user)
    return Response({'updated': updated})


@extend_schema(
    responses={204: None},
    description="Delete a notification.",
    tags=['notifications'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def notification_delete(request, notification_id):
    """Delete one notification (owner only)."""
    try:
        delete_notification(notification_id=notification_id, user=request.user)
    except NotificationNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(status=status.HTTP_204_NO_CONTENT)
