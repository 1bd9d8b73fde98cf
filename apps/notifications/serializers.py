from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Notification as shown in the bell menu."""

    group_name = serializers.CharField(source='group.name', read_only=True, default=None)

    class Meta:
        model = Notification
        fields = ['id', 'type', 'message', 'read', 'group', 'group_name', 'created_at']
        read_only_fields = fields


class NotificationFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the notification list.

    Query Parameters:
        unread (bool): Only unread notifications
    """

    unread = serializers.BooleanField(required=False, default=False)
