from rest_framework import serializers
from .models import (
    Group,
    GroupMembership,
    GroupActivityLog,
    JoinRequest,
    JoinRequestStatus,
    InviteToken,
    PeriodMode,
    DEFAULT_NOTIFICATION_SETTINGS,
)
from .roles import GroupRole, get_role_permissions
from apps.accounts.models import User


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name', 'image']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()


class GroupSerializer(serializers.ModelSerializer):
    """Main serializer for groups."""

    created_by = UserMinimalSerializer(read_only=True)
    has_password = serializers.BooleanField(read_only=True)
    user_role = serializers.SerializerMethodField()
    user_permissions = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'is_private',
            'has_password',
            'max_members',
            'member_count',
            'period_mode',
            'features',
            'fine_amount',
            'fine_enabled',
            'is_active',
            'created_by',
            'user_role',
            'user_permissions',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def _role(self, obj):
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return obj.get_user_role(request.user)
        return None

    def get_user_role(self, obj):
        """Get current user's role in the group."""
        return self._role(obj)

    def get_user_permissions(self, obj):
        role = self._role(obj)
        return get_role_permissions(role) if role else []


class GroupCreateSerializer(serializers.Serializer):
    """Input for creating groups."""

    name = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    is_private = serializers.BooleanField(required=False, default=False)
    password = serializers.CharField(
        required=False,
        allow_blank=True,
        default='',
        write_only=True,
        style={'input_type': 'password'}
    )
    max_members = serializers.IntegerField(required=False, default=20, min_value=1, max_value=500)
    features = serializers.DictField(required=False, default=dict)


class GroupUpdateSerializer(serializers.Serializer):
    """Input for partial group updates."""

    name = serializers.CharField(max_length=100, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    is_private = serializers.BooleanField(required=False)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True)
    max_members = serializers.IntegerField(required=False, min_value=1, max_value=500)
    features = serializers.DictField(required=False)
    fine_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False
    )
    fine_enabled = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)


class GroupListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    created_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'is_private',
            'member_count',
            'max_members',
            'period_mode',
            'created_by',
            'created_at',
        ]
        read_only_fields = fields


class GroupMemberSerializer(serializers.ModelSerializer):
    """Detailed member information."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = GroupMembership
        fields = ['id', 'user', 'role', 'is_current', 'is_banned', 'joined_at']
        read_only_fields = fields


class JoinGroupSerializer(serializers.Serializer):
    """Serializer for joining a group with a password or invite token."""

    password = serializers.CharField(required=False, allow_blank=True)
    token = serializers.CharField(max_length=10, required=False, allow_blank=True)


class UpdateMemberRoleSerializer(serializers.Serializer):
    """Serializer for updating member role."""

    user_id = serializers.UUIDField()
    role = serializers.ChoiceField(choices=GroupRole.choices)


class RemoveMemberSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()


class PeriodModeSerializer(serializers.Serializer):
    mode = serializers.ChoiceField(choices=PeriodMode.choices)


class NotificationSettingsSerializer(serializers.Serializer):
    """Every toggle is optional; unknown keys are ignored."""

    meal_updates = serializers.BooleanField(required=False)
    payment_updates = serializers.BooleanField(required=False)
    vote_updates = serializers.BooleanField(required=False)
    announcements = serializers.BooleanField(required=False)
    email_notifications = serializers.BooleanField(required=False)

    def validate(self, attrs):
        return {k: v for k, v in attrs.items() if k in DEFAULT_NOTIFICATION_SETTINGS}


class JoinRequestCreateSerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, default='', max_length=500)


class JoinRequestProcessSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=['approve', 'reject'])


class JoinRequestFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=JoinRequestStatus.choices,
        required=False,
        default=JoinRequestStatus.PENDING
    )


class JoinRequestSerializer(serializers.ModelSerializer):
    user = UserMinimalSerializer(read_only=True)
    processed_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = JoinRequest
        fields = ['id', 'user', 'group', 'status', 'message', 'processed_by', 'created_at', 'updated_at']
        read_only_fields = fields


class InviteTokenCreateSerializer(serializers.Serializer):
    role = serializers.ChoiceField(
        choices=[c for c in GroupRole.choices if c[0] != GroupRole.BANNED],
        required=False,
        default=GroupRole.MEMBER
    )
    expires_in_days = serializers.IntegerField(required=False, allow_null=True, min_value=1, max_value=365)


class InviteTokenSerializer(serializers.ModelSerializer):
    group = GroupListSerializer(read_only=True)

    class Meta:
        model = InviteToken
        fields = ['id', 'token', 'group', 'role', 'expires_at', 'used_at', 'created_at']
        read_only_fields = fields


class SendInvitationsSerializer(serializers.Serializer):
    emails = serializers.ListField(
        child=serializers.EmailField(),
        allow_empty=False,
        max_length=50
    )
    role = serializers.ChoiceField(
        choices=[c for c in GroupRole.choices if c[0] != GroupRole.BANNED],
        required=False,
        default=GroupRole.MEMBER
    )


class ActivityLogSerializer(serializers.ModelSerializer):
    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = GroupActivityLog
        fields = ['id', 'user', 'type', 'details', 'created_at']
        read_only_fields = fields
