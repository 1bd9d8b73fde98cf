from django.contrib.auth.hashers import make_password, check_password
from django.db import models
from django.utils import timezone
import uuid

from .roles import GroupRole, GroupPermission, has_permission


DEFAULT_NOTIFICATION_SETTINGS = {
    'meal_updates': True,
    'payment_updates': True,
    'vote_updates': True,
    'announcements': True,
    'email_notifications': False,
}


class PeriodMode(models.TextChoices):
    MONTHLY = 'MONTHLY', 'Monthly'
    CUSTOM = 'CUSTOM', 'Custom'


class Group(models.Model):
    """A shared household (room) whose members split meals and costs."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    is_private = models.BooleanField(default=False)
    # Hashed with Django's password hashers; blank means "no password"
    password = models.CharField(max_length=128, blank=True)
    max_members = models.PositiveIntegerField(default=20)
    member_count = models.PositiveIntegerField(default=0)
    period_mode = models.CharField(
        max_length=10,
        choices=PeriodMode.choices,
        default=PeriodMode.MONTHLY
    )
    features = models.JSONField(default=dict, blank=True)
    fine_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    fine_enabled = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='created_groups'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'groups'
        indexes = [
            models.Index(fields=['created_by', 'created_at']),
            models.Index(fields=['is_private', 'is_active']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def set_password(self, raw_password):
        self.password = make_password(raw_password) if raw_password else ''

    def check_password(self, raw_password):
        if not self.password or not raw_password:
            return False
        return check_password(raw_password, self.password)

    @property
    def has_password(self):
        return bool(self.password)

    @property
    def is_full(self):
        return self.member_count >= self.max_members

    def has_member(self, user):
        return self.memberships.filter(user=user, is_banned=False).exists()

    def get_membership(self, user):
        return self.memberships.filter(user=user).first()

    def get_user_role(self, user):
        membership = self.get_membership(user)
        return membership.role if membership else None

    def is_admin(self, user):
        return self.get_user_role(user) == GroupRole.ADMIN


class GroupMembership(models.Model):
    """User membership in a group with role (RoomMember)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='group_memberships')
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='memberships')
    role = models.CharField(max_length=20, choices=GroupRole.choices, default=GroupRole.MEMBER)
    is_current = models.BooleanField(default=False)
    is_banned = models.BooleanField(default=False)
    # Per-member overrides of the role table: {"manage_meals": true, ...}
    permissions = models.JSONField(default=dict, blank=True)
    notification_settings = models.JSONField(default=dict, blank=True)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'group_memberships'
        unique_together = [['user', 'group']]
        indexes = [
            models.Index(fields=['group', 'role']),
            models.Index(fields=['user', 'is_current']),
        ]
        ordering = ['joined_at']

    def __str__(self):
        return f"{self.user.get_display_name()} in {self.group.name} ({self.role})"

    def has_permission(self, action: GroupPermission) -> bool:
        if self.is_banned:
            return False
        return has_permission(self.role, action, self.permissions)

    def get_notification_settings(self) -> dict:
        return {**DEFAULT_NOTIFICATION_SETTINGS, **(self.notification_settings or {})}


class JoinRequestStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    APPROVED = 'APPROVED', 'Approved'
    REJECTED = 'REJECTED', 'Rejected'


class JoinRequest(models.Model):
    """Request to join a private group, reviewed by its admins."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='join_requests')
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='join_requests')
    status = models.CharField(
        max_length=10,
        choices=JoinRequestStatus.choices,
        default=JoinRequestStatus.PENDING
    )
    message = models.TextField(blank=True)
    processed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='processed_join_requests'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'group_join_requests'
        unique_together = [['user', 'group']]
        indexes = [
            models.Index(fields=['group', 'status']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user} → {self.group} ({self.status})"


class InviteToken(models.Model):
    """Shareable join token (10 uppercase letters)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    token = models.CharField(max_length=10, unique=True, db_index=True)
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='invite_tokens')
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='created_invite_tokens'
    )
    role = models.CharField(max_length=20, choices=GroupRole.choices, default=GroupRole.MEMBER)
    expires_at = models.DateTimeField(null=True, blank=True)
    used_at = models.DateTimeField(null=True, blank=True)
    used_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='used_invite_tokens'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'group_invite_tokens'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.token} ({self.group.name})"

    @property
    def is_expired(self):
        return self.expires_at is not None and self.expires_at <= timezone.now()

    @property
    def is_used(self):
        return self.used_at is not None


class InvitationStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    ACCEPTED = 'ACCEPTED', 'Accepted'
    EXPIRED = 'EXPIRED', 'Expired'


class Invitation(models.Model):
    """Email invitation to a group."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(max_length=255)
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='invitations')
    invited_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='sent_invitations'
    )
    token = models.CharField(max_length=64, unique=True, db_index=True)
    role = models.CharField(max_length=20, choices=GroupRole.choices, default=GroupRole.MEMBER)
    status = models.CharField(
        max_length=10,
        choices=InvitationStatus.choices,
        default=InvitationStatus.PENDING
    )
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'group_invitations'
        indexes = [
            models.Index(fields=['group', 'email', 'status']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.email} → {self.group.name} ({self.status})"

    @property
    def is_expired(self):
        return self.expires_at <= timezone.now()


class ActivityType(models.TextChoices):
    GROUP_CREATED = 'GROUP_CREATED', 'Group created'
    GROUP_UPDATED = 'GROUP_UPDATED', 'Group updated'
    MEMBER_JOINED = 'MEMBER_JOINED', 'Member joined'
    MEMBER_LEFT = 'MEMBER_LEFT', 'Member left'
    MEMBER_REMOVED = 'MEMBER_REMOVED', 'Member removed'
    ROLE_CHANGED = 'ROLE_CHANGED', 'Role changed'
    INVITE_CREATED = 'INVITE_CREATED', 'Invite created'
    INVITATIONS_SENT = 'INVITATIONS_SENT', 'Invitations sent'
    JOIN_REQUEST_PROCESSED = 'JOIN_REQUEST_PROCESSED', 'Join request processed'
    PERIOD_MODE_CHANGED = 'PERIOD_MODE_CHANGED', 'Period mode changed'


class GroupActivityLog(models.Model):
    """Audit trail of administrative group actions."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='activity_logs')
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='group_activities'
    )
    type = models.CharField(max_length=30, choices=ActivityType.choices)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'group_activity_logs'
        indexes = [
            models.Index(fields=['group', 'created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.type} in {self.group_id}"
