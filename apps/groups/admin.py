from django.contrib import admin
from apps.groups.models import (
    Group,
    GroupMembership,
    JoinRequest,
    InviteToken,
    Invitation,
    GroupActivityLog,
)


class GroupMembershipInline(admin.TabularInline):
    """Inline admin for group memberships."""
    model = GroupMembership
    extra = 0
    fields = ['user', 'role', 'is_current', 'is_banned', 'joined_at']
    readonly_fields = ['joined_at']


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    """Admin interface for Groups."""

    list_display = [
        'name',
        'created_by',
        'member_count',
        'max_members',
        'is_private',
        'period_mode',
        'is_active',
        'created_at'
    ]
    list_filter = ['is_private', 'period_mode', 'is_active', 'fine_enabled', 'created_at']
    search_fields = ['name', 'description', 'created_by__email']
    readonly_fields = ['member_count', 'created_at', 'updated_at']
    exclude = ['password']
    inlines = [GroupMembershipInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']


@admin.register(GroupMembership)
class GroupMembershipAdmin(admin.ModelAdmin):
    """Admin interface for Group Memberships."""

    list_display = ['user', 'group', 'role', 'is_current', 'is_banned', 'joined_at']
    list_filter = ['role', 'is_banned', 'joined_at']
    search_fields = ['user__email', 'group__name']
    readonly_fields = ['joined_at']
    date_hierarchy = 'joined_at'
    ordering = ['-joined_at']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('user', 'group')


@admin.register(JoinRequest)
class JoinRequestAdmin(admin.ModelAdmin):
    list_display = ['user', 'group', 'status', 'processed_by', 'created_at']
    list_filter = ['status']
    search_fields = ['user__email', 'group__name']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(InviteToken)
class InviteTokenAdmin(admin.ModelAdmin):
    list_display = ['token', 'group', 'role', 'created_by', 'expires_at', 'used_at']
    list_filter = ['role']
    search_fields = ['token', 'group__name']
    readonly_fields = ['created_at']


@admin.register(Invitation)
class InvitationAdmin(admin.ModelAdmin):
    list_display = ['email', 'group', 'role', 'status', 'expires_at', 'created_at']
    list_filter = ['status', 'role']
    search_fields = ['email', 'group__name']
    readonly_fields = ['token', 'created_at']


@admin.register(GroupActivityLog)
class GroupActivityLogAdmin(admin.ModelAdmin):
    list_display = ['type', 'group', 'user', 'created_at']
    list_filter = ['type']
    search_fields = ['group__name', 'user__email']
    readonly_fields = ['group', 'user', 'type', 'details', 'created_at']
