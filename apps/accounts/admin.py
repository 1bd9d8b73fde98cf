from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for the email-based user model."""

    list_display = ['email', 'display_name', 'is_active', 'is_staff', 'created_at', 'last_login']
    list_filter = ['is_active', 'is_staff', 'is_superuser', 'created_at']
    search_fields = ['email', 'display_name']
    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    # BaseUserAdmin assumes a username field
    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'display_name', 'image', 'password')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Preferences', {
            'fields': ('preferences',),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login', 'deleted_at'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['created_at', 'last_login', 'deleted_at']
    filter_horizontal = ['groups', 'user_permissions']

    @admin.action(description='Anonymize selected users (irreversible)')
    def anonymize_users(self, request, queryset):
        """Anonymize selected non-staff users."""
        count = 0
        for user in queryset.filter(is_superuser=False, is_staff=False):
            user.anonymize()
            count += 1
        self.message_user(request, f'Anonymized {count} user(s).')

    actions = ['anonymize_users']
