from django.contrib import admin
from .models import MealPeriod


@admin.register(MealPeriod)
class MealPeriodAdmin(admin.ModelAdmin):
    """Admin interface for meal periods."""

    list_display = [
        'name',
        'group',
        'status',
        'start_date',
        'end_date',
        'is_locked',
        'opening_balance',
        'closing_balance',
    ]
    list_filter = ['status', 'is_locked', 'carry_forward']
    search_fields = ['name', 'group__name']
    raw_id_fields = ['group', 'created_by']
    readonly_fields = ['closing_balance', 'created_at', 'updated_at']
    date_hierarchy = 'start_date'
