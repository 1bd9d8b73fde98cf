from django.contrib import admin
from .models import Vote


@admin.register(Vote)
class VoteAdmin(admin.ModelAdmin):
    list_display = ['title', 'group', 'type', 'is_active', 'start_date', 'end_date', 'created_by']
    list_filter = ['type', 'is_active']
    search_fields = ['title', 'group__name']
    raw_id_fields = ['group', 'created_by']
