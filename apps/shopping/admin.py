from django.contrib import admin
from .models import ShoppingItem, MarketDate


@admin.register(ShoppingItem)
class ShoppingItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'quantity', 'unit', 'purchased', 'user', 'group', 'date']
    list_filter = ['purchased', 'date']
    search_fields = ['name', 'user__email', 'group__name']
    raw_id_fields = ['user', 'group', 'period']


@admin.register(MarketDate)
class MarketDateAdmin(admin.ModelAdmin):
    list_display = ['user', 'group', 'date', 'status', 'fined']
    list_filter = ['status', 'fined']
    search_fields = ['user__email', 'group__name']
    raw_id_fields = ['user', 'group', 'created_by']
