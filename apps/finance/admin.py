from django.contrib import admin
from .models import Payment, ExtraExpense, AccountTransaction, TransactionHistory


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['user', 'group', 'amount', 'date', 'method', 'status']
    list_filter = ['status', 'method', 'date']
    search_fields = ['user__email', 'group__name', 'description']
    raw_id_fields = ['user', 'group', 'period', 'created_by']
    date_hierarchy = 'date'


@admin.register(ExtraExpense)
class ExtraExpenseAdmin(admin.ModelAdmin):
    list_display = ['description', 'user', 'group', 'amount', 'type', 'date']
    list_filter = ['type', 'date']
    search_fields = ['description', 'user__email', 'group__name']
    raw_id_fields = ['user', 'group', 'period', 'transaction']


@admin.register(AccountTransaction)
class AccountTransactionAdmin(admin.ModelAdmin):
    list_display = ['type', 'amount', 'user', 'target_user', 'group', 'created_at']
    list_filter = ['type', 'created_at']
    search_fields = ['description', 'user__email', 'target_user__email']
    raw_id_fields = ['user', 'target_user', 'group', 'period', 'created_by']


@admin.register(TransactionHistory)
class TransactionHistoryAdmin(admin.ModelAdmin):
    list_display = ['action', 'transaction_id', 'group', 'target_user', 'changed_by', 'previous_amount', 'new_amount', 'created_at']
    list_filter = ['action']
    raw_id_fields = ['group', 'target_user', 'changed_by']
    search_fields = ['transaction_id']
    readonly_fields = ['snapshot', 'created_at']
