from decimal import Decimal

from rest_framework import serializers

from apps.groups.serializers import UserMinimalSerializer
from .models import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    ExtraExpense,
    ExpenseType,
    AccountTransaction,
    TransactionType,
    TransactionHistory,
)


class DateRangeMixin:

    def validate(self, attrs):
        start, end = attrs.get('start_date'), attrs.get('end_date')
        if start and end and start > end:
            raise serializers.ValidationError("start_date must not be after end_date")
        return attrs


# =============================================================================
# Payments
# =============================================================================

class PaymentSerializer(serializers.ModelSerializer):
    """Serializer for Payment model."""

    user = UserMinimalSerializer(read_only=True)
    created_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'user', 'group', 'amount', 'date', 'method', 'status',
            'description', 'period', 'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    """
    Validate input for recording a payment.

    ``user_id`` defaults to the requesting user; only admins and
    accountants may record payments of other members.
    """

    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    date = serializers.DateField()
    method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    user_id = serializers.UUIDField(required=False)


class PaymentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PaymentStatus.choices)


class PaymentFilterSerializer(DateRangeMixin, serializers.Serializer):
    user_id = serializers.UUIDField(required=False)
    period_id = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)


# =============================================================================
# Expenses
# =============================================================================

class ExpenseSerializer(serializers.ModelSerializer):
    """Serializer for ExtraExpense model."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = ExtraExpense
        fields = [
            'id', 'user', 'group', 'amount', 'description', 'date', 'type',
            'receipt_url', 'period', 'transaction', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ExpenseCreateSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    date = serializers.DateField()
    type = serializers.ChoiceField(choices=ExpenseType.choices, default=ExpenseType.OTHER)
    receipt_url = serializers.URLField(required=False, allow_blank=True, default='')


class ExpenseUpdateSerializer(serializers.Serializer):
    """Partial update of an expense; omitted fields are kept."""

    description = serializers.CharField(max_length=255, required=False)
    amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0.01'), required=False
    )
    date = serializers.DateField(required=False)
    type = serializers.ChoiceField(choices=ExpenseType.choices, required=False)
    receipt_url = serializers.URLField(required=False, allow_blank=True)


class ExpenseFilterSerializer(DateRangeMixin, serializers.Serializer):
    period_id = serializers.UUIDField(required=False)
    user_id = serializers.UUIDField(required=False)
    type = serializers.ChoiceField(choices=ExpenseType.choices, required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)


# =============================================================================
# Transactions
# =============================================================================

class TransactionSerializer(serializers.ModelSerializer):
    """Serializer for AccountTransaction model."""

    user = UserMinimalSerializer(read_only=True)
    target_user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = AccountTransaction
        fields = [
            'id', 'group', 'user', 'target_user', 'amount', 'type',
            'description', 'period', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class TransactionCreateSerializer(serializers.Serializer):
    target_user_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    type = serializers.ChoiceField(choices=TransactionType.choices)
    description = serializers.CharField(required=False, allow_blank=True, default='')


class TransactionUpdateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    type = serializers.ChoiceField(choices=TransactionType.choices, required=False)
    description = serializers.CharField(required=False, allow_blank=True)


class TransactionFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the ledger.

    Query Parameters:
        target_user_id (uuid): Only entries applying to this member
        period_id (uuid): Only this period
        cursor (uuid): ``next_cursor`` of the previous page
        limit (int): Page size, 1-100 (default 10)
    """

    target_user_id = serializers.UUIDField(required=False)
    period_id = serializers.UUIDField(required=False)
    cursor = serializers.UUIDField(required=False)
    limit = serializers.IntegerField(min_value=1, max_value=100, default=10)


class TransactionPageSerializer(serializers.Serializer):
    items = TransactionSerializer(many=True)
    next_cursor = serializers.UUIDField(allow_null=True)


class TransactionHistorySerializer(serializers.ModelSerializer):
    """Serializer for TransactionHistory model."""

    changed_by = UserMinimalSerializer(read_only=True)
    target_user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = TransactionHistory
        fields = [
            'id', 'transaction_id', 'action', 'target_user', 'changed_by',
            'previous_amount', 'new_amount', 'snapshot', 'created_at',
        ]
        read_only_fields = fields


# =============================================================================
# Balances
# =============================================================================

class UserBalanceSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    name = serializers.CharField()
    role = serializers.CharField()
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)
    meal_count = serializers.IntegerField()
    meal_rate = serializers.DecimalField(max_digits=12, decimal_places=2)
    meal_cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    available_balance = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_spent = serializers.DecimalField(max_digits=12, decimal_places=2)


class BalanceQuerySerializer(serializers.Serializer):
    user_id = serializers.UUIDField(required=False)


class GroupBalanceSummarySerializer(serializers.Serializer):
    period_id = serializers.UUIDField(allow_null=True)
    members = UserBalanceSerializer(many=True)
    group_total_balance = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_expenses = serializers.DecimalField(max_digits=12, decimal_places=2)
    meal_rate = serializers.DecimalField(max_digits=12, decimal_places=2)
    net_group_balance = serializers.DecimalField(max_digits=12, decimal_places=2)
