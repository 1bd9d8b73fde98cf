from decimal import Decimal

from rest_framework import serializers

from apps.groups.serializers import UserMinimalSerializer
from .models import ShoppingItem, MarketDate, MarketDateStatus


class ShoppingItemSerializer(serializers.ModelSerializer):
    """Serializer for ShoppingItem model."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = ShoppingItem
        fields = [
            'id', 'group', 'user', 'name', 'quantity', 'unit', 'purchased',
            'date', 'period', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ShoppingItemCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    quantity = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0.00'), default=Decimal('0.00')
    )
    unit = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    date = serializers.DateField(required=False)
    purchased = serializers.BooleanField(default=False)


class ShoppingItemUpdateSerializer(serializers.Serializer):
    """Partial update of an item; omitted fields are kept."""

    name = serializers.CharField(max_length=200, required=False)
    quantity = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False
    )
    unit = serializers.CharField(max_length=20, required=False, allow_blank=True)
    date = serializers.DateField(required=False)
    purchased = serializers.BooleanField(required=False)


class ShoppingFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the shopping list.

    Query Parameters:
        period_id (uuid): Only this period
        start_date (date): Earliest date
        end_date (date): Latest date
        purchased (bool): Only (un)purchased items
    """

    period_id = serializers.UUIDField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    purchased = serializers.BooleanField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        start, end = attrs.get('start_date'), attrs.get('end_date')
        if start and end and start > end:
            raise serializers.ValidationError("start_date must not be after end_date")
        return attrs


class ShoppingSummarySerializer(serializers.Serializer):
    period_id = serializers.UUIDField(allow_null=True)
    total_items = serializers.IntegerField()
    purchased_items = serializers.IntegerField()
    pending_items = serializers.IntegerField()
    total_quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    purchased_quantity = serializers.DecimalField(max_digits=12, decimal_places=2)


class MarketDateSerializer(serializers.ModelSerializer):
    """Serializer for MarketDate model."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = MarketDate
        fields = ['id', 'group', 'user', 'date', 'status', 'fined', 'created_by', 'created_at', 'updated_at']
        read_only_fields = fields


class MarketDateAssignSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    date = serializers.DateField()


class MarketDateStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=MarketDateStatus.choices)


class MarketDateFilterSerializer(serializers.Serializer):
    user_id = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=MarketDateStatus.choices, required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
