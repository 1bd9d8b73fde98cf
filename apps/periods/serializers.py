from rest_framework import serializers

from apps.groups.serializers import UserMinimalSerializer
from .models import MealPeriod, PeriodStatus


class MealPeriodSerializer(serializers.ModelSerializer):
    """Serializer for MealPeriod model."""

    created_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = MealPeriod
        fields = [
            'id',
            'group',
            'name',
            'start_date',
            'end_date',
            'status',
            'is_locked',
            'opening_balance',
            'closing_balance',
            'carry_forward',
            'notes',
            'created_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PeriodStartSerializer(serializers.Serializer):
    """Validate input for starting a period."""

    name = serializers.CharField(max_length=120)
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True, default=None)
    opening_balance = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
    carry_forward = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Name cannot be blank")
        return value.strip()


class PeriodEndSerializer(serializers.Serializer):
    end_date = serializers.DateField(required=False, allow_null=True, default=None)


class PeriodUnlockSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[PeriodStatus.ENDED, PeriodStatus.ACTIVE],
        required=False,
        default=PeriodStatus.ENDED
    )


class PeriodRestartSerializer(serializers.Serializer):
    new_name = serializers.CharField(max_length=120, required=False, allow_blank=True, default='')
    with_data = serializers.BooleanField(required=False, default=False)


class PeriodListFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the period list.

    Query Parameters:
        include_archived (bool): Also return archived periods
    """

    include_archived = serializers.BooleanField(required=False, default=False)


class PeriodMonthFilterSerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=2000, max_value=2100)
    month = serializers.IntegerField(min_value=1, max_value=12)


class PeriodSummarySerializer(serializers.Serializer):
    """Read-only totals of one period."""

    period = MealPeriodSerializer()
    total_meals = serializers.IntegerField()
    total_guest_meals = serializers.IntegerField()
    total_shopping = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_payments = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_expenses = serializers.DecimalField(max_digits=14, decimal_places=2)
    active_members = serializers.IntegerField()
    meal_rate = serializers.DecimalField(max_digits=14, decimal_places=2)
