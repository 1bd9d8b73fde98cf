from rest_framework import serializers

from apps.groups.serializers import UserMinimalSerializer
from .models import Meal, GuestMeal, MealSettings, AutoMealSettings, MealType


class MealSerializer(serializers.ModelSerializer):
    """Serializer for Meal model."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Meal
        fields = ['id', 'user', 'group', 'date', 'type', 'period', 'created_at']
        read_only_fields = fields


class MealToggleSerializer(serializers.Serializer):
    """
    Validate input for adding or removing a meal.

    ``user_id`` defaults to the requesting user; only meal admins may
    name someone else.
    """

    date = serializers.DateField()
    type = serializers.ChoiceField(choices=MealType.choices)
    action = serializers.ChoiceField(choices=['add', 'remove'])
    user_id = serializers.UUIDField(required=False)


class MealFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for meal and guest meal lists.

    Query Parameters:
        start_date (date): Earliest date
        end_date (date): Latest date
        user_id (uuid): Only this member
        period_id (uuid): Only this period
    """

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    user_id = serializers.UUIDField(required=False)
    period_id = serializers.UUIDField(required=False)

    def validate(self, attrs):
        start, end = attrs.get('start_date'), attrs.get('end_date')
        if start and end and start > end:
            raise serializers.ValidationError("start_date must not be after end_date")
        return attrs


class GuestMealSerializer(serializers.ModelSerializer):
    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = GuestMeal
        fields = ['id', 'user', 'group', 'date', 'type', 'count', 'period', 'created_at', 'updated_at']
        read_only_fields = fields


class GuestMealUpsertSerializer(serializers.Serializer):
    date = serializers.DateField()
    type = serializers.ChoiceField(choices=MealType.choices)
    count = serializers.IntegerField(min_value=0, max_value=50)


class MealSettingsSerializer(serializers.ModelSerializer):
    """Group meal rules; every field is optional on update."""

    class Meta:
        model = MealSettings
        fields = [
            'breakfast_time',
            'lunch_time',
            'dinner_time',
            'auto_meal_enabled',
            'meal_cutoff_time',
            'max_meals_per_day',
            'allow_guest_meals',
            'guest_meal_limit',
            'updated_at',
        ]
        read_only_fields = ['updated_at']
        extra_kwargs = {
            'max_meals_per_day': {'min_value': 1, 'max_value': 3},
            'guest_meal_limit': {'min_value': 0, 'max_value': 50},
        }


class AutoMealSettingsSerializer(serializers.ModelSerializer):
    excluded_dates = serializers.ListField(child=serializers.DateField(), required=False)
    excluded_meal_types = serializers.ListField(
        child=serializers.ChoiceField(choices=MealType.choices),
        required=False
    )

    class Meta:
        model = AutoMealSettings
        fields = [
            'is_enabled',
            'breakfast_enabled',
            'lunch_enabled',
            'dinner_enabled',
            'guest_meal_enabled',
            'start_date',
            'end_date',
            'excluded_dates',
            'excluded_meal_types',
            'updated_at',
        ]
        read_only_fields = ['updated_at']

    def validate(self, attrs):
        start, end = attrs.get('start_date'), attrs.get('end_date')
        if start and end and start > end:
            raise serializers.ValidationError("start_date must not be after end_date")
        return attrs


class AutoMealTriggerSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)


class MealStatsSerializer(serializers.Serializer):
    """Read-only meal counts of a period."""

    period_id = serializers.UUIDField(allow_null=True)
    total_meals = serializers.IntegerField()
    total_guest_meals = serializers.IntegerField()
    by_type = serializers.DictField(child=serializers.IntegerField())
    by_user = serializers.ListField(child=serializers.DictField())
