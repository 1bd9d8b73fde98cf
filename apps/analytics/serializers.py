from rest_framework import serializers


# =============================================================================
# Input Serializers
# =============================================================================

class PeriodQuerySerializer(serializers.Serializer):
    """
    Validate the period query parameter.

    Query Parameters:
        period_id (UUID): Period to report on; the active period when omitted
    """

    period_id = serializers.UUIDField(required=False)


# =============================================================================
# Response Serializers (API Documentation)
# =============================================================================

class PeriodBriefSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField(allow_null=True)
    status = serializers.CharField()


class MealRateSerializer(serializers.Serializer):
    """Response serializer for the meal rate of a period."""
    period_id = serializers.UUIDField(allow_null=True)
    total_meals = serializers.IntegerField()
    total_expenses = serializers.DecimalField(max_digits=12, decimal_places=2)
    meal_rate = serializers.DecimalField(max_digits=12, decimal_places=2)


class UserSummarySerializer(serializers.Serializer):
    """One member's billing line of a period."""
    user_id = serializers.UUIDField()
    name = serializers.CharField()
    email = serializers.EmailField()
    role = serializers.CharField()
    meals = serializers.IntegerField()
    guest_meals = serializers.IntegerField()
    total_meals = serializers.IntegerField()
    cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)


class MyFiguresSerializer(serializers.Serializer):
    meals = serializers.IntegerField()
    cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)


class ActivitySerializer(serializers.Serializer):
    kind = serializers.CharField()
    at = serializers.DateTimeField()
    text = serializers.CharField()


class DashboardResponseSerializer(serializers.Serializer):
    """Response serializer for the group dashboard."""
    period = PeriodBriefSerializer(allow_null=True)
    meal_rate = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_meals = serializers.IntegerField()
    total_expenses = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_payments = serializers.DecimalField(max_digits=12, decimal_places=2)
    member_count = serializers.IntegerField()
    me = MyFiguresSerializer(allow_null=True)
    recent_activity = ActivitySerializer(many=True)


class ExpenseTypeTotalSerializer(serializers.Serializer):
    type = serializers.CharField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    count = serializers.IntegerField()


class TopExpenseSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    description = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    type = serializers.CharField()
    date = serializers.DateField()
    user = serializers.CharField()


class UserExpenseTotalSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    name = serializers.CharField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    count = serializers.IntegerField()


class DailyExpenseSerializer(serializers.Serializer):
    date = serializers.DateField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)


class ExpenseAnalyticsSerializer(serializers.Serializer):
    """Response serializer for the expense breakdowns of a period."""
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    by_type = ExpenseTypeTotalSerializer(many=True)
    top = TopExpenseSerializer(many=True)
    by_user = UserExpenseTotalSerializer(many=True)
    daily = DailyExpenseSerializer(many=True)


class RateTrendPointSerializer(serializers.Serializer):
    period_id = serializers.UUIDField()
    name = serializers.CharField()
    start_date = serializers.DateField()
    status = serializers.CharField()
    meal_rate = serializers.DecimalField(max_digits=12, decimal_places=2)


class MonthlyExpenseSerializer(serializers.Serializer):
    month = serializers.DateField()
    label = serializers.CharField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)


class TrendsSerializer(serializers.Serializer):
    """Response serializer for the group trends."""
    meal_rate = RateTrendPointSerializer(many=True)
    monthly_expenses = MonthlyExpenseSerializer(many=True)


class GroupOverviewSerializer(serializers.Serializer):
    group_id = serializers.UUIDField()
    name = serializers.CharField()
    role = serializers.CharField()
    is_current = serializers.BooleanField()
    member_count = serializers.IntegerField()
    period = serializers.CharField(allow_null=True)
    meal_rate = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_meals = serializers.IntegerField()
    total_expenses = serializers.DecimalField(max_digits=12, decimal_places=2)
    my_meals = serializers.IntegerField()
    my_balance = serializers.DecimalField(max_digits=12, decimal_places=2)


class OverviewTotalsSerializer(serializers.Serializer):
    meals = serializers.IntegerField()
    cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)


class GroupsOverviewSerializer(serializers.Serializer):
    """Response serializer for a user's figures across their groups."""
    groups = GroupOverviewSerializer(many=True)
    totals = OverviewTotalsSerializer()


class ErrorSerializer(serializers.Serializer):
    """Standard error response."""
    error = serializers.CharField()
