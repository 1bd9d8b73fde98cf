from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.groups.permissions import IsGroupMember
from apps.groups.roles import can_view_user_balance
from apps.groups.services import get_active_membership

from .analytics import (
    MealCalculations,
    DashboardQueries,
    ExpenseAnalytics,
    UserAnalytics,
    group_trends,
    get_report_period,
)
from .serializers import (
    # Input serializers
    PeriodQuerySerializer,
    # Response serializers
    MealRateSerializer,
    UserSummarySerializer,
    DashboardResponseSerializer,
    ExpenseAnalyticsSerializer,
    TrendsSerializer,
    GroupsOverviewSerializer,
    ErrorSerializer,
)
from .exceptions import AnalyticsServiceError, PeriodNotFoundError


PERIOD_PARAMETER = OpenApiParameter(
    'period_id', OpenApiTypes.UUID, description='Period to report on (defaults to the active period)'
)


def _service_error_response(e: Exception) -> Response:
    if isinstance(e, PeriodNotFoundError):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


def _requested_period(request, group_id):
    query_serializer = PeriodQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    return get_report_period(group_id, query_serializer.validated_data.get('period_id'))


@extend_schema(
    responses={200: DashboardResponseSerializer, 403: ErrorSerializer},
    description="Home screen of a group: current period, meal rate, totals, own figures and recent activity.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def dashboard(request, group_id):
    """Group dashboard - thin HTTP handler."""
    data = DashboardQueries.group_dashboard(group_id, request.user)
    return Response(DashboardResponseSerializer(data).data)


@extend_schema(
    parameters=[PERIOD_PARAMETER],
    responses={200: MealRateSerializer, 404: ErrorSerializer},
    description="Meal rate of a period: total extra expenses / total meals.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def meal_rate(request, group_id):
    try:
        period = _requested_period(request, group_id)
    except AnalyticsServiceError as e:
        return _service_error_response(e)

    period_id = period.id if period else None
    data = {
        'period_id': period_id,
        'total_meals': MealCalculations.total_meals(group_id, period_id),
        'total_expenses': MealCalculations.total_expenses(group_id, period_id),
        'meal_rate': MealCalculations.meal_rate(group_id, period_id),
    }
    return Response(MealRateSerializer(data).data)


@extend_schema(
    parameters=[PERIOD_PARAMETER],
    responses={200: UserSummarySerializer(many=True), 404: ErrorSerializer},
    description="Per-member meals, cost, paid and balance. Members without finance rights see their own line only.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def user_summaries(request, group_id):
    try:
        period = _requested_period(request, group_id)
    except AnalyticsServiceError as e:
        return _service_error_response(e)

    membership = get_active_membership(group_id, request.user)
    rows = [
        row for row in MealCalculations.user_summaries(group_id, period.id if period else None)
        if can_view_user_balance(membership.role, request.user.id, row['user_id'])
    ]
    return Response(UserSummarySerializer(rows, many=True).data)


@extend_schema(
    parameters=[PERIOD_PARAMETER],
    responses={200: ExpenseAnalyticsSerializer, 404: ErrorSerializer},
    description="Extra expenses of a period by type, by member and per day, plus the ten largest.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def expense_analytics(request, group_id):
    try:
        period = _requested_period(request, group_id)
    except AnalyticsServiceError as e:
        return _service_error_response(e)

    data = ExpenseAnalytics.summary(group_id, period.id if period else None)
    return Response(ExpenseAnalyticsSerializer(data).data)


@extend_schema(
    responses={200: TrendsSerializer},
    description="Meal rate of the latest periods and extra expenses of the last six months.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def trends(request, group_id):
    return Response(TrendsSerializer(group_trends(group_id)).data)


@extend_schema(
    responses={200: GroupsOverviewSerializer},
    description="Current-period figures of every group of the user, with their own totals.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def groups_overview(request):
    data = UserAnalytics.groups_overview(request.user)
    return Response(GroupsOverviewSerializer(data).data)
