from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.groups.permissions import IsGroupMember

from .serializers import (
    MealPeriodSerializer,
    PeriodStartSerializer,
    PeriodEndSerializer,
    PeriodUnlockSerializer,
    PeriodRestartSerializer,
    PeriodListFilterSerializer,
    PeriodMonthFilterSerializer,
    PeriodSummarySerializer,
)
from .services import (
    list_periods,
    get_period,
    get_periods_by_month,
    ensure_month_period,
    start_period,
    end_period,
    lock_period,
    unlock_period,
    archive_period,
    restart_period,
    get_period_summary,
    # Exceptions
    PeriodsServiceError,
    PeriodNotFoundError,
    PeriodPermissionError,
)


def _service_error_response(e: PeriodsServiceError) -> Response:
    if isinstance(e, PeriodPermissionError):
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    if isinstance(e, PeriodNotFoundError):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('include_archived', OpenApiTypes.BOOL, description='Include archived periods'),
    ],
    responses={200: MealPeriodSerializer(many=True)},
    description="List the periods of a group.",
    tags=['periods'],
)
@extend_schema(
    methods=['POST'],
    request=PeriodStartSerializer,
    responses={201: MealPeriodSerializer},
    description="Start a new period (manager, admin, moderator).",
    tags=['periods'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def period_list(request, group_id):
    """List periods or start a new one."""
    if request.method == 'GET':
        filters = PeriodListFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        periods = list_periods(
            group_id=group_id,
            include_archived=filters.validated_data['include_archived']
        )
        return Response(MealPeriodSerializer(periods, many=True).data)

    serializer = PeriodStartSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        period = start_period(group_id=group_id, user=request.user, **serializer.validated_data)
    except PeriodsServiceError as e:
        return _service_error_response(e)

    return Response(MealPeriodSerializer(period).data, status=status.HTTP_201_CREATED)


@extend_schema(
    responses={200: MealPeriodSerializer},
    description="Current period; MONTHLY groups get this month's period opened on demand.",
    tags=['periods'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def period_current(request, group_id):
    try:
        period = ensure_month_period(group_id=group_id)
    except PeriodsServiceError as e:
        return _service_error_response(e)

    if period is None:
        return Response(None)
    return Response(MealPeriodSerializer(period).data)


@extend_schema(
    parameters=[
        OpenApiParameter('year', OpenApiTypes.INT, required=True),
        OpenApiParameter('month', OpenApiTypes.INT, required=True),
    ],
    responses={200: MealPeriodSerializer(many=True)},
    description="Periods overlapping a calendar month.",
    tags=['periods'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def period_by_month(request, group_id):
    filters = PeriodMonthFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)

    periods = get_periods_by_month(group_id=group_id, **filters.validated_data)
    return Response(MealPeriodSerializer(periods, many=True).data)


@extend_schema(responses={200: MealPeriodSerializer}, tags=['periods'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def period_detail(request, group_id, period_id):
    try:
        period = get_period(group_id=group_id, period_id=period_id)
    except PeriodsServiceError as e:
        return _service_error_response(e)
    return Response(MealPeriodSerializer(period).data)


@extend_schema(responses={200: PeriodSummarySerializer}, tags=['periods'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def period_summary(request, group_id, period_id):
    """Meal, shopping and money totals of a period."""
    try:
        summary = get_period_summary(group_id=group_id, period_id=period_id)
    except PeriodsServiceError as e:
        return _service_error_response(e)
    return Response(PeriodSummarySerializer(summary).data)


@extend_schema(
    request=PeriodEndSerializer,
    responses={200: MealPeriodSerializer},
    description="End a period (or the current one when no period is given).",
    tags=['periods'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def period_end(request, group_id, period_id=None):
    serializer = PeriodEndSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        period = end_period(
            group_id=group_id,
            user=request.user,
            period_id=period_id,
            end_date=serializer.validated_data['end_date']
        )
    except PeriodsServiceError as e:
        return _service_error_response(e)

    return Response(MealPeriodSerializer(period).data)


@extend_schema(request=None, responses={200: MealPeriodSerializer}, tags=['periods'])
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def period_lock(request, group_id, period_id):
    try:
        period = lock_period(group_id=group_id, user=request.user, period_id=period_id)
    except PeriodsServiceError as e:
        return _service_error_response(e)
    return Response(MealPeriodSerializer(period).data)


@extend_schema(request=PeriodUnlockSerializer, responses={200: MealPeriodSerializer}, tags=['periods'])
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def period_unlock(request, group_id, period_id):
    serializer = PeriodUnlockSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        period = unlock_period(
            group_id=group_id,
            user=request.user,
            period_id=period_id,
            status=serializer.validated_data['status']
        )
    except PeriodsServiceError as e:
        return _service_error_response(e)
    return Response(MealPeriodSerializer(period).data)


@extend_schema(request=None, responses={200: MealPeriodSerializer}, tags=['periods'])
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def period_archive(request, group_id, period_id):
    try:
        period = archive_period(group_id=group_id, user=request.user, period_id=period_id)
    except PeriodsServiceError as e:
        return _service_error_response(e)
    return Response(MealPeriodSerializer(period).data)


@extend_schema(
    request=PeriodRestartSerializer,
    responses={201: MealPeriodSerializer},
    description="Open a new period with the settings of an existing one.",
    tags=['periods'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def period_restart(request, group_id, period_id):
    serializer = PeriodRestartSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        period = restart_period(
            group_id=group_id,
            user=request.user,
            period_id=period_id,
            new_name=serializer.validated_data['new_name'] or None,
            with_data=serializer.validated_data['with_data']
        )
    except PeriodsServiceError as e:
        return _service_error_response(e)

    return Response(MealPeriodSerializer(period).data, status=status.HTTP_201_CREATED)
