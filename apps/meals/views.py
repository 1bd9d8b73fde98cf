from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.groups.permissions import IsGroupMember
from apps.periods.services import PeriodsServiceError

from .serializers import (
    MealSerializer,
    MealToggleSerializer,
    MealFilterSerializer,
    GuestMealSerializer,
    GuestMealUpsertSerializer,
    MealSettingsSerializer,
    AutoMealSettingsSerializer,
    AutoMealTriggerSerializer,
    MealStatsSerializer,
)
from .services import (
    toggle_meal,
    get_meals,
    get_meal_stats,
    upsert_guest_meal,
    delete_guest_meal,
    get_guest_meals,
    get_meal_settings,
    update_meal_settings,
    get_auto_meal_settings,
    update_auto_meal_settings,
    trigger_auto_meals,
    # Exceptions
    MealsServiceError,
    MealPermissionError,
    MealNotFoundError,
    GuestMealNotFoundError,
)


def _service_error_response(e: Exception) -> Response:
    if isinstance(e, MealPermissionError):
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    if isinstance(e, (MealNotFoundError, GuestMealNotFoundError)):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('start_date', OpenApiTypes.DATE),
        OpenApiParameter('end_date', OpenApiTypes.DATE),
        OpenApiParameter('user_id', OpenApiTypes.UUID),
        OpenApiParameter('period_id', OpenApiTypes.UUID),
    ],
    responses={200: MealSerializer(many=True)},
    description="List the meals of a group.",
    tags=['meals'],
)
@extend_schema(
    methods=['POST'],
    request=MealToggleSerializer,
    responses={201: MealSerializer, 204: None},
    description="Add or remove a meal (own meals, or anyone's for meal admins).",
    tags=['meals'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def meal_list(request, group_id):
    """List meals or toggle one."""
    if request.method == 'GET':
        filters = MealFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        meals = get_meals(group_id=group_id, **filters.validated_data)
        return Response(MealSerializer(meals, many=True).data)

    serializer = MealToggleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        meal = toggle_meal(
            group_id=group_id,
            user=request.user,
            target_user_id=data.get('user_id', request.user.id),
            day=data['date'],
            meal_type=data['type'],
            action=data['action'],
        )
    except (MealsServiceError, PeriodsServiceError) as e:
        return _service_error_response(e)

    if meal is None:
        return Response(status=status.HTTP_204_NO_CONTENT)
    return Response(MealSerializer(meal).data, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=[OpenApiParameter('period_id', OpenApiTypes.UUID)],
    responses={200: MealStatsSerializer},
    description="Meal counts by type and member for a period (current by default).",
    tags=['meals'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def meal_stats(request, group_id):
    filters = MealFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)

    stats = get_meal_stats(group_id=group_id, period_id=filters.validated_data.get('period_id'))
    return Response(MealStatsSerializer(stats).data)


@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('start_date', OpenApiTypes.DATE),
        OpenApiParameter('end_date', OpenApiTypes.DATE),
        OpenApiParameter('user_id', OpenApiTypes.UUID),
        OpenApiParameter('period_id', OpenApiTypes.UUID),
    ],
    responses={200: GuestMealSerializer(many=True)},
    tags=['meals'],
)
@extend_schema(
    methods=['PUT'],
    request=GuestMealUpsertSerializer,
    responses={200: GuestMealSerializer, 204: None},
    description="Set the number of guests for one meal (0 removes it).",
    tags=['meals'],
)
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsGroupMember])
def guest_meal_list(request, group_id):
    if request.method == 'GET':
        filters = MealFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        guest_meals = get_guest_meals(group_id=group_id, **filters.validated_data)
        return Response(GuestMealSerializer(guest_meals, many=True).data)

    serializer = GuestMealUpsertSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        guest_meal = upsert_guest_meal(
            group_id=group_id,
            user=request.user,
            day=data['date'],
            meal_type=data['type'],
            count=data['count'],
        )
    except (MealsServiceError, PeriodsServiceError) as e:
        return _service_error_response(e)

    if guest_meal is None:
        return Response(status=status.HTTP_204_NO_CONTENT)
    return Response(GuestMealSerializer(guest_meal).data)


@extend_schema(responses={204: None}, tags=['meals'])
@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsGroupMember])
def guest_meal_delete(request, group_id, guest_meal_id):
    try:
        delete_guest_meal(group_id=group_id, guest_meal_id=guest_meal_id, user=request.user)
    except (MealsServiceError, PeriodsServiceError) as e:
        return _service_error_response(e)
    return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    methods=['PATCH'],
    request=MealSettingsSerializer,
    responses={200: MealSettingsSerializer},
    description="Update meal rules (admin, manager, meal manager).",
    tags=['meals'],
)
@extend_schema(methods=['GET'], responses={200: MealSettingsSerializer}, tags=['meals'])
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsGroupMember])
def meal_settings(request, group_id):
    if request.method == 'GET':
        return Response(MealSettingsSerializer(get_meal_settings(group_id=group_id)).data)

    serializer = MealSettingsSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    try:
        settings = update_meal_settings(group_id=group_id, user=request.user, **serializer.validated_data)
    except MealsServiceError as e:
        return _service_error_response(e)

    return Response(MealSettingsSerializer(settings).data)


@extend_schema(
    methods=['PATCH'],
    request=AutoMealSettingsSerializer,
    responses={200: AutoMealSettingsSerializer},
    description="Update the current user's auto meal subscription.",
    tags=['meals'],
)
@extend_schema(methods=['GET'], responses={200: AutoMealSettingsSerializer}, tags=['meals'])
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsGroupMember])
def auto_meal_settings(request, group_id):
    if request.method == 'GET':
        try:
            settings = get_auto_meal_settings(group_id=group_id, user=request.user)
        except MealsServiceError as e:
            return _service_error_response(e)
        return Response(AutoMealSettingsSerializer(settings).data)

    serializer = AutoMealSettingsSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    try:
        settings = update_auto_meal_settings(group_id=group_id, user=request.user, **serializer.validated_data)
    except MealsServiceError as e:
        return _service_error_response(e)

    return Response(AutoMealSettingsSerializer(settings).data)


@extend_schema(
    request=AutoMealTriggerSerializer,
    description="Add auto meals for a day now (meal admins). Defaults to today.",
    tags=['meals'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def auto_meal_process(request, group_id):
    serializer = AutoMealTriggerSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = trigger_auto_meals(
            group_id=group_id,
            day=serializer.validated_data.get('date') or timezone.localdate(),
            user=request.user,
        )
    except (MealsServiceError, PeriodsServiceError) as e:
        return _service_error_response(e)

    return Response(result)
