from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.groups.permissions import IsGroupMember
from apps.periods.services import PeriodsServiceError

from .serializers import (
    ShoppingItemSerializer,
    ShoppingItemCreateSerializer,
    ShoppingItemUpdateSerializer,
    ShoppingFilterSerializer,
    ShoppingSummarySerializer,
    MarketDateSerializer,
    MarketDateAssignSerializer,
    MarketDateStatusSerializer,
    MarketDateFilterSerializer,
)
from .services import (
    create_shopping_item,
    update_shopping_item,
    toggle_purchased,
    delete_shopping_item,
    clear_purchased_items,
    list_shopping_items,
    shopping_summary,
    assign_market_date,
    list_market_dates,
    update_market_date_status,
    delete_market_date,
    apply_fine,
    # Exceptions
    ShoppingServiceError,
    ShoppingPermissionError,
    ShoppingItemNotFoundError,
    MarketDateNotFoundError,
)


def _service_error_response(e: Exception) -> Response:
    if isinstance(e, ShoppingPermissionError):
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    if isinstance(e, (ShoppingItemNotFoundError, MarketDateNotFoundError)):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


# =============================================================================
# Shopping items
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('period_id', OpenApiTypes.UUID),
        OpenApiParameter('start_date', OpenApiTypes.DATE),
        OpenApiParameter('end_date', OpenApiTypes.DATE),
        OpenApiParameter('purchased', OpenApiTypes.BOOL),
    ],
    responses={200: ShoppingItemSerializer(many=True)},
    tags=['shopping'],
)
@extend_schema(
    methods=['POST'],
    request=ShoppingItemCreateSerializer,
    responses={201: ShoppingItemSerializer},
    description="Add an item to the shopping list of the active period.",
    tags=['shopping'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def item_list(request, group_id):
    if request.method == 'GET':
        filters = ShoppingFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        items = list_shopping_items(group_id=group_id, **filters.validated_data)
        return Response(ShoppingItemSerializer(items, many=True).data)

    serializer = ShoppingItemCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        item = create_shopping_item(group_id=group_id, user=request.user, **serializer.validated_data)
    except (ShoppingServiceError, PeriodsServiceError) as e:
        return _service_error_response(e)

    return Response(ShoppingItemSerializer(item).data, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=[OpenApiParameter('period_id', OpenApiTypes.UUID)],
    responses={200: ShoppingSummarySerializer},
    tags=['shopping'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def item_summary(request, group_id):
    filters = ShoppingFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)

    summary = shopping_summary(group_id=group_id, period_id=filters.validated_data.get('period_id'))
    return Response(ShoppingSummarySerializer(summary).data)


@extend_schema(
    request=None,
    description="Remove the purchased items of the active period (market managers).",
    tags=['shopping'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def item_clear_purchased(request, group_id):
    try:
        deleted = clear_purchased_items(group_id=group_id, user=request.user)
    except ShoppingServiceError as e:
        return _service_error_response(e)

    return Response({'deleted': deleted})


@extend_schema(
    methods=['PATCH'],
    request=ShoppingItemUpdateSerializer,
    responses={200: ShoppingItemSerializer},
    tags=['shopping'],
)
@extend_schema(methods=['DELETE'], responses={204: None}, tags=['shopping'])
@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsGroupMember])
def item_detail(request, group_id, item_id):
    try:
        if request.method == 'DELETE':
            delete_shopping_item(group_id=group_id, item_id=item_id, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = ShoppingItemUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = update_shopping_item(
            group_id=group_id,
            item_id=item_id,
            user=request.user,
            **serializer.validated_data,
        )
    except (ShoppingServiceError, PeriodsServiceError) as e:
        return _service_error_response(e)

    return Response(ShoppingItemSerializer(item).data)


@extend_schema(request=None, responses={200: ShoppingItemSerializer}, tags=['shopping'])
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def item_toggle(request, group_id, item_id):
    try:
        item = toggle_purchased(group_id=group_id, item_id=item_id, user=request.user)
    except (ShoppingServiceError, PeriodsServiceError) as e:
        return _service_error_response(e)

    return Response(ShoppingItemSerializer(item).data)


# =============================================================================
# Market dates
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('user_id', OpenApiTypes.UUID),
        OpenApiParameter('status', OpenApiTypes.STR),
        OpenApiParameter('start_date', OpenApiTypes.DATE),
        OpenApiParameter('end_date', OpenApiTypes.DATE),
    ],
    responses={200: MarketDateSerializer(many=True)},
    tags=['shopping'],
)
@extend_schema(
    methods=['POST'],
    request=MarketDateAssignSerializer,
    responses={201: MarketDateSerializer},
    description="Assign market duty to a member (manage_market permission).",
    tags=['shopping'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def market_date_list(request, group_id):
    if request.method == 'GET':
        filters = MarketDateFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        market_dates = list_market_dates(group_id=group_id, **filters.validated_data)
        return Response(MarketDateSerializer(market_dates, many=True).data)

    serializer = MarketDateAssignSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        market_date = assign_market_date(
            group_id=group_id,
            user=request.user,
            assignee_id=serializer.validated_data['user_id'],
            date=serializer.validated_data['date'],
        )
    except ShoppingServiceError as e:
        return _service_error_response(e)

    return Response(MarketDateSerializer(market_date).data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=['PATCH'],
    request=MarketDateStatusSerializer,
    responses={200: MarketDateSerializer},
    description="Change a duty's status (market managers or the assignee).",
    tags=['shopping'],
)
@extend_schema(methods=['DELETE'], responses={204: None}, tags=['shopping'])
@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsGroupMember])
def market_date_detail(request, group_id, market_date_id):
    try:
        if request.method == 'DELETE':
            delete_market_date(group_id=group_id, market_date_id=market_date_id, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = MarketDateStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        market_date = update_market_date_status(
            group_id=group_id,
            market_date_id=market_date_id,
            user=request.user,
            status=serializer.validated_data['status'],
        )
    except ShoppingServiceError as e:
        return _service_error_response(e)

    return Response(MarketDateSerializer(market_date).data)


@extend_schema(
    request=None,
    responses={200: MarketDateSerializer},
    description="Fine the assignee of a missed market duty.",
    tags=['shopping'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def market_date_fine(request, group_id, market_date_id):
    try:
        market_date = apply_fine(group_id=group_id, market_date_id=market_date_id, user=request.user)
    except ShoppingServiceError as e:
        return _service_error_response(e)

    return Response(MarketDateSerializer(market_date).data)
