from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.groups.permissions import IsGroupMember

from .serializers import (
    VoteSerializer,
    VoteCreateSerializer,
    VoteUpdateSerializer,
    VoteFilterSerializer,
    BallotSerializer,
    VoteResultSerializer,
)
from .services import (
    create_vote,
    list_votes,
    get_vote,
    cast_vote,
    update_vote,
    delete_vote,
    get_vote_result,
    # Exceptions
    VotesServiceError,
    VotePermissionError,
    VoteNotFoundError,
)


def _service_error_response(e: Exception) -> Response:
    if isinstance(e, VotePermissionError):
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    if isinstance(e, VoteNotFoundError):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


@extend_schema(
    methods=['GET'],
    parameters=[OpenApiParameter('active_only', OpenApiTypes.BOOL)],
    responses={200: VoteSerializer(many=True)},
    description="List the group's votes. Expired votes are closed on the way.",
    tags=['votes'],
)
@extend_schema(
    methods=['POST'],
    request=VoteCreateSerializer,
    responses={201: VoteSerializer},
    tags=['votes'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def vote_list(request, group_id):
    if request.method == 'GET':
        filters = VoteFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        votes = list_votes(group_id=group_id, active_only=filters.validated_data['active_only'])
        return Response(VoteSerializer(votes, many=True, context={'request': request}).data)

    serializer = VoteCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        vote = create_vote(
            group_id=group_id,
            user=request.user,
            title=data['title'],
            options=data['options'],
            end_date=data['end_date'],
            description=data['description'],
            vote_type=data['type'],
            start_date=data.get('start_date'),
        )
    except VotesServiceError as e:
        return _service_error_response(e)

    return Response(VoteSerializer(vote, context={'request': request}).data, status=status.HTTP_201_CREATED)


@extend_schema(methods=['GET'], responses={200: VoteSerializer}, tags=['votes'])
@extend_schema(
    methods=['PATCH'],
    request=VoteUpdateSerializer,
    responses={200: VoteSerializer},
    description="Edit a vote (creator or admin).",
    tags=['votes'],
)
@extend_schema(methods=['DELETE'], responses={204: None}, tags=['votes'])
@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsGroupMember])
def vote_detail(request, group_id, vote_id):
    try:
        if request.method == 'GET':
            vote = get_vote(group_id=group_id, vote_id=vote_id)
        elif request.method == 'DELETE':
            delete_vote(group_id=group_id, vote_id=vote_id, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)
        else:
            serializer = VoteUpdateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            vote = update_vote(
                group_id=group_id,
                vote_id=vote_id,
                user=request.user,
                **serializer.validated_data,
            )
    except VotesServiceError as e:
        return _service_error_response(e)

    return Response(VoteSerializer(vote, context={'request': request}).data)


@extend_schema(request=BallotSerializer, responses={200: VoteSerializer}, tags=['votes'])
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def vote_cast(request, group_id, vote_id):
    serializer = BallotSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        vote = cast_vote(
            group_id=group_id,
            vote_id=vote_id,
            user=request.user,
            option=serializer.validated_data['option'],
        )
    except VotesServiceError as e:
        return _service_error_response(e)

    return Response(VoteSerializer(vote, context={'request': request}).data)


@extend_schema(responses={200: VoteResultSerializer}, tags=['votes'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def vote_result(request, group_id, vote_id):
    try:
        result = get_vote_result(group_id=group_id, vote_id=vote_id)
    except VotesServiceError as e:
        return _service_error_response(e)

    return Response(VoteResultSerializer(result).data)
