from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .models import JoinRequest
from .serializers import (
    GroupSerializer,
    GroupCreateSerializer,
    GroupUpdateSerializer,
    GroupListSerializer,
    GroupMemberSerializer,
    JoinGroupSerializer,
    UpdateMemberRoleSerializer,
    RemoveMemberSerializer,
    PeriodModeSerializer,
    NotificationSettingsSerializer,
    JoinRequestCreateSerializer,
    JoinRequestProcessSerializer,
    JoinRequestFilterSerializer,
    JoinRequestSerializer,
    InviteTokenCreateSerializer,
    InviteTokenSerializer,
    SendInvitationsSerializer,
    ActivityLogSerializer,
)
from .permissions import IsGroupMember

from apps.groups.services import (
    create_group,
    update_group,
    delete_group,
    get_user_groups,
    get_current_group,
    set_current_group,
    update_period_mode,
    join_group,
    leave_group,
    remove_member,
    get_group_members,
    update_member_role,
    get_notification_settings,
    update_notification_settings,
    create_join_request,
    process_join_request,
    list_join_requests,
    create_invite_token,
    get_invite_token,
    send_invitations,
    accept_invitation,
    get_activity_logs,
    # Exceptions
    GroupsServiceError,
    GroupNotFoundError,
    NotMemberError,
    InsufficientPermissionsError,
    JoinRequestNotFoundError,
    InvalidInviteTokenError,
    InvitationNotFoundError,
)


class GroupPagination(PageNumberPagination):
    """Custom pagination for groups."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _service_error_response(e: GroupsServiceError) -> Response:
    if isinstance(e, (InsufficientPermissionsError, NotMemberError)):
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    if isinstance(e, (GroupNotFoundError, JoinRequestNotFoundError, InvitationNotFoundError)):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


class GroupViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Group CRUD operations.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get all groups (user is member of)
    create: Create a new group
    retrieve: Get a specific group
    update: Update a group (edit_group permission)
    partial_update: Partially update a group (edit_group permission)
    destroy: Delete a group (creator only)
    """

    serializer_class = GroupSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = GroupPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        """Return only groups where user is a member."""
        return get_user_groups(user=self.request.user)

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'list':
            return GroupListSerializer
        elif self.action == 'create':
            return GroupCreateSerializer
        elif self.action in ('update', 'partial_update'):
            return GroupUpdateSerializer
        return GroupSerializer

    def create(self, request, *args, **kwargs):
        """Create a new group."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        group = create_group(creator=request.user, **serializer.validated_data)

        output_serializer = GroupSerializer(group, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Update group details."""
        serializer = GroupUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            group = update_group(group_id=self.kwargs['pk'], user=request.user, **serializer.validated_data)
        except GroupsServiceError as e:
            return _service_error_response(e)

        return Response(GroupSerializer(group, context={'request': request}).data)

    def destroy(self, request, *args, **kwargs):
        """Delete a group."""
        try:
            delete_group(group_id=self.kwargs['pk'], user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)
        except GroupsServiceError as e:
            return _service_error_response(e)

    @extend_schema(responses={200: GroupMemberSerializer(many=True)}, tags=['groups'])
    @action(detail=True, methods=['get'], permission_classes=[IsAuthenticated, IsGroupMember])
    def members(self, request, pk=None):
        """Get all members of the group."""
        try:
            memberships = get_group_members(group_id=pk)
        except GroupNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        serializer = GroupMemberSerializer(memberships, many=True)
        return Response(serializer.data)

    @extend_schema(request=JoinGroupSerializer, tags=['groups'])
    @action(detail=True, methods=['post'])
    def join(self, request, pk=None):
        """Join a group directly, with a password, or with an invite token."""
        serializer = JoinGroupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = join_group(
                group_id=pk,
                user=request.user,
                password=serializer.validated_data.get('password') or None,
                token=serializer.validated_data.get('token') or None,
            )
        except GroupsServiceError as e:
            return _service_error_response(e)

        if isinstance(result, JoinRequest):
            return Response(
                JoinRequestSerializer(result).data,
                status=status.HTTP_202_ACCEPTED
            )
        return Response(GroupMemberSerializer(result).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def leave(self, request, pk=None):
        """Leave a group."""
        try:
            leave_group(group_id=pk, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)
        except GroupsServiceError as e:
            return _service_error_response(e)

    @action(detail=True, methods=['post'])
    def set_current(self, request, pk=None):
        """Make this group the user's current group."""
        try:
            membership = set_current_group(group_id=pk, user=request.user)
        except GroupsServiceError as e:
            return _service_error_response(e)
        return Response(GroupMemberSerializer(membership).data)

    @extend_schema(request=UpdateMemberRoleSerializer, tags=['groups'])
    @action(detail=True, methods=['post'])
    def update_member_role(self, request, pk=None):
        """Update member's role (admin only)."""
        serializer = UpdateMemberRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            membership = update_member_role(
                group_id=pk,
                user_id=serializer.validated_data['user_id'],
                new_role=serializer.validated_data['role'],
                updated_by=request.user
            )
        except GroupsServiceError as e:
            return _service_error_response(e)

        output_serializer = GroupMemberSerializer(membership)
        return Response(output_serializer.data)

    @extend_schema(request=RemoveMemberSerializer, tags=['groups'])
    @action(detail=True, methods=['post'])
    def remove_member(self, request, pk=None):
        """Remove a member from the group (admin only)."""
        serializer = RemoveMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            remove_member(
                group_id=pk,
                user_id=serializer.validated_data['user_id'],
                removed_by=request.user
            )
            return Response(status=status.HTTP_204_NO_CONTENT)
        except GroupsServiceError as e:
            return _service_error_response(e)

    @extend_schema(request=PeriodModeSerializer, tags=['groups'])
    @action(detail=True, methods=['post'])
    def period_mode(self, request, pk=None):
        """Switch between MONTHLY and CUSTOM periods."""
        serializer = PeriodModeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            group = update_period_mode(
                group_id=pk,
                user=request.user,
                mode=serializer.validated_data['mode']
            )
        except GroupsServiceError as e:
            return _service_error_response(e)

        return Response(GroupSerializer(group, context={'request': request}).data)

    @extend_schema(request=NotificationSettingsSerializer, tags=['groups'])
    @action(detail=True, methods=['get', 'patch'])
    def notification_settings(self, request, pk=None):
        """Get or update the user's notification settings for the group."""
        try:
            if request.method == 'GET':
                return Response(get_notification_settings(group_id=pk, user=request.user))

            serializer = NotificationSettingsSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            merged = update_notification_settings(
                group_id=pk,
                user=request.user,
                settings=serializer.validated_data
            )
            return Response(merged)
        except NotMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    @extend_schema(request=JoinRequestCreateSerializer, tags=['groups'])
    @action(detail=True, methods=['get', 'post'])
    def join_requests(self, request, pk=None):
        """List join requests (reviewers) or request to join (anyone)."""
        try:
            if request.method == 'GET':
                filter_serializer = JoinRequestFilterSerializer(data=request.query_params)
                filter_serializer.is_valid(raise_exception=True)
                requests = list_join_requests(
                    group_id=pk,
                    user=request.user,
                    status=filter_serializer.validated_data['status']
                )
                return Response(JoinRequestSerializer(requests, many=True).data)

            serializer = JoinRequestCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            join_request = create_join_request(
                group_id=pk,
                user=request.user,
                message=serializer.validated_data['message']
            )
            return Response(JoinRequestSerializer(join_request).data, status=status.HTTP_201_CREATED)
        except GroupsServiceError as e:
            return _service_error_response(e)

    @extend_schema(request=InviteTokenCreateSerializer, responses={201: InviteTokenSerializer}, tags=['groups'])
    @action(detail=True, methods=['post'])
    def invite_token(self, request, pk=None):
        """Create a shareable invite token (admin, moderator, manager)."""
        serializer = InviteTokenCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invite = create_invite_token(
                group_id=pk,
                user=request.user,
                role=serializer.validated_data['role'],
                expires_in_days=serializer.validated_data.get('expires_in_days')
            )
        except GroupsServiceError as e:
            return _service_error_response(e)

        return Response(InviteTokenSerializer(invite).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=SendInvitationsSerializer, tags=['groups'])
    @action(detail=True, methods=['post'])
    def invitations(self, request, pk=None):
        """Send email invitations (admin, moderator, manager)."""
        serializer = SendInvitationsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = send_invitations(
                group_id=pk,
                user=request.user,
                emails=serializer.validated_data['emails'],
                role=serializer.validated_data['role']
            )
        except GroupsServiceError as e:
            return _service_error_response(e)

        return Response(result, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: ActivityLogSerializer(many=True)}, tags=['groups'])
    @action(detail=True, methods=['get'])
    def activity_logs(self, request, pk=None):
        """Latest activity of the group (admin, moderator)."""
        try:
            logs = get_activity_logs(group_id=pk, user=request.user)
        except GroupsServiceError as e:
            return _service_error_response(e)

        return Response(ActivityLogSerializer(logs, many=True).data)


@extend_schema(
    responses={200: GroupListSerializer(many=True)},
    description="Get all groups where the current user is a member.",
    tags=['groups'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_groups(request):
    """Get all groups where user is a member."""
    groups = get_user_groups(user=request.user)

    serializer = GroupListSerializer(groups, many=True, context={'request': request})
    return Response(serializer.data)


@extend_schema(
    responses={200: GroupSerializer},
    description="Get the user's current group (null when none).",
    tags=['groups'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def current_group(request):
    group = get_current_group(user=request.user)
    if group is None:
        return Response(None)
    return Response(GroupSerializer(group, context={'request': request}).data)


@extend_schema(
    responses={200: InviteTokenSerializer},
    description="Preview the group behind an invite token.",
    tags=['groups'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invite_token_detail(request, token):
    try:
        invite = get_invite_token(token=token)
    except InvalidInviteTokenError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response(InviteTokenSerializer(invite).data)


@extend_schema(
    request=JoinRequestProcessSerializer,
    responses={200: JoinRequestSerializer},
    description="Approve or reject a join request.",
    tags=['groups'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def join_request_process(request, request_id):
    serializer = JoinRequestProcessSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        join_request = process_join_request(
            request_id=request_id,
            user=request.user,
            action=serializer.validated_data['action']
        )
    except GroupsServiceError as e:
        return _service_error_response(e)

    return Response(JoinRequestSerializer(join_request).data)


@extend_schema(
    responses={201: GroupMemberSerializer},
    description="Accept an email invitation.",
    tags=['groups'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invitation_accept(request, token):
    try:
        membership = accept_invitation(token=token, user=request.user)
    except GroupsServiceError as e:
        return _service_error_response(e)

    return Response(GroupMemberSerializer(membership).data, status=status.HTTP_201_CREATED)
