from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'groups'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.GroupViewSet, basename='group')

urlpatterns = [
    # Group ViewSet routes
    # GET    /api/groups/              - List user's groups
    # POST   /api/groups/              - Create group
    # GET    /api/groups/{id}/         - Get group details
    # PATCH  /api/groups/{id}/         - Update group (edit_group)
    # DELETE /api/groups/{id}/         - Delete group (creator)

    # Custom group actions
    # GET       /api/groups/{id}/members/                - List members
    # POST      /api/groups/{id}/join/                   - Join (password / token)
    # POST      /api/groups/{id}/leave/                  - Leave group
    # POST      /api/groups/{id}/set_current/            - Make current group
    # POST      /api/groups/{id}/update_member_role/     - Update member role (admin)
    # POST      /api/groups/{id}/remove_member/          - Remove member (admin)
    # POST      /api/groups/{id}/period_mode/            - MONTHLY / CUSTOM
    # GET/PATCH /api/groups/{id}/notification_settings/  - Member notification toggles
    # GET/POST  /api/groups/{id}/join_requests/          - List / create join requests
    # POST      /api/groups/{id}/invite_token/           - Create invite token
    # POST      /api/groups/{id}/invitations/            - Send email invitations
    # GET       /api/groups/{id}/activity_logs/          - Activity log (admin, moderator)

    # Additional endpoints
    path('my/', views.my_groups, name='my-groups'),
    path('current/', views.current_group, name='current-group'),
    path('invite/<str:token>/', views.invite_token_detail, name='invite-token-detail'),
    path('join-requests/<uuid:request_id>/', views.join_request_process, name='join-request-process'),
    path('invitations/<str:token>/accept/', views.invitation_accept, name='invitation-accept'),

    # Include router URLs
    path('', include(router.urls)),
]
