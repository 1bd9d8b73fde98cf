import pytest
from django.urls import reverse
from rest_framework import status
from apps.groups.models import Group, GroupMembership, InviteToken, JoinRequest
from apps.groups.roles import GroupRole


# =============================================================================
# Group CRUD Tests
# =============================================================================

@pytest.mark.django_db
class TestGroupList:
    """Tests for GET /api/groups/"""

    def test_list_groups_returns_user_groups(self, authenticated_client, group):
        """List returns only groups where user is a member."""
        url = reverse('groups:group-list')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert 'results' in response.data
        assert len(response.data['results']) == 1
        assert response.data['results'][0]['name'] == group.name

    def test_list_groups_excludes_non_member_groups(self, other_client, group):
        """Non-members don't see group in list."""
        url = reverse('groups:group-list')
        response = other_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['results']) == 0

    def test_list_groups_unauthenticated(self, api_client):
        """Unauthenticated users cannot list groups."""
        url = reverse('groups:group-list')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestGroupCreate:
    """Tests for POST /api/groups/"""

    def test_create_group(self, authenticated_client, group_owner):
        """Create a new group; the creator becomes admin."""
        url = reverse('groups:group-list')
        data = {
            'name': 'Green House',
            'description': 'Five students, one kitchen',
            'is_private': True,
            'password': 'kitchen',
        }
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['user_role'] == GroupRole.ADMIN
        assert response.data['has_password'] is True
        assert 'password' not in response.data

        group = Group.objects.get(name='Green House')
        assert group.created_by == group_owner
        assert group.check_password('kitchen')

    def test_create_group_requires_name(self, authenticated_client):
        url = reverse('groups:group-list')
        response = authenticated_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_group_unauthenticated(self, api_client):
        """Unauthenticated users cannot create groups."""
        url = reverse('groups:group-list')
        response = api_client.post(url, {'name': 'Unauthorized Group'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestGroupRetrieveUpdateDelete:
    """Tests for /api/groups/{id}/"""

    def test_retrieve_group_as_member(self, authenticated_client, group):
        url = reverse('groups:group-detail', args=[group.id])
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == group.name
        assert 'manage_members' in response.data['user_permissions']

    def test_retrieve_group_as_non_member(self, other_client, group):
        """Non-members cannot retrieve group details."""
        url = reverse('groups:group-detail', args=[group.id])
        response = other_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_group_as_admin(self, authenticated_client, group):
        url = reverse('groups:group-detail', args=[group.id])
        response = authenticated_client.patch(url, {'fine_enabled': True, 'fine_amount': '50.00'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        group.refresh_from_db()
        assert group.fine_enabled is True

    def test_update_group_as_member_forbidden(self, member_client, group_with_members):
        url = reverse('groups:group-detail', args=[group_with_members.id])
        response = member_client.patch(url, {'name': 'Hijacked'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_delete_group_as_non_creator(self, manager_client, group_with_members):
        url = reverse('groups:group-detail', args=[group_with_members.id])
        response = manager_client.delete(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Group.objects.filter(id=group_with_members.id).exists()

    def test_delete_group_as_creator(self, authenticated_client, group):
        url = reverse('groups:group-detail', args=[group.id])
        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Group.objects.filter(id=group.id).exists()


# =============================================================================
# Membership endpoints
# =============================================================================

@pytest.mark.django_db
class TestMembershipEndpoints:

    def test_members_list(self, member_client, group_with_members):
        url = reverse('groups:group-members', args=[group_with_members.id])
        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 3

    def test_members_list_non_member(self, other_client, group):
        url = reverse('groups:group-members', args=[group.id])
        response = other_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_join_public_group(self, other_client, group, group_other_user):
        url = reverse('groups:group-join', args=[group.id])
        response = other_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert group.has_member(group_other_user)

    def test_join_private_wrong_password(self, other_client, private_group):
        url = reverse('groups:group-join', args=[private_group.id])
        response = other_client.post(url, {'password': 'nope'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Invalid password'

    def test_join_private_with_token_is_pending(self, other_client, private_group, group_owner):
        invite = InviteToken.objects.create(token='ABCDEFGHIJ', group=private_group, created_by=group_owner)
        url = reverse('groups:group-join', args=[private_group.id])
        response = other_client.post(url, {'token': invite.token}, format='json')

        assert response.status_code == status.HTTP_202_ACCEPTED
        assert response.data['status'] == 'PENDING'

    def test_leave_group(self, member_client, group_with_members, member_user):
        url = reverse('groups:group-leave', args=[group_with_members.id])
        response = member_client.post(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not group_with_members.has_member(member_user)

    def test_update_member_role(self, authenticated_client, group_with_members, member_user):
        url = reverse('groups:group-update-member-role', args=[group_with_members.id])
        response = authenticated_client.post(
            url,
            {'user_id': str(member_user.id), 'role': GroupRole.MARKET_MANAGER},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['role'] == GroupRole.MARKET_MANAGER

    def test_update_member_role_as_member_forbidden(self, member_client, group_with_members, manager_user):
        url = reverse('groups:group-update-member-role', args=[group_with_members.id])
        response = member_client.post(
            url,
            {'user_id': str(manager_user.id), 'role': GroupRole.MEMBER},
            format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_remove_member(self, authenticated_client, group_with_members, member_user):
        url = reverse('groups:group-remove-member', args=[group_with_members.id])
        response = authenticated_client.post(url, {'user_id': str(member_user.id)}, format='json')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not GroupMembership.objects.filter(user=member_user, group=group_with_members).exists()

    def test_notification_settings_roundtrip(self, member_client, group_with_members):
        url = reverse('groups:group-notification-settings', args=[group_with_members.id])

        response = member_client.patch(url, {'vote_updates': False}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['vote_updates'] is False

        response = member_client.get(url)
        assert response.data['vote_updates'] is False
        assert response.data['email_notifications'] is False

    def test_my_and_current_groups(self, authenticated_client, group):
        response = authenticated_client.get(reverse('groups:my-groups'))
        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1

        response = authenticated_client.get(reverse('groups:current-group'))
        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(group.id)


# =============================================================================
# Join requests, invites, activity
# =============================================================================

@pytest.mark.django_db
class TestJoinRequestEndpoints:

    def test_request_and_approve(self, other_client, authenticated_client, private_group, group_other_user):
        url = reverse('groups:group-join-requests', args=[private_group.id])
        response = other_client.post(url, {'message': 'Hi!'}, format='json')
        assert response.status_code == status.HTTP_201_CREATED

        response = authenticated_client.get(url)
        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1

        request_id = response.data[0]['id']
        process_url = reverse('groups:join-request-process', args=[request_id])
        response = authenticated_client.post(process_url, {'action': 'approve'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'APPROVED'
        assert private_group.has_member(group_other_user)

    def test_process_unknown_request(self, authenticated_client):
        url = reverse('groups:join-request-process', args=['00000000-0000-0000-0000-000000000000'])
        response = authenticated_client.post(url, {'action': 'reject'}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_list_requests_requires_permission(self, member_client, group_with_members, group_other_user):
        JoinRequest.objects.create(user=group_other_user, group=group_with_members)
        url = reverse('groups:group-join-requests', args=[group_with_members.id])
        response = member_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestInviteEndpoints:

    def test_manager_creates_token(self, manager_client, group_with_members):
        url = reverse('groups:group-invite-token', args=[group_with_members.id])
        response = manager_client.post(url, {'expires_in_days': 2}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert len(response.data['token']) == 10

    def test_member_cannot_create_token(self, member_client, group_with_members):
        url = reverse('groups:group-invite-token', args=[group_with_members.id])
        response = member_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_token_preview(self, other_client, group, group_owner):
        InviteToken.objects.create(token='PREVIEWTOK', group=group, created_by=group_owner)
        url = reverse('groups:invite-token-detail', args=['previewtok'])
        response = other_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['group']['name'] == group.name

    def test_send_invitations(self, authenticated_client, group):
        url = reverse('groups:group-invitations', args=[group.id])
        response = authenticated_client.post(
            url,
            {'emails': ['a@example.com', 'b@example.com']},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['sent'] == 2

    def test_activity_logs_forbidden_for_member(self, member_client, group_with_members):
        url = reverse('groups:group-activity-logs', args=[group_with_members.id])
        response = member_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
