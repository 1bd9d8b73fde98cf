import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership, GroupRole


# =============================================================================
# Registration Tests
# =============================================================================

@pytest.mark.django_db
class TestRegistration:
    """Tests for POST /api/auth/register/"""

    def test_register_success(self, api_client):
        """Successfully register a new user."""
        url = reverse('users:register')
        data = {
            'email': 'newuser@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
            'display_name': 'New User',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert User.objects.filter(email='newuser@example.com').exists()

    def test_register_lowercases_email(self, api_client):
        """Emails are stored lowercased."""
        url = reverse('users:register')
        data = {
            'email': 'MixedCase@Example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert User.objects.filter(email='mixedcase@example.com').exists()

    def test_register_duplicate_email(self, api_client, user):
        """Cannot register with existing email, whatever the case."""
        url = reverse('users:register')
        data = {
            'email': user.email.upper(),
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_register_password_mismatch(self, api_client):
        """Registration fails when passwords don't match."""
        url = reverse('users:register')
        data = {
            'email': 'mismatch@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'DifferentPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password_confirm' in response.data

    def test_register_weak_password(self, api_client):
        """Django password validators apply."""
        url = reverse('users:register')
        data = {
            'email': 'weak@example.com',
            'password': '123',
            'password_confirm': '123',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Login / Logout Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, user):
        """Valid credentials return tokens."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert response.data['user']['email'] == user.email

    def test_login_wrong_password(self, api_client, user):
        """Wrong password is rejected."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'WrongPass!'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_nonexistent_user(self, api_client):
        """Unknown email is rejected."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': 'nobody@example.com', 'password': 'x'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_user(self, api_client, user_inactive):
        """Inactive accounts cannot log in."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': user_inactive.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login_updates_last_login(self, api_client, user):
        """Successful login sets last_login."""
        assert user.last_login is None
        url = reverse('users:login')
        api_client.post(url, {'email': user.email, 'password': 'TestPass123!'})

        user.refresh_from_db()
        assert user.last_login is not None


@pytest.mark.django_db
class TestLogout:
    """Tests for POST /api/auth/logout/"""

    def test_logout_success(self, authenticated_client):
        url = reverse('users:logout')
        response = authenticated_client.post(url)

        assert response.status_code == status.HTTP_200_OK

    def test_logout_invalid_refresh(self, authenticated_client):
        url = reverse('users:logout')
        response = authenticated_client.post(url, {'refresh': 'garbage'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_logout_unauthenticated(self, api_client):
        url = reverse('users:logout')
        response = api_client.post(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Profile Tests
# =============================================================================

@pytest.mark.django_db
class TestProfile:
    """Tests for the current user's profile endpoints."""

    def test_get_current_user(self, authenticated_client, user):
        url = reverse('users:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email

    def test_update_display_name_and_image(self, authenticated_client, user):
        url = reverse('users:update-profile')
        response = authenticated_client.patch(url, {
            'display_name': 'Renamed',
            'image': 'https://example.com/avatar.png',
        })

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.display_name == 'Renamed'
        assert user.image == 'https://example.com/avatar.png'

    def test_cannot_update_email(self, authenticated_client, user):
        """Email is read-only on the profile."""
        url = reverse('users:update-profile')
        authenticated_client.patch(url, {'email': 'hacked@example.com'})

        user.refresh_from_db()
        assert user.email == 'testuser@example.com'

    def test_get_user_by_id(self, authenticated_client, other_user):
        url = reverse('users:user-detail', args=[other_user.id])
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == 'Other User'


# =============================================================================
# Account Deletion Tests
# =============================================================================

@pytest.mark.django_db
class TestDeleteAccount:
    """Tests for DELETE /api/auth/user/delete/"""

    def test_delete_account_success(self, authenticated_client, user):
        url = reverse('users:delete-account')
        response = authenticated_client.delete(
            url, {'password': 'TestPass123!', 'confirm': True}, format='json'
        )

        assert response.status_code == status.HTTP_204_NO_CONTENT
        user.refresh_from_db()
        assert user.is_active is False
        assert user.deleted_at is not None

    def test_delete_account_wrong_password(self, authenticated_client, user):
        url = reverse('users:delete-account')
        response = authenticated_client.delete(
            url, {'password': 'nope', 'confirm': True}, format='json'
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_delete_account_without_confirmation(self, authenticated_client):
        url = reverse('users:delete-account')
        response = authenticated_client.delete(
            url, {'password': 'TestPass123!', 'confirm': False}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_delete_account_leaves_groups(self, authenticated_client, user, other_user):
        """Deleting an admin account hands the group over to the remaining member."""
        group = Group.objects.create(name='Flat 4B', created_by=user, member_count=2)
        GroupMembership.objects.create(user=user, group=group, role=GroupRole.ADMIN)
        GroupMembership.objects.create(user=other_user, group=group, role=GroupRole.MEMBER)

        url = reverse('users:delete-account')
        response = authenticated_client.delete(
            url, {'password': 'TestPass123!', 'confirm': True}, format='json'
        )

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not GroupMembership.objects.filter(user=user).exists()
        assert GroupMembership.objects.get(user=other_user).role == GroupRole.ADMIN


@pytest.mark.django_db
class TestUserModel:
    """Tests for the User model."""

    def test_get_display_name_falls_back_to_email(self, db):
        user = User.objects.create_user(email='fallback@example.com', password='x')
        assert user.get_display_name() == 'fallback'

    def test_anonymize(self, user):
        user.anonymize()
        assert user.email.startswith('deleted_')
        assert user.display_name == 'Deleted User'
        assert not user.has_usable_password()
