import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient


# =============================================================================
# Dashboard Endpoint Tests
# =============================================================================

@pytest.mark.django_db
class TestDashboard:
    """Tests for GET /api/analytics/{group_id}/dashboard/"""

    def test_dashboard(self, member_client, analytics_group, analytics_period, analytics_data):
        url = reverse('analytics:dashboard', kwargs={'group_id': analytics_group.id})
        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['period']['name'] == 'Current'
        assert Decimal(response.data['meal_rate']) == Decimal('100.00')
        assert Decimal(response.data['me']['balance']) == Decimal('300.00')
        assert len(response.data['recent_activity']) == 5

    def test_outsider_forbidden(self, outsider_client, analytics_group):
        url = reverse('analytics:dashboard', kwargs={'group_id': analytics_group.id})
        response = outsider_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unauthenticated(self, analytics_group):
        url = reverse('analytics:dashboard', kwargs={'group_id': analytics_group.id})
        response = APIClient().get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Meal Rate and Summaries Endpoint Tests
# =============================================================================

@pytest.mark.django_db
class TestMealRate:
    """Tests for GET /api/analytics/{group_id}/meal-rate/"""

    def test_meal_rate(self, member_client, analytics_group, analytics_period, analytics_data):
        url = reverse('analytics:meal-rate', kwargs={'group_id': analytics_group.id})
        response = member_client.get(url, {'period_id': str(analytics_period.id)})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_meals'] == 4
        assert Decimal(response.data['meal_rate']) == Decimal('100.00')

    def test_unknown_period(self, member_client, analytics_group, analytics_outsider):
        url = reverse('analytics:meal-rate', kwargs={'group_id': analytics_group.id})
        response = member_client.get(url, {'period_id': str(analytics_outsider.id)})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_invalid_period_id(self, member_client, analytics_group):
        url = reverse('analytics:meal-rate', kwargs={'group_id': analytics_group.id})
        response = member_client.get(url, {'period_id': 'not-a-uuid'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestUserSummaries:
    """Tests for GET /api/analytics/{group_id}/summaries/"""

    def test_accountant_sees_everyone(self, accountant_client, analytics_group, analytics_data):
        url = reverse('analytics:summaries', kwargs={'group_id': analytics_group.id})
        response = accountant_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 3

    def test_member_sees_own_line(self, member_client, analytics_group, analytics_data, analytics_member):
        url = reverse('analytics:summaries', kwargs={'group_id': analytics_group.id})
        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['user_id'] == str(analytics_member.id)
        assert Decimal(response.data[0]['paid']) == Decimal('500.00')


# =============================================================================
# Expense Analytics Endpoint Tests
# =============================================================================

@pytest.mark.django_db
class TestExpenseAnalytics:
    """Tests for GET /api/analytics/{group_id}/expenses/"""

    def test_breakdowns(self, admin_client, analytics_group, analytics_data):
        url = reverse('analytics:expenses', kwargs={'group_id': analytics_group.id})
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.data['total']) == Decimal('400.00')
        assert [row['type'] for row in response.data['by_type']] == ['GROCERY', 'UTILITY']
        assert len(response.data['top']) == 3
        assert len(response.data['daily']) == 2

    def test_no_active_period(self, admin_client, analytics_group):
        url = reverse('analytics:expenses', kwargs={'group_id': analytics_group.id})
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['top'] == []


# =============================================================================
# Trends and Cross-Group Endpoint Tests
# =============================================================================

@pytest.mark.django_db
class TestTrends:
    """Tests for GET /api/analytics/{group_id}/trends/"""

    def test_trends(self, member_client, analytics_group, analytics_period, analytics_data):
        url = reverse('analytics:trends', kwargs={'group_id': analytics_group.id})
        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['meal_rate'][-1]['name'] == 'Current'
        assert Decimal(response.data['meal_rate'][-1]['meal_rate']) == Decimal('100.00')
        assert len(response.data['monthly_expenses']) == 6

    def test_outsider_forbidden(self, outsider_client, analytics_group):
        url = reverse('analytics:trends', kwargs={'group_id': analytics_group.id})

        assert outsider_client.get(url).status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestGroupsOverview:
    """Tests for GET /api/analytics/groups/"""

    def test_overview(self, member_client, analytics_group, analytics_period, analytics_data):
        response = member_client.get(reverse('analytics:groups-overview'))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['groups']) == 1
        assert response.data['groups'][0]['name'] == 'Analytics Flat'
        assert Decimal(response.data['totals']['balance']) == Decimal('300.00')

    def test_outsider_sees_no_groups(self, outsider_client, analytics_group):
        response = outsider_client.get(reverse('analytics:groups-overview'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['groups'] == []

    def test_unauthenticated(self):
        response = APIClient().get(reverse('analytics:groups-overview'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
