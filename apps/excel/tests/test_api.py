import io
import pytest
import pandas as pd
from django.urls import reverse
from rest_framework import status

from apps.meals.models import Meal


XLSX = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


@pytest.mark.django_db
class TestExcelEndpoints:

    def test_permissions(self, member_client, group):
        url = reverse('excel:permissions', kwargs={'group_id': group.id})
        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['can_import'] is False
        assert response.data['export_scopes'] == ['user']

    def test_outsider_forbidden(self, outsider_client, group):
        url = reverse('excel:export', kwargs={'group_id': group.id})
        response = outsider_client.get(url, {'type': 'meals'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_export_download(self, admin_client, group, flat_data):
        url = reverse('excel:export', kwargs={'group_id': group.id})
        response = admin_client.get(url, {'type': 'payments', 'scope': 'all', 'date_range': 'month'})

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == XLSX
        assert 'attachment; filename="flat-4b_payments_' in response['Content-Disposition']
        payments = pd.read_excel(io.BytesIO(response.content), sheet_name='Payments')
        assert len(payments) == 2

    def test_member_export_forbidden_type(self, member_client, group, flat_data):
        url = reverse('excel:export', kwargs={'group_id': group.id})
        response = member_client.get(url, {'type': 'balances'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_custom_range_requires_dates(self, admin_client, group):
        url = reverse('excel:export', kwargs={'group_id': group.id})
        response = admin_client.get(url, {'type': 'meals', 'scope': 'all', 'date_range': 'custom'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_preview(self, member_client, group, flat_data, today):
        url = reverse('excel:preview', kwargs={'group_id': group.id})
        response = member_client.get(url, {'type': 'meals', 'date_range': 'day'})

        assert response.status_code == status.HTTP_200_OK
        rows = response.data['sheets']['Meals']
        assert len(rows) == 1
        assert rows[0]['Name'] == 'Plain Member'
        assert rows[0]['Date'] == today.isoformat()
        assert rows[0]['Total'] == 2

    def test_import(self, admin_client, group, member_user, active_period, today, make_workbook):
        url = reverse('excel:import', kwargs={'group_id': group.id})
        upload = make_workbook(
            ['Date', 'Name', 'Breakfast', 'Lunch', 'Dinner'],
            [[today.isoformat(), 'Plain Member', 1, 1, 1]],
        )

        response = admin_client.post(url, {'type': 'meals', 'file': upload}, format='multipart')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['imported'] == 1
        assert Meal.objects.filter(user=member_user).count() == 3

    def test_member_import_forbidden(self, member_client, group, make_workbook):
        url = reverse('excel:import', kwargs={'group_id': group.id})
        upload = make_workbook(['Date', 'Name'], [])

        response = member_client.post(url, {'type': 'meals', 'file': upload}, format='multipart')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_import_rejects_other_files(self, admin_client, group, make_workbook):
        url = reverse('excel:import', kwargs={'group_id': group.id})
        upload = make_workbook(['Date', 'Name'], [], name='meals.csv')

        response = admin_client.post(url, {'type': 'meals', 'file': upload}, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_template(self, member_client):
        response = member_client.get(reverse('excel:template'), {'type': 'shopping'})

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == XLSX
        sheets = pd.read_excel(io.BytesIO(response.content), sheet_name=None)
        assert list(sheets['Shopping'].columns) == ['Date', 'Description', 'Amount', 'AddedBy']
