import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status

from apps.finance.models import AccountTransaction, ExtraExpense, Payment, TransactionType


@pytest.mark.django_db
class TestPaymentEndpoints:

    def test_outsider_forbidden(self, outsider_client, group):
        url = reverse('finance:payment-list', kwargs={'group_id': group.id})
        response = outsider_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unauthenticated(self, api_client, group):
        url = reverse('finance:payment-list', kwargs={'group_id': group.id})
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_record_and_list(self, member_client, group, member_user, active_period, today):
        url = reverse('finance:payment-list', kwargs={'group_id': group.id})

        response = member_client.post(url, {
            'amount': '150.00',
            'date': today.isoformat(),
            'method': 'CASH',
        }, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'COMPLETED'
        assert response.data['user']['id'] == str(member_user.id)

        response = member_client.get(url)
        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1

    def test_member_cannot_record_for_admin(self, member_client, group, admin_user, active_period, today):
        url = reverse('finance:payment-list', kwargs={'group_id': group.id})
        response = member_client.post(url, {
            'amount': '150.00',
            'date': today.isoformat(),
            'user_id': str(admin_user.id),
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_negative_amount_invalid(self, member_client, group, today):
        url = reverse('finance:payment-list', kwargs={'group_id': group.id})
        response = member_client.post(url, {'amount': '-5', 'date': today.isoformat()}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_accountant_changes_status(self, accountant_client, group, member_user, active_period, today):
        payment = Payment.objects.create(
            user=member_user, group=group, amount=Decimal('20.00'), date=today, period=active_period,
        )

        url = reverse('finance:payment-detail', kwargs={'group_id': group.id, 'payment_id': payment.id})
        response = accountant_client.patch(url, {'status': 'FAILED'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'FAILED'

    def test_delete_missing_payment(self, admin_client, group, member_user):
        url = reverse('finance:payment-detail', kwargs={
            'group_id': group.id,
            'payment_id': '00000000-0000-0000-0000-000000000000',
        })
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestExpenseEndpoints:

    def test_create_expense(self, member_client, group, active_period, today):
        url = reverse('finance:expense-list', kwargs={'group_id': group.id})
        response = member_client.post(url, {
            'description': 'Groceries',
            'amount': '90.50',
            'date': today.isoformat(),
            'type': 'GROCERY',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        expense = ExtraExpense.objects.get()
        assert expense.transaction.amount == Decimal('-90.50')

    def test_create_without_period(self, member_client, group, today):
        url = reverse('finance:expense-list', kwargs={'group_id': group.id})
        response = member_client.post(url, {
            'description': 'Groceries',
            'amount': '10.00',
            'date': today.isoformat(),
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'active period' in response.data['error']

    def test_update_and_delete(self, member_client, group, member_user, active_period, today):
        url = reverse('finance:expense-list', kwargs={'group_id': group.id})
        created = member_client.post(url, {
            'description': 'Bread',
            'amount': '12.00',
            'date': today.isoformat(),
        }, format='json')

        detail = reverse('finance:expense-detail', kwargs={'group_id': group.id, 'expense_id': created.data['id']})
        response = member_client.patch(detail, {'amount': '14.00'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['amount'] == '14.00'

        response = member_client.delete(detail)
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not AccountTransaction.objects.exists()


@pytest.mark.django_db
class TestTransactionEndpoints:

    def test_page(self, admin_client, group, admin_user, member_user, active_period):
        for _ in range(3):
            AccountTransaction.objects.create(
                group=group, user=admin_user, target_user=member_user,
                amount=Decimal('5.00'), type=TransactionType.DEPOSIT, period=active_period,
            )

        url = reverse('finance:transaction-list', kwargs={'group_id': group.id})
        response = admin_client.get(url, {'limit': 2})

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['items']) == 2
        assert response.data['next_cursor'] is not None

        response = admin_client.get(url, {'limit': 2, 'cursor': response.data['next_cursor']})
        assert len(response.data['items']) == 1
        assert response.data['next_cursor'] is None

    def test_member_payment_to_accountant(self, member_client, group, accountant_user, active_period):
        url = reverse('finance:transaction-list', kwargs={'group_id': group.id})
        response = member_client.post(url, {
            'target_user_id': str(accountant_user.id),
            'amount': '40.00',
            'type': 'PAYMENT',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED

    def test_member_deposit_forbidden(self, member_client, group, member_user, active_period):
        url = reverse('finance:transaction-list', kwargs={'group_id': group.id})
        response = member_client.post(url, {
            'target_user_id': str(member_user.id),
            'amount': '40.00',
            'type': 'DEPOSIT',
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_accountant_cannot_delete(self, accountant_client, group, admin_user, member_user, active_period):
        entry = AccountTransaction.objects.create(
            group=group, user=admin_user, target_user=member_user,
            amount=Decimal('5.00'), type=TransactionType.DEPOSIT, period=active_period,
        )

        url = reverse('finance:transaction-detail', kwargs={'group_id': group.id, 'transaction_id': entry.id})
        response = accountant_client.delete(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_history_of_deleted_entry(self, admin_client, group, member_user, active_period):
        url = reverse('finance:transaction-list', kwargs={'group_id': group.id})
        created = admin_client.post(url, {
            'target_user_id': str(member_user.id),
            'amount': '25.00',
            'type': 'DEPOSIT',
        }, format='json')
        entry_id = created.data['id']
        detail = reverse('finance:transaction-detail', kwargs={'group_id': group.id, 'transaction_id': entry_id})
        admin_client.delete(detail)

        url = reverse('finance:transaction-history', kwargs={'group_id': group.id, 'transaction_id': entry_id})
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert {row['action'] for row in response.data} == {'CREATED', 'DELETED'}
        assert all(row['transaction_id'] == str(entry_id) for row in response.data)


@pytest.mark.django_db
class TestBalanceEndpoints:

    def test_own_balance(self, member_client, group, member_user, active_period, meals_and_expense):
        url = reverse('finance:balance', kwargs={'group_id': group.id})
        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['meal_count'] == 2
        assert response.data['available_balance'] == '-200.00'

    def test_other_balance_forbidden(self, member_client, group, admin_user):
        url = reverse('finance:balance', kwargs={'group_id': group.id})
        response = member_client.get(url, {'user_id': str(admin_user.id)})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_balance_history(self, admin_client, member_client, group, member_user, admin_user, active_period):
        admin_client.post(reverse('finance:transaction-list', kwargs={'group_id': group.id}), {
            'target_user_id': str(member_user.id),
            'amount': '10.00',
            'type': 'DEPOSIT',
        }, format='json')
        url = reverse('finance:balance-history', kwargs={'group_id': group.id})

        response = member_client.get(url)
        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['snapshot']['amount'] == '10.00'

        forbidden = member_client.get(url, {'user_id': str(admin_user.id)})
        assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    def test_summary(self, admin_client, member_client, group, active_period):
        url = reverse('finance:balance-summary', kwargs={'group_id': group.id})

        assert member_client.get(url).status_code == status.HTTP_403_FORBIDDEN

        response = admin_client.get(url)
        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['members']) == 3
