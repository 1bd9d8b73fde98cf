"""
Service layer unit tests for finance app.

Tests cover:
- Payments (own vs. recorded for others, notifications, locked periods)
- Extra expenses and their mirrored ledger entries
- Account transactions, history and cursor pagination
- Balances
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from apps.finance.models import (
    AccountTransaction,
    ExtraExpense,
    ExpenseType,
    HistoryAction,
    Payment,
    PaymentStatus,
    TransactionHistory,
    TransactionType,
)
from apps.finance.services import (
    create_payment,
    list_payments,
    update_payment_status,
    delete_payment,
    create_expense,
    update_expense,
    delete_expense,
    list_expenses,
    create_transaction,
    update_transaction,
    delete_transaction,
    list_transactions,
    list_transaction_history,
    user_balance,
    group_total_balance,
    available_balance,
    get_user_balance,
    group_balance_summary,
)
from apps.finance.services.exceptions import (
    FinancePermissionError,
    PaymentNotFoundError,
    ActivePeriodRequiredError,
    InvalidAmountError,
    InvalidTargetError,
    TransactionNotFoundError,
)
from apps.notifications.models import Notification, NotificationType
from apps.periods.models import PeriodStatus
from apps.periods.services import PeriodLockedError


def _deposit(group, by, target, amount, period):
    return AccountTransaction.objects.create(
        group=group,
        user=by,
        target_user=target,
        amount=Decimal(amount),
        type=TransactionType.DEPOSIT,
        period=period,
        created_by=by,
    )


@pytest.mark.django_db
class TestPayments:

    def test_member_records_own_payment(self, group, member_user, admin_user, active_period, today):
        payment = create_payment(
            group_id=group.id,
            user=member_user,
            amount=Decimal('500.00'),
            date=today,
        )

        assert payment.user == member_user
        assert payment.status == PaymentStatus.COMPLETED
        assert payment.period == active_period
        assert payment.created_by == member_user
        assert Notification.objects.filter(
            user=admin_user,
            type=NotificationType.PAYMENT_RECEIVED,
        ).exists()

    def test_member_cannot_record_for_others(self, group, member_user, admin_user, active_period, today):
        with pytest.raises(FinancePermissionError):
            create_payment(
                group_id=group.id,
                user=member_user,
                amount=Decimal('100.00'),
                date=today,
                user_id=admin_user.id,
            )

    def test_accountant_records_for_member(self, group, accountant_user, member_user, active_period, today):
        payment = create_payment(
            group_id=group.id,
            user=accountant_user,
            amount=Decimal('250.00'),
            date=today,
            user_id=member_user.id,
        )

        assert payment.user == member_user
        assert payment.created_by == accountant_user
        assert Notification.objects.filter(
            user=member_user,
            type=NotificationType.PAYMENT_CREATED,
        ).exists()

    def test_rejects_non_positive_amount(self, group, member_user, active_period, today):
        with pytest.raises(InvalidAmountError):
            create_payment(group_id=group.id, user=member_user, amount=Decimal('0'), date=today)

    def test_payer_must_be_member(self, group, accountant_user, outsider, active_period, today):
        with pytest.raises(InvalidTargetError):
            create_payment(
                group_id=group.id,
                user=accountant_user,
                amount=Decimal('10.00'),
                date=today,
                user_id=outsider.id,
            )

    def test_outsider_cannot_pay(self, group, outsider, today):
        with pytest.raises(FinancePermissionError):
            create_payment(group_id=group.id, user=outsider, amount=Decimal('10.00'), date=today)

    def test_locked_period_rejects_payment(self, group, member_user, active_period, today):
        active_period.is_locked = True
        active_period.status = PeriodStatus.LOCKED
        active_period.save()

        with pytest.raises(PeriodLockedError):
            create_payment(group_id=group.id, user=member_user, amount=Decimal('10.00'), date=today)

    def test_update_status_requires_privilege(self, group, member_user, accountant_user, active_period, today):
        payment = create_payment(group_id=group.id, user=member_user, amount=Decimal('75.00'), date=today)

        with pytest.raises(FinancePermissionError):
            update_payment_status(
                group_id=group.id,
                payment_id=payment.id,
                user=member_user,
                status=PaymentStatus.FAILED,
            )

        updated = update_payment_status(
            group_id=group.id,
            payment_id=payment.id,
            user=accountant_user,
            status=PaymentStatus.FAILED,
        )
        assert updated.status == PaymentStatus.FAILED

    def test_delete_payment(self, group, member_user, admin_user, active_period, today):
        payment = create_payment(group_id=group.id, user=member_user, amount=Decimal('75.00'), date=today)

        delete_payment(group_id=group.id, payment_id=payment.id, user=admin_user)

        assert not Payment.objects.exists()
        with pytest.raises(PaymentNotFoundError):
            delete_payment(group_id=group.id, payment_id=payment.id, user=admin_user)

    def test_list_filters(self, group, member_user, accountant_user, active_period, today):
        create_payment(group_id=group.id, user=member_user, amount=Decimal('10.00'), date=today)
        create_payment(group_id=group.id, user=accountant_user, amount=Decimal('20.00'), date=today)

        assert list_payments(group_id=group.id).count() == 2
        assert list_payments(group_id=group.id, user_id=member_user.id).count() == 1
        assert list_payments(group_id=group.id, status=PaymentStatus.PENDING).count() == 0


@pytest.mark.django_db
class TestExpenses:

    def test_create_writes_ledger_entry(self, group, member_user, active_period, today):
        expense = create_expense(
            group_id=group.id,
            user=member_user,
            description='Vegetables',
            amount=Decimal('120.00'),
            date=today,
            expense_type=ExpenseType.GROCERY,
        )

        entry = expense.transaction
        assert entry.amount == Decimal('-120.00')
        assert entry.type == TransactionType.EXPENSE
        assert entry.user == member_user
        assert entry.target_user == member_user
        assert entry.period == active_period
        assert TransactionHistory.objects.filter(transaction_id=entry.id, action=HistoryAction.CREATED).exists()

    def test_notifies_other_members(self, group, member_user, admin_user, active_period, today):
        create_expense(
            group_id=group.id,
            user=member_user,
            description='Gas bill',
            amount=Decimal('60.00'),
            date=today,
            expense_type=ExpenseType.UTILITY,
        )

        notified = set(
            Notification.objects
            .filter(type=NotificationType.EXPENSE_ADDED)
            .values_list('user_id', flat=True)
        )
        assert admin_user.id in notified
        assert member_user.id not in notified

    def test_requires_active_period(self, group, member_user, today):
        with pytest.raises(ActivePeriodRequiredError):
            create_expense(
                group_id=group.id,
                user=member_user,
                description='Soap',
                amount=Decimal('5.00'),
                date=today,
            )

    def test_update_syncs_ledger_entry(self, group, member_user, active_period, today):
        expense = create_expense(
            group_id=group.id,
            user=member_user,
            description='Fish',
            amount=Decimal('200.00'),
            date=today,
        )

        update_expense(
            group_id=group.id,
            expense_id=expense.id,
            user=member_user,
            amount=Decimal('180.00'),
            description='Fish (discounted)',
        )

        entry = AccountTransaction.objects.get(id=expense.transaction_id)
        assert entry.amount == Decimal('-180.00')
        assert entry.description == 'Fish (discounted)'
        history = TransactionHistory.objects.get(transaction_id=entry.id, action=HistoryAction.UPDATED)
        assert history.previous_amount == Decimal('-200.00')
        assert history.new_amount == Decimal('-180.00')

    def test_update_rejects_zero_amount(self, group, member_user, active_period, today):
        expense = create_expense(
            group_id=group.id, user=member_user, description='Oil', amount=Decimal('9.00'), date=today,
        )

        with pytest.raises(InvalidAmountError):
            update_expense(group_id=group.id, expense_id=expense.id, user=member_user, amount=Decimal('0'))

    def test_delete_removes_ledger_entry(self, group, member_user, active_period, today):
        expense = create_expense(
            group_id=group.id, user=member_user, description='Milk', amount=Decimal('30.00'), date=today,
        )
        entry_id = expense.transaction_id

        delete_expense(group_id=group.id, expense_id=expense.id, user=member_user)

        assert not ExtraExpense.objects.exists()
        assert not AccountTransaction.objects.filter(id=entry_id).exists()
        deleted = TransactionHistory.objects.get(action=HistoryAction.DELETED)
        assert deleted.transaction_id == entry_id
        assert deleted.snapshot['amount'] == '-30.00'

    def test_locked_period_blocks_changes(self, group, member_user, active_period, today):
        expense = create_expense(
            group_id=group.id, user=member_user, description='Eggs', amount=Decimal('15.00'), date=today,
        )
        active_period.is_locked = True
        active_period.status = PeriodStatus.LOCKED
        active_period.save()

        with pytest.raises(PeriodLockedError):
            delete_expense(group_id=group.id, expense_id=expense.id, user=member_user)

    def test_list_by_type(self, group, member_user, active_period, today):
        create_expense(
            group_id=group.id, user=member_user, description='Rice', amount=Decimal('40.00'),
            date=today, expense_type=ExpenseType.GROCERY,
        )
        create_expense(
            group_id=group.id, user=member_user, description='Internet', amount=Decimal('25.00'),
            date=today, expense_type=ExpenseType.UTILITY,
        )

        assert list_expenses(group_id=group.id).count() == 2
        assert list_expenses(group_id=group.id, expense_type=ExpenseType.UTILITY).count() == 1


@pytest.mark.django_db
class TestTransactions:

    def test_member_pays_accountant(self, group, member_user, accountant_user, active_period):
        entry = create_transaction(
            group_id=group.id,
            user=member_user,
            target_user_id=accountant_user.id,
            amount=Decimal('100.00'),
            transaction_type=TransactionType.PAYMENT,
        )

        assert entry.period == active_period
        assert TransactionHistory.objects.filter(transaction_id=entry.id, action=HistoryAction.CREATED).count() == 1

    def test_member_cannot_deposit(self, group, member_user, active_period):
        with pytest.raises(FinancePermissionError):
            create_transaction(
                group_id=group.id,
                user=member_user,
                target_user_id=member_user.id,
                amount=Decimal('100.00'),
                transaction_type=TransactionType.DEPOSIT,
            )

    def test_accountant_creates_any_type(self, group, accountant_user, member_user, active_period):
        entry = create_transaction(
            group_id=group.id,
            user=accountant_user,
            target_user_id=member_user.id,
            amount=Decimal('-20.00'),
            transaction_type=TransactionType.ADJUSTMENT,
        )
        assert entry.amount == Decimal('-20.00')

    def test_zero_amount_rejected(self, group, accountant_user, member_user, active_period):
        with pytest.raises(InvalidAmountError):
            create_transaction(
                group_id=group.id,
                user=accountant_user,
                target_user_id=member_user.id,
                amount=Decimal('0'),
                transaction_type=TransactionType.DEPOSIT,
            )

    def test_update_by_accountant_only(self, group, accountant_user, member_user, admin_user, active_period):
        entry = _deposit(group, admin_user, member_user, '50.00', active_period)

        with pytest.raises(FinancePermissionError):
            update_transaction(group_id=group.id, transaction_id=entry.id, user=member_user, amount=Decimal('1'))

        updated = update_transaction(
            group_id=group.id,
            transaction_id=entry.id,
            user=accountant_user,
            amount=Decimal('70.00'),
        )
        assert updated.amount == Decimal('70.00')
        history = TransactionHistory.objects.get(transaction_id=entry.id, action=HistoryAction.UPDATED)
        assert history.previous_amount == Decimal('50.00')
        assert history.changed_by == accountant_user

    def test_delete_by_admin_only(self, group, accountant_user, admin_user, member_user, active_period):
        entry = _deposit(group, admin_user, member_user, '50.00', active_period)

        with pytest.raises(FinancePermissionError):
            delete_transaction(group_id=group.id, transaction_id=entry.id, user=accountant_user)

        delete_transaction(group_id=group.id, transaction_id=entry.id, user=admin_user)

        assert not AccountTransaction.objects.exists()
        history = TransactionHistory.objects.get(action=HistoryAction.DELETED)
        assert history.snapshot['target_user_id'] == str(member_user.id)
        assert history.previous_amount == Decimal('50.00')

    def test_cursor_pagination(self, group, admin_user, member_user, active_period):
        for amount in ('10.00', '20.00', '30.00'):
            _deposit(group, admin_user, member_user, amount, active_period)

        first = list_transactions(group_id=group.id, limit=2)
        assert len(first['items']) == 2
        assert first['next_cursor'] == first['items'][-1].id

        second = list_transactions(group_id=group.id, limit=2, cursor=first['next_cursor'])
        assert len(second['items']) == 1
        assert second['next_cursor'] is None

        seen = {t.id for t in first['items']} | {t.id for t in second['items']}
        assert len(seen) == 3

    def test_list_by_target(self, group, admin_user, member_user, accountant_user, active_period):
        _deposit(group, admin_user, member_user, '10.00', active_period)
        _deposit(group, admin_user, accountant_user, '10.00', active_period)

        page = list_transactions(group_id=group.id, target_user_id=member_user.id)
        assert [t.target_user_id for t in page['items']] == [member_user.id]


@pytest.mark.django_db
class TestTransactionHistory:

    def _entry(self, group, accountant_user, target):
        return create_transaction(
            group_id=group.id,
            user=accountant_user,
            target_user_id=target.id,
            amount=Decimal('50'),
            transaction_type=TransactionType.DEPOSIT,
        )

    def test_trail_survives_delete(self, group, admin_user, accountant_user, member_user, active_period):
        entry = self._entry(group, accountant_user, member_user)
        entry_id = entry.id
        update_transaction(group_id=group.id, transaction_id=entry_id, user=accountant_user, amount=Decimal('70.00'))
        delete_transaction(group_id=group.id, transaction_id=entry_id, user=admin_user)

        history = list(list_transaction_history(group_id=group.id, user=admin_user, transaction_id=entry_id))

        assert len(history) == 3
        assert {h.action for h in history} == {HistoryAction.CREATED, HistoryAction.UPDATED, HistoryAction.DELETED}
        assert all(h.snapshot['id'] == str(entry_id) for h in history)
        assert all(h.target_user == member_user for h in history)

    def test_created_snapshot_amount_has_two_decimals(self, group, accountant_user, member_user, active_period):
        entry = self._entry(group, accountant_user, member_user)

        created = TransactionHistory.objects.get(transaction_id=entry.id, action=HistoryAction.CREATED)
        assert created.snapshot['amount'] == '50.00'

    def test_member_reads_own_balance_history(self, group, accountant_user, member_user, active_period):
        self._entry(group, accountant_user, member_user)
        self._entry(group, accountant_user, accountant_user)

        history = list_transaction_history(group_id=group.id, user=member_user)

        assert [h.target_user_id for h in history] == [member_user.id]

    def test_member_cannot_read_others_balance_history(self, group, accountant_user, member_user, active_period):
        with pytest.raises(FinancePermissionError):
            list_transaction_history(group_id=group.id, user=member_user, target_user_id=accountant_user.id)

    def test_member_cannot_read_others_entry_trail(self, group, accountant_user, member_user, active_period):
        entry = self._entry(group, accountant_user, accountant_user)

        with pytest.raises(FinancePermissionError):
            list_transaction_history(group_id=group.id, user=member_user, transaction_id=entry.id)

    def test_accountant_reads_member_history(self, group, accountant_user, member_user, active_period):
        self._entry(group, accountant_user, member_user)

        history = list_transaction_history(group_id=group.id, user=accountant_user, target_user_id=member_user.id)

        assert len(history) == 1

    def test_unknown_entry(self, group, admin_user):
        with pytest.raises(TransactionNotFoundError):
            list_transaction_history(group_id=group.id, user=admin_user, transaction_id=uuid4())


@pytest.mark.django_db
class TestBalances:

    def test_zero_without_period(self, group, member_user, admin_user):
        assert user_balance(group.id, member_user.id, None) == Decimal('0')
        assert group_total_balance(group.id, None) == Decimal('0')

        balance = get_user_balance(group_id=group.id, user=member_user)
        assert balance['balance'] == Decimal('0')
        assert balance['period_id'] is None

    def test_user_and_group_balance(self, group, admin_user, member_user, active_period):
        _deposit(group, admin_user, member_user, '500.00', active_period)
        _deposit(group, admin_user, admin_user, '1000.00', active_period)

        assert user_balance(group.id, member_user.id, active_period.id) == Decimal('500.00')
        assert group_total_balance(group.id, active_period.id) == Decimal('1000.00')

    def test_available_balance(self, group, admin_user, member_user, active_period, meals_and_expense):
        _deposit(group, admin_user, member_user, '500.00', active_period)

        figures = available_balance(group.id, member_user.id, active_period.id)

        assert figures['meal_count'] == 2
        assert figures['meal_rate'] == Decimal('100.00')
        assert figures['available_balance'] == Decimal('300.00')

    def test_member_sees_only_own_balance(self, group, member_user, admin_user, active_period):
        with pytest.raises(FinancePermissionError):
            get_user_balance(group_id=group.id, user=member_user, target_user_id=admin_user.id)

    def test_accountant_sees_member_balance(self, group, accountant_user, member_user, active_period):
        balance = get_user_balance(group_id=group.id, user=accountant_user, target_user_id=member_user.id)
        assert balance['user_id'] == member_user.id

    def test_summary(self, group, admin_user, member_user, accountant_user, active_period, meals_and_expense):
        _deposit(group, admin_user, admin_user, '1000.00', active_period)

        summary = group_balance_summary(group_id=group.id, user=accountant_user)

        assert len(summary['members']) == 3
        assert summary['total_expenses'] == Decimal('300.00')
        assert summary['group_total_balance'] == Decimal('1000.00')
        assert summary['net_group_balance'] == Decimal('700.00')
        assert summary['meal_rate'] == Decimal('100.00')

        by_user = {row['user_id']: row for row in summary['members']}
        assert by_user[admin_user.id]['total_spent'] == Decimal('300.00')

    def test_summary_requires_privilege(self, group, member_user):
        with pytest.raises(FinancePermissionError):
            group_balance_summary(group_id=group.id, user=member_user)
