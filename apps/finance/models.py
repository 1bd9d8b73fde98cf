from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal
import uuid


class PaymentMethod(models.TextChoices):
    CASH = 'CASH', 'Cash'
    BKASH = 'BKASH', 'bKash'
    BANK_TRANSFER = 'BANK_TRANSFER', 'Bank transfer'
    CARD = 'CARD', 'Card'
    OTHER = 'OTHER', 'Other'


class PaymentStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    COMPLETED = 'COMPLETED', 'Completed'
    FAILED = 'FAILED', 'Failed'


class Payment(models.Model):
    """Money a member paid into the group's meal fund."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='payments')
    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    date = models.DateField()
    method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    status = models.CharField(max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.COMPLETED)
    description = models.TextField(blank=True)
    period = models.ForeignKey(
        'periods.MealPeriod',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments'
    )
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='recorded_payments'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payments'
        indexes = [
            models.Index(fields=['group', 'date']),
            models.Index(fields=['group', 'period', 'status']),
            models.Index(fields=['user', 'date']),
        ]
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.user} paid {self.amount} on {self.date}"


class ExpenseType(models.TextChoices):
    GROCERY = 'GROCERY', 'Grocery'
    UTILITY = 'UTILITY', 'Utility'
    DINEOUT = 'DINEOUT', 'Dine out'
    OTHER = 'OTHER', 'Other'


class TransactionType(models.TextChoices):
    DEPOSIT = 'DEPOSIT', 'Deposit'
    WITHDRAWAL = 'WITHDRAWAL', 'Withdrawal'
    TRANSFER = 'TRANSFER', 'Transfer'
    ADJUSTMENT = 'ADJUSTMENT', 'Adjustment'
    PAYMENT = 'PAYMENT', 'Payment'
    REFUND = 'REFUND', 'Refund'
    EXPENSE = 'EXPENSE', 'Expense'


class AccountTransaction(models.Model):
    """
    Ledger entry of a group account.

    The balance of a user is the sum of amounts where they are the target.
    Entries where user == target_user are the group's own money movements.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='transactions')
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='sent_transactions'
    )
    target_user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='received_transactions'
    )
    # Signed: negative amounts debit the target
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    type = models.CharField(max_length=12, choices=TransactionType.choices)
    description = models.TextField(blank=True)
    period = models.ForeignKey(
        'periods.MealPeriod',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions'
    )
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='created_transactions'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'account_transactions'
        indexes = [
            models.Index(fields=['group', 'target_user', 'period']),
            models.Index(fields=['group', 'created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.type} {self.amount} → {self.target_user}"

    def snapshot(self) -> dict:
        return {
            'id': str(self.id),
            'user_id': str(self.user_id),
            'target_user_id': str(self.target_user_id),
            'amount': str(Decimal(self.amount).quantize(Decimal('0.01'))),
            'type': self.type,
            'description': self.description,
            'period_id': str(self.period_id) if self.period_id else None,
        }


class ExtraExpense(models.Model):
    """Shared cost (groceries, utilities...) spread over the period's meals."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='extra_expenses')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='extra_expenses')
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    description = models.CharField(max_length=255)
    date = models.DateField()
    type = models.CharField(max_length=10, choices=ExpenseType.choices, default=ExpenseType.OTHER)
    receipt_url = models.URLField(max_length=500, blank=True)
    period = models.ForeignKey(
        'periods.MealPeriod',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='extra_expenses'
    )
    transaction = models.OneToOneField(
        AccountTransaction,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expense'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'extra_expenses'
        indexes = [
            models.Index(fields=['group', 'period']),
            models.Index(fields=['group', 'date']),
        ]
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.description} ({self.amount})"


class HistoryAction(models.TextChoices):
    CREATED = 'CREATED', 'Created'
    UPDATED = 'UPDATED', 'Updated'
    DELETED = 'DELETED', 'Deleted'


class TransactionHistory(models.Model):
    """
    Append-only audit trail of ledger changes.

    ``transaction_id`` is a plain column, not a foreign key, so the trail
    of a deleted entry can still be looked up by its ID.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transaction_id = models.UUIDField(db_index=True)
    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='transaction_history')
    target_user = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='balance_history'
    )
    action = models.CharField(max_length=10, choices=HistoryAction.choices)
    changed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='transaction_changes'
    )
    previous_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    new_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    snapshot = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'transaction_history'
        indexes = [
            models.Index(fields=['group', 'created_at']),
            models.Index(fields=['group', 'target_user', 'created_at']),
        ]
        ordering = ['-created_at']
        verbose_name_plural = 'transaction history'

    def __str__(self):
        return f"{self.action} {self.transaction_id}"
