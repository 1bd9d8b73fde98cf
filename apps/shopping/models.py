from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal
import uuid


class ShoppingItem(models.Model):
    """Bazaar entry; quantity is the amount of money spent on the item."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='shopping_items')
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='shopping_items'
    )
    name = models.CharField(max_length=200)
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    unit = models.CharField(max_length=20, blank=True)
    purchased = models.BooleanField(default=False)
    date = models.DateField()
    period = models.ForeignKey(
        'periods.MealPeriod',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='shopping_items'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shopping_items'
        indexes = [
            models.Index(fields=['group', 'date']),
            models.Index(fields=['group', 'period', 'purchased']),
        ]
        ordering = ['-date', '-created_at']

    def __str__(self):
        return self.name


class MarketDateStatus(models.TextChoices):
    UPCOMING = 'UPCOMING', 'Upcoming'
    IN_PROGRESS = 'IN_PROGRESS', 'In progress'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'


class MarketDate(models.Model):
    """Shopping duty of a member on a given day."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='market_dates')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='market_dates')
    date = models.DateField()
    status = models.CharField(
        max_length=12,
        choices=MarketDateStatus.choices,
        default=MarketDateStatus.UPCOMING
    )
    fined = models.BooleanField(default=False)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='assigned_market_dates'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'market_dates'
        unique_together = [['group', 'user', 'date']]
        indexes = [
            models.Index(fields=['group', 'date']),
        ]
        ordering = ['date']

    def __str__(self):
        return f"{self.user} on {self.date} ({self.status})"
