from django.db import models
import uuid


class PeriodStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    ENDED = 'ENDED', 'Ended'
    LOCKED = 'LOCKED', 'Locked'
    ARCHIVED = 'ARCHIVED', 'Archived'


class MealPeriod(models.Model):
    """Billing window of a group; meals and costs are aggregated per period."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='periods')
    name = models.CharField(max_length=120)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    status = models.CharField(
        max_length=10,
        choices=PeriodStatus.choices,
        default=PeriodStatus.ACTIVE
    )
    is_locked = models.BooleanField(default=False)
    opening_balance = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    closing_balance = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    carry_forward = models.BooleanField(default=False)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='created_periods'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'meal_periods'
        unique_together = [['group', 'name']]
        indexes = [
            models.Index(fields=['group', 'status']),
            models.Index(fields=['group', 'start_date']),
        ]
        ordering = ['-start_date', '-created_at']

    def __str__(self):
        return f"{self.name} ({self.status})"

    def contains(self, day) -> bool:
        if day < self.start_date:
            return False
        return self.end_date is None or day <= self.end_date

    @property
    def is_frozen(self) -> bool:
        """Locked and archived periods are read-only."""
        return self.is_locked or self.status in (PeriodStatus.LOCKED, PeriodStatus.ARCHIVED)
