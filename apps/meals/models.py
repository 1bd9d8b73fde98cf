from datetime import time
from django.core.validators import MinValueValidator
from django.db import models
import uuid


class MealType(models.TextChoices):
    BREAKFAST = 'BREAKFAST', 'Breakfast'
    LUNCH = 'LUNCH', 'Lunch'
    DINNER = 'DINNER', 'Dinner'


class Meal(models.Model):
    """One meal of one member on one day."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='meals')
    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='meals')
    date = models.DateField()
    type = models.CharField(max_length=10, choices=MealType.choices)
    period = models.ForeignKey(
        'periods.MealPeriod',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='meals'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'meals'
        unique_together = [['user', 'group', 'date', 'type']]
        indexes = [
            models.Index(fields=['group', 'date']),
            models.Index(fields=['group', 'period']),
        ]
        ordering = ['-date', 'type']

    def __str__(self):
        return f"{self.user} {self.type} on {self.date}"


class GuestMeal(models.Model):
    """Guest meals a member hosts on one day for one meal type."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='guest_meals')
    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='guest_meals')
    date = models.DateField()
    type = models.CharField(max_length=10, choices=MealType.choices)
    count = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    period = models.ForeignKey(
        'periods.MealPeriod',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='guest_meals'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'guest_meals'
        unique_together = [['user', 'group', 'date', 'type']]
        indexes = [
            models.Index(fields=['group', 'date']),
        ]
        ordering = ['-date', 'type']

    def __str__(self):
        return f"{self.count} guest(s) of {self.user} ({self.type}, {self.date})"


class MealSettings(models.Model):
    """Meal rules of a group."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.OneToOneField('groups.Group', on_delete=models.CASCADE, related_name='meal_settings')
    breakfast_time = models.TimeField(default=time(8, 0))
    lunch_time = models.TimeField(default=time(13, 0))
    dinner_time = models.TimeField(default=time(20, 0))
    auto_meal_enabled = models.BooleanField(default=False)
    # Members cannot change today's meals after this time
    meal_cutoff_time = models.TimeField(default=time(22, 0))
    max_meals_per_day = models.PositiveSmallIntegerField(default=3)
    allow_guest_meals = models.BooleanField(default=True)
    guest_meal_limit = models.PositiveSmallIntegerField(default=5)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'meal_settings'
        verbose_name_plural = 'meal settings'

    def __str__(self):
        return f"Meal settings of {self.group_id}"


class AutoMealSettings(models.Model):
    """Per-member automatic meal subscription."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='auto_meal_settings')
    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='auto_meal_settings')
    is_enabled = models.BooleanField(default=False)
    breakfast_enabled = models.BooleanField(default=True)
    lunch_enabled = models.BooleanField(default=True)
    dinner_enabled = models.BooleanField(default=True)
    guest_meal_enabled = models.BooleanField(default=False)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    # ISO dates ("2026-10-24") and MealType values to skip
    excluded_dates = models.JSONField(default=list, blank=True)
    excluded_meal_types = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'auto_meal_settings'
        unique_together = [['user', 'group']]
        verbose_name_plural = 'auto meal settings'

    def __str__(self):
        return f"Auto meals of {self.user} in {self.group_id}"

    def enabled_types(self):
        enabled = {
            MealType.BREAKFAST: self.breakfast_enabled,
            MealType.LUNCH: self.lunch_enabled,
            MealType.DINNER: self.dinner_enabled,
        }
        excluded = set(self.excluded_meal_types or [])
        return [t for t, on in enabled.items() if on and t not in excluded]

    def applies_on(self, day) -> bool:
        if not self.is_enabled:
            return False
        if self.start_date and day < self.start_date:
            return False
        if self.end_date and day > self.end_date:
            return False
        return day.isoformat() not in (self.excluded_dates or [])
