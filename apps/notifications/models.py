from django.db import models
import uuid


class NotificationType(models.TextChoices):
    GENERAL = 'GENERAL', 'General'
    MEAL_ADDED = 'MEAL_ADDED', 'Meal added'
    MEAL_REMINDER = 'MEAL_REMINDER', 'Meal reminder'
    PAYMENT_CREATED = 'PAYMENT_CREATED', 'Payment created'
    PAYMENT_RECEIVED = 'PAYMENT_RECEIVED', 'Payment received'
    EXPENSE_ADDED = 'EXPENSE_ADDED', 'Expense added'
    SHOPPING_ADDED = 'SHOPPING_ADDED', 'Shopping added'
    MARKET_DATE_ASSIGNED = 'MARKET_DATE_ASSIGNED', 'Market date assigned'
    MARKET_DATE_UPDATED = 'MARKET_DATE_UPDATED', 'Market date updated'
    PERIOD_STARTED = 'PERIOD_STARTED', 'Period started'
    PERIOD_ENDED = 'PERIOD_ENDED', 'Period ended'
    PERIOD_LOCKED = 'PERIOD_LOCKED', 'Period locked'
    MEMBER_ADDED = 'MEMBER_ADDED', 'Member added'
    MEMBER_REMOVED = 'MEMBER_REMOVED', 'Member removed'
    JOIN_REQUEST = 'JOIN_REQUEST', 'Join request'
    JOIN_REQUEST_APPROVED = 'JOIN_REQUEST_APPROVED', 'Join request approved'
    JOIN_REQUEST_REJECTED = 'JOIN_REQUEST_REJECTED', 'Join request rejected'
    ROLE_CHANGED = 'ROLE_CHANGED', 'Role changed'
    VOTE_STARTED = 'VOTE_STARTED', 'Vote started'
    VOTE_ENDED = 'VOTE_ENDED', 'Vote ended'


# Which member notification setting silences which notification types
NOTIFICATION_CATEGORIES = {
    'meal_updates': {
        NotificationType.MEAL_ADDED,
        NotificationType.MEAL_REMINDER,
    },
    'payment_updates': {
        NotificationType.PAYMENT_CREATED,
        NotificationType.PAYMENT_RECEIVED,
        NotificationType.EXPENSE_ADDED,
        NotificationType.SHOPPING_ADDED,
    },
    'vote_updates': {
        NotificationType.VOTE_STARTED,
        NotificationType.VOTE_ENDED,
    },
}


class Notification(models.Model):
    """In-app notification for a single user."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='notifications')
    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='notifications'
    )
    type = models.CharField(
        max_length=30,
        choices=NotificationType.choices,
        default=NotificationType.GENERAL
    )
    message = models.TextField()
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        indexes = [
            models.Index(fields=['user', 'read', 'created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.type} for {self.user_id}"
