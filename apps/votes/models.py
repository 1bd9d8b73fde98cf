from django.db import models
from django.utils import timezone
import uuid


class VoteType(models.TextChoices):
    MEAL_MANAGER = 'MEAL_MANAGER', 'Meal manager'
    MEAL_CHOICE = 'MEAL_CHOICE', 'Meal choice'
    ACCOUNTANT = 'ACCOUNTANT', 'Accountant'
    ROOM_LEADER = 'ROOM_LEADER', 'Room leader'
    MARKET_MANAGER = 'MARKET_MANAGER', 'Market manager'
    GROUP_DECISION = 'GROUP_DECISION', 'Group decision'
    EVENT_ORGANIZER = 'EVENT_ORGANIZER', 'Event organizer'
    CLEANING_MANAGER = 'CLEANING_MANAGER', 'Cleaning manager'
    TREASURER = 'TREASURER', 'Treasurer'
    CUSTOM = 'CUSTOM', 'Custom'


class Vote(models.Model):
    """Election or decision within a group."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='votes')
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='created_votes'
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=20, choices=VoteType.choices, default=VoteType.GROUP_DECISION)
    # Candidate labels, e.g. ["Alice", "Bob"]
    options = models.JSONField(default=list)
    # {option: [voter_id, ...]}
    results = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)
    start_date = models.DateTimeField(default=timezone.now)
    end_date = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'votes'
        indexes = [
            models.Index(fields=['group', 'is_active']),
            models.Index(fields=['end_date']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def is_expired(self):
        return self.end_date <= timezone.now()

    @property
    def total_votes(self):
        return sum(len(voters) for voters in (self.results or {}).values())

    def has_voted(self, user_id) -> bool:
        user_id = str(user_id)
        return any(user_id in voters for voters in (self.results or {}).values())
