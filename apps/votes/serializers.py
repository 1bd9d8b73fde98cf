from rest_framework import serializers

from apps.groups.serializers import UserMinimalSerializer
from .models import Vote, VoteType


class VoteSerializer(serializers.ModelSerializer):
    """
    Serializer for Vote model.

    ``has_voted`` is resolved for the requesting user from the context.
    """

    created_by = UserMinimalSerializer(read_only=True)
    total_votes = serializers.IntegerField(read_only=True)
    is_expired = serializers.BooleanField(read_only=True)
    has_voted = serializers.SerializerMethodField()

    class Meta:
        model = Vote
        fields = [
            'id', 'group', 'created_by', 'title', 'description', 'type',
            'options', 'results', 'is_active', 'is_expired', 'start_date',
            'end_date', 'total_votes', 'has_voted', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_has_voted(self, obj) -> bool:
        request = self.context.get('request')
        if request is None or not request.user.is_authenticated:
            return False
        return obj.has_voted(request.user.id)


class VoteCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    type = serializers.ChoiceField(choices=VoteType.choices, default=VoteType.GROUP_DECISION)
    options = serializers.ListField(child=serializers.CharField(max_length=100), min_length=2, max_length=50)
    start_date = serializers.DateTimeField(required=False)
    end_date = serializers.DateTimeField()


class VoteUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    options = serializers.ListField(
        child=serializers.CharField(max_length=100), min_length=2, max_length=50, required=False
    )
    end_date = serializers.DateTimeField(required=False)
    is_active = serializers.BooleanField(required=False)


class VoteFilterSerializer(serializers.Serializer):
    active_only = serializers.BooleanField(default=False)


class BallotSerializer(serializers.Serializer):
    option = serializers.CharField(max_length=100)


class VoteResultSerializer(serializers.Serializer):
    vote_id = serializers.UUIDField()
    counts = serializers.DictField(child=serializers.IntegerField())
    total_votes = serializers.IntegerField()
    winner = serializers.CharField(allow_null=True)
    is_tie = serializers.BooleanField()
    is_active = serializers.BooleanField()
