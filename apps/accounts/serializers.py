from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Profile of the authenticated user."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'image',
            'created_at',
            'last_login',
            'preferences',
        ]
        read_only_fields = ['id', 'email', 'created_at', 'last_login']


class UserRegistrationSerializer(serializers.Serializer):
    """Validate registration input."""

    email = serializers.EmailField(max_length=255)
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    image = serializers.URLField(max_length=500, required=False, allow_blank=True)
    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class DeleteAccountSerializer(serializers.Serializer):
    """Confirmation payload for account deletion."""

    password = serializers.CharField(help_text="Current password for confirmation")
    confirm = serializers.BooleanField(help_text="Must be true to confirm deletion")

    def validate_confirm(self, value):
        if not value:
            raise serializers.ValidationError('Confirmation required')
        return value


class UserPublicSerializer(serializers.ModelSerializer):
    """Public user info shown next to meals, payments, votes, ..."""

    name = serializers.CharField(source='get_display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'image']
        read_only_fields = fields
