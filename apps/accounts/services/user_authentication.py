"""User authentication service."""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from .exceptions import InvalidCredentialsError, InactiveAccountError

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Authenticate user with email and password.

    Args:
        email: User's email (case-insensitive)
        password: User's password

    Returns:
        Authenticated User instance with last_login refreshed

    Raises:
        InvalidCredentialsError: If credentials are invalid
        InactiveAccountError: If account is deactivated
    """
    try:
        user = (
            User.objects
            .select_for_update()
            .get(email__iexact=email)
        )
    except User.DoesNotExist:
        raise InvalidCredentialsError("Invalid email or password")

    if not user.check_password(password):
        logger.info("Failed login for %s", user.id)
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    return user
