"""User registration service."""

import logging

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model

from .exceptions import UserRegistrationError

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    display_name: str = "",
    image: str = ""
) -> User:
    """
    Register a new user.

    Args:
        email: User's email address (stored lowercased)
        password: User's password (will be hashed)
        display_name: Optional display name
        image: Optional avatar URL

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If the email is already taken
    """
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("A user with this email already exists")

    try:
        user = User.objects.create_user(
            email=email,
            password=password,
            display_name=display_name,
            image=image,
        )
    except IntegrityError:
        raise UserRegistrationError("A user with this email already exists")

    logger.info("Registered user %s", user.id)
    return user
