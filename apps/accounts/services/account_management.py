"""Account management service."""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model
from uuid import UUID

from apps.groups.services import leave_group

from .exceptions import PasswordConfirmationError

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def delete_user_account(*, user_id: UUID, password: str) -> None:
    """
    Delete an account by anonymizing it.

    The user leaves every group first, so admin hand-over and empty-group
    cleanup follow the normal leave rules.

    Args:
        user_id: User's ID
        password: User's password for confirmation

    Raises:
        PasswordConfirmationError: If password is incorrect
    """
    user = (
        User.objects
        .select_for_update()
        .get(id=user_id)
    )

    if not user.check_password(password):
        raise PasswordConfirmationError("Invalid password")

    group_ids = list(user.group_memberships.values_list('group_id', flat=True))
    for group_id in group_ids:
        leave_group(group_id=group_id, user=user)

    user.anonymize()
    logger.info("Anonymized user %s", user_id)
