"""
Invite management service.

Handles shareable invite tokens and email invitations with uniqueness
guarantees.
"""

import logging
import secrets
import string
from datetime import timedelta
from typing import Iterable, Optional
from uuid import UUID

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction, IntegrityError
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.models import (
    GroupMembership,
    InviteToken,
    Invitation,
    InvitationStatus,
    ActivityType,
)
from apps.groups.roles import GroupRole, INVITE_ROLES
from apps.notifications.models import NotificationType
from apps.notifications.services import notify_group_admins

from .access import get_group, require_role
from .activity_log import log_activity
from .membership_management import add_member
from .exceptions import (
    AlreadyMemberError,
    GroupFullError,
    InvalidInviteTokenError,
    InvitationNotFoundError,
    InvalidInvitationError,
)

logger = logging.getLogger(__name__)

TOKEN_LENGTH = 10
INVITATION_TTL_DAYS = 7


def _generate_token() -> str:
    return ''.join(secrets.choice(string.ascii_uppercase) for _ in range(TOKEN_LENGTH))


@transaction.atomic
def create_invite_token(
    *,
    group_id: UUID,
    user: User,
    role: str = GroupRole.MEMBER,
    expires_in_days: Optional[int] = None,
    max_retries: int = 5
) -> InviteToken:
    """
    Create a shareable invite token for a group.

    Uses retry logic to ensure uniqueness.

    Args:
        group_id: UUID of the group
        user: User creating the token (admin, moderator or manager)
        role: Role granted to whoever joins with the token
        expires_in_days: Lifetime in days; None never expires
        max_retries: Maximum attempts to generate a unique token

    Returns:
        Created InviteToken

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If user's role cannot invite
        RuntimeError: If cannot generate unique token after retries
    """
    group = get_group(group_id)
    require_role(
        group_id,
        user,
        INVITE_ROLES,
        "Only admins, moderators and managers can create invites"
    )

    expires_at = None
    if expires_in_days:
        expires_at = timezone.now() + timedelta(days=expires_in_days)

    for attempt in range(max_retries):
        try:
            with transaction.atomic():
                invite = InviteToken.objects.create(
                    token=_generate_token(),
                    group=group,
                    created_by=user,
                    role=role,
                    expires_at=expires_at,
                )
            break
        except IntegrityError:
            if attempt == max_retries - 1:
                raise RuntimeError(
                    f"Failed to generate unique invite token after {max_retries} attempts"
                )
            continue

    log_activity(
        group=group,
        user=user,
        activity_type=ActivityType.INVITE_CREATED,
        details={'role': role, 'expires_at': expires_at.isoformat() if expires_at else None},
    )
    return invite


def get_invite_token(*, token: str) -> InviteToken:
    """
    Resolve a token for the public join preview.

    Raises:
        InvalidInviteTokenError: If token is unknown or already used
    """
    try:
        invite = InviteToken.objects.select_related('group').get(token=token.strip().upper())
    except InviteToken.DoesNotExist:
        raise InvalidInviteTokenError("Invalid invite token")

    if invite.is_used:
        raise InvalidInviteTokenError("Invite token was already used")
    return invite


def _send_invitation_email(invitation: Invitation, inviter: User) -> bool:
    link = f"{settings.FRONTEND_URL.rstrip('/')}/invitations/{invitation.token}"
    try:
        send_mail(
            subject=f"You're invited to join {invitation.group.name}",
            message=(
                f"{inviter.get_display_name()} invited you to join "
                f"{invitation.group.name}.\n\nAccept the invitation: {link}\n\n"
                f"This link expires in {INVITATION_TTL_DAYS} days."
            ),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[invitation.email],
        )
    except Exception:
        logger.exception("Failed to send invitation email to %s", invitation.email)
        return False
    return True


@transaction.atomic
def send_invitations(
    *,
    group_id: UUID,
    user: User,
    emails: Iterable[str],
    role: str = GroupRole.MEMBER
) -> dict:
    """
    Email invitations to a list of addresses.

    Addresses are lowercased and de-duplicated. Existing members and
    addresses with a pending, unexpired invitation are skipped.

    Returns:
        ``{'sent': int, 'skipped': int, 'failed': int}``

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If user's role cannot invite
    """
    group = get_group(group_id)
    require_role(
        group_id,
        user,
        INVITE_ROLES,
        "Only admins, moderators and managers can send invitations"
    )

    unique_emails = list(dict.fromkeys(e.strip().lower() for e in emails if e and e.strip()))
    now = timezone.now()

    member_emails = set(
        GroupMembership.objects
        .filter(group=group, user__email__in=unique_emails)
        .values_list('user__email', flat=True)
    )
    pending_emails = set(
        Invitation.objects
        .filter(
            group=group,
            email__in=unique_emails,
            status=InvitationStatus.PENDING,
            expires_at__gt=now,
        )
        .values_list('email', flat=True)
    )

    sent = skipped = failed = 0
    for email in unique_emails:
        if email in member_emails or email in pending_emails:
            skipped += 1
            continue

        invitation = Invitation.objects.create(
            email=email,
            group=group,
            invited_by=user,
            token=secrets.token_urlsafe(32),
            role=role,
            expires_at=now + timedelta(days=INVITATION_TTL_DAYS),
        )
        if _send_invitation_email(invitation, user):
            sent += 1
        else:
            failed += 1

    log_activity(
        group=group,
        user=user,
        activity_type=ActivityType.INVITATIONS_SENT,
        details={'sent': sent, 'skipped': skipped, 'failed': failed},
    )
    logger.info("Invitations for group %s: %s sent, %s skipped", group.id, sent, skipped)
    return {'sent': sent, 'skipped': skipped, 'failed': failed}


@transaction.atomic
def accept_invitation(*, token: str, user: User) -> GroupMembership:
    """
    Accept an email invitation.

    Raises:
        InvitationNotFoundError: If token is unknown
        InvalidInvitationError: If not pending, expired, or for another email
        AlreadyMemberError: If user is already a member
        GroupFullError: If the group reached max_members
    """
    try:
        invitation = Invitation.objects.select_for_update().get(token=token)
    except Invitation.DoesNotExist:
        raise InvitationNotFoundError("Invitation not found")

    if invitation.status != InvitationStatus.PENDING:
        raise InvalidInvitationError("Invitation is no longer valid")
    if invitation.is_expired:
        invitation.status = InvitationStatus.EXPIRED
        invitation.save(update_fields=['status'])
        raise InvalidInvitationError("Invitation has expired")
    if invitation.email.lower() != user.email.lower():
        raise InvalidInvitationError("This invitation was sent to a different email address")

    group = get_group(invitation.group_id, lock=True)
    if GroupMembership.objects.filter(group=group, user=user).exists():
        raise AlreadyMemberError("Already a member")
    if group.is_full:
        raise GroupFullError("Group is full")

    membership = add_member(group=group, user=user, role=invitation.role)

    invitation.status = InvitationStatus.ACCEPTED
    invitation.save(update_fields=['status'])

    notify_group_admins(
        group=group,
        notification_type=NotificationType.MEMBER_ADDED,
        message=f"{user.get_display_name()} accepted an invitation to {group.name}.",
        exclude_user=user,
    )
    log_activity(
        group=group,
        user=user,
        activity_type=ActivityType.MEMBER_JOINED,
        details={'via': 'invitation', 'role': invitation.role},
    )
    return membership
