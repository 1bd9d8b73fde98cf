"""
Vote service.

Members open votes with a fixed list of options and a closing time. Each
member casts one ballot; ballots are stored as ``{option: [voter_id, ...]}``
on the vote. Expired votes are closed lazily whenever the group's votes are
listed.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.models import GroupMembership
from apps.groups.roles import GroupRole
from apps.groups.services import get_active_membership
from apps.notifications.models import NotificationType
from apps.notifications.services import notify_group_members
from apps.votes.models import Vote, VoteType

from .exceptions import (
    VotePermissionError,
    VoteNotFoundError,
    VoteClosedError,
    InvalidOptionError,
    AlreadyVotedError,
    InvalidVoteError,
)

logger = logging.getLogger(__name__)

MIN_OPTIONS = 2


def _require_member(group_id: UUID, user: User) -> GroupMembership:
    membership = get_active_membership(group_id, user)
    if membership is None:
        raise VotePermissionError("You are not a member of this group")
    return membership


def _clean_options(options: List[str]) -> List[str]:
    """
    Strip, drop blanks and keep the first occurrence of each option.

    Raises:
        InvalidVoteError: If fewer than two distinct options remain
    """
    cleaned = []
    for option in options:
        option = str(option).strip()
        if option and option not in cleaned:
            cleaned.append(option)
    if len(cleaned) < MIN_OPTIONS:
        raise InvalidVoteError(f"A vote needs at least {MIN_OPTIONS} distinct options")
    return cleaned


def _get_vote(group_id: UUID, vote_id: UUID, *, lock: bool = False) -> Vote:
    qs = Vote.objects.select_for_update() if lock else Vote.objects
    try:
        return qs.get(id=vote_id, group_id=group_id)
    except Vote.DoesNotExist:
        raise VoteNotFoundError("Vote not found")


def _require_owner_or_admin(vote: Vote, membership: GroupMembership, action: str) -> None:
    if vote.created_by_id != membership.user_id and membership.role != GroupRole.ADMIN:
        raise VotePermissionError(f"Only the creator or an admin can {action} this vote")


@transaction.atomic
def create_vote(
    *,
    group_id: UUID,
    user: User,
    title: str,
    options: List[str],
    end_date: datetime,
    description: str = '',
    vote_type: str = VoteType.GROUP_DECISION,
    start_date: Optional[datetime] = None
) -> Vote:
    """
    Open a vote in the group and announce it to the members.

    Args:
        group_id: UUID of the group
        user: Member opening the vote
        title: Short question or role being elected
        options: Option labels (candidate names, choices)
        end_date: Closing time
        description: Optional details
        vote_type: VoteType value
        start_date: Opening time, defaults to now

    Returns:
        Vote: The active vote with an empty ballot list per option

    Raises:
        VotePermissionError: If the user is not a member
        InvalidVoteError: If options or dates are invalid
    """
    membership = _require_member(group_id, user)
    options = _clean_options(options)
    start_date = start_date or timezone.now()

    if end_date <= start_date:
        raise InvalidVoteError("End date must be after the start date")
    if end_date <= timezone.now():
        raise InvalidVoteError("End date must be in the future")

    vote = Vote.objects.create(
        group_id=group_id,
        created_by=user,
        title=title,
        description=description,
        type=vote_type,
        options=options,
        results={option: [] for option in options},
        start_date=start_date,
        end_date=end_date,
    )

    notify_group_members(
        group=membership.group,
        notification_type=NotificationType.VOTE_STARTED,
        message=f'{user.get_display_name()} started a vote: "{title}".',
        exclude_user=user,
    )
    logger.info("Vote %s opened in group %s by %s", vote.id, group_id, user.id)
    return vote


def close_expired_votes(*, group_id: UUID) -> int:
    """
    Deactivate the group's active votes whose end date has passed.

    Members are told about each closed vote.

    Returns:
        int: Number of closed votes
    """
    expired = list(
        Vote.objects
        .filter(group_id=group_id, is_active=True, end_date__lte=timezone.now())
        .select_related('group')
    )
    if not expired:
        return 0

    Vote.objects.filter(id__in=[v.id for v in expired]).update(is_active=False)
    for vote in expired:
        notify_group_members(
            group=vote.group,
            notification_type=NotificationType.VOTE_ENDED,
            message=f'The vote "{vote.title}" has ended.',
        )
    logger.info("Closed %s expired vote(s) in group %s", len(expired), group_id)
    return len(expired)


def list_votes(*, group_id: UUID, active_only: bool = False) -> QuerySet[Vote]:
    """Votes of the group, newest first. Expired votes are closed first."""
    close_expired_votes(group_id=group_id)

    qs = Vote.objects.filter(group_id=group_id).select_related('created_by')
    if active_only:
        qs = qs.filter(is_active=True)
    return qs


def get_vote(*, group_id: UUID, vote_id: UUID) -> Vote:
    """
    Raises:
        VoteNotFoundError: If the vote doesn't exist in the group
    """
    return _get_vote(group_id, vote_id)


@transaction.atomic
def cast_vote(*, group_id: UUID, vote_id: UUID, user: User, option: str) -> Vote:
    """
    Record the user's ballot.

    Raises:
        VotePermissionError: If the user is not a member
        VoteNotFoundError: If the vote doesn't exist in the group
        VoteClosedError: If the vote is inactive or expired
        InvalidOptionError: If option is not one of the vote's options
        AlreadyVotedError: If the user has already voted
    """
    _require_member(group_id, user)
    vote = _get_vote(group_id, vote_id, lock=True)

    if not vote.is_active:
        raise VoteClosedError("This vote is no longer active")
    if vote.is_expired:
        raise VoteClosedError("This vote has expired")
    if option not in vote.options:
        raise InvalidOptionError(f"'{option}' is not an option of this vote")
    if vote.has_voted(user.id):
        raise AlreadyVotedError("You have already voted")

    results = dict(vote.results or {})
    results[option] = [*results.get(option, []), str(user.id)]
    vote.results = results
    vote.save(update_fields=['results', 'updated_at'])

    logger.debug("User %s voted in %s", user.id, vote.id)
    return vote


@transaction.atomic
def update_vote(
    *,
    group_id: UUID,
    vote_id: UUID,
    user: User,
    title: Optional[str] = None,
    description: Optional[str] = None,
    end_date: Optional[datetime] = None,
    options: Optional[List[str]] = None,
    is_active: Optional[bool] = None
) -> Vote:
    """
    Edit a vote (creator or ADMIN).

    Options can only be replaced while nobody has voted.

    Raises:
        VotePermissionError: If the user is neither creator nor admin
        VoteNotFoundError: If the vote doesn't exist in the group
        InvalidVoteError: If the change is inconsistent
    """
    membership = _require_member(group_id, user)
    vote = _get_vote(group_id, vote_id, lock=True)
    _require_owner_or_admin(vote, membership, "edit")

    if title is not None:
        vote.title = title
    if description is not None:
        vote.description = description
    if end_date is not None:
        if end_date <= vote.start_date:
            raise InvalidVoteError("End date must be after the start date")
        vote.end_date = end_date
    if options is not None:
        if vote.total_votes:
            raise InvalidVoteError("Options cannot be changed after voting has started")
        vote.options = _clean_options(options)
        vote.results = {option: [] for option in vote.options}
    if is_active is not None:
        vote.is_active = is_active

    vote.save()
    return vote


@transaction.atomic
def delete_vote(*, group_id: UUID, vote_id: UUID, user: User) -> None:
    """
    Raises:
        VotePermissionError: If the user is neither creator nor admin
        VoteNotFoundError: If the vote doesn't exist in the group
    """
    membership = _require_member(group_id, user)
    vote = _get_vote(group_id, vote_id, lock=True)
    _require_owner_or_admin(vote, membership, "delete")

    vote.delete()
    logger.info("Vote %s deleted by %s", vote_id, user.id)


def get_vote_result(*, group_id: UUID, vote_id: UUID) -> dict:
    """
    Tally of a vote.

    Returns:
        dict: ``vote_id``, ``counts`` (``{option: n}`` in option order),
        ``total_votes``, ``winner`` (None without ballots or on a tie),
        ``is_tie`` and ``is_active``
    """
    vote = _get_vote(group_id, vote_id)
    results = vote.results or {}
    counts = {option: len(results.get(option, [])) for option in vote.options}

    top = max(counts.values(), default=0)
    leaders = [option for option, n in counts.items() if n == top] if top else []

    return {
        'vote_id': vote.id,
        'counts': counts,
        'total_votes': vote.total_votes,
        'winner': leaders[0] if len(leaders) == 1 else None,
        'is_tie': len(leaders) > 1,
        'is_active': vote.is_active and not vote.is_expired,
    }
