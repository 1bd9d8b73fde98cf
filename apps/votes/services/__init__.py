"""
Votes app services layer.
"""

from .exceptions import (
    VotesServiceError,
    VotePermissionError,
    VoteNotFoundError,
    VoteClosedError,
    InvalidOptionError,
    AlreadyVotedError,
    InvalidVoteError,
)

from .vote_management import (
    create_vote,
    close_expired_votes,
    list_votes,
    get_vote,
    cast_vote,
    update_vote,
    delete_vote,
    get_vote_result,
)


__all__ = [
    # Exceptions
    'VotesServiceError',
    'VotePermissionError',
    'VoteNotFoundError',
    'VoteClosedError',
    'InvalidOptionError',
    'AlreadyVotedError',
    'InvalidVoteError',

    # Vote management
    'create_vote',
    'close_expired_votes',
    'list_votes',
    'get_vote',
    'cast_vote',
    'update_vote',
    'delete_vote',
    'get_vote_result',
]
