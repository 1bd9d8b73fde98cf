"""
Domain-specific exceptions for votes app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class VotesServiceError(Exception):
    """Base exception for all votes service errors."""
    pass


class VotePermissionError(VotesServiceError):
    """Raised when a user may not see or change a vote."""
    pass


class VoteNotFoundError(VotesServiceError):
    """Raised when a vote does not exist in the group."""
    pass


class VoteClosedError(VotesServiceError):
    """Raised when voting on an inactive or expired vote."""
    pass


class InvalidOptionError(VotesServiceError):
    """Raised when a ballot names an option the vote does not offer."""
    pass


class AlreadyVotedError(VotesServiceError):
    """Raised when a member votes twice."""
    pass


class InvalidVoteError(VotesServiceError):
    """Raised when a vote's options or dates are inconsistent."""
    pass
