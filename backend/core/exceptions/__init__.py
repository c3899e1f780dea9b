from .voting_errors import (  # noqa: F401
    ConcurrencyConflictError,
    DuplicateVoteError,
    EventNotEditableError,
    EventNotFoundError,
    EventNotJoinableError,
    EventNotVotableError,
    InvalidEventTransitionError,
    OptionInactiveError,
    OptionNotFoundError,
    ParticipantNotFoundError,
    ValidationError,
    VoteLimitReachedError,
    VotingError,
)

__all__ = [
    "VotingError",
    "EventNotFoundError",
    "EventNotJoinableError",
    "EventNotVotableError",
    "EventNotEditableError",
    "InvalidEventTransitionError",
    "ParticipantNotFoundError",
    "OptionNotFoundError",
    "OptionInactiveError",
    "VoteLimitReachedError",
    "DuplicateVoteError",
    "ConcurrencyConflictError",
    "ValidationError",
]
