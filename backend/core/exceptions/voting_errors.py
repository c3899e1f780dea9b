"""
Custom exceptions for event voting.
"""


class VotingError(Exception):
    """
    Base exception for voting-related errors.

    All custom voting exceptions inherit from this.
    """

    default_status_code = 400
    default_message = "A voting error occurred"

    def __init__(self, message=None, status_code=None):
        """
        Initialize exception.

        Args:
            message: Error message (defaults to default_message)
            status_code: HTTP status code (defaults to default_status_code)
        """
        self.message = message or self.default_message
        self.status_code = status_code or self.default_status_code
        super().__init__(self.message)

    @property
    def error_code(self):
        return self.__class__.__name__


class EventNotFoundError(VotingError):
    """Raised when an event is not found."""

    default_status_code = 404
    default_message = "Event not found"


class EventNotJoinableError(VotingError):
    """Raised when joining an event outside published/live."""

    default_status_code = 409
    default_message = "This event is not accepting participants"


class EventNotVotableError(VotingError):
    """Raised when voting on an event that is not live or outside its window."""

    default_status_code = 409
    default_message = "This event is not open for voting"


class EventNotEditableError(VotingError):
    """Raised when options or configuration are edited after the event went live."""

    default_status_code = 409
    default_message = "This event can no longer be edited"


class InvalidEventTransitionError(VotingError):
    """Raised when a lifecycle transition is not allowed from the current state."""

    default_status_code = 409
    default_message = "Invalid event state transition"


class ParticipantNotFoundError(VotingError):
    """Raised when a participant does not exist or does not belong to the caller."""

    default_status_code = 404
    default_message = "Participant not found"


class OptionNotFoundError(VotingError):
    """Raised when an option does not exist in the event."""

    default_status_code = 404
    default_message = "Option not found"


class OptionInactiveError(VotingError):
    """Raised when voting for an option that has been deactivated."""

    default_status_code = 409
    default_message = "This option is not available for voting"


class VoteLimitReachedError(VotingError):
    """Raised when a participant has used their whole vote allowance."""

    default_status_code = 409
    default_message = "You have no votes remaining for this event"


class DuplicateVoteError(VotingError):
    """Raised when a participant votes twice for an option under single-vote policy."""

    default_status_code = 409
    default_message = "You have already voted for this option"


class ConcurrencyConflictError(VotingError):
    """Raised when a vote could not acquire its row locks in time. Safe to retry."""

    default_status_code = 503
    default_message = "The vote could not be recorded due to contention. Please retry."


class ValidationError(VotingError):
    """Raised when input is malformed."""

    default_status_code = 400
    default_message = "Invalid input"
