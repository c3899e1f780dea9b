"""
Eligibility checker: decides whether a participant may vote for an option.

Pure function over already-loaded rows. ``cast_vote`` calls it again under
row locks right before writing, so the decision and the write cannot race.
"""

from dataclasses import dataclass
from typing import Optional

from apps.events import state_machine
from core.exceptions import (
    DuplicateVoteError,
    EventNotVotableError,
    OptionInactiveError,
    OptionNotFoundError,
    ParticipantNotFoundError,
    VoteLimitReachedError,
)
from django.utils import timezone

EVENT_NOT_LIVE = "event_not_live"
OUTSIDE_VOTING_WINDOW = "outside_voting_window"
PARTICIPANT_NOT_IN_EVENT = "participant_not_in_event"
OPTION_NOT_IN_EVENT = "option_not_in_event"
OPTION_INACTIVE = "option_inactive"
VOTE_LIMIT_REACHED = "vote_limit_reached"
ALREADY_VOTED_FOR_OPTION = "already_voted_for_option"

REASON_ERRORS = {
    EVENT_NOT_LIVE: (EventNotVotableError, "Voting is not open for this event"),
    OUTSIDE_VOTING_WINDOW: (EventNotVotableError, "The voting window is not open"),
    PARTICIPANT_NOT_IN_EVENT: (ParticipantNotFoundError, "Participant is not registered for this event"),
    OPTION_NOT_IN_EVENT: (OptionNotFoundError, "Option does not belong to this event"),
    OPTION_INACTIVE: (OptionInactiveError, None),
    VOTE_LIMIT_REACHED: (VoteLimitReachedError, None),
    ALREADY_VOTED_FOR_OPTION: (DuplicateVoteError, None),
}


@dataclass(frozen=True)
class EligibilityDecision:
    eligible: bool
    reason: Optional[str] = None
    remaining_votes: Optional[int] = None

    def as_dict(self):
        data = {"eligible": self.eligible}
        if self.reason:
            data["reason"] = self.reason
        if self.remaining_votes is not None:
            data["remaining_votes"] = self.remaining_votes
        return data

    def raise_for_reason(self):
        """Raise the taxonomy error matching an ineligible decision."""
        if self.eligible:
            return
        error_class, message = REASON_ERRORS[self.reason]
        raise error_class(message)


def _deny(reason):
    return EligibilityDecision(eligible=False, reason=reason)


def check_eligibility(event, participant, option, has_voted_for_option=False, now=None) -> EligibilityDecision:
    """
    Evaluate the voting rules in order; the first failure wins.

    1. Event is live, then the current time is inside the voting window.
    2. Participant belongs to the event.
    3. Option belongs to the event and is active.
    4. Participant has votes left.
    5. Under single-vote-per-option policy, no earlier vote for this option.

    Args:
        has_voted_for_option: Whether the ledger already holds a vote by this
            participant for this option (looked up by the caller)

    Returns:
        EligibilityDecision with ``remaining_votes`` (before this vote) when eligible
    """
    now = now or timezone.now()

    if not state_machine.accepts_votes(event.state):
        return _deny(EVENT_NOT_LIVE)
    if not event.is_within_window(now):
        return _deny(OUTSIDE_VOTING_WINDOW)

    if participant.event_id != event.pk:
        return _deny(PARTICIPANT_NOT_IN_EVENT)

    if option.event_id != event.pk:
        return _deny(OPTION_NOT_IN_EVENT)
    if not option.is_active:
        return _deny(OPTION_INACTIVE)

    if participant.votes_used >= participant.max_votes:
        return _deny(VOTE_LIMIT_REACHED)

    if not event.allow_multiple_votes_per_option and has_voted_for_option:
        return _deny(ALREADY_VOTED_FOR_OPTION)

    return EligibilityDecision(eligible=True, remaining_votes=participant.max_votes - participant.votes_used)
