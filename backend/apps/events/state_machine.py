"""
Event lifecycle state machine.

    draft -> published -> live -> voting_closed -> results_published -> archived
    any state before results_published -> cancelled -> archived

Pure computation: validates transitions and answers which operations a state
permits. Locking, timestamps and persistence live in ``apps.events.services``.
"""

from core.exceptions import InvalidEventTransitionError

from .models import EventState

_TRANSITIONS = {
    EventState.DRAFT: {EventState.PUBLISHED, EventState.CANCELLED},
    EventState.PUBLISHED: {EventState.LIVE, EventState.CANCELLED},
    EventState.LIVE: {EventState.VOTING_CLOSED, EventState.CANCELLED},
    EventState.VOTING_CLOSED: {EventState.RESULTS_PUBLISHED, EventState.CANCELLED},
    EventState.RESULTS_PUBLISHED: {EventState.ARCHIVED},
    EventState.CANCELLED: {EventState.ARCHIVED},
    EventState.ARCHIVED: set(),
}

VOTABLE_STATES = frozenset({EventState.LIVE})
JOINABLE_STATES = frozenset({EventState.PUBLISHED, EventState.LIVE})
EDITABLE_STATES = frozenset({EventState.DRAFT, EventState.PUBLISHED})


def valid_transitions(state):
    """Return the set of states reachable from ``state`` in one step."""
    return set(_TRANSITIONS.get(EventState(state), set()))


def is_terminal(state):
    return not _TRANSITIONS.get(EventState(state))


def validate_transition(event, target):
    """
    Check that ``event`` may move to ``target``.

    Raises:
        InvalidEventTransitionError: If the transition is not in the table
    """
    current = EventState(event.state)
    target = EventState(target)
    allowed = _TRANSITIONS.get(current, set())
    if target not in allowed:
        allowed_str = ", ".join(sorted(s.value for s in allowed)) or "none"
        raise InvalidEventTransitionError(
            f"Cannot move event {event.pk} from {current.value} to {target.value} "
            f"(allowed: {allowed_str})"
        )


def apply_transition(event, target):
    """Validate and set the new state on the in-memory event."""
    validate_transition(event, target)
    event.state = EventState(target)
    return event


def accepts_votes(state):
    return state in VOTABLE_STATES


def accepts_joins(state):
    return state in JOINABLE_STATES


def accepts_option_edits(state):
    return state in EDITABLE_STATES
