"""
Tests for the event lifecycle transition table.
"""

import pytest
from apps.events import state_machine
from apps.events.models import Event, EventState
from core.exceptions import InvalidEventTransitionError

FORWARD_PATH = [
    EventState.DRAFT,
    EventState.PUBLISHED,
    EventState.LIVE,
    EventState.VOTING_CLOSED,
    EventState.RESULTS_PUBLISHED,
    EventState.ARCHIVED,
]


@pytest.mark.unit
class TestTransitions:
    def test_forward_path_is_allowed(self):
        event = Event(state=EventState.DRAFT)
        for target in FORWARD_PATH[1:]:
            state_machine.apply_transition(event, target)
            assert event.state == target

    @pytest.mark.parametrize(
        "state",
        [EventState.DRAFT, EventState.PUBLISHED, EventState.LIVE, EventState.VOTING_CLOSED],
    )
    def test_cancel_allowed_before_results(self, state):
        event = Event(state=state)
        state_machine.apply_transition(event, EventState.CANCELLED)
        assert event.state == EventState.CANCELLED

    def test_cancel_not_allowed_after_results(self):
        event = Event(state=EventState.RESULTS_PUBLISHED)
        with pytest.raises(InvalidEventTransitionError):
            state_machine.validate_transition(event, EventState.CANCELLED)

    def test_cancelled_event_can_only_be_archived(self):
        assert state_machine.valid_transitions(EventState.CANCELLED) == {EventState.ARCHIVED}

    @pytest.mark.parametrize(
        "current,target",
        [
            (EventState.DRAFT, EventState.LIVE),
            (EventState.PUBLISHED, EventState.DRAFT),
            (EventState.LIVE, EventState.PUBLISHED),
            (EventState.VOTING_CLOSED, EventState.LIVE),
            (EventState.RESULTS_PUBLISHED, EventState.VOTING_CLOSED),
            (EventState.LIVE, EventState.RESULTS_PUBLISHED),
        ],
    )
    def test_invalid_transitions_rejected(self, current, target):
        event = Event(state=current)
        with pytest.raises(InvalidEventTransitionError) as exc_info:
            state_machine.apply_transition(event, target)
        assert event.state == current
        assert exc_info.value.status_code == 409

    def test_archived_is_terminal(self):
        assert state_machine.is_terminal(EventState.ARCHIVED)
        assert not state_machine.is_terminal(EventState.CANCELLED)
        with pytest.raises(InvalidEventTransitionError):
            state_machine.validate_transition(Event(state=EventState.ARCHIVED), EventState.DRAFT)

    def test_error_lists_allowed_targets(self):
        with pytest.raises(InvalidEventTransitionError) as exc_info:
            state_machine.validate_transition(Event(state=EventState.DRAFT), EventState.ARCHIVED)
        assert "cancelled" in exc_info.value.message
        assert "published" in exc_info.value.message


@pytest.mark.unit
class TestStateCapabilities:
    def test_only_live_accepts_votes(self):
        votable = [state for state in EventState if state_machine.accepts_votes(state)]
        assert votable == [EventState.LIVE]

    def test_published_and_live_accept_joins(self):
        assert state_machine.accepts_joins(EventState.PUBLISHED)
        assert state_machine.accepts_joins(EventState.LIVE)
        assert not state_machine.accepts_joins(EventState.DRAFT)
        assert not state_machine.accepts_joins(EventState.VOTING_CLOSED)

    def test_options_editable_until_live(self):
        assert state_machine.accepts_option_edits(EventState.DRAFT)
        assert state_machine.accepts_option_edits(EventState.PUBLISHED)
        assert not state_machine.accepts_option_edits(EventState.LIVE)
