"""
Tests for the vote.created notification task.
"""

import pytest
from apps.votes.services import cast_vote
from apps.votes.tasks import VOTE_CREATED, deliver_vote_created


@pytest.mark.django_db
class TestDeliverVoteCreated:
    def test_payload_for_committed_vote(self, live_event, options, participant):
        result = cast_vote(live_event.pk, participant.pk, options[0].pk, origin="sms")

        payload = deliver_vote_created(result.vote_id)

        assert payload["type"] == VOTE_CREATED
        assert payload["vote_id"] == result.vote_id
        assert payload["event_id"] == live_event.pk
        assert payload["option_id"] == options[0].pk
        assert payload["origin"] == "sms"
        assert payload["cast_at"]

    def test_unknown_vote(self, db):
        assert deliver_vote_created(999999) is None
