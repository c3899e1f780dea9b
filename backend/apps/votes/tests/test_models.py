"""
Tests for the vote ledger constraints.
"""

import pytest
from apps.participants.factories import ParticipantFactory
from apps.votes.models import ImmutableVoteError, Vote
from apps.votes.services import cast_vote
from django.db import IntegrityError, transaction


@pytest.mark.django_db
class TestVoteLedger:
    def test_votes_cannot_be_updated(self, live_event, options, participant):
        result = cast_vote(live_event.pk, participant.pk, options[0].pk)
        recorded = Vote.objects.get(pk=result.vote_id)

        recorded.origin = "tampered"
        with pytest.raises(ImmutableVoteError):
            recorded.save()

    def test_votes_cannot_be_deleted(self, live_event, options, participant):
        result = cast_vote(live_event.pk, participant.pk, options[0].pk)

        with pytest.raises(ImmutableVoteError):
            Vote.objects.get(pk=result.vote_id).delete()

    def test_single_vote_slot_is_unique(self, live_event, options, participant):
        Vote.objects.create(event=live_event, participant=participant, option=options[0], sequence_number=1)

        with pytest.raises(IntegrityError), transaction.atomic():
            Vote.objects.create(event=live_event, participant=participant, option=options[0], sequence_number=2)

    def test_sequence_number_is_unique_per_participant(self, live_event, options, participant):
        Vote.objects.create(event=live_event, participant=participant, option=options[0], sequence_number=1)

        with pytest.raises(IntegrityError), transaction.atomic():
            Vote.objects.create(event=live_event, participant=participant, option=options[1], sequence_number=1)

    def test_participant_allowance_constraint(self, live_event):
        participant = ParticipantFactory(event=live_event, max_votes=1)
        participant.votes_used = 2

        with pytest.raises(IntegrityError), transaction.atomic():
            participant.save()
