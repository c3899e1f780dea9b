"""
API tests for the vote-cast endpoint.
"""

import pytest
from apps.participants.services import join_event
from apps.votes.models import Vote, VoteAttempt
from django.urls import reverse

CAST_URL = "vote-cast"


def cast(client, participant, option, token=None, **extra):
    body = {"event_id": participant.event_id, "participant_id": participant.pk, "option_id": option.pk}
    body.update(extra)
    return client.post(
        reverse(CAST_URL),
        body,
        format="json",
        HTTP_X_PARTICIPANT_TOKEN=participant.access_token if token is None else token,
        HTTP_USER_AGENT="pytest-client",
        REMOTE_ADDR="203.0.113.7",
    )


@pytest.mark.django_db
class TestCastEndpoint:
    def test_cast_returns_201(self, api_client, live_event, options, participant):
        response = cast(api_client, participant, options[0])

        assert response.status_code == 201
        data = response.json()
        assert data["remaining_votes"] == 2
        assert data["sequence_number"] == 1
        assert data["replayed"] is False
        assert data["event_totals"]["total_votes"] == 1

    def test_audit_metadata_is_stored(self, api_client, live_event, options, participant):
        response = cast(api_client, participant, options[0], origin="web", client_info={"app": "kiosk"})

        recorded = Vote.objects.get(pk=response.json()["vote_id"])
        assert recorded.ip_address == "203.0.113.7"
        assert recorded.user_agent == "pytest-client"
        assert recorded.origin == "web"
        assert recorded.client_info == {"app": "kiosk"}

    def test_idempotent_retry_returns_200(self, api_client, live_event, options, participant):
        first = cast(api_client, participant, options[0], client_request_token="abc-123")
        retry = cast(api_client, participant, options[0], client_request_token="abc-123")

        assert first.status_code == 201
        assert retry.status_code == 200
        assert retry.json()["vote_id"] == first.json()["vote_id"]
        assert retry.json()["replayed"] is True
        assert Vote.objects.count() == 1

    def test_duplicate_vote_conflicts(self, api_client, live_event, options, participant):
        cast(api_client, participant, options[0])
        response = cast(api_client, participant, options[0])

        assert response.status_code == 409
        assert response.json()["error_code"] == "DuplicateVoteError"

    def test_limit_reached_conflicts(self, api_client, live_event, options, participant):
        participant.max_votes = 1
        participant.save()
        cast(api_client, participant, options[0])

        response = cast(api_client, participant, options[1])

        assert response.status_code == 409
        assert response.json()["error_code"] == "VoteLimitReachedError"

    def test_wrong_participant_token(self, api_client, live_event, options, participant):
        response = cast(api_client, participant, options[0], token="forged")

        assert response.status_code == 404
        assert response.json()["error_code"] == "ParticipantNotFoundError"
        assert not Vote.objects.exists()

    def test_account_participant_needs_no_token(self, authenticated_client, user, live_event, options):
        participant, _ = join_event(live_event.pk, account=user)
        response = cast(authenticated_client, participant, options[0], token="")

        assert response.status_code == 201

    def test_missing_fields(self, api_client, db):
        response = api_client.post(reverse(CAST_URL), {"event_id": 1}, format="json")

        assert response.status_code == 400
        assert "participant_id" in response.json()["errors"]

    def test_event_not_votable(self, api_client, live_event, options, participant):
        live_event.state = "voting_closed"
        live_event.save()

        response = cast(api_client, participant, options[0])

        assert response.status_code == 409
        assert response.json()["error_code"] == "EventNotVotableError"
        assert VoteAttempt.objects.filter(success=False, error_code="EventNotVotableError").exists()
