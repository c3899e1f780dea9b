"""
API tests for the events endpoints.
"""

from datetime import timedelta

import pytest
from apps.events.models import EventState
from apps.participants.models import Participant
from django.urls import reverse
from django.utils import timezone


@pytest.mark.django_db
class TestEventRead:
    def test_list_hides_drafts_from_anonymous(self, api_client, draft_event, live_event):
        response = api_client.get(reverse("event-list"))

        assert response.status_code == 200
        ids = [event["id"] for event in response.json()["results"]]
        assert live_event.pk in ids
        assert draft_event.pk not in ids

    def test_host_sees_own_draft(self, authenticated_client, draft_event):
        response = authenticated_client.get(reverse("event-detail", args=[draft_event.pk]))
        assert response.status_code == 200
        assert response.json()["state"] == EventState.DRAFT

    def test_detail_does_not_expose_counts(self, api_client, live_event, options):
        response = api_client.get(reverse("event-detail", args=[live_event.pk]))

        data = response.json()
        assert "total_votes" not in data
        assert all("vote_count" not in option for option in data["options"])

    def test_leaderboard_masked_while_live(self, api_client, live_event, options):
        response = api_client.get(reverse("event-leaderboard", args=[live_event.pk]))

        assert response.status_code == 200
        data = response.json()
        assert data["revealed"] is False
        assert {row["vote_count"] for row in data["options"]} == {"hidden"}

    def test_leaderboard_unknown_event(self, api_client, db):
        response = api_client.get(reverse("event-leaderboard", args=[424242]))
        assert response.status_code == 404


@pytest.mark.django_db
class TestJoin:
    def test_anonymous_join_returns_credentials(self, api_client, live_event):
        response = api_client.post(
            reverse("event-join", args=[live_event.pk]),
            {"anonymous_token": "guest-1"},
            format="json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["created"] is True
        assert data["max_votes"] == 3
        assert data["remaining_votes"] == 3
        assert data["access_token"]

    def test_repeated_join_returns_same_participant(self, api_client, live_event):
        url = reverse("event-join", args=[live_event.pk])
        first = api_client.post(url, {"anonymous_token": "guest-1"}, format="json").json()
        response = api_client.post(url, {"anonymous_token": "guest-1"}, format="json")

        assert response.status_code == 200
        assert response.json()["participant_id"] == first["participant_id"]
        assert response.json()["created"] is False
        assert Participant.objects.filter(event=live_event).count() == 1

    def test_repeated_anonymous_join_returns_token_again(self, api_client, live_event):
        url = reverse("event-join", args=[live_event.pk])
        first = api_client.post(url, {"anonymous_token": "guest-1"}, format="json").json()
        second = api_client.post(url, {"anonymous_token": "guest-1"}, format="json").json()

        assert second["access_token"] == first["access_token"]

    def test_repeated_phone_join_withholds_access_token(self, api_client, live_event):
        url = reverse("event-join", args=[live_event.pk])
        first = api_client.post(url, {"phone_number": "+15550100100"}, format="json")
        assert first.status_code == 201
        assert first.json()["access_token"]

        response = api_client.post(url, {"phone_number": "+1 555 010 0100"}, format="json")

        assert response.status_code == 200
        data = response.json()
        assert data["participant_id"] == first.json()["participant_id"]
        assert data["created"] is False
        assert "access_token" not in data

    def test_phone_rejoin_cannot_cast_for_existing_participant(self, api_client, live_event, options):
        url = reverse("event-join", args=[live_event.pk])
        api_client.post(url, {"phone_number": "+15550100100"}, format="json")
        rejoined = api_client.post(url, {"phone_number": "+15550100100"}, format="json").json()

        response = api_client.post(
            reverse("vote-cast"),
            {"event_id": live_event.pk, "participant_id": rejoined["participant_id"], "option_id": options[0].pk},
            format="json",
            HTTP_X_PARTICIPANT_TOKEN=rejoined.get("access_token", ""),
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "ParticipantNotFoundError"

    def test_authenticated_join_uses_account(self, authenticated_client, user, live_event):
        response = authenticated_client.post(reverse("event-join", args=[live_event.pk]), {}, format="json")

        assert response.status_code == 201
        assert Participant.objects.get(pk=response.json()["participant_id"]).account == user

    def test_join_without_identity_is_rejected(self, api_client, live_event):
        response = api_client.post(reverse("event-join", args=[live_event.pk]), {}, format="json")

        assert response.status_code == 400
        assert response.json()["error_code"] == "ValidationError"

    def test_join_closed_event_conflicts(self, api_client, live_event):
        live_event.state = EventState.VOTING_CLOSED
        live_event.save()

        response = api_client.post(
            reverse("event-join", args=[live_event.pk]),
            {"phone_number": "+254 700 000 001"},
            format="json",
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "EventNotJoinableError"


@pytest.mark.django_db
class TestHostActions:
    def test_host_runs_full_lifecycle(self, authenticated_client, draft_event):
        def post(name, data=None):
            return authenticated_client.post(reverse(name, args=[draft_event.pk]), data or {}, format="json")

        assert post("event-publish").json()["state"] == EventState.PUBLISHED
        ends_at = (timezone.now() + timedelta(hours=1)).isoformat()
        assert post("event-open", {"voting_ends_at": ends_at}).json()["state"] == EventState.LIVE
        assert post("event-close").json()["state"] == EventState.VOTING_CLOSED
        assert post("event-publish-results").json()["state"] == EventState.RESULTS_PUBLISHED
        assert post("event-archive").json()["state"] == EventState.ARCHIVED

    def test_invalid_transition_conflicts(self, authenticated_client, draft_event):
        response = authenticated_client.post(reverse("event-close", args=[draft_event.pk]))

        assert response.status_code == 409
        assert response.json()["error_code"] == "InvalidEventTransitionError"

    def test_non_host_cannot_transition(self, api_client, other_user, live_event):
        api_client.force_authenticate(user=other_user)

        response = api_client.post(reverse("event-cancel", args=[live_event.pk]))

        assert response.status_code == 403
        live_event.refresh_from_db()
        assert live_event.state == EventState.LIVE

    def test_anonymous_cannot_transition(self, api_client, live_event):
        response = api_client.post(reverse("event-cancel", args=[live_event.pk]))
        assert response.status_code in (401, 403)


@pytest.mark.django_db
class TestEligibilityPreview:
    def test_preview_for_own_participant(self, api_client, live_event, options, participant):
        response = api_client.get(
            reverse("event-eligibility", args=[live_event.pk]),
            {"participant_id": participant.pk, "option_id": options[0].pk},
            HTTP_X_PARTICIPANT_TOKEN=participant.access_token,
        )

        assert response.status_code == 200
        assert response.json() == {"eligible": True, "remaining_votes": 3}

    def test_preview_requires_participant_token(self, api_client, live_event, options, participant):
        response = api_client.get(
            reverse("event-eligibility", args=[live_event.pk]),
            {"participant_id": participant.pk, "option_id": options[0].pk},
            HTTP_X_PARTICIPANT_TOKEN="wrong",
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "ParticipantNotFoundError"

    def test_preview_reports_reason(self, api_client, live_event, options, participant):
        options[1].is_active = False
        options[1].save()

        response = api_client.get(
            reverse("event-eligibility", args=[live_event.pk]),
            {"participant_id": participant.pk, "option_id": options[1].pk},
            HTTP_X_PARTICIPANT_TOKEN=participant.access_token,
        )

        assert response.json() == {"eligible": False, "reason": "option_inactive"}
