"""
End-to-end voting flow through the HTTP API: a host runs an event from
draft to archive while participants join, vote and retry.
"""

from datetime import timedelta

import pytest
from apps.events.factories import OptionFactory
from apps.events.models import EventState
from apps.votes.aggregation import reconcile_event
from apps.votes.models import Vote
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient


@pytest.mark.integration
@pytest.mark.django_db
class TestVotingFlow:
    def host_post(self, client, name, event, data=None):
        response = client.post(reverse(name, args=[event.pk]), data or {}, format="json")
        assert response.status_code == 200, response.content
        return response.json()

    def test_event_lifecycle_with_votes(self, authenticated_client, draft_event):
        OptionFactory(event=draft_event, title="Gamma", display_order=2)
        alpha, beta, gamma = list(draft_event.options.all())

        published = self.host_post(authenticated_client, "event-publish", draft_event)
        assert published["join_code"]

        ends_at = (timezone.now() + timedelta(hours=1)).isoformat()
        self.host_post(authenticated_client, "event-open", draft_event, {"voting_ends_at": ends_at})

        voters = []
        for n in range(3):
            client = APIClient()
            joined = client.post(
                reverse("event-join", args=[draft_event.pk]),
                {"anonymous_token": f"guest-{n}"},
                format="json",
            )
            assert joined.status_code == 201
            voters.append((client, joined.json()))

        ballots = [(0, beta), (1, beta), (2, gamma)]
        for index, option in ballots:
            client, participant = voters[index]
            response = client.post(
                reverse("vote-cast"),
                {
                    "event_id": draft_event.pk,
                    "participant_id": participant["participant_id"],
                    "option_id": option.pk,
                    "client_request_token": f"ballot-{index}",
                },
                format="json",
                HTTP_X_PARTICIPANT_TOKEN=participant["access_token"],
            )
            assert response.status_code == 201
            assert response.json()["remaining_votes"] == 0

        # A lost response is retried with the same token
        client, participant = voters[0]
        retry = client.post(
            reverse("vote-cast"),
            {
                "event_id": draft_event.pk,
                "participant_id": participant["participant_id"],
                "option_id": beta.pk,
                "client_request_token": "ballot-0",
            },
            format="json",
            HTTP_X_PARTICIPANT_TOKEN=participant["access_token"],
        )
        assert retry.status_code == 200
        assert Vote.objects.filter(event=draft_event).count() == 3

        live_board = client.get(reverse("event-leaderboard", args=[draft_event.pk])).json()
        assert live_board["revealed"] is False
        assert [row["option_id"] for row in live_board["options"]] == [alpha.pk, beta.pk, gamma.pk]

        self.host_post(authenticated_client, "event-close", draft_event)
        self.host_post(authenticated_client, "event-publish-results", draft_event)

        board = client.get(reverse("event-leaderboard", args=[draft_event.pk])).json()
        assert board["revealed"] is True
        assert board["state"] == EventState.RESULTS_PUBLISHED
        assert [(row["option_id"], row["vote_count"], row["rank"]) for row in board["options"]] == [
            (beta.pk, 2, 1),
            (gamma.pk, 1, 2),
            (alpha.pk, 0, 3),
        ]
        assert board["event_totals"] == {"total_votes": 3, "total_participants": 3, "total_options": 3}

        archived = self.host_post(authenticated_client, "event-archive", draft_event)
        assert archived["state"] == EventState.ARCHIVED
        assert reconcile_event(draft_event.pk).is_consistent
