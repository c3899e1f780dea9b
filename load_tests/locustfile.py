"""
Locust load test for the voting API.

Run with:
    locust -f load_tests/locustfile.py --host=http://localhost:8001

Each simulated voter joins a live event anonymously, casts votes with client
request tokens (occasionally retrying one to exercise idempotent replays)
and polls the leaderboard. The X-Load-Test header bypasses rate limiting
where ALLOW_LOAD_TEST_BYPASS is enabled.
"""

import random
import uuid

from locust import HttpUser, between, task


class VotingUser(HttpUser):
    """
    Simulates a participant voting in live events.

    User behavior:
    1. Pick a live event
    2. Join it anonymously
    3. Cast votes, sometimes retrying a request
    4. Watch the leaderboard
    """

    wait_time = between(1, 3)

    def on_start(self):
        self.client.headers["X-Load-Test"] = "true"
        self.event = None
        self.participant = None
        self.last_request = None
        self._join_live_event()

    def _join_live_event(self):
        response = self.client.get("/api/v1/events/", name="List Events")
        if response.status_code != 200:
            return
        live = [event for event in response.json().get("results", []) if event["state"] == "live"]
        if not live:
            return

        self.event = random.choice(live)
        with self.client.post(
            f"/api/v1/events/{self.event['id']}/join/",
            json={"anonymous_token": f"load-{uuid.uuid4().hex}"},
            catch_response=True,
            name="Join Event",
        ) as join:
            if join.status_code in (200, 201):
                self.participant = join.json()
                join.success()
            else:
                join.failure(f"Status: {join.status_code}, Response: {join.text[:100]}")

    def _cast(self, option_id, token, name):
        with self.client.post(
            "/api/v1/votes/cast/",
            json={
                "event_id": self.event["id"],
                "participant_id": self.participant["participant_id"],
                "option_id": option_id,
                "client_request_token": token,
                "origin": "load-test",
            },
            headers={"X-Participant-Token": self.participant["access_token"]},
            catch_response=True,
            name=name,
        ) as response:
            # 409: limit reached, duplicate or voting closed; 503: contention, safe to retry
            if response.status_code in (200, 201, 409, 503):
                response.success()
            else:
                response.failure(f"Status: {response.status_code}, Response: {response.text[:100]}")

    @task(5)
    def cast_vote(self):
        if not self.participant:
            self._join_live_event()
            return
        option = random.choice(self.event["options"])
        self.last_request = (option["id"], uuid.uuid4().hex)
        self._cast(*self.last_request, name="Cast Vote")

    @task(1)
    def retry_last_vote(self):
        if not self.participant or not self.last_request:
            return
        self._cast(*self.last_request, name="Retry Vote")

    @task(3)
    def view_leaderboard(self):
        if not self.event:
            return
        with self.client.get(
            f"/api/v1/events/{self.event['id']}/leaderboard/",
            catch_response=True,
            name="View Leaderboard",
        ) as response:
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"Status: {response.status_code}")
