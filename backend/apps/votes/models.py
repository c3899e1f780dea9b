"""
Vote ledger models: append-only votes, idempotency records and attempt audit log.
"""

from apps.events.models import Event, Option
from apps.participants.models import Participant
from django.db import models


class ImmutableVoteError(Exception):
    """Raised when code tries to change or delete a recorded vote."""


class Vote(models.Model):
    """
    One unit of ballot cast by a participant for an option.

    Rows are append-only and are the source of truth for every counter.
    """

    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="votes")
    participant = models.ForeignKey(Participant, on_delete=models.PROTECT, related_name="votes")
    option = models.ForeignKey(Option, on_delete=models.PROTECT, related_name="votes")
    sequence_number = models.PositiveIntegerField(help_text="This participant's Nth vote, in commit order")
    # 0 under single-vote-per-option policy, else the sequence number
    option_slot = models.PositiveIntegerField(default=0)
    # Audit metadata
    origin = models.CharField(max_length=32, default="api", help_text="Channel the vote arrived through (web, sms, api)")
    ip_address = models.GenericIPAddressField(null=True, blank=True, help_text="IP address of voter")
    user_agent = models.TextField(blank=True, help_text="User agent string")
    client_info = models.JSONField(default=dict, blank=True)
    cast_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["cast_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["participant", "sequence_number"], name="unique_participant_vote_sequence"),
            models.UniqueConstraint(fields=["participant", "option", "option_slot"], name="unique_participant_option_slot"),
        ]
        indexes = [
            models.Index(fields=["event", "cast_at"], name="votes_event_cast_idx"),
            models.Index(fields=["option", "participant"], name="votes_option_participant_idx"),
        ]

    def __str__(self):
        return f"Vote #{self.sequence_number} by participant {self.participant_id} for option {self.option_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableVoteError("Votes are immutable once recorded")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableVoteError("Votes are never deleted")


class VoteRequest(models.Model):
    """
    Idempotency record for a client request token.

    Stores the response of the original vote so a retried request within the
    idempotency window gets the same answer without touching any counter.
    """

    participant = models.ForeignKey(Participant, on_delete=models.PROTECT, related_name="vote_requests")
    client_request_token = models.CharField(max_length=128)
    vote = models.ForeignKey(Vote, on_delete=models.PROTECT, related_name="requests")
    response = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["participant", "client_request_token"], name="unique_participant_request_token"),
        ]

    def __str__(self):
        return f"Request {self.client_request_token} -> vote {self.vote_id}"


class VoteAttempt(models.Model):
    """
    Immutable audit log of ALL vote attempts (success/failure).
    This table tracks every attempt to vote, regardless of outcome.
    """

    event = models.ForeignKey(Event, on_delete=models.SET_NULL, null=True, blank=True, related_name="vote_attempts")
    participant = models.ForeignKey(Participant, on_delete=models.SET_NULL, null=True, blank=True, related_name="vote_attempts")
    option = models.ForeignKey(Option, on_delete=models.SET_NULL, null=True, blank=True, related_name="vote_attempts")
    vote = models.ForeignKey(Vote, on_delete=models.SET_NULL, null=True, blank=True, related_name="attempts")
    client_request_token = models.CharField(max_length=128, blank=True)
    # Tracking fields
    origin = models.CharField(max_length=32, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    # Outcome
    success = models.BooleanField(default=False, help_text="Whether the vote attempt was successful")
    replayed = models.BooleanField(default=False, help_text="Whether the attempt replayed an earlier result")
    error_code = models.CharField(max_length=64, blank=True)
    error_message = models.TextField(blank=True, help_text="Error message if attempt failed")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event", "created_at"], name="votes_attempt_event_idx"),
            models.Index(fields=["success", "created_at"], name="votes_attempt_success_idx"),
        ]

    def __str__(self):
        status = "SUCCESS" if self.success else f"FAILED ({self.error_code})"
        return f"Vote attempt {status} - event {self.event_id} at {self.created_at}"
