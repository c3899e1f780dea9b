"""
Event and option models for the voting engine.
"""

from django.contrib.auth.models import User
from django.db import models
from django.db.models import Q
from django.utils import timezone


class EventState(models.TextChoices):
    DRAFT = "draft", "Draft"
    PUBLISHED = "published", "Published"
    LIVE = "live", "Live"
    VOTING_CLOSED = "voting_closed", "Voting closed"
    RESULTS_PUBLISHED = "results_published", "Results published"
    ARCHIVED = "archived", "Archived"
    CANCELLED = "cancelled", "Cancelled"


class Tiebreaker(models.TextChoices):
    EARLIEST_REGISTERED = "earliest_registered", "Earliest registered option wins"
    DISPLAY_ORDER = "display_order", "Lowest display order wins"
    MOST_UNIQUE_VOTERS = "most_unique_voters", "Most unique voters wins"


class RevealPolicy(models.TextChoices):
    ON_RESULTS = "on_results", "Reveal when results are published"
    LIVE_COUNTS = "live_counts", "Show live counts while voting"


class Event(models.Model):
    """A voting activity with a lifecycle, a voting window, typed configuration and cached totals."""

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    host = models.ForeignKey(User, on_delete=models.PROTECT, related_name="hosted_events")
    state = models.CharField(max_length=32, choices=EventState.choices, default=EventState.DRAFT, db_index=True)
    # Public identifiers, assigned on publish
    public_id = models.UUIDField(null=True, blank=True, unique=True)
    join_code = models.CharField(max_length=16, null=True, blank=True, unique=True)
    # Voting window
    voting_starts_at = models.DateTimeField(null=True, blank=True)
    voting_ends_at = models.DateTimeField(null=True, blank=True)
    # Configuration (copied onto participants at join time)
    votes_per_participant = models.PositiveIntegerField(default=1)
    allow_multiple_votes_per_option = models.BooleanField(default=False)
    tiebreaker = models.CharField(max_length=32, choices=Tiebreaker.choices, default=Tiebreaker.EARLIEST_REGISTERED)
    reveal_policy = models.CharField(max_length=32, choices=RevealPolicy.choices, default=RevealPolicy.ON_RESULTS)
    config_version = models.PositiveIntegerField(default=1)
    # Totals maintained by the aggregation engine
    total_votes = models.PositiveIntegerField(default=0, help_text="Number of votes in the ledger")
    total_participants = models.PositiveIntegerField(default=0, help_text="Participants who cast at least one vote")
    total_options = models.PositiveIntegerField(default=0, help_text="Number of active options")
    # Lifecycle timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    published_at = models.DateTimeField(null=True, blank=True)
    opened_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)
    results_published_at = models.DateTimeField(null=True, blank=True)
    archived_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(condition=Q(votes_per_participant__gte=1), name="event_votes_per_participant_positive"),
        ]
        indexes = [
            models.Index(fields=["state", "voting_ends_at"], name="events_state_ends_idx"),
            models.Index(fields=["host", "created_at"], name="events_host_created_idx"),
        ]

    def __str__(self):
        return self.title

    def is_within_window(self, now=None):
        """Check if ``now`` falls inside the voting window."""
        now = now or timezone.now()
        if self.voting_starts_at is None or self.voting_ends_at is None:
            return False
        return self.voting_starts_at <= now < self.voting_ends_at

    def window_elapsed(self, now=None):
        now = now or timezone.now()
        return self.voting_ends_at is not None and now >= self.voting_ends_at

    @property
    def totals(self):
        return {
            "total_votes": self.total_votes,
            "total_participants": self.total_participants,
            "total_options": self.total_options,
        }


class Option(models.Model):
    """A votable choice within an event with cached counts."""

    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="options")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    display_order = models.IntegerField(default=0, help_text="Display order for options")
    is_active = models.BooleanField(default=True)
    vote_count = models.PositiveIntegerField(default=0, help_text="Number of votes in the ledger for this option")
    unique_voter_count = models.PositiveIntegerField(default=0, help_text="Distinct participants who voted for this option")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["display_order", "id"]
        indexes = [
            models.Index(fields=["event", "display_order"], name="events_option_order_idx"),
        ]

    def __str__(self):
        return f"{self.event.title} - {self.title}"
