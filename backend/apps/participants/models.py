"""
Participant model: one admitted voter for one event.
"""

from apps.events.models import Event
from django.contrib.auth.models import User
from django.db import models
from django.db.models import F, Q


class RegistrationMethod(models.TextChoices):
    ACCOUNT = "account", "Account"
    PHONE = "phone", "Phone number"
    ANONYMOUS = "anonymous", "Anonymous token"
    INVITE = "invite", "Invitation"


class Participant(models.Model):
    """
    A voter admitted into an event.

    Identified by exactly one of account, phone number or anonymous token.
    ``max_votes`` and ``config_version`` are copied from the event at join
    time and never follow later configuration edits.
    """

    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="participants")
    # Identity key (exactly one is set)
    account = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="event_participations",
        null=True,
        blank=True,
    )
    phone_number = models.CharField(max_length=20, null=True, blank=True)
    anonymous_token = models.CharField(max_length=128, null=True, blank=True)
    registration_method = models.CharField(max_length=16, choices=RegistrationMethod.choices)
    access_token = models.CharField(max_length=64, unique=True, help_text="Secret presented when voting as this participant")
    # Allowance
    votes_used = models.PositiveIntegerField(default=0)
    max_votes = models.PositiveIntegerField()
    config_version = models.PositiveIntegerField(default=1, help_text="Event configuration version at join time")
    last_vote_at = models.DateTimeField(null=True, blank=True)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["joined_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(account__isnull=False, phone_number__isnull=True, anonymous_token__isnull=True)
                    | Q(account__isnull=True, phone_number__isnull=False, anonymous_token__isnull=True)
                    | Q(account__isnull=True, phone_number__isnull=True, anonymous_token__isnull=False)
                ),
                name="participant_exactly_one_identity",
            ),
            models.CheckConstraint(condition=Q(votes_used__lte=F("max_votes")), name="participant_votes_within_allowance"),
            models.UniqueConstraint(
                fields=["event", "account"],
                condition=Q(account__isnull=False),
                name="unique_event_account",
            ),
            models.UniqueConstraint(
                fields=["event", "phone_number"],
                condition=Q(phone_number__isnull=False),
                name="unique_event_phone_number",
            ),
            models.UniqueConstraint(
                fields=["event", "anonymous_token"],
                condition=Q(anonymous_token__isnull=False),
                name="unique_event_anonymous_token",
            ),
        ]

    def __str__(self):
        kind, value = self.identity_key
        return f"{kind}:{value} in {self.event_id}"

    @property
    def identity_key(self):
        """Return ``(kind, value)`` for whichever identity is set."""
        if self.account_id is not None:
            return ("account", str(self.account_id))
        if self.phone_number is not None:
            return ("phone", self.phone_number)
        return ("anonymous", self.anonymous_token)

    @property
    def remaining_votes(self):
        return max(self.max_votes - self.votes_used, 0)
