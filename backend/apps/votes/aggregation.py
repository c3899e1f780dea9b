"""
Aggregation engine: keeps denormalized counters in step with the vote ledger.

The hot path (``apply_vote``) increments counters inside the same
transaction that inserts the vote. ``reconcile_event`` recomputes every
counter from the ledger and reports (or repairs) drift.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from apps.events.models import Event, EventState, Option
from apps.participants.models import Participant
from core.exceptions import EventNotFoundError, EventNotVotableError
from django.db import transaction
from django.db.models import Count, F

from .models import Vote

logger = logging.getLogger(__name__)


def apply_vote(event, participant, option, first_vote_for_option: bool, now) -> Dict[str, int]:
    """
    Increment every counter touched by one new vote.

    Must run inside the vote transaction, after the participant and option
    rows are locked. The event update is conditional on the event still
    being live with an open window, which makes a concurrent close (or an
    elapsed window) roll the whole vote back.

    Returns:
        dict: The event totals after this vote
    """
    first_vote_in_event = participant.votes_used == 0

    Participant.objects.filter(pk=participant.pk).update(
        votes_used=F("votes_used") + 1,
        last_vote_at=now,
    )

    Option.objects.filter(pk=option.pk).update(
        vote_count=F("vote_count") + 1,
        unique_voter_count=F("unique_voter_count") + (1 if first_vote_for_option else 0),
    )

    updated = Event.objects.filter(
        pk=event.pk,
        state=EventState.LIVE,
        voting_ends_at__gt=now,
    ).update(
        total_votes=F("total_votes") + 1,
        total_participants=F("total_participants") + (1 if first_vote_in_event else 0),
    )
    if not updated:
        raise EventNotVotableError("Voting closed while the vote was being recorded")

    event.refresh_from_db(fields=["total_votes", "total_participants", "total_options"])
    return event.totals


@dataclass
class ReconciliationReport:
    event_id: int
    repaired: bool = False
    mismatches: List[Dict] = field(default_factory=list)

    @property
    def is_consistent(self):
        return not self.mismatches

    def add(self, model, pk, field_name, stored, actual):
        self.mismatches.append(
            {"model": model, "id": pk, "field": field_name, "stored": stored, "actual": actual}
        )


def reconcile_event(event_id: int, repair: bool = False) -> ReconciliationReport:
    """
    Recompute all counters of an event from the ledger and compare.

    Locks participants, then options, then the event (the same order
    ``cast_vote`` uses), so the pass sees a stable ledger.

    Args:
        event_id: Event to check
        repair: Overwrite drifted counters with the recomputed values

    Returns:
        ReconciliationReport listing every mismatch found
    """
    report = ReconciliationReport(event_id=event_id)

    with transaction.atomic():
        participants = list(Participant.objects.select_for_update().filter(event_id=event_id).order_by("pk"))
        options = list(Option.objects.select_for_update().filter(event_id=event_id).order_by("pk"))
        try:
            event = Event.objects.select_for_update().get(pk=event_id)
        except Event.DoesNotExist:
            raise EventNotFoundError(f"Event with id {event_id} not found")

        votes = Vote.objects.filter(event_id=event_id)

        per_option = {
            row["option_id"]: row
            for row in votes.values("option_id").annotate(
                votes=Count("id"),
                voters=Count("participant_id", distinct=True),
            )
        }
        per_participant = {
            row["participant_id"]: row["votes"]
            for row in votes.values("participant_id").annotate(votes=Count("id"))
        }

        for option in options:
            row = per_option.get(option.pk, {"votes": 0, "voters": 0})
            changed = []
            if option.vote_count != row["votes"]:
                report.add("option", option.pk, "vote_count", option.vote_count, row["votes"])
                option.vote_count = row["votes"]
                changed.append("vote_count")
            if option.unique_voter_count != row["voters"]:
                report.add("option", option.pk, "unique_voter_count", option.unique_voter_count, row["voters"])
                option.unique_voter_count = row["voters"]
                changed.append("unique_voter_count")
            if repair and changed:
                option.save(update_fields=changed)

        for participant in participants:
            actual = per_participant.get(participant.pk, 0)
            if participant.votes_used != actual:
                report.add("participant", participant.pk, "votes_used", participant.votes_used, actual)
                if repair:
                    participant.votes_used = actual
                    participant.save(update_fields=["votes_used"])

        expected_totals = {
            "total_votes": votes.count(),
            "total_participants": len(per_participant),
            "total_options": sum(1 for option in options if option.is_active),
        }
        changed = []
        for field_name, actual in expected_totals.items():
            stored = getattr(event, field_name)
            if stored != actual:
                report.add("event", event.pk, field_name, stored, actual)
                setattr(event, field_name, actual)
                changed.append(field_name)
        if repair and changed:
            event.save(update_fields=changed)

        report.repaired = repair and not report.is_consistent

    if report.is_consistent:
        logger.info(f"Event {event_id}: counters consistent with the ledger")
    else:
        logger.warning(
            f"Event {event_id}: {len(report.mismatches)} counter mismatches"
            f"{' repaired' if report.repaired else ''}: {report.mismatches}"
        )
    return report


def reconcile_all(repair: bool = False) -> List[ReconciliationReport]:
    """Reconcile every event, one transaction per event."""
    return [
        reconcile_event(event_id, repair=repair)
        for event_id in Event.objects.order_by("pk").values_list("pk", flat=True)
    ]
