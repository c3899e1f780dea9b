"""
Event lifecycle services: host-triggered transitions, lazy window closing,
option management and configuration edits.
"""

import logging
import uuid

from django.core.cache import cache
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import (
    EventNotEditableError,
    EventNotFoundError,
    OptionNotFoundError,
    ValidationError,
)
from core.utils.helpers import generate_join_code

from . import state_machine
from .models import Event, EventState, Option, RevealPolicy, Tiebreaker

logger = logging.getLogger(__name__)

MIN_ACTIVE_OPTIONS = 2
JOIN_CODE_ATTEMPTS = 5

# Configuration fields a host may edit before the event goes live
CONFIG_FIELDS = (
    "votes_per_participant",
    "allow_multiple_votes_per_option",
    "tiebreaker",
    "reveal_policy",
)


def get_leaderboard_cache_key(event_id: int) -> str:
    return f"event_leaderboard:{event_id}"


def invalidate_leaderboard_cache(event_id: int):
    """Drop the cached leaderboard of an event."""
    try:
        cache.delete(get_leaderboard_cache_key(event_id))
    except Exception as e:
        logger.error(f"Error invalidating leaderboard cache for event {event_id}: {e}")


def get_event(event_id: int) -> Event:
    try:
        return Event.objects.get(pk=event_id)
    except (Event.DoesNotExist, ValueError, TypeError):
        raise EventNotFoundError(f"Event with id {event_id} not found")


def refresh_event_state(event: Event, now=None) -> Event:
    """
    Close voting on a live event whose window has elapsed.

    Runs as a single conditional UPDATE so concurrent callers close the event
    at most once. Never moves an event in any other direction.
    """
    now = now or timezone.now()
    if event.state != EventState.LIVE or not event.window_elapsed(now):
        return event

    closed = Event.objects.filter(
        pk=event.pk,
        state=EventState.LIVE,
        voting_ends_at__lte=now,
    ).update(state=EventState.VOTING_CLOSED, closed_at=now, updated_at=now)

    if closed:
        logger.info(f"Event {event.pk} closed automatically: voting window ended at {event.voting_ends_at}")
        transaction.on_commit(lambda: invalidate_leaderboard_cache(event.pk))
    event.refresh_from_db(fields=["state", "closed_at", "updated_at"])
    return event


def _transition(event_id, target, stamp_field, precondition=None, now=None):
    """Lock the event row, validate the transition and stamp its timestamp."""
    now = now or timezone.now()
    with transaction.atomic():
        try:
            event = Event.objects.select_for_update().get(pk=event_id)
        except Event.DoesNotExist:
            raise EventNotFoundError(f"Event with id {event_id} not found")

        previous = event.state
        state_machine.validate_transition(event, target)
        if precondition:
            precondition(event, now)

        state_machine.apply_transition(event, target)
        setattr(event, stamp_field, now)
        event.save()

        transaction.on_commit(lambda: invalidate_leaderboard_cache(event.pk))

    logger.info(f"Event {event.pk} moved from {previous} to {event.state}")
    return event


def _count_active_options(event, action):
    active = event.options.filter(is_active=True).count()
    if active < MIN_ACTIVE_OPTIONS:
        raise ValidationError(
            f"Event {event.pk} needs at least {MIN_ACTIVE_OPTIONS} active options to {action} (has {active})"
        )
    return active


def _require_active_options(event, now):
    event.total_options = _count_active_options(event, "be published")
    event.public_id = event.public_id or uuid.uuid4()
    if not event.join_code:
        event.join_code = _unused_join_code()


def _unused_join_code():
    for _ in range(JOIN_CODE_ATTEMPTS):
        code = generate_join_code()
        if not Event.objects.filter(join_code=code).exists():
            return code
    raise IntegrityError("Could not allocate a unique join code")


def publish_event(event_id: int, now=None) -> Event:
    """draft -> published. Requires at least two active options; assigns public identifiers."""
    return _transition(event_id, EventState.PUBLISHED, "published_at", _require_active_options, now)


def open_voting(event_id: int, starts_at=None, ends_at=None, now=None) -> Event:
    """
    published -> live.

    Args:
        starts_at: Window start; defaults to the stored start, else now (immediate)
        ends_at: Window end; defaults to the stored end, which must then exist
    """

    def set_window(event, current):
        _count_active_options(event, "open voting")
        if starts_at is not None:
            event.voting_starts_at = starts_at
        if ends_at is not None:
            event.voting_ends_at = ends_at
        if event.voting_starts_at is None:
            event.voting_starts_at = current
        if event.voting_ends_at is None:
            raise ValidationError("Voting end time is required to open voting")
        if event.voting_ends_at <= event.voting_starts_at:
            raise ValidationError("Voting end time must be after the start time")

    return _transition(event_id, EventState.LIVE, "opened_at", set_window, now)


def close_voting(event_id: int, now=None) -> Event:
    """live -> voting_closed, on explicit host action."""
    return _transition(event_id, EventState.VOTING_CLOSED, "closed_at", now=now)


def publish_results(event_id: int, now=None) -> Event:
    """voting_closed -> results_published. Irreversibly exposes the real counts."""
    return _transition(event_id, EventState.RESULTS_PUBLISHED, "results_published_at", now=now)


def archive_event(event_id: int, now=None) -> Event:
    return _transition(event_id, EventState.ARCHIVED, "archived_at", now=now)


def cancel_event(event_id: int, now=None) -> Event:
    """Cancel an event before results are published. Cast votes stay in the ledger."""
    return _transition(event_id, EventState.CANCELLED, "cancelled_at", now=now)


def _lock_editable_event(event_id):
    try:
        event = Event.objects.select_for_update().get(pk=event_id)
    except Event.DoesNotExist:
        raise EventNotFoundError(f"Event with id {event_id} not found")
    if not state_machine.accepts_option_edits(event.state):
        raise EventNotEditableError(f"Event {event.pk} is {event.state} and can no longer be edited")
    return event


def _sync_total_options(event):
    event.total_options = event.options.filter(is_active=True).count()
    event.save(update_fields=["total_options", "updated_at"])


def add_option(event_id: int, title: str, description: str = "", display_order=None) -> Option:
    """Add an option to a draft or published event."""
    title = (title or "").strip()
    if not title:
        raise ValidationError("Option title is required")

    with transaction.atomic():
        event = _lock_editable_event(event_id)
        if display_order is None:
            display_order = event.options.count()
        option = Option.objects.create(
            event=event,
            title=title,
            description=description,
            display_order=display_order,
        )
        _sync_total_options(event)

    logger.info(f"Option {option.pk} added to event {event.pk}")
    return option


def remove_option(event_id: int, option_id: int) -> None:
    """Remove an option from a draft or published event. Published events keep at least two active options."""
    with transaction.atomic():
        event = _lock_editable_event(event_id)
        try:
            option = event.options.get(pk=option_id)
        except Option.DoesNotExist:
            raise OptionNotFoundError(f"Option {option_id} does not belong to event {event_id}")
        if event.state == EventState.PUBLISHED and option.is_active:
            remaining = event.options.filter(is_active=True).exclude(pk=option.pk).count()
            if remaining < MIN_ACTIVE_OPTIONS:
                raise ValidationError(
                    f"Event {event.pk} is published and must keep at least {MIN_ACTIVE_OPTIONS} active options"
                )
        option.delete()
        _sync_total_options(event)

    logger.info(f"Option {option_id} removed from event {event_id}")


def update_event_config(event_id: int, **changes) -> Event:
    """
    Edit the voting configuration of a draft or published event.

    Bumps ``config_version``. Participants who already joined keep the
    allowance they joined with.
    """
    unknown = set(changes) - set(CONFIG_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")

    if "votes_per_participant" in changes:
        value = changes["votes_per_participant"]
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise ValidationError("votes_per_participant must be a positive integer")
    if "allow_multiple_votes_per_option" in changes and not isinstance(changes["allow_multiple_votes_per_option"], bool):
        raise ValidationError("allow_multiple_votes_per_option must be a boolean")
    if "tiebreaker" in changes and changes["tiebreaker"] not in Tiebreaker.values:
        raise ValidationError(f"Unknown tiebreaker: {changes['tiebreaker']}")
    if "reveal_policy" in changes and changes["reveal_policy"] not in RevealPolicy.values:
        raise ValidationError(f"Unknown reveal policy: {changes['reveal_policy']}")

    with transaction.atomic():
        event = _lock_editable_event(event_id)
        for field, value in changes.items():
            setattr(event, field, value)
        event.config_version += 1
        event.save()

    logger.info(f"Event {event.pk} configuration updated to version {event.config_version}")
    return event
