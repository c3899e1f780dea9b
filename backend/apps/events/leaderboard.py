"""
Leaderboard reveal gate.

Decides what aggregate view of an event is exposed. Until an event is
revealed, counts are replaced by a placeholder and options are returned in
creation order so the response leaks no ranking. Once revealed, options are
sorted by vote count with the event's configured tiebreaker.

Reads committed counters without taking locks.
"""

import logging
from typing import Dict, List

from django.conf import settings
from django.core.cache import cache

from .models import Event, EventState, RevealPolicy, Tiebreaker
from .services import get_event, get_leaderboard_cache_key, refresh_event_state

logger = logging.getLogger(__name__)

LIVE_COUNT_STATES = frozenset({EventState.LIVE, EventState.VOTING_CLOSED})
RESULT_STATES = frozenset({EventState.RESULTS_PUBLISHED, EventState.ARCHIVED})

# Sort keys applied after vote count (descending); the option id is the final fallback
TIEBREAK_KEYS = {
    Tiebreaker.EARLIEST_REGISTERED: lambda o: (o.created_at, o.pk),
    Tiebreaker.DISPLAY_ORDER: lambda o: (o.display_order, o.created_at, o.pk),
    Tiebreaker.MOST_UNIQUE_VOTERS: lambda o: (-o.unique_voter_count, o.created_at, o.pk),
}


def get_mask():
    return getattr(settings, "LEADERBOARD_MASK", "hidden")


def is_revealed(event: Event) -> bool:
    """
    Check whether real counts may be shown for an event.

    Cancelled events never reveal. Archived events reveal only if their
    results were published before archiving.
    """
    if event.state == EventState.CANCELLED or event.cancelled_at is not None:
        return False
    if event.state in RESULT_STATES:
        return event.results_published_at is not None
    if event.state in LIVE_COUNT_STATES:
        return event.reveal_policy == RevealPolicy.LIVE_COUNTS
    return False


def rank_options(event: Event, options) -> List:
    """Sort options by vote count descending, breaking ties with the event's rule."""
    tiebreak = TIEBREAK_KEYS.get(event.tiebreaker, TIEBREAK_KEYS[Tiebreaker.EARLIEST_REGISTERED])
    return sorted(options, key=lambda o: (-o.vote_count, tiebreak(o)))


def build_leaderboard(event: Event, options) -> Dict:
    """
    Build the externally visible leaderboard from an event and its active options.

    Pure: does not touch the database.
    """
    revealed = is_revealed(event)
    mask = get_mask()

    if revealed:
        ranked = rank_options(event, options)
        total_votes = event.total_votes
        top = ranked[0].vote_count if ranked else 0
        option_rows = [
            {
                "option_id": option.pk,
                "title": option.title,
                "vote_count": option.vote_count,
                "unique_voters": option.unique_voter_count,
                "percentage": round(option.vote_count / total_votes * 100, 2) if total_votes else 0.0,
                "rank": position,
                "is_winner": top > 0 and option.vote_count == top,
            }
            for position, option in enumerate(ranked, start=1)
        ]
    else:
        option_rows = [
            {
                "option_id": option.pk,
                "title": option.title,
                "vote_count": mask,
            }
            for option in sorted(options, key=lambda o: (o.created_at, o.pk))
        ]

    if event.state == EventState.CANCELLED:
        event_totals = {key: mask for key in event.totals}
    else:
        event_totals = event.totals

    return {
        "event_id": event.pk,
        "state": event.state,
        "revealed": revealed,
        "options": option_rows,
        "event_totals": event_totals,
    }


def get_leaderboard(event_id: int, use_cache: bool = True) -> Dict:
    """
    Return the leaderboard of an event as it may be shown publicly.

    Applies lazy window closing first so a read never shows an elapsed
    event as still live.
    """
    event = refresh_event_state(get_event(event_id))
    cache_key = get_leaderboard_cache_key(event.pk)

    if use_cache:
        cached = cache.get(cache_key)
        # A cached board from before a state change is stale
        if cached and cached.get("state") == event.state:
            logger.debug(f"Returning cached leaderboard for event {event.pk}")
            return cached

    options = list(event.options.filter(is_active=True))
    leaderboard = build_leaderboard(event, options)

    try:
        cache.set(cache_key, leaderboard, getattr(settings, "LEADERBOARD_CACHE_TTL", 5))
    except Exception as e:
        logger.error(f"Error caching leaderboard for event {event.pk}: {e}")

    return leaderboard
