"""
Celery tasks for votes app.
"""

import logging

from celery import shared_task
from core.utils.helpers import format_datetime

logger = logging.getLogger(__name__)

VOTE_CREATED = "vote.created"


def build_vote_created_payload(vote):
    """Build the outbound ``vote.created`` notification for a committed vote."""
    return {
        "type": VOTE_CREATED,
        "vote_id": vote.pk,
        "event_id": vote.event_id,
        "participant_id": vote.participant_id,
        "option_id": vote.option_id,
        "sequence_number": vote.sequence_number,
        "origin": vote.origin,
        "cast_at": format_datetime(vote.cast_at),
    }


@shared_task
def deliver_vote_created(vote_id: int):
    """
    Emit the ``vote.created`` notification for a committed vote.

    Queued from ``transaction.on_commit`` so it never runs for a vote that
    was rolled back. Delivery channels subscribe to the task result.

    Args:
        vote_id: ID of the committed vote

    Returns:
        dict: The notification payload, or None if the vote is unknown
    """
    from apps.votes.models import Vote

    try:
        vote = Vote.objects.get(pk=vote_id)
    except Vote.DoesNotExist:
        logger.error(f"deliver_vote_created: vote {vote_id} does not exist")
        return None

    payload = build_vote_created_payload(vote)
    logger.info(f"{VOTE_CREATED}: vote_id={vote.pk}, event_id={vote.event_id}, option_id={vote.option_id}")
    return payload
