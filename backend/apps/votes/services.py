"""
Vote services: exactly-once vote casting with row locks, idempotent retries
and counters updated in the same transaction as the ledger insert.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import timedelta
from typing import Dict, Optional

from apps.events.models import Event, Option
from apps.events.services import get_event, invalidate_leaderboard_cache, refresh_event_state
from apps.participants.models import Participant
from apps.participants.services import get_participant
from core.exceptions import (
    ConcurrencyConflictError,
    DuplicateVoteError,
    EventNotFoundError,
    OptionNotFoundError,
    ParticipantNotFoundError,
    ValidationError,
    VotingError,
)
from core.utils.idempotency import (
    check_idempotency,
    get_idempotency_window,
    store_idempotency_result,
    validate_client_request_token,
)
from core.utils.retry import retry_on_conflict, set_local_lock_timeout
from django.db import IntegrityError, transaction
from django.utils import timezone

from .aggregation import apply_vote
from .eligibility import EligibilityDecision, check_eligibility
from .models import Vote, VoteAttempt, VoteRequest
from .signals import vote_cast
from .tasks import deliver_vote_created

logger = logging.getLogger(__name__)

MAX_ORIGIN_LENGTH = 32


@dataclass
class VoteResult:
    """Outcome of a vote-cast request, as returned to the caller and replayed on retries."""

    vote_id: int
    event_id: int
    participant_id: int
    option_id: int
    sequence_number: int
    remaining_votes: int
    event_totals: Dict[str, int] = field(default_factory=dict)
    replayed: bool = False

    def as_payload(self):
        payload = asdict(self)
        payload.pop("replayed")
        return payload

    @classmethod
    def from_payload(cls, payload, replayed=False):
        return cls(**payload, replayed=replayed)


def _validate_ids(**ids):
    for name, value in ids.items():
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValidationError(f"{name} must be a positive integer")


def _ensure_same_request(payload, event_id, option_id):
    """A request token may only ever stand for one (event, option) vote."""
    if payload.get("event_id") != event_id or payload.get("option_id") != option_id:
        raise ValidationError("client_request_token was already used for a different vote")


def _find_replay(participant, token, event_id, option_id, now) -> Optional[VoteResult]:
    """Return the stored result for a repeated token inside the idempotency window."""
    record = VoteRequest.objects.filter(participant=participant, client_request_token=token).first()
    if record is None:
        return None

    if now - record.created_at > timedelta(seconds=get_idempotency_window()):
        # Outside the window the token is treated as a fresh request
        record.delete()
        return None

    _ensure_same_request(record.response, event_id, option_id)
    return VoteResult.from_payload(record.response, replayed=True)


@retry_on_conflict
def _record_vote(
    event_id,
    participant_id,
    option_id,
    token,
    origin,
    client_info,
    ip_address,
    user_agent,
    now,
) -> VoteResult:
    """
    The vote transaction: lock, re-check eligibility, insert, update counters.

    Lock order is participant, then option, then (via the conditional
    counter update) event.
    """
    with transaction.atomic():
        set_local_lock_timeout()

        try:
            participant = Participant.objects.select_for_update().get(pk=participant_id)
        except Participant.DoesNotExist:
            raise ParticipantNotFoundError(f"Participant with id {participant_id} not found")

        if token:
            replay = _find_replay(participant, token, event_id, option_id, now)
            if replay is not None:
                logger.info(f"Idempotent retry: returning vote {replay.vote_id} for token {token}")
                return replay

        try:
            option = Option.objects.select_for_update().get(pk=option_id)
        except Option.DoesNotExist:
            raise OptionNotFoundError(f"Option with id {option_id} not found")

        try:
            event = Event.objects.get(pk=event_id)
        except Event.DoesNotExist:
            raise EventNotFoundError(f"Event with id {event_id} not found")

        has_voted_for_option = Vote.objects.filter(participant=participant, option=option).exists()
        decision = check_eligibility(event, participant, option, has_voted_for_option=has_voted_for_option, now=now)
        decision.raise_for_reason()

        sequence_number = participant.votes_used + 1
        try:
            with transaction.atomic():
                vote = Vote.objects.create(
                    event=event,
                    participant=participant,
                    option=option,
                    sequence_number=sequence_number,
                    option_slot=0 if not event.allow_multiple_votes_per_option else sequence_number,
                    origin=origin,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    client_info=client_info,
                )
        except IntegrityError as e:
            if not event.allow_multiple_votes_per_option and Vote.objects.filter(
                participant=participant, option=option
            ).exists():
                raise DuplicateVoteError() from e
            raise ConcurrencyConflictError() from e

        event_totals = apply_vote(event, participant, option, first_vote_for_option=not has_voted_for_option, now=now)

        result = VoteResult(
            vote_id=vote.pk,
            event_id=event.pk,
            participant_id=participant.pk,
            option_id=option.pk,
            sequence_number=sequence_number,
            remaining_votes=decision.remaining_votes - 1,
            event_totals=event_totals,
        )

        if token:
            VoteRequest.objects.create(
                participant=participant,
                client_request_token=token,
                vote=vote,
                response=result.as_payload(),
            )

        VoteAttempt.objects.create(
            event=event,
            participant=participant,
            option=option,
            vote=vote,
            client_request_token=token or "",
            origin=origin,
            ip_address=ip_address,
            user_agent=user_agent,
            success=True,
        )

        # Side effects only for committed votes
        transaction.on_commit(lambda: _after_commit(vote, result, token))

    logger.info(
        f"Vote created successfully: vote_id={vote.pk}, event_id={event.pk}, "
        f"participant_id={participant.pk}, sequence={sequence_number}"
    )
    return result


def _after_commit(vote, result, token):
    invalidate_leaderboard_cache(result.event_id)
    store_idempotency_result(result.participant_id, token, result.as_payload())
    vote_cast.send(sender=Vote, vote=vote, result=result)
    try:
        deliver_vote_created.delay(vote.pk)
    except Exception as e:
        logger.error(f"Error queueing vote.created notification for vote {vote.pk}: {e}")


def _existing_pk(model, pk):
    if isinstance(pk, int) and not isinstance(pk, bool) and model.objects.filter(pk=pk).exists():
        return pk
    return None


def _record_failed_attempt(error, event_id, participant_id, option_id, token, origin, ip_address, user_agent):
    """Log a rejected attempt outside the rolled-back vote transaction."""
    try:
        VoteAttempt.objects.create(
            event_id=_existing_pk(Event, event_id),
            participant_id=_existing_pk(Participant, participant_id),
            option_id=_existing_pk(Option, option_id),
            client_request_token=str(token or "")[:128],
            origin=str(origin or "")[:MAX_ORIGIN_LENGTH],
            ip_address=ip_address,
            user_agent=user_agent or "",
            success=False,
            error_code=error.error_code,
            error_message=error.message,
        )
    except Exception as e:
        logger.error(f"Error recording failed vote attempt: {e}")


def _record_replayed_attempt(result, token, origin, ip_address, user_agent):
    try:
        VoteAttempt.objects.create(
            event_id=result.event_id,
            participant_id=result.participant_id,
            option_id=result.option_id,
            vote_id=result.vote_id if Vote.objects.filter(pk=result.vote_id).exists() else None,
            client_request_token=token,
            origin=origin,
            ip_address=ip_address,
            user_agent=user_agent or "",
            success=True,
            replayed=True,
        )
    except Exception as e:
        logger.error(f"Error recording replayed vote attempt: {e}")


def cast_vote(
    event_id: int,
    participant_id: int,
    option_id: int,
    client_request_token: Optional[str] = None,
    origin: str = "api",
    client_info: Optional[dict] = None,
    ip_address: Optional[str] = None,
    user_agent: str = "",
    now=None,
) -> VoteResult:
    """
    Cast one vote for an option.

    Either the vote row, its idempotency record and every counter update
    commit together, or none of them do. Lock contention is retried a
    bounded number of times before ConcurrencyConflictError reaches the
    caller.

    Args:
        event_id: The event being voted in
        participant_id: The admitted participant casting the vote
        option_id: The option voted for
        client_request_token: Optional token; repeating it within the
            idempotency window returns the original result unchanged
        origin: Channel the vote arrived through
        client_info: Free-form client metadata kept for audit
        ip_address: Caller IP address, for audit
        user_agent: Caller user agent, for audit
        now: Override the current time (tests)

    Returns:
        VoteResult: ``replayed`` is True when an earlier result was returned

    Raises:
        ValidationError: If the input is malformed or the token was used for another vote
        EventNotFoundError: If the event doesn't exist
        EventNotVotableError: If the event is not live or outside its window
        ParticipantNotFoundError: If the participant doesn't exist or is not in the event
        OptionNotFoundError: If the option doesn't exist or is not in the event
        OptionInactiveError: If the option is inactive
        VoteLimitReachedError: If the participant has no votes left
        DuplicateVoteError: If the option was already voted for under single-vote policy
        ConcurrencyConflictError: If the row locks stayed contended after all retries
    """
    now = now or timezone.now()
    try:
        _validate_ids(event_id=event_id, participant_id=participant_id, option_id=option_id)
        token = validate_client_request_token(client_request_token)
        origin = (origin or "api").strip()[:MAX_ORIGIN_LENGTH]
        if client_info is None:
            client_info = {}
        if not isinstance(client_info, dict):
            raise ValidationError("client_info must be an object")

        # Fast path for retries whose result is still cached
        is_duplicate, cached_result = check_idempotency(participant_id, token)
        if is_duplicate and cached_result:
            _ensure_same_request(cached_result, event_id, option_id)
            logger.info(f"Idempotent retry: returning cached vote {cached_result['vote_id']}")
            result = VoteResult.from_payload(cached_result, replayed=True)
        else:
            # Lazily close an elapsed window before taking any vote lock
            refresh_event_state(get_event(event_id), now=now)
            result = _record_vote(
                event_id,
                participant_id,
                option_id,
                token,
                origin,
                client_info,
                ip_address,
                user_agent,
                now,
            )
    except VotingError as e:
        logger.warning(f"Vote rejected: event_id={event_id}, participant_id={participant_id}, option_id={option_id}: {e.error_code}: {e.message}")
        _record_failed_attempt(
            e, event_id, participant_id, option_id, client_request_token, origin, ip_address, user_agent
        )
        raise

    if result.replayed:
        _record_replayed_attempt(result, token, origin, ip_address, user_agent)
    return result


def preview_eligibility(event_id: int, participant_id: int, option_id: int, now=None) -> EligibilityDecision:
    """
    Evaluate eligibility without locking or writing.

    A preview may go stale immediately; ``cast_vote`` always re-checks.
    """
    _validate_ids(event_id=event_id, participant_id=participant_id, option_id=option_id)
    event = refresh_event_state(get_event(event_id), now=now)
    participant = get_participant(participant_id)
    try:
        option = Option.objects.get(pk=option_id)
    except Option.DoesNotExist:
        raise OptionNotFoundError(f"Option with id {option_id} not found")

    has_voted_for_option = Vote.objects.filter(participant=participant, option=option).exists()
    return check_eligibility(event, participant, option, has_voted_for_option=has_voted_for_option, now=now)
