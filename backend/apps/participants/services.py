"""
Token/participant registry: admits voters into events and authorizes them.
"""

import logging
import secrets
from typing import Optional, Tuple

from apps.events import state_machine
from apps.events.services import get_event, refresh_event_state
from core.exceptions import EventNotJoinableError, ParticipantNotFoundError, ValidationError
from core.utils.helpers import generate_access_token, normalize_phone_number
from django.db import IntegrityError, transaction

from .models import Participant, RegistrationMethod

logger = logging.getLogger(__name__)

MAX_ANONYMOUS_TOKEN_LENGTH = 128


def resolve_identity(account=None, phone_number=None, anonymous_token=None) -> Tuple[str, object, str]:
    """
    Normalize an identity key.

    Returns:
        tuple: (model field name, normalized value, default registration method)

    Raises:
        ValidationError: Unless exactly one identity is supplied
    """
    if account is not None and not getattr(account, "is_authenticated", False):
        account = None
    if isinstance(anonymous_token, str):
        anonymous_token = anonymous_token.strip() or None

    supplied = [value for value in (account, phone_number, anonymous_token) if value]
    if len(supplied) != 1:
        raise ValidationError("Exactly one of account, phone number or anonymous token is required")

    if account is not None:
        return "account", account, RegistrationMethod.ACCOUNT
    if phone_number:
        return "phone_number", normalize_phone_number(phone_number), RegistrationMethod.PHONE
    if len(anonymous_token) > MAX_ANONYMOUS_TOKEN_LENGTH:
        raise ValidationError(f"Anonymous token must be at most {MAX_ANONYMOUS_TOKEN_LENGTH} characters")
    return "anonymous_token", anonymous_token, RegistrationMethod.ANONYMOUS


def join_event(
    event_id: int,
    account=None,
    phone_number: Optional[str] = None,
    anonymous_token: Optional[str] = None,
    registration_method: Optional[str] = None,
) -> Tuple[Participant, bool]:
    """
    Admit an identity into an event.

    Idempotent per (event, identity): a repeated join returns the existing
    participant. Uniqueness is enforced by the database constraint, so two
    concurrent joins for the same identity still produce one row.

    Returns:
        tuple: (Participant, created: bool)

    Raises:
        EventNotFoundError: If the event doesn't exist
        EventNotJoinableError: If the event is not published or live
        ValidationError: If the identity key or registration method is malformed
    """
    field, value, default_method = resolve_identity(account, phone_number, anonymous_token)
    method = registration_method or default_method
    if method not in RegistrationMethod.values:
        raise ValidationError(f"Unknown registration method: {method}")

    event = refresh_event_state(get_event(event_id))
    if not state_machine.accepts_joins(event.state):
        raise EventNotJoinableError(f"Event {event.pk} is {event.state} and not accepting participants")

    lookup = {"event": event, field: value}
    try:
        with transaction.atomic():
            participant = Participant.objects.create(
                **lookup,
                registration_method=method,
                access_token=generate_access_token(),
                max_votes=event.votes_per_participant,
                config_version=event.config_version,
            )
    except IntegrityError:
        participant = Participant.objects.filter(**lookup).first()
        if participant is None:
            raise
        logger.info(f"Participant {participant.pk} re-joined event {event.pk}")
        return participant, False

    logger.info(f"Participant {participant.pk} joined event {event.pk} via {method} (max_votes={participant.max_votes})")
    return participant, True


def reveals_access_token(participant: Participant, created: bool) -> bool:
    """
    Whether a join response may carry the participant's access token.

    A repeated join only proves the caller knows the identity key. Anonymous
    tokens and authenticated accounts are credentials; phone numbers are
    not, so a phone re-join never hands out the existing token.
    """
    return created or participant.phone_number is None


def get_participant(participant_id: int) -> Participant:
    try:
        return Participant.objects.get(pk=participant_id)
    except (Participant.DoesNotExist, ValueError, TypeError):
        raise ParticipantNotFoundError(f"Participant with id {participant_id} not found")


def authorize_participant(participant_id: int, user=None, access_token: Optional[str] = None) -> Participant:
    """
    Confirm the caller acts as the given participant.

    The caller must either be the participant's authenticated account or
    present the participant's access token. Failures are reported as
    ParticipantNotFoundError so participant ids cannot be probed.
    """
    participant = get_participant(participant_id)

    if user is not None and getattr(user, "is_authenticated", False) and participant.account_id == user.pk:
        return participant
    if access_token and secrets.compare_digest(str(access_token), participant.access_token):
        return participant

    logger.warning(f"Rejected unauthorized use of participant {participant_id}")
    raise ParticipantNotFoundError(f"Participant with id {participant_id} not found")
