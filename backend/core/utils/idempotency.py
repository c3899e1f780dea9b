"""
Idempotency utilities for ensuring vote-cast requests are replay-safe.

The database record (``apps.votes.models.VoteRequest``) is the source of
truth; the cache is only a fast path in front of it.
"""

import hashlib
import re

from django.conf import settings
from django.core.cache import cache

from core.exceptions import ValidationError

MAX_TOKEN_LENGTH = 128
TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_\-:.]+$")


def get_idempotency_window():
    """Seconds during which a repeated client request token replays the original result."""
    return getattr(settings, "VOTE_IDEMPOTENCY_WINDOW_SECONDS", 86400)


def validate_client_request_token(token):
    """
    Validate a client-supplied request token.

    Args:
        token: The token, or None/"" when the client sent none

    Returns:
        str or None: The normalized token

    Raises:
        ValidationError: If the token is too long or contains unsafe characters
    """
    if token is None:
        return None
    token = str(token).strip()
    if not token:
        return None
    if len(token) > MAX_TOKEN_LENGTH:
        raise ValidationError(f"client_request_token must be at most {MAX_TOKEN_LENGTH} characters")
    if not TOKEN_PATTERN.match(token):
        raise ValidationError("client_request_token contains invalid characters")
    return token


def get_idempotency_cache_key(participant_id, token):
    """Build the cache key for a participant's request token."""
    digest = hashlib.sha256(f"{participant_id}:{token}".encode()).hexdigest()
    return f"idempotency:vote:{digest}"


def check_idempotency(participant_id, token):
    """
    Check if a vote request with the given token has already been processed.

    Args:
        participant_id: The participant the token belongs to
        token: The client request token

    Returns:
        tuple: (is_duplicate: bool, cached_result: dict or None)
    """
    if not token:
        return False, None

    cached_result = cache.get(get_idempotency_cache_key(participant_id, token))
    if cached_result:
        return True, cached_result

    return False, None


def store_idempotency_result(participant_id, token, result, ttl=None):
    """
    Store the result of an idempotent vote request.

    Args:
        participant_id: The participant the token belongs to
        token: The client request token
        result: The response payload to replay
        ttl: Time to live in seconds (default: the idempotency window)
    """
    if not token:
        return
    cache.set(
        get_idempotency_cache_key(participant_id, token),
        result,
        ttl if ttl is not None else get_idempotency_window(),
    )
