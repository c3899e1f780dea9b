"""
Helper utilities for the voting engine.
"""

import ipaddress
import re
import secrets
import string

from core.exceptions import ValidationError

JOIN_CODE_ALPHABET = "".join(c for c in string.ascii_uppercase + string.digits if c not in "O0I1")
PHONE_PATTERN = re.compile(r"^\+[1-9]\d{6,14}$")


def normalize_phone_number(value):
    """
    Normalize a phone number to ``+<digits>``.

    Spaces, dashes, dots and parentheses are stripped; a leading ``00`` is
    treated as ``+``.

    Raises:
        ValidationError: If the result is not a plausible international number
    """
    if not value:
        raise ValidationError("Phone number is required")
    cleaned = re.sub(r"[\s\-\.\(\)]", "", str(value))
    if cleaned.startswith("00"):
        cleaned = "+" + cleaned[2:]
    if not PHONE_PATTERN.match(cleaned):
        raise ValidationError(f"Invalid phone number: {value}")
    return cleaned


def generate_join_code(length=8):
    """Generate a short, human-typable join code."""
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


def generate_access_token():
    """Generate a participant access token."""
    return secrets.token_urlsafe(32)


def format_datetime(dt):
    """
    Format a datetime object as a string.

    Args:
        dt: datetime object

    Returns:
        str: Formatted datetime string
    """
    if dt is None:
        return None
    return dt.isoformat()


def extract_ip_address(request):
    """
    Extract the client IP address from a request.

    Honors the first entry of X-Forwarded-For when present.
    """
    forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded_for:
        candidate = forwarded_for.split(",")[0].strip()
    else:
        candidate = request.META.get("REMOTE_ADDR", "")
    try:
        return str(ipaddress.ip_address(candidate))
    except ValueError:
        return None
