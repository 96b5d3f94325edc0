"""
Utility Functions
Encoding and validation helpers shared by the signer, the flows and the endpoint helpers.
"""

import secrets
import time
from typing import Dict
from urllib.parse import parse_qsl, quote

from .errors import MalformedResponseError
from .models import Response


def percent_encode(value) -> str:
    """
    Percent-encode a value the way OAuth 1.0 requires (RFC 3986).

    Args:
        value: String (or anything str() accepts) to encode

    Returns:
        Encoded text, only unreserved characters left as is
    """
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    return quote(str(value), safe="-._~")


def generate_nonce() -> str:
    """Random per-request value for oauth_nonce."""
    return secrets.token_hex(16)


def generate_timestamp() -> str:
    """Seconds since the epoch for oauth_timestamp."""
    return str(int(time.time()))


def parse_form_body(response: Response) -> Dict[str, str]:
    """
    Parse an application/x-www-form-urlencoded body, as returned by the OAuth1 endpoints.

    Args:
        response: Response whose body holds the encoded pairs

    Returns:
        Dict of decoded keys and values
    """
    try:
        text = response.body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedResponseError(str(e), response.body) from e
    try:
        return dict(parse_qsl(text, keep_blank_values=True, strict_parsing=True))
    except ValueError as e:
        raise MalformedResponseError(f"not a form-encoded body ({e})", response.body) from e


def validate_tweet_text(text: str, max_length: int = 280) -> bool:
    """
    Validate tweet text.

    Args:
        text: Tweet text to validate
        max_length: Maximum allowed length

    Returns:
        True if valid, False otherwise
    """
    if not isinstance(text, str):
        return False
    text = text.strip()
    if len(text) == 0 or len(text) > max_length:
        return False
    return True
