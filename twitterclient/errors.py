"""
Error Taxonomy
Exceptions raised by the client and the classifier that maps responses onto them.
"""

import json
from typing import Any, Callable, List, Optional

from .logger import logger
from .models import Response


class TwitterError(Exception):
    """Base class for every error raised by twitterclient."""


class TwitterConnectionError(TwitterError):
    """No response was received (DNS, TCP, TLS or timeout failure)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class HTTPError(TwitterError):
    """A response was received with a non-2xx status."""

    def __init__(self, status: int, body: bytes, headers=None):
        self.status = status
        self.body = body
        self.headers = dict(headers or {})
        self.api_errors = _extract_api_errors(body)
        if self.api_errors:
            first = self.api_errors[0]
            self.code = first.get("code")
            self.message = first.get("message")
        else:
            self.code = None
            self.message = None
        detail = f": {self.message}" if self.message else ""
        super().__init__(f"HTTP {status}{detail}")


class APIError(TwitterError):
    """A 2xx response whose body carries a service-level error payload."""

    def __init__(self, code: Optional[int], message: str, errors: Optional[List[dict]] = None):
        super().__init__(f"API error {code}: {message}")
        self.code = code
        self.message = message
        self.errors = errors or []


class MalformedResponseError(TwitterError):
    """The response body could not be parsed into the expected shape."""

    def __init__(self, reason: str, body: bytes = b""):
        super().__init__(f"Malformed response: {reason}")
        self.reason = reason
        self.body = body


class AuthConfigError(TwitterError):
    """The configured credentials cannot satisfy the request. Never sent over the wire."""


class MissingSecretError(TwitterError):
    """No secret was given or cached for a request token during verification."""

    def __init__(self, request_token: str):
        super().__init__(f"No secret known for request token {request_token!r}")
        self.request_token = request_token


def _extract_api_errors(body: bytes) -> List[dict]:
    if not body:
        return []
    try:
        payload = json.loads(body.decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return []
    if not isinstance(payload, dict):
        return []
    errors = payload.get("errors")
    if not isinstance(errors, list):
        return []
    return [error for error in errors if isinstance(error, dict)]


def parse_json(response: Response) -> Any:
    """Default parser: JSON body, ``None`` for an empty one."""
    if not response.body.strip():
        return None
    return response.json()


def classify_response(response: Response, lenient: bool = False,
                      parser: Optional[Callable[[Response], Any]] = None) -> Any:
    """Turn a received response into a value or raise the matching error.

    Args:
        response: Response handed back by the transport
        lenient: Return the raw response for any status instead of classifying
        parser: Callable producing the caller's value from the response

    Returns:
        The parsed value, or the response itself in lenient mode
    """
    if lenient:
        return response

    if not response.ok:
        error = HTTPError(response.status, response.body, response.headers)
        logger.warning("HTTP %s returned (code=%s)", response.status, error.code)
        raise error

    parser = parser or parse_json
    try:
        value = parser(response)
    except MalformedResponseError:
        raise
    except (ValueError, TypeError, KeyError, UnicodeDecodeError) as e:
        logger.warning("Could not parse %s response body: %s", response.status, e)
        raise MalformedResponseError(str(e), response.body) from e

    if isinstance(value, dict) and isinstance(value.get("errors"), list) and value["errors"]:
        errors = [error for error in value["errors"] if isinstance(error, dict)]
        first = errors[0] if errors else {}
        logger.warning("API error payload in %s response (code=%s)", response.status, first.get("code"))
        raise APIError(first.get("code"), first.get("message", "unknown error"), errors)

    return value
