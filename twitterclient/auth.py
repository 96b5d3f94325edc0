"""
Authentication Module
Credentials, the OAuth 1.0a signer and the provider that applies them to outgoing requests.
"""

import base64
import hashlib
import hmac
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlsplit, urlunsplit

from .errors import AuthConfigError
from .logger import logger
from .models import OutgoingRequest
from .utils import generate_nonce, generate_timestamp, percent_encode


class AuthRequirement(str, Enum):
    """What kind of credential a request must be sent with."""

    NONE = "none"
    CONSUMER = "consumer"  # OAuth1 signature without a token, request-token step only
    OAUTH1 = "oauth1"
    OAUTH2 = "oauth2"
    ANY = "any"  # user or app context, whichever is configured


@dataclass(frozen=True)
class NoCredential:
    """No credential configured."""


@dataclass(frozen=True)
class OAuth1Credential:
    """User-context OAuth1 token pair."""

    token: str
    token_secret: str = ""

    def __post_init__(self):
        if not self.token:
            raise AuthConfigError("OAuth1 credential requires a non-empty token")

    def __repr__(self):
        return f"OAuth1Credential(token={self.token!r}, token_secret=<hidden>)"


@dataclass(frozen=True)
class OAuth2Credential:
    """App-only bearer token."""

    access_token: str

    def __post_init__(self):
        if not self.access_token:
            raise AuthConfigError("OAuth2 credential requires a non-empty access token")

    def __repr__(self):
        return "OAuth2Credential(access_token=<hidden>)"


Credential = Union[NoCredential, OAuth1Credential, OAuth2Credential]


def normalize_url(url: str) -> str:
    """Base string URI: lowercase scheme and host, default port dropped, no query or fragment."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    port = parts.port
    if port and not ((scheme == "http" and port == 80) or (scheme == "https" and port == 443)):
        host = f"{host}:{port}"
    return urlunsplit((scheme, host, parts.path or "/", "", ""))


def normalize_parameters(params: Iterable[Tuple[str, str]]) -> str:
    encoded = sorted((percent_encode(k), percent_encode(v)) for k, v in params)
    return "&".join(f"{k}={v}" for k, v in encoded)


def signature_base_string(method: str, url: str, params: Iterable[Tuple[str, str]]) -> str:
    return "&".join([
        method.upper(),
        percent_encode(normalize_url(url)),
        percent_encode(normalize_parameters(params)),
    ])


def sign_hmac_sha1(base_string: str, consumer_secret: str, token_secret: str = "") -> str:
    key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret or '')}"
    digest = hmac.new(key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def request_parameters(request: OutgoingRequest) -> List[Tuple[str, str]]:
    """Explicit query and form-body pairs to sign; the signer adds the URL query itself."""
    pairs = [(k, str(v)) for k, v in request.params.items()]
    if request.form:
        pairs.extend((k, str(v)) for k, v in request.form.items())
    return pairs


def oauth1_authorization(method: str, url: str, params: Iterable[Tuple[str, str]],
                         consumer_key: str, consumer_secret: str,
                         token: Optional[str] = None, token_secret: str = "",
                         oauth_params: Optional[Dict[str, str]] = None,
                         nonce: Optional[str] = None, timestamp: Optional[str] = None) -> str:
    """
    Build an ``Authorization: OAuth ...`` header value.

    Args:
        method: HTTP method
        url: Request URL (its query string is signed too)
        params: Additional query/form pairs to sign
        consumer_key: API key
        consumer_secret: API secret
        token: OAuth token, omitted for the request-token step
        token_secret: OAuth token secret
        oauth_params: Extra ``oauth_*`` protocol parameters (callback, verifier)
        nonce: Fixed nonce, generated when omitted
        timestamp: Fixed timestamp, generated when omitted

    Returns:
        Header value
    """
    protocol = {
        "oauth_consumer_key": consumer_key,
        "oauth_nonce": nonce or generate_nonce(),
        "oauth_signature_method": "HMAC-SHA1",
        "oauth_timestamp": timestamp or generate_timestamp(),
        "oauth_version": "1.0",
    }
    if token:
        protocol["oauth_token"] = token
    if oauth_params:
        protocol.update(oauth_params)

    signed = parse_qsl(urlsplit(url).query, keep_blank_values=True)
    signed.extend(params)
    signed.extend(protocol.items())
    base = signature_base_string(method, url, signed)
    protocol["oauth_signature"] = sign_hmac_sha1(base, consumer_secret, token_secret)

    return "OAuth " + ", ".join(
        f'{percent_encode(k)}="{percent_encode(v)}"' for k, v in sorted(protocol.items())
    )


class CredentialProvider:
    """Holds the current credential and applies it to outgoing requests."""

    def __init__(self, api_key: Optional[str] = None, api_secret: Optional[str] = None,
                 credential: Optional[Credential] = None,
                 nonce_factory: Callable[[], str] = generate_nonce,
                 clock: Callable[[], str] = generate_timestamp):
        """
        Initialize the provider.

        Args:
            api_key: Consumer key of the application
            api_secret: Consumer secret of the application
            credential: Initial credential, none when omitted
            nonce_factory: Source of oauth_nonce values
            clock: Source of oauth_timestamp values
        """
        self.api_key = api_key
        self.api_secret = api_secret
        self.nonce_factory = nonce_factory
        self.clock = clock
        self._lock = threading.Lock()
        self._credential: Credential = credential or NoCredential()

    @property
    def credential(self) -> Credential:
        return self._credential

    @credential.setter
    def credential(self, credential: Optional[Credential]):
        credential = credential or NoCredential()
        if not isinstance(credential, (NoCredential, OAuth1Credential, OAuth2Credential)):
            raise AuthConfigError(f"Unsupported credential type: {type(credential).__name__}")
        with self._lock:
            self._credential = credential
        logger.info("Credential switched to %s", type(credential).__name__)

    def get_credential(self) -> Credential:
        return self.credential

    def set_credential(self, credential: Optional[Credential]):
        self.credential = credential

    def _require_consumer(self):
        if not self.api_key or not self.api_secret:
            raise AuthConfigError("API key and API secret are required for signed requests")

    def basic_authorization(self) -> str:
        """``Authorization: Basic`` value for the OAuth2 token endpoints."""
        self._require_consumer()
        raw = f"{percent_encode(self.api_key)}:{percent_encode(self.api_secret)}"
        return "Basic " + base64.b64encode(raw.encode("utf-8")).decode("ascii")

    def authenticate(self, request: OutgoingRequest,
                     requirement: AuthRequirement = AuthRequirement.NONE,
                     credential: Optional[Credential] = None,
                     oauth_params: Optional[Dict[str, str]] = None) -> OutgoingRequest:
        """
        Attach credentials to a request according to its requirement.

        Args:
            request: Request to authenticate, modified in place
            requirement: Authentication the endpoint needs
            credential: Credential to use instead of the current one
            oauth_params: Extra oauth_* parameters to sign

        Returns:
            The same request, with an Authorization header when one is needed
        """
        requirement = AuthRequirement(requirement)
        if requirement is AuthRequirement.NONE:
            return request

        if requirement is AuthRequirement.CONSUMER:
            self._sign(request, None, "", oauth_params)
            return request

        # Captured once; a concurrent swap does not affect this request.
        current = credential if credential is not None else self._credential

        if requirement is AuthRequirement.ANY:
            if isinstance(current, NoCredential):
                raise AuthConfigError("This request requires OAuth1 or OAuth2 authentication")
        elif requirement is AuthRequirement.OAUTH1 and not isinstance(current, OAuth1Credential):
            raise AuthConfigError("This request requires OAuth1 user authentication")
        elif requirement is AuthRequirement.OAUTH2 and not isinstance(current, OAuth2Credential):
            raise AuthConfigError("This request requires OAuth2 app authentication")

        if isinstance(current, OAuth1Credential):
            self._sign(request, current.token, current.token_secret, oauth_params)
        else:
            request.headers["Authorization"] = f"Bearer {current.access_token}"
        return request

    def _sign(self, request: OutgoingRequest, token: Optional[str], token_secret: str,
              oauth_params: Optional[Dict[str, str]]):
        self._require_consumer()
        request.headers["Authorization"] = oauth1_authorization(
            request.method,
            request.url,
            request_parameters(request),
            self.api_key,
            self.api_secret,
            token=token,
            token_secret=token_secret,
            oauth_params=oauth_params,
            nonce=self.nonce_factory(),
            timestamp=self.clock(),
        )
