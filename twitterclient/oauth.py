"""
OAuth Flows
Three-legged OAuth 1.0a handshake and the app-only OAuth2 token exchange.
"""

import time
from collections import OrderedDict
from enum import Enum
from threading import RLock
from typing import Dict, Optional, Tuple
from urllib.parse import urlencode

from .auth import AuthRequirement, OAuth1Credential
from .config import Config
from .errors import AuthConfigError, MalformedResponseError, MissingSecretError
from .executor import Callback, RequestExecutor
from .logger import logger
from .models import Response
from .utils import parse_form_body

OUT_OF_BAND = "oob"


class OAuthState(str, Enum):
    UNSTARTED = "unstarted"
    REQUEST_TOKEN_OBTAINED = "request_token_obtained"
    AUTHORIZED = "authorized"


class RequestTokenCache:
    """Request-token secrets kept between the two handshake steps, bounded in size and age."""

    def __init__(self, max_size: Optional[int] = None, ttl_seconds: Optional[int] = None, clock=time.monotonic):
        self.max_size = max(max_size if max_size is not None else Config.REQUEST_TOKEN_CACHE_SIZE, 1)
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else Config.REQUEST_TOKEN_TTL_SECONDS
        self._clock = clock
        self._lock = RLock()
        self._entries: "OrderedDict[str, Tuple[str, float]]" = OrderedDict()

    def _prune(self):
        cutoff = self._clock() - self.ttl_seconds
        while self._entries:
            token, (_, stored_at) = next(iter(self._entries.items()))
            if stored_at >= cutoff:
                break
            self._entries.popitem(last=False)
            logger.debug("Expired cached secret for request token %s", token)

    def put(self, token: str, secret: str):
        with self._lock:
            self._entries.pop(token, None)
            self._entries[token] = (secret, self._clock())
            self._prune()
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def get(self, token: str) -> Optional[str]:
        with self._lock:
            self._prune()
            entry = self._entries.get(token)
            return entry[0] if entry else None

    def discard(self, token: str):
        with self._lock:
            self._entries.pop(token, None)

    def __len__(self):
        with self._lock:
            self._prune()
            return len(self._entries)

    def __contains__(self, token):
        return self.get(token) is not None


def _parse_token_pair(response: Response) -> Dict[str, str]:
    values = parse_form_body(response)
    if not values.get("oauth_token") or "oauth_token_secret" not in values:
        raise MalformedResponseError("oauth_token/oauth_token_secret missing", response.body)
    return values


class OAuth1Flow:
    """Request token, authorize URL and verifier exchange."""

    def __init__(self, executor: RequestExecutor, base_url: Optional[str] = None,
                 cache: Optional[RequestTokenCache] = None):
        self.executor = executor
        self.base_url = (base_url or Config.OAUTH_BASE_URL).rstrip("/")
        self.cache = cache or RequestTokenCache()
        self.state = OAuthState.UNSTARTED

    def _request_token_call(self, callback_url: Optional[str]) -> dict:
        def finish(values):
            self.cache.put(values["oauth_token"], values["oauth_token_secret"])
            self.state = OAuthState.REQUEST_TOKEN_OBTAINED
            logger.info("Obtained OAuth request token")
            return values

        return dict(
            auth=AuthRequirement.CONSUMER,
            oauth_params={"oauth_callback": callback_url or OUT_OF_BAND},
            parser=_parse_token_pair,
            finish=finish,
        )

    def request_oauth(self, callback_url: Optional[str] = None, callback: Optional[Callback] = None):
        """
        Obtain a request token.

        Args:
            callback_url: Where the user returns after authorizing; PIN flow when omitted
            callback: ``callback(error, token)`` for non-blocking use

        Returns:
            Dict with oauth_token, oauth_token_secret and oauth_callback_confirmed
        """
        return self.executor.execute("POST", f"{self.base_url}/oauth/request_token",
                                     callback=callback, **self._request_token_call(callback_url))

    def request_oauth_p(self, callback_url: Optional[str] = None):
        return self.executor.execute_p("POST", f"{self.base_url}/oauth/request_token",
                                       **self._request_token_call(callback_url))

    def authorize_url(self, request_token: str, force_login: bool = False,
                      screen_name: Optional[str] = None) -> str:
        """URL the user visits to approve the request token."""
        return self._user_url("authorize", request_token, force_login, screen_name)

    def authenticate_url(self, request_token: str, force_login: bool = False,
                         screen_name: Optional[str] = None) -> str:
        """Sign-in URL; skips the approval page for already-authorized users."""
        return self._user_url("authenticate", request_token, force_login, screen_name)

    def _user_url(self, path: str, request_token: str, force_login: bool,
                  screen_name: Optional[str]) -> str:
        query = {"oauth_token": request_token}
        if force_login:
            query["force_login"] = "true"
        if screen_name:
            query["screen_name"] = screen_name
        return f"{self.base_url}/oauth/{path}?{urlencode(query)}"

    def _access_token_call(self, verifier: str, request_token: str,
                           request_token_secret: Optional[str]) -> dict:
        if request_token_secret is None:
            request_token_secret = self.cache.get(request_token)
            if request_token_secret is None:
                raise MissingSecretError(request_token)

        def finish(values):
            self.cache.discard(request_token)
            self.state = OAuthState.AUTHORIZED
            logger.info("Exchanged verifier for access token (user_id=%s)", values.get("user_id"))
            return values

        return dict(
            auth=AuthRequirement.OAUTH1,
            credential=OAuth1Credential(request_token, request_token_secret),
            oauth_params={"oauth_verifier": verifier},
            parser=_parse_token_pair,
            finish=finish,
        )

    def verify_oauth(self, verifier: str, request_token: str, request_token_secret: Optional[str] = None,
                     callback: Optional[Callback] = None):
        """
        Exchange a verifier (PIN) for an access token.

        Args:
            verifier: oauth_verifier from the callback or the PIN shown to the user
            request_token: Token returned by request_oauth
            request_token_secret: Its secret; looked up from the cache when omitted
            callback: ``callback(error, token)`` for non-blocking use

        Returns:
            Dict with oauth_token, oauth_token_secret, user_id and screen_name
        """
        try:
            call = self._access_token_call(verifier, request_token, request_token_secret)
        except (MissingSecretError, AuthConfigError) as e:
            if callback is None:
                raise
            return self.executor.reject(e, callback)
        return self.executor.execute("POST", f"{self.base_url}/oauth/access_token",
                                     callback=callback, **call)

    def verify_oauth_p(self, verifier: str, request_token: str, request_token_secret: Optional[str] = None):
        try:
            call = self._access_token_call(verifier, request_token, request_token_secret)
        except (MissingSecretError, AuthConfigError) as e:
            return self.executor.reject(e)
        return self.executor.execute_p("POST", f"{self.base_url}/oauth/access_token", **call)


def _parse_bearer_token(response: Response) -> Dict[str, str]:
    payload = response.json()
    if not isinstance(payload, dict) or not payload.get("access_token"):
        raise MalformedResponseError("access_token missing", response.body)
    token_type = payload.get("token_type", "bearer")
    if str(token_type).lower() != "bearer":
        raise MalformedResponseError(f"unexpected token_type {token_type!r}", response.body)
    return payload


class OAuth2Flow:
    """App-only bearer token exchange. Stateless; every call fetches a fresh token."""

    def __init__(self, executor: RequestExecutor, base_url: Optional[str] = None):
        self.executor = executor
        self.base_url = (base_url or Config.OAUTH_BASE_URL).rstrip("/")

    def _token_call(self) -> dict:
        return dict(
            form={"grant_type": "client_credentials"},
            headers={
                "Authorization": self.executor.provider.basic_authorization(),
                "Content-Type": "application/x-www-form-urlencoded;charset=UTF-8",
            },
            parser=_parse_bearer_token,
        )

    def _invalidate_call(self, access_token: str) -> dict:
        return dict(
            form={"access_token": access_token},
            headers={"Authorization": self.executor.provider.basic_authorization()},
        )

    def request_oauth2(self, callback: Optional[Callback] = None):
        """
        Obtain an app-only bearer token.

        Returns:
            Dict with token_type and access_token
        """
        try:
            call = self._token_call()
        except AuthConfigError as e:
            if callback is None:
                raise
            return self.executor.reject(e, callback)
        return self.executor.execute("POST", f"{self.base_url}/oauth2/token", callback=callback, **call)

    def request_oauth2_p(self):
        try:
            call = self._token_call()
        except AuthConfigError as e:
            return self.executor.reject(e)
        return self.executor.execute_p("POST", f"{self.base_url}/oauth2/token", **call)

    def invalidate_oauth2(self, access_token: str, callback: Optional[Callback] = None):
        """Revoke a bearer token previously issued to this application."""
        try:
            call = self._invalidate_call(access_token)
        except AuthConfigError as e:
            if callback is None:
                raise
            return self.executor.reject(e, callback)
        return self.executor.execute("POST", f"{self.base_url}/oauth2/invalidate_token",
                                     callback=callback, **call)

    def invalidate_oauth2_p(self, access_token: str):
        try:
            call = self._invalidate_call(access_token)
        except AuthConfigError as e:
            return self.executor.reject(e)
        return self.executor.execute_p("POST", f"{self.base_url}/oauth2/invalidate_token", **call)
