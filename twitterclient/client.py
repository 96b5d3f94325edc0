"""
Twitter API Client
Main client for interacting with Twitter's REST API.
"""

from typing import Any, Dict, Optional

from .auth import (AuthRequirement, Credential, CredentialProvider, NoCredential,
                   OAuth1Credential, OAuth2Credential)
from .config import Config
from .executor import Callback, RequestExecutor
from .logger import logger
from .oauth import OAuth1Flow, OAuth2Flow, RequestTokenCache
from .transport import Transport
from .utils import validate_tweet_text


class TwitterClient:
    """Twitter API Client with blocking, callback and future call styles."""

    def __init__(self, api_key: Optional[str] = None, api_secret: Optional[str] = None,
                 credential: Optional[Credential] = None, transport: Optional[Transport] = None,
                 api_base_url: Optional[str] = None, oauth_base_url: Optional[str] = None,
                 token_cache: Optional[RequestTokenCache] = None):
        """
        Initialize Twitter API client.

        Args:
            api_key: Twitter API Key (or from env TWITTER_API_KEY)
            api_secret: Twitter API Secret (or from env TWITTER_API_SECRET)
            credential: Initial credential; requests are unauthenticated without one
            transport: HTTP transport, a default requests/aiohttp one when omitted
            api_base_url: Base URL for relative endpoint paths
            oauth_base_url: Base URL of the OAuth endpoints
            token_cache: Cache of request-token secrets for verify_oauth
        """
        self.provider = CredentialProvider(
            api_key or Config.TWITTER_API_KEY,
            api_secret or Config.TWITTER_API_SECRET,
            credential,
        )
        self.executor = RequestExecutor(self.provider, transport)
        self.api_base_url = (api_base_url or Config.API_BASE_URL).rstrip("/")
        self.oauth1 = OAuth1Flow(self.executor, oauth_base_url, token_cache)
        self.oauth2 = OAuth2Flow(self.executor, oauth_base_url)

    @classmethod
    def from_env(cls, **kwargs) -> "TwitterClient":
        """Build a client whose credential comes from the environment (.env is honoured)."""
        if "credential" not in kwargs:
            if Config.TWITTER_ACCESS_TOKEN and Config.TWITTER_ACCESS_SECRET:
                kwargs["credential"] = OAuth1Credential(Config.TWITTER_ACCESS_TOKEN, Config.TWITTER_ACCESS_SECRET)
            elif Config.TWITTER_BEARER_TOKEN:
                kwargs["credential"] = OAuth2Credential(Config.TWITTER_BEARER_TOKEN)
        return cls(**kwargs)

    @property
    def api_key(self) -> Optional[str]:
        return self.provider.api_key

    @property
    def api_secret(self) -> Optional[str]:
        return self.provider.api_secret

    @property
    def transport(self) -> Transport:
        return self.executor.transport

    # Credential slot

    @property
    def credential(self) -> Credential:
        return self.provider.credential

    @credential.setter
    def credential(self, credential: Optional[Credential]):
        self.provider.credential = credential

    def get_credential(self) -> Credential:
        return self.provider.get_credential()

    def set_credential(self, credential: Optional[Credential]):
        self.provider.set_credential(credential)

    def authorize(self, access_token: Dict[str, str]) -> OAuth1Credential:
        """Switch to user context with the dict returned by verify_oauth."""
        credential = OAuth1Credential(access_token["oauth_token"], access_token["oauth_token_secret"])
        self.credential = credential
        return credential

    def authorize_app(self, app_token: Dict[str, str]) -> OAuth2Credential:
        """Switch to app-only context with the dict returned by request_oauth2."""
        credential = OAuth2Credential(app_token["access_token"])
        self.credential = credential
        return credential

    def clear_credential(self):
        self.credential = NoCredential()

    # Generic requests

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.api_base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, *, auth: AuthRequirement = AuthRequirement.NONE,
                lenient: bool = False, callback: Optional[Callback] = None, **kwargs):
        """
        Send a request to an API endpoint.

        Args:
            method: HTTP method
            path: Endpoint path relative to the API base URL, or an absolute URL
            auth: Authentication the endpoint needs
            lenient: Return the raw Response whatever its status
            callback: ``callback(error, value)`` for non-blocking use
            **kwargs: params, form, json, headers or parser

        Returns:
            Decoded JSON (or the Response in lenient mode); the task when a callback is given
        """
        return self.executor.execute(method, self._url(path), auth=auth, lenient=lenient,
                                     callback=callback, **kwargs)

    def request_p(self, method: str, path: str, *, auth: AuthRequirement = AuthRequirement.NONE,
                  lenient: bool = False, **kwargs):
        """Same as request, returning a pending future."""
        return self.executor.execute_p(method, self._url(path), auth=auth, lenient=lenient, **kwargs)

    # OAuth flows

    def request_oauth(self, callback_url: Optional[str] = None, callback: Optional[Callback] = None):
        return self.oauth1.request_oauth(callback_url, callback=callback)

    def request_oauth_p(self, callback_url: Optional[str] = None):
        return self.oauth1.request_oauth_p(callback_url)

    def authorize_url(self, request_token: str, **kwargs) -> str:
        return self.oauth1.authorize_url(request_token, **kwargs)

    def authenticate_url(self, request_token: str, **kwargs) -> str:
        return self.oauth1.authenticate_url(request_token, **kwargs)

    def verify_oauth(self, verifier: str, request_token: str, request_token_secret: Optional[str] = None,
                     callback: Optional[Callback] = None):
        return self.oauth1.verify_oauth(verifier, request_token, request_token_secret, callback=callback)

    def verify_oauth_p(self, verifier: str, request_token: str, request_token_secret: Optional[str] = None):
        return self.oauth1.verify_oauth_p(verifier, request_token, request_token_secret)

    def request_oauth2(self, callback: Optional[Callback] = None):
        return self.oauth2.request_oauth2(callback=callback)

    def request_oauth2_p(self):
        return self.oauth2.request_oauth2_p()

    def invalidate_oauth2(self, access_token: str, callback: Optional[Callback] = None):
        return self.oauth2.invalidate_oauth2(access_token, callback=callback)

    def invalidate_oauth2_p(self, access_token: str):
        return self.oauth2.invalidate_oauth2_p(access_token)

    # Endpoint helpers

    @staticmethod
    def _tweet_call(tweet_id) -> Dict[str, Any]:
        return dict(method="GET", path="statuses/show.json", auth=AuthRequirement.ANY,
                    params={"id": tweet_id, "tweet_mode": "extended"})

    @staticmethod
    def _user_call(user_id=None, screen_name: Optional[str] = None) -> Dict[str, Any]:
        if not user_id and not screen_name:
            raise ValueError("Either user_id or screen_name is required")
        params = {"user_id": user_id} if user_id else {"screen_name": screen_name}
        return dict(method="GET", path="users/show.json", auth=AuthRequirement.ANY, params=params)

    @staticmethod
    def _search_call(query: str, count: int = 10) -> Dict[str, Any]:
        return dict(method="GET", path="search/tweets.json", auth=AuthRequirement.ANY,
                    params={"q": query, "count": min(max(count, 1), 100), "tweet_mode": "extended"})

    @staticmethod
    def _timeline_call(screen_name: str, count: int = 10) -> Dict[str, Any]:
        return dict(method="GET", path="statuses/user_timeline.json", auth=AuthRequirement.ANY,
                    params={"screen_name": screen_name, "count": min(max(count, 1), 200),
                            "tweet_mode": "extended"})

    @staticmethod
    def _post_call(text: str, in_reply_to_status_id=None) -> Dict[str, Any]:
        if not validate_tweet_text(text):
            raise ValueError("Tweet text must be between 1 and 280 characters")
        form = {"status": text.strip()}
        if in_reply_to_status_id:
            form["in_reply_to_status_id"] = in_reply_to_status_id
            form["auto_populate_reply_metadata"] = "true"
        return dict(method="POST", path="statuses/update.json", auth=AuthRequirement.OAUTH1, form=form)

    def get_tweet(self, tweet_id, callback: Optional[Callback] = None):
        """
        Get a single tweet.

        Args:
            tweet_id: Tweet ID

        Returns:
            Tweet data
        """
        return self.request(**self._tweet_call(tweet_id), callback=callback)

    def get_tweet_p(self, tweet_id):
        return self.request_p(**self._tweet_call(tweet_id))

    def get_user(self, user_id=None, screen_name: Optional[str] = None, callback: Optional[Callback] = None):
        """
        Get a user by ID or screen name.

        Returns:
            User data
        """
        try:
            call = self._user_call(user_id, screen_name)
        except ValueError as e:
            if callback is None:
                raise
            return self.executor.reject(e, callback)
        return self.request(**call, callback=callback)

    def get_user_p(self, user_id=None, screen_name: Optional[str] = None):
        try:
            call = self._user_call(user_id, screen_name)
        except ValueError as e:
            return self.executor.reject(e)
        return self.request_p(**call)

    def search_tweets(self, query: str, count: int = 10, callback: Optional[Callback] = None):
        """
        Search for tweets.

        Args:
            query: Search query
            count: Number of results

        Returns:
            Search results with statuses and search_metadata
        """
        return self.request(**self._search_call(query, count), callback=callback)

    def search_tweets_p(self, query: str, count: int = 10):
        return self.request_p(**self._search_call(query, count))

    def user_timeline(self, screen_name: str, count: int = 10, callback: Optional[Callback] = None):
        """
        Get user's recent tweets.

        Args:
            screen_name: Twitter username
            count: Number of tweets to retrieve

        Returns:
            List of tweets
        """
        return self.request(**self._timeline_call(screen_name, count), callback=callback)

    def user_timeline_p(self, screen_name: str, count: int = 10):
        return self.request_p(**self._timeline_call(screen_name, count))

    def post_tweet(self, text: str, in_reply_to_status_id=None, callback: Optional[Callback] = None):
        """
        Post a tweet.

        Args:
            text: Tweet text
            in_reply_to_status_id: Tweet being replied to, if any

        Returns:
            Posted tweet data
        """
        try:
            call = self._post_call(text, in_reply_to_status_id)
        except ValueError as e:
            if callback is None:
                raise
            return self.executor.reject(e, callback)
        return self.request(**call, callback=callback)

    def post_tweet_p(self, text: str, in_reply_to_status_id=None):
        try:
            call = self._post_call(text, in_reply_to_status_id)
        except ValueError as e:
            return self.executor.reject(e)
        return self.request_p(**call)

    def delete_tweet(self, tweet_id, callback: Optional[Callback] = None):
        return self.request("POST", f"statuses/destroy/{tweet_id}.json", auth=AuthRequirement.OAUTH1,
                            callback=callback)

    def delete_tweet_p(self, tweet_id):
        return self.request_p("POST", f"statuses/destroy/{tweet_id}.json", auth=AuthRequirement.OAUTH1)

    def retweet(self, tweet_id, callback: Optional[Callback] = None):
        return self.request("POST", f"statuses/retweet/{tweet_id}.json", auth=AuthRequirement.OAUTH1,
                            callback=callback)

    def retweet_p(self, tweet_id):
        return self.request_p("POST", f"statuses/retweet/{tweet_id}.json", auth=AuthRequirement.OAUTH1)

    def verify_credentials(self, callback: Optional[Callback] = None):
        """Profile of the user the OAuth1 credential belongs to."""
        return self.request("GET", "account/verify_credentials.json", auth=AuthRequirement.OAUTH1,
                            callback=callback)

    def verify_credentials_p(self):
        return self.request_p("GET", "account/verify_credentials.json", auth=AuthRequirement.OAUTH1)

    # Lifecycle

    def close(self):
        self.transport.close()
        logger.debug("Client transport closed")

    async def aclose(self):
        await self.transport.aclose()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
