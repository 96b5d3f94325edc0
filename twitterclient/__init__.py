"""
twitterclient - Twitter API Client
A Python client for Twitter's REST API with OAuth1 user and OAuth2 app authentication.
"""

__version__ = "0.1.0"
__author__ = "Developer"

from .auth import (AuthRequirement, CredentialProvider, NoCredential, OAuth1Credential,
                   OAuth2Credential)
from .client import TwitterClient
from .errors import (APIError, AuthConfigError, HTTPError, MalformedResponseError,
                     MissingSecretError, TwitterConnectionError, TwitterError)
from .models import OutgoingRequest, Response
from .transport import Transport

__all__ = [
    "APIError",
    "AuthConfigError",
    "AuthRequirement",
    "CredentialProvider",
    "HTTPError",
    "MalformedResponseError",
    "MissingSecretError",
    "NoCredential",
    "OAuth1Credential",
    "OAuth2Credential",
    "OutgoingRequest",
    "Response",
    "Transport",
    "TwitterClient",
    "TwitterConnectionError",
    "TwitterError",
]
