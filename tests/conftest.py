"""Shared pytest fixtures: an in-memory transport and a client wired to it."""

import asyncio
import json
from collections import deque
from urllib.parse import unquote

import pytest

from twitterclient.client import TwitterClient
from twitterclient.models import Response

API_BASE = "https://api.example.test/1.1"
OAUTH_BASE = "https://api.example.test"


class FakeTransport:
    """Stand-in for Transport that replays queued responses and records requests."""

    def __init__(self):
        self.outcomes = deque()
        self.requests = []
        self.on_send = None
        self.closed = False

    def queue(self, status=200, body=b"", headers=None, json_body=None):
        if json_body is not None:
            body = json.dumps(json_body).encode("utf-8")
            headers = {"Content-Type": "application/json", **(headers or {})}
        self.outcomes.append(Response(status=status, headers=headers or {}, body=body))

    def fail_with(self, error):
        self.outcomes.append(error)

    def send(self, request):
        self.requests.append(request)
        if self.on_send is not None:
            self.on_send(request)
        if not self.outcomes:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        outcome = self.outcomes.popleft()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def send_async(self, request):
        await asyncio.sleep(0)
        return self.send(request)

    def close(self):
        self.closed = True

    async def aclose(self):
        self.closed = True


def parse_oauth_header(value):
    """Split an ``OAuth k="v", ...`` header into a dict of decoded values."""
    assert value.startswith("OAuth ")
    params = {}
    for part in value[len("OAuth "):].split(", "):
        key, _, quoted = part.partition("=")
        params[unquote(key)] = unquote(quoted.strip('"'))
    return params


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport):
    return TwitterClient(
        api_key="test_key",
        api_secret="test_secret",
        transport=transport,
        api_base_url=API_BASE,
        oauth_base_url=OAUTH_BASE,
    )
