"""Tests for the helper functions."""

import pytest

from twitterclient.errors import MalformedResponseError
from twitterclient.models import OutgoingRequest, Response
from twitterclient.utils import (generate_nonce, generate_timestamp, parse_form_body,
                                 percent_encode, validate_tweet_text)


@pytest.mark.parametrize("raw,expected", [
    ("Ladies + Gentlemen", "Ladies%20%2B%20Gentlemen"),
    ("An encoded string!", "An%20encoded%20string%21"),
    ("Dogs, Cats & Mice", "Dogs%2C%20Cats%20%26%20Mice"),
    ("☃", "%E2%98%83"),
    ("-._~", "-._~"),
    (b"bytes", "bytes"),
    (42, "42"),
])
def test_percent_encode(raw, expected):
    assert percent_encode(raw) == expected


def test_nonce_is_unique():
    assert generate_nonce() != generate_nonce()
    assert generate_nonce().isalnum()


def test_timestamp_is_integer_seconds():
    assert generate_timestamp().isdigit()


def test_parse_form_body():
    response = Response(200, {}, b"oauth_token=rt1&oauth_token_secret=rs1&empty=")
    assert parse_form_body(response) == {"oauth_token": "rt1", "oauth_token_secret": "rs1", "empty": ""}


@pytest.mark.parametrize("body", [b"no pairs here", b"\xff\xfe"])
def test_parse_form_body_rejects_garbage(body):
    with pytest.raises(MalformedResponseError):
        parse_form_body(Response(200, {}, body))


def test_validate_tweet_text():
    assert validate_tweet_text("hello")
    assert not validate_tweet_text("")
    assert not validate_tweet_text("   ")
    assert not validate_tweet_text("x" * 281)
    assert validate_tweet_text("x" * 280)
    assert not validate_tweet_text(None)


def test_request_rejects_two_bodies():
    with pytest.raises(ValueError):
        OutgoingRequest("POST", "https://api.example.test/x", form={"a": "1"}, json={"a": 1})


def test_response_helpers():
    response = Response(200, {"Content-Type": "application/json"}, b'{"a": 1}')
    assert response.ok
    assert response.text == '{"a": 1}'
    assert response.header("content-type") == "application/json"
    assert response.header("missing", "default") == "default"
    assert not Response(404, {}).ok
