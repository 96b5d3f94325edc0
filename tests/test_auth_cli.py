"""Tests for the credential acquisition CLI."""

from twitterclient.auth_cli import acquire_app_token, acquire_user_token, main

REQUEST_TOKEN_BODY = b"oauth_token=rt1&oauth_token_secret=rs1&oauth_callback_confirmed=true"
ACCESS_TOKEN_BODY = b"oauth_token=at1&oauth_token_secret=as1&user_id=12&screen_name=someone"


def test_pin_flow_prints_access_token(client, transport, capsys):
    transport.queue(body=REQUEST_TOKEN_BODY)
    transport.queue(body=ACCESS_TOKEN_BODY)

    assert acquire_user_token(client, read_pin=lambda prompt: " 1234567 \n") == 0

    out = capsys.readouterr().out
    assert "oauth/authorize?oauth_token=rt1" in out
    assert "TWITTER_ACCESS_TOKEN=at1" in out
    assert "TWITTER_ACCESS_SECRET=as1" in out
    assert "@someone" in out
    assert 'oauth_verifier="1234567"' in transport.requests[1].headers["Authorization"]


def test_callback_flow_stops_after_authorize_url(client, transport, capsys):
    transport.queue(body=REQUEST_TOKEN_BODY)
    assert acquire_user_token(client, "https://app.example.test/cb") == 0
    out = capsys.readouterr().out
    assert "oauth/authorize?oauth_token=rt1" in out
    assert len(transport.requests) == 1


def test_app_token(client, transport, capsys):
    transport.queue(json_body={"token_type": "bearer", "access_token": "bearer-xyz"})
    assert acquire_app_token(client) == 0
    assert "TWITTER_BEARER_TOKEN=bearer-xyz" in capsys.readouterr().out


def test_main_without_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out.lower()


def test_main_reports_missing_keys(monkeypatch, capsys):
    monkeypatch.setattr("twitterclient.client.Config.TWITTER_API_KEY", None)
    monkeypatch.setattr("twitterclient.client.Config.TWITTER_API_SECRET", None)
    assert main(["app"]) == 1
    assert "API key and API secret" in capsys.readouterr().err
