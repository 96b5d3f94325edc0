"""Tests for credentials, the OAuth1 signer and the credential provider."""

import base64

import pytest

from conftest import parse_oauth_header
from twitterclient.auth import (AuthRequirement, CredentialProvider, NoCredential, OAuth1Credential,
                                OAuth2Credential, normalize_url, oauth1_authorization,
                                request_parameters, sign_hmac_sha1, signature_base_string)
from twitterclient.errors import AuthConfigError
from twitterclient.models import OutgoingRequest

# Worked example from Twitter's "Creating a signature" documentation.
TW_CONSUMER_KEY = "xvz1evFS4wEEPTGEFPHBog"
TW_CONSUMER_SECRET = "kAcSOqF21Fu85e7zjz7ZN2U4ZRhfV3WpwPAoE3Z7kBw"
TW_TOKEN = "370773112-GmHxMAgYyLbNEtIKZeRNFsMKPR9EyMZeS9weJAEb"
TW_TOKEN_SECRET = "LswwdoUaIvS8ltyTt5jkRh4J50vUPVVHtR2YPi5kE"
TW_NONCE = "kYjzVBB8Y0ZFabxSWbWovY3uYSQ2pTgmZeNu2VS4cg"
TW_TIMESTAMP = "1318622958"
TW_URL = "https://api.twitter.com/1.1/statuses/update.json?include_entities=true"
TW_STATUS = "Hello Ladies + Gentlemen, a signed OAuth request!"
TW_BASE_STRING = (
    "POST&https%3A%2F%2Fapi.twitter.com%2F1.1%2Fstatuses%2Fupdate.json&include_entities%3Dtrue"
    "%26oauth_consumer_key%3Dxvz1evFS4wEEPTGEFPHBog"
    "%26oauth_nonce%3DkYjzVBB8Y0ZFabxSWbWovY3uYSQ2pTgmZeNu2VS4cg"
    "%26oauth_signature_method%3DHMAC-SHA1%26oauth_timestamp%3D1318622958"
    "%26oauth_token%3D370773112-GmHxMAgYyLbNEtIKZeRNFsMKPR9EyMZeS9weJAEb%26oauth_version%3D1.0"
    "%26status%3DHello%2520Ladies%2520%252B%2520Gentlemen%252C%2520a%2520signed%2520OAuth%2520request%2521"
)
TW_SIGNATURE = "hCtSmYh+iHYCEqBWrE7C7hYmtUk="


def twitter_doc_provider():
    return CredentialProvider(
        TW_CONSUMER_KEY,
        TW_CONSUMER_SECRET,
        OAuth1Credential(TW_TOKEN, TW_TOKEN_SECRET),
        nonce_factory=lambda: TW_NONCE,
        clock=lambda: TW_TIMESTAMP,
    )


class TestSignature:
    def test_base_string_matches_documentation(self):
        request = OutgoingRequest("POST", TW_URL, form={"status": TW_STATUS})
        params = [("include_entities", "true")] + request_parameters(request) + [
            ("oauth_consumer_key", TW_CONSUMER_KEY),
            ("oauth_nonce", TW_NONCE),
            ("oauth_signature_method", "HMAC-SHA1"),
            ("oauth_timestamp", TW_TIMESTAMP),
            ("oauth_token", TW_TOKEN),
            ("oauth_version", "1.0"),
        ]
        assert signature_base_string("POST", TW_URL, params) == TW_BASE_STRING

    def test_hmac_sha1_signature_matches_documentation(self):
        assert sign_hmac_sha1(TW_BASE_STRING, TW_CONSUMER_SECRET, TW_TOKEN_SECRET) == TW_SIGNATURE

    def test_provider_signs_request_like_documentation(self):
        request = OutgoingRequest("POST", TW_URL, form={"status": TW_STATUS})
        twitter_doc_provider().authenticate(request, AuthRequirement.OAUTH1)

        header = parse_oauth_header(request.headers["Authorization"])
        assert header["oauth_signature"] == TW_SIGNATURE
        assert header["oauth_token"] == TW_TOKEN
        assert header["oauth_consumer_key"] == TW_CONSUMER_KEY
        assert "status" not in header

    def test_oauth_core_appendix_example(self):
        header = oauth1_authorization(
            "GET",
            "http://photos.example.net/photos?file=vacation.jpg&size=original",
            [],
            "dpf43f3p2l4k3l03",
            "kd94hf93k423kf44",
            token="nnch734d00sl2jdk",
            token_secret="pfkkdhi9sl3r4s00",
            nonce="kllo9940pd9333jh",
            timestamp="1191242096",
        )
        assert parse_oauth_header(header)["oauth_signature"] == "tR3+Ty81lMeYAr/Fid0kMTYa/WM="

    def test_url_query_is_signed_once(self):
        provider = CredentialProvider("dpf43f3p2l4k3l03", "kd94hf93k423kf44",
                                      OAuth1Credential("nnch734d00sl2jdk", "pfkkdhi9sl3r4s00"),
                                      nonce_factory=lambda: "kllo9940pd9333jh", clock=lambda: "1191242096")
        request = OutgoingRequest("GET", "http://photos.example.net/photos?file=vacation.jpg&size=original")
        provider.authenticate(request, AuthRequirement.OAUTH1)
        assert request_parameters(request) == []
        header = parse_oauth_header(request.headers["Authorization"])
        assert header["oauth_signature"] == "tR3+Ty81lMeYAr/Fid0kMTYa/WM="

    def test_helper_and_provider_agree(self):
        provider = twitter_doc_provider()
        request = OutgoingRequest("POST", TW_URL, params={"trim_user": "1"}, form={"status": TW_STATUS})
        provider.authenticate(request, AuthRequirement.OAUTH1)
        direct = oauth1_authorization(
            "POST", TW_URL, request_parameters(request), TW_CONSUMER_KEY, TW_CONSUMER_SECRET,
            token=TW_TOKEN, token_secret=TW_TOKEN_SECRET, nonce=TW_NONCE, timestamp=TW_TIMESTAMP,
        )
        assert request.headers["Authorization"] == direct

    def test_signature_is_deterministic(self):
        first = OutgoingRequest("GET", "https://api.example.test/1.1/x.json", params={"q": "a b"})
        second = OutgoingRequest("GET", "https://api.example.test/1.1/x.json", params={"q": "a b"})
        provider = twitter_doc_provider()
        provider.authenticate(first, AuthRequirement.OAUTH1)
        provider.authenticate(second, AuthRequirement.OAUTH1)
        assert first.headers["Authorization"] == second.headers["Authorization"]

    def test_signature_changes_with_nonce(self):
        provider = twitter_doc_provider()
        first = OutgoingRequest("GET", "https://api.example.test/1.1/x.json")
        provider.authenticate(first, AuthRequirement.OAUTH1)
        provider.nonce_factory = lambda: "another-nonce"
        second = OutgoingRequest("GET", "https://api.example.test/1.1/x.json")
        provider.authenticate(second, AuthRequirement.OAUTH1)
        assert (parse_oauth_header(first.headers["Authorization"])["oauth_signature"]
                != parse_oauth_header(second.headers["Authorization"])["oauth_signature"])

    def test_json_body_is_not_signed(self):
        provider = twitter_doc_provider()
        plain = OutgoingRequest("POST", "https://api.example.test/1.1/x.json")
        with_json = OutgoingRequest("POST", "https://api.example.test/1.1/x.json", json={"text": "hi"})
        provider.authenticate(plain, AuthRequirement.OAUTH1)
        provider.authenticate(with_json, AuthRequirement.OAUTH1)
        assert plain.headers["Authorization"] == with_json.headers["Authorization"]

    @pytest.mark.parametrize("url,expected", [
        ("HTTPS://API.Twitter.com:443/1.1/x.json?a=1", "https://api.twitter.com/1.1/x.json"),
        ("http://example.com:80/path#frag", "http://example.com/path"),
        ("http://example.com:8080/path", "http://example.com:8080/path"),
        ("https://example.com", "https://example.com/"),
    ])
    def test_normalize_url(self, url, expected):
        assert normalize_url(url) == expected


class TestCredentials:
    def test_oauth1_requires_token(self):
        with pytest.raises(AuthConfigError):
            OAuth1Credential("", "secret")

    def test_oauth1_secret_may_be_pending(self):
        assert OAuth1Credential("rt1").token_secret == ""

    def test_oauth2_requires_access_token(self):
        with pytest.raises(AuthConfigError):
            OAuth2Credential("")

    def test_credentials_are_immutable(self):
        credential = OAuth2Credential("abc")
        with pytest.raises(AttributeError):
            credential.access_token = "def"

    def test_repr_hides_secrets(self):
        assert "s3cret" not in repr(OAuth1Credential("tok", "s3cret"))
        assert "bearer-xyz" not in repr(OAuth2Credential("bearer-xyz"))


class TestCredentialProvider:
    def test_default_is_no_credential(self):
        assert CredentialProvider("k", "s").get_credential() == NoCredential()

    def test_none_requirement_leaves_request_untouched(self):
        request = OutgoingRequest("GET", "https://api.example.test/x")
        CredentialProvider().authenticate(request, AuthRequirement.NONE)
        assert request.headers == {}

    def test_oauth2_attaches_bearer(self):
        provider = CredentialProvider("k", "s", OAuth2Credential("bearer-xyz"))
        request = provider.authenticate(OutgoingRequest("GET", "https://api.example.test/x"), AuthRequirement.OAUTH2)
        assert request.headers["Authorization"] == "Bearer bearer-xyz"

    def test_any_uses_configured_mode(self):
        provider = CredentialProvider("k", "s", OAuth2Credential("bearer-xyz"))
        request = provider.authenticate(OutgoingRequest("GET", "https://api.example.test/x"), AuthRequirement.ANY)
        assert request.headers["Authorization"] == "Bearer bearer-xyz"

        provider.credential = OAuth1Credential("tok", "sec")
        request = provider.authenticate(OutgoingRequest("GET", "https://api.example.test/x"), "any")
        assert request.headers["Authorization"].startswith("OAuth ")

    @pytest.mark.parametrize("credential,requirement", [
        (NoCredential(), AuthRequirement.OAUTH1),
        (OAuth2Credential("b"), AuthRequirement.OAUTH1),
        (NoCredential(), AuthRequirement.OAUTH2),
        (OAuth1Credential("t", "s"), AuthRequirement.OAUTH2),
        (NoCredential(), AuthRequirement.ANY),
    ])
    def test_unsatisfiable_requirement(self, credential, requirement):
        provider = CredentialProvider("k", "s", credential)
        request = OutgoingRequest("GET", "https://api.example.test/x")
        with pytest.raises(AuthConfigError):
            provider.authenticate(request, requirement)
        assert "Authorization" not in request.headers

    def test_signing_requires_consumer_keys(self):
        provider = CredentialProvider(None, None, OAuth1Credential("t", "s"))
        with pytest.raises(AuthConfigError):
            provider.authenticate(OutgoingRequest("GET", "https://api.example.test/x"), AuthRequirement.OAUTH1)

    def test_consumer_signature_has_no_token(self):
        provider = CredentialProvider("k", "s", nonce_factory=lambda: "n", clock=lambda: "1")
        request = OutgoingRequest("POST", "https://api.example.test/oauth/request_token")
        provider.authenticate(request, AuthRequirement.CONSUMER, oauth_params={"oauth_callback": "oob"})
        header = parse_oauth_header(request.headers["Authorization"])
        assert "oauth_token" not in header
        assert header["oauth_callback"] == "oob"

    def test_override_credential_wins(self):
        provider = CredentialProvider("k", "s", OAuth1Credential("current", "cs"))
        request = OutgoingRequest("POST", "https://api.example.test/oauth/access_token")
        provider.authenticate(request, AuthRequirement.OAUTH1, credential=OAuth1Credential("rt1", "rs1"),
                              oauth_params={"oauth_verifier": "123"})
        header = parse_oauth_header(request.headers["Authorization"])
        assert header["oauth_token"] == "rt1"
        assert header["oauth_verifier"] == "123"
        assert provider.credential.token == "current"

    def test_basic_authorization(self):
        provider = CredentialProvider("key one", "secret")
        expected = base64.b64encode(b"key%20one:secret").decode("ascii")
        assert provider.basic_authorization() == f"Basic {expected}"

    def test_rejects_unknown_credential_type(self):
        provider = CredentialProvider("k", "s")
        with pytest.raises(AuthConfigError):
            provider.credential = ("token", "secret")
