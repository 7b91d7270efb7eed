"""Tests for token issuing, fingerprint hashing and third-party token verification."""

import json
import unittest
from unittest.mock import MagicMock, patch

import google.auth.exceptions
import httpx
import jwt
from pydantic import SecretStr

from idhub.core.config import get_settings
from idhub.core.errors import AuthErrorCodes, ExternalVerificationError, UnauthorizedError
from idhub.services.token_provider import TokenProvider
from support import header


def _provider(**overrides) -> TokenProvider:
    return TokenProvider(get_settings().model_copy(update=overrides))


class TestAccessAndRefreshTokens(unittest.TestCase):
    def setUp(self) -> None:
        self.provider = _provider()

    def test_access_token_round_trip(self) -> None:
        token = self.provider.get_auth_token("user-1")
        self.assertEqual(self.provider.decode_auth_token(token), "user-1")

    def test_foreign_signature_rejected(self) -> None:
        token = jwt.encode(
            {"sub": "user-1"}, "some-other-secret-of-sufficient-length", algorithm="HS256"
        )
        with self.assertRaises(UnauthorizedError) as ctx:
            self.provider.decode_auth_token(token)
        self.assertEqual(ctx.exception.code, AuthErrorCodes.INVALID_ACCESS_TOKEN)

    def test_refresh_tokens_are_unique(self) -> None:
        info = header()
        first = self.provider.get_refresh_token(info)
        second = self.provider.get_refresh_token(info)
        self.assertNotEqual(first.token, second.token)
        self.assertEqual(first.hash, self.provider.get_refresh_token_hash(first.token, info))

    def test_hash_is_bound_to_ip_and_user_agent(self) -> None:
        base = self.provider.get_refresh_token_hash("tok", header())
        self.assertEqual(base, self.provider.get_refresh_token_hash("tok", header()))
        self.assertNotEqual(base, self.provider.get_refresh_token_hash("tok", header(ip="10.9.9.9")))
        self.assertNotEqual(
            base, self.provider.get_refresh_token_hash("tok", header(user_agent="curl/8.0"))
        )
        self.assertNotEqual(base, self.provider.get_refresh_token_hash("tok2", header()))


class TestGoogleVerification(unittest.TestCase):
    def test_not_configured(self) -> None:
        provider = _provider(GOOGLE_CLIENT_ID=None)
        with self.assertRaises(ExternalVerificationError) as ctx:
            provider.decode_google_token("id-token")
        self.assertEqual(ctx.exception.code, AuthErrorCodes.GOOGLE_VERIFY_ERROR)

    @patch("google.oauth2.id_token.verify_oauth2_token")
    def test_valid_token(self, verify: MagicMock) -> None:
        verify.return_value = {
            "iss": "https://accounts.google.com",
            "sub": "1234567890",
            "email": "gina@acme.io",
            "email_verified": True,
            "given_name": "Gina",
            "family_name": "Gee",
        }
        identity = _provider(GOOGLE_CLIENT_ID="client-id").decode_google_token("id-token")
        self.assertEqual(identity.provider, "google")
        self.assertEqual(identity.subject, "1234567890")
        self.assertTrue(identity.email_verified)
        self.assertEqual(identity.first_name, "Gina")
        self.assertEqual(verify.call_args.args[2], "client-id")

    @patch("google.oauth2.id_token.verify_oauth2_token")
    def test_rejected_token(self, verify: MagicMock) -> None:
        verify.side_effect = ValueError("Token expired")
        with self.assertRaises(ExternalVerificationError):
            _provider(GOOGLE_CLIENT_ID="client-id").decode_google_token("id-token")

    @patch("google.oauth2.id_token.verify_token")
    def test_wrong_issuer(self, verify: MagicMock) -> None:
        verify.return_value = {"iss": "evil.example", "sub": "1", "aud": "client-id"}
        with self.assertRaises(ExternalVerificationError) as ctx:
            _provider(GOOGLE_CLIENT_ID="client-id").decode_google_token("id-token")
        self.assertEqual(ctx.exception.code, AuthErrorCodes.GOOGLE_VERIFY_ERROR)

    @patch("google.oauth2.id_token.verify_token")
    def test_certificate_fetch_failure(self, verify: MagicMock) -> None:
        verify.side_effect = google.auth.exceptions.TransportError("certs unavailable")
        with self.assertRaises(ExternalVerificationError) as ctx:
            _provider(GOOGLE_CLIENT_ID="client-id").decode_google_token("id-token")
        self.assertEqual(ctx.exception.code, AuthErrorCodes.GOOGLE_VERIFY_ERROR)


class TestFacebookVerification(unittest.TestCase):
    def setUp(self) -> None:
        self.provider = _provider(FACEBOOK_APP_ID="app-1", FACEBOOK_APP_SECRET=SecretStr("s3cret"))

    def _response(self, payload: dict) -> MagicMock:
        response = MagicMock()
        response.json.return_value = payload
        return response

    @patch("httpx.Client")
    def test_valid_token(self, client_cls: MagicMock) -> None:
        client = client_cls.return_value.__enter__.return_value
        client.get.side_effect = [
            self._response({"data": {"is_valid": True, "app_id": "app-1", "user_id": "42"}}),
            self._response({"id": "42", "email": "fred@acme.io", "first_name": "Fred"}),
        ]
        identity = self.provider.decode_facebook_token("access-token")
        self.assertEqual(identity.provider, "facebook")
        self.assertEqual(identity.subject, "42")
        self.assertEqual(identity.email, "fred@acme.io")
        debug_params = client.get.call_args_list[0].kwargs["params"]
        self.assertEqual(debug_params["access_token"], "app-1|s3cret")

    @patch("httpx.Client")
    def test_token_for_other_app(self, client_cls: MagicMock) -> None:
        client = client_cls.return_value.__enter__.return_value
        client.get.return_value = self._response(
            {"data": {"is_valid": True, "app_id": "other-app", "user_id": "42"}}
        )
        with self.assertRaises(ExternalVerificationError) as ctx:
            self.provider.decode_facebook_token("access-token")
        self.assertEqual(ctx.exception.code, AuthErrorCodes.FACEBOOK_VERIFY_ERROR)

    @patch("httpx.Client")
    def test_network_failure(self, client_cls: MagicMock) -> None:
        client = client_cls.return_value.__enter__.return_value
        client.get.side_effect = httpx.ConnectError("connection refused")
        with self.assertRaises(ExternalVerificationError):
            self.provider.decode_facebook_token("access-token")

    @patch("httpx.Client")
    def test_body_that_is_not_json(self, client_cls: MagicMock) -> None:
        client = client_cls.return_value.__enter__.return_value
        response = MagicMock()
        response.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)
        client.get.return_value = response
        with self.assertRaises(ExternalVerificationError) as ctx:
            self.provider.decode_facebook_token("access-token")
        self.assertEqual(ctx.exception.code, AuthErrorCodes.FACEBOOK_VERIFY_ERROR)

    def test_not_configured(self) -> None:
        with self.assertRaises(ExternalVerificationError):
            _provider(FACEBOOK_APP_ID=None).decode_facebook_token("access-token")


if __name__ == "__main__":
    unittest.main()
