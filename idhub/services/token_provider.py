"""Issues and decodes access/refresh tokens; verifies Google and Facebook tokens."""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from typing import TYPE_CHECKING, Any

import google.auth.exceptions
import google.auth.transport.requests
import google.oauth2.id_token
import httpx
import jwt
import requests

from idhub.core.errors import AuthErrorCodes, ExternalVerificationError, UnauthorizedError
from idhub.core.security import create_access_token, decode_access_token
from idhub.schemas.auth import RefreshToken, ThirdPartyIdentity
from idhub.services.header_info import HeaderInfo

if TYPE_CHECKING:
    from idhub.core.config import Settings

logger = logging.getLogger(__name__)

# Bytes of randomness in an opaque refresh-token id.
REFRESH_TOKEN_BYTES = 32

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class TokenProvider:
    """Stateless token operations; safe to share across requests."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._google_session = requests.Session()

    def get_refresh_token_hash(self, token_id: str, header_info: HeaderInfo) -> str:
        """Keyed hash of the token id and the client fingerprint."""
        key = self.settings.JWT_SECRET.get_secret_value().encode("utf-8")
        message = f"{token_id}|{header_info.ip}|{header_info.user_agent}".encode("utf-8")
        return hmac.new(key, message, hashlib.sha256).hexdigest()

    def get_auth_token(self, user_uid: str) -> str:
        return create_access_token(user_uid)

    def get_refresh_token(self, header_info: HeaderInfo) -> RefreshToken:
        token = secrets.token_urlsafe(REFRESH_TOKEN_BYTES)
        return RefreshToken(token=token, hash=self.get_refresh_token_hash(token, header_info))

    def decode_auth_token(self, token: str) -> str:
        """Return the user uid carried by a valid access token."""
        try:
            payload = decode_access_token(token)
        except jwt.PyJWTError as e:
            logger.debug("Access token rejected: %s", e)
            raise UnauthorizedError(
                "Invalid or expired token", AuthErrorCodes.INVALID_ACCESS_TOKEN, "token"
            ) from e
        sub = payload.get("sub")
        if not sub or not isinstance(sub, str):
            raise UnauthorizedError(
                "Invalid token payload", AuthErrorCodes.INVALID_ACCESS_TOKEN, "token"
            )
        return sub

    def decode_google_token(self, token: str) -> ThirdPartyIdentity:
        """Verify a Google ID token against Google's public certificates."""
        if not self.settings.GOOGLE_CLIENT_ID:
            raise ExternalVerificationError(
                "Google login is not configured", AuthErrorCodes.GOOGLE_VERIFY_ERROR, "google"
            )
        request = google.auth.transport.requests.Request(session=self._google_session)
        try:
            idinfo = google.oauth2.id_token.verify_oauth2_token(
                token, request, self.settings.GOOGLE_CLIENT_ID
            )
        except (ValueError, google.auth.exceptions.GoogleAuthError) as e:
            logger.info("Google token verification failed: %s", e)
            raise ExternalVerificationError(
                "Google token verification failed", AuthErrorCodes.GOOGLE_VERIFY_ERROR, "google"
            ) from e
        if idinfo.get("iss") not in GOOGLE_ISSUERS or not idinfo.get("sub"):
            raise ExternalVerificationError(
                "Google token has an unexpected issuer", AuthErrorCodes.GOOGLE_VERIFY_ERROR, "google"
            )
        return ThirdPartyIdentity(
            provider="google",
            subject=str(idinfo["sub"]),
            email=idinfo.get("email"),
            email_verified=bool(idinfo.get("email_verified")),
            first_name=idinfo.get("given_name", ""),
            last_name=idinfo.get("family_name", ""),
            picture_url=idinfo.get("picture"),
        )

    def decode_facebook_token(self, token: str) -> ThirdPartyIdentity:
        """
        Introspect a Facebook user access token via the Graph API debug_token
        endpoint, then read the profile it was issued for.
        """
        app_id = self.settings.FACEBOOK_APP_ID
        app_secret = self.settings.FACEBOOK_APP_SECRET
        if not app_id or app_secret is None:
            raise ExternalVerificationError(
                "Facebook login is not configured", AuthErrorCodes.FACEBOOK_VERIFY_ERROR, "facebook"
            )
        base = self.settings.FACEBOOK_GRAPH_URL
        try:
            with httpx.Client(timeout=self.settings.OAUTH_REQUEST_TIMEOUT_SEC) as client:
                debug = client.get(
                    f"{base}/debug_token",
                    params={
                        "input_token": token,
                        "access_token": f"{app_id}|{app_secret.get_secret_value()}",
                    },
                )
                debug.raise_for_status()
                data: dict[str, Any] = debug.json().get("data", {})
                if not data.get("is_valid") or str(data.get("app_id")) != str(app_id):
                    raise ExternalVerificationError(
                        "Facebook token is invalid", AuthErrorCodes.FACEBOOK_VERIFY_ERROR, "facebook"
                    )
                me = client.get(
                    f"{base}/me",
                    params={"fields": "id,email,first_name,last_name,picture", "access_token": token},
                )
                me.raise_for_status()
                profile: dict[str, Any] = me.json()
        except (httpx.HTTPError, ValueError) as e:
            # ValueError covers Graph bodies that are not JSON
            logger.info("Facebook token verification failed: %s", e)
            raise ExternalVerificationError(
                "Facebook token verification failed", AuthErrorCodes.FACEBOOK_VERIFY_ERROR, "facebook"
            ) from e

        subject = profile.get("id") or data.get("user_id")
        if not subject:
            raise ExternalVerificationError(
                "Facebook token has no subject", AuthErrorCodes.FACEBOOK_VERIFY_ERROR, "facebook"
            )
        picture = (profile.get("picture") or {}).get("data", {}).get("url")
        return ThirdPartyIdentity(
            provider="facebook",
            subject=str(subject),
            email=profile.get("email"),
            email_verified=bool(profile.get("email")),
            first_name=profile.get("first_name", ""),
            last_name=profile.get("last_name", ""),
            picture_url=picture,
        )
