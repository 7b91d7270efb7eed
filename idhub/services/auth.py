"""Authentication flows: registration, login, third-party login, refresh, logout.

Session token lifecycle: issued on login, rotated on refresh (the presented
refresh token is always consumed), dropped on logout, eviction or expiry.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from idhub.core.acs import GrandAccessACS
from idhub.core.errors import (
    AuthErrorCodes,
    ConflictError,
    ForbiddenError,
    ForbiddenErrorCodes,
    UnauthorizedError,
)
from idhub.core.security import verify_password
from idhub.models import User
from idhub.models.base import as_utc, utcnow
from idhub.models.enums import Language, UserRole, UserSystemStatus
from idhub.schemas.auth import AuthTokens, ThirdPartyIdentity
from idhub.schemas.profile import ProfileCreate
from idhub.services import profiles, sessions, users
from idhub.services.header_info import HeaderInfo
from idhub.services.token_provider import TokenProvider

if TYPE_CHECKING:
    from idhub.core.config import Settings

logger = logging.getLogger(__name__)


class AuthService:
    """Orchestrates the token provider, the session store and the profile service."""

    def __init__(self, token_provider: TokenProvider, settings: Settings) -> None:
        self.token_provider = token_provider
        self.settings = settings

    def verify_user_system_status(self, user: User | None) -> None:
        if user is not None and user.system_status == UserSystemStatus.BANNED:
            logger.info("Login rejected for banned user %s", user.username)
            raise ForbiddenError("User banned", ForbiddenErrorCodes.USER_BANNED, "system-status")

    def verify_username_password(
        self, username: str, password: str, user: User | None, source: str
    ) -> None:
        if user is None or not verify_password(password, user.password):
            logger.info("Username/password mismatch for %s (%s)", username, source)
            raise UnauthorizedError(
                "Username/password don't match", AuthErrorCodes.DONT_MATCH_ERROR, source
            )

    def register_user(
        self, db: Session, profile: ProfileCreate, language: Language = Language.UA
    ) -> str:
        logger.debug("auth.service.register.start for %s", profile.username)
        user_uid = profiles.create_profile(db, profile, GrandAccessACS(), language)
        logger.debug("auth.service.register.done for %s", profile.username)
        return user_uid

    def login(
        self,
        db: Session,
        username: str,
        password: str,
        header_info: HeaderInfo,
        device_token: str | None = None,
    ) -> AuthTokens:
        logger.debug("auth.service.login.start for %s", username)
        user = users.find_by_username(db, username)
        self.verify_user_system_status(user)
        self.verify_username_password(username, password, user, "login")
        tokens = self._create_auth_tokens(db, user, header_info, device_token)
        logger.debug("auth.service.login.done for %s", username)
        return tokens

    def login_google(
        self,
        db: Session,
        token: str,
        header_info: HeaderInfo,
        language: Language = Language.UA,
        device_token: str | None = None,
    ) -> AuthTokens:
        logger.debug("auth.service.login-google.start")
        identity = self.token_provider.decode_google_token(token)
        if not identity.email_verified or not identity.email:
            raise ForbiddenError(
                "Google email is not verified",
                ForbiddenErrorCodes.EMAIL_IS_NOT_CONFIRMED,
                "google",
            )
        user = users.find_by_google_id(db, identity.subject)
        tokens = self._login_social(
            db, user, identity, users.create_google_username, header_info, language, device_token
        )
        logger.debug("auth.service.login-google.done")
        return tokens

    def login_facebook(
        self,
        db: Session,
        token: str,
        header_info: HeaderInfo,
        language: Language = Language.UA,
        device_token: str | None = None,
    ) -> AuthTokens:
        logger.debug("auth.service.login-facebook.start")
        identity = self.token_provider.decode_facebook_token(token)
        if not identity.email:
            raise ForbiddenError(
                "Facebook's email is empty",
                ForbiddenErrorCodes.NO_EMAIL_ON_FACEBOOK,
                "facebook",
            )
        user = users.find_by_facebook_id(db, identity.subject)
        tokens = self._login_social(
            db, user, identity, users.create_facebook_username, header_info, language, device_token
        )
        logger.debug("auth.service.login-facebook.done")
        return tokens

    def refresh_auth_tokens(
        self, db: Session, refresh_token: str, header_info: HeaderInfo
    ) -> AuthTokens:
        """
        Rotate a refresh token. The presented token is deleted before the age
        check, so an expired token is consumed even though the call fails.
        """
        logger.debug("auth.service.refresh.start")
        auth_data = sessions.get(db, refresh_token)
        expected_hash = self.token_provider.get_refresh_token_hash(refresh_token, header_info)
        if auth_data is None or auth_data.refresh_token_hash != expected_hash:
            logger.info("Refresh rejected: unknown token or fingerprint mismatch")
            raise UnauthorizedError(
                "Not found", AuthErrorCodes.REFRESH_TOKEN_NOT_FOUND, "token"
            )

        username = auth_data.username
        device_token = auth_data.device_token
        age_days = (utcnow() - as_utc(auth_data.created_at)).days
        sessions.delete(db, refresh_token)

        user = users.find_by_username(db, username)
        if user is None or age_days > self.settings.REFRESH_TOKEN_EXPIRE_DAYS:
            db.commit()
            if user is None:
                raise UnauthorizedError(
                    "User not found", AuthErrorCodes.REFRESH_TOKEN_NOT_FOUND, "token"
                )
            logger.info("Refresh token of %s expired after %s days", username, age_days)
            raise UnauthorizedError(
                "RefreshToken has expired", AuthErrorCodes.REFRESH_TOKEN_EXPIRED, "token"
            )

        tokens = self._get_tokens(user.uid, header_info)
        sessions.save_refresh_token(
            db,
            token_id=tokens.refresh_token.token,
            username=username,
            refresh_token_hash=tokens.refresh_token.hash,
            header_info=header_info,
            device_token=device_token,
        )
        db.commit()
        logger.debug("auth.service.refresh.done")
        return tokens

    def validate_access_token(self, db: Session, auth_token: str | None) -> User:
        if not auth_token:
            raise UnauthorizedError("No auth token", AuthErrorCodes.NO_ACCESS_TOKEN, "token")
        user_uid = self.token_provider.decode_auth_token(auth_token)
        user = users.get_user(db, user_uid, GrandAccessACS())
        if user is None:
            logger.warning("Access token for missing user %s", user_uid)
            raise UnauthorizedError(
                "Incorrect access token", AuthErrorCodes.INVALID_ACCESS_TOKEN, "token"
            )
        return user

    def logout(self, db: Session, refresh_token: str | None) -> None:
        """Revoke the presented session, if any. Cookie clearing is the caller's job."""
        if not refresh_token:
            return
        if sessions.delete(db, refresh_token):
            db.commit()

    def _login_social(
        self,
        db: Session,
        user: User | None,
        identity: ThirdPartyIdentity,
        make_username,
        header_info: HeaderInfo,
        language: Language,
        device_token: str | None,
    ) -> AuthTokens:
        self.verify_user_system_status(user)
        is_new = False
        if user is None:
            profile = ProfileCreate(
                username=make_username(identity.subject),
                email=identity.email,
                role=UserRole.PRIVATE,
                first_name=identity.first_name,
                last_name=identity.last_name,
                email_confirmed=identity.email_verified and identity.provider == "google",
            )
            try:
                profiles.create_profile(db, profile, GrandAccessACS(), language)
            except ConflictError as e:
                e.source = identity.provider
                raise
            user = users.find_by_username(db, profile.username)
            is_new = True
            logger.info("Provisioned %s account %s", identity.provider, profile.username)
        tokens = self._create_auth_tokens(db, user, header_info, device_token)
        tokens.is_new = is_new
        return tokens

    def _create_auth_tokens(
        self,
        db: Session,
        user: User,
        header_info: HeaderInfo,
        device_token: str | None = None,
    ) -> AuthTokens:
        tokens = self._get_tokens(user.uid, header_info)
        sessions.drop_exceeding_sessions_if_any(
            db, user.username, self.settings.MAX_SESSION_COUNT
        )
        if device_token:
            sessions.drop_device_token_if_any(db, device_token)
        sessions.save_refresh_token(
            db,
            token_id=tokens.refresh_token.token,
            username=user.username,
            refresh_token_hash=tokens.refresh_token.hash,
            header_info=header_info,
            device_token=device_token,
        )
        db.commit()
        return tokens

    def _get_tokens(self, user_uid: str, header_info: HeaderInfo) -> AuthTokens:
        return AuthTokens(
            auth_token=self.token_provider.get_auth_token(user_uid),
            refresh_token=self.token_provider.get_refresh_token(header_info),
            user_uid=user_uid,
        )
