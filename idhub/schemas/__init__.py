"""Pydantic request/response schemas."""

from idhub.schemas.auth import (
    AuthTokens,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RefreshToken,
    RefreshTokenResponse,
    RegistrationRequest,
    SocialLoginRequest,
    SocialLoginResponse,
    ThirdPartyIdentity,
)
from idhub.schemas.health import HealthResponse
from idhub.schemas.profile import (
    NotificationAuthData,
    PagedProfiles,
    PersonUpdate,
    ProfileCreate,
    ProfileDTO,
    ProfileListItem,
    UserDetailsUpdate,
)

__all__ = [
    "AuthTokens",
    "HealthResponse",
    "LoginRequest",
    "LogoutRequest",
    "NotificationAuthData",
    "PagedProfiles",
    "PersonUpdate",
    "ProfileCreate",
    "ProfileDTO",
    "ProfileListItem",
    "RefreshRequest",
    "RefreshToken",
    "RefreshTokenResponse",
    "RegistrationRequest",
    "SocialLoginRequest",
    "SocialLoginResponse",
    "ThirdPartyIdentity",
    "UserDetailsUpdate",
]
