"""Request/response schemas for auth endpoints and token value objects."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from idhub.models.enums import Gender, UserRole


class RefreshToken(BaseModel):
    """Opaque refresh-token id and its fingerprint hash."""

    token: str
    hash: str


class AuthTokens(BaseModel):
    """Token pair issued on login or refresh."""

    auth_token: str
    refresh_token: RefreshToken
    user_uid: str
    is_new: bool = False


class ThirdPartyIdentity(BaseModel):
    """Normalized identity decoded from a Google or Facebook token."""

    provider: str
    subject: str
    email: str | None = None
    email_verified: bool = False
    first_name: str = ""
    last_name: str = ""
    picture_url: str | None = None


class LoginRequest(BaseModel):
    """Credentials for direct login."""

    username: str = Field(..., min_length=3, max_length=255, description="Email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")
    device_token: str | None = Field(default=None, alias="deviceToken", max_length=512)

    model_config = ConfigDict(populate_by_name=True)


class SocialLoginRequest(BaseModel):
    """Token issued by Google (ID token) or Facebook (access token)."""

    token: str = Field(..., min_length=1, max_length=8192)
    device_token: str | None = Field(default=None, alias="deviceToken", max_length=512)

    model_config = ConfigDict(populate_by_name=True)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., alias="refreshToken", min_length=1, max_length=64)

    model_config = ConfigDict(populate_by_name=True)


class LogoutRequest(BaseModel):
    refresh_token: str | None = Field(default=None, alias="refreshToken", max_length=64)

    model_config = ConfigDict(populate_by_name=True)


class RegistrationRequest(BaseModel):
    """Self-service registration of a private or legal person."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: UserRole = UserRole.PRIVATE
    first_name: str = Field(default="", alias="firstName", max_length=255)
    middle_name: str = Field(default="", alias="middleName", max_length=255)
    last_name: str = Field(default="", alias="lastName", max_length=255)
    legal_name: str = Field(default="", alias="legalName", max_length=255)
    short_name: str = Field(default="", alias="shortName", max_length=255)
    gender: Gender = Gender.UNSET

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: UserRole) -> UserRole:
        if v not in (UserRole.PRIVATE, UserRole.LEGAL):
            raise ValueError("Only PRIVATE or LEGAL accounts can self-register")
        return v


class RefreshTokenResponse(BaseModel):
    """Refresh token returned in the body; the access token travels in a cookie."""

    refresh_token: str = Field(..., serialization_alias="refreshToken")


class SocialLoginResponse(RefreshTokenResponse):
    is_new: bool = Field(..., serialization_alias="isNew")
