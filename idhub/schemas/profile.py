"""Schemas for profiles (user + person + details) and session read-models."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from idhub.models.enums import Gender, Language, UserRole, UserSystemStatus


class PersonUpdate(BaseModel):
    """Editable identity fields of a person."""

    first_name: str = Field(default="", alias="firstName", max_length=255)
    middle_name: str = Field(default="", alias="middleName", max_length=255)
    last_name: str = Field(default="", alias="lastName", max_length=255)
    job_title: str = Field(default="", alias="jobTitle", max_length=255)
    legal_name: str = Field(default="", alias="legalName", max_length=255)
    short_name: str = Field(default="", alias="shortName", max_length=255)
    birthday_at: date | None = Field(default=None, alias="birthdayAt")
    gender: Gender = Gender.UNSET
    bio: str = Field(default="", max_length=4000)
    avatar: str | None = Field(default=None, max_length=36)

    model_config = ConfigDict(populate_by_name=True)


class ProfileCreate(PersonUpdate):
    """Everything needed to create a profile (native or social)."""

    username: str = Field(..., min_length=3, max_length=255)
    email: EmailStr
    password: str | None = Field(default=None, min_length=8, max_length=128)
    role: UserRole = UserRole.PRIVATE
    phone: str = Field(default="", max_length=32)
    email_confirmed: bool = Field(default=False, alias="emailConfirmed")
    is_legal_person: bool = Field(default=False, alias="isLegalPerson")


class UserDetailsUpdate(BaseModel):
    language: Language | None = None
    notify_about_new_poll: bool | None = Field(default=None, alias="notifyAboutNewPoll")

    model_config = ConfigDict(populate_by_name=True)


class EmailUpdate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class PhoneUpdate(BaseModel):
    phone: str = Field(..., min_length=5, max_length=32, pattern=r"^\+?[0-9]{5,31}$")


class PasswordUpdate(BaseModel):
    password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., alias="newPassword", min_length=8, max_length=128)

    model_config = ConfigDict(populate_by_name=True)


class AdminPasswordUpdate(BaseModel):
    new_password: str = Field(..., alias="newPassword", min_length=8, max_length=128)

    model_config = ConfigDict(populate_by_name=True)


class ResetPasswordRequest(BaseModel):
    email: EmailStr


class SetNewPasswordRequest(BaseModel):
    password_restoration_code: str = Field(
        ..., alias="passwordRestorationCode", min_length=1, max_length=128
    )
    new_password: str = Field(..., alias="newPassword", min_length=8, max_length=128)

    model_config = ConfigDict(populate_by_name=True)


class SystemStatusUpdate(BaseModel):
    system_status: UserSystemStatus = Field(..., alias="systemStatus")

    model_config = ConfigDict(populate_by_name=True)


class ProfileDTO(BaseModel):
    """Full profile as returned to its owner or an administrator."""

    uid: str
    username: str
    role: UserRole
    system_status: UserSystemStatus = Field(..., serialization_alias="systemStatus")
    email: str | None = None
    first_name: str = Field(default="", serialization_alias="firstName")
    middle_name: str = Field(default="", serialization_alias="middleName")
    last_name: str = Field(default="", serialization_alias="lastName")
    job_title: str = Field(default="", serialization_alias="jobTitle")
    legal_name: str = Field(default="", serialization_alias="legalName")
    short_name: str = Field(default="", serialization_alias="shortName")
    phone: str = ""
    birthday_at: date | None = Field(default=None, serialization_alias="birthdayAt")
    gender: Gender = Gender.UNSET
    bio: str = ""
    avatar: str | None = None
    email_confirmed: bool = Field(default=False, serialization_alias="emailConfirmed")
    phone_confirmed: bool = Field(default=False, serialization_alias="phoneConfirmed")
    language: Language = Language.UA
    notify_about_new_poll: bool = Field(default=False, serialization_alias="notifyAboutNewPoll")


class ProfileListItem(BaseModel):
    uid: str
    username: str
    role: UserRole
    system_status: UserSystemStatus = Field(..., serialization_alias="systemStatus")
    email: str | None = None
    first_name: str = Field(default="", serialization_alias="firstName")
    last_name: str = Field(default="", serialization_alias="lastName")
    legal_name: str = Field(default="", serialization_alias="legalName")


class PaginationMetadata(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class PagedProfiles(BaseModel):
    metadata: PaginationMetadata
    list: list[ProfileListItem]


class NotificationAuthData(BaseModel):
    """Latest session carrying a device token, for push-notification fan-out."""

    user_uid: str = Field(..., serialization_alias="userUid")
    username: str
    device_token: str = Field(..., serialization_alias="deviceToken")
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")
