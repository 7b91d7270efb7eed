"""Closed value sets shared by ORM models, schemas and services."""

from enum import StrEnum


class UserRole(StrEnum):
    ADMINISTRATOR = "ADMINISTRATOR"
    MODERATOR = "MODERATOR"
    JOURNALIST = "JOURNALIST"
    PRIVATE = "PRIVATE"
    LEGAL = "LEGAL"
    ANONYMOUS = "ANONYMOUS"
    DELETED = "DELETED"


class UserSystemStatus(StrEnum):
    ACTIVE = "ACTIVE"
    LIMITED = "LIMITED"
    SUSPENDED = "SUSPENDED"
    BANNED = "BANNED"


class Gender(StrEnum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    UNSET = "UNSET"


class Language(StrEnum):
    UA = "UA"
    EN = "EN"
    RU = "RU"
