"""Service-level failures with stable codes for client error handling.

Every failure carries a machine-readable ``code`` and a ``source`` tag naming
the flow or field that triggered it. The HTTP layer renders them verbatim.
"""

from enum import StrEnum


class AuthErrorCodes(StrEnum):
    DONT_MATCH_ERROR = "DONT_MATCH_ERROR"
    NO_ACCESS_TOKEN = "NO_ACCESS_TOKEN"
    INVALID_ACCESS_TOKEN = "INVALID_ACCESS_TOKEN"
    REFRESH_TOKEN_NOT_FOUND = "REFRESH_TOKEN_NOT_FOUND"
    REFRESH_TOKEN_EXPIRED = "REFRESH_TOKEN_EXPIRED"
    GOOGLE_VERIFY_ERROR = "GOOGLE_VERIFY_ERROR"
    FACEBOOK_VERIFY_ERROR = "FACEBOOK_VERIFY_ERROR"


class ForbiddenErrorCodes(StrEnum):
    USER_BANNED = "USER_BANNED"
    EMAIL_IS_NOT_CONFIRMED = "EMAIL_IS_NOT_CONFIRMED"
    NO_EMAIL_ON_FACEBOOK = "NO_EMAIL_ON_FACEBOOK"
    ACCESS_DENIED = "ACCESS_DENIED"


class ConflictErrorCodes(StrEnum):
    EXIST_ERROR = "EXIST_ERROR"


class NotFoundErrorCodes(StrEnum):
    ENTITY_NOT_FOUND_ERROR = "ENTITY_NOT_FOUND_ERROR"


class ValidationErrorCodes(StrEnum):
    FIELD_REQUIRED_VALIDATION_ERROR = "FIELD_REQUIRED_VALIDATION_ERROR"
    TOO_MANY_RESENDING_CODE_ERROR = "TOO_MANY_RESENDING_CODE_ERROR"
    CONFIRMATION_CODE_ERROR = "CONFIRMATION_CODE_ERROR"


class ServiceError(Exception):
    """Base class for failures that map to a client-facing HTTP status."""

    status_code = 500

    def __init__(self, message: str, code: str | None = None, source: str | None = None) -> None:
        self.message = message
        self.code = code
        self.source = source
        super().__init__(message)

    def to_dict(self) -> dict[str, str | None]:
        return {"message": self.message, "code": self.code, "source": self.source}


class ValidationError(ServiceError):
    """Bad or missing input."""

    status_code = 400


class UnauthorizedError(ServiceError):
    """Bad credentials or an invalid, expired or mismatched token."""

    status_code = 401


class ExternalVerificationError(UnauthorizedError):
    """A Google or Facebook token was rejected by its issuer."""


class ForbiddenError(ServiceError):
    """Authenticated but not allowed (banned user, unverified third-party email)."""

    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    """Entity already exists (e.g. duplicate email)."""

    status_code = 409
