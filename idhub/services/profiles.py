"""Profile (user + person + details) lifecycle.

Every function takes the request's Session; mutating functions commit their
own unit of work. Non-public operations take an ACS and filter on users.uid.
"""

from __future__ import annotations

import logging
import math
import secrets
from datetime import timedelta
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from idhub.core.acs import ACS
from idhub.core.errors import (
    ConflictError,
    ConflictErrorCodes,
    ForbiddenError,
    ForbiddenErrorCodes,
    NotFoundError,
    NotFoundErrorCodes,
    ValidationError,
    ValidationErrorCodes,
)
from idhub.core.security import hash_password
from idhub.models import Person, User, UserDetails
from idhub.models.base import as_utc, utcnow
from idhub.models.enums import Gender, Language, UserRole, UserSystemStatus
from idhub.schemas.profile import (
    PagedProfiles,
    PaginationMetadata,
    PersonUpdate,
    ProfileCreate,
    ProfileDTO,
    ProfileListItem,
    UserDetailsUpdate,
)
from idhub.services import sessions
from idhub.services.system_status import refresh_system_status
from idhub.services.users import is_social_username

if TYPE_CHECKING:
    from idhub.core.config import Settings

logger = logging.getLogger(__name__)

MAX_PAGE_LIMIT = 100


def _confirmation_code() -> str:
    return secrets.token_urlsafe(32)


def _phone_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def _person_email_taken(db: Session, email: str, except_person_uid: str | None = None) -> bool:
    query = db.query(Person).filter(Person.email == email, Person.deleted_at.is_(None))
    if except_person_uid:
        query = query.filter(Person.uid != except_person_uid)
    return query.first() is not None


def _get_covered_user(db: Session, username: str, acs: ACS, source: str) -> User:
    user = (
        db.query(User)
        .filter(
            User.username == username,
            User.deleted_at.is_(None),
            acs.to_sql(User.uid),
        )
        .first()
    )
    if user is None:
        raise NotFoundError(
            f"Not found [profile] entity for {source}",
            NotFoundErrorCodes.ENTITY_NOT_FOUND_ERROR,
            source,
        )
    return user


def _commit_or_conflict(db: Session, source: str) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Unique constraint violated in %s: %s", source, e.orig)
        raise ConflictError(
            "Email is already exists", ConflictErrorCodes.EXIST_ERROR, source
        ) from e


def to_profile_dto(user: User) -> ProfileDTO:
    person = user.person
    details = user.details
    return ProfileDTO(
        uid=user.uid,
        username=user.username,
        role=user.role,
        system_status=user.system_status,
        email=person.email,
        first_name=person.first_name,
        middle_name=person.middle_name,
        last_name=person.last_name,
        job_title=person.job_title,
        legal_name=person.legal_name,
        short_name=person.short_name,
        phone=person.phone,
        birthday_at=person.birthday_at,
        gender=person.gender,
        bio=person.bio,
        avatar=person.avatar,
        email_confirmed=bool(details and details.email_confirmed),
        phone_confirmed=bool(details and details.phone_confirmed),
        language=details.language if details else Language.UA,
        notify_about_new_poll=bool(details and details.notify_about_new_poll),
    )


def create_profile(
    db: Session,
    profile: ProfileCreate,
    acs: ACS,
    language: Language = Language.UA,
) -> str:
    """Create person, user and details rows; return the new user uid."""
    logger.debug("profile.service.create.start for %s", profile.username)
    if not acs.full_access:
        raise ForbiddenError(
            "Not allowed to create profiles", ForbiddenErrorCodes.ACCESS_DENIED, "profile"
        )
    if _person_email_taken(db, profile.email):
        logger.info("Registration rejected: %s already exists", profile.email)
        raise ConflictError(
            f"User with email {profile.email} already exists",
            ConflictErrorCodes.EXIST_ERROR,
            "email",
        )

    person = Person(
        email=profile.email,
        first_name=profile.first_name,
        middle_name=profile.middle_name,
        last_name=profile.last_name,
        job_title=profile.job_title,
        legal_name=profile.legal_name,
        short_name=profile.short_name,
        phone=profile.phone,
        birthday_at=profile.birthday_at,
        gender=profile.gender,
        bio=profile.bio,
        avatar=profile.avatar,
        is_legal_person=profile.is_legal_person or profile.role == UserRole.LEGAL,
    )
    db.add(person)
    try:
        db.flush()
        user = User(
            username=profile.username,
            password=hash_password(profile.password) if profile.password else None,
            role=profile.role,
            person_uid=person.uid,
        )
        db.add(user)
        db.flush()
        details = UserDetails(
            uid=user.uid,
            email_confirmed=profile.email_confirmed,
            email_confirmation_code=None if profile.email_confirmed else _confirmation_code(),
            language=language,
        )
        db.add(details)
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(
            f"User with email {profile.email} already exists",
            ConflictErrorCodes.EXIST_ERROR,
            "email",
        ) from e

    user.person = person
    user.details = details
    refresh_system_status(user)
    _commit_or_conflict(db, "email")
    if details.email_confirmation_code:
        logger.info("Email confirmation code issued for %s", user.username)
    logger.debug("profile.service.create.done for %s", user.username)
    return user.uid


def get_profile_by_email(db: Session, email: str, acs: ACS) -> ProfileDTO | None:
    user = (
        db.query(User)
        .join(Person, User.person_uid == Person.uid)
        .filter(
            Person.email == email,
            Person.deleted_at.is_(None),
            User.deleted_at.is_(None),
            acs.to_sql(User.uid),
        )
        .first()
    )
    return to_profile_dto(user) if user else None


def get_my_profile(db: Session, user_uid: str) -> User:
    user = db.query(User).filter(User.uid == user_uid, User.deleted_at.is_(None)).first()
    if user is None:
        raise NotFoundError(
            "Profile not found", NotFoundErrorCodes.ENTITY_NOT_FOUND_ERROR, "my-profile"
        )
    return user


def list_profiles(db: Session, acs: ACS, page: int = 1, limit: int = 20) -> PagedProfiles:
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_LIMIT)
    query = (
        db.query(User)
        .join(Person, User.person_uid == Person.uid)
        .filter(User.deleted_at.is_(None), acs.to_sql(User.uid))
    )
    total = query.count()
    users = query.order_by(User.created_at, User.uid).offset((page - 1) * limit).limit(limit).all()
    return PagedProfiles(
        metadata=PaginationMetadata(
            page=page, limit=limit, total=total, pages=math.ceil(total / limit) if total else 0
        ),
        list=[
            ProfileListItem(
                uid=u.uid,
                username=u.username,
                role=u.role,
                system_status=u.system_status,
                email=u.person.email,
                first_name=u.person.first_name,
                last_name=u.person.last_name,
                legal_name=u.person.legal_name,
            )
            for u in users
        ],
    )


def delete_profile(db: Session, username: str, acs: ACS) -> None:
    """
    Soft-delete a profile: sessions go away, PII is cleared, the row stays.

    The username is released so the email can register again.
    """
    user = _get_covered_user(db, username, acs, "delete-profile")
    now = utcnow()
    sessions.delete_by_username(db, user.username)

    person = user.person
    person.avatar = None
    person.is_legal_person = False
    person.first_name = ""
    person.middle_name = ""
    person.last_name = ""
    person.job_title = ""
    person.legal_name = ""
    person.short_name = ""
    person.phone = ""
    person.birthday_at = None
    person.gender = Gender.UNSET
    person.bio = ""
    person.deleted_at = now

    user.username = f"{user.uid}@deleted"
    user.password = None
    user.role = UserRole.DELETED
    user.deleted_at = now
    if user.details is not None:
        db.delete(user.details)
    db.commit()
    logger.info("Profile %s deleted", username)


def confirm_email(db: Session, code: str) -> str:
    details = (
        db.query(UserDetails).filter(UserDetails.email_confirmation_code == code).first()
    )
    if details is None:
        raise ValidationError(
            "Email confirmation code is not valid",
            ValidationErrorCodes.CONFIRMATION_CODE_ERROR,
            "email-confirmation",
        )
    details.email_confirmed = True
    details.email_confirmation_code = None
    user = db.query(User).filter(User.uid == details.uid).one()
    refresh_system_status(user)
    db.commit()
    return user.uid


def confirm_phone(db: Session, username: str, code: str, acs: ACS) -> None:
    user = _get_covered_user(db, username, acs, "phone-confirmation")
    details = user.details
    if details is None or not details.phone_confirmation_code or details.phone_confirmation_code != code:
        raise ValidationError(
            "Phone confirmation code is not valid",
            ValidationErrorCodes.CONFIRMATION_CODE_ERROR,
            "phone-confirmation",
        )
    details.phone_confirmed = True
    details.phone_confirmation_code = None
    refresh_system_status(user)
    db.commit()


def update_own_email(db: Session, user: User, new_email: str, acs: ACS) -> str:
    """Move user to new_email; all sessions of the old username are dropped."""
    user = _get_covered_user(db, user.username, acs, "profile")
    if _person_email_taken(db, new_email, except_person_uid=user.person_uid):
        raise ConflictError("Email is already exists", ConflictErrorCodes.EXIST_ERROR, "profile")

    sessions.delete_by_username(db, user.username)
    if not is_social_username(user.username):
        user.username = new_email
    user.person.email = new_email
    code = _confirmation_code()
    user.details.email_confirmed = False
    user.details.email_confirmation_code = code
    refresh_system_status(user)
    _commit_or_conflict(db, "profile")
    logger.info("Email confirmation code issued for %s", user.username)
    return code


def update_own_phone(db: Session, user: User, new_phone: str, acs: ACS) -> str:
    user = _get_covered_user(db, user.username, acs, "profile")
    code = _phone_code()
    user.person.phone = new_phone
    user.details.phone_confirmed = False
    user.details.phone_confirmation_code = code
    refresh_system_status(user)
    db.commit()
    logger.info("Phone confirmation code issued for %s", user.username)
    return code


def update_person_by_username(db: Session, username: str, update: PersonUpdate, acs: ACS) -> None:
    user = _get_covered_user(db, username, acs, "update-person")
    person = user.person
    for field in PersonUpdate.model_fields:
        setattr(person, field, getattr(update, field))
    refresh_system_status(user)
    db.commit()


def update_details_by_username(
    db: Session, username: str, update: UserDetailsUpdate, acs: ACS
) -> None:
    user = _get_covered_user(db, username, acs, "user-details")
    if update.language is not None:
        user.details.language = update.language
    if update.notify_about_new_poll is not None:
        user.details.notify_about_new_poll = update.notify_about_new_poll
    db.commit()


def update_password(db: Session, username: str, new_password: str, acs: ACS) -> None:
    user = _get_covered_user(db, username, acs, "update-password")
    user.password = hash_password(new_password)
    db.commit()


def update_system_status(
    db: Session, username: str, status: UserSystemStatus, acs: ACS
) -> None:
    """Moderation override (ban, unban) of a user's system status."""
    user = _get_covered_user(db, username, acs, "moderation")
    user.system_status = status
    if status != UserSystemStatus.BANNED:
        refresh_system_status(user)
    db.commit()
    logger.info("System status of %s set to %s", username, user.system_status)


def reset_password(db: Session, email: str, settings: Settings) -> str:
    """Issue a password restoration code for the account owning email."""
    user = (
        db.query(User)
        .join(Person, User.person_uid == Person.uid)
        .filter(Person.email == email, Person.deleted_at.is_(None), User.deleted_at.is_(None))
        .first()
    )
    if user is None or user.details is None:
        raise NotFoundError(
            "User is not found", NotFoundErrorCodes.ENTITY_NOT_FOUND_ERROR, "my-profile"
        )
    details = user.details
    now = utcnow()
    issued = details.password_restoration_code_created_at
    if issued is not None and now - as_utc(issued) < timedelta(
        seconds=settings.PASSWORD_RESET_RESEND_SECONDS
    ):
        raise ValidationError(
            "Too many re-sending password code requests",
            ValidationErrorCodes.TOO_MANY_RESENDING_CODE_ERROR,
            "profile",
        )
    code = _confirmation_code()
    details.password_restoration_code = code
    details.password_restoration_code_created_at = now
    db.commit()
    logger.info("Password restoration code issued for %s", user.username)
    return code


def set_new_password(db: Session, code: str, new_password: str, settings: Settings) -> None:
    details = (
        db.query(UserDetails).filter(UserDetails.password_restoration_code == code).first()
    )
    issued = details.password_restoration_code_created_at if details else None
    if (
        details is None
        or issued is None
        or utcnow() - as_utc(issued)
        > timedelta(hours=settings.PASSWORD_RESTORATION_CODE_TTL_HOURS)
    ):
        raise ValidationError(
            "Password restoration code is not valid",
            ValidationErrorCodes.CONFIRMATION_CODE_ERROR,
            "set-new-password",
        )
    user = db.query(User).filter(User.uid == details.uid).one()
    user.password = hash_password(new_password)
    details.password_restoration_code = None
    details.password_restoration_code_created_at = None
    db.commit()
