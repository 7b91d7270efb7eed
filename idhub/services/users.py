"""User lookups and social-username conventions."""

import logging

from sqlalchemy.orm import Session, sessionmaker

from idhub.core.acs import ACS
from idhub.models import User
from idhub.models.base import utcnow
from idhub.models.enums import UserRole

logger = logging.getLogger(__name__)

GOOGLE_SUFFIX = "@google"
FACEBOOK_SUFFIX = "@facebook"


def create_google_username(google_id: str) -> str:
    return f"{google_id}{GOOGLE_SUFFIX}"


def create_facebook_username(facebook_id: str) -> str:
    return f"{facebook_id}{FACEBOOK_SUFFIX}"


def is_google_username(username: str) -> bool:
    return username.endswith(GOOGLE_SUFFIX)


def is_facebook_username(username: str) -> bool:
    return username.endswith(FACEBOOK_SUFFIX)


def is_social_username(username: str) -> bool:
    return is_google_username(username) or is_facebook_username(username)


def find_by_username(db: Session, username: str) -> User | None:
    return (
        db.query(User)
        .filter(User.username == username, User.deleted_at.is_(None))
        .first()
    )


def find_by_google_id(db: Session, google_id: str) -> User | None:
    return find_by_username(db, create_google_username(google_id))


def find_by_facebook_id(db: Session, facebook_id: str) -> User | None:
    return find_by_username(db, create_facebook_username(facebook_id))


def get_user(db: Session, uid: str, acs: ACS) -> User | None:
    """Load a live user by uid if acs covers it."""
    return (
        db.query(User)
        .filter(
            User.uid == uid,
            User.deleted_at.is_(None),
            User.role != UserRole.DELETED,
            acs.to_sql(User.uid),
        )
        .first()
    )


def update_last_login(session_factory: sessionmaker, user_uid: str) -> None:
    """
    Stamp last_login_at in a session of its own.

    Runs after the login response is sent, so failures are logged and dropped.
    """
    db = session_factory()
    try:
        db.query(User).filter(User.uid == user_uid).update(
            {User.last_login_at: utcnow()}, synchronize_session=False
        )
        db.commit()
        logger.debug("user.service.last-login-upd.done for %s", user_uid)
    except Exception as e:
        db.rollback()
        logger.warning("Failed to update last login for %s: %s", user_uid, e)
    finally:
        db.close()
