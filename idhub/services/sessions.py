"""Refresh-token session store over the auth_data table.

Functions take the caller's Session and never commit; the calling service
owns the unit of work.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from idhub.models import AuthData, User, UserDetails
from idhub.models.base import utcnow
from idhub.schemas.profile import NotificationAuthData
from idhub.services.header_info import HeaderInfo

logger = logging.getLogger(__name__)

MAX_SESSION_COUNT = 5


def save_refresh_token(
    db: Session,
    token_id: str,
    username: str,
    refresh_token_hash: str,
    header_info: HeaderInfo,
    device_token: str | None = None,
    created_at: datetime | None = None,
) -> AuthData:
    """Insert a new session row keyed by the opaque refresh-token id."""
    auth_data = AuthData(
        uid=token_id,
        username=username,
        refresh_token_hash=refresh_token_hash,
        header_info=header_info.to_record(),
        device_token=device_token,
        created_at=created_at or utcnow(),
    )
    db.add(auth_data)
    db.flush()
    return auth_data


def drop_exceeding_sessions_if_any(
    db: Session, username: str, max_sessions: int = MAX_SESSION_COUNT
) -> int:
    """
    Delete every session of username once it holds max_sessions or more.

    Bulk eviction, not LRU: reaching the cap clears the whole group and the
    session being created is inserted afterwards. Concurrent logins may
    briefly exceed the cap until the next login evicts.
    """
    over_cap = (
        select(AuthData.username)
        .where(AuthData.username == username)
        .group_by(AuthData.username)
        .having(func.count() >= max_sessions)
    )
    deleted = (
        db.query(AuthData)
        .filter(AuthData.username.in_(over_cap))
        .delete(synchronize_session=False)
    )
    if deleted:
        logger.info("Evicted %s sessions for %s (cap=%s)", deleted, username, max_sessions)
    return deleted


def drop_device_token_if_any(db: Session, device_token: str) -> int:
    """Unbind device_token from any session holding it."""
    return (
        db.query(AuthData)
        .filter(AuthData.device_token == device_token)
        .update({AuthData.device_token: None}, synchronize_session=False)
    )


def get(db: Session, uid: str) -> AuthData | None:
    return db.query(AuthData).filter(AuthData.uid == uid).first()


def delete(db: Session, uid: str) -> int:
    return db.query(AuthData).filter(AuthData.uid == uid).delete(synchronize_session=False)


def delete_by_username(db: Session, username: str) -> int:
    """Drop all sessions of a user (email change, profile removal)."""
    return (
        db.query(AuthData)
        .filter(AuthData.username == username)
        .delete(synchronize_session=False)
    )


def delete_older_than(db: Session, cutoff: datetime) -> int:
    return (
        db.query(AuthData)
        .filter(AuthData.created_at < cutoff)
        .delete(synchronize_session=False)
    )


def count_for_username(db: Session, username: str) -> int:
    return db.query(AuthData).filter(AuthData.username == username).count()


def _device_token_rows(db: Session, *conditions) -> list[NotificationAuthData]:
    stmt = (
        select(
            User.uid.label("user_uid"),
            AuthData.username.label("username"),
            AuthData.device_token.label("device_token"),
            func.max(AuthData.created_at).label("created_at"),
        )
        .join(AuthData, AuthData.username == User.username)
        .where(AuthData.device_token.is_not(None), *conditions)
        .group_by(User.uid, AuthData.username, AuthData.device_token)
        .order_by(User.uid)
    )
    return [NotificationAuthData.model_validate(row, from_attributes=True) for row in db.execute(stmt)]


def get_device_tokens(db: Session, user_uids: list[str]) -> list[NotificationAuthData]:
    """Latest session per (user, device token) for the given users."""
    if not user_uids:
        return []
    return _device_token_rows(db, User.uid.in_(user_uids))


def get_token_data_for_new_poll_notification(db: Session) -> list[NotificationAuthData]:
    """Device tokens of users who opted into new-poll notifications."""
    opted_in = select(UserDetails.uid).where(UserDetails.notify_about_new_poll.is_(True))
    return _device_token_rows(db, User.uid.in_(opted_in))


def expiry_cutoff(days: int) -> datetime:
    """Rows created before this instant fail refresh, which counts only whole days of age."""
    return utcnow() - timedelta(days=days + 1)
