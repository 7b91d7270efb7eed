"""Session retention: purge auth_data rows older than REFRESH_TOKEN_EXPIRE_DAYS."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from idhub.services import sessions

if TYPE_CHECKING:
    from idhub.core.config import Settings

logger = logging.getLogger(__name__)


def run_retention(session: Session, settings: "Settings") -> int:
    """
    Delete sessions whose refresh token can no longer be exchanged.

    A row is purged only once its age in whole days exceeds
    REFRESH_TOKEN_EXPIRE_DAYS, the same test refresh applies. Idempotent:
    safe to run repeatedly. Returns the number of rows deleted.
    """
    if not settings.SESSION_RETENTION_ENABLED:
        logger.info("Retention is disabled (SESSION_RETENTION_ENABLED=false); skipping.")
        return 0

    cutoff = sessions.expiry_cutoff(settings.REFRESH_TOKEN_EXPIRE_DAYS)
    deleted_count = sessions.delete_older_than(session, cutoff)
    session.commit()

    if deleted_count > 0:
        logger.info(
            "Retention run: cutoff=%s, sessions_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count
