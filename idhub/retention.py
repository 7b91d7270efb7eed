"""
CLI entrypoint for the session retention job. Run from cron, e.g.:

  python -m idhub.retention

Or daily: 30 3 * * * cd /path/to/idhub && .venv/bin/python -m idhub.retention
"""

import logging
import sys

from idhub.core.config import get_settings
from idhub.core.database import SessionLocal
from idhub.services.retention import run_retention

logger = logging.getLogger(__name__)


def main() -> int:
    """Run retention: delete sessions older than REFRESH_TOKEN_EXPIRE_DAYS."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    db = SessionLocal()
    try:
        sessions_deleted = run_retention(db, settings)
        logger.info("Retention completed: sessions_deleted=%s", sessions_deleted)
        return 0
    except Exception as e:
        logger.exception("Retention job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
