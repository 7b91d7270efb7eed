"""Core app configuration and database."""

from idhub.core.config import get_settings, settings
from idhub.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
