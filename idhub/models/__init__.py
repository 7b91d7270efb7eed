"""SQLAlchemy ORM models."""

from idhub.models.auth_data import AuthData
from idhub.models.base import Base
from idhub.models.person import Person
from idhub.models.user import User
from idhub.models.user_details import UserDetails

__all__ = ["AuthData", "Base", "Person", "User", "UserDetails"]
