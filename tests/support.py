"""Shared fixtures for unittest-style tests: a fresh in-memory database and seeded profiles."""

from sqlalchemy.orm import Session, sessionmaker

from idhub.core.acs import GrandAccessACS
from idhub.core.database import create_session_factory
from idhub.models import Base, User
from idhub.models.enums import UserRole, UserSystemStatus
from idhub.schemas.profile import ProfileCreate
from idhub.services import profiles
from idhub.services.header_info import HeaderInfo, build_header_info

DEFAULT_PASSWORD = "secret-pass"

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def make_session_factory() -> sessionmaker:
    """Each call gets its own empty in-memory database."""
    factory = create_session_factory("sqlite://")
    Base.metadata.create_all(factory.kw["bind"])
    return factory


def header(ip: str = "10.0.0.1", user_agent: str = CHROME_UA) -> HeaderInfo:
    return build_header_info(ip, user_agent)


def seed_user(
    db: Session,
    email: str,
    password: str | None = DEFAULT_PASSWORD,
    role: UserRole = UserRole.PRIVATE,
    system_status: UserSystemStatus | None = None,
    username: str | None = None,
    **person,
) -> User:
    profile = ProfileCreate(
        username=username or email, email=email, password=password, role=role, **person
    )
    uid = profiles.create_profile(db, profile, GrandAccessACS())
    user = db.query(User).filter(User.uid == uid).one()
    if system_status is not None:
        user.system_status = system_status
        db.commit()
    return user
