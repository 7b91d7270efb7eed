"""Database engine and per-request session management."""

from collections.abc import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from idhub.core.config import settings


def create_session_factory(url: str, echo: bool = False) -> sessionmaker:
    """Build an engine for url and return a bound session factory."""
    if url.startswith("sqlite"):
        # In-memory SQLite lives on one connection; share it across threads.
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )
    else:
        engine = create_engine(url, pool_pre_ping=True, echo=echo)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


SessionLocal = create_session_factory(settings.DATABASE_URL, echo=settings.DEBUG)
engine = SessionLocal.kw["bind"]


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that yields one DB session per request.

    Services commit their own unit of work; anything that escapes the request
    handler rolls back whatever is still pending.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def get_session_factory() -> sessionmaker:
    """Dependency for work that outlives the request session (background tasks)."""
    return SessionLocal
