"""ORM model for refresh-token sessions."""

from sqlalchemy import JSON, Column, DateTime, String

from idhub.models.base import Base, utcnow


class AuthData(Base):
    """
    One row per active session.

    uid is the opaque refresh-token id handed to the client; only the
    fingerprint hash of (token, ip, user agent) is compared at refresh time.
    """

    __tablename__ = "auth_data"

    uid = Column(String(64), primary_key=True)
    username = Column(String(255), nullable=False, index=True)
    refresh_token_hash = Column(String(128), nullable=False)
    header_info = Column(JSON, nullable=False)
    device_token = Column(String(512), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
