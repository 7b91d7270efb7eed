"""ORM model for confirmation flags, codes and preferences of a user."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String

from idhub.models.base import Base, utcnow
from idhub.models.enums import Language


class UserDetails(Base):
    """One row per user, keyed by the user's uid."""

    __tablename__ = "user_details"

    uid = Column(String(36), ForeignKey("users.uid", ondelete="CASCADE"), primary_key=True)
    email_confirmed = Column(Boolean, nullable=False, default=False)
    email_confirmation_code = Column(String(128), nullable=True, index=True)
    phone_confirmed = Column(Boolean, nullable=False, default=False)
    phone_confirmation_code = Column(String(16), nullable=True)
    password_restoration_code = Column(String(128), nullable=True, index=True)
    password_restoration_code_created_at = Column(DateTime(timezone=True), nullable=True)
    language = Column(String(8), nullable=False, default=Language.UA)
    notify_about_new_poll = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
