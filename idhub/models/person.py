"""ORM model for the identity attributes of a profile."""

from sqlalchemy import Boolean, Column, Date, DateTime, String, Text

from idhub.models.base import Base, new_uid, utcnow
from idhub.models.enums import Gender


class Person(Base):
    """
    Names, contacts and legal-entity fields. Owned 1:1 by a User.

    Never physically removed: deletion clears PII and stamps deleted_at.
    """

    __tablename__ = "person"

    uid = Column(String(36), primary_key=True, default=new_uid)
    email = Column(String(255), nullable=True, index=True)
    first_name = Column(String(255), nullable=False, default="")
    middle_name = Column(String(255), nullable=False, default="")
    last_name = Column(String(255), nullable=False, default="")
    job_title = Column(String(255), nullable=False, default="")
    legal_name = Column(String(255), nullable=False, default="")
    short_name = Column(String(255), nullable=False, default="")
    phone = Column(String(32), nullable=False, default="")
    birthday_at = Column(Date, nullable=True)
    gender = Column(String(16), nullable=False, default=Gender.UNSET)
    bio = Column(Text, nullable=False, default="")
    avatar = Column(String(36), nullable=True)
    is_legal_person = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
