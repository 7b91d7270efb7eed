"""ORM model for application users (auth and role-based access control)."""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from idhub.models.base import Base, new_uid, utcnow
from idhub.models.enums import UserRole, UserSystemStatus


class User(Base):
    """
    Account bound 1:1 to a Person via person_uid.

    username is the email for native accounts and ``<providerId>@google`` or
    ``<providerId>@facebook`` for social ones (password is then NULL).
    """

    __tablename__ = "users"

    uid = Column(String(36), primary_key=True, default=new_uid)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=True)
    role = Column(String(32), nullable=False, default=UserRole.PRIVATE)
    system_status = Column(String(32), nullable=False, default=UserSystemStatus.SUSPENDED)
    person_uid = Column(String(36), ForeignKey("person.uid"), nullable=False, unique=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    person = relationship("Person", lazy="joined")
    details = relationship("UserDetails", uselist=False, lazy="joined")
