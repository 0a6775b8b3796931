"""
AuthUser model: the identity record behind a login.

Created by the magic-link flow or by an admin invite. Application roles live
on AppUser, never here.
"""
from sqlalchemy import Column, String, DateTime
from app.db.base import Base, generate_uuid, utcnow


class AuthUser(Base):
    __tablename__ = "auth_users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(320), unique=True, index=True, nullable=False)
    email_confirmed_at = Column(DateTime(timezone=True), nullable=True)
    last_sign_in_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<AuthUser(id={self.id}, email='{self.email}')>"
