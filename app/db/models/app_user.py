"""
AppUser model: the application profile of an authenticated principal.

One row per AuthUser. The role decides which parts of the API a caller may use.
"""
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship, backref
from app.db.base import Base, generate_uuid, utcnow


class Role(str, enum.Enum):
    """Application roles, lowest privilege first."""
    STUDENT = "student"
    RECRUITER = "recruiter"
    ADMIN = "admin"


class AppUser(Base):
    __tablename__ = "app_users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    auth_user_id = Column(String(36), ForeignKey("auth_users.id"), unique=True, nullable=False, index=True)
    role = Column(
        Enum(Role, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=Role.STUDENT,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    auth_user = relationship("AuthUser", backref=backref("app_user", uselist=False))

    @property
    def email(self):
        return self.auth_user.email if self.auth_user else None

    def __repr__(self):
        return f"<AppUser(id={self.id}, role='{self.role}')>"
