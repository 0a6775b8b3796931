"""
Database models module.

This module imports all database models to ensure they are registered with SQLAlchemy's Base.metadata
before table creation.

All models must be imported here to be included in database migrations and table creation.
"""
from app.db.models.auth_user import AuthUser
from app.db.models.app_user import AppUser, Role
from app.db.models.recruiting_event import RecruitingEvent
from app.db.models.student import Student
from app.db.models.interview import Interview

__all__ = [
    "AuthUser",
    "AppUser",
    "Role",
    "RecruitingEvent",
    "Student",
    "Interview",
]
