"""
RecruitingEvent model.

At most one event is active at a time; the partial unique index makes the
datastore reject a second active row.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Index, text
from app.db.base import Base, generate_uuid, utcnow


class RecruitingEvent(Base):
    __tablename__ = "recruiting_events"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index(
            "uq_recruiting_events_single_active",
            "is_active",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    def __repr__(self):
        return f"<RecruitingEvent(id={self.id}, name='{self.name}', is_active={self.is_active})>"
