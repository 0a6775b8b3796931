"""
Student model: a student's application for the active recruiting event.

The primary key is the student's AppUser id, so each principal has one row
that is overwritten on every submission.
"""
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship, backref
from app.db.base import Base, utcnow


class Student(Base):
    __tablename__ = "students"

    id = Column(String(36), ForeignKey("app_users.id"), primary_key=True)
    event_id = Column(String(36), ForeignKey("recruiting_events.id"), nullable=False, index=True)

    full_name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False)
    university = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    degree = Column(String(255), nullable=True)
    gpa = Column(Float, nullable=True)
    resume_path = Column(String(512), nullable=True)  # opaque storage path, e.g. "resumes/<id>-<ts>.pdf"

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    event = relationship("RecruitingEvent", backref="students")
    app_user = relationship("AppUser", backref=backref("student_profile", uselist=False))

    __table_args__ = (
        Index("idx_students_event_created", "event_id", "created_at"),
    )

    def __repr__(self):
        return f"<Student(id={self.id}, full_name='{self.full_name}', event_id={self.event_id})>"
