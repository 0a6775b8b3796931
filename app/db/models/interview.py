"""
Interview model: one recruiter's rating of one student in one event.
"""
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from app.db.base import Base, generate_uuid, utcnow


class Interview(Base):
    __tablename__ = "interviews"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    event_id = Column(String(36), ForeignKey("recruiting_events.id"), nullable=False, index=True)
    student_id = Column(String(36), ForeignKey("students.id"), nullable=False, index=True)
    recruiter_id = Column(String(36), ForeignKey("app_users.id"), nullable=False, index=True)

    rating_overall = Column(Integer, nullable=False)
    rating_tech = Column(Integer, nullable=False)
    rating_comm = Column(Integer, nullable=False)
    feedback = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    student = relationship("Student", backref="interviews")
    recruiter = relationship("AppUser")

    __table_args__ = (
        UniqueConstraint("event_id", "student_id", "recruiter_id", name="uq_interview_event_student_recruiter"),
        CheckConstraint("rating_overall BETWEEN 1 AND 5", name="ck_interview_rating_overall"),
        CheckConstraint("rating_tech BETWEEN 1 AND 5", name="ck_interview_rating_tech"),
        CheckConstraint("rating_comm BETWEEN 1 AND 5", name="ck_interview_rating_comm"),
    )

    def __repr__(self):
        return f"<Interview(id={self.id}, student_id={self.student_id}, recruiter_id={self.recruiter_id})>"
