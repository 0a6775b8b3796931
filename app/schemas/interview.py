"""
Pydantic schemas for interview ratings and the recruiter views.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from app.schemas.student import StudentResponse


class InterviewCreate(BaseModel):
    """Rating submitted by a recruiter for one student."""
    student_id: str = Field(..., min_length=1, description="Student (profile) ID")
    rating_overall: int = Field(..., description="Overall rating, 1-5")
    rating_tech: int = Field(..., description="Technical rating, 1-5")
    rating_comm: int = Field(..., description="Communication rating, 1-5")
    feedback: str = Field(..., description="Written feedback")

    @field_validator("rating_overall", "rating_tech", "rating_comm")
    @classmethod
    def validate_rating(cls, v: int) -> int:
        if v < 1 or v > 5:
            raise ValueError("Rating must be between 1 and 5")
        return v

    @field_validator("feedback")
    @classmethod
    def validate_feedback(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Feedback is required")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "student_id": "0b6f1c1e-2c55-4f7e-9a55-0e2f43c8f3a1",
                "rating_overall": 5,
                "rating_tech": 4,
                "rating_comm": 5,
                "feedback": "Strong candidate"
            }
        }


class InterviewResponse(BaseModel):
    id: str
    event_id: str
    student_id: str
    recruiter_id: str
    rating_overall: int
    rating_tech: int
    rating_comm: int
    feedback: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InterviewSaveResponse(BaseModel):
    message: str
    interview: InterviewResponse


class InterviewSummary(BaseModel):
    """The calling recruiter's own rating of a student."""
    rating_overall: int
    rating_tech: int
    rating_comm: int
    feedback: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RecruiterStudentItem(StudentResponse):
    has_interview: bool = Field(False, alias="hasInterview")
    latest_interview: Optional[InterviewSummary] = Field(None, alias="latestInterview")

    class Config:
        from_attributes = True
        populate_by_name = True


class RecruiterStudentListResponse(BaseModel):
    """Response schema for GET /api/recruiter/students."""
    items: List[RecruiterStudentItem]
    total: int
    page: int
    page_size: int = Field(..., alias="pageSize")

    class Config:
        populate_by_name = True


class StudentSummaryItem(StudentResponse):
    """A student with interview aggregates across all recruiters."""
    interviews_count: int = 0
    avg_overall: Optional[float] = None
    avg_tech: Optional[float] = None
    avg_comm: Optional[float] = None
    latest_feedback: Optional[str] = None
    has_interview: bool = False

    class Config:
        from_attributes = True


class StudentSummaryListResponse(BaseModel):
    """Response schema for GET /api/students."""
    items: List[StudentSummaryItem]
    total: int
    page: int
    page_size: int = Field(..., alias="pageSize")

    class Config:
        populate_by_name = True


class RecruiterStudentDetail(StudentResponse):
    latest_interview: Optional[InterviewSummary] = Field(None, alias="latestInterview")
    resume_url: Optional[str] = Field(None, alias="resumeUrl")

    class Config:
        from_attributes = True
        populate_by_name = True
