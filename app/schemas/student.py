"""
Pydantic schemas for student applications, résumé uploads and listings.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class StudentSubmit(BaseModel):
    """Application form submitted by a student."""
    full_name: str = Field(..., min_length=1, max_length=255, description="Full name")
    email: EmailStr = Field(..., description="Contact email")
    university: str = Field(..., min_length=1, max_length=255, description="University")
    phone: Optional[str] = Field(None, max_length=50)
    degree: Optional[str] = Field(None, max_length=255)
    gpa: Optional[float] = Field(None, ge=0, le=10, description="GPA on a 0-10 scale")
    resume_path: Optional[str] = Field(None, max_length=512, description="Storage path returned by POST /api/upload")

    class Config:
        str_strip_whitespace = True
        json_schema_extra = {
            "example": {
                "full_name": "Jane Doe",
                "email": "jane.doe@university.edu",
                "university": "State University",
                "degree": "BSc Computer Science",
                "gpa": 3.8,
                "resume_path": "resumes/0b6f1c1e-2c55-4f7e-9a55-0e2f43c8f3a1-1755507164000.pdf"
            }
        }


class StudentResponse(BaseModel):
    id: str
    event_id: str
    full_name: str
    email: str
    university: str
    phone: Optional[str] = None
    degree: Optional[str] = None
    gpa: Optional[float] = None
    resume_path: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StudentFilter(BaseModel):
    """Filters shared by the admin and recruiter student listings."""
    query: Optional[str] = Field(None, description="Substring of name, email, university or degree")
    university: Optional[str] = Field(None, description="Substring of university")
    degree: Optional[str] = Field(None, description="Substring of degree")
    gpa_min: Optional[float] = Field(None, description="Inclusive lower GPA bound")
    gpa_max: Optional[float] = Field(None, description="Inclusive upper GPA bound")
    has_resume: Optional[bool] = Field(None, description="Only students with (true) or without (false) a résumé")
    event_id: Optional[str] = Field(None, description="Restrict to one event")
    page: int = Field(1, ge=1, description="Page number")
    page_size: int = Field(20, ge=1, le=100, description="Items per page")


class PaginationInfo(BaseModel):
    page: int
    page_size: int = Field(..., alias="pageSize")
    total: int
    total_pages: int = Field(..., alias="totalPages")

    class Config:
        populate_by_name = True


class AdminStudentListResponse(BaseModel):
    """Response schema for GET /api/admin/students."""
    students: List[StudentResponse]
    pagination: PaginationInfo


class UploadRequest(BaseModel):
    """Request schema for POST /api/upload."""
    name: str = Field(..., min_length=1, description="Original file name, used for its extension")
    type: str = Field(..., min_length=1, description="MIME type of the file")


class UploadResponse(BaseModel):
    signed_url: str = Field(..., alias="signedUrl", description="PUT the file bytes to this URL")
    path: str = Field(..., description="Storage path to submit as resume_path")
    token: str = Field(..., description="Upload token embedded in signedUrl")

    class Config:
        populate_by_name = True


class SignedUrlResponse(BaseModel):
    signed_url: str = Field(..., alias="signedUrl")

    class Config:
        populate_by_name = True


class ResumeUrlResponse(BaseModel):
    url: str
