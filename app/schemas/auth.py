"""
Pydantic schemas for authentication endpoints.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from app.db.models.app_user import Role


class MagicLinkRequest(BaseModel):
    """Request schema for POST /api/auth."""
    email: EmailStr = Field(..., description="Email address to send the sign-in link to")
    next: Optional[str] = Field(default=None, description="Relative path to open after sign-in")

    class Config:
        json_schema_extra = {
            "example": {
                "email": "jane.doe@university.edu",
                "next": "/apply"
            }
        }


class ProfileResponse(BaseModel):
    """Application profile of a principal."""
    id: str = Field(..., description="Profile ID")
    auth_user_id: str = Field(..., description="Identity record ID")
    role: Role = Field(..., description="student, recruiter or admin")
    email: Optional[str] = Field(None, description="Sign-in email address")
    created_at: datetime = Field(..., description="Profile creation timestamp")

    class Config:
        from_attributes = True


class MeResponse(BaseModel):
    """Response schema for GET /api/auth/me."""
    user: Optional[ProfileResponse] = Field(None, description="Current profile, null when signed out")


class MessageResponse(BaseModel):
    message: str


class RecruiterInviteRequest(BaseModel):
    """Request schema for POST /api/admin/recruiters."""
    email: EmailStr = Field(..., description="Email address of the recruiter to invite")
