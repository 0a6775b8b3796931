"""
Pydantic schemas for the end-of-event report.
"""
from typing import Optional
from pydantic import BaseModel, Field

from app.schemas.event import EventResponse


class ReportKPIs(BaseModel):
    total_students: int
    total_interviews: int
    interviews_per_student: float
    avg_overall_rating: Optional[float] = None
    resume_percentage: int


class ReportResponse(BaseModel):
    """Response schema for POST /api/admin/report."""
    success: bool = True
    event: EventResponse
    kpis: ReportKPIs
    recipient: str = Field(..., description="Address the report was emailed to")
