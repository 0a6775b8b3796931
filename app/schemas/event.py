"""
Pydantic schemas for recruiting event endpoints.
"""
from typing import Optional, List, Literal
from datetime import datetime
from pydantic import BaseModel, Field


class EventActionRequest(BaseModel):
    """
    Body of POST /api/admin/event.

    ``{"name": ...}`` opens a new event; ``{"action": "close"}`` closes the active one.
    """
    name: Optional[str] = Field(None, description="Name of the event to create", max_length=255)
    action: Optional[Literal["close"]] = Field(None, description="Set to 'close' to close the active event")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Fall 2025"
            }
        }


class EventResponse(BaseModel):
    id: str = Field(..., description="Event ID")
    name: str = Field(..., description="Event name")
    is_active: bool = Field(..., description="Whether this is the live event")
    created_at: datetime = Field(..., description="Creation timestamp")
    ended_at: Optional[datetime] = Field(None, description="Close timestamp")

    class Config:
        from_attributes = True


class ActiveEventResponse(EventResponse):
    student_count: int = Field(0, alias="studentCount", description="Students who applied to this event")
    interview_count: int = Field(0, alias="interviewCount", description="Interviews recorded in this event")

    class Config:
        from_attributes = True
        populate_by_name = True


class EventOverviewResponse(BaseModel):
    """Response schema for GET /api/admin/event."""
    events: List[EventResponse] = Field(..., description="All events, newest first")
    active_event: Optional[ActiveEventResponse] = Field(None, alias="activeEvent")

    class Config:
        populate_by_name = True


class CloseEventResponse(BaseModel):
    success: bool = True
    event: EventResponse
