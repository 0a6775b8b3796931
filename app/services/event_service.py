"""
Recruiting event lifecycle.

NoActiveEvent -> ActiveEvent -> closed. Closed events are never reopened;
creating a new event is the only way back to ActiveEvent.
"""
import logging
from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Session

from app.db.base import utcnow
from app.db.models.recruiting_event import RecruitingEvent
from app.db.models.student import Student
from app.db.models.interview import Interview

logger = logging.getLogger(__name__)


class NoActiveEventError(ValueError):
    """Raised when an operation needs an active recruiting event and there is none."""

    def __init__(self, message: str = "No active recruiting event found"):
        super().__init__(message)


def get_active_event(db: Session) -> Optional[RecruitingEvent]:
    """
    The single active event, if any.

    Not role-gated: application intake and interview recording scope their
    writes to it.
    """
    return db.query(RecruitingEvent).filter(RecruitingEvent.is_active.is_(True)).first()


def require_active_event(db: Session) -> RecruitingEvent:
    event = get_active_event(db)
    if event is None:
        raise NoActiveEventError()
    return event


def list_events(db: Session) -> List[RecruitingEvent]:
    """All events, newest first."""
    return db.query(RecruitingEvent).order_by(RecruitingEvent.created_at.desc()).all()


def create_event(db: Session, name: str) -> RecruitingEvent:
    """
    Open a new active event.

    Any event still marked active is deactivated in the same transaction, so
    at most one event is active once this commits.
    """
    name = (name or "").strip()
    if not name:
        raise ValueError("Event name is required")

    try:
        deactivated = (
            db.query(RecruitingEvent)
            .filter(RecruitingEvent.is_active.is_(True))
            .update({RecruitingEvent.is_active: False}, synchronize_session="fetch")
        )
        if deactivated:
            logger.warning(f"Deactivated {deactivated} previously active event(s) before creating '{name}'")

        event = RecruitingEvent(name=name, is_active=True)
        db.add(event)
        db.commit()
        db.refresh(event)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Recruiting event created: event_id={event.id}, name={event.name}")
    return event


def close_event(db: Session, event: RecruitingEvent) -> RecruitingEvent:
    """Deactivate ``event`` and stamp ``ended_at``."""
    try:
        event.is_active = False
        event.ended_at = utcnow()
        db.commit()
        db.refresh(event)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Recruiting event closed: event_id={event.id}, name={event.name}")
    return event


def close_active_event(db: Session) -> RecruitingEvent:
    """Close the active event; NoActiveEventError leaves every event untouched."""
    event = require_active_event(db)
    return close_event(db, event)


def count_event_participation(db: Session, event_id: str) -> Dict[str, int]:
    """Student and interview counts scoped to one event."""
    student_count = db.query(Student).filter(Student.event_id == event_id).count()
    interview_count = db.query(Interview).filter(Interview.event_id == event_id).count()
    return {"studentCount": student_count, "interviewCount": interview_count}


def get_event_overview(db: Session) -> Dict[str, Any]:
    """All events plus the active one with its participation counts."""
    events = list_events(db)
    active = next((event for event in events if event.is_active), None)

    active_summary = None
    if active is not None:
        active_summary = {"event": active, **count_event_participation(db, active.id)}

    return {"events": events, "active": active_summary}
