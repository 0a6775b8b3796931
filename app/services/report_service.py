"""
End-of-event report.

Closing an event with a report runs, in order: collect the event's students
and interviews, aggregate them per student, render a CSV (one row per
student) and an HTML summary, email both to the operator address, and only
then close the event. If the email cannot be sent the error propagates and
the event stays active, so a report that was never delivered never marks an
event as ended.
"""
import csv
import io
import logging
import re
from collections import defaultdict
from datetime import datetime, timezone
from html import escape
from typing import List, Dict, Any, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import require_setting
from app.db.base import as_utc
from app.db.models.interview import Interview
from app.db.models.recruiting_event import RecruitingEvent
from app.db.models.student import Student
from app.services import email_service
from app.services.event_service import require_active_event, close_event

logger = logging.getLogger(__name__)

FEEDBACK_PREVIEW_LENGTH = 100
TOP_CANDIDATES_LIMIT = 10

CSV_FIELDS = [
    "event_name",
    "student_id",
    "full_name",
    "university",
    "degree",
    "gpa",
    "email",
    "phone",
    "resume_path",
    "interviews_count",
    "avg_overall",
    "avg_tech",
    "avg_comm",
    "latest_feedback_short",
]


def truncate_feedback(feedback: Optional[str], length: int = FEEDBACK_PREVIEW_LENGTH) -> Optional[str]:
    if feedback is None:
        return None
    if len(feedback) <= length:
        return feedback
    return feedback[:length] + "..."


def _mean(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def _rated_at(interview: Interview) -> datetime:
    return as_utc(interview.updated_at or interview.created_at)


def build_student_rows(
    event: RecruitingEvent, students: List[Student], interviews: List[Interview]
) -> List[Dict[str, Any]]:
    """One aggregate row per student; averages are None for students nobody rated."""
    by_student = defaultdict(list)
    for interview in interviews:
        by_student[interview.student_id].append(interview)

    rows = []
    for student in students:
        own = by_student.get(student.id, [])
        latest = max(own, key=_rated_at) if own else None

        rows.append({
            "event_name": event.name,
            "student_id": student.id,
            "full_name": student.full_name,
            "university": student.university,
            "degree": student.degree,
            "gpa": student.gpa,
            "email": student.email,
            "phone": student.phone,
            "resume_path": student.resume_path,
            "interviews_count": len(own),
            "avg_overall": _mean([i.rating_overall for i in own]),
            "avg_tech": _mean([i.rating_tech for i in own]),
            "avg_comm": _mean([i.rating_comm for i in own]),
            "latest_feedback": latest.feedback if latest else None,
            "latest_feedback_short": truncate_feedback(latest.feedback) if latest else None,
        })
    return rows


def compute_kpis(rows: List[Dict[str, Any]], interviews: List[Interview]) -> Dict[str, Any]:
    total_students = len(rows)
    total_interviews = len(interviews)
    with_resume = sum(1 for row in rows if row["resume_path"])
    avg_overall = _mean([i.rating_overall for i in interviews])

    return {
        "total_students": total_students,
        "total_interviews": total_interviews,
        "interviews_per_student": round(total_interviews / total_students, 2) if total_students else 0.0,
        "avg_overall_rating": round(avg_overall, 2) if avg_overall is not None else None,
        "resume_percentage": round(with_resume / total_students * 100) if total_students else 0,
    }


def rank_top_candidates(rows: List[Dict[str, Any]], limit: int = TOP_CANDIDATES_LIMIT) -> List[Dict[str, Any]]:
    """Rated students by average overall rating, ties broken by interview count."""
    rated = [row for row in rows if row["avg_overall"] is not None]
    rated.sort(key=lambda row: (row["avg_overall"], row["interviews_count"]), reverse=True)
    return rated[:limit]


def _csv_value(key: str, value: Any) -> Any:
    if value is None:
        return ""
    if key in ("avg_overall", "avg_tech", "avg_comm"):
        return f"{value:.2f}"
    return value


def generate_csv(rows: List[Dict[str, Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_FIELDS, lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({key: _csv_value(key, row.get(key)) for key in CSV_FIELDS})
    return buffer.getvalue()


def _cell(value: Any, default: str = "N/A") -> str:
    if value is None or value == "":
        return default
    return escape(str(value))


def render_html(
    event_name: str,
    kpis: Dict[str, Any],
    top_candidates: List[Dict[str, Any]],
    generated_at: datetime,
) -> str:
    avg_rating = f"{kpis['avg_overall_rating']:.2f}" if kpis["avg_overall_rating"] is not None else "N/A"

    candidate_rows = "".join(
        f"""
            <tr>
              <td>{_cell(c['full_name'])}</td>
              <td>{_cell(c['university'])}</td>
              <td>{_cell(c['degree'])}</td>
              <td>{_cell(c['gpa'])}</td>
              <td>{c['interviews_count']}</td>
              <td class="rating">{c['avg_overall']:.2f}</td>
              <td>{_cell(c['latest_feedback_short'], 'No feedback')}</td>
            </tr>"""
        for c in top_candidates
    )

    title = escape(event_name)
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Recruiting Report - {title}</title>
  <style>
    body {{ font-family: Arial, sans-serif; margin: 20px; }}
    .header {{ background: #f8f9fa; padding: 20px; border-radius: 8px; margin-bottom: 20px; }}
    .kpis {{ display: flex; gap: 20px; margin-bottom: 30px; }}
    .kpi {{ background: #e9ecef; padding: 15px; border-radius: 6px; text-align: center; min-width: 120px; }}
    .kpi-value {{ font-size: 24px; font-weight: bold; color: #495057; }}
    .kpi-label {{ font-size: 14px; color: #6c757d; margin-top: 5px; }}
    table {{ width: 100%; border-collapse: collapse; margin-top: 20px; }}
    th, td {{ padding: 12px; text-align: left; border-bottom: 1px solid #dee2e6; }}
    th {{ background-color: #f8f9fa; font-weight: 600; }}
    .rating {{ color: #28a745; font-weight: bold; }}
  </style>
</head>
<body>
  <div class="header">
    <h1>Recruiting Report - {title}</h1>
    <p>Generated on {generated_at:%Y-%m-%d} at {generated_at:%H:%M} UTC</p>
  </div>

  <div class="kpis">
    <div class="kpi"><div class="kpi-value">{kpis['total_students']}</div><div class="kpi-label">Total Students</div></div>
    <div class="kpi"><div class="kpi-value">{kpis['total_interviews']}</div><div class="kpi-label">Total Interviews</div></div>
    <div class="kpi"><div class="kpi-value">{kpis['interviews_per_student']:.2f}</div><div class="kpi-label">Interviews per Student</div></div>
    <div class="kpi"><div class="kpi-value">{kpis['resume_percentage']}%</div><div class="kpi-label">With Resumes</div></div>
    <div class="kpi"><div class="kpi-value">{avg_rating}</div><div class="kpi-label">Avg Rating</div></div>
  </div>

  <h2>Top {TOP_CANDIDATES_LIMIT} Candidates</h2>
  <table>
    <thead>
      <tr>
        <th>Name</th>
        <th>University</th>
        <th>Degree</th>
        <th>GPA</th>
        <th>Interviews</th>
        <th>Avg Rating</th>
        <th>Latest Feedback</th>
      </tr>
    </thead>
    <tbody>{candidate_rows}
    </tbody>
  </table>

  <p style="margin-top: 30px; color: #6c757d; font-size: 14px;">
    Complete data is available in the attached CSV file.
  </p>
</body>
</html>
"""


def report_filename(event_name: str) -> str:
    return f"report-{re.sub(r'[^a-zA-Z0-9]', '-', event_name)}.csv"


def report_subject(event_name: str, generated_at: datetime) -> str:
    return f"Recruiting Report – {event_name} – {generated_at:%Y-%m-%d}"


def build_report(db: Session, event: RecruitingEvent, generated_at: Optional[datetime] = None) -> Dict[str, Any]:
    """Aggregate an event into rows, KPIs, CSV and HTML without side effects."""
    generated_at = generated_at or datetime.now(timezone.utc)

    students = (
        db.query(Student)
        .filter(Student.event_id == event.id)
        .order_by(Student.created_at.asc())
        .all()
    )
    interviews = db.query(Interview).filter(Interview.event_id == event.id).all()

    rows = build_student_rows(event, students, interviews)
    kpis = compute_kpis(rows, interviews)
    top = rank_top_candidates(rows)

    return {
        "rows": rows,
        "kpis": kpis,
        "top_candidates": top,
        "csv": generate_csv(rows),
        "html": render_html(event.name, kpis, top, generated_at),
        "subject": report_subject(event.name, generated_at),
        "filename": report_filename(event.name),
    }


def close_event_and_report(db: Session) -> Tuple[RecruitingEvent, Dict[str, Any], str]:
    """
    Email the active event's report, then close the event.

    Returns:
        The closed event, the report KPIs, and the recipient address

    Raises:
        NoActiveEventError: No active event
        ConfigurationError: Report recipient or SMTP not configured
        EmailDeliveryError: The report could not be sent; the event stays active
    """
    event = require_active_event(db)
    recipient = require_setting("REPORT_RECEIVER_EMAIL")

    report = build_report(db, event)
    logger.info(
        f"Report built: event_id={event.id}, students={report['kpis']['total_students']}, "
        f"interviews={report['kpis']['total_interviews']}"
    )

    email_service.send_report_email(report["subject"], report["html"], report["filename"], report["csv"])
    logger.info(f"Report emailed: event_id={event.id}")

    closed = close_event(db, event)
    return closed, report["kpis"], recipient
