"""
Transactional email over SMTP.

Every send either completes or raises EmailDeliveryError; callers decide
whether a failed send is fatal (report) or tolerated (recruiter invite).
"""
import logging
import smtplib
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import List, Optional, Tuple

from app.core import config
from app.core.config import require_setting

logger = logging.getLogger(__name__)

# (filename, content, subtype) e.g. ("report.csv", b"...", "csv")
Attachment = Tuple[str, bytes, str]


class EmailDeliveryError(RuntimeError):
    """Raised when the SMTP server refuses or cannot be reached."""


def build_message(
    recipients: List[str],
    subject: str,
    html: str,
    attachments: Optional[List[Attachment]] = None,
) -> MIMEMultipart:
    msg = MIMEMultipart("mixed")
    msg["Subject"] = subject
    msg["From"] = config.EMAIL_FROM
    msg["To"] = ", ".join(recipients)
    msg.attach(MIMEText(html, "html", "utf-8"))

    for filename, content, subtype in attachments or []:
        part = MIMEApplication(content, _subtype=subtype)
        part.add_header("Content-Disposition", "attachment", filename=filename)
        msg.attach(part)

    return msg


def send_email(
    recipients: List[str],
    subject: str,
    html: str,
    attachments: Optional[List[Attachment]] = None,
) -> None:
    """
    Send an HTML email, optionally with attachments.

    Raises:
        ConfigurationError: SMTP_HOST is not configured
        EmailDeliveryError: The SMTP exchange failed
    """
    host = require_setting("SMTP_HOST")
    msg = build_message(recipients, subject, html, attachments)

    try:
        with smtplib.SMTP(host, config.SMTP_PORT, timeout=config.SMTP_TIMEOUT) as server:
            if config.SMTP_USE_TLS:
                server.starttls()
            if config.SMTP_USERNAME:
                server.login(config.SMTP_USERNAME, config.SMTP_PASSWORD or "")
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Email delivery failed: subject={subject!r}, recipients={len(recipients)}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {e}") from e

    logger.info(f"Email sent: subject={subject!r}, recipients={len(recipients)}")


def send_report_email(subject: str, html: str, csv_filename: str, csv_data: str) -> None:
    """Send an event report to the configured operator address."""
    receiver = require_setting("REPORT_RECEIVER_EMAIL")
    send_email(
        [receiver],
        subject,
        html,
        attachments=[(csv_filename, csv_data.encode("utf-8"), "csv")],
    )


def send_magic_link_email(email: str, link: str) -> None:
    html = f"""
        <h2>Sign in to the Recruiting Portal</h2>
        <p>Click the link below to sign in. The link can be used once and expires in {config.MAGIC_LINK_EXPIRE_MINUTES} minutes.</p>
        <p><a href="{escape(link, quote=True)}">Sign in</a></p>
        <p>If you did not request this email you can ignore it.</p>
    """
    send_email([email], "Your sign-in link", html)


def send_recruiter_invite_email(email: str) -> None:
    login_url = f"{config.APP_URL}/login"
    html = f"""
        <h2>Welcome to the Recruiting Portal</h2>
        <p>You've been invited to join our recruiting team as a recruiter.</p>
        <p>Please sign in using your email address: <strong>{escape(email)}</strong></p>
        <p>You can access the portal at: <a href="{escape(login_url, quote=True)}">{escape(login_url)}</a></p>
        <p>Best regards,<br>The Recruiting Team</p>
    """
    send_email([email], "You've been invited to join our Recruiting Portal", html)
