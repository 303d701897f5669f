from __future__ import annotations

import logging
import secrets
import string
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from html import escape
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from admind.config import Settings
from admind.db.enums import MeetingStatusEnum
from admind.db.models import Meeting
from admind.db.repositories import MeetingsRepository
from admind.errors import MeetingCreationError
from admind.schemas.meetings import MeetingCreate
from admind.services.email import EmailDeliveryError, ResendEmailClient

logger = logging.getLogger("meetings.scheduler")

INVITE_CODE_LENGTH = 6
_BASE36 = string.digits + string.ascii_lowercase
MORNING_LEAD = timedelta(hours=5)
AFTERNOON_LEAD = timedelta(hours=10)


def generate_invite_code(length: int = INVITE_CODE_LENGTH) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length)).upper()


def generate_room_id(prefix: str, now: Optional[datetime] = None) -> str:
    millis = int(now.timestamp() * 1000) if now else time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"{prefix}-{millis}-{suffix}"


def local_now(tz: Optional[tzinfo] = None) -> datetime:
    if tz is not None:
        return datetime.now(tz)
    return datetime.now().astimezone()


def calculate_scheduled_time(created_at: datetime) -> datetime:
    """Morning bookings (before 12:00) land 5 hours out, the rest 10 hours out."""
    lead = MORNING_LEAD if created_at.hour < 12 else AFTERNOON_LEAD
    return created_at + lead


def meeting_link(base_url: str, room_id: str) -> str:
    return f"{base_url.rstrip('/')}/{room_id}"


def format_scheduled_time(value: datetime, tz: Optional[tzinfo] = None) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(tz) if tz is not None else value.astimezone()
    return local.strftime("%A, %B %d, %Y at %I:%M %p %Z").strip()


@dataclass(frozen=True)
class MeetingEmail:
    to: list[str]
    subject: str
    html: str


def build_meeting_emails(
    meeting: Meeting, *, admin_email: str, link: str, scheduled_for: str
) -> tuple[MeetingEmail, MeetingEmail]:
    name = escape(meeting.attendee_name)
    code = escape(meeting.invite_code)
    when = escape(scheduled_for)
    href = escape(link, quote=True)
    notes = escape(meeting.notes or "No additional notes")
    title = meeting.title

    admin = MeetingEmail(
        to=[admin_email],
        subject=f"New Meeting Scheduled - {title}",
        html=(
            "<h2>New Meeting Scheduled</h2>"
            f"<p><strong>Invite Code:</strong> {code}</p>"
            f"<p><strong>Scheduled Date &amp; Time:</strong> {when}</p>"
            f"<p><strong>User Name:</strong> {name}</p>"
            f"<p><strong>User Email:</strong> {escape(meeting.attendee_email)}</p>"
            f'<p><strong>Meeting Link:</strong> <a href="{href}">{href}</a></p>'
            f"<p><strong>Notes:</strong> {notes}</p>"
        ),
    )
    attendee = MeetingEmail(
        to=[meeting.attendee_email],
        subject=f"Meeting Confirmation - {title}",
        html=(
            "<h2>Meeting Confirmation</h2>"
            f"<p>Dear {name},</p>"
            "<p>Your meeting has been successfully scheduled!</p>"
            f"<p><strong>Invite Code:</strong> {code}</p>"
            f"<p><strong>Scheduled Date &amp; Time:</strong> {when}</p>"
            f'<p><strong>Meeting Link:</strong> <a href="{href}">Join Meeting</a></p>'
            f"<p><strong>Notes:</strong> {notes}</p>"
            "<p>We look forward to speaking with you!</p>"
            "<p>Best regards,<br>The ADMIND Team</p>"
        ),
    )
    return admin, attendee


@dataclass(frozen=True)
class ScheduledMeeting:
    meeting: Meeting
    email_sent: bool


class MeetingScheduler:
    def __init__(self, session: Session, *, settings: Settings, email_client: ResendEmailClient) -> None:
        self.session = session
        self.settings = settings
        self.email_client = email_client
        self.repo = MeetingsRepository(session)

    def create(self, *, user_id: Optional[str], payload: MeetingCreate, now: Optional[datetime] = None) -> Meeting:
        created_at = now or local_now(self.settings.meeting_tz)
        scheduled_at = calculate_scheduled_time(created_at).astimezone(timezone.utc)
        try:
            meeting = self.repo.create(
                user_id=user_id,
                title=payload.resolved_title(),
                scheduled_at=scheduled_at,
                description=payload.description,
                meeting_type=payload.meeting_type,
                status=MeetingStatusEnum.scheduled,
                room_id=generate_room_id(self.settings.MEETING_ROOM_PREFIX, created_at),
                attendee_name=payload.attendee_name,
                attendee_email=payload.attendee_email,
                notes=payload.notes,
                invite_code=generate_invite_code(),
            )
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Meeting insert failed", exc_info=exc, extra={"user_id": user_id})
            raise MeetingCreationError() from exc
        logger.info(
            "Meeting scheduled",
            extra={"meeting_id": str(meeting.id), "user_id": user_id, "scheduled_at": scheduled_at.isoformat()},
        )
        return meeting

    async def notify(self, meeting: Meeting) -> bool:
        admin_email = self.settings.ADMIN_EMAIL
        if not admin_email:
            logger.error("ADMIN_EMAIL is not configured; skipping meeting emails", extra={"meeting_id": str(meeting.id)})
            return False
        admin, attendee = build_meeting_emails(
            meeting,
            admin_email=admin_email,
            link=meeting_link(self.settings.MEETING_BASE_URL, meeting.room_id),
            scheduled_for=format_scheduled_time(meeting.scheduled_at, self.settings.meeting_tz),
        )
        try:
            for email in (admin, attendee):
                await self.email_client.send_email(to=email.to, subject=email.subject, html=email.html)
        except EmailDeliveryError as exc:
            logger.error(
                "Meeting emails failed; meeting was still created",
                exc_info=exc,
                extra={"meeting_id": str(meeting.id)},
            )
            return False
        return True

    async def schedule(
        self, *, user_id: Optional[str], payload: MeetingCreate, now: Optional[datetime] = None
    ) -> ScheduledMeeting:
        meeting = self.create(user_id=user_id, payload=payload, now=now)
        email_sent = await self.notify(meeting)
        return ScheduledMeeting(meeting=meeting, email_sent=email_sent)
