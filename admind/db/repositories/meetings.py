from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from admind.db.enums import MeetingStatusEnum
from admind.db.models import Meeting


class MeetingsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list(self, user_id: str) -> List[Meeting]:
        stmt = select(Meeting).where(Meeting.user_id == user_id).order_by(Meeting.scheduled_at.desc())
        return list(self.session.scalars(stmt).all())

    def count_upcoming(self, user_id: str, now: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(Meeting)
            .where(
                Meeting.user_id == user_id,
                Meeting.status == MeetingStatusEnum.scheduled,
                Meeting.scheduled_at >= now,
            )
        )
        return int(self.session.scalar(stmt) or 0)

    def create(self, user_id: Optional[str], title: str, scheduled_at: datetime, **fields) -> Meeting:
        meeting = Meeting(user_id=user_id, title=title, scheduled_at=scheduled_at, **fields)
        self.session.add(meeting)
        self.session.commit()
        self.session.refresh(meeting)
        return meeting
