from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from admind.db.enums import MeetingTypeEnum


class MeetingCreate(BaseModel):
    """Booking request from the dashboard or the public site's booking form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = None
    description: Optional[str] = None
    attendee_name: str = Field(..., min_length=1, validation_alias=AliasChoices("attendee_name", "name"))
    attendee_email: str = Field(..., min_length=1, validation_alias=AliasChoices("attendee_email", "email"))
    notes: Optional[str] = Field(default=None, validation_alias=AliasChoices("notes", "message"))
    meeting_type: MeetingTypeEnum = Field(
        default=MeetingTypeEnum.consultation,
        validation_alias=AliasChoices("meeting_type", "meetingType"),
    )

    def resolved_title(self) -> str:
        if self.title:
            return self.title
        return f"{self.meeting_type.value.capitalize()} with {self.attendee_name}"
