from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from admind.auth.dependencies import AuthContext, get_optional_user
from admind.config import Settings, get_settings
from admind.db.deps import get_session
from admind.schemas.meetings import MeetingCreate
from admind.services.email import ResendEmailClient
from admind.services.meetings import MeetingScheduler

router = APIRouter(prefix="/meetings", tags=["meetings"])


def get_email_client(settings: Settings = Depends(get_settings)) -> ResendEmailClient:
    return ResendEmailClient(
        api_key=settings.RESEND_API_KEY,
        base_url=settings.RESEND_API_BASE_URL,
        sender=settings.EMAIL_FROM,
        timeout=settings.EMAIL_REQUEST_TIMEOUT_SECONDS,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_meeting(
    payload: MeetingCreate,
    auth: Optional[AuthContext] = Depends(get_optional_user),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    email_client: ResendEmailClient = Depends(get_email_client),
) -> dict:
    scheduler = MeetingScheduler(session, settings=settings, email_client=email_client)
    result = await scheduler.schedule(user_id=auth.user_id if auth else None, payload=payload)
    return {
        "success": True,
        "meeting": jsonable_encoder(result.meeting),
        "emailSent": result.email_sent,
        "message": "Meeting created successfully",
    }
