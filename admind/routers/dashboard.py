from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from admind.auth.dependencies import AuthContext, get_current_user
from admind.db.deps import get_session
from admind.db.enums import AdPlatformEnum, AdStatusEnum
from admind.services.dashboard import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _service(auth: AuthContext, session: Session) -> DashboardService:
    return DashboardService(session, auth.user_id)


@router.get("/stats")
def get_stats(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    return _service(auth, session).stats()


@router.get("/analytics")
def get_analytics(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    return _service(auth, session).analytics()


@router.get("/ads")
def get_ads(
    search: Optional[str] = Query(default=None),
    status: Optional[AdStatusEnum] = Query(default=None),
    platform: Optional[AdPlatformEnum] = Query(default=None),
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    overview = _service(auth, session).ads_overview(search=search, status=status, platform=platform)
    return jsonable_encoder(overview)


@router.get("/meetings")
def get_meetings(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    return jsonable_encoder(_service(auth, session).meetings_overview())


@router.get("/recent-activity")
def get_recent_activity(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> list:
    return jsonable_encoder(_service(auth, session).recent_activity())
