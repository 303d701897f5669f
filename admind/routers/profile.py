from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from admind.auth.dependencies import AuthContext, get_current_user
from admind.db.deps import get_session
from admind.db.repositories.profiles import ProfilesRepository
from admind.schemas.profiles import ProfileUpdate

router = APIRouter(prefix="/profile", tags=["profile"])

_PROFILE_FIELDS = ("full_name", "email", "phone", "company", "position", "avatar_url")


@router.get("")
def get_profile(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    profile = ProfilesRepository(session).get(auth.user_id)
    if profile is None:
        # Nothing saved yet; the settings form starts blank.
        return {"id": auth.user_id, **{field: None for field in _PROFILE_FIELDS}}
    return jsonable_encoder(profile)


@router.put("")
def update_profile(
    payload: ProfileUpdate,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    profile = ProfilesRepository(session).upsert(auth.user_id, **payload.model_dump())
    return jsonable_encoder(profile)
