from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from admind.auth.dependencies import AuthContext, get_current_user
from admind.db.deps import get_session
from admind.db.repositories.ads import AdsRepository
from admind.schemas.ads import AdCreate, AdStatusUpdate, AdUpdate

router = APIRouter(prefix="/ads", tags=["ads"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ad not found")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_ad(
    payload: AdCreate,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    repo = AdsRepository(session)
    ad = repo.create(
        user_id=auth.user_id,
        title=payload.title,
        platform=payload.platform,
        description=payload.description,
        status=payload.status,
        budget=payload.budget,
        start_date=payload.start_date,
        end_date=payload.end_date,
        spent=0,
        impressions=0,
        clicks=0,
        conversions=0,
    )
    return jsonable_encoder(ad)


@router.put("/{ad_id}")
def update_ad(
    ad_id: UUID,
    payload: AdUpdate,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    repo = AdsRepository(session)
    ad = repo.get(auth.user_id, ad_id)
    if not ad:
        raise _not_found()
    fields = payload.model_dump(exclude_unset=True)
    start_date = fields.get("start_date", ad.start_date)
    end_date = fields.get("end_date", ad.end_date)
    if start_date and end_date and end_date < start_date:
        raise HTTPException(
            status_code=422,
            detail="end_date must not be before start_date",
        )
    ad = repo.update(auth.user_id, ad_id, **fields)
    if not ad:
        raise _not_found()
    return jsonable_encoder(ad)


@router.patch("/{ad_id}/status")
def update_ad_status(
    ad_id: UUID,
    payload: AdStatusUpdate,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    repo = AdsRepository(session)
    ad = repo.update(auth.user_id, ad_id, status=payload.status)
    if not ad:
        raise _not_found()
    return jsonable_encoder(ad)


@router.delete("/{ad_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ad(
    ad_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> Response:
    repo = AdsRepository(session)
    if not repo.delete(auth.user_id, ad_id):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
