from typing import List, Optional
from uuid import UUID

from sqlalchemy import Row, func, select
from sqlalchemy.orm import Session

from admind.ads.metrics import derived_ad_metrics
from admind.db.enums import AdPlatformEnum, AdStatusEnum
from admind.db.models import Ad, utcnow


class AdsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list(self, user_id: str) -> List[Ad]:
        stmt = select(Ad).where(Ad.user_id == user_id).order_by(Ad.created_at.desc())
        return list(self.session.scalars(stmt).all())

    def list_recently_updated(self, user_id: str, limit: int = 5) -> List[Ad]:
        stmt = select(Ad).where(Ad.user_id == user_id).order_by(Ad.updated_at.desc()).limit(limit)
        return list(self.session.scalars(stmt).all())

    def count_by_status(self, user_id: str, status: AdStatusEnum) -> int:
        stmt = select(func.count()).select_from(Ad).where(Ad.user_id == user_id, Ad.status == status)
        return int(self.session.scalar(stmt) or 0)

    def performance_rows(self, user_id: str) -> List[Row]:
        stmt = select(Ad.spent, Ad.conversions, Ad.clicks, Ad.impressions).where(Ad.user_id == user_id)
        return list(self.session.execute(stmt).all())

    def get(self, user_id: str, ad_id: UUID) -> Optional[Ad]:
        stmt = select(Ad).where(Ad.user_id == user_id, Ad.id == ad_id)
        return self.session.scalars(stmt).first()

    def create(self, user_id: str, title: str, platform: AdPlatformEnum, **fields) -> Ad:
        ad = Ad(user_id=user_id, title=title, platform=platform, **fields)
        self._refresh_derived(ad)
        self.session.add(ad)
        self.session.commit()
        self.session.refresh(ad)
        return ad

    def update(self, user_id: str, ad_id: UUID, **fields) -> Optional[Ad]:
        ad = self.get(user_id, ad_id)
        if not ad:
            return None
        for key, value in fields.items():
            setattr(ad, key, value)
        self._refresh_derived(ad)
        # Stamp every edit, including ones that change no values.
        ad.updated_at = utcnow()
        self.session.commit()
        self.session.refresh(ad)
        return ad

    def delete(self, user_id: str, ad_id: UUID) -> bool:
        ad = self.get(user_id, ad_id)
        if not ad:
            return False
        self.session.delete(ad)
        self.session.commit()
        return True

    @staticmethod
    def _refresh_derived(ad: Ad) -> None:
        derived = derived_ad_metrics(spent=ad.spent, impressions=ad.impressions, clicks=ad.clicks)
        ad.ctr = derived["ctr"]
        ad.cpc = derived["cpc"]
