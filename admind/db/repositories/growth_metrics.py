from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from admind.db.models import GrowthMetric


class GrowthMetricsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_chronological(self, user_id: str) -> List[GrowthMetric]:
        stmt = select(GrowthMetric).where(GrowthMetric.user_id == user_id).order_by(GrowthMetric.metric_date.asc())
        return list(self.session.scalars(stmt).all())

    def most_recent(self, user_id: str, limit: int = 30) -> List[GrowthMetric]:
        stmt = (
            select(GrowthMetric)
            .where(GrowthMetric.user_id == user_id)
            .order_by(GrowthMetric.metric_date.desc())
            .limit(limit)
        )
        return list(self.session.scalars(stmt).all())
