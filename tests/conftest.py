import os
import sys
from datetime import date, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_admind.db")
os.environ.setdefault("CLERK_JWT_ISSUER", "https://clerk.test")
os.environ.setdefault("CLERK_JWKS_URL", "https://clerk.test/.well-known/jwks.json")
os.environ.setdefault("ADMIN_EMAIL", "admin@admind.test")
os.environ.setdefault("RESEND_API_KEY", "re_test_key")

from admind.auth.dependencies import AuthContext, get_current_user, get_optional_user
from admind.db.base import Base, SessionLocal, engine
from admind.db.deps import get_session
from admind.db.enums import AdPlatformEnum, AdStatusEnum
from admind.db.models import Ad, GrowthMetric
from admind.main import app
from admind.routers.meetings import get_email_client

TEST_USER_ID = "user_test_123"
OTHER_USER_ID = "user_other_456"


class FakeEmailClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.sent: list[dict] = []
        self.error = error

    async def send_email(self, *, to: list[str], subject: str, html: str) -> str | None:
        if self.error is not None:
            raise self.error
        self.sent.append({"to": to, "subject": subject, "html": html})
        return f"email_{len(self.sent)}"


@pytest.fixture(scope="session", autouse=True)
def create_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()


@pytest.fixture()
def auth_context() -> AuthContext:
    return AuthContext(user_id=TEST_USER_ID, email="owner@admind.test")


@pytest.fixture()
def email_client() -> FakeEmailClient:
    return FakeEmailClient()


@pytest.fixture()
def override_dependencies(db_session, email_client):
    def get_session_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_email_client] = lambda: email_client
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def api_client(override_dependencies, auth_context):
    app.dependency_overrides[get_current_user] = lambda: auth_context
    app.dependency_overrides[get_optional_user] = lambda: auth_context
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def anonymous_client(override_dependencies):
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def make_ad(db_session):
    def _make_ad(
        *,
        user_id: str = TEST_USER_ID,
        title: str = "Spring Sale",
        platform: AdPlatformEnum = AdPlatformEnum.facebook,
        status: AdStatusEnum = AdStatusEnum.active,
        spent: float = 0,
        impressions: int = 0,
        clicks: int = 0,
        conversions: int = 0,
        budget: float | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> Ad:
        ad = Ad(
            user_id=user_id,
            title=title,
            platform=platform,
            status=status,
            spent=spent,
            impressions=impressions,
            clicks=clicks,
            conversions=conversions,
            budget=budget,
            ctr=round(clicks / impressions * 100, 2) if impressions else 0,
            cpc=round(spent / clicks, 2) if clicks else 0,
        )
        if created_at is not None:
            ad.created_at = created_at
        if updated_at is not None:
            ad.updated_at = updated_at
        db_session.add(ad)
        db_session.commit()
        db_session.refresh(ad)
        return ad

    return _make_ad


@pytest.fixture()
def make_metric(db_session):
    def _make_metric(
        name: str, value: float, metric_date: date, *, user_id: str = TEST_USER_ID
    ) -> GrowthMetric:
        metric = GrowthMetric(user_id=user_id, metric_name=name, metric_value=value, metric_date=metric_date)
        db_session.add(metric)
        db_session.commit()
        return metric

    return _make_metric
