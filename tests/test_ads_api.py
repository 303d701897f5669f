from datetime import date, datetime, timezone
from uuid import uuid4

from sqlalchemy import select

from admind.db.enums import AdPlatformEnum, AdStatusEnum
from admind.db.models import Ad


def test_create_ad_starts_with_zero_performance(api_client, auth_context):
    resp = api_client.post(
        "/ads",
        json={
            "title": "Spring Launch",
            "description": "Lead gen",
            "platform": "instagram",
            "budget": 1500,
            "start_date": "2024-03-01",
            "end_date": "2024-03-31",
        },
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["user_id"] == auth_context.user_id
    assert body["status"] == "draft"
    assert body["platform"] == "instagram"
    assert body["budget"] == 1500
    assert body["spent"] == 0
    assert body["ctr"] == 0
    assert body["cpc"] == 0
    assert body["start_date"] == "2024-03-01"


def test_create_ad_validation(api_client):
    assert api_client.post("/ads", json={"title": "No platform"}).status_code == 422
    assert api_client.post("/ads", json={"title": "Bad", "platform": "myspace"}).status_code == 422
    resp = api_client.post(
        "/ads",
        json={"title": "Backwards", "platform": "google", "start_date": "2024-04-01", "end_date": "2024-03-01"},
    )
    assert resp.status_code == 422


def test_update_ad_recomputes_derived_metrics(api_client, make_ad, db_session):
    ad = make_ad(title="Old", spent=90, impressions=3000, clicks=30, status=AdStatusEnum.paused)
    db_session.execute(Ad.__table__.update().where(Ad.id == ad.id).values(ctr=0, cpc=0))
    db_session.commit()

    resp = api_client.put(f"/ads/{ad.id}", json={"title": "New", "platform": "linkedin", "budget": 200})

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "New"
    assert body["platform"] == "linkedin"
    assert body["status"] == "paused"
    assert body["ctr"] == 1.0
    assert body["cpc"] == 3.0


def test_update_ad_status(api_client, make_ad):
    ad = make_ad(status=AdStatusEnum.draft)

    resp = api_client.patch(f"/ads/{ad.id}/status", json={"status": "active"})

    assert resp.status_code == 200
    assert resp.json()["status"] == "active"
    assert api_client.patch(f"/ads/{ad.id}/status", json={"status": "archived"}).status_code == 422


def test_ads_of_other_users_are_not_found(api_client, make_ad):
    other = make_ad(user_id="someone-else", title="Not yours")

    assert api_client.put(f"/ads/{other.id}", json={"title": "Mine", "platform": "google"}).status_code == 404
    assert api_client.patch(f"/ads/{other.id}/status", json={"status": "paused"}).status_code == 404
    resp = api_client.delete(f"/ads/{other.id}")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Ad not found"}
    assert api_client.delete(f"/ads/{uuid4()}").status_code == 404
    assert api_client.delete("/ads/not-a-uuid").status_code == 422


def test_delete_ad_removes_it_from_listing_only_for_owner(api_client, make_ad, db_session):
    keep = make_ad(title="Keep", platform=AdPlatformEnum.google)
    doomed = make_ad(title="Doomed")
    other = make_ad(user_id="someone-else", title="Doomed elsewhere")

    resp = api_client.delete(f"/ads/{doomed.id}")
    assert resp.status_code == 204

    listing = api_client.get("/dashboard/ads").json()
    assert [ad["id"] for ad in listing["ads"]] == [str(keep.id)]
    assert listing["stats"]["totalAds"] == 1

    remaining = db_session.scalars(select(Ad.id).where(Ad.user_id == "someone-else")).all()
    assert remaining == [other.id]


def test_ads_endpoints_require_auth(anonymous_client):
    assert anonymous_client.post("/ads", json={"title": "x", "platform": "google"}).status_code == 401
    assert anonymous_client.delete(f"/ads/{uuid4()}").status_code == 401


def test_resending_current_status_refreshes_updated_at(api_client, make_ad):
    stale = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ad = make_ad(status=AdStatusEnum.active, updated_at=stale)

    resp = api_client.patch(f"/ads/{ad.id}/status", json={"status": "active"})

    assert resp.status_code == 200
    assert datetime.fromisoformat(resp.json()["updated_at"]).replace(tzinfo=None) > stale.replace(tzinfo=None)


def test_unchanged_edit_moves_ad_to_top_of_recent_activity(api_client, make_ad):
    older = make_ad(title="Older", updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    make_ad(title="Newer", updated_at=datetime(2024, 1, 2, tzinfo=timezone.utc))
    assert api_client.get("/dashboard/recent-activity").json()[0]["title"] == "Newer"

    resp = api_client.put(f"/ads/{older.id}", json={"title": "Older", "platform": "facebook"})
    assert resp.status_code == 200

    assert [item["title"] for item in api_client.get("/dashboard/recent-activity").json()] == ["Older", "Newer"]


def test_update_ad_checks_end_date_against_stored_start_date(api_client, make_ad, db_session):
    ad = make_ad(title="Dated")
    ad.start_date = date(2024, 3, 10)
    db_session.commit()

    resp = api_client.put(f"/ads/{ad.id}", json={"title": "Dated", "platform": "facebook", "end_date": "2024-03-01"})
    assert resp.status_code == 422
    assert resp.json() == {"detail": "end_date must not be before start_date"}

    ok = api_client.put(f"/ads/{ad.id}", json={"title": "Dated", "platform": "facebook", "end_date": "2024-03-31"})
    assert ok.status_code == 200
    assert ok.json()["start_date"] == "2024-03-10"
    assert ok.json()["end_date"] == "2024-03-31"
