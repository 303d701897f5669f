"""Per-user dashboard summaries.

Each view reads a handful of owner-scoped row sets and reduces them in
memory. Views differ in how they treat a failed read, see ``ReadPolicy``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timezone
from enum import Enum
from math import floor
from typing import Any, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from admind.ads.metrics import click_through_rate, conversion_rate, percentage_change
from admind.db.enums import AdPlatformEnum, AdStatusEnum, GrowthMetricNameEnum, MeetingStatusEnum
from admind.db.repositories import AdsRepository, GrowthMetricsRepository, MeetingsRepository
from admind.errors import DashboardError

T = TypeVar("T")

TREND_WINDOW = 30
REVENUE_TARGET_MARKUP = 1.2
RECENT_ACTIVITY_LIMIT = 5
PLATFORM_COLORS = ("#059669", "#10b981", "#34d399", "#6ee7b7", "#a7f3d0")
NO_DATA_PLATFORM = {"name": "No Data", "value": 100, "color": "#6b7280"}
_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class ReadPolicy(str, Enum):
    fail_closed = "fail_closed"
    fail_open = "fail_open"


def _num(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def _display_name(name: str) -> str:
    return name[:1].upper() + name[1:]


# --- pure reductions -------------------------------------------------------


def window_change(values: Sequence[float], window: int = TREND_WINDOW) -> float:
    """Compare the first half of ``values`` against the second half.

    ``values`` must already be ordered newest first. Only the first ``window``
    entries count; a short series just leaves the older half smaller or empty.
    """
    half = window // 2
    recent = sum(_num(v) for v in values[:half])
    previous = sum(_num(v) for v in values[half:window])
    return percentage_change(recent, previous)


def metric_trend(metrics: Iterable[Any], metric_name: str, window: int = TREND_WINDOW) -> float:
    values = [m.metric_value for m in metrics if m.metric_name == metric_name]
    return window_change(values, window)


def summarize_stats(
    *,
    ad_rows: Iterable[Any],
    active_campaigns: int,
    upcoming_meetings: int,
    recent_metrics: Sequence[Any],
) -> dict[str, Any]:
    ad_rows = list(ad_rows)
    return {
        "totalRevenue": sum(_num(row.spent) for row in ad_rows),
        "revenueChange": metric_trend(recent_metrics, GrowthMetricNameEnum.revenue.value),
        "activeCampaigns": active_campaigns,
        "totalConversions": int(sum(_num(row.conversions) for row in ad_rows)),
        "conversionChange": metric_trend(recent_metrics, GrowthMetricNameEnum.conversions.value),
        "upcomingMeetings": upcoming_meetings,
    }


def monthly_revenue(metrics: Iterable[Any]) -> list[dict[str, Any]]:
    """Sum revenue per short month name, in the order months first appear."""
    buckets: dict[str, float] = {}
    for metric in metrics:
        if metric.metric_name != GrowthMetricNameEnum.revenue.value:
            continue
        month = _MONTH_ABBR[metric.metric_date.month - 1]
        buckets[month] = buckets.get(month, 0.0) + _num(metric.metric_value)
    return [
        {"month": month, "revenue": revenue, "target": revenue * REVENUE_TARGET_MARKUP}
        for month, revenue in buckets.items()
    ]


def _count_by_platform(ads: Iterable[Any]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for ad in ads:
        platform = _enum_value(ad.platform)
        counts[platform] = counts.get(platform, 0) + 1
    return counts


def platform_distribution(ads: Sequence[Any]) -> list[dict[str, Any]]:
    counts = _count_by_platform(ads)
    total = sum(counts.values())
    if not total:
        return [dict(NO_DATA_PLATFORM)]
    return [
        {
            "name": _display_name(platform),
            "value": _round_half_up(count / total * 100),
            "color": PLATFORM_COLORS[index % len(PLATFORM_COLORS)],
        }
        for index, (platform, count) in enumerate(counts.items())
    ]


def conversion_performance(ads: Sequence[Any]) -> list[dict[str, Any]]:
    results = []
    for platform in _count_by_platform(ads):
        platform_ads = [ad for ad in ads if _enum_value(ad.platform) == platform]
        conversions = int(sum(_num(ad.conversions) for ad in platform_ads))
        clicks = int(sum(_num(ad.clicks) for ad in platform_ads))
        results.append(
            {
                "platform": _display_name(platform),
                "conversions": conversions,
                "rate": round(conversion_rate(conversions, clicks), 1),
            }
        )
    return results


def revenue_total(metrics: Iterable[Any]) -> float:
    return sum(_num(m.metric_value) for m in metrics if m.metric_name == GrowthMetricNameEnum.revenue.value)


def analytics_kpis(total_revenue: float, ads: Sequence[Any]) -> dict[str, Any]:
    clicks = int(sum(_num(ad.clicks) for ad in ads))
    impressions = int(sum(_num(ad.impressions) for ad in ads))
    return {
        "totalRevenue": total_revenue,
        "totalConversions": int(sum(_num(ad.conversions) for ad in ads)),
        "clickThroughRate": click_through_rate(clicks, impressions),
        "impressions": impressions,
        "clicks": clicks,
    }


def filter_ads(
    ads: Iterable[Any],
    *,
    search: Optional[str] = None,
    status: Optional[AdStatusEnum] = None,
    platform: Optional[AdPlatformEnum] = None,
) -> list[Any]:
    needle = (search or "").strip().lower()
    return [
        ad
        for ad in ads
        if (not needle or needle in (ad.title or "").lower())
        and (status is None or _enum_value(ad.status) == status.value)
        and (platform is None or _enum_value(ad.platform) == platform.value)
    ]


def ads_stats(ads: Sequence[Any]) -> dict[str, Any]:
    return {
        "totalAds": len(ads),
        "activeAds": sum(1 for ad in ads if _enum_value(ad.status) == AdStatusEnum.active.value),
        "totalSpent": sum(_num(ad.spent) for ad in ads),
        "totalClicks": int(sum(_num(ad.clicks) for ad in ads)),
    }


def meetings_stats(meetings: Sequence[Any], now: datetime) -> dict[str, Any]:
    now = _as_utc(now)
    return {
        "totalMeetings": len(meetings),
        "upcomingMeetings": sum(1 for m in meetings if _as_utc(m.scheduled_at) > now),
        "completedMeetings": sum(
            1 for m in meetings if _enum_value(m.status) == MeetingStatusEnum.completed.value
        ),
    }


def recent_activity_item(ad: Any) -> dict[str, Any]:
    return {
        "title": ad.title,
        "platform": _enum_value(ad.platform),
        "spent": _num(ad.spent),
        "conversions": ad.conversions or 0,
        "ctr": _num(ad.ctr),
        "updated_at": ad.updated_at,
    }


# --- views -----------------------------------------------------------------


class DashboardService:
    """Reads and reduces the dashboard views for one user."""

    def __init__(self, session: Session, user_id: str) -> None:
        self.session = session
        self.user_id = user_id
        self.ads = AdsRepository(session)
        self.meetings = MeetingsRepository(session)
        self.metrics = GrowthMetricsRepository(session)

    def _read(
        self,
        policy: ReadPolicy,
        logger: logging.Logger,
        table: str,
        fetch: Callable[[], T],
        fallback: T,
    ) -> T:
        try:
            return fetch()
        except SQLAlchemyError as exc:
            logger.error(
                "Dashboard read failed",
                exc_info=exc,
                extra={"user_id": self.user_id, "table": table, "policy": policy.value},
            )
            self.session.rollback()
            if policy is ReadPolicy.fail_closed:
                raise DashboardError() from exc
            return fallback

    def stats(self, now: Optional[datetime] = None) -> dict[str, Any]:
        policy, logger = ReadPolicy.fail_closed, logging.getLogger("dashboard.stats")
        now = now or datetime.now(timezone.utc)
        ad_rows = self._read(policy, logger, "ads", lambda: self.ads.performance_rows(self.user_id), [])
        active = self._read(
            policy, logger, "ads", lambda: self.ads.count_by_status(self.user_id, AdStatusEnum.active), 0
        )
        upcoming = self._read(
            policy, logger, "meetings", lambda: self.meetings.count_upcoming(self.user_id, now), 0
        )
        recent_metrics = self._read(
            policy,
            logger,
            "growth_metrics",
            lambda: self.metrics.most_recent(self.user_id, limit=TREND_WINDOW),
            [],
        )
        return summarize_stats(
            ad_rows=ad_rows,
            active_campaigns=active,
            upcoming_meetings=upcoming,
            recent_metrics=recent_metrics,
        )

    def analytics(self) -> dict[str, Any]:
        policy, logger = ReadPolicy.fail_open, logging.getLogger("dashboard.analytics")
        # Reduce each read before the next one: a failed read rolls the
        # session back and expires rows loaded earlier.
        metrics = self._read(
            policy, logger, "growth_metrics", lambda: self.metrics.list_chronological(self.user_id), []
        )
        revenue = monthly_revenue(metrics)
        total_revenue = revenue_total(metrics)
        ads = self._read(policy, logger, "ads", lambda: self.ads.list(self.user_id), [])
        return {
            "revenue": revenue,
            # No traffic-source data is collected.
            "traffic": [],
            "conversions": conversion_performance(ads),
            "platforms": platform_distribution(ads),
            "kpis": analytics_kpis(total_revenue, ads),
        }

    def ads_overview(
        self,
        *,
        search: Optional[str] = None,
        status: Optional[AdStatusEnum] = None,
        platform: Optional[AdPlatformEnum] = None,
    ) -> dict[str, Any]:
        policy, logger = ReadPolicy.fail_open, logging.getLogger("dashboard.ads")
        ads = self._read(policy, logger, "ads", lambda: self.ads.list(self.user_id), [])
        return {
            "ads": filter_ads(ads, search=search, status=status, platform=platform),
            "stats": ads_stats(ads),
        }

    def meetings_overview(self, now: Optional[datetime] = None) -> dict[str, Any]:
        policy, logger = ReadPolicy.fail_open, logging.getLogger("dashboard.meetings")
        meetings = self._read(policy, logger, "meetings", lambda: self.meetings.list(self.user_id), [])
        return {
            "meetings": meetings,
            "stats": meetings_stats(meetings, now or datetime.now(timezone.utc)),
        }

    def recent_activity(self) -> list[dict[str, Any]]:
        policy, logger = ReadPolicy.fail_closed, logging.getLogger("dashboard.recent_activity")
        ads = self._read(
            policy,
            logger,
            "ads",
            lambda: self.ads.list_recently_updated(self.user_id, limit=RECENT_ACTIVITY_LIMIT),
            [],
        )
        return [recent_activity_item(ad) for ad in ads]
