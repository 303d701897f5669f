from __future__ import annotations

from typing import Any, Optional


def _number(val: Any) -> float:
    if val is None:
        return 0.0
    try:
        return float(val)
    except (TypeError, ValueError):
        return 0.0


def _ratio_pct(numerator: Any, denominator: Any) -> float:
    denom = _number(denominator)
    if denom <= 0:
        return 0.0
    return _number(numerator) / denom * 100


def click_through_rate(clicks: Optional[int], impressions: Optional[int]) -> float:
    """Clicks per 100 impressions; 0 when there are no impressions."""
    return _ratio_pct(clicks, impressions)


def conversion_rate(conversions: Optional[int], clicks: Optional[int]) -> float:
    return _ratio_pct(conversions, clicks)


def cost_per_click(spent: Optional[float], clicks: Optional[int]) -> float:
    clicks_val = _number(clicks)
    if clicks_val <= 0:
        return 0.0
    return _number(spent) / clicks_val


def percentage_change(recent: float, previous: float) -> float:
    """Relative change of ``recent`` over ``previous``; 0 when there is no previous value."""
    if previous is None or previous <= 0:
        return 0.0
    return (recent - previous) / previous * 100


def derived_ad_metrics(
    *,
    spent: Optional[float],
    impressions: Optional[int],
    clicks: Optional[int],
) -> dict[str, float]:
    return {
        "ctr": round(click_through_rate(clicks, impressions), 2),
        "cpc": round(cost_per_click(spent, clicks), 2),
    }
