"""Per-location loss/recovery statistics over the whole item corpus.

Locations are grouped by their exact string: "Library" and "library" are
separate buckets. Statistics are recomputed from scratch on every call.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from ..matching.scorer import days_apart, round_half_up

HIGH_RISK_LOSS_PROBABILITY = 60
HIGH_RECOVERY_RATE = 50
PREDICTION_WINDOW_DAYS = 7
TOP_N = 3


@dataclass
class LocationStat:
    location: str
    lost_count: int = 0
    found_count: int = 0

    @property
    def total_reports(self) -> int:
        return self.lost_count + self.found_count

    @property
    def loss_probability(self) -> int:
        if not self.total_reports:
            return 0
        return round_half_up(self.lost_count / self.total_reports * 100)

    @property
    def recovery_rate(self) -> int:
        """Found reports per lost report, in percent; 0 when nothing was lost here."""
        if not self.lost_count:
            return 0
        return round_half_up(self.found_count / self.lost_count * 100)


@dataclass
class HotspotReport:
    per_location: list[LocationStat] = field(default_factory=list)
    high_risk: list[LocationStat] = field(default_factory=list)
    high_recovery: list[LocationStat] = field(default_factory=list)


@dataclass
class LocationSummary:
    location: str
    total_reports: int
    lost_items: int
    found_items: int
    most_common_categories: list[tuple[str, int]]


@dataclass
class LocationPrediction:
    location: str
    confidence: int            # share of similar found items at this location, %
    similar_items_found: int


def analyze_hotspots(items) -> HotspotReport:
    """Group items by location and flag high-risk / high-recovery places.

    Every item counts regardless of status. Items without a location are
    skipped. ``per_location`` is ordered by report volume, busiest first.
    """
    stats: dict[str, LocationStat] = {}
    for item in items:
        location = getattr(item, "location", None)
        if not location:
            continue
        stat = stats.setdefault(location, LocationStat(location=location))
        if item.type == "lost":
            stat.lost_count += 1
        elif item.type == "found":
            stat.found_count += 1

    per_location = sorted(stats.values(), key=lambda s: s.total_reports, reverse=True)
    return HotspotReport(
        per_location=per_location,
        high_risk=[s for s in per_location if s.loss_probability > HIGH_RISK_LOSS_PROBABILITY],
        high_recovery=[s for s in per_location if s.recovery_rate > HIGH_RECOVERY_RATE],
    )


def location_stats(location: str, items) -> LocationSummary:
    here = [i for i in items if i.location == location]
    categories = Counter(i.category for i in here if i.category)
    return LocationSummary(
        location=location,
        total_reports=len(here),
        lost_items=sum(1 for i in here if i.type == "lost"),
        found_items=sum(1 for i in here if i.type == "found"),
        most_common_categories=categories.most_common(TOP_N),
    )


def location_risk(location: str, items) -> int:
    """Percentage of reports at *location* that are lost items (0 when none are)."""
    summary = location_stats(location, items)
    if not summary.lost_items:
        return 0
    return round_half_up(summary.lost_items / (summary.lost_items + summary.found_items) * 100)


def predict_item_location(lost_item, items) -> list[LocationPrediction]:
    """Suggest where to look for *lost_item*.

    Uses found items of the same category reported within a week of the
    loss; returns their three most common locations.
    """
    similar = []
    for item in items:
        if item.type != "found" or item.category != lost_item.category:
            continue
        days = days_apart(item.date, lost_item.date)
        if days is None or days > PREDICTION_WINDOW_DAYS:
            continue
        similar.append(item)

    if not similar:
        return []

    freq = Counter(i.location for i in similar)
    return [
        LocationPrediction(
            location=location,
            confidence=round_half_up(count / len(similar) * 100),
            similar_items_found=count,
        )
        for location, count in freq.most_common(TOP_N)
    ]
