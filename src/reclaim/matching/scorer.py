"""Multi-factor similarity score between a lost and a found item report.

Scoring weights (max points per factor):
  Category  → 30  exact match, 15 for the same category group
  Name      → 25  × normalized edit-distance similarity
  Color     → 20  10 per color named in both descriptions, capped
  Location  → 20  × normalized edit-distance similarity
  Date      → 15  ≤1 day 15, ≤3 days 10, ≤7 days 5

Score = earned / evaluated × 100, where "evaluated" sums the max weight of
every factor whose inputs are present on both items. A factor with an input
missing on either side drops out of numerator and denominator alike.
Earning nothing on an evaluated factor still counts its full weight.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime

from .keywords import extract_colors, is_category_similar
from .similarity import string_similarity

logger = logging.getLogger(__name__)

CATEGORY_WEIGHT = 30
CATEGORY_GROUP_POINTS = 15
NAME_WEIGHT = 25
COLOR_WEIGHT = 20
COLOR_POINTS_PER_MATCH = 10
LOCATION_WEIGHT = 20
DATE_WEIGHT = 15

# (max days apart, points), checked in order
DATE_PROXIMITY_STEPS: tuple[tuple[int, int], ...] = ((1, 15), (3, 10), (7, 5))

FACTOR_WEIGHTS: dict[str, int] = {
    "category": CATEGORY_WEIGHT,
    "name": NAME_WEIGHT,
    "color": COLOR_WEIGHT,
    "location": LOCATION_WEIGHT,
    "date": DATE_WEIGHT,
}


def round_half_up(value: float) -> int:
    """Round halves up (76.5 → 77), unlike the built-in ``round`` (76.5 → 76)."""
    return int(math.floor(value + 0.5))


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def to_date(value) -> date | None:
    """Coerce a date, datetime or ISO ``YYYY-MM-DD`` string; anything else gives None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def days_apart(a, b) -> int | None:
    d1 = to_date(a)
    d2 = to_date(b)
    if d1 is None or d2 is None:
        return None
    return abs((d1 - d2).days)


def date_proximity_points(days: int) -> int:
    for max_days, points in DATE_PROXIMITY_STEPS:
        if days <= max_days:
            return points
    return 0


@dataclass
class ScoreBreakdown:
    """Points earned per factor plus the factors that were evaluated."""

    category: int = 0
    name: int = 0
    color: int = 0
    location: int = 0
    date: int = 0
    evaluated: list[str] = field(default_factory=list)
    shared_colors: list[str] = field(default_factory=list)

    @property
    def earned(self) -> int:
        return self.category + self.name + self.color + self.location + self.date

    @property
    def max_points(self) -> int:
        return sum(FACTOR_WEIGHTS[f] for f in self.evaluated)

    @property
    def score(self) -> int:
        if not self.max_points:
            return 0
        return round_half_up(self.earned / self.max_points * 100)


def score_breakdown(item_a, item_b) -> ScoreBreakdown:
    """Score two items factor by factor.

    Items are read by attribute (``category``, ``item_name``, ``description``,
    ``location``, ``date``); ORM rows and plain objects work alike. Missing
    attributes are treated as empty.
    """
    result = ScoreBreakdown()

    # --- Category ---
    cat_a = _text(getattr(item_a, "category", None))
    cat_b = _text(getattr(item_b, "category", None))
    if cat_a and cat_b:
        result.evaluated.append("category")
        if cat_a == cat_b:
            result.category = CATEGORY_WEIGHT
        elif is_category_similar(cat_a, cat_b):
            result.category = CATEGORY_GROUP_POINTS

    # --- Item name ---
    name_a = _text(getattr(item_a, "item_name", None))
    name_b = _text(getattr(item_b, "item_name", None))
    if name_a and name_b:
        result.evaluated.append("name")
        result.name = round_half_up(string_similarity(name_a, name_b) * NAME_WEIGHT)

    # --- Colors named in both descriptions ---
    desc_a = _text(getattr(item_a, "description", None))
    desc_b = _text(getattr(item_b, "description", None))
    if desc_a and desc_b:
        result.evaluated.append("color")
        colors_b = set(extract_colors(desc_b))
        result.shared_colors = [c for c in extract_colors(desc_a) if c in colors_b]
        result.color = min(COLOR_WEIGHT, len(result.shared_colors) * COLOR_POINTS_PER_MATCH)

    # --- Location ---
    loc_a = _text(getattr(item_a, "location", None))
    loc_b = _text(getattr(item_b, "location", None))
    if loc_a and loc_b:
        result.evaluated.append("location")
        result.location = round_half_up(string_similarity(loc_a, loc_b) * LOCATION_WEIGHT)

    # --- Date proximity ---
    days = days_apart(getattr(item_a, "date", None), getattr(item_b, "date", None))
    if days is not None:
        result.evaluated.append("date")
        result.date = date_proximity_points(days)

    return result


def score_items(item_a, item_b) -> int:
    """Return the 0-100 similarity score between two items."""
    breakdown = score_breakdown(item_a, item_b)
    logger.debug(
        "Score %s: category=%d name=%d color=%d location=%d date=%d (%d/%d)",
        breakdown.score, breakdown.category, breakdown.name, breakdown.color,
        breakdown.location, breakdown.date, breakdown.earned, breakdown.max_points,
    )
    return breakdown.score
