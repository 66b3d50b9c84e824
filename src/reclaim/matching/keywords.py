"""Keyword heuristics over free-text item reports.

Colors are matched by plain substring containment, so "red" is also
found in "covered".
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

COLOR_VOCABULARY: tuple[str, ...] = (
    "red", "blue", "green", "black", "white", "silver", "gold",
    "brown", "pink", "gray", "grey", "purple", "yellow", "orange",
    "navy", "cream", "beige", "bronze", "copper", "rose", "maroon",
    "turquoise", "teal", "magenta", "cyan", "indigo", "violet",
)

CATEGORY_GROUPS: dict[str, frozenset[str]] = {
    "electronics": frozenset({
        "electronics", "phone", "laptop", "tablet", "watch", "camera", "headphones",
    }),
    "accessories": frozenset({
        "accessories", "wallet", "bag", "keys", "jewelry", "keychain", "belt", "scarf",
    }),
    "clothing": frozenset({
        "clothing", "jacket", "shoes", "hat", "coat", "shirt", "pants",
    }),
}

ITEM_TYPE_WORDS: tuple[str, ...] = (
    "phone", "wallet", "bag", "watch", "keychain", "earbuds", "laptop",
    "tablet", "card", "glasses", "umbrella", "shoes", "jacket",
)

TIME_WORDS: tuple[str, ...] = (
    "today", "yesterday", "morning", "afternoon", "evening", "night", "week", "month",
)

_LOCATION_RE = re.compile(
    r"\b(?:at the|in the|on the|at|near|inside|outside)\s+([a-z\s]+?)\s*(?:[.,]|$)",
    re.IGNORECASE,
)
_WORD_RE = re.compile(r"[a-z0-9']+")

MIN_KEYWORD_LEN = 4


def extract_colors(text: str | None) -> list[str]:
    """Return every vocabulary color contained in *text*, in vocabulary order."""
    if not text:
        return []
    lower = text.lower()
    return [color for color in COLOR_VOCABULARY if color in lower]


def category_group(category: str | None) -> str | None:
    if not category:
        return None
    key = category.strip().lower()
    for group, members in CATEGORY_GROUPS.items():
        if key in members:
            return group
    return None


def is_category_similar(a: str | None, b: str | None) -> bool:
    """True when both categories belong to the same category group.

    Categories outside every group never match through this path.
    """
    group_a = category_group(a)
    return group_a is not None and group_a == category_group(b)


# ---------------------------------------------------------------------------
# Description parsing
# ---------------------------------------------------------------------------


@dataclass
class ExtractedKeywords:
    colors: list[str] = field(default_factory=list)
    item_types: list[str] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)
    times: list[str] = field(default_factory=list)
    conditions: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)


@dataclass
class DescriptionAnalysis:
    description: str
    colors: list[str]
    item_type: str           # first recognised item type, or "item"
    suggested_locations: list[str]
    time_frame: str          # first time word, or "recently"
    condition: str           # first condition, or "unknown"
    confidence: int          # 0-100


def _conditions(lower: str, words: set[str]) -> list[str]:
    conditions = []
    if "broken" in lower or "damaged" in lower:
        conditions.append("damaged")
    if "new" in words:
        conditions.append("new")
    if "old" in words or "worn" in words:
        conditions.append("old")
    return conditions


def extract_keywords(text: str | None) -> ExtractedKeywords:
    if not text:
        return ExtractedKeywords()
    lower = text.lower()
    words = _WORD_RE.findall(lower)
    word_set = set(words)

    return ExtractedKeywords(
        colors=extract_colors(lower),
        item_types=[t for t in ITEM_TYPE_WORDS if t in lower],
        locations=[m.group(1).strip() for m in _LOCATION_RE.finditer(lower) if m.group(1).strip()],
        times=[t for t in TIME_WORDS if t in lower],
        conditions=_conditions(lower, word_set),
        keywords=[w for w in words if len(w) >= MIN_KEYWORD_LEN],
    )


def parse_description(text: str | None) -> DescriptionAnalysis:
    """Turn a free-text description into structured hints for the report form."""
    kw = extract_keywords(text)
    return DescriptionAnalysis(
        description=text or "",
        colors=kw.colors,
        item_type=kw.item_types[0] if kw.item_types else "item",
        suggested_locations=kw.locations,
        time_frame=kw.times[0] if kw.times else "recently",
        condition=kw.conditions[0] if kw.conditions else "unknown",
        confidence=min(100, (len(kw.colors) + len(kw.item_types)) * 25),
    )
