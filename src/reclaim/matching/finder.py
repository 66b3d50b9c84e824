"""Select the best opposite-type candidates for a newly reported item."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from . import MATCH_THRESHOLD, MAX_MATCHES, check_limit, check_threshold
from .scorer import score_items

logger = logging.getLogger(__name__)


@dataclass
class MatchCandidate:
    """An existing item scored against the target. Never persisted."""

    item: Any
    score: int


def _is_self(target, candidate) -> bool:
    if candidate is target:
        return True
    target_id = getattr(target, "id", None)
    return target_id is not None and getattr(candidate, "id", None) == target_id


def is_matchable(target, candidate) -> bool:
    """Only active items of the opposite type, other than the target, can match."""
    if _is_self(target, candidate):
        return False
    if getattr(candidate, "type", None) == getattr(target, "type", None):
        return False
    return getattr(candidate, "status", None) == "active"


def find_matches(
    target,
    candidates: Iterable,
    threshold: int = MATCH_THRESHOLD,
    limit: int = MAX_MATCHES,
) -> list[MatchCandidate]:
    """Score *candidates* against *target* and return the best matches.

    Results are ordered by score, highest first. Equal scores keep the
    order in which candidates were supplied. At most *limit* entries are
    returned and every entry scores at least *threshold*.

    Raises MatchingConfigError for a threshold outside [0, 100] or a
    limit outside [0, MAX_MATCHES].
    """
    check_threshold(threshold)
    check_limit(limit, maximum=MAX_MATCHES)

    matches: list[MatchCandidate] = []
    for candidate in candidates:
        if not is_matchable(target, candidate):
            continue
        score = score_items(target, candidate)
        if score >= threshold:
            matches.append(MatchCandidate(item=candidate, score=score))

    matches.sort(key=lambda m: m.score, reverse=True)
    if len(matches) > limit:
        logger.debug("Truncating %d matches to %d", len(matches), limit)
    return matches[:limit]
