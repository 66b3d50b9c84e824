"""Item matching: string similarity, keyword extraction, scoring, candidate selection.

Score tiers (0-100):
  MATCH_THRESHOLD         60  candidate counts as a match
  NOTIFY_MIN_SCORE        60  a match notification is worth sending
  GOOD_MATCH_THRESHOLD    70
  STRONG_MATCH_THRESHOLD  80  "strong match" wording in notifications
  PERFECT_MATCH_THRESHOLD 90
"""

MATCH_THRESHOLD = 60
NOTIFY_MIN_SCORE = 60
GOOD_MATCH_THRESHOLD = 70
STRONG_MATCH_THRESHOLD = 80
PERFECT_MATCH_THRESHOLD = 90

MAX_MATCHES = 5


class MatchingConfigError(ValueError):
    """Raised when a threshold, limit or cap is outside its valid range."""


def check_threshold(threshold: int | float, name: str = "threshold") -> None:
    if not 0 <= threshold <= 100:
        raise MatchingConfigError(f"{name} must be within [0, 100], got {threshold!r}")


def check_limit(limit: int, name: str = "limit", maximum: int | None = None) -> None:
    if limit < 0:
        raise MatchingConfigError(f"{name} must be >= 0, got {limit!r}")
    if maximum is not None and limit > maximum:
        raise MatchingConfigError(f"{name} must be <= {maximum}, got {limit!r}")
