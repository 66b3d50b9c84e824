"""Normalized edit-distance similarity between short strings (item names, locations)."""

from __future__ import annotations


def _normalize(text: str | None) -> str:
    return (text or "").strip().lower()


def levenshtein_distance(s1: str, s2: str) -> int:
    """Classic Levenshtein distance: insert, delete and substitute each cost 1."""
    rows = len(s1) + 1
    cols = len(s2) + 1
    distances = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        distances[i][0] = i
    for j in range(cols):
        distances[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            if s1[i - 1] == s2[j - 1]:
                distances[i][j] = distances[i - 1][j - 1]
            else:
                distances[i][j] = min(
                    distances[i - 1][j - 1] + 1,  # substitution
                    distances[i][j - 1] + 1,      # insertion
                    distances[i - 1][j] + 1,      # deletion
                )
    return distances[-1][-1]


def string_similarity(a: str | None, b: str | None) -> float:
    """Similarity in [0, 1]: ``1 - distance / len(longer)``.

    Comparison is case-insensitive and ignores surrounding whitespace.
    Identical strings give 1.0; one empty side gives 0.0.

    The distance is always normalized by the longer string's length,
    whichever argument it came from. Levenshtein distance is symmetric,
    so swapping arguments yields the same value, but callers that need a
    deterministic tie-break must supply their own secondary key rather
    than rely on argument order.
    """
    s1 = _normalize(a)
    s2 = _normalize(b)

    if s1 == s2:
        return 1.0
    if not s1 or not s2:
        return 0.0

    longer, shorter = (s1, s2) if len(s1) > len(s2) else (s2, s1)
    distance = levenshtein_distance(longer, shorter)
    return (len(longer) - distance) / len(longer)
