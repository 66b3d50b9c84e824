"""Heuristic abuse checks on a user's reporting behaviour."""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from ..matching.similarity import string_similarity

RAPID_REPORTING_MIN_ITEMS = 5
RAPID_REPORTING_MAX_GAP_MINUTES = 60
MISSING_CONTACT_MAX_ITEMS = 2
EXCESSIVE_CLAIMS_PER_ITEM = 3
COPIED_DESCRIPTION_SIMILARITY = 0.9
SUSPICIOUS_CLAIM_WINDOW = timedelta(minutes=5)


@dataclass
class FraudFlag:
    type: str
    severity: str  # low / medium / high
    message: str


@dataclass
class TrustReport:
    user_id: int
    flags: list[FraudFlag] = field(default_factory=list)

    @property
    def risk_level(self) -> str:
        if len(self.flags) > 2:
            return "high"
        if self.flags:
            return "medium"
        return "low"

    @property
    def needs_review(self) -> bool:
        return any(f.severity == "high" for f in self.flags)


@dataclass
class ClaimCheck:
    issues: list[FraudFlag] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _mean_gap_minutes(items) -> float | None:
    stamps = sorted(t for t in (_aware(i.created_at) for i in items) if t is not None)
    if len(stamps) < 2:
        return None
    gaps = [(b - a).total_seconds() / 60 for a, b in zip(stamps, stamps[1:])]
    return sum(gaps) / len(gaps)


def analyze_behavior(user_id: int, items, notifications=()) -> TrustReport:
    report = TrustReport(user_id=user_id)
    user_items = [i for i in items if i.user_id == user_id]

    if len(user_items) >= RAPID_REPORTING_MIN_ITEMS:
        gap = _mean_gap_minutes(user_items)
        if gap is not None and gap < RAPID_REPORTING_MAX_GAP_MINUTES:
            report.flags.append(FraudFlag(
                "rapid_reporting", "medium", "Multiple items reported quickly",
            ))

    types_by_location: dict[str, set[str]] = defaultdict(set)
    for item in user_items:
        types_by_location[item.location].add(item.type)
    for location, types in types_by_location.items():
        if {"lost", "found"} <= types:
            report.flags.append(FraudFlag(
                "conflicting_reports", "high", f"Reported both lost and found at {location}",
            ))

    no_contact = [i for i in user_items if not (i.contact_info or "").strip()]
    if len(no_contact) > MISSING_CONTACT_MAX_ITEMS:
        report.flags.append(FraudFlag(
            "missing_contact", "low", "Multiple reports with no contact info",
        ))

    # Stored notifications are unique per (user, item), so this only fires on
    # histories that come from outside the notifications table.
    claims = Counter(
        n.item_id for n in notifications if n.user_id == user_id and n.item_id is not None
    )
    for item_id, count in claims.items():
        if count > EXCESSIVE_CLAIMS_PER_ITEM:
            report.flags.append(FraudFlag(
                "excessive_claims", "high", f"Multiple claims on item {item_id}",
            ))

    return report


def validate_item_claim(claim, original) -> ClaimCheck:
    """Check a claiming report against the original one for copy-paste and timing."""
    check = ClaimCheck()

    if string_similarity(claim.description, original.description) > COPIED_DESCRIPTION_SIMILARITY:
        check.issues.append(FraudFlag(
            "copied_description", "high", "Description nearly identical to the original report",
        ))

    claimed_at = _aware(claim.created_at)
    reported_at = _aware(original.created_at)
    if claimed_at and reported_at and abs(claimed_at - reported_at) < SUSPICIOUS_CLAIM_WINDOW:
        check.issues.append(FraudFlag(
            "suspicious_timing", "high", "Claimed within minutes of the original report",
        ))

    return check
