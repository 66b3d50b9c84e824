"""Construct notification rows for matches, broadcasts and location/fraud alerts.

Builders return unsaved ``Notification`` instances (or None when the event
is not worth notifying). Persisting them, with the per-(user, item)
uniqueness rule, is the job of ``NotificationRepository.add_if_absent``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from ..matching import (
    GOOD_MATCH_THRESHOLD,
    NOTIFY_MIN_SCORE,
    PERFECT_MATCH_THRESHOLD,
    STRONG_MATCH_THRESHOLD,
    check_threshold,
)
from ..matching.scorer import to_date
from ..models import Notification

KIND_LOST = "lost"
KIND_FOUND = "found"
KIND_MATCH = "match_found"
KIND_LOCATION_RISK = "location_risk"
KIND_HOTSPOT = "location_hotspot"
KIND_FRAUD = "fraud_alert"

NOTIFICATION_KINDS = (
    KIND_LOST, KIND_FOUND, KIND_MATCH, KIND_LOCATION_RISK, KIND_HOTSPOT, KIND_FRAUD,
)

HOTSPOT_MIN_LOSS_PROBABILITY = 50


def _now() -> datetime:
    return datetime.now(timezone.utc)


def confidence_level(score: int) -> str:
    if score >= PERFECT_MATCH_THRESHOLD:
        return "Perfect"
    if score >= STRONG_MATCH_THRESHOLD:
        return "High"
    if score >= GOOD_MATCH_THRESHOLD:
        return "Good"
    if score >= NOTIFY_MIN_SCORE:
        return "Fair"
    return "Low"


def is_strong_match(score: int) -> bool:
    return score >= STRONG_MATCH_THRESHOLD


def build_match_notification(
    recipient_user_id: int,
    found_item,
    lost_item,
    similarity_score: int,
    min_score: int = NOTIFY_MIN_SCORE,
) -> Notification | None:
    """Notify *recipient_user_id* that a lost/found pair scored *similarity_score*.

    The notification points at the item the recipient did not report: the
    owner of the lost item hears about the found item and vice versa.
    Returns None below *min_score*, which is independent of the threshold
    the candidates were selected with.

    Raises MatchingConfigError for a *min_score* outside [0, 100].
    """
    check_threshold(min_score, "min_score")
    if similarity_score < min_score:
        return None

    if getattr(found_item, "user_id", None) == recipient_user_id and \
            getattr(lost_item, "user_id", None) != recipient_user_id:
        subject = lost_item
    else:
        subject = found_item

    subject_type = (getattr(subject, "type", "") or "").upper()
    level = confidence_level(similarity_score)
    if is_strong_match(similarity_score):
        advice = "This is a STRONG match! Contact the person immediately!"
    else:
        advice = "Review this match and contact if interested."

    message = "\n".join([
        f"{level} match: a {subject_type} item matches your report!",
        "",
        f"Item: {subject.item_name}",
        f"Location: {subject.location}",
        f"Date: {subject.date or 'unknown'}",
        f"Match Confidence: {similarity_score}%",
        "",
        advice,
    ])

    return Notification(
        user_id=recipient_user_id,
        item_id=getattr(subject, "id", None),
        item_name=subject.item_name or "",
        location=subject.location or "",
        type=KIND_MATCH,
        date=to_date(subject.date),
        image=getattr(subject, "image", None),
        message=message,
        similarity_score=similarity_score,
        action_required=True,
        read_status=False,
        is_viewed=False,
        created_at=_now(),
    )


def build_broadcast_notification(recipient_user_id: int, item) -> Notification:
    """Plain "new item reported" notice for the all-users fan-out."""
    kind = KIND_LOST if item.type == KIND_LOST else KIND_FOUND
    return Notification(
        user_id=recipient_user_id,
        item_id=getattr(item, "id", None),
        item_name=item.item_name or "",
        location=item.location or "",
        type=kind,
        date=to_date(item.date),
        image=getattr(item, "image", None),
        message=f"A {kind} item has been reported: {item.item_name} at {item.location}",
        action_required=False,
        read_status=False,
        is_viewed=False,
        created_at=_now(),
    )


def build_location_alert(recipient_user_id: int, location: str, risk_pct: int) -> Notification:
    message = "\n".join([
        "High item loss reported in this area!",
        "",
        f"Location: {location}",
        f"Loss Risk: {risk_pct}%",
        "",
        "Be extra careful with your belongings!",
    ])
    return Notification(
        user_id=recipient_user_id,
        item_id=None,
        location=location,
        type=KIND_LOCATION_RISK,
        message=message,
        action_required=False,
        read_status=False,
        is_viewed=False,
        created_at=_now(),
    )


def build_hotspot_notification(recipient_user_id: int, stat) -> Notification | None:
    """Hotspot alert for a LocationStat; None when the loss probability is under 50%."""
    if stat.loss_probability < HOTSPOT_MIN_LOSS_PROBABILITY:
        return None
    message = "\n".join([
        "High item loss activity detected!",
        "",
        f"Location: {stat.location}",
        f"Loss Probability: {stat.loss_probability}%",
        f"Recent Reports: {stat.total_reports}",
        "",
        "Stay vigilant!",
    ])
    return Notification(
        user_id=recipient_user_id,
        item_id=None,
        location=stat.location,
        type=KIND_HOTSPOT,
        message=message,
        action_required=False,
        read_status=False,
        is_viewed=False,
        created_at=_now(),
    )


def build_fraud_alert(admin_user_id: int, report) -> Notification:
    """Admin-only alert for a TrustReport."""
    action = "Manual Review Required" if report.needs_review else "Monitor"
    lines = [
        f"User {report.user_id} flagged for review:",
        "",
        f"Risk Level: {report.risk_level.upper()}",
        f"Flags: {len(report.flags)}",
    ]
    lines += [f"- {flag.message}" for flag in report.flags]
    lines += ["", f"Recommended Action: {action}"]
    return Notification(
        user_id=admin_user_id,
        item_id=None,
        location="",
        type=KIND_FRAUD,
        message="\n".join(lines),
        action_required=report.needs_review,
        read_status=False,
        is_viewed=False,
        created_at=_now(),
    )
