# gatepass_client/presentation.py
"""
Display shaping for gate pass records.

Missing nested objects render as "Unknown" rather than failing; dates are
shown as ``DD Mon YYYY, HH:MM`` in the offset the server sent them with.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from gatepass_core.workflows import (
    PENDING_STATES,
    SECURITY_VERDICT_PREFIX,
    STAGES,
    GatePassStatus,
    normalize_state,
)

from .schemas import GatePassRecord

UNKNOWN = "Unknown"
DATE_FORMAT = "%d %b %Y, %H:%M"

S = GatePassStatus

STATUS_LABELS: Dict[str, str] = {
    S.PENDING_STAFF.value: "Pending staff approval",
    S.APPROVED_BY_STAFF.value: "Approved by staff",
    S.REJECTED_BY_STAFF.value: "Rejected by staff",
    S.PENDING_HOD.value: "Pending HOD approval",
    S.APPROVED_BY_HOD.value: "Approved by HOD",
    S.REJECTED_BY_HOD.value: "Rejected by HOD",
    S.PENDING_ACADEMIC_DIRECTOR.value: "Pending academic director approval",
    S.APPROVED.value: "Approved",
    S.REJECTED.value: "Rejected by academic director",
    S.PENDING_HOSTEL_WARDEN.value: "Pending hostel warden approval",
    S.APPROVED_BY_HOSTEL_WARDEN.value: "Approved by hostel warden",
    S.REJECTED_BY_HOSTEL_WARDEN.value: "Rejected by hostel warden",
    S.USED.value: "Used",
    S.EXPIRED.value: "Expired",
}


def status_label(status: Any) -> str:
    token = normalize_state(status)
    return STATUS_LABELS.get(token, token.replace("_", " ").capitalize() if token else UNKNOWN)


def badge_tone(status: Any) -> str:
    token = normalize_state(status)
    if token in PENDING_STATES:
        return "pending"
    if token.startswith("REJECTED"):
        return "rejected"
    if token == S.USED.value:
        return "used"
    if token == S.EXPIRED.value:
        return "expired"
    if token.startswith("APPROVED"):
        return "approved"
    return "neutral"


def format_datetime(value: Any) -> str:
    if value is None or value == "":
        return UNKNOWN
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value.strftime(DATE_FORMAT)


def parse_security_comment(text: Optional[str]) -> Tuple[Optional[str], str]:
    """
    Split "[VERIFIED] note" into ("VERIFIED", "note").

    Comments without a verdict prefix come back as (None, text).
    """
    text = (text or "").strip()
    for prefix in SECURITY_VERDICT_PREFIX.values():
        if text.startswith(prefix):
            verdict = prefix.strip("[]")
            return verdict, text[len(prefix):].strip()
    return None, text


@dataclass(frozen=True)
class DisplayRecord:
    id: int
    requester_name: str
    requester_username: str
    requester_email: str
    roll_number: str
    department: str
    residence: str
    requester_type: str
    type_label: str
    reason: str
    description: str
    start: str
    end: str
    created: str
    status: str
    status_label: str
    badge: str
    comments: Dict[str, str] = field(default_factory=dict)
    reviewers: Dict[str, str] = field(default_factory=dict)
    security_verdict: Optional[str] = None
    security_note: str = ""


def to_display(record: Any) -> DisplayRecord:
    if not isinstance(record, GatePassRecord):
        record = GatePassRecord.model_validate(record)

    person = record.requester
    department = record.department or (person.department if person else None)

    if person is not None and person.residence is not None:
        residence = person.residence.value.replace("_", " ").title()
    elif record.is_hosteller:
        residence = "Hosteller"
    else:
        residence = UNKNOWN

    comments = {}
    reviewers = {}
    for key in STAGES:
        text = record.comment_for(key)
        if text:
            comments[key] = text
        reviewer = record.reviewer_for(key)
        if reviewer is not None:
            reviewers[key] = reviewer.name or reviewer.username

    verdict, note = parse_security_comment(record.security_comment)

    return DisplayRecord(
        id=record.id,
        requester_name=(person.name or person.username) if person else UNKNOWN,
        requester_username=person.username if person else UNKNOWN,
        requester_email=(person.email or UNKNOWN) if person else UNKNOWN,
        roll_number=(person.roll_number or UNKNOWN) if person else UNKNOWN,
        department=department.name if department else UNKNOWN,
        residence=residence,
        requester_type=record.requester_type.value,
        type_label=record.type.value.replace("_", " ").title(),
        reason=record.reason or "",
        description=record.description or "",
        start=format_datetime(record.start_date),
        end=format_datetime(record.end_date),
        created=format_datetime(record.created_at),
        status=record.status.value,
        status_label=status_label(record.status),
        badge=badge_tone(record.status),
        comments=comments,
        reviewers=reviewers,
        security_verdict=verdict,
        security_note=note,
    )


# ===============================================================
# List helpers
# ===============================================================

def filter_by_requester_type(records: Iterable[GatePassRecord], requester_type: Any) -> List[GatePassRecord]:
    if not requester_type:
        return list(records)
    token = normalize_state(requester_type)
    return [r for r in records if r.requester_type.value == token]


def filter_by_status(records: Iterable[GatePassRecord], *statuses: Any) -> List[GatePassRecord]:
    if not statuses:
        return list(records)
    wanted = {normalize_state(s) for s in statuses}
    return [r for r in records if r.status.value in wanted]


def search(records: Iterable[GatePassRecord], text: str) -> List[GatePassRecord]:
    needle = (text or "").strip().lower()
    if not needle:
        return list(records)

    def haystack(r: GatePassRecord) -> str:
        parts = [r.reason, r.description or "", str(r.id)]
        if r.requester is not None:
            parts += [r.requester.name or "", r.requester.username, r.requester.roll_number or ""]
        if r.department is not None:
            parts += [r.department.code, r.department.name]
        return " ".join(parts).lower()

    return [r for r in records if needle in haystack(r)]
