# gatepass_core/workflows/__init__.py
"""
Authoritative workflow definitions for gate passes and complaints.

This module defines:
- Closed status vocabularies
- Approval stages and the roles that own them
- The decision table (status, role, requester type, decision) -> next status
- Introspection helpers for UI and API

It must stay free of Django imports: the API client shares this vocabulary.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple


# ===============================================================
# Canonical vocabularies
# ===============================================================

class GatePassStatus(str, Enum):
    PENDING_STAFF = "PENDING_STAFF"
    APPROVED_BY_STAFF = "APPROVED_BY_STAFF"
    REJECTED_BY_STAFF = "REJECTED_BY_STAFF"
    PENDING_HOD = "PENDING_HOD"
    APPROVED_BY_HOD = "APPROVED_BY_HOD"
    REJECTED_BY_HOD = "REJECTED_BY_HOD"
    PENDING_ACADEMIC_DIRECTOR = "PENDING_ACADEMIC_DIRECTOR"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PENDING_HOSTEL_WARDEN = "PENDING_HOSTEL_WARDEN"
    APPROVED_BY_HOSTEL_WARDEN = "APPROVED_BY_HOSTEL_WARDEN"
    REJECTED_BY_HOSTEL_WARDEN = "REJECTED_BY_HOSTEL_WARDEN"
    USED = "USED"
    EXPIRED = "EXPIRED"


class RequesterType(str, Enum):
    STUDENT = "STUDENT"
    STAFF = "STAFF"
    HOD = "HOD"


class Decision(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class GatePassType(str, Enum):
    LEAVE = "LEAVE"
    HOME_VISIT = "HOME_VISIT"
    EMERGENCY = "EMERGENCY"
    OTHER = "OTHER"


class Residence(str, Enum):
    DAY_SCHOLAR = "DAY_SCHOLAR"
    HOSTELLER = "HOSTELLER"


class ComplaintStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"


S = GatePassStatus

GATE_PASS_STATES: Set[str] = {s.value for s in GatePassStatus}

PENDING_STATES: Set[str] = {
    S.PENDING_STAFF.value,
    S.PENDING_HOD.value,
    S.PENDING_ACADEMIC_DIRECTOR.value,
    S.PENDING_HOSTEL_WARDEN.value,
}

TERMINAL_STATES: Set[str] = {
    S.REJECTED_BY_STAFF.value,
    S.REJECTED_BY_HOD.value,
    S.REJECTED.value,
    S.REJECTED_BY_HOSTEL_WARDEN.value,
    S.USED.value,
    S.EXPIRED.value,
}

# Decision tokens that are recorded in the audit trail but never stored:
# the request is routed on to the next pending stage in the same write.
PASS_THROUGH_STATES: Set[str] = {
    S.APPROVED_BY_STAFF.value,
    S.APPROVED_BY_HOD.value,
    S.APPROVED_BY_HOSTEL_WARDEN.value,
}

# Legacy HOD-requester vocabulary seen on older clients.
STATE_ALIASES: Dict[str, str] = {
    "PENDING_ACADEMIC_DIRECTOR_FROM_HOD": S.PENDING_ACADEMIC_DIRECTOR.value,
    "APPROVED_BY_ACADEMIC_DIRECTOR": S.APPROVED.value,
    "REJECTED_BY_ACADEMIC_DIRECTOR": S.REJECTED.value,
    "PENDING_SECURITY": S.APPROVED.value,
}

COMPLAINT_STATES: Set[str] = {s.value for s in ComplaintStatus}

COMPLAINT_TRANSITIONS: Dict[str, Set[str]] = {
    "PENDING": {"IN_PROGRESS", "RESOLVED", "REJECTED"},
    "IN_PROGRESS": {"RESOLVED", "REJECTED"},
    "RESOLVED": set(),
    "REJECTED": set(),
}


# ===============================================================
# Role normalization
# ===============================================================

ROLES: Tuple[str, ...] = (
    "STUDENT",
    "STAFF",
    "HOD",
    "ACADEMIC_DIRECTOR",
    "HOSTEL_WARDEN",
    "SECURITY",
    "EXECUTIVE_DIRECTOR",
    "ADMIN",
)

ROLE_ALIASES: Dict[str, str] = {
    "ADMIN": "ADMIN",
    "SUPERUSER": "ADMIN",
    "SYSTEM_ADMIN": "ADMIN",
    "STUDENT": "STUDENT",
    "STAFF": "STAFF",
    "FACULTY": "STAFF",
    "HOD": "HOD",
    "HEAD_OF_DEPARTMENT": "HOD",
    "ACADEMIC_DIRECTOR": "ACADEMIC_DIRECTOR",
    "HOSTEL_WARDEN": "HOSTEL_WARDEN",
    "WARDEN": "HOSTEL_WARDEN",
    "SECURITY": "SECURITY",
    "SECURITY_GUARD": "SECURITY",
    "EXECUTIVE_DIRECTOR": "EXECUTIVE_DIRECTOR",
    "DIRECTOR": "EXECUTIVE_DIRECTOR",
}

REQUESTER_ROLES: Dict[str, RequesterType] = {
    "STUDENT": RequesterType.STUDENT,
    "STAFF": RequesterType.STAFF,
    "HOD": RequesterType.HOD,
}

OVERSIGHT_ROLES: Set[str] = {"ADMIN", "ACADEMIC_DIRECTOR", "EXECUTIVE_DIRECTOR"}


def normalize_state(value: Any) -> str:
    raw = str(getattr(value, "value", value) or "").strip().upper().replace("-", "_")
    return STATE_ALIASES.get(raw, raw)


def normalize_role(value: Any) -> str:
    """
    Resolve a role given as a string or as an object/dict with a ``name``.
    Unknown roles are returned upper-cased; empty input resolves to "" so it
    never matches a stage.
    """
    if isinstance(value, dict):
        value = value.get("name")
    elif value is not None and not isinstance(value, str):
        value = getattr(value, "name", value)
    raw = str(getattr(value, "value", value) or "").strip().upper()
    raw = raw.replace("-", "_").replace(" ", "_")
    return ROLE_ALIASES.get(raw, raw)


def normalize_decision(value: Any) -> Decision:
    raw = str(getattr(value, "value", value) or "").strip().upper()
    if raw in {"APPROVE", "APPROVED", "ACCEPT", "VERIFY", "VERIFIED"}:
        return Decision.APPROVE
    if raw in {"REJECT", "REJECTED", "DENY", "DENIED"}:
        return Decision.REJECT
    raise ValueError(f"Unknown decision: {value!r}")


def requester_type_for_role(role: str) -> Optional[RequesterType]:
    return REQUESTER_ROLES.get(normalize_role(role))


# ===============================================================
# Approval stages
# ===============================================================

@dataclass(frozen=True)
class Stage:
    key: str
    role: str
    pending: GatePassStatus
    approve: GatePassStatus
    reject: GatePassStatus
    comment_field: str
    reviewer_field: str
    default_comment: str
    pending_endpoint: str
    decision_endpoint: str

    @property
    def outcome_tokens(self) -> Set[str]:
        return {self.approve.value, self.reject.value}

    def decision_for_token(self, token: Any) -> Decision:
        tok = normalize_state(token)
        if tok == self.approve.value:
            return Decision.APPROVE
        if tok == self.reject.value:
            return Decision.REJECT
        raise ValueError(
            f"Invalid status for {self.key.replace('_', ' ')} decision: {tok}. "
            f"Allowed: {sorted(self.outcome_tokens)}"
        )


STAGES: Dict[str, Stage] = {
    "staff": Stage(
        key="staff",
        role="STAFF",
        pending=S.PENDING_STAFF,
        approve=S.APPROVED_BY_STAFF,
        reject=S.REJECTED_BY_STAFF,
        comment_field="staff_comment",
        reviewer_field="staff_reviewer",
        default_comment="Approved by Staff",
        pending_endpoint="pending-staff-approval",
        decision_endpoint="staff-approval",
    ),
    "hod": Stage(
        key="hod",
        role="HOD",
        pending=S.PENDING_HOD,
        approve=S.APPROVED_BY_HOD,
        reject=S.REJECTED_BY_HOD,
        comment_field="hod_comment",
        reviewer_field="hod_reviewer",
        default_comment="Approved by HOD",
        pending_endpoint="pending-hod-approval",
        decision_endpoint="hod-approval",
    ),
    "academic_director": Stage(
        key="academic_director",
        role="ACADEMIC_DIRECTOR",
        pending=S.PENDING_ACADEMIC_DIRECTOR,
        approve=S.APPROVED,
        reject=S.REJECTED,
        comment_field="academic_director_comment",
        reviewer_field="academic_director_reviewer",
        default_comment="Approved by Academic Director",
        pending_endpoint="pending-academic-director-approval",
        decision_endpoint="academic-director-approval",
    ),
    "hostel_warden": Stage(
        key="hostel_warden",
        role="HOSTEL_WARDEN",
        pending=S.PENDING_HOSTEL_WARDEN,
        approve=S.APPROVED_BY_HOSTEL_WARDEN,
        reject=S.REJECTED_BY_HOSTEL_WARDEN,
        comment_field="hostel_warden_comment",
        reviewer_field="hostel_warden_reviewer",
        default_comment="Approved by Hostel Warden",
        pending_endpoint="pending-hostel-warden-approval",
        decision_endpoint="hostel-warden-approval",
    ),
    # Security consumes the pass either way; the verdict lives in the comment.
    "security": Stage(
        key="security",
        role="SECURITY",
        pending=S.APPROVED,
        approve=S.USED,
        reject=S.USED,
        comment_field="security_comment",
        reviewer_field="security_reviewer",
        default_comment="Verified at gate",
        pending_endpoint="for-security-verification",
        decision_endpoint="security-verification",
    ),
}

STAGE_BY_ROLE: Dict[str, Stage] = {stage.role: stage for stage in STAGES.values()}

STAGE_COMMENT_FIELDS: Tuple[str, ...] = tuple(s.comment_field for s in STAGES.values())

SECURITY_VERDICT_PREFIX: Dict[Decision, str] = {
    Decision.APPROVE: "[VERIFIED]",
    Decision.REJECT: "[REJECTED]",
}


def stage_for_role(role: str) -> Stage:
    r = normalize_role(role)
    try:
        return STAGE_BY_ROLE[r]
    except KeyError:
        raise ValueError(f"Role {r or '<none>'} owns no approval stage") from None


def pending_status_for(role: str) -> GatePassStatus:
    """
    The single status a request must hold to sit in ``role``'s pending queue.
    """
    return stage_for_role(role).pending


def initial_status(requester_type: Any) -> GatePassStatus:
    rt = RequesterType(normalize_state(requester_type))
    if rt is RequesterType.STAFF:
        return S.PENDING_HOD
    if rt is RequesterType.HOD:
        return S.PENDING_ACADEMIC_DIRECTOR
    return S.PENDING_STAFF


# ===============================================================
# Decision table
# ===============================================================

class IllegalTransition(ValueError):
    """Base for every decision the table refuses."""


class RoleNotPermitted(IllegalTransition):
    pass


class StatusNotPending(IllegalTransition):
    pass


@dataclass(frozen=True)
class Resolution:
    outcome: GatePassStatus
    status: GatePassStatus


def _route_after(outcome: GatePassStatus, requester_type: RequesterType, hosteller: bool) -> GatePassStatus:
    """
    Where a decision outcome lands in storage. Pass-through outcomes move
    straight into the next stage's pending status.
    """
    if outcome is S.APPROVED_BY_STAFF:
        return S.PENDING_HOD
    if outcome is S.APPROVED_BY_HOD:
        return S.PENDING_ACADEMIC_DIRECTOR
    if outcome is S.APPROVED:
        if requester_type is RequesterType.STUDENT and hosteller:
            return S.PENDING_HOSTEL_WARDEN
        return S.APPROVED
    if outcome is S.APPROVED_BY_HOSTEL_WARDEN:
        return S.APPROVED
    return outcome


def _stage_applies(stage: Stage, requester_type: RequesterType, hosteller: bool) -> bool:
    if stage.key == "staff":
        return requester_type is RequesterType.STUDENT
    if stage.key == "hod":
        return requester_type in {RequesterType.STUDENT, RequesterType.STAFF}
    if stage.key == "hostel_warden":
        return requester_type is RequesterType.STUDENT and hosteller
    return True


def resolve_decision(
    current: Any,
    role: Any,
    requester_type: Any,
    decision: Any,
    hosteller: bool = False,
) -> Resolution:
    """
    Total, deterministic decision table.

    Returns the recorded outcome and the stored next status, or raises:
      - RoleNotPermitted if the role owns no approval stage at all
      - StatusNotPending if the request is not waiting on that role's stage,
        including requests whose path never visits it
      - ValueError for tokens outside the closed vocabularies
    """
    cur = normalize_state(current)
    if cur not in GATE_PASS_STATES:
        raise ValueError(f"Unknown gate pass status: {cur}")

    rt = RequesterType(normalize_state(requester_type))
    d = normalize_decision(decision)
    r = normalize_role(role)

    stage = STAGE_BY_ROLE.get(r)
    if stage is None:
        raise RoleNotPermitted(f"Role {r or '<none>'} owns no approval stage")

    if not _stage_applies(stage, rt, hosteller):
        raise StatusNotPending(
            f"Gate pass is {cur}; {rt.value.lower()} requests never wait on the "
            f"{stage.key.replace('_', ' ')} stage"
        )

    if cur != stage.pending.value:
        raise StatusNotPending(
            f"Gate pass is {cur}, not {stage.pending.value}; "
            f"{stage.key.replace('_', ' ')} decision is not allowed"
        )

    outcome = stage.approve if d is Decision.APPROVE else stage.reject
    return Resolution(outcome=outcome, status=_route_after(outcome, rt, hosteller))


def reachable_statuses(requester_type: Any, hosteller: bool = False) -> List[GatePassStatus]:
    """
    Stored statuses reachable along the approval path, in order, ending with
    the terminal ``USED``. Rejections branch off each pending status.
    """
    rt = RequesterType(normalize_state(requester_type))
    path = [initial_status(rt)]
    seen = {path[0]}

    while path[-1] not in {S.USED, S.EXPIRED}:
        stage = next(s for s in STAGES.values() if s.pending is path[-1])
        nxt = resolve_decision(path[-1], stage.role, rt, Decision.APPROVE, hosteller).status
        if nxt in seen:
            raise RuntimeError(f"Workflow cycle at {nxt.value}")
        seen.add(nxt)
        path.append(nxt)
    return path


# ===============================================================
# Role-aware introspection (public API)
# ===============================================================

def allowed_next_states(kind: str, current: str) -> List[str]:
    """
    Canonical next stored states, independent of role and requester path.
    """
    k = normalize_state(kind)
    cur = normalize_state(current)

    if k == "COMPLAINT":
        return sorted(COMPLAINT_TRANSITIONS.get(cur, set()))

    if k != "GATE_PASS" or cur not in GATE_PASS_STATES:
        return []

    out: Set[str] = set()
    for rt in RequesterType:
        for hosteller in (False, True):
            for stage in STAGES.values():
                for d in Decision:
                    try:
                        out.add(resolve_decision(cur, stage.role, rt, d, hosteller).status.value)
                    except IllegalTransition:
                        continue
    return sorted(out)


def allowed_transitions(kind: str, current: Optional[str] = None, role: Optional[str] = None) -> Any:
    """
    1) allowed_transitions("gate_pass") -> Dict[str, List[str]] (full map)
    2) allowed_transitions("gate_pass", "PENDING_HOD", "HOD") -> List[str]
    """
    k = normalize_state(kind)
    states = COMPLAINT_STATES if k == "COMPLAINT" else GATE_PASS_STATES

    if current is None and role is None:
        return {state: allowed_next_states(k, state) for state in sorted(states)}

    cur = normalize_state(current or "")
    if role is None:
        return allowed_next_states(k, cur)

    r = normalize_role(role)
    if k == "COMPLAINT":
        if r not in {"EXECUTIVE_DIRECTOR", "ADMIN"}:
            return []
        return allowed_next_states(k, cur)

    if cur not in GATE_PASS_STATES:
        return []

    out: Set[str] = set()
    for rt in RequesterType:
        for hosteller in (False, True):
            for d in Decision:
                try:
                    out.add(resolve_decision(cur, r, rt, d, hosteller).status.value)
                except IllegalTransition:
                    continue
    return sorted(out)


def validate_transition(kind: str, current: str, target: str) -> None:
    """
    Raises ValueError if current -> target is not a canonical transition.
    """
    k = normalize_state(kind)
    cur = normalize_state(current)
    tgt = normalize_state(target)
    states = COMPLAINT_STATES if k == "COMPLAINT" else GATE_PASS_STATES
    label = k.lower().replace("_", " ")

    if cur not in states:
        raise ValueError(f"Unknown {label} state: {cur}")
    if tgt not in states:
        raise ValueError(f"Unknown {label} state: {tgt}")
    if tgt not in allowed_next_states(k, cur):
        if not allowed_next_states(k, cur):
            raise ValueError(f"{label.capitalize()} is in terminal state '{cur}' and cannot be modified.")
        raise ValueError(f"Invalid {label} transition: {cur} -> {tgt}")


def validate_transition_with_role(kind: str, current: str, target: str, role: str) -> None:
    validate_transition(kind, current, target)
    cur = normalize_state(current)
    tgt = normalize_state(target)
    if tgt not in allowed_transitions(kind, cur, role):
        r = normalize_role(role)
        raise ValueError(f"Role {r} cannot perform {kind.lower()} transition: {cur} -> {tgt}")


def workflow_definition(kind: Optional[str] = None) -> Dict[str, Any]:
    """
    Stable JSON-serializable definition for UI.
    """
    def _one(k: str) -> Dict[str, Any]:
        kk = normalize_state(k)
        if kk == "GATE_PASS":
            return {
                "kind": "gate_pass",
                "states": sorted(GATE_PASS_STATES),
                "terminal_states": sorted(TERMINAL_STATES),
                "transitions": allowed_transitions("gate_pass"),
                "initial": {rt.value: initial_status(rt).value for rt in RequesterType},
                "stages": [
                    {
                        "key": s.key,
                        "role": s.role,
                        "pending": s.pending.value,
                        "outcomes": sorted(s.outcome_tokens),
                        "comment_field": s.comment_field,
                    }
                    for s in STAGES.values()
                ],
            }
        if kk == "COMPLAINT":
            return {
                "kind": "complaint",
                "states": sorted(COMPLAINT_STATES),
                "terminal_states": sorted(s for s, nxt in COMPLAINT_TRANSITIONS.items() if not nxt),
                "transitions": allowed_transitions("complaint"),
            }
        raise ValueError(f"Unsupported workflow kind: {k}")

    if kind is None:
        return {"gate_pass": _one("gate_pass"), "complaint": _one("complaint")}
    return _one(kind)


__all__ = [
    "GatePassStatus",
    "RequesterType",
    "Decision",
    "GatePassType",
    "Residence",
    "ComplaintStatus",
    "GATE_PASS_STATES",
    "PENDING_STATES",
    "TERMINAL_STATES",
    "PASS_THROUGH_STATES",
    "COMPLAINT_STATES",
    "COMPLAINT_TRANSITIONS",
    "ROLES",
    "OVERSIGHT_ROLES",
    "STAGES",
    "STAGE_BY_ROLE",
    "STAGE_COMMENT_FIELDS",
    "SECURITY_VERDICT_PREFIX",
    "Stage",
    "Resolution",
    "IllegalTransition",
    "RoleNotPermitted",
    "StatusNotPending",
    "normalize_state",
    "normalize_role",
    "normalize_decision",
    "requester_type_for_role",
    "stage_for_role",
    "pending_status_for",
    "initial_status",
    "resolve_decision",
    "reachable_statuses",
    "allowed_next_states",
    "allowed_transitions",
    "validate_transition",
    "validate_transition_with_role",
    "workflow_definition",
]
