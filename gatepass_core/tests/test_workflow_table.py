# gatepass_core/tests/test_workflow_table.py
"""
Decision table properties. Pure Python, no database.
"""

from __future__ import annotations

import itertools

import pytest

from gatepass_core.workflows import (
    GATE_PASS_STATES,
    PASS_THROUGH_STATES,
    ROLES,
    STAGE_BY_ROLE,
    STAGES,
    Decision,
    GatePassStatus as S,
    IllegalTransition,
    RequesterType,
    Resolution,
    RoleNotPermitted,
    StatusNotPending,
    allowed_next_states,
    allowed_transitions,
    initial_status,
    normalize_decision,
    normalize_role,
    normalize_state,
    pending_status_for,
    reachable_statuses,
    resolve_decision,
    validate_transition,
    validate_transition_with_role,
    workflow_definition,
)


ALL_COMBINATIONS = list(
    itertools.product(
        sorted(GATE_PASS_STATES),
        ROLES,
        list(RequesterType),
        list(Decision),
        (False, True),
    )
)


def test_initial_status_per_requester_type():
    assert initial_status("STUDENT") is S.PENDING_STAFF
    assert initial_status("staff") is S.PENDING_HOD
    assert initial_status(RequesterType.HOD) is S.PENDING_ACADEMIC_DIRECTOR


@pytest.mark.parametrize(
    "requester_type,hosteller,expected",
    [
        ("STUDENT", False, ["PENDING_STAFF", "PENDING_HOD", "PENDING_ACADEMIC_DIRECTOR", "APPROVED", "USED"]),
        (
            "STUDENT",
            True,
            ["PENDING_STAFF", "PENDING_HOD", "PENDING_ACADEMIC_DIRECTOR", "PENDING_HOSTEL_WARDEN", "APPROVED", "USED"],
        ),
        ("STAFF", False, ["PENDING_HOD", "PENDING_ACADEMIC_DIRECTOR", "APPROVED", "USED"]),
        ("STAFF", True, ["PENDING_HOD", "PENDING_ACADEMIC_DIRECTOR", "APPROVED", "USED"]),
        ("HOD", False, ["PENDING_ACADEMIC_DIRECTOR", "APPROVED", "USED"]),
    ],
)
def test_approval_paths(requester_type, hosteller, expected):
    path = [s.value for s in reachable_statuses(requester_type, hosteller)]
    assert path == expected
    # never revisits a status
    assert len(path) == len(set(path))


def test_table_is_total_and_deterministic():
    for current, role, rt, decision, hosteller in ALL_COMBINATIONS:
        outcomes = []
        for _ in range(2):
            try:
                outcomes.append(resolve_decision(current, role, rt, decision, hosteller))
            except IllegalTransition as e:
                outcomes.append(type(e))
        assert outcomes[0] == outcomes[1], (current, role, rt, decision, hosteller)
        assert isinstance(outcomes[0], Resolution) or outcomes[0] in {RoleNotPermitted, StatusNotPending}


def test_accepted_iff_status_matches_role_pending_status():
    for current, role, rt, decision, hosteller in ALL_COMBINATIONS:
        if role not in STAGE_BY_ROLE:
            with pytest.raises(RoleNotPermitted):
                resolve_decision(current, role, rt, decision, hosteller)
            continue

        if current != pending_status_for(role).value:
            with pytest.raises(StatusNotPending):
                resolve_decision(current, role, rt, decision, hosteller)
            continue

        try:
            resolve_decision(current, role, rt, decision, hosteller)
        except StatusNotPending:
            # pending status of a stage this requester's path never visits
            assert not any(
                s == pending_status_for(role) for s in reachable_statuses(rt, hosteller)
            ), (current, role, rt, hosteller)


def test_no_transition_returns_to_an_earlier_status():
    for rt in RequesterType:
        for hosteller in (False, True):
            path = reachable_statuses(rt, hosteller)
            for i, status in enumerate(path[:-1]):
                stage = next(s for s in STAGES.values() if s.pending is status)
                for decision in Decision:
                    nxt = resolve_decision(status, stage.role, rt, decision, hosteller).status
                    assert nxt not in path[: i + 1]


def test_staff_approval_passes_through_to_hod():
    res = resolve_decision("PENDING_STAFF", "STAFF", "STUDENT", "approve")
    assert res.outcome is S.APPROVED_BY_STAFF
    assert res.status is S.PENDING_HOD


def test_hod_approval_passes_through_to_director():
    res = resolve_decision("PENDING_HOD", "HOD", "STAFF", Decision.APPROVE)
    assert res == Resolution(S.APPROVED_BY_HOD, S.PENDING_ACADEMIC_DIRECTOR)


def test_pass_through_outcomes_are_never_stored():
    for current, role, rt, decision, hosteller in ALL_COMBINATIONS:
        try:
            resolution = resolve_decision(current, role, rt, decision, hosteller)
        except IllegalTransition:
            continue
        assert resolution.status.value not in PASS_THROUGH_STATES
        if resolution.outcome.value in PASS_THROUGH_STATES:
            assert resolution.status is not resolution.outcome


def test_director_routes_hostellers_to_warden():
    assert resolve_decision("PENDING_ACADEMIC_DIRECTOR", "ACADEMIC_DIRECTOR", "STUDENT", "approve").status is S.APPROVED
    assert (
        resolve_decision("PENDING_ACADEMIC_DIRECTOR", "ACADEMIC_DIRECTOR", "STUDENT", "approve", hosteller=True).status
        is S.PENDING_HOSTEL_WARDEN
    )
    # staff who live on campus skip the warden
    assert (
        resolve_decision("PENDING_ACADEMIC_DIRECTOR", "ACADEMIC_DIRECTOR", "STAFF", "approve", hosteller=True).status
        is S.APPROVED
    )


@pytest.mark.parametrize(
    "current,role,expected",
    [
        ("PENDING_STAFF", "STAFF", S.REJECTED_BY_STAFF),
        ("PENDING_HOD", "HOD", S.REJECTED_BY_HOD),
        ("PENDING_ACADEMIC_DIRECTOR", "ACADEMIC_DIRECTOR", S.REJECTED),
        ("PENDING_HOSTEL_WARDEN", "HOSTEL_WARDEN", S.REJECTED_BY_HOSTEL_WARDEN),
    ],
)
def test_rejections_are_terminal(current, role, expected):
    res = resolve_decision(current, role, "STUDENT", "reject", hosteller=True)
    assert res.status is expected
    assert allowed_next_states("gate_pass", expected.value) == []


def test_security_consumes_pass_either_way():
    assert resolve_decision("APPROVED", "SECURITY", "HOD", "approve").status is S.USED
    assert resolve_decision("APPROVED", "SECURITY", "STUDENT", "reject").status is S.USED
    with pytest.raises(StatusNotPending):
        resolve_decision("USED", "SECURITY", "STUDENT", "approve")


def test_stage_off_the_requester_path_is_not_pending_for_that_role():
    # HOD-requested passes skip the HOD stage, staff-requested skip staff,
    # day scholars skip the warden: the matching role gets a state error.
    with pytest.raises(StatusNotPending):
        resolve_decision("PENDING_ACADEMIC_DIRECTOR", "HOD", "HOD", "approve")
    with pytest.raises(StatusNotPending):
        resolve_decision("PENDING_HOD", "STAFF", "STAFF", "approve")
    with pytest.raises(StatusNotPending):
        resolve_decision("APPROVED", "HOSTEL_WARDEN", "STUDENT", "approve", hosteller=False)
    with pytest.raises(StatusNotPending):
        resolve_decision("PENDING_HOSTEL_WARDEN", "HOSTEL_WARDEN", "STUDENT", "approve", hosteller=False)


def test_roles_without_a_stage_are_refused():
    for role in ("ADMIN", "STUDENT", "EXECUTIVE_DIRECTOR", ""):
        with pytest.raises(RoleNotPermitted):
            resolve_decision("PENDING_STAFF", role, "STUDENT", "approve")


def test_unknown_tokens_raise_value_error():
    with pytest.raises(ValueError):
        resolve_decision("NOT_A_STATUS", "STAFF", "STUDENT", "approve")
    with pytest.raises(ValueError):
        normalize_decision("maybe")


def test_normalizers_accept_legacy_spellings():
    assert normalize_state("PENDING_ACADEMIC_DIRECTOR_FROM_HOD") == "PENDING_ACADEMIC_DIRECTOR"
    assert normalize_state("pending-hod") == "PENDING_HOD"
    assert normalize_state(S.USED) == "USED"
    assert normalize_role({"name": "hod"}) == "HOD"
    assert normalize_role("warden") == "HOSTEL_WARDEN"
    assert normalize_role("Security Guard") == "SECURITY"
    assert normalize_role(None) == ""
    assert normalize_decision("verified") is Decision.APPROVE
    assert normalize_decision("Denied") is Decision.REJECT


def test_pending_status_per_role():
    assert pending_status_for("staff") is S.PENDING_STAFF
    assert pending_status_for("HOD") is S.PENDING_HOD
    assert pending_status_for("academic_director") is S.PENDING_ACADEMIC_DIRECTOR
    assert pending_status_for("hostel_warden") is S.PENDING_HOSTEL_WARDEN
    assert pending_status_for("security") is S.APPROVED
    with pytest.raises(ValueError):
        pending_status_for("STUDENT")


def test_allowed_transitions_by_role():
    assert allowed_transitions("gate_pass", "PENDING_STAFF", "STAFF") == ["PENDING_HOD", "REJECTED_BY_STAFF"]
    assert allowed_transitions("gate_pass", "PENDING_STAFF", "HOD") == []
    assert allowed_transitions("gate-pass", "APPROVED", "security") == ["USED"]
    assert set(allowed_next_states("gate_pass", "PENDING_ACADEMIC_DIRECTOR")) == {
        "APPROVED",
        "PENDING_HOSTEL_WARDEN",
        "REJECTED",
    }
    assert allowed_next_states("gate_pass", "bogus") == []


def test_validate_transition_messages():
    validate_transition("gate_pass", "PENDING_STAFF", "PENDING_HOD")
    validate_transition_with_role("gate_pass", "PENDING_HOD", "PENDING_ACADEMIC_DIRECTOR", "HOD")

    with pytest.raises(ValueError, match="terminal"):
        validate_transition("gate_pass", "USED", "APPROVED")
    with pytest.raises(ValueError, match="Invalid"):
        validate_transition("gate_pass", "PENDING_STAFF", "APPROVED")
    with pytest.raises(ValueError, match="cannot perform"):
        validate_transition_with_role("gate_pass", "PENDING_HOD", "PENDING_ACADEMIC_DIRECTOR", "STAFF")


def test_complaint_transitions():
    assert allowed_next_states("complaint", "PENDING") == ["IN_PROGRESS", "REJECTED", "RESOLVED"]
    assert allowed_next_states("complaint", "RESOLVED") == []
    assert allowed_transitions("complaint", "IN_PROGRESS", "STUDENT") == []
    assert allowed_transitions("complaint", "IN_PROGRESS", "EXECUTIVE_DIRECTOR") == ["REJECTED", "RESOLVED"]


def test_workflow_definition_shape():
    d = workflow_definition("gate_pass")
    assert d["kind"] == "gate_pass"
    assert d["initial"] == {
        "STUDENT": "PENDING_STAFF",
        "STAFF": "PENDING_HOD",
        "HOD": "PENDING_ACADEMIC_DIRECTOR",
    }
    assert [s["key"] for s in d["stages"]] == list(STAGES)
    assert set(workflow_definition()) == {"gate_pass", "complaint"}
    with pytest.raises(ValueError):
        workflow_definition("sample")
