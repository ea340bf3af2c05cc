# gatepass_core/workflows/executor.py

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from rest_framework.exceptions import PermissionDenied, ValidationError

from gatepass_core.models import Complaint, GatePassRequest, WorkflowEvent
from gatepass_core.workflows import (
    COMPLAINT_TRANSITIONS,
    SECURITY_VERDICT_PREFIX,
    STAGES,
    ComplaintStatus,
    Decision,
    RoleNotPermitted,
    StatusNotPending,
    normalize_role,
    normalize_state,
    resolve_decision,
)
from gatepass_core.workflows.exceptions import InvalidState

logger = logging.getLogger(__name__)


def _stage_comment(stage, decision: Decision, comment: str) -> str:
    comment = (comment or "").strip()

    if decision is Decision.REJECT and not comment:
        raise ValidationError({stage.comment_field: "A comment is required to reject a gate pass."})

    if stage.key == "security":
        return f"{SECURITY_VERDICT_PREFIX[decision]} {comment or stage.default_comment}"

    return comment or stage.default_comment


def execute_decision(*, instance: GatePassRequest, stage_key: str, decision, comment: str, user, role: str) -> GatePassRequest:
    """
    Apply one stage decision to one gate pass.

    Order of checks:
      1) comment required on rejection (400)
      2) role owns the endpoint's stage (403)
      3) current status is the stage's pending status on this requester's
         path (409), re-checked under a row lock and by a conditional update

    Exactly one status, one stage comment and one stage reviewer are written.
    Returns the refreshed instance.
    """
    stage = STAGES[stage_key]
    role = normalize_role(role)
    decision = Decision(decision)
    text = _stage_comment(stage, decision, comment)

    if role != stage.role:
        raise PermissionDenied(
            f"Role {role or '<none>'} cannot make {stage.key.replace('_', ' ')} decisions."
        )

    with transaction.atomic():
        locked = GatePassRequest.objects.select_for_update().get(pk=instance.pk)
        current = normalize_state(locked.status)

        try:
            resolution = resolve_decision(
                current,
                role,
                locked.requester_type,
                decision,
                hosteller=locked.is_hosteller,
            )
        except RoleNotPermitted as e:
            raise PermissionDenied(str(e))
        except StatusNotPending as e:
            raise InvalidState(str(e))

        updated = GatePassRequest.objects.filter(pk=locked.pk, status=current).update(
            status=resolution.status.value,
            updated_at=timezone.now(),
            **{
                stage.comment_field: text,
                stage.reviewer_field: user,
            },
        )
        if updated != 1:
            raise InvalidState(f"Gate pass {locked.pk} changed while deciding; reload and retry.")

        WorkflowEvent.objects.create(
            kind="gate_pass",
            object_id=locked.pk,
            from_status=current,
            outcome=resolution.outcome.value,
            to_status=resolution.status.value,
            performed_by=user,
            role=role,
            comment=text,
        )

    logger.info(
        "Gate pass %s: %s by %s (%s) -> %s",
        instance.pk,
        resolution.outcome.value,
        user.username,
        role,
        resolution.status.value,
    )

    instance.refresh_from_db()
    return instance


def execute_complaint_update(*, instance: Complaint, new_status: str, response: str, user, role: str) -> Complaint:
    role = normalize_role(role)
    target = normalize_state(new_status)
    response = (response or "").strip()

    if target not in {s.value for s in ComplaintStatus}:
        raise ValidationError({"status": f"Unknown complaint state: {target}"})

    if target == ComplaintStatus.REJECTED.value and not response:
        raise ValidationError({"response": "A response is required to reject a complaint."})

    if role not in {"EXECUTIVE_DIRECTOR", "ADMIN"}:
        raise PermissionDenied("Only the executive director can update complaints.")

    with transaction.atomic():
        locked = Complaint.objects.select_for_update().get(pk=instance.pk)
        current = normalize_state(locked.status)

        allowed = COMPLAINT_TRANSITIONS.get(current, set())
        if not allowed:
            raise InvalidState(f"Complaint is in terminal state '{current}' and cannot be modified.")
        if target not in allowed:
            raise InvalidState(f"Invalid complaint transition: {current} -> {target}")

        updated = Complaint.objects.filter(pk=locked.pk, status=current).update(
            status=target,
            response=response or locked.response,
            responder=user,
            updated_at=timezone.now(),
        )
        if updated != 1:
            raise InvalidState(f"Complaint {locked.pk} changed while updating; reload and retry.")

        WorkflowEvent.objects.create(
            kind="complaint",
            object_id=locked.pk,
            from_status=current,
            outcome=target,
            to_status=target,
            performed_by=user,
            role=role,
            comment=response,
        )

    logger.info("Complaint %s: %s -> %s by %s", instance.pk, current, target, user.username)

    instance.refresh_from_db()
    return instance
