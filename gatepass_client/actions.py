# gatepass_client/actions.py
"""
One action client per approving role.

``submit_decision`` checks locally what can be checked without the server
(known decision, comment on rejection), sends exactly one PATCH, and
returns what the server says the record now looks like.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from pydantic import ValidationError

from gatepass_core.workflows import (
    STAGES,
    Decision,
    GatePassStatus,
    RequesterType,
    Stage,
    normalize_decision,
)

from .api import GatePassApi
from .errors import Forbidden, Unauthorized, ValidationFailed
from .queries import list_mine, list_pending_for
from .schemas import GatePassCreate, GatePassRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecisionResult:
    record: GatePassRecord
    status: GatePassStatus
    comment: Optional[str]


class RoleActionClient:
    stage_key: str = ""

    def __init__(self, api: GatePassApi):
        if api.credential is None:
            raise Unauthorized("Not logged in.")
        if api.credential.role != self.stage.role:
            raise Forbidden(
                f"Role {api.credential.role or '<none>'} cannot act as {self.stage.role}."
            )
        self.api = api

    @property
    def stage(self) -> Stage:
        return STAGES[self.stage_key]

    def pending(self, requester_type: Any = None) -> List[GatePassRecord]:
        return list_pending_for(self.api, self.stage.role, requester_type)

    def build_body(self, decision: Decision, comment: str) -> Dict[str, Any]:
        token = self.stage.approve if decision is Decision.APPROVE else self.stage.reject
        body: Dict[str, Any] = {"status": token.value}
        if comment:
            body[self.stage.comment_field] = comment
        return body

    def submit_decision(self, request_id: int, decision: Any, comment: Optional[str] = None) -> DecisionResult:
        try:
            d = normalize_decision(decision)
        except ValueError as e:
            raise ValidationFailed(str(e), fields={"status": str(e)}) from e

        text = (comment or "").strip()
        if d is Decision.REJECT and not text:
            message = "Please provide a reason for rejection."
            raise ValidationFailed(message, fields={self.stage.comment_field: message})

        record = self.api.decide(request_id, self.stage.key, self.build_body(d, text))
        logger.info(
            "%s %s gate pass %s -> %s",
            self.stage.role,
            d.value.lower(),
            request_id,
            record.status.value,
        )
        return DecisionResult(record=record, status=record.status, comment=record.comment_for(self.stage.key))


class StaffActions(RoleActionClient):
    stage_key = "staff"


class HodActions(RoleActionClient):
    stage_key = "hod"


class AcademicDirectorActions(RoleActionClient):
    stage_key = "academic_director"


class HostelWardenActions(RoleActionClient):
    stage_key = "hostel_warden"


class SecurityActions(RoleActionClient):
    """
    Security always marks the pass ``USED``; ``verified`` carries the verdict.
    """

    stage_key = "security"

    def build_body(self, decision: Decision, comment: str) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "status": GatePassStatus.USED.value.lower(),
            "verified": decision is Decision.APPROVE,
        }
        if comment:
            body[self.stage.comment_field] = comment
        return body


ACTION_CLIENTS: Dict[str, Type[RoleActionClient]] = {
    cls.stage_key: cls
    for cls in (StaffActions, HodActions, AcademicDirectorActions, HostelWardenActions, SecurityActions)
}


def actions_for(api: GatePassApi) -> RoleActionClient:
    """
    The action client matching the credential's role.
    """
    stage = api.credential.stage if api.credential else None
    if stage is None:
        raise Forbidden("This account has no approval stage.")
    return ACTION_CLIENTS[stage.key](api)


class RequesterClient:
    """
    Submission side: students, staff and HODs request passes.
    """

    def __init__(self, api: GatePassApi):
        if api.credential is None:
            raise Unauthorized("Not logged in.")
        if api.credential.requester_type is None:
            raise Forbidden("Only students, staff and HODs can request gate passes.")
        self.api = api

    @property
    def requester_type(self) -> RequesterType:
        return self.api.credential.requester_type

    def submit(self, **fields: Any) -> GatePassRecord:
        try:
            payload = GatePassCreate(**fields)
        except ValidationError as e:
            errors = {".".join(str(p) for p in err["loc"]) or "non_field_errors": err["msg"] for err in e.errors()}
            raise ValidationFailed(next(iter(errors.values())), fields=errors) from e

        record = self.api.create_gate_pass(payload)
        logger.info("Submitted gate pass %s (%s)", record.id, record.status.value)
        return record

    def mine(self) -> List[GatePassRecord]:
        return list_mine(self.api)
