# gatepass_client/queries.py
from __future__ import annotations

from typing import Any, List, Optional

from gatepass_core.workflows import RequesterType, normalize_state, stage_for_role

from .api import GatePassApi
from .errors import Forbidden
from .schemas import GatePassRecord


def list_pending_for(api: GatePassApi, role: Any, requester_type: Any = None) -> List[GatePassRecord]:
    """
    Requests waiting on ``role``, oldest first.

    The status filter and ordering are re-applied here, so a record whose
    status is not exactly the role's pending status never shows up even if
    the server returns one.
    """
    try:
        stage = stage_for_role(role)
    except ValueError as e:
        raise Forbidden(str(e)) from e

    rt = RequesterType(normalize_state(requester_type)) if requester_type else None
    records = api.pending(stage.key, requester_type=rt.value if rt else None)

    out = [
        r for r in records
        if r.status is stage.pending and (rt is None or r.requester_type is rt)
    ]
    return sorted(out, key=lambda r: (r.created_at, r.id))


def list_mine(api: GatePassApi, requester_id: Optional[int] = None) -> List[GatePassRecord]:
    """
    Everything the caller (or ``requester_id``) submitted, newest first.
    """
    if requester_id is None and api.credential is not None:
        requester_id = api.credential.user_id

    records = api.my_requests()
    if requester_id is not None:
        records = [r for r in records if r.requester is None or r.requester.id == requester_id]
    return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)
