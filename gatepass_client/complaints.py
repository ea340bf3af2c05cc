# gatepass_client/complaints.py
from __future__ import annotations

import logging
from typing import Any, List

from pydantic import ValidationError

from gatepass_core.workflows import ComplaintStatus, normalize_state

from .api import GatePassApi
from .errors import ValidationFailed
from .schemas import ComplaintCreate, ComplaintRecord, ComplaintUpdate

logger = logging.getLogger(__name__)


def _validated(model, **fields: Any):
    try:
        return model(**fields)
    except ValidationError as e:
        errors = {".".join(str(p) for p in err["loc"]) or "non_field_errors": err["msg"] for err in e.errors()}
        raise ValidationFailed(next(iter(errors.values())), fields=errors) from e


class ComplaintsApi:
    """
    Complaint endpoints; students file, the executive director resolves.
    """

    def __init__(self, api: GatePassApi):
        self.api = api

    def _many(self, path: str, **params: Any) -> List[ComplaintRecord]:
        return self.api._validate(ComplaintRecord, self.api.request("GET", path, params=params), many=True)

    def list(self, **filters: Any) -> List[ComplaintRecord]:
        return self._many("/complaints", **filters)

    def department(self) -> List[ComplaintRecord]:
        return self._many("/complaints/department")

    def hostel(self) -> List[ComplaintRecord]:
        return self._many("/complaints/hostel")

    def by_status(self, status: Any) -> List[ComplaintRecord]:
        try:
            token = ComplaintStatus(normalize_state(status))
        except ValueError as e:
            raise ValidationFailed(f"Unknown complaint status: {status}", fields={"status": str(e)}) from e
        return self._many(f"/complaints/status/{token.value}")

    def get(self, complaint_id: int) -> ComplaintRecord:
        return self.api._validate(ComplaintRecord, self.api.request("GET", f"/complaints/{int(complaint_id)}"))

    def create(self, subject: str, message: str) -> ComplaintRecord:
        payload = _validated(ComplaintCreate, subject=subject, message=message)
        record = self.api._validate(
            ComplaintRecord,
            self.api.request("POST", "/complaints", json=payload.model_dump(mode="json")),
        )
        logger.info("Filed complaint %s", record.id)
        return record

    def update(self, complaint_id: int, status: Any, response: str = "") -> ComplaintRecord:
        payload = _validated(ComplaintUpdate, status=status, response=response or "")
        record = self.api._validate(
            ComplaintRecord,
            self.api.request("PATCH", f"/complaints/{int(complaint_id)}", json=payload.model_dump(mode="json")),
        )
        logger.info("Complaint %s -> %s", record.id, record.status.value)
        return record
