# gatepass_client/schemas.py
"""
One schema per endpoint payload, validated at the client boundary.

Status, type and requester-type tokens are normalized on the way in, so
legacy spellings ("pending_hod", "PENDING_ACADEMIC_DIRECTOR_FROM_HOD")
never leak past this module.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator

from gatepass_core.workflows import (
    STAGES,
    ComplaintStatus,
    GatePassStatus,
    GatePassType,
    RequesterType,
    Residence,
    normalize_role,
    normalize_state,
)


def _token(value: Any) -> Any:
    if value is None or isinstance(value, (GatePassStatus, ComplaintStatus, RequesterType, GatePassType, Residence)):
        return value
    return normalize_state(value)


def _role(value: Any) -> Optional[str]:
    return normalize_role(value) or None


StatusToken = Annotated[GatePassStatus, BeforeValidator(_token)]
RequesterTypeToken = Annotated[RequesterType, BeforeValidator(_token)]
TypeToken = Annotated[GatePassType, BeforeValidator(_token)]
ResidenceToken = Annotated[Residence, BeforeValidator(_token)]
ComplaintStatusToken = Annotated[ComplaintStatus, BeforeValidator(_token)]
RoleToken = Annotated[Optional[str], BeforeValidator(_role)]


class DepartmentOut(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    code: str
    name: str


class PersonOut(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    username: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: RoleToken = None
    department: Optional[DepartmentOut] = None
    residence: Optional[ResidenceToken] = None
    roll_number: Optional[str] = None


# ===============================================================
# Gate passes
# ===============================================================

class GatePassRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    requester: Optional[PersonOut] = None
    requester_type: RequesterTypeToken
    department: Optional[DepartmentOut] = None
    is_hosteller: bool = False
    type: TypeToken = GatePassType.LEAVE
    reason: str = ""
    description: Optional[str] = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: StatusToken

    staff_comment: Optional[str] = None
    hod_comment: Optional[str] = None
    academic_director_comment: Optional[str] = None
    hostel_warden_comment: Optional[str] = None
    security_comment: Optional[str] = None

    staff_reviewer: Optional[PersonOut] = None
    hod_reviewer: Optional[PersonOut] = None
    academic_director_reviewer: Optional[PersonOut] = None
    hostel_warden_reviewer: Optional[PersonOut] = None
    security_reviewer: Optional[PersonOut] = None

    created_at: datetime
    updated_at: Optional[datetime] = None

    def comment_for(self, stage_key: str) -> Optional[str]:
        return getattr(self, STAGES[stage_key].comment_field)

    def reviewer_for(self, stage_key: str) -> Optional[PersonOut]:
        return getattr(self, STAGES[stage_key].reviewer_field)


class GatePassCreate(BaseModel):
    type: TypeToken = GatePassType.LEAVE
    reason: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    start_date: datetime
    end_date: datetime

    @field_validator("reason")
    @classmethod
    def _strip_reason(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("A reason is required.")
        return v

    @model_validator(mode="after")
    def _check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("End date must not be before start date.")
        return self


class WorkflowEventRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    kind: str
    object_id: int
    from_status: str
    outcome: str
    to_status: str
    performed_by: str
    role: str
    comment: str = ""
    created_at: datetime


class WhoAmI(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    username: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: RoleToken = None
    requester_type: Optional[RequesterTypeToken] = None
    stage: Optional[str] = None
    department: Optional[DepartmentOut] = None
    residence: Optional[ResidenceToken] = None


class TokenPair(BaseModel):
    access: str
    refresh: Optional[str] = None


# ===============================================================
# Complaints
# ===============================================================

class ComplaintRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    subject: str
    message: str
    status: ComplaintStatusToken
    response: Optional[str] = ""
    student: Optional[PersonOut] = None
    director: Optional[PersonOut] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ComplaintCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)


class ComplaintUpdate(BaseModel):
    status: ComplaintStatusToken
    response: str = ""

    @model_validator(mode="after")
    def _response_required_for_rejection(self):
        self.response = self.response.strip()
        if self.status is ComplaintStatus.REJECTED and not self.response:
            raise ValueError("A response is required to reject a complaint.")
        return self


def parse_list(model, payload: Any) -> List[Any]:
    return [model.model_validate(item) for item in (payload or [])]
