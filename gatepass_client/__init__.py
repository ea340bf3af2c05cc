"""
Role-scoped client for the Campus Gate REST API.
"""

from .actions import (
    AcademicDirectorActions,
    DecisionResult,
    HodActions,
    HostelWardenActions,
    RequesterClient,
    RoleActionClient,
    SecurityActions,
    StaffActions,
    actions_for,
)
from .api import GatePassApi
from .complaints import ComplaintsApi
from .credentials import Credential
from .errors import (
    Forbidden,
    GatePassError,
    InvalidState,
    MalformedResponse,
    NetworkFailure,
    NotFound,
    Unauthorized,
    ValidationFailed,
)
from .pages import PageState, PendingQueuePage
from .presentation import to_display
from .queries import list_mine, list_pending_for

__all__ = [
    "AcademicDirectorActions",
    "ComplaintsApi",
    "Credential",
    "DecisionResult",
    "Forbidden",
    "GatePassApi",
    "GatePassError",
    "HodActions",
    "HostelWardenActions",
    "InvalidState",
    "MalformedResponse",
    "NetworkFailure",
    "NotFound",
    "PageState",
    "PendingQueuePage",
    "RequesterClient",
    "RoleActionClient",
    "SecurityActions",
    "StaffActions",
    "Unauthorized",
    "ValidationFailed",
    "actions_for",
    "list_mine",
    "list_pending_for",
    "to_display",
]
