from .core import Department, Profile, TimeStampedModel
from .gate_pass import GatePassRequest
from .complaint import Complaint
from .workflow_event import WorkflowEvent

__all__ = [
    "TimeStampedModel",
    "Department",
    "Profile",
    "GatePassRequest",
    "Complaint",
    "WorkflowEvent",
]
