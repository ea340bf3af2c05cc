# gatepass_client/credentials.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from gatepass_core.workflows import (
    STAGE_BY_ROLE,
    RequesterType,
    Stage,
    normalize_role,
    requester_type_for_role,
)


@dataclass(frozen=True)
class Credential:
    """
    Bearer token plus the caller's identity, resolved once per session.

    Passed explicitly to the API wrapper; nothing in this package keeps a
    process-wide "current user".
    """

    token: str
    user_id: Optional[int] = None
    username: str = ""
    role: str = ""
    department_id: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "role", normalize_role(self.role))

    @classmethod
    def from_identity(cls, token: str, identity: Any) -> "Credential":
        """
        Build from a whoami payload or a login response's user object.

        ``role`` may arrive as a string or as ``{"name": ...}``.
        """
        if not isinstance(identity, Mapping):
            identity = identity.model_dump() if hasattr(identity, "model_dump") else vars(identity)

        department = identity.get("department") or {}
        return cls(
            token=token,
            user_id=identity.get("id"),
            username=identity.get("username") or "",
            role=identity.get("role") or "",
            department_id=department.get("id") if isinstance(department, Mapping) else None,
            extra={k: v for k, v in identity.items() if k not in {"id", "username", "role"}},
        )

    @property
    def stage(self) -> Optional[Stage]:
        return STAGE_BY_ROLE.get(self.role)

    @property
    def requester_type(self) -> Optional[RequesterType]:
        return requester_type_for_role(self.role)

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}
