# gatepass_core/permissions.py
from __future__ import annotations

from typing import Iterable, Optional

from rest_framework.exceptions import NotAuthenticated, PermissionDenied
from rest_framework.permissions import BasePermission

from .models import Profile
from .workflows import OVERSIGHT_ROLES, normalize_role


# ------------------------------------------------------------------
# Role resolution (once per request, at the boundary)
# ------------------------------------------------------------------
def get_profile(user) -> Optional[Profile]:
    if not user or not getattr(user, "is_authenticated", False):
        return None
    try:
        return user.campus_profile
    except Profile.DoesNotExist:
        return None


def resolve_role(user) -> str:
    """
    Canonical role for a user.

    Priority:
      1) superuser -> ADMIN
      2) Profile.role
    Users without a profile have no role ("").
    """
    if not user or not getattr(user, "is_authenticated", False):
        return ""
    if user.is_superuser:
        return "ADMIN"
    profile = get_profile(user)
    if profile is None:
        return ""
    return normalize_role(profile.role)


def request_role(request) -> str:
    """
    Memoize the resolved role on the request so views never re-derive it.
    """
    cached = getattr(request, "_campus_role", None)
    if cached is None:
        cached = resolve_role(getattr(request, "user", None))
        request._campus_role = cached
    return cached


def require_role(request, allowed: Iterable[str], message: Optional[str] = None) -> str:
    user = getattr(request, "user", None)
    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication credentials were not provided.")

    role = request_role(request)
    allowed_set = {normalize_role(r) for r in allowed}
    if role not in allowed_set:
        raise PermissionDenied(
            message or f"Role {role or '<none>'} is not permitted here. Requires one of: {sorted(allowed_set)}"
        )
    return role


# ------------------------------------------------------------------
# Permission classes
# ------------------------------------------------------------------
class HasCampusRole(BasePermission):
    """
    Any authenticated user with a resolved role.
    """

    message = "Your account has no campus role assigned."

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False
        return bool(request_role(request))


class IsOversightRole(BasePermission):
    """
    Read access to every record: ADMIN, ACADEMIC_DIRECTOR, EXECUTIVE_DIRECTOR.
    """

    message = "Only oversight roles can list every record."

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False
        return request_role(request) in OVERSIGHT_ROLES


def can_view_gate_pass(request, obj) -> bool:
    """
    Requesters see their own passes; every non-student role sees all passes.
    """
    user = request.user
    if obj.requester_id == user.id:
        return True
    role = request_role(request)
    return bool(role) and role != "STUDENT"
