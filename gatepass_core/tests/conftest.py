# gatepass_core/tests/conftest.py

from __future__ import annotations

import uuid
from datetime import timedelta
from typing import Any, Callable, Optional

import pytest
from django.contrib.auth import authenticate, get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from gatepass_core.models import Department, GatePassRequest, Profile
from gatepass_core.workflows import initial_status, requester_type_for_role


def _rand(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


class AuthAPIClient(APIClient):
    """
    Test client that uses force_authenticate for predictable DRF auth.
    """

    _user = None

    def login(self, username: str, password: str, **kwargs) -> bool:  # type: ignore[override]
        user = authenticate(username=username, password=password)
        if not user:
            return False
        self.force_authenticate(user=user)
        self._user = user
        return True

    def as_user(self, user) -> "AuthAPIClient":
        self.force_authenticate(user=user)
        self._user = user
        return self

    def logout(self) -> None:  # type: ignore[override]
        # DRF's force_authenticate(user=None) calls self.logout() internally.
        super().logout()
        self.handler._force_user = None
        self.handler._force_token = None
        self._user = None


@pytest.fixture
def api_client() -> AuthAPIClient:
    return AuthAPIClient()


@pytest.fixture
def department(db) -> Department:
    return Department.objects.create(code="CSE", name="Computer Science")


@pytest.fixture
def other_department(db) -> Department:
    return Department.objects.create(code="ECE", name="Electronics")


@pytest.fixture
def make_user(db, department) -> Callable[..., Any]:
    """
    User + campus profile. Password is always "pass123".
    """
    User = get_user_model()

    def _factory(
        role: str,
        *,
        username: Optional[str] = None,
        residence: str = "DAY_SCHOLAR",
        department: Optional[Department] = department,
        roll_number: str = "",
    ):
        user = User.objects.create_user(
            username=username or _rand(role.lower()),
            password="pass123",
            first_name=role.title(),
            last_name="User",
            email=f"{role.lower()}@campus.test",
        )
        Profile.objects.create(
            user=user,
            role=role,
            department=department,
            residence=residence,
            roll_number=roll_number,
        )
        return user

    return _factory


@pytest.fixture
def student(make_user):
    return make_user("STUDENT", username="student", roll_number="CSE-001")


@pytest.fixture
def hosteller(make_user):
    return make_user("STUDENT", username="hosteller", residence="HOSTELLER", roll_number="CSE-002")


@pytest.fixture
def staff(make_user):
    return make_user("STAFF", username="staff")


@pytest.fixture
def hod(make_user):
    return make_user("HOD", username="hod")


@pytest.fixture
def director(make_user):
    return make_user("ACADEMIC_DIRECTOR", username="director", department=None)


@pytest.fixture
def warden(make_user):
    return make_user("HOSTEL_WARDEN", username="warden", department=None)


@pytest.fixture
def security(make_user):
    return make_user("SECURITY", username="security", department=None)


@pytest.fixture
def executive_director(make_user):
    return make_user("EXECUTIVE_DIRECTOR", username="ed", department=None)


@pytest.fixture
def gate_pass_factory(db) -> Callable[..., GatePassRequest]:
    """
    Creates a gate pass the way the create endpoint would, optionally
    starting at an arbitrary status.
    """

    def _factory(*, requester, status: Optional[str] = None, **extra: Any) -> GatePassRequest:
        profile = requester.campus_profile
        requester_type = requester_type_for_role(profile.role)
        start = timezone.now() + timedelta(days=1)

        kwargs = {
            "requester": requester,
            "requester_type": requester_type.value,
            "department": profile.department,
            "is_hosteller": profile.is_hosteller,
            "reason": "Family function",
            "start_date": start,
            "end_date": start + timedelta(days=2),
            "status": status or initial_status(requester_type).value,
        }
        kwargs.update(extra)
        return GatePassRequest.objects.create(**kwargs)

    return _factory
