# gatepass_client/tests/conftest.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone as dj_timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from gatepass_client.api import GatePassApi
from gatepass_client.credentials import Credential
from gatepass_core.models import Department, GatePassRequest, Profile
from gatepass_core.workflows import initial_status, requester_type_for_role

BASE_URL = "http://testserver/api"


def django_bridge() -> httpx.MockTransport:
    """
    Routes httpx requests into the Django test client, so the client code
    runs against the real views, auth and serializers.
    """
    django_client = APIClient()

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query.decode()}"

        extra = {}
        auth = request.headers.get("authorization")
        if auth:
            extra["HTTP_AUTHORIZATION"] = auth

        resp = django_client.generic(
            request.method,
            path,
            data=request.content,
            content_type=request.headers.get("content-type", "application/json"),
            **extra,
        )
        return httpx.Response(
            resp.status_code,
            content=resp.content,
            headers={"content-type": resp.get("Content-Type", "application/json")},
        )

    return httpx.MockTransport(handler)


def json_transport(routes: Dict[str, Any], calls: Optional[List[httpx.Request]] = None) -> httpx.MockTransport:
    """
    Canned responses keyed by "METHOD /path". A value may be a
    (status, body) tuple, a body (200), or an exception instance to raise.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        key = f"{request.method} {request.url.path}"
        if key not in routes:
            return httpx.Response(404, json={"detail": "Not found."})
        value = routes[key]
        if isinstance(value, Exception):
            raise value
        if isinstance(value, tuple):
            status, body = value
            return httpx.Response(status, json=body)
        return httpx.Response(200, json=value)

    return httpx.MockTransport(handler)


def gate_pass_payload(id: int, status: str, *, requester_type: str = "STUDENT", minutes: int = 0, **extra) -> Dict[str, Any]:
    created = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc) + timedelta(minutes=minutes)
    payload = {
        "id": id,
        "requester": {"id": 7, "username": "asha", "name": "Asha Rao", "email": "asha@campus.test"},
        "requester_type": requester_type,
        "department": {"id": 1, "code": "CSE", "name": "Computer Science"},
        "is_hosteller": False,
        "type": "LEAVE",
        "reason": "Family function",
        "description": "",
        "start_date": "2026-03-05T08:30:00+05:30",
        "end_date": "2026-03-07T18:00:00+05:30",
        "status": status,
        "created_at": created.isoformat(),
        "updated_at": created.isoformat(),
    }
    payload.update(extra)
    return payload


@pytest.fixture
def department(db) -> Department:
    return Department.objects.create(code="CSE", name="Computer Science")


@pytest.fixture
def bridge() -> httpx.MockTransport:
    return django_bridge()


@pytest.fixture
def login_as(db, department, bridge) -> Callable[..., GatePassApi]:
    """
    Creates a user with a profile and returns a GatePassApi holding a real
    JWT for that user.
    """
    User = get_user_model()
    created: List[GatePassApi] = []

    def _factory(role: str, *, username: Optional[str] = None, residence: str = "DAY_SCHOLAR") -> GatePassApi:
        user = User.objects.create_user(
            username=username or role.lower(),
            password="pass123",
            first_name=role.title(),
        )
        Profile.objects.create(user=user, role=role, department=department, residence=residence)

        token = str(AccessToken.for_user(user))
        credential = Credential(token=token, user_id=user.id, username=user.username, role=role)
        api = GatePassApi(credential, base_url=BASE_URL, transport=bridge)
        api.user = user
        created.append(api)
        return api

    yield _factory

    for api in created:
        api.close()


@pytest.fixture
def gate_pass_factory(db) -> Callable[..., GatePassRequest]:
    def _factory(*, requester, status: Optional[str] = None, **extra: Any) -> GatePassRequest:
        profile = requester.campus_profile
        requester_type = requester_type_for_role(profile.role)
        start = dj_timezone.now() + timedelta(days=1)
        kwargs = {
            "requester": requester,
            "requester_type": requester_type.value,
            "department": profile.department,
            "is_hosteller": profile.is_hosteller,
            "reason": "Family function",
            "start_date": start,
            "end_date": start + timedelta(days=1),
            "status": status or initial_status(requester_type).value,
        }
        kwargs.update(extra)
        return GatePassRequest.objects.create(**kwargs)

    return _factory
