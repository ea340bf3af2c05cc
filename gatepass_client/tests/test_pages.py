# gatepass_client/tests/test_pages.py
"""
Pending queue page state machine against a scripted server.
"""

from __future__ import annotations

import json
import pathlib
import warnings
from typing import Any, Dict, List

import httpx
import pytest

import gatepass_client
from gatepass_client.actions import StaffActions
from gatepass_client.api import GatePassApi
from gatepass_client.credentials import Credential
from gatepass_client.pages import PageState, PendingQueuePage

from .conftest import BASE_URL, gate_pass_payload

QUEUE = "/api/gate-passes/pending-staff-approval"


class ScriptedServer:
    """
    Serves the staff queue from ``self.queue``; PATCH answers are popped
    from ``self.patch_replies`` (status, body) or raised if an exception.
    """

    def __init__(self, queue: List[Dict[str, Any]]):
        self.queue = queue
        self.patch_replies: List[Any] = []
        self.get_replies: List[Any] = []
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET" and request.url.path == QUEUE:
            if self.get_replies:
                reply = self.get_replies.pop(0)
                if isinstance(reply, Exception):
                    raise reply
                return httpx.Response(reply[0], json=reply[1])
            return httpx.Response(200, json=self.queue)
        if request.method == "PATCH":
            reply = self.patch_replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return httpx.Response(reply[0], json=reply[1])
        return httpx.Response(404, json={"detail": "Not found."})

    @property
    def patches(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "PATCH"]

    @property
    def fetches(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]


@pytest.fixture
def server():
    return ScriptedServer(
        [
            gate_pass_payload(1, "PENDING_STAFF", minutes=0),
            gate_pass_payload(2, "PENDING_STAFF", minutes=5),
        ]
    )


@pytest.fixture
def page(server):
    api = GatePassApi(
        Credential(token="abc", user_id=3, role="staff"),
        base_url=BASE_URL,
        transport=httpx.MockTransport(server),
    )
    p = PendingQueuePage(StaffActions(api))
    yield p
    api.close()


def _ids(page):
    return [r.id for r in page.items]


def test_load_then_approve_removes_item_after_confirmation(page, server):
    assert page.state is PageState.LOADING
    assert page.load() is PageState.LOADED
    assert _ids(page) == [1, 2]

    server.patch_replies.append((200, gate_pass_payload(1, "PENDING_HOD", staff_comment="ok")))
    page.select(1)
    assert page.state is PageState.SELECTING

    assert page.decide("approve", "ok") is PageState.LOADED
    assert _ids(page) == [2]
    assert page.selected_id is None
    assert page.pop_notices()[-1].level == "success"

    body = json.loads(server.patches[0].content)
    assert body == {"status": "APPROVED_BY_STAFF", "staff_comment": "ok"}
    assert server.patches[0].url.path == "/api/gate-passes/1/staff-approval"


def test_rejection_without_comment_stays_inline(page, server):
    page.load()
    page.select(2)

    assert page.decide("reject") is PageState.SELECTING
    assert page.inline_error
    assert _ids(page) == [1, 2]
    assert server.patches == []


def test_stale_item_conflict_refetches(page, server):
    page.load()
    page.select(1)

    server.patch_replies.append((409, {"detail": "Gate pass is PENDING_HOD, not PENDING_STAFF"}))
    server.queue = [gate_pass_payload(2, "PENDING_STAFF", minutes=5)]

    assert page.decide("approve") is PageState.LOADED
    assert _ids(page) == [2]
    assert len(server.fetches) == 2
    notices = page.pop_notices()
    assert notices[0].level == "error"
    assert "PENDING_HOD" in notices[0].message


def test_not_found_refetches(page, server):
    page.load()
    page.select(2)
    server.patch_replies.append((404, {"detail": "Not found."}))
    server.queue = server.queue[:1]

    page.decide("approve")
    assert page.state is PageState.LOADED
    assert _ids(page) == [1]


def test_network_failure_keeps_last_good_list(page, server):
    page.load()
    page.select(1)
    server.patch_replies.append(httpx.ConnectError("connection refused"))

    assert page.decide("approve") is PageState.ERROR
    assert _ids(page) == [1, 2]
    assert "try again" in page.pop_notices()[-1].message

    assert page.acknowledge() is PageState.LOADED
    assert _ids(page) == [1, 2]


def test_failed_fetch_keeps_previous_list(page, server):
    page.load()
    server.get_replies.append((500, {"detail": "boom"}))

    assert page.load() is PageState.ERROR
    assert _ids(page) == [1, 2]


def test_expired_session_redirects_to_login(page, server):
    server.get_replies.append((401, {"detail": "Given token not valid for any token type"}))
    assert page.load() is PageState.ERROR
    assert page.redirect_to == "/login"


def test_forbidden_redirects_to_dashboard(page, server):
    page.load()
    page.select(1)
    server.patch_replies.append((403, {"detail": "Role STUDENT cannot make staff decisions."}))

    assert page.decide("approve") is PageState.ERROR
    assert page.redirect_to == "/dashboard"
    assert _ids(page) == [1, 2]


def test_record_still_pending_is_replaced_not_removed(page, server):
    page.load()
    page.select(1)
    server.patch_replies.append((200, gate_pass_payload(1, "PENDING_STAFF", reason="edited")))

    page.decide("approve")
    assert _ids(page) == [1, 2]
    assert page.items[0].reason == "edited"


def test_decide_requires_selection(page, server):
    page.load()
    assert page.decide("approve") is PageState.LOADED
    assert server.patches == []
    assert page.select(42) is PageState.LOADED
    assert page.pop_notices()[-1].level == "warning"


def test_display_rows(page):
    page.load()
    rows = page.display()
    assert [r.id for r in rows] == [1, 2]
    assert rows[0].status_label == "Pending staff approval"


def test_client_modules_compile_without_warnings():
    root = pathlib.Path(gatepass_client.__file__).parent
    for path in sorted(root.glob("*.py")):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(path.read_text(encoding="utf-8"), str(path), "exec")
