# gatepass_client/pages.py
"""
Page-level state for a role's pending queue.

    LOADING -> LOADED -> SELECTING -> DECIDING -> LOADED
    LOADING or DECIDING -> ERROR -> LOADED (acknowledge)

The list is owned by the page instance. An item leaves the list only after
the server confirmed the decision and returned a record that is no longer
pending for this role; every failure keeps the last good list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from . import config
from .actions import DecisionResult, RoleActionClient
from .errors import (
    Forbidden,
    GatePassError,
    InvalidState,
    NetworkFailure,
    NotFound,
    Unauthorized,
    ValidationFailed,
)
from .presentation import DisplayRecord, to_display
from .schemas import GatePassRecord

logger = logging.getLogger(__name__)


class PageState(str, Enum):
    LOADING = "LOADING"
    LOADED = "LOADED"
    SELECTING = "SELECTING"
    DECIDING = "DECIDING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Notice:
    level: str
    message: str


class PendingQueuePage:
    def __init__(self, actions: RoleActionClient, requester_type: Any = None):
        self.actions = actions
        self.requester_type = requester_type
        self.state = PageState.LOADING
        self.items: List[GatePassRecord] = []
        self.selected_id: Optional[int] = None
        self.inline_error: Optional[str] = None
        self.redirect_to: Optional[str] = None
        self.notices: List[Notice] = []

    # -----------------------------------------------------------
    # Reads
    # -----------------------------------------------------------
    @property
    def selected(self) -> Optional[GatePassRecord]:
        return next((r for r in self.items if r.id == self.selected_id), None)

    def display(self) -> List[DisplayRecord]:
        return [to_display(r) for r in self.items]

    def notify(self, level: str, message: str) -> None:
        self.notices.append(Notice(level, message))

    def pop_notices(self) -> List[Notice]:
        out, self.notices = self.notices, []
        return out

    # -----------------------------------------------------------
    # Transitions
    # -----------------------------------------------------------
    def load(self) -> PageState:
        self.state = PageState.LOADING
        try:
            self.items = self.actions.pending(self.requester_type)
        except GatePassError as e:
            self._fail(e, "Could not load pending gate passes")
            return self.state

        if self.selected_id is not None and self.selected is None:
            self.selected_id = None
        self.state = PageState.LOADED
        return self.state

    def select(self, request_id: int) -> PageState:
        if self.state not in {PageState.LOADED, PageState.SELECTING}:
            self.notify("warning", "Wait for the current action to finish.")
            return self.state
        if not any(r.id == request_id for r in self.items):
            self.notify("warning", f"Gate pass #{request_id} is no longer pending.")
            return self.state

        self.selected_id = request_id
        self.inline_error = None
        self.state = PageState.SELECTING
        return self.state

    def cancel(self) -> PageState:
        self.selected_id = None
        self.inline_error = None
        self.state = PageState.LOADED
        return self.state

    def acknowledge(self) -> PageState:
        """Dismiss the error; the last good list is still there."""
        if self.state is PageState.ERROR:
            self.state = PageState.LOADED
        return self.state

    def decide(self, decision: Any, comment: Optional[str] = None) -> PageState:
        if self.state is not PageState.SELECTING or self.selected_id is None:
            self.notify("warning", "Select a gate pass first.")
            return self.state

        request_id = self.selected_id
        self.state = PageState.DECIDING
        self.inline_error = None

        try:
            result = self.actions.submit_decision(request_id, decision, comment)
        except ValidationFailed as e:
            self.inline_error = e.message
            self.state = PageState.SELECTING
            return self.state
        except (InvalidState, NotFound) as e:
            self._fail(e, "Action failed")
            self.selected_id = None
            self.load()
            return self.state
        except GatePassError as e:
            self._fail(e, "Action failed")
            return self.state

        self._apply(result)
        return self.state

    # -----------------------------------------------------------
    # Internals
    # -----------------------------------------------------------
    def _apply(self, result: DecisionResult) -> None:
        record = result.record
        still_mine = record.status is self.actions.stage.pending

        if still_mine:
            self.items = [record if r.id == record.id else r for r in self.items]
        else:
            self.items = [r for r in self.items if r.id != record.id]

        self.selected_id = None
        self.state = PageState.LOADED
        self.notify("success", f"Gate pass #{record.id}: {record.status.value.replace('_', ' ').lower()}.")

    def _fail(self, error: GatePassError, prefix: str) -> None:
        logger.info("Pending queue (%s): %s", self.actions.stage.key, error)
        self.state = PageState.ERROR

        if isinstance(error, Forbidden):
            self.redirect_to = config.GATEPASS_DASHBOARD_PATH
            self.notify("error", f"{prefix}: you are not allowed to do this.")
        elif isinstance(error, Unauthorized):
            self.redirect_to = config.GATEPASS_LOGIN_PATH
            self.notify("error", "Your session has expired. Please log in again.")
        elif isinstance(error, NetworkFailure):
            self.notify("error", f"{prefix}: network problem, please try again.")
        else:
            self.notify("error", f"{prefix}: {error.message}")
