# gatepass_client/api.py
"""
Thin synchronous wrapper over the gate pass REST API.

Every call carries ``Authorization: Bearer <token>`` from the credential the
wrapper was built with. Transport errors and error responses are converted
to ``gatepass_client.errors``; successful bodies are validated into the
models in ``gatepass_client.schemas`` before they are returned.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from gatepass_core.workflows import STAGES, normalize_state

from . import config
from .credentials import Credential
from .errors import MalformedResponse, Unauthorized, error_for_response, error_for_transport
from .schemas import (
    GatePassCreate,
    GatePassRecord,
    TokenPair,
    WhoAmI,
    WorkflowEventRecord,
    parse_list,
)

logger = logging.getLogger(__name__)


class GatePassApi:
    """
    One caller's view of the API.

    ``with_credential`` returns a wrapper for another caller that shares this
    wrapper's connection pool; only the wrapper that opened the pool closes
    it, so closing a derived wrapper leaves the original usable.
    """

    def __init__(
        self,
        credential: Optional[Credential] = None,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        _shared_client: Optional[httpx.Client] = None,
    ):
        self.credential = credential
        if _shared_client is not None:
            self.base_url = str(_shared_client.base_url).rstrip("/")
            self._client = _shared_client
            self._owns_client = False
            return

        self.base_url = (base_url or config.GATEPASS_API_URL).rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else config.GATEPASS_API_TIMEOUT,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._owns_client = True

    # -----------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------
    @property
    def closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "GatePassApi":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def with_credential(self, credential: Credential) -> "GatePassApi":
        """Same connection, different caller. Closing the result is a no-op."""
        return GatePassApi(credential, _shared_client=self._client)

    # -----------------------------------------------------------
    # Plumbing
    # -----------------------------------------------------------
    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        headers = {}
        if authenticated:
            if self.credential is None:
                raise Unauthorized("Not logged in.")
            headers.update(self.credential.auth_headers())

        params = {k: v for k, v in (params or {}).items() if v not in (None, "")}

        try:
            response = self._client.request(method, path, json=json, params=params or None, headers=headers)
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise error_for_transport(e) from e

        if response.is_error:
            err = error_for_response(response)
            logger.info("%s %s -> %s %s", method, path, response.status_code, err.message)
            raise err

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(f"{method} {path} returned a non-JSON body") from e

    def _validate(self, model, payload: Any, *, many: bool = False):
        try:
            if many:
                return parse_list(model, payload)
            return model.model_validate(payload)
        except ValidationError as e:
            raise MalformedResponse(f"Unexpected {model.__name__} payload: {e}", payload=payload) from e

    # -----------------------------------------------------------
    # Session
    # -----------------------------------------------------------
    def obtain_token(self, username: str, password: str) -> TokenPair:
        payload = self.request(
            "POST",
            "/token/",
            json={"username": username, "password": password},
            authenticated=False,
        )
        return self._validate(TokenPair, payload)

    def whoami(self) -> WhoAmI:
        return self._validate(WhoAmI, self.request("GET", "/whoami"))

    def login(self, username: str, password: str) -> Credential:
        """
        Exchange username/password for a token, then resolve the role once.
        """
        tokens = self.obtain_token(username, password)
        probe = self.with_credential(Credential(token=tokens.access))
        identity = probe.whoami()
        self.credential = Credential.from_identity(tokens.access, identity.model_dump(mode="json"))
        logger.info("Logged in as %s (%s)", self.credential.username, self.credential.role or "no role")
        return self.credential

    def health(self) -> Dict[str, Any]:
        return self.request("GET", "/health", authenticated=False)

    # -----------------------------------------------------------
    # Gate passes
    # -----------------------------------------------------------
    def create_gate_pass(self, payload: GatePassCreate) -> GatePassRecord:
        body = payload.model_dump(mode="json")
        return self._validate(GatePassRecord, self.request("POST", "/gate-passes", json=body))

    def get_gate_pass(self, gate_pass_id: int) -> GatePassRecord:
        return self._validate(GatePassRecord, self.request("GET", f"/gate-passes/{int(gate_pass_id)}"))

    def list_gate_passes(self, **filters: Any) -> List[GatePassRecord]:
        return self._validate(GatePassRecord, self.request("GET", "/gate-passes", params=filters), many=True)

    def my_requests(self) -> List[GatePassRecord]:
        return self._validate(GatePassRecord, self.request("GET", "/gate-passes/my-requests"), many=True)

    def pending(self, stage_key: str, *, requester_type: Any = None) -> List[GatePassRecord]:
        stage = STAGES[stage_key]
        params = {"requester_type": normalize_state(requester_type) if requester_type else None}
        payload = self.request("GET", f"/gate-passes/{stage.pending_endpoint}", params=params)
        return self._validate(GatePassRecord, payload, many=True)

    def security_pending(self) -> List[GatePassRecord]:
        return self._validate(GatePassRecord, self.request("GET", "/gate-passes/security-pending"), many=True)

    def security_used(self) -> List[GatePassRecord]:
        return self._validate(GatePassRecord, self.request("GET", "/gate-passes/security-used"), many=True)

    def history(self, gate_pass_id: int) -> List[WorkflowEventRecord]:
        payload = self.request("GET", f"/gate-passes/{int(gate_pass_id)}/history")
        return self._validate(WorkflowEventRecord, payload, many=True)

    def decide(self, gate_pass_id: int, stage_key: str, body: Dict[str, Any]) -> GatePassRecord:
        stage = STAGES[stage_key]
        payload = self.request("PATCH", f"/gate-passes/{int(gate_pass_id)}/{stage.decision_endpoint}", json=body)
        return self._validate(GatePassRecord, payload)

    # -----------------------------------------------------------
    # Workflow metadata
    # -----------------------------------------------------------
    def workflow_definition(self, kind: str = "gate_pass") -> Dict[str, Any]:
        return self.request("GET", f"/workflows/{kind}")
