# gatepass_client/errors.py
"""
Client-side error taxonomy.

Every failure the API wrapper can surface is one of these; pages catch
``GatePassError`` at their boundary and turn it into a notice.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx


class GatePassError(Exception):
    status_code: Optional[int] = None

    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload


class NetworkFailure(GatePassError):
    """The server could not be reached or the transport broke mid-request."""


class Unauthorized(GatePassError):
    """Missing/expired token (401) or a role that may not act here (403)."""

    status_code = 401


class Forbidden(Unauthorized):
    status_code = 403


class ValidationFailed(GatePassError):
    status_code = 400

    def __init__(self, message: str, *, fields: Optional[Dict[str, str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.fields = fields or {}


class InvalidState(GatePassError):
    """The request is no longer waiting on the caller's stage."""

    status_code = 409


class NotFound(GatePassError):
    status_code = 404


class MalformedResponse(GatePassError):
    """The server answered with a body that does not match its schema."""


def _first_message(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return _first_message(value[0]) if value else ""
    if isinstance(value, dict):
        return _first_message(next(iter(value.values()), ""))
    return str(value)


def _field_errors(payload: Any) -> Dict[str, str]:
    if not isinstance(payload, dict):
        return {}
    return {
        str(key): _first_message(value)
        for key, value in payload.items()
        if key != "detail"
    }


def _detail(payload: Any, fallback: str) -> str:
    if isinstance(payload, dict):
        if "detail" in payload:
            return _first_message(payload["detail"])
        if payload:
            return _first_message(payload)
    if isinstance(payload, list) and payload:
        return _first_message(payload)
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return fallback


def error_for_response(response: httpx.Response) -> GatePassError:
    """
    Map an error response to the matching ``GatePassError`` subclass.
    """
    try:
        payload = response.json()
    except ValueError:
        payload = response.text

    code = response.status_code
    message = _detail(payload, f"Request failed with HTTP {code}")

    if code == 400:
        return ValidationFailed(message, fields=_field_errors(payload), status_code=code, payload=payload)
    if code == 401:
        return Unauthorized(message, status_code=code, payload=payload)
    if code == 403:
        return Forbidden(message, status_code=code, payload=payload)
    if code == 404:
        return NotFound(message, status_code=code, payload=payload)
    if code == 409:
        return InvalidState(message, status_code=code, payload=payload)
    return GatePassError(message, status_code=code, payload=payload)


def error_for_transport(exc: httpx.TransportError) -> NetworkFailure:
    return NetworkFailure(f"Could not reach the gate pass service: {exc}")
