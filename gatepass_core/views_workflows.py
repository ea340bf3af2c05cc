# gatepass_core/views_workflows.py
from django.shortcuts import get_object_or_404

from drf_spectacular.utils import extend_schema
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Complaint, GatePassRequest
from .permissions import request_role
from .workflows import (
    STAGE_BY_ROLE,
    allowed_next_states,
    allowed_transitions,
    normalize_state,
    workflow_definition,
)


MODEL_REGISTRY = {
    "gate_pass": GatePassRequest,
    "complaint": Complaint,
}


def _normalize_kind(kind: str) -> str:
    k = normalize_state(kind).lower()
    if k not in MODEL_REGISTRY:
        raise ValidationError({"kind": "Invalid workflow kind. Use 'gate-pass' or 'complaint'."})
    return k


@extend_schema(tags=["Workflows"])
class WorkflowDefinitionView(APIView):
    """
    Returns full workflow definition for a given kind.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, kind: str):
        return Response(workflow_definition(_normalize_kind(kind)))


@extend_schema(tags=["Workflows"])
class WorkflowNextStatesView(APIView):
    """
    Returns canonical next states for ?current=<status>.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, kind: str):
        kind = _normalize_kind(kind)
        current = request.query_params.get("current")
        if not current:
            raise ValidationError("current query parameter is required.")

        next_states = allowed_next_states(kind, current)
        return Response(
            {
                "kind": kind,
                "current": normalize_state(current),
                "allowed_next": next_states,
                "terminal": len(next_states) == 0,
            }
        )


@extend_schema(tags=["Workflows"])
class WorkflowAllowedView(APIView):
    """
    GET /api/workflows/<kind>/<pk>/allowed

    Current state plus the next states the caller's role can produce.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, kind: str, pk: int):
        kind = _normalize_kind(kind)
        instance = get_object_or_404(MODEL_REGISTRY[kind], pk=pk)
        role = request_role(request)

        allowed = allowed_transitions(kind, instance.status, role)
        if kind == "gate_pass":
            stage = STAGE_BY_ROLE.get(role)
            if stage is None or stage.pending.value != instance.status:
                allowed = []

        return Response(
            {
                "kind": kind,
                "object_id": instance.pk,
                "current": instance.status,
                "allowed": allowed,
                "role": role,
            }
        )
