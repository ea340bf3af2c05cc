# gatepass_core/views.py
from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .filters import ComplaintFilter, GatePassFilter, RequesterTypeFilter
from .models import Complaint, GatePassRequest, WorkflowEvent
from .permissions import (
    HasCampusRole,
    IsOversightRole,
    can_view_gate_pass,
    get_profile,
    request_role,
    require_role,
)
from .serializers import (
    ComplaintSerializer,
    ComplaintUpdateSerializer,
    GatePassCreateSerializer,
    GatePassSerializer,
    SecurityVerificationSerializer,
    StageDecisionSerializer,
    WorkflowEventSerializer,
)
from .workflows import (
    OVERSIGHT_ROLES,
    PENDING_STATES,
    STAGES,
    GatePassStatus,
    initial_status,
    normalize_state,
    requester_type_for_role,
)
from .workflows.executor import execute_complaint_update, execute_decision

logger = logging.getLogger(__name__)


GATE_PASS_RELATED = (
    "requester__campus_profile__department",
    "department",
    "staff_reviewer",
    "hod_reviewer",
    "academic_director_reviewer",
    "hostel_warden_reviewer",
    "security_reviewer",
)


# ===============================================================
# Health
# ===============================================================
class HealthCheckView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(tags=["System"])
    def get(self, request):
        return Response({"status": "ok", "service": "Campus Gate"})


# ===============================================================
# Gate passes
# ===============================================================
@extend_schema(tags=["Gate passes"])
class GatePassViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Gate-pass requests and their approval chain.

    Pending queues return requests whose status equals the caller's stage
    pending status, oldest first. Decisions go through the workflow
    executor only.
    """

    queryset = GatePassRequest.objects.select_related(*GATE_PASS_RELATED).all()
    serializer_class = GatePassSerializer
    filterset_class = GatePassFilter
    permission_classes = [IsAuthenticated, HasCampusRole]

    def get_permissions(self):
        if self.action == "list":
            return [IsAuthenticated(), IsOversightRole()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action == "create":
            return GatePassCreateSerializer
        return super().get_serializer_class()

    def get_queryset(self):
        return super().get_queryset().order_by("-created_at", "-id")

    # -----------------------------------------------------------
    # Create / read
    # -----------------------------------------------------------
    def create(self, request, *args, **kwargs):
        role = require_role(
            request,
            {"STUDENT", "STAFF", "HOD"},
            "Only students, staff and HODs can request gate passes.",
        )
        requester_type = requester_type_for_role(role)
        profile = get_profile(request.user)

        serializer = GatePassCreateSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        gate_pass = serializer.save(
            requester=request.user,
            requester_type=requester_type.value,
            department=profile.department if profile else None,
            is_hosteller=bool(profile and profile.is_hosteller),
            status=initial_status(requester_type).value,
        )

        logger.info(
            "Gate pass %s created by %s (%s) -> %s",
            gate_pass.pk,
            request.user.username,
            requester_type.value,
            gate_pass.status,
        )

        gate_pass = self.get_queryset().get(pk=gate_pass.pk)
        return Response(GatePassSerializer(gate_pass).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, *args, **kwargs):
        gate_pass = get_object_or_404(self.get_queryset(), pk=kwargs["pk"])
        if not can_view_gate_pass(request, gate_pass):
            raise PermissionDenied("You can only view your own gate passes.")
        return Response(GatePassSerializer(gate_pass).data)

    @action(detail=False, methods=["get"], url_path="my-requests")
    def my_requests(self, request):
        qs = self.get_queryset().filter(requester=request.user).order_by("-created_at", "-id")
        return Response(GatePassSerializer(qs, many=True).data)

    @action(detail=True, methods=["get"], url_path="history")
    def history(self, request, pk=None):
        gate_pass = get_object_or_404(GatePassRequest, pk=pk)
        if not can_view_gate_pass(request, gate_pass):
            raise PermissionDenied("You can only view your own gate passes.")
        events = WorkflowEvent.objects.select_related("performed_by").filter(
            kind="gate_pass", object_id=gate_pass.pk
        )
        return Response(WorkflowEventSerializer(events, many=True).data)

    # -----------------------------------------------------------
    # Pending queues
    # -----------------------------------------------------------
    def _pending_queue(self, request, stage_key: str):
        stage = STAGES[stage_key]
        require_role(request, {stage.role})

        qs = self.get_queryset().filter(status=stage.pending.value)
        qs = RequesterTypeFilter(request.query_params, queryset=qs).qs
        qs = qs.order_by("created_at", "id")
        return Response(GatePassSerializer(qs, many=True).data)

    @action(detail=False, methods=["get"], url_path="pending-staff-approval")
    def pending_staff_approval(self, request):
        return self._pending_queue(request, "staff")

    @action(detail=False, methods=["get"], url_path="pending-hod-approval")
    def pending_hod_approval(self, request):
        return self._pending_queue(request, "hod")

    @action(detail=False, methods=["get"], url_path="pending-academic-director-approval")
    def pending_academic_director_approval(self, request):
        return self._pending_queue(request, "academic_director")

    @action(detail=False, methods=["get"], url_path="pending-hostel-warden-approval")
    def pending_hostel_warden_approval(self, request):
        return self._pending_queue(request, "hostel_warden")

    @action(detail=False, methods=["get"], url_path="for-security-verification")
    def for_security_verification(self, request):
        return self._pending_queue(request, "security")

    @action(detail=False, methods=["get"], url_path="security-pending")
    def security_pending(self, request):
        require_role(request, {"SECURITY"})
        qs = self.get_queryset().filter(status__in=PENDING_STATES).order_by("created_at", "id")
        return Response(GatePassSerializer(qs, many=True).data)

    @action(detail=False, methods=["get"], url_path="security-used")
    def security_used(self, request):
        require_role(request, {"SECURITY"})
        qs = self.get_queryset().filter(status=GatePassStatus.USED.value).order_by("-updated_at", "-id")
        return Response(GatePassSerializer(qs, many=True).data)

    # -----------------------------------------------------------
    # Stage decisions (AUTHORITATIVE)
    # -----------------------------------------------------------
    def _decide(self, request, pk, stage_key: str, serializer_class=StageDecisionSerializer):
        gate_pass = get_object_or_404(GatePassRequest, pk=pk)

        serializer = serializer_class(data=request.data, context={"request": request, "stage": stage_key})
        serializer.is_valid(raise_exception=True)

        execute_decision(
            instance=gate_pass,
            stage_key=stage_key,
            decision=serializer.validated_data["decision"],
            comment=serializer.validated_data["comment"],
            user=request.user,
            role=request_role(request),
        )

        gate_pass = self.get_queryset().get(pk=gate_pass.pk)
        return Response(GatePassSerializer(gate_pass).data)

    @action(detail=True, methods=["patch"], url_path="staff-approval")
    def staff_approval(self, request, pk=None):
        return self._decide(request, pk, "staff")

    @action(detail=True, methods=["patch"], url_path="hod-approval")
    def hod_approval(self, request, pk=None):
        return self._decide(request, pk, "hod")

    @action(detail=True, methods=["patch"], url_path="academic-director-approval")
    def academic_director_approval(self, request, pk=None):
        return self._decide(request, pk, "academic_director")

    @action(detail=True, methods=["patch"], url_path="hostel-warden-approval")
    def hostel_warden_approval(self, request, pk=None):
        return self._decide(request, pk, "hostel_warden")

    @action(detail=True, methods=["patch"], url_path="security-verification")
    def security_verification(self, request, pk=None):
        return self._decide(request, pk, "security", SecurityVerificationSerializer)


# ===============================================================
# Complaints
# ===============================================================
@extend_schema(tags=["Complaints"])
class ComplaintViewSet(viewsets.GenericViewSet):
    queryset = Complaint.objects.select_related(
        "student__campus_profile__department", "responder"
    ).all()
    serializer_class = ComplaintSerializer
    filterset_class = ComplaintFilter
    permission_classes = [IsAuthenticated, HasCampusRole]

    def get_queryset(self):
        return super().get_queryset().order_by("-created_at", "-id")

    def list(self, request):
        role = request_role(request)
        qs = self.get_queryset()
        if role == "STUDENT":
            qs = qs.filter(student=request.user)
        elif role not in OVERSIGHT_ROLES:
            raise PermissionDenied("Only students and directors can list complaints.")
        qs = self.filter_queryset(qs)
        return Response(ComplaintSerializer(qs, many=True).data)

    def create(self, request):
        require_role(request, {"STUDENT"}, "Only students can file complaints.")
        serializer = ComplaintSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        complaint = serializer.save(student=request.user)
        logger.info("Complaint %s filed by %s", complaint.pk, request.user.username)
        return Response(ComplaintSerializer(complaint).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        complaint = get_object_or_404(self.get_queryset(), pk=pk)
        role = request_role(request)
        if complaint.student_id != request.user.id and role == "STUDENT":
            raise PermissionDenied("You can only view your own complaints.")
        return Response(ComplaintSerializer(complaint).data)

    def partial_update(self, request, pk=None):
        complaint = get_object_or_404(Complaint, pk=pk)
        serializer = ComplaintUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        execute_complaint_update(
            instance=complaint,
            new_status=serializer.validated_data["status"],
            response=serializer.validated_data["response"],
            user=request.user,
            role=request_role(request),
        )
        complaint = self.get_queryset().get(pk=complaint.pk)
        return Response(ComplaintSerializer(complaint).data)

    @action(detail=False, methods=["get"], url_path="department")
    def department(self, request):
        require_role(request, {"HOD"})
        profile = get_profile(request.user)
        if profile is None or profile.department_id is None:
            raise ValidationError({"department": "Your profile has no department."})
        qs = self.get_queryset().filter(student__campus_profile__department_id=profile.department_id)
        return Response(ComplaintSerializer(qs, many=True).data)

    @action(detail=False, methods=["get"], url_path="hostel")
    def hostel(self, request):
        require_role(request, {"HOSTEL_WARDEN"})
        qs = self.get_queryset().filter(student__campus_profile__residence="HOSTELLER")
        return Response(ComplaintSerializer(qs, many=True).data)

    @action(detail=False, methods=["get"], url_path=r"status/(?P<status_value>[A-Za-z_\-]+)")
    def by_status(self, request, status_value=None):
        require_role(request, {"EXECUTIVE_DIRECTOR", "ADMIN"})
        qs = self.get_queryset().filter(status=normalize_state(status_value))
        return Response(ComplaintSerializer(qs, many=True).data)
