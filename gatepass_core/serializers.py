from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict

from django.contrib.auth.models import User
from rest_framework import serializers
from rest_framework.settings import api_settings

from .models import Complaint, Department, GatePassRequest, Profile, WorkflowEvent
from .workflows import (
    STAGES,
    ComplaintStatus,
    Decision,
    GatePassType,
    normalize_state,
)


# ===============================================================
# Helpers
# ===============================================================

class NormalizedChoiceField(serializers.ChoiceField):
    """
    Accepts any case / dash style for enum tokens ("home-visit", "leave").
    """

    def to_internal_value(self, data):
        return super().to_internal_value(normalize_state(data))


class DepartmentSlimSerializer(serializers.ModelSerializer):
    class Meta:
        model = Department
        fields = ("id", "code", "name")
        read_only_fields = fields


class PersonSerializer(serializers.ModelSerializer):
    """
    Requester / reviewer as the front end shows it: name, email and the
    profile details it needs for display.
    """

    name = serializers.SerializerMethodField()
    role = serializers.SerializerMethodField()
    department = serializers.SerializerMethodField()
    residence = serializers.SerializerMethodField()
    roll_number = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ("id", "username", "name", "email", "role", "department", "residence", "roll_number")
        read_only_fields = fields

    def _profile(self, obj) -> Profile | None:
        try:
            return obj.campus_profile
        except Profile.DoesNotExist:
            return None

    def get_name(self, obj) -> str:
        return obj.get_full_name() or obj.username

    def get_role(self, obj) -> str | None:
        profile = self._profile(obj)
        return profile.role if profile else None

    def get_department(self, obj) -> Dict[str, Any] | None:
        profile = self._profile(obj)
        if profile and profile.department_id:
            return DepartmentSlimSerializer(profile.department).data
        return None

    def get_residence(self, obj) -> str | None:
        profile = self._profile(obj)
        return profile.residence if profile else None

    def get_roll_number(self, obj) -> str | None:
        profile = self._profile(obj)
        return (profile.roll_number or None) if profile else None


# ===============================================================
# Gate passes
# ===============================================================

class GatePassSerializer(serializers.ModelSerializer):
    requester = PersonSerializer(read_only=True)
    department = DepartmentSlimSerializer(read_only=True)
    staff_reviewer = PersonSerializer(read_only=True)
    hod_reviewer = PersonSerializer(read_only=True)
    academic_director_reviewer = PersonSerializer(read_only=True)
    hostel_warden_reviewer = PersonSerializer(read_only=True)
    security_reviewer = PersonSerializer(read_only=True)

    class Meta:
        model = GatePassRequest
        fields = (
            "id",
            "requester",
            "requester_type",
            "department",
            "is_hosteller",
            "type",
            "reason",
            "description",
            "start_date",
            "end_date",
            "status",
            "staff_comment",
            "hod_comment",
            "academic_director_comment",
            "hostel_warden_comment",
            "security_comment",
            "staff_reviewer",
            "hod_reviewer",
            "academic_director_reviewer",
            "hostel_warden_reviewer",
            "security_reviewer",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class GatePassCreateSerializer(serializers.ModelSerializer):
    type = NormalizedChoiceField(
        choices=[t.value for t in GatePassType],
        required=False,
        default=GatePassType.LEAVE.value,
    )

    class Meta:
        model = GatePassRequest
        fields = ("type", "reason", "description", "start_date", "end_date")
        extra_kwargs = {"description": {"required": False, "allow_blank": True}}

    def validate_reason(self, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("A reason is required.")
        return value

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        if attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError({"end_date": "End date must not be before start date."})
        return attrs


class StageDecisionSerializer(serializers.Serializer):
    """
    PATCH body for an approval stage: {status, <stage>_comment}.

    The stage is bound through context["stage"]; the comment field name
    follows the stage. "remarks" is accepted as a legacy alias.
    """

    status = serializers.CharField()
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.stage = STAGES[self.context["stage"]]

    def to_internal_value(self, data):
        if not isinstance(data, Mapping):
            raise serializers.ValidationError(
                {api_settings.NON_FIELD_ERRORS_KEY: ["Expected an object."]}
            )
        data = {key: data.get(key) for key in data}
        if "comment" not in data:
            data["comment"] = data.get(self.stage.comment_field, data.get("remarks"))
        return super().to_internal_value(data)

    def validate_status(self, value: str) -> str:
        return normalize_state(value)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        try:
            decision = self.stage.decision_for_token(attrs["status"])
        except ValueError as e:
            raise serializers.ValidationError({"status": str(e)})

        comment = (attrs.get("comment") or "").strip()
        if decision is Decision.REJECT and not comment:
            raise serializers.ValidationError(
                {self.stage.comment_field: "A comment is required to reject a gate pass."}
            )

        attrs["decision"] = decision
        attrs["comment"] = comment
        return attrs


class SecurityVerificationSerializer(StageDecisionSerializer):
    """
    {status: "used", security_comment, verified?}; verified=false records a
    denial at the gate and still consumes the pass.
    """

    verified = serializers.BooleanField(required=False, default=True)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        if attrs["status"] != self.stage.approve.value:
            raise serializers.ValidationError(
                {"status": f"Security can only mark gate passes as {self.stage.approve.value}."}
            )

        comment = (attrs.get("comment") or "").strip()
        decision = Decision.APPROVE if attrs.get("verified", True) else Decision.REJECT
        if decision is Decision.REJECT and not comment:
            raise serializers.ValidationError(
                {self.stage.comment_field: "A comment is required to deny a gate pass."}
            )

        attrs["decision"] = decision
        attrs["comment"] = comment
        return attrs


class WorkflowEventSerializer(serializers.ModelSerializer):
    performed_by = serializers.CharField(source="performed_by.username", read_only=True)

    class Meta:
        model = WorkflowEvent
        fields = (
            "id",
            "kind",
            "object_id",
            "from_status",
            "outcome",
            "to_status",
            "performed_by",
            "role",
            "comment",
            "created_at",
        )
        read_only_fields = fields


# ===============================================================
# Complaints
# ===============================================================

class ComplaintSerializer(serializers.ModelSerializer):
    student = PersonSerializer(read_only=True)
    director = PersonSerializer(source="responder", read_only=True)

    class Meta:
        model = Complaint
        fields = (
            "id",
            "subject",
            "message",
            "status",
            "response",
            "student",
            "director",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "status", "response", "student", "director", "created_at", "updated_at")


class ComplaintUpdateSerializer(serializers.Serializer):
    status = NormalizedChoiceField(choices=[s.value for s in ComplaintStatus])
    response = serializers.CharField(required=False, allow_blank=True, default="")
