# gatepass_core/models/gate_pass.py

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from gatepass_core.workflows import (
    STAGE_COMMENT_FIELDS,
    GatePassStatus,
    GatePassType,
    RequesterType,
)
from gatepass_core.workflows.guards import WorkflowWriteGuardMixin

from .core import Department, TimeStampedModel


def _reviewer(related_name: str):
    return models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name=related_name,
    )


class GatePassRequest(WorkflowWriteGuardMixin, TimeStampedModel):
    """A leave/exit request moving through the multi-stage approval chain."""

    WORKFLOW_FIELDS = ("status",) + STAGE_COMMENT_FIELDS

    STATUS_CHOICES = [(s.value, s.value.replace("_", " ").title()) for s in GatePassStatus]
    TYPE_CHOICES = [(t.value, t.value.replace("_", " ").title()) for t in GatePassType]
    REQUESTER_TYPE_CHOICES = [(t.value, t.value.title()) for t in RequesterType]

    requester = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="gate_passes",
    )
    requester_type = models.CharField(
        max_length=16,
        choices=REQUESTER_TYPE_CHOICES,
        editable=False,
        db_index=True,
    )
    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="gate_passes",
    )
    is_hosteller = models.BooleanField(default=False, editable=False)

    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=GatePassType.LEAVE.value)
    reason = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()

    status = models.CharField(
        max_length=40,
        choices=STATUS_CHOICES,
        default=GatePassStatus.PENDING_STAFF.value,
        editable=False,
        db_index=True,
    )

    staff_comment = models.TextField(null=True, blank=True, editable=False)
    hod_comment = models.TextField(null=True, blank=True, editable=False)
    academic_director_comment = models.TextField(null=True, blank=True, editable=False)
    hostel_warden_comment = models.TextField(null=True, blank=True, editable=False)
    security_comment = models.TextField(null=True, blank=True, editable=False)

    staff_reviewer = _reviewer("gate_passes_staff_reviewed")
    hod_reviewer = _reviewer("gate_passes_hod_reviewed")
    academic_director_reviewer = _reviewer("gate_passes_director_reviewed")
    hostel_warden_reviewer = _reviewer("gate_passes_warden_reviewed")
    security_reviewer = _reviewer("gate_passes_security_reviewed")

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="gatepass_status_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                name="gate_pass_end_after_start",
                condition=Q(end_date__gte=F("start_date")),
            ),
        ]

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError("End date must not be before start date.")

    def __str__(self):
        return f"GatePass#{self.pk} {self.requester_type} {self.status}"
