# gatepass_core/models/complaint.py

from django.contrib.auth.models import User
from django.db import models

from gatepass_core.workflows import ComplaintStatus
from gatepass_core.workflows.guards import WorkflowWriteGuardMixin

from .core import TimeStampedModel


class Complaint(WorkflowWriteGuardMixin, TimeStampedModel):
    """A student complaint answered by the executive director."""

    WORKFLOW_FIELDS = ("status", "response")

    STATUS_CHOICES = [(s.value, s.value.replace("_", " ").title()) for s in ComplaintStatus]

    student = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="complaints",
    )
    subject = models.CharField(max_length=255)
    message = models.TextField()

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=ComplaintStatus.PENDING.value,
        editable=False,
        db_index=True,
    )
    response = models.TextField(blank=True, editable=False)
    responder = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        editable=False,
        related_name="complaints_answered",
    )

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Complaint#{self.pk} {self.subject}"
