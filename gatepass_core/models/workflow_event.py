# gatepass_core/models/workflow_event.py
from django.conf import settings
from django.db import models


class WorkflowEvent(models.Model):
    """
    One row per executed decision, never edited afterwards.

    ``outcome`` is the decision token the actor chose (APPROVED_BY_STAFF,
    REJECTED_BY_HOD, ...); ``to_status`` is what was stored after routing.
    The two differ only for pass-through approvals.
    """

    KIND_GATE_PASS = "gate_pass"
    KIND_COMPLAINT = "complaint"
    KIND_CHOICES = (
        (KIND_GATE_PASS, "Gate pass"),
        (KIND_COMPLAINT, "Complaint"),
    )

    kind = models.CharField(max_length=32, choices=KIND_CHOICES)
    object_id = models.PositiveIntegerField()

    from_status = models.CharField(max_length=64)
    outcome = models.CharField(max_length=64)
    to_status = models.CharField(max_length=64)

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="workflow_events",
    )
    role = models.CharField(max_length=64)
    comment = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["kind", "object_id"], name="wfevent_kind_object_idx"),
        ]

    def __str__(self):
        route = self.from_status if self.outcome == self.to_status else f"{self.from_status} ({self.outcome})"
        return f"{self.get_kind_display()} #{self.object_id}: {route} -> {self.to_status} by {self.role}"
