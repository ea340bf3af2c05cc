# gatepass_core/admin.py

from django.contrib import admin
from django.utils.html import format_html

from .models import (
    Complaint,
    Department,
    GatePassRequest,
    Profile,
    WorkflowEvent,
)
from .workflows import PENDING_STATES, TERMINAL_STATES


# =============================================================
# Workflow events (READ-ONLY AUDIT LOG)
# =============================================================

@admin.register(WorkflowEvent)
class WorkflowEventAdmin(admin.ModelAdmin):
    list_display = (
        "kind",
        "object_id",
        "from_status",
        "outcome",
        "to_status",
        "performed_by",
        "role",
        "created_at",
    )
    list_filter = (
        "kind",
        "role",
        "outcome",
    )
    search_fields = (
        "object_id",
        "performed_by__username",
    )
    ordering = ("-created_at",)

    readonly_fields = [f.name for f in WorkflowEvent._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =============================================================
# Gate passes (status and stage comments are workflow-owned)
# =============================================================

@admin.register(GatePassRequest)
class GatePassRequestAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "requester",
        "requester_type",
        "department",
        "type",
        "status_badge",
        "start_date",
        "end_date",
        "created_at",
    )
    list_filter = ("status", "requester_type", "type", "department", "is_hosteller")
    search_fields = ("requester__username", "requester__email", "reason")
    ordering = ("-created_at",)
    readonly_fields = (
        "requester_type",
        "is_hosteller",
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

    def status_badge(self, obj):
        if obj.status in PENDING_STATES:
            color = "#ed6c02"
        elif obj.status in TERMINAL_STATES and obj.status.startswith("REJECTED"):
            color = "#c62828"
        else:
            color = "#2e7d32"
        return format_html('<span style="color:{};font-weight:bold;">{}</span>', color, obj.status)

    status_badge.short_description = "Status"


# =============================================================
# Complaints
# =============================================================

@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = ("id", "subject", "student", "status", "responder", "created_at")
    list_filter = ("status",)
    search_fields = ("subject", "student__username")
    readonly_fields = ("status", "response", "responder", "created_at", "updated_at")


# =============================================================
# Departments / profiles
# =============================================================

@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ("code", "name")
    search_fields = ("code", "name")


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "department", "residence")
    list_filter = ("role", "residence", "department")
    search_fields = ("user__username", "user__email", "roll_number")
    autocomplete_fields = ("user",)
