# gatepass_core/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter

# -------------------------------------------------
# Core API ViewSets
# -------------------------------------------------
from .views import (
    HealthCheckView,
    GatePassViewSet,
    ComplaintViewSet,
)

# -------------------------------------------------
# Workflow definitions (static metadata)
# -------------------------------------------------
from .views_workflows import (
    WorkflowDefinitionView,
    WorkflowNextStatesView,
    WorkflowAllowedView,
)

# -------------------------------------------------
# Identity
# -------------------------------------------------
from .views_identity import WhoAmIView


app_name = "gatepass_core"

# -------------------------------------------------
# Router (paths match the front-end contract: no trailing slash)
# -------------------------------------------------
router = DefaultRouter(trailing_slash=False)
router.register(r"gate-passes", GatePassViewSet, basename="gate-pass")
router.register(r"complaints", ComplaintViewSet, basename="complaint")


urlpatterns = [
    # ============================================================
    # Core API
    # ============================================================
    path("", include(router.urls)),

    # ============================================================
    # System
    # ============================================================
    path("health", HealthCheckView.as_view(), name="health_check"),

    # ============================================================
    # Identity
    # ============================================================
    path("whoami", WhoAmIView.as_view(), name="whoami"),

    # ============================================================
    # Workflow definitions
    # ============================================================
    path("workflows/<str:kind>", WorkflowDefinitionView.as_view(), name="workflow-definition"),
    path("workflows/<str:kind>/next", WorkflowNextStatesView.as_view(), name="workflow-next-states"),
    path("workflows/<str:kind>/<int:pk>/allowed", WorkflowAllowedView.as_view(), name="workflow-allowed"),
]
