# gatepass_core/apps.py

from django.apps import AppConfig
from django.core.exceptions import ImproperlyConfigured
import logging

logger = logging.getLogger(__name__)


class GatePassCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "gatepass_core"
    verbose_name = "Gate passes and complaints"

    def ready(self):
        from .workflows import PASS_THROUGH_STATES, reachable_statuses, RequesterType

        # Decision table must stay acyclic on every requester path, and
        # pass-through outcomes are never a stored status.
        for requester_type in RequesterType:
            for hosteller in (False, True):
                stored = {s.value for s in reachable_statuses(requester_type, hosteller)}
                leaked = stored & PASS_THROUGH_STATES
                if leaked:
                    raise ImproperlyConfigured(
                        f"{requester_type.value} path stores pass-through status {sorted(leaked)}"
                    )
        logger.debug("Gate pass workflow table verified")
