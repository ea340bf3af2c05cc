# gatepass_core/views_identity.py
from __future__ import annotations

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .permissions import get_profile, request_role
from .workflows import STAGE_BY_ROLE, requester_type_for_role


class WhoAmIView(APIView):
    """
    Returns the currently authenticated user and their single normalized role.

    Clients build their credential object from this once per session:
      - confirm the bearer token works
      - learn the role (never re-derived per call site)
      - know which pending queue, if any, belongs to them
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = request.user
        profile = get_profile(user)
        role = request_role(request)
        stage = STAGE_BY_ROLE.get(role)
        requester_type = requester_type_for_role(role)

        return Response(
            {
                "id": user.id,
                "username": user.username,
                "name": user.get_full_name() or user.username,
                "email": user.email,
                "role": role,
                "requester_type": requester_type.value if requester_type else None,
                "stage": stage.key if stage else None,
                "department": (
                    {"id": profile.department.id, "code": profile.department.code, "name": profile.department.name}
                    if profile and profile.department_id
                    else None
                ),
                "residence": profile.residence if profile else None,
            }
        )
