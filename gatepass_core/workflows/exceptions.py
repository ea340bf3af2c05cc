# gatepass_core/workflows/exceptions.py

from rest_framework import status
from rest_framework.exceptions import APIException


class InvalidState(APIException):
    """
    The request is no longer waiting on the caller's stage: someone else
    decided first, or a stale client is retrying.
    """

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Gate pass is not pending at this stage."
    default_code = "invalid_state"
