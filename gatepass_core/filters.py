# gatepass_core/filters.py
import django_filters as df

from .models import Complaint, GatePassRequest
from .workflows import normalize_state


class UpperCaseCharFilter(df.CharFilter):
    def filter(self, qs, value):
        return super().filter(qs, normalize_state(value) if value else value)


class GatePassFilter(df.FilterSet):
    status = UpperCaseCharFilter(field_name="status")
    type = UpperCaseCharFilter(field_name="type")
    requester_type = UpperCaseCharFilter(field_name="requester_type")
    department = df.NumberFilter(field_name="department_id")
    student = df.NumberFilter(field_name="requester_id")
    requester = df.NumberFilter(field_name="requester_id")
    start_date = df.IsoDateTimeFilter(field_name="start_date", lookup_expr="gte")
    end_date = df.IsoDateTimeFilter(field_name="end_date", lookup_expr="lte")

    class Meta:
        model = GatePassRequest
        fields = ["status", "type", "requester_type", "department", "requester"]


class RequesterTypeFilter(df.FilterSet):
    """Narrowing applied to the role pending queues."""

    requester_type = UpperCaseCharFilter(field_name="requester_type")

    class Meta:
        model = GatePassRequest
        fields = ["requester_type"]


class ComplaintFilter(df.FilterSet):
    status = UpperCaseCharFilter(field_name="status")
    subject = df.CharFilter(field_name="subject", lookup_expr="icontains")

    class Meta:
        model = Complaint
        fields = ["status", "subject"]
