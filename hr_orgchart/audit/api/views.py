from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from hr_orgchart.audit.api.serializers import AuditLogSerializer
from hr_orgchart.audit.models import AuditLog
from hr_orgchart.users.api.permissions import IsManagerOrAdmin

DEFAULT_LIMIT = 5
MAX_LIMIT = 50

# query param -> AuditLog field
EXACT_FILTERS = {
    "action": "action",
    "model": "model_name",
    "record_id": "record_id",
}


class RecentAuditView(APIView):
    """Latest chart, roster and sync changes, newest first."""

    permission_classes = [IsAuthenticated, IsManagerOrAdmin]

    @extend_schema(
        tags=["Audit"],
        parameters=[
            OpenApiParameter("limit", int, description=f"1..{MAX_LIMIT}"),
            OpenApiParameter("action", str),
            OpenApiParameter("model", str, description="e.g. orgchart.CustomOrgChart"),
            OpenApiParameter("record_id", str),
        ],
        responses=AuditLogSerializer(many=True),
    )
    def get(self, request):
        try:
            limit = int(request.query_params.get("limit", DEFAULT_LIMIT))
        except (TypeError, ValueError):
            limit = DEFAULT_LIMIT
        limit = max(1, min(limit, MAX_LIMIT))

        qs = AuditLog.objects.select_related("actor")
        for param, field in EXACT_FILTERS.items():
            value = request.query_params.get(param)
            if value:
                qs = qs.filter(**{field: value})
        data = AuditLogSerializer(list(qs[:limit]), many=True).data
        return Response({"results": data, "limit": limit})
