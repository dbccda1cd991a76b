"""Views for chart profiles, the canonical chart and the roster sync trigger."""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.db import transaction
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework import viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from hr_orgchart.audit.utils import client_ip
from hr_orgchart.audit.utils import log_action
from hr_orgchart.orgchart import services
from hr_orgchart.orgchart.models import CustomOrgChart
from hr_orgchart.users.api.permissions import IsManagerOrAdmin
from hr_orgchart.users.api.permissions import is_elevated

from .serializers import CustomOrgChartCreateSerializer
from .serializers import CustomOrgChartListSerializer
from .serializers import CustomOrgChartSerializer
from .serializers import CustomOrgChartUpdateSerializer
from .serializers import DepartmentUpsertSerializer
from .serializers import SyncRequestSerializer
from .serializers import SyncResultSerializer

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return timezone.now().isoformat()


def _not_found(profile_id) -> Response:
    return Response(
        {
            "error": "Orgchart not found",
            "orgchart_id": str(profile_id),
            "org_data": {"data": []},
        },
        status=status.HTTP_404_NOT_FOUND,
    )


@extend_schema_view(
    list=extend_schema(
        tags=["Org Chart Profiles"],
        parameters=[OpenApiParameter("username", str, description="Owner")],
    ),
    create=extend_schema(
        tags=["Org Chart Profiles"], request=CustomOrgChartCreateSerializer
    ),
    retrieve=extend_schema(
        tags=["Org Chart Profiles"], responses=CustomOrgChartSerializer
    ),
    update=extend_schema(
        tags=["Org Chart Profiles"], request=CustomOrgChartUpdateSerializer
    ),
    partial_update=extend_schema(
        tags=["Org Chart Profiles"], request=CustomOrgChartUpdateSerializer
    ),
    destroy=extend_schema(tags=["Org Chart Profiles"]),
)
class CustomOrgChartViewSet(viewsets.ViewSet):
    """Saved chart profiles. Owners (and Admin/Manager) may read and write."""

    permission_classes = [IsAuthenticated]

    def _get_profile(self, pk) -> CustomOrgChart | None:
        try:
            profile = CustomOrgChart.objects.select_related("owner").get(pk=pk)
        except (CustomOrgChart.DoesNotExist, DjangoValidationError, ValueError):
            return None
        user = self.request.user
        if profile.owner_id != user.pk and not is_elevated(user):
            msg = "You do not have access to this orgchart."
            raise PermissionDenied(msg)
        return profile

    def _audit(self, action_name: str, profile: CustomOrgChart, **kwargs) -> None:
        log_action(
            action_name,
            actor=self.request.user,
            model_name="orgchart.CustomOrgChart",
            record_id=profile.pk,
            ip_address=client_ip(self.request),
            **kwargs,
        )

    def list(self, request):
        user = request.user
        username = request.query_params.get("username") or user.username
        if username != user.username and not is_elevated(user):
            msg = "You may only list your own orgcharts."
            raise PermissionDenied(msg)
        qs = CustomOrgChart.objects.filter(owner__username=username)
        data = CustomOrgChartListSerializer(qs, many=True).data
        return Response({"orgcharts": data})

    def create(self, request):
        serializer = CustomOrgChartCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        attrs = serializer.validated_data
        description = attrs.get("description", "")
        org_data = attrs.get("org_data") or {"data": []}

        dept = (attrs.get("source_department") or "").strip()
        if dept:
            nodes = services.duplicate_department_nodes(dept)
            if not nodes and not attrs["allow_empty"]:
                return Response(
                    {
                        "error": f"Department {dept} has no chart data",
                        "code": "empty_department",
                        "department": dept,
                    },
                    status=status.HTTP_409_CONFLICT,
                )
            org_data = {"data": nodes}
            description = description or f"Created from department {dept}"

        profile = CustomOrgChart.objects.create(
            owner=request.user,
            orgchart_name=attrs["orgchart_name"],
            description=description,
            org_data=org_data,
        )
        self._audit(
            "orgchart_profile_created",
            profile,
            message=f"name={profile.orgchart_name} nodes={len(profile.nodes)}",
        )
        logger.info(
            "Created orgchart %s for %s (%d nodes)",
            profile.pk,
            request.user.username,
            len(profile.nodes),
        )
        return Response(
            {
                "success": True,
                "orgchart_id": str(profile.pk),
                "message": "Orgchart created successfully",
            },
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request, pk=None):
        profile = self._get_profile(pk)
        if profile is None:
            return _not_found(pk)
        return Response(CustomOrgChartSerializer(profile).data)

    def update(self, request, pk=None):
        profile = self._get_profile(pk)
        if profile is None:
            return _not_found(pk)
        serializer = CustomOrgChartUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        attrs = serializer.validated_data
        before_count = len(profile.nodes)
        with transaction.atomic():
            for field in ("orgchart_name", "description", "org_data"):
                if field in attrs:
                    setattr(profile, field, attrs[field])
            profile.save()
            self._audit(
                "orgchart_profile_saved",
                profile,
                message=f"nodes {before_count} -> {len(profile.nodes)}",
            )
        return Response({"success": True, "message": "Updated successfully"})

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        profile = self._get_profile(pk)
        if profile is None:
            return _not_found(pk)
        with transaction.atomic():
            self._audit(
                "orgchart_profile_deleted",
                profile,
                before={"orgchart_name": profile.orgchart_name},
            )
            profile.delete()
        return Response({"success": True, "message": "Deleted successfully"})


class OrgChartNodesView(APIView):
    """Canonical chart nodes, cached between syncs."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Org Chart"],
        parameters=[OpenApiParameter("dept", str, description="Department or 'all'")],
    )
    def get(self, request):
        dept = request.query_params.get("dept")
        try:
            data = services.canonical_nodes(dept)
        except DatabaseError as e:
            logger.exception("Error loading orgchart")
            return Response(
                {"data": [], "success": False, "error": str(e) or "Failed to load data"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response({"data": data, "success": True, "timestamp": _timestamp()})


class DepartmentsView(APIView):
    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated(), IsManagerOrAdmin()]
        return [IsAuthenticated()]

    @extend_schema(tags=["Org Chart"])
    def get(self, request):
        return Response({"data": services.department_names(), "success": True})

    @extend_schema(tags=["Org Chart"], request=DepartmentUpsertSerializer)
    def post(self, request):
        serializer = DepartmentUpsertSerializer(data=request.data)
        if not serializer.is_valid():
            logger.warning("Missing required fields in department upsert")
            return Response(
                {
                    "success": False,
                    "error": "Missing required fields: name and pid are required",
                    "errors": serializer.errors,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        attrs = serializer.validated_data
        node = services.upsert_department(
            attrs["name"],
            attrs["pid"],
            node_id=attrs.get("id") or None,
            description=attrs.get("description") or None,
        )
        log_action(
            "orgchart_department_upserted",
            actor=request.user,
            model_name="orgchart.OrgChartNode",
            record_id=node["id"],
            after=node,
            ip_address=client_ip(request),
        )
        return Response({"success": True, "data": node, "timestamp": _timestamp()})


class OrgChartSyncView(APIView):
    """Roster reconciliation trigger; failures come back as a result body."""

    permission_classes = [IsAuthenticated, IsManagerOrAdmin]

    def _respond(self, request, emp_id: str = "") -> Response:
        if emp_id:
            result = services.sync_result(services.sync_single_employee, emp_id)
        else:
            result = services.sync_result(services.sync_all_employees)
        log_action(
            "orgchart_sync",
            actor=request.user,
            message=f"emp_id={emp_id or '*'} success={result['success']}",
            model_name="orgchart.OrgChartNode",
            record_id=emp_id,
            after=result,
            ip_address=client_ip(request),
        )
        if result["success"]:
            return Response(result)
        return Response(result, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    @extend_schema(
        tags=["Org Chart"],
        request=SyncRequestSerializer,
        responses=SyncResultSerializer,
    )
    def post(self, request):
        serializer = SyncRequestSerializer(data=request.data or {})
        serializer.is_valid(raise_exception=True)
        return self._respond(request, serializer.validated_data["emp_id"])

    @extend_schema(tags=["Org Chart"], responses=SyncResultSerializer)
    def get(self, request):
        return self._respond(request)
