"""Views for the roster API."""

import logging

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.db.models import Value
from django.db.models.functions import Coalesce
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from hr_orgchart.audit.utils import client_ip
from hr_orgchart.audit.utils import log_action
from hr_orgchart.employees.models import Employee
from hr_orgchart.users.api.permissions import IsManagerOrAdmin

from .filters import EmployeeFilter
from .permissions import IsElevatedOrLineManagerRequest
from .serializers import BulkDecisionSerializer
from .serializers import EmployeeSerializer

logger = logging.getLogger(__name__)

DECISION_ACTIONS = {
    "approve_line_manager",
    "reject_line_manager",
    "approve_all",
    "reject_all",
    "pending",
}


def _enqueue_full_sync() -> None:
    from hr_orgchart.orgchart.tasks import sync_all_task  # noqa: PLC0415

    transaction.on_commit(sync_all_task.delay)


@extend_schema_view(
    list=extend_schema(tags=["Employees"]),
    retrieve=extend_schema(tags=["Employees"]),
    create=extend_schema(tags=["Employees"]),
    update=extend_schema(tags=["Employees"]),
    partial_update=extend_schema(tags=["Employees"]),
    destroy=extend_schema(tags=["Employees"]),
)
class EmployeeViewSet(viewsets.ModelViewSet):
    queryset = Employee.objects.all().select_related("change_requested_by")
    serializer_class = EmployeeSerializer
    permission_classes = [IsAuthenticated, IsElevatedOrLineManagerRequest]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    search_fields = ["emp_id", "full_name", "job_title", "line_manager"]
    ordering_fields = ["emp_id", "full_name", "dept", "updated_at"]
    filterset_class = EmployeeFilter

    def get_permissions(self):
        if getattr(self, "action", None) in DECISION_ACTIONS:
            return [IsAuthenticated(), IsManagerOrAdmin()]
        return [perm() for perm in self.permission_classes]

    def _audit(self, action_name: str, instance: Employee, **kwargs) -> None:
        log_action(
            action_name,
            actor=self.request.user,
            model_name="employees.Employee",
            record_id=instance.emp_id or instance.pk,
            ip_address=client_ip(self.request),
            **kwargs,
        )

    def perform_create(self, serializer):
        instance = serializer.save()
        self._audit("roster_row_created", instance, after=serializer.data)

    def perform_update(self, serializer):
        before = EmployeeSerializer(serializer.instance).data
        instance = serializer.save()
        if instance.line_manager_status == Employee.LineManagerStatus.PENDING and (
            before["line_manager_status"] != instance.line_manager_status
            or before["pending_line_manager"] != instance.pending_line_manager
        ):
            self._audit(
                "line_manager_change_requested",
                instance,
                message=f"{instance.line_manager} -> {instance.pending_line_manager}",
            )
        self._audit(
            "roster_row_updated", instance, before=before, after=serializer.data
        )

    def perform_destroy(self, instance):
        self._audit(
            "roster_row_deleted", instance, before=EmployeeSerializer(instance).data
        )
        instance.delete()

    # Approval workflow -----------------------------------------------------
    @extend_schema(tags=["Employees"], responses=EmployeeSerializer(many=True))
    @action(detail=False, methods=["get"])
    def pending(self, request):
        qs = self.filter_queryset(self.get_queryset()).filter(
            line_manager_status=Employee.LineManagerStatus.PENDING
        )
        data = EmployeeSerializer(qs, many=True).data
        return Response({"count": len(data), "results": data})

    def _decide(self, request, *, approve: bool):
        instance = self.get_object()
        try:
            if approve:
                instance.approve_line_manager()
            else:
                instance.reject_line_manager()
        except ValueError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        instance.save()
        self._audit(
            "line_manager_approved" if approve else "line_manager_rejected",
            instance,
            message=f"line_manager={instance.line_manager}",
        )
        return Response(EmployeeSerializer(instance).data)

    @extend_schema(tags=["Employees"], request=None, responses=EmployeeSerializer)
    @action(detail=True, methods=["post"], url_path="approve-line-manager")
    def approve_line_manager(self, request, pk=None):
        return self._decide(request, approve=True)

    @extend_schema(tags=["Employees"], request=None, responses=EmployeeSerializer)
    @action(detail=True, methods=["post"], url_path="reject-line-manager")
    def reject_line_manager(self, request, pk=None):
        return self._decide(request, approve=False)

    @extend_schema(tags=["Employees"], request=None, responses=BulkDecisionSerializer)
    @action(detail=False, methods=["post"], url_path="approve-all")
    def approve_all(self, request):
        with transaction.atomic():
            pending = Employee.objects.filter(
                line_manager_status=Employee.LineManagerStatus.PENDING
            )
            count = pending.update(
                line_manager=Coalesce(F("pending_line_manager"), Value("")),
                line_manager_status=Employee.LineManagerStatus.APPROVED,
                pending_line_manager=None,
                updated_at=timezone.now(),
            )
            if not count:
                return Response(
                    {
                        "success": True,
                        "count": 0,
                        "message": "No pending requests to approve",
                    }
                )
            log_action(
                "line_manager_approved_all",
                actor=request.user,
                message=f"count={count}",
                model_name="employees.Employee",
                ip_address=client_ip(request),
            )
            if getattr(settings, "ORGCHART_SYNC_ON_APPROVAL", True):
                _enqueue_full_sync()
        logger.info("Approved %d pending line manager requests", count)
        return Response(
            {
                "success": True,
                "count": count,
                "message": f"Approved {count} pending requests",
            }
        )

    @extend_schema(tags=["Employees"], request=None, responses=BulkDecisionSerializer)
    @action(detail=False, methods=["post"], url_path="reject-all")
    def reject_all(self, request):
        with transaction.atomic():
            count = Employee.objects.filter(
                line_manager_status=Employee.LineManagerStatus.PENDING
            ).update(
                line_manager_status=Employee.LineManagerStatus.REJECTED,
                pending_line_manager=None,
                updated_at=timezone.now(),
            )
            if count:
                log_action(
                    "line_manager_rejected_all",
                    actor=request.user,
                    message=f"count={count}",
                    model_name="employees.Employee",
                    ip_address=client_ip(request),
                )
        if not count:
            return Response(
                {"success": True, "count": 0, "message": "No pending requests to reject"}
            )
        logger.info("Rejected %d pending line manager requests", count)
        return Response(
            {
                "success": True,
                "count": count,
                "message": f"Rejected {count} pending requests",
            }
        )
