from __future__ import annotations

from unittest import mock

from django.test import override_settings

from hr_orgchart.audit.models import AuditLog
from hr_orgchart.employees.models import Employee
from tests.permissions.mixins import ROLE_EMPLOYEE
from tests.permissions.mixins import ROLE_MANAGER
from tests.permissions.mixins import RoleAPITestCase


class TestLineManagerApproval(RoleAPITestCase):
    def _request_change(self, row, value="300: New Boss"):
        return self.patch(
            "api_v1:employees-detail",
            role=ROLE_EMPLOYEE,
            payload={"line_manager": value},
            reverse_kwargs={"pk": row.pk},
        )

    def test_employee_patch_files_pending_request(self):
        res = self._request_change(self.roster["dev"])
        self.assert_http_status(res, 200)

        row = Employee.objects.get(pk=self.roster["dev"].pk)
        assert row.line_manager == "100: Bao Tran"
        assert row.pending_line_manager == "300: New Boss"
        assert row.line_manager_status == Employee.LineManagerStatus.PENDING
        assert row.change_requested_by == self.roles[ROLE_EMPLOYEE]
        assert AuditLog.objects.filter(
            action="line_manager_change_requested", record_id="200"
        ).exists()

    def test_manager_patch_applies_directly(self):
        res = self.patch(
            "api_v1:employees-detail",
            role=ROLE_MANAGER,
            payload={"line_manager": "300: New Boss"},
            reverse_kwargs={"pk": self.roster["dev"].pk},
        )
        self.assert_http_status(res, 200)
        row = Employee.objects.get(pk=self.roster["dev"].pk)
        assert row.line_manager == "300: New Boss"
        assert row.line_manager_status == Employee.LineManagerStatus.NONE

    def test_pending_listing_requires_elevated_role(self):
        self._request_change(self.roster["dev"])

        self.assert_denied(self.get("api_v1:employees-pending", role=ROLE_EMPLOYEE))

        res = self.get("api_v1:employees-pending", role=ROLE_MANAGER)
        self.assert_http_status(res, 200)
        assert res.data["count"] == 1
        assert res.data["results"][0]["emp_id"] == "200"

    def test_approve_single(self):
        self._request_change(self.roster["dev"])
        res = self.post(
            "api_v1:employees-approve-line-manager",
            role=ROLE_MANAGER,
            reverse_kwargs={"pk": self.roster["dev"].pk},
        )
        self.assert_http_status(res, 200)
        assert res.data["line_manager"] == "300: New Boss"
        assert res.data["line_manager_status"] == "approved"
        assert res.data["pending_line_manager"] is None

    def test_reject_single(self):
        self._request_change(self.roster["dev"])
        res = self.post(
            "api_v1:employees-reject-line-manager",
            role=ROLE_MANAGER,
            reverse_kwargs={"pk": self.roster["dev"].pk},
        )
        self.assert_http_status(res, 200)
        row = Employee.objects.get(pk=self.roster["dev"].pk)
        assert row.line_manager == "100: Bao Tran"
        assert row.line_manager_status == Employee.LineManagerStatus.REJECTED

    def test_decision_without_pending_request_is_400(self):
        res = self.post(
            "api_v1:employees-approve-line-manager",
            role=ROLE_MANAGER,
            reverse_kwargs={"pk": self.roster["boss"].pk},
        )
        self.assert_http_status(res, 400)
        assert res.data["error"] == "No pending line manager change"

    def test_approve_all(self):
        self._request_change(self.roster["dev"])
        self._request_change(self.roster["boss"], value="900: Hoa Le")

        res = self.post("api_v1:employees-approve-all", role=ROLE_MANAGER)
        self.assert_http_status(res, 200)
        assert res.data == {
            "success": True,
            "count": 2,
            "message": "Approved 2 pending requests",
        }
        assert Employee.objects.get(pk=self.roster["dev"].pk).line_manager == (
            "300: New Boss"
        )
        boss = Employee.objects.get(pk=self.roster["boss"].pk)
        assert boss.line_manager == "900: Hoa Le"

    def test_approve_all_with_nothing_pending(self):
        res = self.post("api_v1:employees-approve-all", role=ROLE_MANAGER)
        assert res.data == {
            "success": True,
            "count": 0,
            "message": "No pending requests to approve",
        }

    def test_reject_all(self):
        self._request_change(self.roster["dev"])
        res = self.post("api_v1:employees-reject-all", role=ROLE_MANAGER)
        assert res.data["count"] == 1
        assert res.data["message"] == "Rejected 1 pending requests"
        assert not Employee.objects.filter(
            line_manager_status=Employee.LineManagerStatus.PENDING
        ).exists()

        res = self.post("api_v1:employees-reject-all", role=ROLE_MANAGER)
        assert res.data["message"] == "No pending requests to reject"

    def test_employee_cannot_decide(self):
        self._request_change(self.roster["dev"])
        self.assert_denied(self.post("api_v1:employees-approve-all", role=ROLE_EMPLOYEE))
        self.assert_denied(
            self.post(
                "api_v1:employees-approve-line-manager",
                role=ROLE_EMPLOYEE,
                reverse_kwargs={"pk": self.roster["dev"].pk},
            )
        )

    @override_settings(ORGCHART_SYNC_ON_APPROVAL=True)
    def test_approve_all_queues_full_sync_after_commit(self):
        self._request_change(self.roster["dev"])
        with (
            mock.patch("hr_orgchart.orgchart.tasks.sync_all_task") as task,
            self.captureOnCommitCallbacks(execute=True),
        ):
            self.post("api_v1:employees-approve-all", role=ROLE_MANAGER)
        task.delay.assert_called_once_with()
