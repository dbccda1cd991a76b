from __future__ import annotations

from hr_orgchart.audit.models import AuditLog
from hr_orgchart.employees.models import Employee
from tests.permissions.mixins import ROLE_ADMIN
from tests.permissions.mixins import ROLE_EMPLOYEE
from tests.permissions.mixins import ROLE_MANAGER
from tests.permissions.mixins import RoleAPITestCase


class TestRosterPermissions(RoleAPITestCase):
    def test_everyone_signed_in_can_read(self):
        for role in (ROLE_ADMIN, ROLE_MANAGER, ROLE_EMPLOYEE):
            res = self.get("api_v1:employees-list", role=role)
            self.assert_allowed(res)
            emp_ids = {row["emp_id"] for row in self.extract_results(res)}
            assert {"100", "200"} <= emp_ids

    def test_anonymous_is_rejected(self):
        res = self.client.get("/api/v1/employees/")
        assert res.status_code == 401

    def test_employee_cannot_create_or_delete(self):
        res = self.post(
            "api_v1:employees-list",
            role=ROLE_EMPLOYEE,
            payload={"emp_id": "300", "full_name": "Nope"},
        )
        self.assert_denied(res)

        res = self.delete(
            "api_v1:employees-detail",
            role=ROLE_EMPLOYEE,
            reverse_kwargs={"pk": self.roster["dev"].pk},
        )
        self.assert_denied(res)
        assert Employee.objects.filter(pk=self.roster["dev"].pk).exists()

    def test_employee_cannot_patch_other_columns(self):
        res = self.patch(
            "api_v1:employees-detail",
            role=ROLE_EMPLOYEE,
            payload={"line_manager": "999: X", "dept": "Sales"},
            reverse_kwargs={"pk": self.roster["dev"].pk},
        )
        self.assert_denied(res)

    def test_manager_writes_rows_and_is_audited(self):
        res = self.post(
            "api_v1:employees-list",
            role=ROLE_MANAGER,
            payload={"emp_id": "  300 ", "full_name": "Mai Do", "dept": "Sales"},
        )
        self.assert_http_status(res, 201)
        assert res.data["emp_id"] == "300"
        assert res.data["line_manager_status"] == "none"
        assert AuditLog.objects.filter(
            action="roster_row_created", record_id="300"
        ).exists()

    def test_filters_and_search(self):
        self.roster["dev"].dept = "Sales"
        self.roster["dev"].save()

        res = self.get(
            "api_v1:employees-list", role=ROLE_EMPLOYEE, data={"dept": "sales"}
        )
        assert [r["emp_id"] for r in self.extract_results(res)] == ["200"]

        res = self.get(
            "api_v1:employees-list", role=ROLE_EMPLOYEE, data={"search": "Lan"}
        )
        assert [r["emp_id"] for r in self.extract_results(res)] == ["200"]
