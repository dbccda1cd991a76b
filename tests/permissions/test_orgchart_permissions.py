from __future__ import annotations

from hr_orgchart.audit.models import AuditLog
from hr_orgchart.orgchart.models import CustomOrgChart
from hr_orgchart.orgchart.models import OrgChartNode
from tests.permissions.mixins import ROLE_ADMIN
from tests.permissions.mixins import ROLE_EMPLOYEE
from tests.permissions.mixins import ROLE_MANAGER
from tests.permissions.mixins import RoleAPITestCase


class TestOrgChartPermissions(RoleAPITestCase):
    def test_everyone_reads_canonical_chart(self):
        for role in (ROLE_ADMIN, ROLE_MANAGER, ROLE_EMPLOYEE):
            self.assert_allowed(self.get("api_v1:orgchart:nodes", role=role))
            self.assert_allowed(self.get("api_v1:orgchart:departments", role=role))

    def test_sync_requires_elevated_role(self):
        self.assert_denied(self.post("api_v1:orgchart:sync", role=ROLE_EMPLOYEE))
        self.assert_denied(self.get("api_v1:orgchart:sync", role=ROLE_EMPLOYEE))

        res = self.post("api_v1:orgchart:sync", role=ROLE_MANAGER)
        self.assert_http_status(res, 200)
        assert res.data["employees"] == 2
        assert OrgChartNode.objects.filter(id="200").exists()
        assert AuditLog.objects.filter(action="orgchart_sync").exists()

    def test_department_upsert_requires_elevated_role(self):
        payload = {"name": "Ops", "pid": "100"}
        self.assert_denied(
            self.post(
                "api_v1:orgchart:departments", role=ROLE_EMPLOYEE, payload=payload
            )
        )
        res = self.post("api_v1:orgchart:departments", role=ROLE_ADMIN, payload=payload)
        self.assert_http_status(res, 200)
        assert res.data["data"]["id"] == "dept:Ops:100"

    def test_profiles_are_private_to_owner(self):
        mine = CustomOrgChart.objects.create(
            owner=self.roles[ROLE_EMPLOYEE], orgchart_name="Mine"
        )
        theirs = CustomOrgChart.objects.create(
            owner=self.others["employee"], orgchart_name="Theirs"
        )

        self.assert_allowed(
            self.get(
                "api_v1:orgcharts-detail",
                role=ROLE_EMPLOYEE,
                reverse_kwargs={"pk": mine.pk},
            )
        )
        self.assert_denied(
            self.get(
                "api_v1:orgcharts-detail",
                role=ROLE_EMPLOYEE,
                reverse_kwargs={"pk": theirs.pk},
            )
        )
        self.assert_denied(
            self.delete(
                "api_v1:orgcharts-detail",
                role=ROLE_EMPLOYEE,
                reverse_kwargs={"pk": theirs.pk},
            )
        )
        assert CustomOrgChart.objects.filter(pk=theirs.pk).exists()

        # Admin/Manager may look at anyone's charts.
        self.assert_allowed(
            self.get(
                "api_v1:orgcharts-detail",
                role=ROLE_MANAGER,
                reverse_kwargs={"pk": theirs.pk},
            )
        )

    def test_listing_other_owners(self):
        CustomOrgChart.objects.create(
            owner=self.others["employee"], orgchart_name="Theirs"
        )
        self.assert_denied(
            self.get(
                "api_v1:orgcharts-list",
                role=ROLE_EMPLOYEE,
                data={"username": "other"},
            )
        )
        res = self.get(
            "api_v1:orgcharts-list", role=ROLE_ADMIN, data={"username": "other"}
        )
        self.assert_http_status(res, 200)
        assert [p["orgchart_name"] for p in res.data["orgcharts"]] == ["Theirs"]
