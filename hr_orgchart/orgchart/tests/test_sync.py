from datetime import date
from datetime import timedelta
from unittest import mock

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import DatabaseError

from hr_orgchart.audit.models import AuditLog
from hr_orgchart.employees.models import Employee
from hr_orgchart.orgchart import services
from hr_orgchart.orgchart.exceptions import SyncPartialFailureError
from hr_orgchart.orgchart.models import OrgChartNode
from hr_orgchart.orgchart.tasks import sync_all_task
from hr_orgchart.orgchart.tasks import sync_employee_task

pytestmark = pytest.mark.django_db

TODAY = date(2024, 6, 30)


def roster_row(emp_id, **fields):
    defaults = {
        "full_name": f"Employee {emp_id}",
        "job_title": "Engineer",
        "dept": "Eng",
        "bu": "R&D",
        "dl_idl_staff": "IDL",
        "location": "HQ",
        "employee_type": "Full-time",
        "joining_date": "2020-01-15",
    }
    defaults.update(fields)
    return Employee.objects.create(emp_id=emp_id, **defaults)


@pytest.fixture
def roster():
    return [
        roster_row("100", full_name="Bao Tran", dept="Board"),
        roster_row("200", line_manager="00100: Bao Tran"),
        roster_row("300", line_manager="100: Bao Tran"),
        roster_row("400", line_manager="200: Employee 200", dept="QA"),
    ]


def test_full_sync_projects_roster(roster):
    result = services.sync_all_employees(today=TODAY)
    assert result == {
        "success": True,
        "message": "Sync completed",
        "employees": 4,
        "departments": 3,
        "total": 7,
        "updated": 7,
        "deleted": 0,
    }
    dev = OrgChartNode.objects.get(id="200")
    assert dev.pid == "100"
    assert dev.stpid == "dept:Eng:100"
    assert dev.tags == ["emp"]
    assert dev.joining_date == "15/01/2020"
    assert dev.image.endswith("/200.jpg")
    assert dev.type == "IDL"
    assert dev.description == "Full-time"

    dept = OrgChartNode.objects.get(id="dept:Eng:100")
    assert (dept.pid, dept.name, dept.tags) == ("100", "Eng", ["group"])
    assert OrgChartNode.objects.filter(id="dept:Board:null").exists()


def test_full_sync_is_idempotent(roster):
    services.sync_all_employees(today=TODAY)
    before = OrgChartNode.objects.count()
    second = services.sync_all_employees(today=TODAY)
    assert second["deleted"] == 0
    assert OrgChartNode.objects.count() == before


def test_full_sync_deletes_nodes_no_longer_in_roster(roster):
    OrgChartNode.objects.create(id="ghost", name="Left long ago")
    services.sync_all_employees(today=TODAY)
    Employee.objects.filter(emp_id="400").delete()

    result = services.sync_all_employees(today=TODAY)
    assert result["deleted"] == 2
    assert not OrgChartNode.objects.filter(id__in=["ghost", "400", "dept:QA:200"])


def test_full_sync_on_empty_roster_clears_chart():
    OrgChartNode.objects.create(id="stale")
    result = services.sync_all_employees(today=TODAY)
    assert result["deleted"] == 1
    assert OrgChartNode.objects.count() == 0


def test_duplicate_emp_ids_keep_last_row():
    old = roster_row("500", full_name="Old Name")
    new = roster_row("500", full_name="New Name")
    Employee.objects.filter(pk=new.pk).update(
        imported_at=old.imported_at + timedelta(seconds=1)
    )
    roster_row("", full_name="No id")
    result = services.sync_all_employees(today=TODAY)
    assert result["employees"] == 3
    assert OrgChartNode.objects.get(id="500").name == "New Name"


def test_single_and_full_sync_pick_the_same_duplicate_row():
    old = roster_row("500", full_name="Old Name")
    new = roster_row("500", full_name="New Name")
    Employee.objects.filter(pk=new.pk).update(
        imported_at=old.imported_at + timedelta(seconds=1)
    )
    old.job_title = "Edited later"
    old.save()

    services.sync_single_employee("500")
    assert OrgChartNode.objects.get(id="500").name == "New Name"
    services.sync_all_employees(today=TODAY)
    assert OrgChartNode.objects.get(id="500").name == "New Name"


def test_probation_tag_window():
    roster_row("1", joining_date=(TODAY - timedelta(days=30)).isoformat())
    roster_row("2", joining_date=(TODAY - timedelta(days=90)).isoformat())
    services.sync_all_employees(today=TODAY)
    assert OrgChartNode.objects.get(id="1").tags == ["emp", "Emp_probation"]
    assert OrgChartNode.objects.get(id="2").tags == ["emp"]


def test_raw_data_fallbacks():
    roster_row(
        "9",
        joining_date="",
        raw_data={"Line Manager": "007: Bond", "Joining\r\n Date": 45000},
    )
    services.sync_all_employees(today=TODAY)
    node = OrgChartNode.objects.get(id="9")
    assert node.pid == "7"
    assert node.joining_date == "15/03/2023"


def test_failure_reports_stage_and_rolls_back(roster):
    OrgChartNode.objects.create(id="ghost")
    with (
        mock.patch.object(services, "_upsert", side_effect=DatabaseError("disk full")),
        pytest.raises(SyncPartialFailureError) as exc,
    ):
        services.sync_all_employees(today=TODAY)
    assert exc.value.stage == "upsert"
    assert exc.value.counts["deleted"] == 1
    assert OrgChartNode.objects.filter(id="ghost").exists()

    with mock.patch.object(services, "_upsert", side_effect=DatabaseError("disk full")):
        result = services.sync_result(services.sync_all_employees)
    assert result["success"] is False
    assert result["stage"] == "upsert"
    assert result["error"] == "disk full"


def test_unparseable_digit_dates_do_not_break_sync():
    roster_row("1", joining_date="20240115")

    result = services.sync_result(services.sync_all_employees)
    assert result["success"] is True
    node = OrgChartNode.objects.get(id="1")
    assert node.joining_date == "20240115"
    assert node.tags == ["emp"]

    assert services.sync_result(services.sync_single_employee, "1")["success"]


def test_projection_errors_become_failed_results(roster):
    boom = OverflowError("date value out of range")
    with mock.patch.object(services, "project_employee", side_effect=boom):
        full = services.sync_result(services.sync_all_employees)
        single = services.sync_result(services.sync_single_employee, "300")

    assert full["success"] is False
    assert full["stage"] == "project"
    assert full["employees"] == 4
    assert full["error"] == "date value out of range"
    assert single == {
        "success": False,
        "error": "date value out of range",
        "stage": "project",
        "updated": 0,
        "deleted": 0,
    }
    assert OrgChartNode.objects.count() == 0


def test_single_sync_upserts_row_and_department(roster):
    result = services.sync_single_employee(" 300 ")
    assert result["message"] == "Synced single employee"
    assert result["updated"] == 2
    assert set(OrgChartNode.objects.values_list("id", flat=True)) == {
        "300",
        "dept:Eng:100",
    }


def test_single_sync_removes_deleted_row(roster):
    services.sync_all_employees(today=TODAY)
    Employee.objects.filter(emp_id="300").delete()
    result = services.sync_single_employee("300")
    assert result["message"] == "Employee removed from Orgchart"
    assert result["deleted"] == 1
    assert not OrgChartNode.objects.filter(id="300").exists()


def test_single_sync_requires_id():
    assert services.sync_single_employee("  ") == {
        "success": False,
        "message": "Missing Emp ID",
    }


def test_canonical_nodes_cache_is_invalidated_by_sync(roster):
    services.sync_all_employees(today=TODAY)
    first = services.canonical_nodes()
    assert {n["id"] for n in first} >= {"100", "dept:Board:null"}
    assert "description" not in first[0]

    Employee.objects.filter(emp_id="400").update(full_name="Renamed")
    assert services.canonical_nodes() == first
    services.sync_single_employee("400")
    renamed = {n["id"]: n for n in services.canonical_nodes()}["400"]
    assert renamed["name"] == "Renamed"


def test_canonical_nodes_skip_blank_departments(roster):
    services.sync_all_employees(today=TODAY)
    OrgChartNode.objects.create(id="floating", dept="  ")
    OrgChartNode.objects.create(id="nowhere", dept=None)
    ids = {n["id"] for n in services.canonical_nodes("all")}
    assert "floating" not in ids
    assert "nowhere" not in ids
    qa = services.canonical_nodes("QA")
    assert {n["id"] for n in qa} == {"400", "dept:QA:200"}


def test_department_helpers(roster):
    services.sync_all_employees(today=TODAY)
    assert services.department_names() == ["Board", "Eng", "QA"]
    nodes = services.duplicate_department_nodes("QA")
    assert {n["id"] for n in nodes} == {"400", "dept:QA:200"}
    assert "description" in nodes[0]

    node = services.upsert_department("Ops", "100")
    assert node["id"] == "dept:Ops:100"
    assert node["description"] == "Department under manager 100"
    assert OrgChartNode.objects.get(id="dept:Ops:100").tags == ["group"]


def test_tasks_wrap_results(roster):
    assert sync_employee_task.delay("100").get()["success"] is True
    result = sync_all_task.delay().get()
    assert result["employees"] == 4


def test_roster_signals_queue_single_syncs(
    settings, django_capture_on_commit_callbacks
):
    settings.ORGCHART_AUTO_SYNC = True
    with mock.patch("hr_orgchart.orgchart.tasks.sync_employee_task") as task:
        with django_capture_on_commit_callbacks(execute=True):
            row = roster_row("42")
        task.delay.assert_called_once_with("42")

        task.reset_mock()
        with django_capture_on_commit_callbacks(execute=True):
            row.emp_id = "43"
            row.save()
        assert sorted(c.args[0] for c in task.delay.call_args_list) == ["42", "43"]

        task.reset_mock()
        with django_capture_on_commit_callbacks(execute=True):
            row.delete()
        task.delay.assert_called_once_with("43")


def test_sync_command(roster, capsys):
    call_command("sync_orgchart")
    assert '"employees": 4' in capsys.readouterr().out
    assert AuditLog.objects.filter(action="orgchart_sync").count() == 1

    call_command("sync_orgchart", emp_id="200")
    assert OrgChartNode.objects.filter(id="200").exists()


def test_sync_command_fails_loudly():
    with pytest.raises(CommandError, match="Missing Emp ID"):
        call_command("sync_orgchart", emp_id=" ")
