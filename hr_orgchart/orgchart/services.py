"""Roster reconciliation: project the HR roster onto the canonical chart nodes.

Two entry points:

- :func:`sync_single_employee` re-projects one roster row (by emp id) and its
  department node, or deletes the node when the row is gone.
- :func:`sync_all_employees` rebuilds the whole projection: every roster row
  plus one synthesized group node per ``(department, manager)`` pair, deletes
  stored nodes that are no longer backed by the roster and upserts the rest.

Both invalidate the cached canonical node list.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from datetime import datetime
from datetime import timedelta
from typing import Any

from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError
from django.db import transaction
from django.db.models.functions import Trim
from django.utils import timezone

from hr_orgchart.employees.models import Employee
from hr_orgchart.orgchart.editor.nodes import NODE_FIELDS
from hr_orgchart.orgchart.editor.nodes import TAG_EMPLOYEE
from hr_orgchart.orgchart.editor.nodes import TAG_GROUP
from hr_orgchart.orgchart.editor.nodes import TAG_PROBATION
from hr_orgchart.orgchart.exceptions import SyncPartialFailureError
from hr_orgchart.orgchart.models import OrgChartNode

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_BASE_URL = "https://raw.githubusercontent.com/Luannt1005/test-images/main/"
DEFAULT_PROBATION_DAYS = 60
DEFAULT_CACHE_TTL = 15 * 60

RAW_LINE_MANAGER = "Line Manager"
RAW_JOINING_DATE = "Joining\r\n Date"

# Excel day zero. Serials up to 60 predate its phantom 29/02/1900.
EXCEL_EPOCH = date(1899, 12, 30)
EXCEL_LEAP_BUG_SERIAL = 60
# 31/12/9999, the last day Excel can represent.
EXCEL_MAX_SERIAL = 2958465
DMY_RE = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Columns served to the canvas; description and orig_pid stay server side.
CANVAS_FIELDS = (
    "id",
    "pid",
    "stpid",
    "name",
    "title",
    "image",
    "tags",
    "dept",
    "bu",
    "type",
    "location",
    "joining_date",
)
UPSERT_FIELDS = [f for f in NODE_FIELDS if f != "id"] + ["updated_at"]
BATCH_SIZE = 500

CACHE_VERSION_KEY = "orgchart:version"

# Rows sharing an emp id: the most recently imported one wins.
ROSTER_ORDER = ("imported_at", "pk")
# Storage failures plus bad roster values met while projecting.
SYNC_ERRORS = (DatabaseError, ArithmeticError, TypeError, ValueError)


# Projection helpers ------------------------------------------------------
def trim_leading_zeros(value: Any) -> str | None:
    """``"000123"`` -> ``"123"``; empty or all-zero ids become None."""
    if value is None or value == "":
        return None
    trimmed = str(value).lstrip("0") or "0"
    return None if trimmed == "0" else trimmed


def parse_manager_id(raw: Any) -> str | None:
    """Manager references look like ``"00123: Jane Doe"``; keep ``"123"``."""
    if not raw:
        return None
    return trim_leading_zeros(str(raw).split(":")[0].strip())


def _key_part(value: str | None) -> str:
    # Stored keys spell a missing manager as "null".
    return "null" if value is None else value


def department_key(dept: str, manager_id: str | None) -> str:
    return f"dept:{dept}:{_key_part(manager_id)}"


def _dmy(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def format_joining_date(value: Any) -> str:
    """Render a roster joining date as ``DD/MM/YYYY``.

    Accepts ``date`` objects, Excel serial numbers (as numbers or digit
    strings), ISO dates and timestamps, and strings already in
    ``DD/MM/YYYY``. Anything else is returned as text.
    """
    if value is None or value == "":
        return ""
    if isinstance(value, datetime):
        return _dmy(value.date())
    if isinstance(value, date):
        return _dmy(value)
    if isinstance(value, (int, float)) or (
        isinstance(value, str) and value.strip().isdigit()
    ):
        try:
            serial = int(float(value))
        except (OverflowError, ValueError):
            return str(value).strip()
        if 0 < serial <= EXCEL_MAX_SERIAL:
            offset = 0 if serial > EXCEL_LEAP_BUG_SERIAL else 1
            return _dmy(EXCEL_EPOCH + timedelta(days=serial + offset))
        return str(value).strip()
    text = str(value).strip()
    if DMY_RE.match(text):
        return text
    if "T" in text or ISO_DATE_RE.match(text):
        try:
            return _dmy(datetime.fromisoformat(text.replace("Z", "+00:00")).date())
        except ValueError:
            return text
    return text


def parse_roster_date(text: str | None) -> date | None:
    if not text or not DMY_RE.match(text):
        return None
    day, month, year = (int(p) for p in text.split("/"))
    try:
        return date(year, month, day)
    except ValueError:
        return None


def is_probation(
    joining_date: str | None,
    *,
    today: date | None = None,
    window_days: int | None = None,
) -> bool:
    """Joined between today and ``window_days`` days ago, inclusive."""
    joined = parse_roster_date(joining_date)
    if joined is None:
        return False
    today = today or timezone.localdate()
    if window_days is None:
        window_days = probation_days()
    return 0 <= (today - joined).days <= window_days


def probation_days() -> int:
    return int(getattr(settings, "ORGCHART_PROBATION_DAYS", DEFAULT_PROBATION_DAYS))


def image_base_url() -> str:
    return getattr(settings, "ORGCHART_IMAGE_BASE_URL", DEFAULT_IMAGE_BASE_URL)


def department_node(dept: str, manager_id: str | None) -> dict[str, Any]:
    return {
        "id": department_key(dept, manager_id),
        "pid": manager_id,
        "stpid": None,
        "name": dept,
        "title": "Department",
        "image": None,
        "tags": [TAG_GROUP],
        "orig_pid": manager_id,
        "dept": dept,
        "bu": None,
        "type": "group",
        "location": None,
        "description": f"Dept under manager {_key_part(manager_id)}",
        "joining_date": None,
    }


def project_employee(
    row: Employee, *, today: date | None = None
) -> tuple[dict[str, Any], dict[str, Any]] | None:
    """Employee node plus its department node, or None without an emp id."""
    emp_id = (row.emp_id or "").strip()
    if not emp_id:
        return None
    raw = row.raw_data if isinstance(row.raw_data, dict) else {}

    manager_id = parse_manager_id(row.line_manager or raw.get(RAW_LINE_MANAGER))
    dept = row.dept or ""
    joining = format_joining_date(row.joining_date or raw.get(RAW_JOINING_DATE))
    tags = [TAG_EMPLOYEE]
    if joining and is_probation(joining, today=today):
        tags.append(TAG_PROBATION)

    node = {
        "id": emp_id,
        "pid": manager_id,
        "stpid": department_key(dept, manager_id),
        "name": row.full_name or "",
        "title": row.job_title or "",
        "image": f"{image_base_url()}{emp_id}.jpg",
        "tags": tags,
        "orig_pid": manager_id,
        "dept": dept or None,
        "bu": row.bu or None,
        "type": row.dl_idl_staff or None,
        "location": row.location or None,
        "description": row.employee_type or "",
        "joining_date": joining,
    }
    return node, department_node(dept, manager_id)


def _upsert(nodes: list[dict[str, Any]]) -> int:
    OrgChartNode.objects.bulk_create(
        [OrgChartNode(**node) for node in nodes],
        update_conflicts=True,
        unique_fields=["id"],
        update_fields=UPSERT_FIELDS,
        batch_size=BATCH_SIZE,
    )
    return len(nodes)


# Sync entry points ---------------------------------------------------------
def sync_single_employee(emp_id: str) -> dict[str, Any]:
    emp_id = str(emp_id or "").strip()
    if not emp_id:
        return {"success": False, "message": "Missing Emp ID"}

    counts = {"updated": 0, "deleted": 0}
    stage = "fetch"
    try:
        row = Employee.objects.filter(emp_id=emp_id).order_by(*ROSTER_ORDER).last()
        if row is None:
            stage = "delete"
            counts["deleted"], _ = OrgChartNode.objects.filter(id=emp_id).delete()
        else:
            stage = "project"
            node, dept_node = project_employee(row)
            stage = "upsert"
            with transaction.atomic():
                counts["updated"] = _upsert([node, dept_node])
    except SYNC_ERRORS as e:
        logger.exception("Sync of roster row %s failed during %s", emp_id, stage)
        raise SyncPartialFailureError(stage, e, counts) from e

    invalidate_canonical_cache()
    if row is None:
        logger.info(
            "Roster row %s gone; removed %d chart node(s)", emp_id, counts["deleted"]
        )
        return {
            "success": True,
            "message": "Employee removed from Orgchart",
            **counts,
        }
    logger.info("Synced roster row %s into the chart", emp_id)
    return {
        "success": True,
        "message": "Synced single employee",
        **counts,
    }


def sync_all_employees(*, today: date | None = None) -> dict[str, Any]:
    """Rebuild the canonical projection in one transaction.

    Raises :class:`SyncPartialFailureError` with the stage reached and the
    counts so far; the transaction is rolled back in that case.
    """
    counts = {"employees": 0, "departments": 0, "total": 0, "updated": 0, "deleted": 0}
    stage = "fetch"
    try:
        with transaction.atomic():
            rows = list(Employee.objects.order_by(*ROSTER_ORDER))
            counts["employees"] = len(rows)

            stage = "project"
            employees: dict[str, dict[str, Any]] = {}
            departments: dict[str, dict[str, Any]] = {}
            for row in rows:
                projected = project_employee(row, today=today)
                if projected is None:
                    continue
                node, dept_node = projected
                employees[node["id"]] = node
                departments[dept_node["id"]] = dept_node
            output = list(employees.values()) + list(departments.values())
            counts["departments"] = len(departments)
            counts["total"] = len(output)

            stage = "diff"
            target_ids = {node["id"] for node in output}
            stale = sorted(
                set(OrgChartNode.objects.values_list("id", flat=True)) - target_ids
            )

            stage = "delete"
            for start in range(0, len(stale), BATCH_SIZE):
                OrgChartNode.objects.filter(
                    id__in=stale[start : start + BATCH_SIZE]
                ).delete()
            counts["deleted"] = len(stale)

            stage = "upsert"
            counts["updated"] = _upsert(output)
    except SYNC_ERRORS as e:
        logger.exception("Roster sync failed during %s", stage)
        raise SyncPartialFailureError(stage, e, counts) from e

    invalidate_canonical_cache()
    logger.info(
        "Roster sync: %(employees)d rows, %(departments)d departments, "
        "%(updated)d upserted, %(deleted)d deleted",
        counts,
    )
    return {"success": True, "message": "Sync completed", **counts}


def sync_result(func, *args, **kwargs) -> dict[str, Any]:
    """Run a sync and always return a result payload instead of raising."""
    try:
        return func(*args, **kwargs)
    except SyncPartialFailureError as e:
        return {
            "success": False,
            "error": str(e.error) or "Sync failed",
            "stage": e.stage,
            **e.counts,
        }


# Canonical node reads ------------------------------------------------------
def cache_ttl() -> int:
    return int(getattr(settings, "ORGCHART_CACHE_TTL", DEFAULT_CACHE_TTL))


def _cache_version() -> int:
    version = cache.get(CACHE_VERSION_KEY)
    if version is None:
        cache.add(CACHE_VERSION_KEY, 1, None)
        version = cache.get(CACHE_VERSION_KEY, 1)
    return int(version)


def invalidate_canonical_cache() -> None:
    try:
        cache.incr(CACHE_VERSION_KEY)
    except ValueError:
        cache.set(CACHE_VERSION_KEY, 2, None)


def _dept_filter(dept: str | None) -> str | None:
    if not dept or dept == "all":
        return None
    return dept


def canonical_nodes(dept: str | None = None) -> list[dict[str, Any]]:
    """Canonical nodes for the canvas, optionally limited to one department.

    Without a department, nodes that carry none are left out.
    """
    dept = _dept_filter(dept)
    key = f"orgchart:v{_cache_version()}:{dept or 'all'}"
    cached = cache.get(key)
    if cached is not None:
        return cached

    qs = OrgChartNode.objects.all()
    if dept:
        qs = qs.filter(dept=dept)
    else:
        qs = (
            qs.exclude(dept__isnull=True)
            .annotate(dept_trimmed=Trim("dept"))
            .exclude(dept_trimmed="")
        )
    data = list(qs.values(*CANVAS_FIELDS))
    cache.set(key, data, cache_ttl())
    logger.info("Loaded %d orgchart nodes (dept: %s)", len(data), dept or "all")
    return data


def department_names() -> list[str]:
    names = (
        OrgChartNode.objects.exclude(dept__isnull=True)
        .exclude(dept="")
        .values_list("dept", flat=True)
        .distinct()
    )
    return sorted({n.strip() for n in names if n.strip()})


def duplicate_department_nodes(dept: str) -> list[dict[str, Any]]:
    """Full node documents of one department, for seeding a chart profile."""
    return [
        node.to_node_dict()
        for node in OrgChartNode.objects.filter(dept=dept).order_by("created_at", "id")
    ]


def upsert_department(
    name: str,
    pid: str,
    *,
    node_id: str | None = None,
    description: str | None = None,
) -> dict[str, Any]:
    node = department_node(name, pid)
    node["id"] = node_id or department_key(name, pid)
    node["description"] = description or f"Department under manager {pid}"
    with transaction.atomic():
        _upsert([node])
    invalidate_canonical_cache()
    logger.info("Upserted department node %s", node["id"])
    return node
