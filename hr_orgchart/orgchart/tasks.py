from celery import shared_task

from hr_orgchart.orgchart.services import sync_all_employees
from hr_orgchart.orgchart.services import sync_result
from hr_orgchart.orgchart.services import sync_single_employee


@shared_task(name="orgchart.sync_employee")
def sync_employee_task(emp_id: str) -> dict:
    """Re-project one roster row (or drop its node) in the canonical chart."""
    return sync_result(sync_single_employee, emp_id)


@shared_task(name="orgchart.sync_all")
def sync_all_task() -> dict:
    """Full roster reconciliation; scheduled nightly by celery beat."""
    return sync_result(sync_all_employees)
