import json

from django.core.management.base import BaseCommand
from django.core.management.base import CommandError
from django.utils.translation import gettext as _

from hr_orgchart.audit.utils import log_action
from hr_orgchart.orgchart.services import sync_all_employees
from hr_orgchart.orgchart.services import sync_result
from hr_orgchart.orgchart.services import sync_single_employee
from hr_orgchart.orgchart.tasks import sync_all_task
from hr_orgchart.orgchart.tasks import sync_employee_task


class Command(BaseCommand):
    help = _("Project the employee roster onto the canonical org chart nodes")

    def add_arguments(self, parser):
        parser.add_argument(
            "--emp-id",
            dest="emp_id",
            help="Only re-sync this employee id (removes its node if gone).",
        )
        parser.add_argument(
            "--async",
            dest="run_async",
            action="store_true",
            help="Queue the sync on celery instead of running it here.",
        )

    def handle(self, *args, **options):
        emp_id = options.get("emp_id")
        if options.get("run_async"):
            task = sync_employee_task.delay(emp_id) if emp_id else sync_all_task.delay()
            self.stdout.write(self.style.SUCCESS(f"Queued sync task {task.id}"))
            return

        if emp_id:
            result = sync_result(sync_single_employee, emp_id)
        else:
            result = sync_result(sync_all_employees)
        log_action(
            "orgchart_sync",
            message=f"command emp_id={emp_id or '*'} success={result['success']}",
            model_name="orgchart.OrgChartNode",
            record_id=emp_id,
            after=result,
        )
        if not result.get("success"):
            raise CommandError(result.get("error") or result.get("message"))
        self.stdout.write(self.style.SUCCESS(json.dumps(result, sort_keys=True)))
