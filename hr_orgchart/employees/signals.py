import logging

from django.conf import settings
from django.db import transaction
from django.db.models.signals import post_delete
from django.db.models.signals import post_save
from django.db.models.signals import pre_save
from django.dispatch import receiver

from .models import Employee

logger = logging.getLogger(__name__)


def _enqueue_sync(emp_ids) -> None:
    from hr_orgchart.orgchart.tasks import sync_employee_task  # noqa: PLC0415

    for emp_id in {e for e in emp_ids if e}:
        transaction.on_commit(lambda e=emp_id: sync_employee_task.delay(e))


@receiver(pre_save, sender=Employee)
def store_old_emp_id(sender, instance, **kwargs):
    instance._old_emp_id = (  # noqa: SLF001
        Employee.objects.filter(pk=instance.pk).values_list("emp_id", flat=True).first()
    )


@receiver(post_save, sender=Employee)
def sync_saved_roster_row(sender, instance, created, **kwargs):
    if not getattr(settings, "ORGCHART_AUTO_SYNC", True):
        return
    old_emp_id = getattr(instance, "_old_emp_id", None)
    # A changed emp id leaves a node behind under the old id.
    _enqueue_sync([instance.emp_id.strip(), (old_emp_id or "").strip()])


@receiver(post_delete, sender=Employee)
def sync_deleted_roster_row(sender, instance, **kwargs):
    if not getattr(settings, "ORGCHART_AUTO_SYNC", True):
        return
    logger.info("Roster row %s deleted; removing its chart node", instance.emp_id)
    _enqueue_sync([instance.emp_id.strip()])
