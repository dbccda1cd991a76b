import importlib

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class EmployeesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hr_orgchart.employees"
    verbose_name = _("Employee roster")

    def ready(self) -> None:
        importlib.import_module("hr_orgchart.employees.signals")
        return super().ready()
