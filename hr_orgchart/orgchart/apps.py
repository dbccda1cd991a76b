from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class OrgChartConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hr_orgchart.orgchart"
    verbose_name = _("Org chart")
