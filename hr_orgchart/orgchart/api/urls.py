from django.urls import path

from hr_orgchart.orgchart.api.views import DepartmentsView
from hr_orgchart.orgchart.api.views import OrgChartNodesView
from hr_orgchart.orgchart.api.views import OrgChartSyncView

app_name = "orgchart"

urlpatterns = [
    path("nodes/", OrgChartNodesView.as_view(), name="nodes"),
    path("departments/", DepartmentsView.as_view(), name="departments"),
    path("sync/", OrgChartSyncView.as_view(), name="sync"),
]
