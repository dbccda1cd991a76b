from django.conf import settings
from django.urls import include
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from hr_orgchart.employees.api.views import EmployeeViewSet
from hr_orgchart.orgchart.api.views import CustomOrgChartViewSet
from hr_orgchart.users.api.views import UserViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("users", UserViewSet)
router.register("employees", EmployeeViewSet, basename="employees")
# Saved chart profiles: /api/v1/orgcharts/ and /api/v1/orgcharts/<id>/
router.register("orgcharts", CustomOrgChartViewSet, basename="orgcharts")


app_name = "api"
# Prepend includes to ensure they take precedence over router patterns
urlpatterns = [
    path(
        "audit/",
        include(("hr_orgchart.audit.api.urls", "audit"), namespace="audit"),
    ),
    path(
        "orgchart/",
        include(("hr_orgchart.orgchart.api.urls", "orgchart"), namespace="orgchart"),
    ),
    *router.urls,
]
