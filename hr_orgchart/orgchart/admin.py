from django.contrib import admin

from hr_orgchart.orgchart import models


@admin.register(models.OrgChartNode)
class OrgChartNodeAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "title", "pid", "stpid", "dept", "type"]
    search_fields = ["id", "name", "title", "dept"]
    list_filter = ["type", "dept"]


@admin.register(models.CustomOrgChart)
class CustomOrgChartAdmin(admin.ModelAdmin):
    list_display = ["id", "orgchart_name", "owner", "updated_at"]
    search_fields = ["orgchart_name", "description", "owner__username"]
    list_filter = ["updated_at"]
