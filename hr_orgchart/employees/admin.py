from django.contrib import admin

from hr_orgchart.employees import models


@admin.register(models.Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = [
        "emp_id",
        "full_name",
        "job_title",
        "dept",
        "line_manager",
        "line_manager_status",
    ]
    search_fields = ["emp_id", "full_name", "job_title", "line_manager"]
    list_filter = ["line_manager_status", "dept", "bu", "location"]
    readonly_fields = ["change_requested_by", "change_requested_at", "imported_at"]
