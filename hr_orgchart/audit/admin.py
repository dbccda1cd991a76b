from django.contrib import admin

from hr_orgchart.audit.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ["created_at", "action", "actor", "model_name", "record_id"]
    list_filter = ["action", "model_name"]
    search_fields = ["record_id", "message"]
    date_hierarchy = "created_at"
    readonly_fields = [f.name for f in AuditLog._meta.fields]
