from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    """One chart, roster or sync change and who made it.

    ``actor`` is empty for changes made by celery or management commands.
    """

    action = models.CharField(max_length=100, db_index=True)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_entries",
    )
    message = models.TextField(blank=True)
    # "<app>.<Model>" of the changed record.
    model_name = models.CharField(max_length=150, blank=True)
    # Node ids, roster emp ids and profile UUIDs are all strings.
    record_id = models.CharField(max_length=255, blank=True)
    before = models.JSONField(null=True, blank=True)
    after = models.JSONField(null=True, blank=True)
    ip_address = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["model_name", "record_id"], name="audit_target_idx")
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        target = f"{self.model_name}:{self.record_id}" if self.model_name else "-"
        return f"{self.action} on {target}"
