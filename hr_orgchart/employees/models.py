import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Employee(models.Model):
    """One row of the official HR roster.

    Dates are kept as imported (Excel serials, ISO strings or DD/MM/YYYY);
    the reconciliation normalises them when projecting chart nodes.
    """

    class LineManagerStatus(models.TextChoices):
        NONE = "none", _("None")
        PENDING = "pending", _("Pending")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    emp_id = models.CharField(max_length=50, blank=True, db_index=True)
    full_name = models.CharField(max_length=255, blank=True)
    job_title = models.CharField(max_length=255, blank=True)
    dept = models.CharField(max_length=255, blank=True, db_index=True)
    bu = models.CharField(max_length=255, blank=True)
    dl_idl_staff = models.CharField(max_length=50, blank=True)
    location = models.CharField(max_length=255, blank=True)
    employee_type = models.CharField(max_length=100, blank=True)
    # "<manager emp id>: <manager name>", as exported by HR.
    line_manager = models.CharField(max_length=255, blank=True)
    joining_date = models.CharField(max_length=50, blank=True)
    leaving_date = models.CharField(max_length=50, blank=True)
    raw_data = models.JSONField(null=True, blank=True)

    line_manager_status = models.CharField(
        max_length=20,
        choices=LineManagerStatus.choices,
        default=LineManagerStatus.NONE,
        db_index=True,
    )
    pending_line_manager = models.CharField(max_length=255, null=True, blank=True)
    change_requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="requested_line_manager_changes",
    )
    change_requested_at = models.DateTimeField(null=True, blank=True)

    imported_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["emp_id"]

    def __str__(self):  # pragma: no cover - trivial
        return f"Employee({self.emp_id or self.pk})"

    def request_line_manager_change(self, value: str, *, requested_by=None) -> None:
        self.pending_line_manager = value
        self.line_manager_status = self.LineManagerStatus.PENDING
        self.change_requested_by = requested_by
        self.change_requested_at = timezone.now()

    def approve_line_manager(self) -> None:
        if self.line_manager_status != self.LineManagerStatus.PENDING:
            msg = "No pending line manager change"
            raise ValueError(msg)
        self.line_manager = self.pending_line_manager or ""
        self.line_manager_status = self.LineManagerStatus.APPROVED
        self.pending_line_manager = None

    def reject_line_manager(self) -> None:
        if self.line_manager_status != self.LineManagerStatus.PENDING:
            msg = "No pending line manager change"
            raise ValueError(msg)
        self.line_manager_status = self.LineManagerStatus.REJECTED
        self.pending_line_manager = None
