import uuid

from django.conf import settings
from django.db import models

from hr_orgchart.orgchart.editor.nodes import NODE_FIELDS


def empty_org_data():
    return {"data": []}


class OrgChartNode(models.Model):
    """Canonical chart projection of the roster, rebuilt by the sync."""

    id = models.CharField(max_length=255, primary_key=True)
    pid = models.CharField(max_length=255, null=True, blank=True)
    stpid = models.CharField(max_length=255, null=True, blank=True)
    name = models.CharField(max_length=255, null=True, blank=True)
    title = models.CharField(max_length=255, null=True, blank=True)
    image = models.CharField(max_length=500, null=True, blank=True)
    tags = models.JSONField(default=list, blank=True)
    orig_pid = models.CharField(max_length=255, null=True, blank=True)
    dept = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    bu = models.CharField(max_length=255, null=True, blank=True)
    type = models.CharField(max_length=50, null=True, blank=True)
    location = models.CharField(max_length=255, null=True, blank=True)
    description = models.TextField(null=True, blank=True)
    joining_date = models.CharField(max_length=20, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):  # pragma: no cover - trivial
        return f"OrgChartNode({self.id})"

    def to_node_dict(self) -> dict:
        return {name: getattr(self, name) for name in NODE_FIELDS}


class CustomOrgChart(models.Model):
    """A user's saved chart profile; independent of the canonical nodes."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="orgcharts",
    )
    orgchart_name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    org_data = models.JSONField(default=empty_org_data)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]

    def __str__(self):  # pragma: no cover - trivial
        return f"{self.orgchart_name} ({self.owner_id})"

    @property
    def nodes(self) -> list:
        return list((self.org_data or {}).get("data") or [])
