from __future__ import annotations

from rest_framework import serializers

from hr_orgchart.orgchart.editor.nodes import Node
from hr_orgchart.orgchart.models import CustomOrgChart


def normalize_org_data(value) -> dict:
    """Validate a ``{"data": [node, ...]}`` document and canonicalise its nodes."""
    if not isinstance(value, dict):
        msg = "org_data must be an object with a 'data' list."
        raise serializers.ValidationError(msg)
    nodes = value.get("data", [])
    if not isinstance(nodes, list):
        msg = "org_data.data must be a list of nodes."
        raise serializers.ValidationError(msg)
    out, seen = [], set()
    for index, raw in enumerate(nodes):
        if not isinstance(raw, dict):
            msg = f"Node #{index} is not an object."
            raise serializers.ValidationError(msg)
        try:
            node = Node.from_dict(raw)
        except ValueError as e:
            msg = f"Node #{index}: {e}"
            raise serializers.ValidationError(msg) from e
        if node.id in seen:
            msg = f'Duplicate node id "{node.id}".'
            raise serializers.ValidationError(msg)
        seen.add(node.id)
        out.append(node.to_dict())
    return {**value, "data": out}


class OrgDataField(serializers.JSONField):
    def to_internal_value(self, data):
        return normalize_org_data(super().to_internal_value(data))


class CustomOrgChartSerializer(serializers.ModelSerializer):
    """Detail shape: ``describe`` and ``username`` keep the client contract."""

    orgchart_id = serializers.UUIDField(source="id", read_only=True)
    describe = serializers.CharField(source="description", read_only=True)
    username = serializers.CharField(source="owner.username", read_only=True)

    class Meta:
        model = CustomOrgChart
        fields = [
            "orgchart_id",
            "orgchart_name",
            "describe",
            "org_data",
            "username",
            "created_at",
            "updated_at",
        ]


class CustomOrgChartListSerializer(CustomOrgChartSerializer):
    class Meta(CustomOrgChartSerializer.Meta):
        fields = ["orgchart_id", "orgchart_name", "describe", "org_data", "updated_at"]


class CustomOrgChartCreateSerializer(serializers.Serializer):
    orgchart_name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    describe = serializers.CharField(required=False, allow_blank=True)
    org_data = OrgDataField(required=False)
    source_department = serializers.CharField(required=False, allow_blank=True)
    allow_empty = serializers.BooleanField(default=False)

    def validate_orgchart_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "Chart name is required."
            raise serializers.ValidationError(msg)
        return value

    def validate(self, attrs):
        if "describe" in attrs and "description" not in attrs:
            attrs["description"] = attrs["describe"]
        attrs.pop("describe", None)
        if attrs.get("org_data") and attrs.get("source_department"):
            msg = "Send either org_data or source_department, not both."
            raise serializers.ValidationError(msg)
        return attrs


class CustomOrgChartUpdateSerializer(serializers.Serializer):
    orgchart_name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    describe = serializers.CharField(required=False, allow_blank=True)
    org_data = OrgDataField(required=False)

    def validate(self, attrs):
        if "describe" in attrs and "description" not in attrs:
            attrs["description"] = attrs["describe"]
        attrs.pop("describe", None)
        if "orgchart_name" in attrs and not attrs["orgchart_name"].strip():
            attrs.pop("orgchart_name")
        return attrs


class DepartmentUpsertSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    pid = serializers.CharField(max_length=255)
    id = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)


class SyncRequestSerializer(serializers.Serializer):
    employeeId = serializers.CharField(required=False, allow_blank=True)  # noqa: N815
    emp_id = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        attrs["emp_id"] = (attrs.get("emp_id") or attrs.get("employeeId") or "").strip()
        attrs.pop("employeeId", None)
        return attrs


class SyncResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField(required=False)
    error = serializers.CharField(required=False)
    stage = serializers.CharField(required=False)
    employees = serializers.IntegerField(required=False)
    departments = serializers.IntegerField(required=False)
    total = serializers.IntegerField(required=False)
    updated = serializers.IntegerField(required=False)
    deleted = serializers.IntegerField(required=False)
