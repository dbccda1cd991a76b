from rest_framework import serializers

from hr_orgchart.audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    actor = serializers.SlugRelatedField(slug_field="username", read_only=True)

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "created_at",
            "action",
            "actor",
            "model_name",
            "record_id",
            "message",
            "before",
            "after",
        ]
