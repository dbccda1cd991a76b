from rest_framework import serializers

from hr_orgchart.employees.models import Employee
from hr_orgchart.users.api.permissions import is_elevated


class EmployeeSerializer(serializers.ModelSerializer):
    change_requested_by = serializers.SlugRelatedField(
        slug_field="username", read_only=True
    )

    class Meta:
        model = Employee
        fields = [
            "id",
            "emp_id",
            "full_name",
            "job_title",
            "dept",
            "bu",
            "dl_idl_staff",
            "location",
            "employee_type",
            "line_manager",
            "joining_date",
            "leaving_date",
            "raw_data",
            "line_manager_status",
            "pending_line_manager",
            "change_requested_by",
            "change_requested_at",
            "imported_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "line_manager_status",
            "pending_line_manager",
            "change_requested_by",
            "change_requested_at",
            "imported_at",
            "updated_at",
        ]

    def validate_emp_id(self, value: str) -> str:
        return value.strip()

    def update(self, instance, validated_data):
        request = self.context.get("request")
        user = getattr(request, "user", None)
        proposed = validated_data.get("line_manager")
        if (
            proposed is not None
            and proposed != instance.line_manager
            and not is_elevated(user)
        ):
            validated_data.pop("line_manager")
            instance.request_line_manager_change(proposed, requested_by=user)
        return super().update(instance, validated_data)


class BulkDecisionSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    count = serializers.IntegerField()
    message = serializers.CharField()
