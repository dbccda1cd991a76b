import django_filters

from hr_orgchart.employees.models import Employee


class EmployeeFilter(django_filters.FilterSet):
    dept = django_filters.CharFilter(field_name="dept", lookup_expr="iexact")
    bu = django_filters.CharFilter(field_name="bu", lookup_expr="iexact")
    location = django_filters.CharFilter(field_name="location", lookup_expr="iexact")
    employee_type = django_filters.CharFilter(
        field_name="employee_type", lookup_expr="iexact"
    )
    status = django_filters.ChoiceFilter(
        field_name="line_manager_status",
        choices=Employee.LineManagerStatus.choices,
    )

    class Meta:
        model = Employee
        fields = ["dept", "bu", "location", "employee_type", "status"]
