from django.contrib.auth.models import Group
from django.core.management import call_command


def test_setup_rbac_creates_default_groups(db):
    expected_groups = ["Admin", "Manager", "Employee"]
    Group.objects.filter(name__in=expected_groups).delete()

    call_command("setup_rbac")

    for name in expected_groups:
        assert Group.objects.filter(name=name).exists()

    admin = Group.objects.get(name="Admin")
    manager = Group.objects.get(name="Manager")
    employee = Group.objects.get(name="Employee")

    assert admin.permissions.filter(codename="delete_user").exists()
    assert manager.permissions.filter(codename="change_employee").exists()
    assert manager.permissions.filter(codename="view_auditlog").exists()
    assert not manager.permissions.filter(codename="delete_user").exists()

    codenames = set(employee.permissions.values_list("codename", flat=True))
    assert {"view_employee", "view_orgchartnode"} <= codenames
    assert "change_employee" not in codenames
    assert "change_orgchartnode" not in codenames
    # Private chart profiles are open to everyone.
    assert {"add_customorgchart", "change_customorgchart"} <= codenames


def test_setup_rbac_is_idempotent(db):
    call_command("setup_rbac")
    first = set(Group.objects.get(name="Manager").permissions.values_list("pk"))
    call_command("setup_rbac")
    assert set(Group.objects.get(name="Manager").permissions.values_list("pk")) == first
