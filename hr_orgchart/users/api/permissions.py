"""Role checks shared by every API in the project."""

from collections.abc import Iterable

from rest_framework.permissions import SAFE_METHODS
from rest_framework.permissions import BasePermission

ROLE_ADMIN = "Admin"
ROLE_MANAGER = "Manager"
ROLE_EMPLOYEE = "Employee"
ELEVATED_ROLES = (ROLE_ADMIN, ROLE_MANAGER)


def _user_in_groups(user, names: Iterable[str]) -> bool:
    groups = getattr(user, "groups", None)
    names_list = list(names)
    if not groups or not names_list:
        return False
    return groups.filter(name__in=names_list).exists()


def is_elevated(user) -> bool:
    if not (user and getattr(user, "is_authenticated", False)):
        return False
    if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
        return True
    return _user_in_groups(user, ELEVATED_ROLES)


class IsManagerOrAdmin(BasePermission):
    """Allow access only to staff or users in Admin/Manager groups."""

    def has_permission(self, request, view):
        return is_elevated(getattr(request, "user", None))


class IsManagerOrAdminCanWrite(BasePermission):
    """Any authenticated user may read; writes need an elevated role."""

    def has_permission(self, request, view):
        u = getattr(request, "user", None)
        if not (u and getattr(u, "is_authenticated", False)):
            return False
        if request.method in SAFE_METHODS:
            return True
        return is_elevated(u)
