"""Permission classes for the roster API."""

from rest_framework.permissions import SAFE_METHODS
from rest_framework.permissions import BasePermission

from hr_orgchart.users.api.permissions import is_elevated

# Fields a regular user may touch; changes go through approval.
REQUESTABLE_FIELDS = frozenset({"line_manager"})


class IsElevatedOrLineManagerRequest(BasePermission):
    """Reads for everyone signed in; writes for Admin/Manager.

    Other users may only PATCH ``line_manager``, which files a change
    request instead of editing the row.
    """

    def has_permission(self, request, view):
        u = getattr(request, "user", None)
        if not (u and getattr(u, "is_authenticated", False)):
            return False
        if request.method in SAFE_METHODS or is_elevated(u):
            return True
        if request.method != "PATCH":
            return False
        keys = set(getattr(request.data, "keys", list)())
        return bool(keys) and keys <= REQUESTABLE_FIELDS
