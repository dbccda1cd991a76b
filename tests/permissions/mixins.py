from __future__ import annotations

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from hr_orgchart.users.api.permissions import ROLE_ADMIN
from hr_orgchart.users.api.permissions import ROLE_EMPLOYEE
from hr_orgchart.users.api.permissions import ROLE_MANAGER
from tests.permissions.factories import create_user_with_role
from tests.permissions.factories import ensure_groups
from tests.permissions.factories import make_roster_row

User = get_user_model()

RBAC_GROUPS = [ROLE_ADMIN, ROLE_MANAGER, ROLE_EMPLOYEE]

__all__ = [
    "RBAC_GROUPS",
    "ROLE_ADMIN",
    "ROLE_EMPLOYEE",
    "ROLE_MANAGER",
    "RoleAPITestCase",
]


class RoleAPITestCase(APITestCase):
    """Base test case to streamline RBAC fixtures and helpers."""

    def setUp(self):
        super().setUp()
        ensure_groups(RBAC_GROUPS)
        self.roles: dict[str, User] = {
            ROLE_ADMIN: create_user_with_role(
                "admin", groups=[ROLE_ADMIN], is_staff=True
            ),
            ROLE_MANAGER: create_user_with_role("manager", groups=[ROLE_MANAGER]),
            ROLE_EMPLOYEE: create_user_with_role("employee", groups=[ROLE_EMPLOYEE]),
        }
        self.others = {
            "employee": create_user_with_role("other", groups=[ROLE_EMPLOYEE]),
        }
        self.roster = {
            "boss": make_roster_row("100", full_name="Bao Tran", job_title="Head"),
            "dev": make_roster_row(
                "200", full_name="Lan Pham", line_manager="100: Bao Tran"
            ),
        }

    # Utilities -------------------------------------------------------------
    def authenticate(self, role: str):
        self.client.force_authenticate(user=self.roles[role])

    def assert_http_status(self, response, expected_status: int):
        msg = getattr(response, "data", response)
        assert response.status_code == expected_status, msg

    def get(self, url_name: str, *, role: str, reverse_kwargs=None, **kwargs):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.get(url, **kwargs)

    def post(
        self, url_name: str, *, role: str, payload=None, reverse_kwargs=None, **kwargs
    ):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.post(url, data=payload or {}, format="json", **kwargs)

    def put(
        self, url_name: str, *, role: str, payload=None, reverse_kwargs=None, **kwargs
    ):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.put(url, data=payload or {}, format="json", **kwargs)

    def patch(
        self, url_name: str, *, role: str, payload=None, reverse_kwargs=None, **kwargs
    ):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.patch(url, data=payload or {}, format="json", **kwargs)

    def delete(self, url_name: str, *, role: str, reverse_kwargs=None, **kwargs):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.delete(url, **kwargs)

    def assert_allowed(self, response):
        assert response.status_code in (
            status.HTTP_200_OK,
            status.HTTP_201_CREATED,
            status.HTTP_204_NO_CONTENT,
        ), response.data

    def assert_denied(self, response, code=status.HTTP_403_FORBIDDEN):
        assert response.status_code == code, response.data

    def extract_results(self, response):
        data = response.data
        if isinstance(data, dict) and "results" in data:
            return data["results"]
        return data if isinstance(data, list) else []
