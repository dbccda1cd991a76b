import pytest
from django.contrib.auth import get_user_model
from django.test import RequestFactory

from hr_orgchart.audit.utils import client_ip
from hr_orgchart.audit.utils import log_action


@pytest.fixture
def user():
    return get_user_model().objects.create_user(
        username="auditor",
        password="pass12345",  # noqa: S106
    )


@pytest.mark.django_db
def test_log_action_stringifies_record_id(user):
    log = log_action("orgchart_sync", actor=user, record_id=42, after={"ok": True})
    assert log.record_id == "42"
    assert log.actor == user
    assert log_action("orgchart_sync", actor="cron").actor is None


def test_client_ip_prefers_forwarded_header():
    rf = RequestFactory()
    request = rf.get("/", HTTP_X_FORWARDED_FOR="10.0.0.1, 10.0.0.2")
    assert client_ip(request) == "10.0.0.1"
    assert client_ip(rf.get("/")) == "127.0.0.1"
    assert client_ip(None) == ""
