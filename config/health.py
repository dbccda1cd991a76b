from __future__ import annotations

import logging
from typing import Any

import redis
from django.conf import settings
from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse

from hr_orgchart.orgchart.models import OrgChartNode
from hr_orgchart.orgchart.services import CACHE_VERSION_KEY

logger = logging.getLogger(__name__)

# Components that only degrade the service when they fail.
OPTIONAL_COMPONENTS = frozenset({"redis"})


def check_db() -> dict[str, Any]:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
        nodes = OrgChartNode.objects.count()
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        logger.warning("Health check: database unavailable: %s", exc)
        return {"ok": False, "error": str(exc)}
    else:
        return {"ok": True, "orgchart_nodes": nodes}


def check_redis() -> dict[str, Any]:
    url = getattr(settings, "REDIS_URL", None)
    if not url:
        return {"ok": False, "error": "REDIS_URL not configured"}
    try:
        client = redis.Redis.from_url(
            url,
            socket_timeout=0.5,
            socket_connect_timeout=0.5,
        )
        client.ping()
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        logger.warning("Health check: redis unavailable: %s", exc)
        return {"ok": False, "error": str(exc)}
    else:
        return {"ok": True}


def check_cache() -> dict[str, Any]:
    try:
        version = cache.get(CACHE_VERSION_KEY, 1)
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        return {"ok": False, "error": str(exc)}
    else:
        return {"ok": True, "orgchart_version": version}


def health(request):
    components = {
        "db": check_db(),
        "cache": check_cache(),
        "redis": check_redis(),
    }

    all_ok = all(v.get("ok", False) for v in components.values())
    required_ok = all(
        v.get("ok", False)
        for k, v in components.items()
        if k not in OPTIONAL_COMPONENTS
    )

    if all_ok:
        status = "ok"
    elif required_ok:
        status = "degraded"
    else:
        status = "down"
    http_status = 200 if all_ok else 503

    return JsonResponse(
        {"status": status, "components": components},
        status=http_status,
    )
