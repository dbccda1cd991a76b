"""Request/response access to the chart-profile REST endpoints."""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any

from hr_orgchart.orgchart.exceptions import EmptyDepartmentError
from hr_orgchart.orgchart.exceptions import NotFoundError
from hr_orgchart.orgchart.exceptions import StorageError

from .config import EditorConfig

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 100
HTTP_NOT_FOUND = 404
HTTP_CONFLICT = 409


@dataclass
class TransportResponse:
    status: int
    reason: str = ""
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300  # noqa: PLR2004

    def json(self) -> Any | None:
        """Parsed body, or None when the body is not JSON."""
        if not self.text:
            return None
        try:
            return json.loads(self.text)
        except ValueError:
            return None


class Transport:
    def request(
        self, method: str, path: str, payload: dict | None = None
    ) -> TransportResponse:
        raise NotImplementedError


class HttpTransport(Transport):
    """JSON-over-HTTP transport built on urllib; no external deps."""

    def __init__(self, cfg: EditorConfig):
        self.cfg = cfg

    def request(
        self, method: str, path: str, payload: dict | None = None
    ) -> TransportResponse:
        url = f"{self.cfg.base_url.rstrip('/')}{path}"
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.cfg.token:
            headers["Authorization"] = f"Bearer {self.cfg.token}"
        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        req = urllib.request.Request(  # noqa: S310 - URL comes from config
            url, data=data, headers=headers, method=method
        )
        try:
            with urllib.request.urlopen(req, timeout=self.cfg.timeout) as resp:  # noqa: S310
                body = resp.read().decode("utf-8", "replace")
                return TransportResponse(resp.status, resp.reason or "", body)
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", "replace")
            return TransportResponse(e.code, str(e.reason or ""), body)
        except (urllib.error.URLError, OSError) as e:
            logger.warning("Profile store request failed: %s %s: %s", method, url, e)
            msg = f"{method} {url} failed: {e}"
            raise StorageError(msg) from e


def error_message(response: TransportResponse, default: str) -> str:
    body = response.json()
    if isinstance(body, dict):
        for key in ("error", "detail"):
            if body.get(key):
                return str(body[key])
        # DRF validation errors: {"field": ["message", ...]}
        for field, errors in body.items():
            if isinstance(errors, list) and errors:
                return f"{field}: {errors[0]}"
    if response.text:
        return f"{default}: {response.text[:SNIPPET_LENGTH]}"
    return default


class ChartProfileClient:
    """Typed calls against ``/orgcharts/`` on top of a :class:`Transport`."""

    def __init__(self, transport: Transport, api_prefix: str = "/api/v1"):
        self.transport = transport
        self.api_prefix = api_prefix.rstrip("/")

    def _path(self, profile_id: str | None = None) -> str:
        if profile_id is None:
            return f"{self.api_prefix}/orgcharts/"
        return f"{self.api_prefix}/orgcharts/{urllib.parse.quote(str(profile_id))}/"

    def fetch(self, profile_id: str) -> dict[str, Any]:
        response = self.transport.request("GET", self._path(profile_id))
        body = response.json()

        if response.status == HTTP_NOT_FOUND:
            raise NotFoundError(profile_id)

        if not response.ok:
            message = f"Failed to fetch chart: {response.status} {response.reason}"
            if isinstance(body, dict) and body.get("error"):
                message += f" - {body['error']}"
            if body is None and response.text:
                message += f" ({response.text[:SNIPPET_LENGTH]})"
            raise StorageError(message.strip(), status=response.status)

        if not isinstance(body, dict):
            msg = "Invalid JSON response from server"
            raise StorageError(msg, status=response.status)
        return body

    def replace_nodes(self, profile_id: str, nodes: list[dict[str, Any]]) -> None:
        response = self.transport.request(
            "PUT", self._path(profile_id), {"org_data": {"data": nodes}}
        )
        if not response.ok:
            raise StorageError(
                error_message(response, "Failed to save"), response.status
            )
        body = response.json()
        if not isinstance(body, dict) or not body.get("success"):
            error = body.get("error") if isinstance(body, dict) else None
            raise StorageError(error or "Failed to save to database", response.status)

    def create(  # noqa: PLR0913
        self,
        name: str,
        *,
        description: str = "",
        nodes: list[dict[str, Any]] | None = None,
        source_department: str | None = None,
        allow_empty: bool = False,
    ) -> str:
        payload: dict[str, Any] = {"orgchart_name": name, "description": description}
        if nodes is not None:
            payload["org_data"] = {"data": nodes}
        if source_department:
            payload["source_department"] = source_department
            payload["allow_empty"] = allow_empty
        response = self.transport.request("POST", self._path(), payload)
        if response.status == HTTP_CONFLICT:
            raise EmptyDepartmentError(source_department or "")
        if not response.ok:
            raise StorageError(
                error_message(response, "Create failed"), response.status
            )
        return str(response.json()["orgchart_id"])

    def delete(self, profile_id: str) -> None:
        response = self.transport.request("DELETE", self._path(profile_id))
        if response.status == HTTP_NOT_FOUND:
            raise NotFoundError(profile_id)
        if not response.ok:
            raise StorageError(
                error_message(response, "Delete failed"), response.status
            )

    def list_profiles(self, owner: str | None = None) -> list[dict[str, Any]]:
        path = self._path()
        if owner:
            path += f"?{urllib.parse.urlencode({'username': owner})}"
        response = self.transport.request("GET", path)
        if not response.ok:
            raise StorageError(
                error_message(response, "Failed to fetch orgcharts"), response.status
            )
        body = response.json() or {}
        return list(body.get("orgcharts", []))

    def canonical_nodes(self, dept: str | None = None) -> list[dict[str, Any]]:
        """Nodes projected from the roster, the source for ID auto-fill."""
        path = f"{self.api_prefix}/orgchart/nodes/"
        if dept:
            path += f"?{urllib.parse.urlencode({'dept': dept})}"
        response = self.transport.request("GET", path)
        body = response.json()
        if not response.ok or not isinstance(body, dict) or not body.get("success"):
            raise StorageError(
                error_message(response, "Failed to load orgchart nodes"),
                response.status,
            )
        return list(body.get("data") or [])
