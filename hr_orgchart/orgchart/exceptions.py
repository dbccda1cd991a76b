"""Errors raised by the chart editor and the roster reconciliation.

Kept free of Django imports so the editor can run as a plain client.
"""

from __future__ import annotations


class OrgChartError(Exception):
    """Base class for org chart failures."""


class DuplicateIdError(OrgChartError):
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(
            f'Employee ID "{node_id}" already exists! Please choose a unique ID.'
        )


class UnknownNodeError(OrgChartError, KeyError):
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f'Node "{node_id}" is not part of this chart.')

    def __str__(self) -> str:
        return self.args[0]


class InvalidParentError(OrgChartError):
    """A mutation would add a dangling reference or a reporting cycle."""


class NotFoundError(OrgChartError):
    def __init__(self, profile_id: str):
        self.profile_id = profile_id
        super().__init__(f"Orgchart {profile_id} not found.")


class StorageError(OrgChartError):
    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class SyncPartialFailureError(OrgChartError):
    """Full roster sync aborted; ``counts`` holds the progress reached."""

    def __init__(self, stage: str, error: Exception, counts: dict[str, int]):
        self.stage = stage
        self.error = error
        self.counts = dict(counts)
        super().__init__(f"Sync failed during {stage}: {error}")


class EmptyDepartmentError(StorageError):
    """Duplicating a department with no chart data needs explicit consent."""

    def __init__(self, department: str):
        self.department = department
        super().__init__(
            f"Department {department!r} has no chart data", status=409
        )
