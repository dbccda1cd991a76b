from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from dataclasses import fields
from typing import Any

TAG_GROUP = "group"
TAG_HEADCOUNT_OPEN = "headcount_open"
TAG_PROBATION = "Emp_probation"
TAG_EMPLOYEE = "emp"

# Field names used by the persisted node document, in storage order.
NODE_FIELDS = (
    "id",
    "pid",
    "stpid",
    "name",
    "title",
    "image",
    "tags",
    "orig_pid",
    "dept",
    "bu",
    "type",
    "location",
    "description",
    "joining_date",
)

# Legacy spellings still found in stored documents.
IMAGE_ALIASES = ("img", "photo", "image")
FIELD_ALIASES = {
    "BU": "bu",
    "joiningDate": "joining_date",
}


def normalize_tags(value: Any) -> list[str]:
    """Return tags as a list whether they arrive as a list or a JSON string."""
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            parsed = json.loads(text)
        except ValueError:
            return [t.strip() for t in text.split(",") if t.strip()]
        return normalize_tags(parsed) if not isinstance(parsed, str) else [parsed]
    if isinstance(value, (list, tuple, set)):
        return [str(t) for t in value if t is not None and str(t) != ""]
    return [str(value)]


def _ref(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


@dataclass
class Node:
    id: str
    pid: str | None = None
    stpid: str | None = None
    name: str | None = None
    title: str | None = None
    image: str | None = None
    tags: list[str] = field(default_factory=list)
    orig_pid: str | None = None
    dept: str | None = None
    bu: str | None = None
    type: str | None = None
    location: str | None = None
    description: str | None = None
    joining_date: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Node:
        raw = dict(data)
        for alias, target in FIELD_ALIASES.items():
            if alias in raw:
                value = raw.pop(alias)
                if raw.get(target) in (None, ""):
                    raw[target] = value

        image = ""
        for key in IMAGE_ALIASES:
            candidate = raw.pop(key, None)
            if candidate and not image:
                image = candidate

        node_id = raw.pop("id", None)
        if node_id is None or str(node_id) == "":
            msg = "Node id is required"
            raise ValueError(msg)

        known = {f.name for f in fields(cls)} - {"id", "image", "tags", "extra"}
        kwargs = {name: raw.pop(name) for name in list(raw) if name in known}
        tags = normalize_tags(raw.pop("tags", None))
        return cls(
            id=str(node_id),
            pid=_ref(kwargs.pop("pid", None)),
            stpid=_ref(kwargs.pop("stpid", None)),
            orig_pid=_ref(kwargs.pop("orig_pid", None)),
            image=image,
            tags=tags,
            extra=raw,
            **kwargs,
        )

    @property
    def is_group(self) -> bool:
        return TAG_GROUP in self.tags

    @property
    def is_vacant(self) -> bool:
        return TAG_HEADCOUNT_OPEN in self.tags

    @property
    def is_on_probation(self) -> bool:
        return TAG_PROBATION in self.tags

    def copy(self) -> Node:
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Plain field map, dropping internal (``_``-prefixed) and callable values."""
        out: dict[str, Any] = {name: getattr(self, name) for name in NODE_FIELDS}
        out["tags"] = list(self.tags)
        for key, value in self.extra.items():
            if key.startswith("_") or callable(value) or key in out:
                continue
            out[key] = value
        if out["pid"] == "":
            out["pid"] = None
        if out["stpid"] == "":
            out["stpid"] = None
        if isinstance(out["tags"], str):
            out["tags"] = normalize_tags(out["tags"])
        return out
