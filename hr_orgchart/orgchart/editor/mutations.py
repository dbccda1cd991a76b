"""Graph mutation API: the only path through which node content changes."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from hr_orgchart.orgchart.exceptions import DuplicateIdError
from hr_orgchart.orgchart.exceptions import InvalidParentError
from hr_orgchart.orgchart.exceptions import UnknownNodeError

from .nodes import FIELD_ALIASES
from .nodes import IMAGE_ALIASES
from .nodes import Node
from .nodes import normalize_tags
from .store import NodeStore

logger = logging.getLogger(__name__)

PARENT_FIELDS = ("pid", "stpid")


class OrphanPolicy(str, Enum):
    LEAVE = "leave"
    REPARENT = "reparent"


class Direction(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class GraphEditor:
    def __init__(
        self,
        store: NodeStore,
        *,
        orphan_policy: OrphanPolicy | str = OrphanPolicy.LEAVE,
    ):
        self.store = store
        self.orphan_policy = OrphanPolicy(orphan_policy)

    def _require(self, node_id: str) -> Node:
        node = self.store._live(str(node_id))  # noqa: SLF001
        if node is None:
            raise UnknownNodeError(str(node_id))
        return node

    def _check_parent(self, node_id: str, field_name: str, parent_id: str | None):
        if parent_id is None:
            return
        if parent_id not in self.store:
            msg = f'{field_name} "{parent_id}" does not exist in this chart'
            raise InvalidParentError(msg)
        if parent_id == node_id or self.store.is_descendant(parent_id, node_id):
            msg = f'Attaching "{node_id}" under "{parent_id}" would create a cycle'
            raise InvalidParentError(msg)

    def add_node(self, node: Node | Mapping[str, Any]) -> Node:
        new = node.copy() if isinstance(node, Node) else Node.from_dict(node)
        if new.id in self.store:
            raise DuplicateIdError(new.id)
        for field_name in PARENT_FIELDS:
            self._check_parent(new.id, field_name, getattr(new, field_name))
        self.store._append(new)  # noqa: SLF001
        self.store.mark_dirty()
        return new.copy()

    def update_node(self, node_id: str, patch: Mapping[str, Any]) -> Node:
        """Merge ``patch`` into the node; parents change only when patched."""
        node = self._require(node_id)
        changes = dict(patch)
        new_id = changes.pop("id", None)
        if new_id is not None and str(new_id) != node.id:
            msg = "Use rename_node_id to change a node id"
            raise ValueError(msg)

        for field_name in PARENT_FIELDS:
            if field_name in changes:
                value = changes[field_name]
                value = str(value) if value not in (None, "") else None
                self._check_parent(node.id, field_name, value)
                changes[field_name] = value

        for key, value in changes.items():
            key = "image" if key in IMAGE_ALIASES else FIELD_ALIASES.get(key, key)  # noqa: PLW2901
            if key == "tags":
                node.tags = normalize_tags(value)
            elif key == "extra" or key.startswith("_"):
                continue
            elif hasattr(node, key):
                setattr(node, key, value)
            else:
                node.extra[key] = value
        self.store.mark_dirty()
        return node.copy()

    def rename_node_id(self, old_id: str, new_id: str) -> Node:
        """Change a node's identity and repoint every edge that referenced it.

        The renamed node keeps its own ``pid``/``stpid``.
        """
        old_id, new_id = str(old_id), str(new_id)
        self._require(old_id)
        if not new_id:
            msg = "New id must not be empty"
            raise ValueError(msg)
        if new_id == old_id:
            return self.store.get(old_id)
        if new_id in self.store:
            raise DuplicateIdError(new_id)

        self.store._rekey(old_id, new_id)  # noqa: SLF001
        for other_id in self.store.ids():
            other = self.store._live(other_id)  # noqa: SLF001
            if other.pid == old_id:
                other.pid = new_id
            if other.stpid == old_id:
                other.stpid = new_id
        self.store.mark_dirty()
        return self.store.get(new_id)

    def remove_node(
        self, node_id: str, *, orphan_policy: OrphanPolicy | str | None = None
    ) -> Node:
        node = self._require(node_id)
        policy = OrphanPolicy(orphan_policy or self.orphan_policy)
        self.store._delete(node.id)  # noqa: SLF001
        if policy is OrphanPolicy.REPARENT:
            for other_id in self.store.ids():
                other = self.store._live(other_id)  # noqa: SLF001
                if other.pid == node.id:
                    other.pid = node.pid
                if other.stpid == node.id:
                    other.stpid = node.stpid
        self.store.mark_dirty()
        return node

    def move_sibling(self, node_id: str, direction: Direction | str) -> bool:
        """Swap a node with its neighbour among nodes sharing pid and stpid.

        Returns False without touching anything when already at the edge.
        """
        node = self._require(node_id)
        step = -1 if Direction(direction) is Direction.LEFT else 1
        siblings = [s.id for s in self.store.siblings_of(node.id)]
        target = siblings.index(node.id) + step
        if target < 0 or target >= len(siblings):
            return False
        self.store._swap(node.id, siblings[target])  # noqa: SLF001
        self.store.mark_dirty()
        return True

    def reparent_via_drop(self, dragged_id: str, target_id: str) -> Node:
        """Drop onto a group sets membership; drop onto a person sets reporting."""
        dragged = self._require(dragged_id)
        target = self._require(target_id)
        if target.is_group:
            self._check_parent(dragged.id, "stpid", target.id)
            dragged.stpid = target.id
            dragged.pid = None
        else:
            self._check_parent(dragged.id, "pid", target.id)
            dragged.pid = target.id
        self.store.mark_dirty()
        logger.debug("Dropped %s onto %s", dragged.id, target.id)
        return dragged.copy()
