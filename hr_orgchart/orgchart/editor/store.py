from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .nodes import Node


@dataclass
class HeadcountSummary:
    employees: int = 0
    open_positions: int = 0
    on_probation: int = 0

    @property
    def total(self) -> int:
        return self.employees + self.open_positions


class NodeStore:
    """Ordered, id-indexed node collection for the chart being edited.

    Order is significant: it drives left-to-right placement of siblings, so
    it is preserved across load and save.
    """

    def __init__(self, nodes: Iterable[Node | Mapping[str, Any]] | None = None):
        self._order: list[str] = []
        self._nodes: dict[str, Node] = {}
        self.dirty = False
        if nodes is not None:
            self.load(nodes)

    def load(self, nodes: Iterable[Node | Mapping[str, Any]]) -> None:
        order: list[str] = []
        index: dict[str, Node] = {}
        for item in nodes:
            node = item.copy() if isinstance(item, Node) else Node.from_dict(item)
            if node.id in index:
                # Later duplicates in a stored document override earlier ones.
                index[node.id] = node
                continue
            order.append(node.id)
            index[node.id] = node
        self._order = order
        self._nodes = index
        self.dirty = False

    def get(self, node_id: str) -> Node | None:
        node = self._nodes.get(str(node_id))
        return node.copy() if node is not None else None

    def get_all(self) -> list[Node]:
        return [self._nodes[node_id].copy() for node_id in self._order]

    def ids(self) -> list[str]:
        return list(self._order)

    def __contains__(self, node_id: object) -> bool:
        return str(node_id) in self._nodes

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.get_all())

    def mark_dirty(self) -> None:
        self.dirty = True

    def mark_clean(self) -> None:
        self.dirty = False

    # Structure queries -----------------------------------------------------
    def children_of(self, node_id: str | None) -> list[Node]:
        """Nodes attached to ``node_id`` either by reporting line or membership."""
        return [
            self._nodes[i].copy()
            for i in self._order
            if node_id is not None
            and (self._nodes[i].pid == node_id or self._nodes[i].stpid == node_id)
        ]

    def roots(self) -> list[Node]:
        """Nodes with no live parent, including those whose parent is missing."""
        out = []
        for i in self._order:
            node = self._nodes[i]
            parent = node.stpid or node.pid
            if parent is None or parent not in self._nodes:
                out.append(node.copy())
        return out

    def siblings_of(self, node_id: str) -> list[Node]:
        node = self._nodes[node_id]
        return [
            self._nodes[i].copy()
            for i in self._order
            if self._nodes[i].pid == node.pid and self._nodes[i].stpid == node.stpid
        ]

    def is_descendant(self, node_id: str, ancestor_id: str) -> bool:
        """True when ``ancestor_id`` sits above ``node_id`` on any parent edge."""
        seen: set[str] = set()
        stack = [node_id]
        while stack:
            current = self._nodes.get(stack.pop())
            if current is None or current.id in seen:
                continue
            seen.add(current.id)
            for parent in (current.pid, current.stpid):
                if parent == ancestor_id:
                    return True
                if parent is not None:
                    stack.append(parent)
        return False

    def headcount(self, root_id: str | None = None) -> HeadcountSummary:
        """Count people under ``root_id`` (or the whole chart).

        Group nodes are traversed for their members but never counted.
        """
        summary = HeadcountSummary()
        if root_id is None:
            start = [n.id for n in self.roots()]
        else:
            start = [c.id for c in self.children_of(root_id)]
        seen: set[str] = set()
        stack = list(reversed(start))
        while stack:
            node_id = stack.pop()
            if node_id in seen:
                continue
            seen.add(node_id)
            node = self._nodes[node_id]
            if not node.is_group:
                if node.is_vacant:
                    summary.open_positions += 1
                else:
                    summary.employees += 1
                    if node.is_on_probation:
                        summary.on_probation += 1
            stack.extend(reversed([c.id for c in self.children_of(node_id)]))
        return summary

    # Internal mutation hooks used by the graph editor ----------------------
    def _live(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def _append(self, node: Node) -> None:
        self._order.append(node.id)
        self._nodes[node.id] = node

    def _delete(self, node_id: str) -> None:
        self._order.remove(node_id)
        del self._nodes[node_id]

    def _rekey(self, old_id: str, new_id: str) -> None:
        node = self._nodes.pop(old_id)
        node.id = new_id
        self._nodes[new_id] = node
        self._order[self._order.index(old_id)] = new_id

    def _swap(self, first_id: str, second_id: str) -> None:
        a = self._order.index(first_id)
        b = self._order.index(second_id)
        self._order[a], self._order[b] = self._order[b], self._order[a]
