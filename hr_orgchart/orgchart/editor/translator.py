"""Turns canvas gestures and form submits into graph mutations."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from hr_orgchart.orgchart.exceptions import DuplicateIdError
from hr_orgchart.orgchart.exceptions import InvalidParentError
from hr_orgchart.orgchart.exceptions import StorageError
from hr_orgchart.orgchart.exceptions import UnknownNodeError

from .mutations import Direction
from .nodes import TAG_GROUP
from .nodes import TAG_HEADCOUNT_OPEN
from .nodes import Node
from .nodes import normalize_tags
from .session import ChartSession
from .widget import MENU_ADD_DEPARTMENT
from .widget import MENU_ADD_EMPLOYEE
from .widget import MENU_ADD_HEADCOUNT_OPEN
from .widget import MENU_REMOVE

logger = logging.getLogger(__name__)

HOTSPOT_MENU = "menu"
WIDGET_CHANGE_EVENTS = frozenset({"add", "update", "remove"})


def new_node_id(
    prefix: str, taken: Callable[[str], bool], clock: Callable[[], float] = time.time
) -> str:
    """``<prefix>_<epoch millis>``, suffixed when that id is already used."""
    base = f"{prefix}_{int(clock() * 1000)}"
    candidate, n = base, 1
    while taken(candidate):
        n += 1
        candidate = f"{base}_{n}"
    return candidate


class RosterDirectory:
    """Lookup of known employees used to auto-fill the edit form."""

    def __init__(self, entries: Iterable[Node | Mapping[str, Any]] = ()):
        self._entries: dict[str, Node] = {}
        for entry in entries:
            node = entry if isinstance(entry, Node) else Node.from_dict(entry)
            self._entries[node.id] = node

    def lookup(self, node_id: str) -> Node | None:
        return self._entries.get(str(node_id).strip())

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class EditForm:
    original_id: str
    id: str
    pid: str | None = None
    stpid: str | None = None
    name: str = ""
    title: str = ""
    image: str = ""
    dept: str = ""
    description: str = ""
    tags: str = ""

    @classmethod
    def from_node(cls, node: Node) -> EditForm:
        return cls(
            original_id=node.id,
            id=node.id,
            pid=node.pid,
            stpid=node.stpid,
            name=node.name or "",
            title=node.title or "",
            image=node.image or "",
            dept=node.dept or "",
            description=node.description or "",
            tags=", ".join(node.tags),
        )

    def patch(self) -> dict[str, Any]:
        # Structure is edited by drag and drop, never through this form.
        return {
            "name": self.name,
            "title": self.title,
            "image": self.image,
            "dept": self.dept,
            "description": self.description,
            "tags": normalize_tags(self.tags),
        }


@dataclass(frozen=True)
class NodeTemplate:
    prefix: str
    name: str
    title: str
    image: str | None
    tags: tuple[str, ...]
    extra: tuple[tuple[str, Any], ...] = ()


DEPARTMENT = NodeTemplate(
    "dept", "New Department", "Department", None, (TAG_GROUP,), (("type", "group"),)
)
EMPLOYEE = NodeTemplate("emp", "New Employee", "Position", "", ())
VACANT_POSITION = NodeTemplate(
    "vacant",
    "Vacant Position",
    "Open Headcount",
    "/headcount_open.png",
    (TAG_HEADCOUNT_OPEN,),
    (("description", "Open headcount position"),),
)


class InteractionTranslator:
    def __init__(
        self,
        session: ChartSession,
        *,
        directory: RosterDirectory | None = None,
        on_node_click: Callable[[EditForm], None] | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.session = session
        self._directory = directory
        self.on_node_click = on_node_click
        self.clock = clock

    @property
    def directory(self) -> RosterDirectory:
        if self._directory is not None:
            return self._directory
        return self.refresh_directory()

    def refresh_directory(self, dept: str | None = None) -> RosterDirectory:
        """Reload the auto-fill lookup from the canonical chart nodes."""
        try:
            nodes = self.session.client.canonical_nodes(dept)
        except StorageError as e:
            self._reject(f"Employee lookup unavailable: {e}")
            return RosterDirectory()
        self._directory = RosterDirectory(nodes)
        logger.info("Loaded %d employees for ID auto-fill", len(self._directory))
        return self._directory

    @property
    def store(self):
        return self.session.store

    @property
    def editor(self):
        return self.session.editor

    @property
    def widget(self):
        return self.session.widget

    def _reject(self, message: str) -> None:
        logger.warning("Rejected chart edit: %s", message)
        self.widget.alert(message)

    # Adding ----------------------------------------------------------------
    def _add(
        self, template: NodeTemplate, pid: str | None, stpid: str | None
    ) -> Node | None:
        node_id = new_node_id(template.prefix, self.store.__contains__, self.clock)
        data: dict[str, Any] = {
            "id": node_id,
            "pid": pid,
            "stpid": stpid,
            "name": template.name,
            "title": template.title,
            "image": template.image,
            "tags": list(template.tags),
            "orig_pid": pid,
            "dept": None,
            "bu": None,
            "description": "",
        }
        data.update(dict(template.extra))
        try:
            node = self.editor.add_node(data)
        except InvalidParentError as e:
            self._reject(str(e))
            return None
        self.widget.draw()
        return node

    def add_department(self, pid: str | None = None) -> Node | None:
        return self._add(DEPARTMENT, pid, None)

    def add_employee(
        self, pid: str | None = None, *, stpid: str | None = None
    ) -> Node | None:
        return self._add(EMPLOYEE, pid, stpid)

    def add_vacant_position(
        self, pid: str | None = None, *, stpid: str | None = None
    ) -> Node | None:
        return self._add(VACANT_POSITION, pid, stpid)

    def _attach_under(self, node_id: str) -> tuple[str | None, str | None]:
        target = self.store.get(node_id)
        if target is not None and target.is_group:
            return None, target.id
        return node_id, None

    # Context menu ----------------------------------------------------------
    def handle_menu(self, action: str, node_id: str) -> Node | bool | None:
        if action == MENU_ADD_DEPARTMENT:
            return self.add_department(node_id)
        if action == MENU_ADD_EMPLOYEE:
            pid, stpid = self._attach_under(node_id)
            return self.add_employee(pid, stpid=stpid)
        if action == MENU_ADD_HEADCOUNT_OPEN:
            pid, stpid = self._attach_under(node_id)
            return self.add_vacant_position(pid, stpid=stpid)
        if action == MENU_REMOVE:
            return self.remove(node_id)
        msg = f"Unknown menu action: {action}"
        raise ValueError(msg)

    def remove(self, node_id: str) -> bool:
        try:
            self.editor.remove_node(node_id)
        except UnknownNodeError:
            logger.exception("Error removing node %s", node_id)
            return False
        self.widget.refresh_filter()
        self.widget.draw()
        return True

    # Clicks, moves, drops --------------------------------------------------
    def handle_click(self, node_id: str, hotspot: str | None = None) -> EditForm | None:
        """Move buttons move, the menu button is left to the canvas, anything
        else opens the edit form."""
        if hotspot in (Direction.LEFT.value, Direction.RIGHT.value):
            self.move(node_id, hotspot)
            return None
        if hotspot == HOTSPOT_MENU:
            return None
        node = self.store.get(node_id)
        if node is None:
            return None
        form = EditForm.from_node(node)
        if self.on_node_click is not None:
            self.on_node_click(form)
        return form

    def move(self, node_id: str, direction: Direction | str) -> bool:
        moved = self.editor.move_sibling(node_id, direction)
        if moved:
            self.widget.draw()
        return moved

    def handle_drop(self, dragged_id: str, target_id: str) -> bool:
        try:
            self.editor.reparent_via_drop(dragged_id, target_id)
        except (InvalidParentError, UnknownNodeError) as e:
            self._reject(str(e))
            return False
        self.widget.draw()
        return True

    def handle_widget_event(self, event: str) -> None:
        if event in WIDGET_CHANGE_EVENTS:
            self.store.mark_dirty()

    # Edit form -------------------------------------------------------------
    def retype_id(self, form: EditForm, value: str) -> EditForm:
        """Auto-fill identity fields from the roster; parents are untouched."""
        form.id = value
        entry = self.directory.lookup(value)
        if entry is not None:
            form.name = entry.name or form.name
            form.title = entry.title or form.title
            form.image = entry.image or form.image
            form.dept = entry.dept or form.dept
        return form

    def submit_edit(self, form: EditForm) -> bool:
        new_id = str(form.id or "").strip()
        if not new_id:
            self._reject("ID is required!")
            return False
        old_id = form.original_id
        try:
            if new_id != old_id and new_id in self.store:
                raise DuplicateIdError(new_id)
            # Fields first under the old id, then the rename rewrites edges.
            self.editor.update_node(old_id, form.patch())
            if new_id != old_id:
                self.editor.rename_node_id(old_id, new_id)
        except DuplicateIdError as e:
            self._reject(str(e))
            return False
        except UnknownNodeError as e:
            self._reject(str(e))
            return False
        self.widget.draw()
        return True
