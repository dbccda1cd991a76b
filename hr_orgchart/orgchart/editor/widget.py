from __future__ import annotations

import logging
from typing import Any

from .nodes import TAG_GROUP
from .nodes import TAG_HEADCOUNT_OPEN
from .nodes import TAG_PROBATION
from .nodes import Node

logger = logging.getLogger(__name__)

MENU_ADD_DEPARTMENT = "addDepartment"
MENU_ADD_EMPLOYEE = "addEmployee"
MENU_ADD_HEADCOUNT_OPEN = "addHeadcountOpen"
MENU_REMOVE = "remove"


def widget_config() -> dict[str, Any]:
    """Canvas configuration: field bindings, per-tag templates and node menu."""
    return {
        "template": "big",
        "enableDragDrop": True,
        "enableSearch": False,
        "nodeBinding": {"field_0": "name", "field_1": "title", "img_0": "image"},
        "nodeMouseClick": "none",
        "nodeMenu": {
            MENU_ADD_DEPARTMENT: {"text": "Add new department"},
            MENU_ADD_EMPLOYEE: {"text": "Add new employee"},
            MENU_ADD_HEADCOUNT_OPEN: {"text": "Add Open Headcount"},
            MENU_REMOVE: {"text": "Remove"},
        },
        "tags": {
            TAG_GROUP: {"template": "group"},
            TAG_PROBATION: {"template": "big_v2"},
            TAG_HEADCOUNT_OPEN: {"template": "big_hc_open"},
        },
    }


class ChartWidget:
    """Rendering collaborator driven by the editor.

    The default implementation renders nothing; a real canvas subclasses it.
    """

    def __init__(self):
        self.config = widget_config()

    def load(self, nodes: list[Node]) -> None:
        pass

    def draw(self) -> None:
        pass

    def refresh_filter(self) -> None:
        pass

    def alert(self, message: str) -> None:
        logger.warning("%s", message)


class RecordingWidget(ChartWidget):
    """Keeps what it was asked to render; useful for headless sessions."""

    def __init__(self):
        super().__init__()
        self.nodes: list[Node] = []
        self.draw_count = 0
        self.filter_refreshes = 0
        self.alerts: list[str] = []

    def load(self, nodes: list[Node]) -> None:
        self.nodes = list(nodes)

    def draw(self) -> None:
        self.draw_count += 1

    def refresh_filter(self) -> None:
        self.filter_refreshes += 1

    def alert(self, message: str) -> None:
        super().alert(message)
        self.alerts.append(message)
