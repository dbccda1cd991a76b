"""In-memory org chart editing: node store, mutations, gestures, load/save."""

from .mutations import Direction
from .mutations import GraphEditor
from .mutations import OrphanPolicy
from .nodes import Node
from .session import ChartSession
from .store import NodeStore
from .translator import EditForm
from .translator import InteractionTranslator
from .translator import RosterDirectory

__all__ = [
    "ChartSession",
    "Direction",
    "EditForm",
    "GraphEditor",
    "InteractionTranslator",
    "Node",
    "NodeStore",
    "OrphanPolicy",
    "RosterDirectory",
]
