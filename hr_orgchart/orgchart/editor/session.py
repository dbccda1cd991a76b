"""Chart load/save cycle: bridges the node store and the profile store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC
from datetime import datetime
from typing import Any

from hr_orgchart.orgchart.exceptions import NotFoundError
from hr_orgchart.orgchart.exceptions import StorageError

from .config import EditorConfig
from .mutations import GraphEditor
from .mutations import OrphanPolicy
from .store import NodeStore
from .transport import ChartProfileClient
from .transport import HttpTransport
from .widget import ChartWidget

logger = logging.getLogger(__name__)

# Ids the canvas uses for its own bookkeeping; never persisted.
INTERNAL_ID_PREFIX = "_"


class ChartSession:
    """One editing session for one chart profile at a time.

    Owns the node store, the graph editor bound to it and the widget that
    renders it. Callers pass the session around explicitly.
    """

    def __init__(
        self,
        client: ChartProfileClient,
        *,
        widget: ChartWidget | None = None,
        orphan_policy: OrphanPolicy | str = OrphanPolicy.LEAVE,
        on_not_found: Callable[[str], None] | None = None,
    ):
        self.client = client
        self.store = NodeStore()
        self.editor = GraphEditor(self.store, orphan_policy=orphan_policy)
        self.widget = widget or ChartWidget()
        self.on_not_found = on_not_found
        self.profile_id: str | None = None
        self.profile: dict[str, Any] = {}
        self.last_save_time: datetime | None = None
        self.loading = False
        self.saving = False
        self._load_generation = 0

    @classmethod
    def from_config(cls, cfg: EditorConfig | None = None, **kwargs) -> ChartSession:
        cfg = cfg or EditorConfig.from_env()
        client = ChartProfileClient(HttpTransport(cfg), api_prefix=cfg.api_prefix)
        kwargs.setdefault("orphan_policy", cfg.orphan_policy)
        return cls(client, **kwargs)

    @property
    def has_changes(self) -> bool:
        return self.store.dirty

    @property
    def is_loaded(self) -> bool:
        return self.profile_id is not None

    def load_chart(self, profile_id: str) -> bool:
        """Replace the store with the profile's nodes.

        Returns False when a newer load started while this one was in flight;
        its result is then discarded. On errors the current chart is kept.
        """
        if not profile_id:
            return False
        self._load_generation += 1
        generation = self._load_generation
        self.loading = True
        try:
            try:
                body = self.client.fetch(profile_id)
            except NotFoundError:
                if generation != self._load_generation:
                    return False
                logger.warning("Orgchart %s not found.", profile_id)
                if self.on_not_found is not None:
                    self.on_not_found(profile_id)
                raise

            if generation != self._load_generation:
                logger.info("Discarding stale load of orgchart %s", profile_id)
                return False

            nodes = (body.get("org_data") or {}).get("data") or []
            try:
                self.store.load(nodes)
            except (TypeError, ValueError, AttributeError) as e:
                msg = f"Malformed node list in orgchart {profile_id}: {e}"
                raise StorageError(msg) from e

            self.profile_id = str(profile_id)
            self.profile = {k: v for k, v in body.items() if k != "org_data"}
            self.widget.load(self.store.get_all())
            logger.info("Loaded orgchart %s (%d nodes)", profile_id, len(self.store))
            return True
        finally:
            if generation == self._load_generation:
                self.loading = False

    def serialize(self) -> list[dict[str, Any]]:
        return [
            node.to_dict()
            for node in self.store.get_all()
            if not node.id.startswith(INTERNAL_ID_PREFIX)
        ]

    def save_chart(self) -> datetime:
        """Write the store back, in order. Edits stay dirty if this raises."""
        if self.profile_id is None:
            msg = "No orgchart loaded"
            raise StorageError(msg)
        self.saving = True
        try:
            nodes = self.serialize()
            self.client.replace_nodes(self.profile_id, nodes)
        except StorageError:
            logger.exception("Saving orgchart %s failed", self.profile_id)
            raise
        finally:
            self.saving = False
        self.store.mark_clean()
        self.last_save_time = datetime.now(tz=UTC)
        logger.info("Saved orgchart %s (%d nodes)", self.profile_id, len(nodes))
        return self.last_save_time

    # Profile management ----------------------------------------------------
    def list_profiles(self, owner: str | None = None) -> list[dict[str, Any]]:
        return self.client.list_profiles(owner)

    def create_profile(
        self,
        name: str,
        *,
        description: str = "",
        source_department: str | None = None,
        allow_empty: bool = False,
    ) -> str:
        if not name.strip():
            msg = "Chart name is required"
            raise ValueError(msg)
        return self.client.create(
            name,
            description=description,
            source_department=source_department,
            allow_empty=allow_empty,
        )

    def delete_profile(self, profile_id: str) -> None:
        self.client.delete(profile_id)
        if self.profile_id == str(profile_id):
            self.close()

    def close(self) -> None:
        self._load_generation += 1
        self.profile_id = None
        self.profile = {}
        self.store.load([])
        self.widget.load([])
