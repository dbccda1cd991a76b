from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class EditorConfig:
    base_url: str = "http://localhost:8000"
    api_prefix: str = "/api/v1"
    token: str | None = None
    timeout: float = 15.0
    orphan_policy: str = "leave"

    @classmethod
    def from_env(cls) -> EditorConfig:
        """Build a config from ``ORGCHART_*`` environment variables."""
        return cls(
            base_url=os.environ.get("ORGCHART_API_URL", cls.base_url),
            api_prefix=os.environ.get("ORGCHART_API_PREFIX", cls.api_prefix),
            token=os.environ.get("ORGCHART_API_TOKEN") or None,
            timeout=float(os.environ.get("ORGCHART_API_TIMEOUT", "15")),
            orphan_policy=os.environ.get("ORGCHART_ORPHAN_POLICY", "leave"),
        )
