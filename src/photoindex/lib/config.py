"""JSON configuration.

Example config.json:
{
    "database": "sqlite:///photoindex.db",
    "originals_path": "/photos/originals",
    "read_only": false,
    "features": {"delete": true},
    "login_delay_step": 5,
    "login_delay_max": 60,
    "log_level": "INFO"
}
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

log = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "config.json"


@dataclass
class Settings:
    database: str = "sqlite:///photoindex.db"
    originals_path: str = "originals"
    read_only: bool = False
    feature_delete: bool = True
    login_delay_step: float = 5.0
    login_delay_max: Optional[float] = 60.0
    log_level: str = "INFO"

    def deletion_allowed(self) -> bool:
        """Permanent deletion needs the feature switched on and a writable store."""
        return self.feature_delete and not self.read_only

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        out = cls()
        if not isinstance(data, dict):
            return out
        if data.get("database"):
            out.database = str(data["database"])
        if data.get("originals_path"):
            out.originals_path = str(data["originals_path"])
        out.read_only = bool(data.get("read_only", out.read_only))
        features = data.get("features") or {}
        if isinstance(features, dict):
            out.feature_delete = bool(features.get("delete", out.feature_delete))
        try:
            out.login_delay_step = float(data.get("login_delay_step", out.login_delay_step))
        except (TypeError, ValueError):
            log.warning("config: ignoring invalid login_delay_step %r", data.get("login_delay_step"))
        if "login_delay_max" in data:
            raw = data["login_delay_max"]
            try:
                out.login_delay_max = None if raw is None else float(raw)
            except (TypeError, ValueError):
                log.warning("config: ignoring invalid login_delay_max %r", raw)
        if data.get("log_level"):
            out.log_level = str(data["log_level"]).upper()
        return out


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from a JSON file; a missing or unreadable file yields defaults."""
    p = Path(path or DEFAULT_CONFIG_NAME)
    if not p.exists():
        log.debug("config: %s not found, using defaults", p)
        return Settings()
    try:
        with p.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as exc:
        log.error("config: failed to read %s: %s", p, exc)
        return Settings()
    log.info("config: loaded %s", p)
    return Settings.from_dict(data)
