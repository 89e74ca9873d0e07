"""
Process configuration and persisted settings.

Config is read from the environment once, at startup:

    QUICK_TASK_ROOT       Document root; relative paths resolve against it
    QUICK_TASK_SETTINGS   Settings file (default ~/.cache/quick-task/settings.json)
    QUICK_TASK_DIALECT    Metadata dialect to write: "inline" or "bullet"
    API_ENABLED           Start the REST API alongside the MCP server (default true)
    API_PORT              REST API port (default 9410)
    LOG_LEVEL             Logging level name (default INFO)

SettingsStore persists per-document default tags as JSON.
"""

import json
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from quick_task.utils.formatting import DIALECTS, INLINE_DIALECT

log = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = Path.home() / ".cache" / "quick-task" / "settings.json"
DEFAULT_API_PORT = 9410


def _env_flag(raw: str) -> bool:
    return raw.strip().lower() in ("true", "1", "yes")


@dataclass
class Config:
    root: Optional[Path] = None
    settings_file: Path = DEFAULT_SETTINGS_FILE
    dialect: str = INLINE_DIALECT
    api_enabled: bool = True
    api_port: int = DEFAULT_API_PORT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build a Config from environment variables.

        Raises:
            ValueError: on an unknown dialect, a missing root directory or a
                non-numeric port
        """
        env = os.environ if environ is None else environ

        root = None
        root_raw = env.get("QUICK_TASK_ROOT", "")
        if root_raw:
            root = Path(root_raw).expanduser()
            if not root.is_dir():
                raise ValueError(f"QUICK_TASK_ROOT does not exist or is not a directory: {root}")

        dialect = env.get("QUICK_TASK_DIALECT", INLINE_DIALECT).strip().lower()
        if dialect not in DIALECTS:
            raise ValueError(f"QUICK_TASK_DIALECT must be one of {DIALECTS}, got '{dialect}'")

        settings_raw = env.get("QUICK_TASK_SETTINGS", "")
        return cls(
            root=root,
            settings_file=Path(settings_raw).expanduser() if settings_raw else DEFAULT_SETTINGS_FILE,
            dialect=dialect,
            api_enabled=_env_flag(env.get("API_ENABLED", "true")),
            api_port=int(env.get("API_PORT", str(DEFAULT_API_PORT))),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )


def new_settings() -> dict:
    return {"per_file_defaults": {}}


class SettingsStore:
    """
    JSON-backed user settings.

    Currently holds per-document default tags, keyed by the document path as
    the caller passes it.
    """

    def __init__(self, path: Path = DEFAULT_SETTINGS_FILE) -> None:
        self.path = path
        self._lock = threading.Lock()

    def load(self) -> dict:
        """Load settings, falling back to defaults on a missing or corrupt file."""
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return new_settings()
        except (OSError, ValueError):
            log.warning("Ignoring unreadable settings file %s", self.path, exc_info=True)
            return new_settings()

        if not isinstance(data, dict):
            log.warning("Ignoring malformed settings file %s", self.path)
            return new_settings()
        settings = new_settings()
        defaults = data.get("per_file_defaults")
        if isinstance(defaults, dict):
            settings["per_file_defaults"] = {
                str(k): [str(t) for t in v] for k, v in defaults.items() if isinstance(v, list)
            }
        return settings

    def save(self, settings: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(settings, indent=2), encoding="utf-8")

    def all_default_tags(self) -> Dict[str, List[str]]:
        return self.load()["per_file_defaults"]

    def get_default_tags(self, doc_path: str) -> List[str]:
        return list(self.load()["per_file_defaults"].get(doc_path, []))

    def set_default_tags(self, doc_path: str, tags: List[str]) -> List[str]:
        """Store default tags for ``doc_path``; an empty list removes the entry."""
        cleaned = [t for t in (tag.strip() for tag in tags) if t]
        with self._lock:
            settings = self.load()
            if cleaned:
                settings["per_file_defaults"][doc_path] = cleaned
            else:
                settings["per_file_defaults"].pop(doc_path, None)
            self.save(settings)
        log.info("Default tags for %s: %s", doc_path, " ".join(cleaned) or "(none)")
        return cleaned
