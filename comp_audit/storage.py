"""Persistent settings store for comp-audit (.comp-audit/settings.json).

A small key-value store. The only key in use is the exclusion list
(``ignored-sections-or-frames``), read when a session starts and written on
every explicit scan request.
"""

from __future__ import annotations

import json
import os
import shutil
import tempfile
from pathlib import Path

from .utils import log

IGNORED_KEY = "ignored-sections-or-frames"

SETTINGS_ENV = "COMP_AUDIT_SETTINGS"


def get_settings_path(project_dir: Path | None = None) -> Path:
    """Settings file path: $COMP_AUDIT_SETTINGS, else .comp-audit/settings.json under project_dir."""
    env_path = os.environ.get(SETTINGS_ENV)
    if env_path and project_dir is None:
        return Path(env_path)
    base = project_dir or Path.cwd()
    return base / ".comp-audit" / "settings.json"


def _read(p: Path) -> dict:
    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"settings root must be an object, got {type(data).__name__}")
    return data


class SettingsStore:
    """JSON-file backed key-value store with atomic writes."""

    def __init__(self, path: Path | None = None):
        self.path = path or get_settings_path()
        self._data: dict | None = None

    def _load(self) -> dict:
        if self._data is not None:
            return self._data
        p = self.path
        if not p.exists():
            self._data = {}
            return self._data

        try:
            self._data = _read(p)
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError, OSError) as e:
            backup = p.with_suffix(".json.bak")
            self._data = {}
            if backup.exists():
                try:
                    self._data = _read(backup)
                    log(f"  Settings file corrupted ({e}). Restored from backup.", "warn")
                    return self._data
                except (json.JSONDecodeError, UnicodeDecodeError, ValueError, OSError):
                    pass
            log(f"  Settings file corrupted ({e}). Starting fresh.", "warn")
        return self._data

    def get(self, key: str, default=None):
        return self._load().get(key, default)

    def set(self, key: str, value):
        """Store a value and write the file before returning."""
        data = dict(self._load())
        data[key] = value
        self._save(data)
        self._data = data

    def _save(self, data: dict):
        p = self.path
        p.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(data, indent=2) + "\n"

        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=str(p.parent), suffix=".tmp")
            try:
                os.write(fd, content.encode())
                os.fsync(fd)
            finally:
                os.close(fd)

            if p.exists():
                try:
                    shutil.copy2(str(p), str(p.with_suffix(".json.bak")))
                except OSError:
                    pass

            os.replace(tmp_path, str(p))
        except OSError:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
            p.write_text(content, encoding="utf-8")


def load_ignored(store: SettingsStore, default: list[str] | None = None) -> list[str]:
    """Stored exclusion list, falling back to ``default`` and then to []."""
    value = store.get(IGNORED_KEY)
    if value is None:
        return list(default or [])
    if not isinstance(value, list):
        log(f"  Ignoring malformed {IGNORED_KEY} setting: {value!r}", "warn")
        return list(default or [])
    return [str(v) for v in value]


def save_ignored(store: SettingsStore, names: list[str]):
    store.set(IGNORED_KEY, list(names))
