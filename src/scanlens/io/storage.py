"""Key/value persistence for panel state.

JsonFileStorage keeps every key in one JSON file at
XDG_CONFIG_HOME/scanlens/panel.json. MemoryStorage is the in-process
fallback and the test double.

This module is a STABLE BOUNDARY.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

JsonValue = object


class StorageUnavailable(Exception):
    """The backing store cannot be read or written."""


class PersistenceAdapter(Protocol):
    def get(self, key: str) -> JsonValue | None: ...

    def set(self, key: str, value: JsonValue) -> None: ...

    def remove(self, key: str) -> None: ...


def get_config_path() -> Path:
    """Return path to the panel state file.

    Uses XDG_CONFIG_HOME (default ~/.config) / scanlens / panel.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "scanlens" / "panel.json"


class MemoryStorage:
    """Dict-backed adapter. Values are JSON round-tripped on write."""

    def __init__(self, initial: dict[str, JsonValue] | None = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> JsonValue | None:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def set(self, key: str, value: JsonValue) -> None:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise StorageUnavailable(f"value for {key!r} is not JSON serialisable") from exc

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStorage:
    """Adapter over a single JSON file, rewritten atomically on every change."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else get_config_path()

    def _load(self) -> dict:
        # [LAW:dataflow-not-control-flow] Missing or corrupt file reads as "no data".
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (FileNotFoundError, UnicodeDecodeError, json.JSONDecodeError):
            return {}
        except OSError as exc:
            raise StorageUnavailable(str(exc)) from exc
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict) -> None:
        """Atomic write: temp file in the same directory, then rename."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        except OSError as exc:
            raise StorageUnavailable(str(exc)) from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise StorageUnavailable(str(exc)) from exc

    def get(self, key: str) -> JsonValue | None:
        return self._load().get(key)

    def set(self, key: str, value: JsonValue) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)
