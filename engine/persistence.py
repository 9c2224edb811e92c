"""
engine/persistence.py

Local durable key/value storage for collection snapshots.

Each collection lives under its own key as a JSON array. Reads hand back
the decoded value untouched; callers must re-validate it before use.
Writes never raise: a failed write is logged and the in-memory state
stays authoritative.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from utils import dump_json

log = logging.getLogger(__name__)


class JsonFileStorage:
    """Key/value storage backed by one ``<key>.json`` file per key.

    Args:
        directory: Folder holding the snapshot files. Created on first write.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(value)
        os.replace(tmp, path)

    def remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


class MemoryStorage:
    """In-process key/value storage with the same interface as JsonFileStorage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


class StorageSlot:
    """Persistence port for one collection: ``load()`` / ``save(snapshot)``.

    Args:
        storage: A JsonFileStorage or MemoryStorage.
        key: Storage key of the collection.
        indent: JSON indent used when writing.
    """

    def __init__(self, storage, key: str, indent: int = 2):
        self.storage = storage
        self.key = key
        self.indent = indent

    def load(self) -> Optional[Any]:
        """Return the decoded snapshot, or ``None`` if absent or unreadable."""
        try:
            text = self.storage.get(self.key)
        except (OSError, UnicodeDecodeError) as e:
            log.warning("Could not read snapshot %r: %s", self.key, e)
            return None
        if text is None:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            log.warning("Snapshot %r is not valid JSON: %s", self.key, e)
            return None

    def save(self, snapshot: Any) -> bool:
        """Write a full snapshot. Returns False if the write failed."""
        try:
            self.storage.set(self.key, dump_json(snapshot, self.indent))
        except (OSError, TypeError, ValueError) as e:
            log.warning("Could not write snapshot %r: %s", self.key, e)
            return False
        return True
