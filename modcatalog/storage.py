"""
Durable local storage and the download override ledger.

``LocalStorage`` is a small key/value store persisted as one JSON object
in a file, mirroring the browser's ``localStorage``: keys and values are
strings. The ``DownloadLedger`` keeps, per mod id, the highest download
count shown locally, so a stale or reset value from the catalogue store
never makes a counter go backwards on screen.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, List, Optional

from .config import DOWNLOAD_STORAGE_KEY
from .catalog.schemas import Mod
from .exceptions import StorageError

logger = logging.getLogger(__name__)


class LocalStorage:
    """String key/value storage backed by a JSON file.

    Every call reads or writes the file. Access is serialised with a
    ``threading.Lock`` because the web service runs handlers in a thread
    pool.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not contain a JSON object")
        return {str(k): str(v) for k, v in data.items()}

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            try:
                data = self._read_all()
            except StorageError as exc:
                logger.warning("Discarding unreadable storage file: %s", exc)
                data = {}
            data[key] = value
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with tmp_path.open("w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except OSError as exc:
                tmp_path.unlink(missing_ok=True)
                raise StorageError(f"Cannot write {self.path}: {exc}") from exc


class DownloadLedger:
    """Highest download count seen locally for each mod.

    Nothing is written to storage until ``load()`` has run, so a ledger
    that has not been restored yet can never overwrite stored counts with
    an empty mapping. Storage failures are logged and otherwise ignored:
    the worst outcome is that counts fall back to the store values after a
    restart.
    """

    def __init__(self, storage: Optional[LocalStorage], key: str = DOWNLOAD_STORAGE_KEY):
        self.storage = storage
        self.key = key
        self.loaded = False
        self._entries: Dict[str, int] = {}

    @property
    def entries(self) -> Dict[str, int]:
        return dict(self._entries)

    def get(self, mod_id: str) -> int:
        return self._entries.get(mod_id, 0)

    def load(self) -> None:
        try:
            if self.storage is not None:
                raw = self.storage.get_item(self.key)
                if raw:
                    self._entries = _parse_entries(json.loads(raw))
        except (StorageError, ValueError) as exc:
            logger.warning("Failed to hydrate download counts: %s", exc)
        finally:
            self.loaded = True

    def persist(self) -> None:
        if not self.loaded or self.storage is None:
            return
        try:
            self.storage.set_item(self.key, json.dumps(self._entries))
        except StorageError as exc:
            logger.warning("Failed to persist download counts: %s", exc)

    def record(self, mod_id: str, count: int) -> int:
        """Merge ``count`` for ``mod_id`` and persist; return the ledger value."""
        self._entries[mod_id] = max(self._entries.get(mod_id, 0), count)
        self.persist()
        return self._entries[mod_id]

    def apply(self, mods: List[Mod]) -> List[Mod]:
        """Return ``mods`` with each count raised to its ledger value."""
        merged: List[Mod] = []
        for mod in mods:
            override = self._entries.get(mod.id, 0)
            if override > mod.downloads:
                mod = mod.model_copy(update={"downloads": override})
            merged.append(mod)
        return merged


def _parse_entries(data) -> Dict[str, int]:
    if not isinstance(data, dict):
        raise ValueError("download ledger is not a JSON object")
    entries: Dict[str, int] = {}
    for mod_id, value in data.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if value < 0:
            continue
        entries[str(mod_id)] = int(value)
    return entries
