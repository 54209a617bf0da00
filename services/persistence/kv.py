from __future__ import annotations

import re
import threading
from pathlib import Path
from typing import Protocol

SAFE_NAME = re.compile(r"[^A-Za-z0-9._-]")


class KeyValueStore(Protocol):
    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self, initial: dict[str, bytes] | None = None):
        self._data: dict[str, bytes] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = value


class FileKeyValueStore:
    """One file per key under ``root``; writes go through a temp file and an atomic move."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{SAFE_NAME.sub('_', key)}.json"

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, value: bytes) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        dest = self._path(key)
        tmp = dest.with_suffix(dest.suffix + ".part")
        tmp.write_bytes(value)
        tmp.replace(dest)  # atomic move
