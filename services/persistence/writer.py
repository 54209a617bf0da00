from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from core.config import Settings, settings as default_settings
from services.persistence.kv import FileKeyValueStore, InMemoryKeyValueStore, KeyValueStore

logger = logging.getLogger(__name__)


class PersistenceWriter:
    """
    Best-effort writes of whole blobs. In background mode a single worker thread
    keeps writes in submission order; callers never wait and never see failures.
    """

    def __init__(self, kv: KeyValueStore, background: bool = False):
        self.kv = kv
        self._executor = (
            ThreadPoolExecutor(max_workers=1, thread_name_prefix="persist") if background else None
        )
        self._pending: list[Future] = []

    def _write(self, key: str, payload: bytes) -> None:
        try:
            self.kv.set(key, payload)
        except Exception:  # noqa: BLE001
            logger.exception("failed to persist %s (%d bytes)", key, len(payload))

    def submit(self, key: str, payload: bytes) -> None:
        if self._executor is None:
            self._write(key, payload)
            return
        self._pending = [f for f in self._pending if not f.done()]
        self._pending.append(self._executor.submit(self._write, key, payload))

    def flush(self) -> None:
        for f in list(self._pending):
            f.result()
        self._pending = []

    def close(self) -> None:
        self.flush()
        if self._executor is not None:
            self._executor.shutdown(wait=True)


def build_key_value_store(cfg: Settings = default_settings) -> KeyValueStore:
    backend = cfg.STORE_BACKEND.lower()
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "mongo":
        from services.persistence.mongo import MongoKeyValueStore

        return MongoKeyValueStore()
    if backend == "file":
        return FileKeyValueStore(cfg.STORE_PATH)
    raise ValueError(f"unknown STORE_BACKEND: {cfg.STORE_BACKEND}")
