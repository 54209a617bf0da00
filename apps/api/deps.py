from functools import lru_cache

from fastapi import HTTPException

from core.config import settings
from domain.models import Process
from services.ingestion.extractor import DocumentExtractor
from services.orchestration.nodes import Extractor
from services.persistence.writer import PersistenceWriter, build_key_value_store
from services.processes.store import ProcessStore


def get_settings():
    """Provides application settings/config globally."""
    return settings


@lru_cache
def get_store() -> ProcessStore:
    """One store per API process, loaded from the configured backend at first use."""
    kv = build_key_value_store(settings)
    store = ProcessStore(kv, PersistenceWriter(kv, background=settings.PERSIST_IN_BACKGROUND))
    store.load()
    return store


def get_extractor() -> Extractor:
    return DocumentExtractor()


def require_process(store: ProcessStore, process_id: str) -> Process:
    """The store treats unknown ids as no-ops; the HTTP surface reports them."""
    process = store.get(process_id)
    if process is None:
        raise HTTPException(status_code=404, detail="Process not found")
    return process
