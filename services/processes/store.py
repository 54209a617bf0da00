from __future__ import annotations

import functools
import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Iterable

from pydantic import TypeAdapter, ValidationError

from core.config import settings
from domain.models import (
    FormField,
    IssueSeverity,
    Persona,
    Process,
    ProcessDocument,
    ProcessStatus,
    utcnow,
)
from domain.value_objects import ValidationSnapshot
from services.observability.metrics import timing_metric
from services.persistence.kv import KeyValueStore
from services.persistence.writer import PersistenceWriter
from services.scoring.readiness import full_score, lightweight_score
from services.validation.rules import evaluate_rules
from services.workflow.checklist import REVIEW, complete_item, default_checklist
from services.workflow.graph import default_workflow_graph, is_accessible

logger = logging.getLogger(__name__)

_processes_adapter = TypeAdapter(list[Process])
_IMMUTABLE = {"id", "created_at"}


def _locked(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class ProcessStore:
    """
    Authoritative in-memory list of processes (most recent first) plus the id of
    the active one. Every mutation rewrites the whole list under one key.

    Unknown process/field/item ids are silent no-ops: the callers only ever
    reference ids they have observed themselves.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        writer: PersistenceWriter | None = None,
        key: str | None = None,
    ):
        self.kv = kv
        self.writer = writer or PersistenceWriter(kv)
        self.key = key or settings.STORAGE_KEY
        self._processes: list[Process] = []
        self._current_id: str | None = None
        # handlers run on a threadpool; every read-modify-write and its persist
        # happen under this lock so writes are submitted in mutation order
        self._lock = threading.RLock()

    # --- persistence ---

    @_locked
    def load(self) -> None:
        """Read the stored list; unreadable state means starting empty."""
        self._current_id = None
        try:
            blob = self.kv.get(self.key)
        except Exception:  # noqa: BLE001
            logger.exception("failed to read %s; starting empty", self.key)
            blob = None
        if not blob:
            self._processes = []
            return
        try:
            self._processes = _processes_adapter.validate_json(blob)
        except (ValidationError, ValueError) as e:
            logger.warning("stored processes unreadable, starting empty: %s", e)
            self._processes = []
        logger.info("loaded %d processes", len(self._processes))

    def _persist(self) -> None:
        payload = _processes_adapter.dump_json(self._processes)
        self.writer.submit(self.key, payload)

    # --- lookups ---

    @property
    def processes(self) -> list[Process]:
        return list(self._processes)

    def get(self, process_id: str) -> Process | None:
        return next((p for p in self._processes if p.id == process_id), None)

    @property
    def current(self) -> Process | None:
        if self._current_id is None:
            return None
        return self.get(self._current_id)

    def set_current(self, process_id: str | None) -> None:
        self._current_id = process_id

    def _index(self, process_id: str) -> int | None:
        for idx, p in enumerate(self._processes):
            if p.id == process_id:
                return idx
        return None

    def _replace(self, process_id: str, changes: dict[str, Any]) -> Process | None:
        idx = self._index(process_id)
        if idx is None:
            return None
        old = self._processes[idx]
        # shallow: a provided collection replaces the old one wholesale
        updated = Process.model_validate({**dict(old), **changes, "updated_at": utcnow()})
        self._processes[idx] = updated
        self._persist()
        return updated

    # --- entity store ---

    @_locked
    def create(self, type: str, title: str, description: str = "") -> Process:
        process = Process(
            type=type,
            title=title,
            description=description,
            checklist_items=default_checklist(),
            workflow_graph=default_workflow_graph(),
        )
        self._processes.insert(0, process)
        self._current_id = process.id
        self._persist()
        logger.info("created process %s (%s)", process.id, type)
        return process

    @_locked
    def update(self, process_id: str, changes: dict[str, Any]) -> Process | None:
        unknown = set(changes) - set(Process.model_fields)
        if unknown:
            raise ValueError(f"unknown process attributes: {sorted(unknown)}")
        frozen = set(changes) & _IMMUTABLE
        if frozen:
            raise ValueError(f"immutable process attributes: {sorted(frozen)}")
        return self._replace(process_id, changes)

    @_locked
    def delete(self, process_id: str) -> None:
        idx = self._index(process_id)
        if idx is None:
            return
        del self._processes[idx]
        if self._current_id == process_id:
            self._current_id = None
        self._persist()
        logger.info("deleted process %s", process_id)

    # --- fields & documents ---

    @_locked
    def add_fields(self, process_id: str, fields: Iterable[FormField]) -> list[FormField]:
        """Append fields whose id is new; existing ids win, even if content differs."""
        process = self.get(process_id)
        if process is None:
            return []
        seen = {f.id for f in process.fields}
        added: list[FormField] = []
        for f in fields:
            if f.id in seen:
                continue
            seen.add(f.id)
            added.append(f)
        self._replace(process_id, {"fields": [*process.fields, *added]})
        return added

    @_locked
    def add_document(self, process_id: str, document: ProcessDocument) -> None:
        process = self.get(process_id)
        if process is None:
            return
        self._replace(process_id, {"documents": [*process.documents, document]})

    @_locked
    def mark_document_parsed(
        self,
        process_id: str,
        document_id: str,
        extracted_data: dict[str, Any] | None = None,
        confidence: float | None = None,
    ) -> None:
        process = self.get(process_id)
        if process is None or process.document_by_id(document_id) is None:
            return
        documents = [
            d.model_copy(
                update={"parsed": True, "extracted_data": extracted_data, "confidence": confidence}
            )
            if d.id == document_id
            else d
            for d in process.documents
        ]
        self._replace(process_id, {"documents": documents})

    @_locked
    def update_field_value(self, process_id: str, field_id: str, value: str) -> None:
        """
        Set a value and re-score cheaply. Validation does not run here, so the
        stored issues (and the penalty drawn from them) may be stale.
        """
        process = self.get(process_id)
        if process is None or process.field_by_id(field_id) is None:
            return
        fields = [
            f.model_copy(update={"value": value, "validated": False}) if f.id == field_id else f
            for f in process.fields
        ]
        edited = process.model_copy(update={"fields": fields})
        self._replace(process_id, {"fields": fields, "readiness_score": lightweight_score(edited)})

    # --- validation ---

    @_locked
    def validate(self, process_id: str) -> Process | None:
        """Regenerate issues, risk flags and the full score together."""
        process = self.get(process_id)
        if process is None:
            return None
        with timing_metric("validate"):
            outcome = evaluate_rules(process)
            snapshot = ValidationSnapshot.from_findings(outcome.issues, outcome.risk_flags)
            score = full_score(process, snapshot)
        logger.info(
            "validated %s: %d errors, %d warnings, %d risk flags, score=%d",
            process_id,
            snapshot.error_count,
            snapshot.warning_count,
            len(outcome.risk_flags),
            score,
        )
        return self._replace(
            process_id,
            {
                "validation_issues": outcome.issues,
                "risk_flags": outcome.risk_flags,
                "readiness_score": score,
            },
        )

    # --- checklist & workflow ---

    @_locked
    def complete_checklist_item(self, process_id: str, item_id: str) -> None:
        process = self.get(process_id)
        if process is None:
            return
        self._replace(
            process_id, {"checklist_items": complete_item(process.checklist_items, item_id)}
        )

    @_locked
    def complete_workflow_node(self, process_id: str, node_id: str) -> bool:
        process = self.get(process_id)
        if process is None:
            return False
        node = process.node_by_id(node_id)
        if node is None or not is_accessible(process, node):
            return False
        graph = [
            n.model_copy(update={"completed": True}) if n.id == node_id else n
            for n in process.workflow_graph
        ]
        self._replace(process_id, {"workflow_graph": graph})
        return True

    # --- settings ---

    @_locked
    def set_persona(self, process_id: str, persona: Persona) -> None:
        self._replace(process_id, {"persona": persona})

    @_locked
    def set_data_expiry(
        self, process_id: str, enabled: bool, now: datetime | None = None
    ) -> None:
        days = settings.DATA_EXPIRY_DAYS
        if enabled:
            expiry = {
                "enabled": True,
                "expiry_date": (now or utcnow()) + timedelta(days=days),
                "auto_delete_after_days": days,
            }
        else:
            expiry = {"enabled": False, "expiry_date": None, "auto_delete_after_days": None}
        self._replace(process_id, {"data_expiry": expiry})

    @_locked
    def set_voice_enabled(self, process_id: str, enabled: bool) -> None:
        self._replace(process_id, {"voice_enabled": enabled})

    @_locked
    def mark_ready(self, process_id: str) -> bool:
        """Validate, then flip to ``ready`` only if no error issue remains."""
        process = self.validate(process_id)
        if process is None:
            return False
        if any(i.severity == IssueSeverity.ERROR for i in process.validation_issues):
            return False
        self._replace(
            process_id,
            {
                "status": ProcessStatus.READY,
                "checklist_items": complete_item(process.checklist_items, REVIEW),
            },
        )
        return True
