from __future__ import annotations

import logging
from collections.abc import Callable

from domain.models import ProcessDocument
from domain.value_objects import ExtractionResult
from services.ingestion.extractor import ExtractionError
from services.ingestion.intake import accept_extraction
from services.orchestration.types import IntakeState
from services.processes.store import ProcessStore

logger = logging.getLogger(__name__)

Extractor = Callable[[ProcessDocument], ExtractionResult]


def _push(state: IntakeState, msg: str) -> None:
    state.setdefault("steps", []).append(msg)


def make_extract(store: ProcessStore, extractor: Extractor) -> Callable[[IntakeState], IntakeState]:
    def extract(state: IntakeState) -> IntakeState:
        _push(state, "plan: load document and run extraction")
        process = store.get(state["process_id"])
        document = process.document_by_id(state["document_id"]) if process else None
        if document is None:
            state["status"] = "skipped"
            _push(state, "observe: document not found")
            return state
        try:
            result = extractor(document)
        except ExtractionError as e:
            # a failed parse yields no fields; the caller decides whether to retry
            logger.warning("extraction failed for %s: %s", document.id, e)
            state["status"] = "error"
            state["error"] = str(e)
            _push(state, f"observe: extraction failed ({e})")
            return state
        state["extraction"] = result.model_dump()
        state["status"] = "ok"
        _push(state, f"act: extracted {len(result.extracted_fields)} entries from {document.name}")
        return state

    return extract


def make_merge(store: ProcessStore) -> Callable[[IntakeState], IntakeState]:
    def merge(state: IntakeState) -> IntakeState:
        _push(state, "plan: merge confident entries into the form")
        result = ExtractionResult.model_validate(state.get("extraction") or {})
        added = accept_extraction(store, state["process_id"], state["document_id"], result)
        state["added_field_ids"] = [f.id for f in added]
        _push(state, f"observe: added {len(added)} fields")
        return state

    return merge
