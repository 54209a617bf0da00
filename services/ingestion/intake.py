from __future__ import annotations

import logging
import re
from statistics import mean
from typing import Iterable

from core.config import settings
from domain.models import FieldType, FormField, ProcessDocument
from domain.value_objects import ExtractionResult, FieldDescriptor
from services.processes.store import ProcessStore
from services.workflow.checklist import DESCRIBE_SITUATION, UPLOAD_DOCUMENTS

logger = logging.getLogger(__name__)

_WS = re.compile(r"\s+")


def field_name(key: str) -> str:
    return _WS.sub("_", key.lower())


def fields_from_descriptors(descriptors: Iterable[FieldDescriptor]) -> list[FormField]:
    return [
        FormField(
            id=d.id,
            name=d.name,
            label=d.label,
            type=d.type,
            required=d.required,
            options=d.options,
        )
        for d in descriptors
    ]


def fields_from_extraction(
    document: ProcessDocument,
    result: ExtractionResult,
    min_confidence: float | None = None,
) -> list[FormField]:
    """Only entries strictly above the threshold become (optional, text) fields."""
    threshold = settings.EXTRACTION_MIN_CONFIDENCE if min_confidence is None else min_confidence
    accepted = [e for e in result.extracted_fields if e.confidence > threshold]
    return [
        FormField(
            id=f"extracted-{document.id}-{idx}",
            name=field_name(e.key),
            label=e.key,
            value=e.value,
            type=FieldType.TEXT,
            required=False,
            extracted_from=document.name,
            confidence=e.confidence,
        )
        for idx, e in enumerate(accepted)
    ]


def accept_generated_fields(
    store: ProcessStore, process_id: str, descriptors: Iterable[FieldDescriptor]
) -> list[FormField]:
    added = store.add_fields(process_id, fields_from_descriptors(descriptors))
    store.complete_checklist_item(process_id, DESCRIBE_SITUATION)
    logger.info("chat produced %d new fields for %s", len(added), process_id)
    return added


def accept_extraction(
    store: ProcessStore, process_id: str, document_id: str, result: ExtractionResult
) -> list[FormField]:
    """
    Merge an extraction result for one stored document. The upload checklist item
    is completed even when no entry clears the confidence threshold.
    """
    process = store.get(process_id)
    document = process.document_by_id(document_id) if process else None
    if document is None:
        return []

    fields = fields_from_extraction(document, result)
    added = store.add_fields(process_id, fields) if fields else []
    store.mark_document_parsed(
        process_id,
        document_id,
        extracted_data={
            "document_type": result.document_type,
            "summary": result.summary,
            "fields": [e.model_dump() for e in result.extracted_fields],
        },
        confidence=mean(f.confidence for f in fields) if fields else None,
    )
    store.complete_checklist_item(process_id, UPLOAD_DOCUMENTS)
    logger.info(
        "document %s: %d/%d extracted entries accepted",
        document_id,
        len(fields),
        len(result.extracted_fields),
    )
    return added
