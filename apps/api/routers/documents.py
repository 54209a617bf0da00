from fastapi import APIRouter, Depends, HTTPException, status

from apps.api.deps import get_extractor, get_store, require_process
from apps.api.schemas import AddedFields, DocumentCreate, IntakeRun
from core.config import settings
from domain.models import ProcessDocument
from domain.value_objects import ExtractionResult
from services.ingestion.intake import accept_extraction
from services.orchestration.graphs import build_intake_graph
from services.orchestration.nodes import Extractor
from services.processes.store import ProcessStore

router = APIRouter(prefix="/processes/{process_id}/documents", tags=["documents"])


@router.post("", response_model=ProcessDocument, status_code=status.HTTP_201_CREATED)
def add_document(process_id: str, payload: DocumentCreate, store: ProcessStore = Depends(get_store)):
    require_process(store, process_id)
    if payload.mime_type not in settings.ALLOWED_MIME:
        raise HTTPException(400, f"unsupported content-type: {payload.mime_type}")
    document = ProcessDocument(name=payload.name, uri=payload.uri, mime_type=payload.mime_type)
    store.add_document(process_id, document)
    return document


@router.post("/{document_id}/extraction", response_model=AddedFields)
def submit_extraction(
    process_id: str,
    document_id: str,
    result: ExtractionResult,
    store: ProcessStore = Depends(get_store),
):
    """Result pushed by an external extraction service."""
    if require_process(store, process_id).document_by_id(document_id) is None:
        raise HTTPException(404, "document not found")
    added = accept_extraction(store, process_id, document_id, result)
    return AddedFields(added=[f.id for f in added])


@router.post("/{document_id}/parse", response_model=IntakeRun)
def parse_document(
    process_id: str,
    document_id: str,
    store: ProcessStore = Depends(get_store),
    extractor: Extractor = Depends(get_extractor),
):
    if require_process(store, process_id).document_by_id(document_id) is None:
        raise HTTPException(404, "document not found")
    run = build_intake_graph(store, extractor)
    return IntakeRun.from_state(run(process_id, document_id))
