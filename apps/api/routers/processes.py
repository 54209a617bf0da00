from fastapi import APIRouter, Depends, HTTPException, status

from apps.api.deps import get_store, require_process
from apps.api.schemas import (
    AddedFields,
    FieldValue,
    GeneratedFields,
    ProcessCreate,
    ProcessPatch,
    ReadyResult,
    Toggle,
)
from domain.models import FormField, Persona, Process
from services.ingestion.intake import accept_generated_fields
from services.processes.store import ProcessStore

router = APIRouter(prefix="/processes", tags=["processes"])


@router.get("", response_model=list[Process])
def list_processes(store: ProcessStore = Depends(get_store)):
    return store.processes


@router.post("", response_model=Process, status_code=status.HTTP_201_CREATED)
def create_process(payload: ProcessCreate, store: ProcessStore = Depends(get_store)):
    return store.create(payload.type, payload.title, payload.description)


@router.get("/{process_id}", response_model=Process)
def get_process(process_id: str, store: ProcessStore = Depends(get_store)):
    return require_process(store, process_id)


@router.patch("/{process_id}", response_model=Process)
def patch_process(process_id: str, payload: ProcessPatch, store: ProcessStore = Depends(get_store)):
    require_process(store, process_id)
    changes = {k: getattr(payload, k) for k in payload.model_fields_set}
    return store.update(process_id, changes)


@router.delete("/{process_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_process(process_id: str, store: ProcessStore = Depends(get_store)):
    require_process(store, process_id)
    store.delete(process_id)


@router.post("/{process_id}/fields", response_model=AddedFields)
def add_fields(process_id: str, fields: list[FormField], store: ProcessStore = Depends(get_store)):
    require_process(store, process_id)
    added = store.add_fields(process_id, fields)
    return AddedFields(added=[f.id for f in added])


@router.post("/{process_id}/generated-fields", response_model=AddedFields)
def add_generated_fields(
    process_id: str, payload: GeneratedFields, store: ProcessStore = Depends(get_store)
):
    """Tool callback for the conversational agent."""
    require_process(store, process_id)
    added = accept_generated_fields(store, process_id, payload.fields)
    return AddedFields(added=[f.id for f in added])


@router.put("/{process_id}/fields/{field_id}", response_model=Process)
def update_field_value(
    process_id: str, field_id: str, payload: FieldValue, store: ProcessStore = Depends(get_store)
):
    if require_process(store, process_id).field_by_id(field_id) is None:
        raise HTTPException(status_code=404, detail="Field not found")
    store.update_field_value(process_id, field_id, payload.value)
    return store.get(process_id)


@router.post("/{process_id}/validate", response_model=Process)
def validate_process(process_id: str, store: ProcessStore = Depends(get_store)):
    require_process(store, process_id)
    return store.validate(process_id)


@router.post("/{process_id}/ready", response_model=ReadyResult)
def mark_ready(process_id: str, store: ProcessStore = Depends(get_store)):
    require_process(store, process_id)
    ready = store.mark_ready(process_id)
    return ReadyResult(ready=ready, process=store.get(process_id))


@router.put("/{process_id}/persona", response_model=Process)
def set_persona(process_id: str, persona: Persona, store: ProcessStore = Depends(get_store)):
    require_process(store, process_id)
    store.set_persona(process_id, persona)
    return store.get(process_id)


@router.put("/{process_id}/data-expiry", response_model=Process)
def set_data_expiry(process_id: str, payload: Toggle, store: ProcessStore = Depends(get_store)):
    require_process(store, process_id)
    store.set_data_expiry(process_id, payload.enabled)
    return store.get(process_id)


@router.put("/{process_id}/voice", response_model=Process)
def set_voice(process_id: str, payload: Toggle, store: ProcessStore = Depends(get_store)):
    require_process(store, process_id)
    store.set_voice_enabled(process_id, payload.enabled)
    return store.get(process_id)
