from fastapi import APIRouter, Depends, HTTPException

from apps.api.deps import get_store, require_process
from apps.api.schemas import NodeView, WorkflowView
from domain.models import Process
from services.processes.store import ProcessStore
from services.workflow.graph import (
    completion_ratio,
    dependency_labels,
    is_accessible,
    unmet_conditions,
)

router = APIRouter(prefix="/processes/{process_id}", tags=["workflow"])


@router.get("/workflow", response_model=WorkflowView)
def workflow(process_id: str, store: ProcessStore = Depends(get_store)):
    process = require_process(store, process_id)
    return WorkflowView(
        completion_ratio=completion_ratio(process),
        nodes=[
            NodeView(
                node=n,
                accessible=is_accessible(process, n),
                dependency_labels=dependency_labels(process, n),
                unmet_conditions=unmet_conditions(process, n),
            )
            for n in process.workflow_graph
        ],
    )


@router.post("/workflow/{node_id}/complete", response_model=Process)
def complete_node(process_id: str, node_id: str, store: ProcessStore = Depends(get_store)):
    process = require_process(store, process_id)
    if process.node_by_id(node_id) is None:
        raise HTTPException(404, "node not found")
    if not store.complete_workflow_node(process_id, node_id):
        raise HTTPException(409, "node is locked by incomplete dependencies")
    return store.get(process_id)


@router.post("/checklist/{item_id}/complete", response_model=Process)
def complete_checklist_item(process_id: str, item_id: str, store: ProcessStore = Depends(get_store)):
    process = require_process(store, process_id)
    if process.checklist_item_by_id(item_id) is None:
        raise HTTPException(404, "checklist item not found")
    store.complete_checklist_item(process_id, item_id)
    return store.get(process_id)
