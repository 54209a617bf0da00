from __future__ import annotations

from collections.abc import Callable

from langgraph.graph import END, START, StateGraph

from services.orchestration.nodes import Extractor, make_extract, make_merge
from services.orchestration.types import IntakeState
from services.processes.store import ProcessStore


def _after_extract(state: IntakeState) -> str:
    return "merge" if state.get("status") == "ok" else END


def build_intake_graph(
    store: ProcessStore, extractor: Extractor
) -> Callable[[str, str], IntakeState]:
    """
    Document intake:
        START -> extract -> merge -> END
    A failed or skipped extraction stops after `extract`.
    """
    builder = StateGraph(IntakeState)
    builder.add_node("extract", make_extract(store, extractor))
    builder.add_node("merge", make_merge(store))

    builder.add_edge(START, "extract")
    builder.add_conditional_edges("extract", _after_extract, {"merge": "merge", END: END})
    builder.add_edge("merge", END)

    graph = builder.compile()

    def run(process_id: str, document_id: str) -> IntakeState:
        initial: IntakeState = {"process_id": process_id, "document_id": document_id, "steps": []}
        result: IntakeState = graph.invoke(initial)  # sync API
        return result

    return run
