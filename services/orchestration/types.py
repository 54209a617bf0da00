from __future__ import annotations

from typing import Any, Literal, TypedDict

Status = Literal["ok", "skipped", "error"]


class IntakeState(TypedDict, total=False):
    process_id: str
    document_id: str
    steps: list[str]  # ReAct-style diary of actions
    extraction: dict[str, Any]  # ExtractionResult as a dict
    added_field_ids: list[str]
    error: str
    status: Status
