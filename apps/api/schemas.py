from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

from domain.models import (
    ImpactMetrics,
    NodeCondition,
    Process,
    ProcessStatus,
    WorkflowNode,
)
from domain.value_objects import FieldDescriptor


class ProcessCreate(BaseModel):
    type: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str = ""


class ProcessPatch(BaseModel):
    type: str | None = None
    title: str | None = None
    description: str | None = None
    status: ProcessStatus | None = None
    readiness_score: int | None = Field(default=None, ge=0, le=100)  # manual override
    deadline: datetime | None = None
    impact_metrics: ImpactMetrics | None = None

    @model_validator(mode="after")
    def _only_deadline_clears(self) -> "ProcessPatch":
        # absent means unchanged; an explicit null may only clear the deadline
        nulled = sorted(
            k for k in self.model_fields_set if k != "deadline" and getattr(self, k) is None
        )
        if nulled:
            raise ValueError(f"attributes cannot be null: {nulled}")
        return self


class GeneratedFields(BaseModel):
    fields: list[FieldDescriptor]


class FieldValue(BaseModel):
    value: str


class Toggle(BaseModel):
    enabled: bool


class DocumentCreate(BaseModel):
    name: str = Field(min_length=1)
    uri: str = Field(min_length=1)
    mime_type: str = "application/octet-stream"


class AddedFields(BaseModel):
    added: list[str]


class ReadyResult(BaseModel):
    ready: bool
    process: Process


class NodeView(BaseModel):
    node: WorkflowNode
    accessible: bool
    dependency_labels: list[str]
    unmet_conditions: list[NodeCondition]


class WorkflowView(BaseModel):
    completion_ratio: float
    nodes: list[NodeView]


class IntakeRun(BaseModel):
    status: str
    steps: list[str] = []
    added_field_ids: list[str] = []
    error: str | None = None

    @classmethod
    def from_state(cls, state: dict[str, Any]) -> "IntakeRun":
        return cls(
            status=state.get("status", "error"),
            steps=state.get("steps", []),
            added_field_ids=state.get("added_field_ids", []),
            error=state.get("error"),
        )
