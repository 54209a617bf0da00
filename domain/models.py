import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, List

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class ProcessStatus(str, Enum):
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    READY = "ready"
    SUBMITTED = "submitted"


class FieldType(str, Enum):
    TEXT = "text"
    DATE = "date"
    NUMBER = "number"
    SELECT = "select"
    MULTILINE = "multiline"


class IssueSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RiskCategory(str, Enum):
    ELIGIBILITY = "eligibility"
    POLICY = "policy"
    AI_CONFIDENCE = "ai_confidence"
    MISSING_DATA = "missing_data"


class RiskSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NodeType(str, Enum):
    QUESTION = "question"
    DOCUMENT = "document"
    FIELD = "field"
    VALIDATION = "validation"
    DECISION = "decision"


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    IS_FILLED = "is_filled"


class PersonaType(str, Enum):
    SELF = "self"
    PARENT = "parent"
    CAREGIVER = "caregiver"
    PROXY = "proxy"


class FormField(BaseModel):
    id: str
    name: str
    label: str
    value: str = ""
    type: FieldType = FieldType.TEXT
    required: bool = False
    validated: bool = False
    validation_message: Optional[str] = None
    options: Optional[List[str]] = None
    extracted_from: Optional[str] = None  # document name
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    trigger: Optional[str] = None
    explanation: Optional[str] = None

    def is_filled(self) -> bool:
        return bool(self.value.strip())


class ProcessDocument(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    uri: str  # file URI or data: URL
    mime_type: str = "application/octet-stream"
    uploaded_at: datetime = Field(default_factory=utcnow)
    parsed: bool = False
    extracted_data: Optional[dict[str, Any]] = None
    confidence: float | None = None
    risk_flag_ids: List[str] = []


class ValidationIssue(BaseModel):
    id: str
    field_id: Optional[str] = None
    severity: IssueSeverity
    message: str
    suggestion: Optional[str] = None
    rule_source: Optional[str] = None
    confidence: float | None = None
    explanation: Optional[str] = None


class RiskFlag(BaseModel):
    id: str
    category: RiskCategory
    severity: RiskSeverity
    message: str
    explanation: str
    ai_confidence: float | None = None


class NodeCondition(BaseModel):
    field: str  # FormField.name
    operator: ConditionOperator
    value: str = ""
    explanation: str = ""


class WorkflowNode(BaseModel):
    id: str
    type: NodeType
    label: str
    completed: bool = False
    required: bool = True
    depends_on: Optional[List[str]] = None
    conditions: Optional[List[NodeCondition]] = None
    metadata: dict[str, Any] = {}


class ChecklistItem(BaseModel):
    id: str
    title: str
    completed: bool = False
    required: bool = True


class Persona(BaseModel):
    type: PersonaType = PersonaType.SELF
    name: str = "Self"
    relationship: Optional[str] = None
    authorized: bool = True


class ImpactMetrics(BaseModel):
    estimated_time_saved_hours: float = 0
    error_reduction_percent: float = 0
    estimated_cost_saved: float = 0
    comparison_to_manual: str = "Calculating..."


class DataExpiry(BaseModel):
    enabled: bool = False
    expiry_date: Optional[datetime] = None
    auto_delete_after_days: Optional[int] = None


class Process(BaseModel):
    id: str = Field(default_factory=new_id)
    type: str
    title: str
    description: str = ""
    status: ProcessStatus = ProcessStatus.DRAFT
    readiness_score: int = Field(default=0, ge=0, le=100)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deadline: Optional[datetime] = None
    fields: List[FormField] = []
    documents: List[ProcessDocument] = []
    validation_issues: List[ValidationIssue] = []
    checklist_items: List[ChecklistItem] = []
    workflow_graph: List[WorkflowNode] = []
    persona: Persona = Field(default_factory=Persona)
    risk_flags: List[RiskFlag] = []
    impact_metrics: ImpactMetrics = Field(default_factory=ImpactMetrics)
    data_expiry: DataExpiry = Field(default_factory=DataExpiry)
    voice_enabled: bool = False

    # lookups by id are weak references: a miss returns None, never raises

    def field_by_id(self, field_id: str) -> FormField | None:
        return next((f for f in self.fields if f.id == field_id), None)

    def document_by_id(self, document_id: str) -> ProcessDocument | None:
        return next((d for d in self.documents if d.id == document_id), None)

    def node_by_id(self, node_id: str) -> WorkflowNode | None:
        return next((n for n in self.workflow_graph if n.id == node_id), None)

    def checklist_item_by_id(self, item_id: str) -> ChecklistItem | None:
        return next((c for c in self.checklist_items if c.id == item_id), None)
